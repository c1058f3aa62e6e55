from pathlib import Path

from cargo_remote import load_config
from cargo_remote.config import build_settings
from cargo_remote.config.loader import config_files
from cargo_remote.config.schema import WHITELISTED_ENV_VARS


def _xdg(tmp_path: Path, body: str) -> dict:
    home = tmp_path / "xdg"
    cfg = home / "cargo-remote" / "cargo-remote.toml"
    cfg.parent.mkdir(parents=True)
    cfg.write_text(body)
    return {"XDG_CONFIG_HOME": str(home), "XDG_CONFIG_DIRS": str(tmp_path / "none")}


def test_project_file_wins_over_user_file(tmp_path: Path):
    """Verify the project-local file takes precedence key by key."""
    env = _xdg(tmp_path, 'remote = "user-host"\nbuild_root = "/srv/builds"\n')
    project = tmp_path / "proj"
    project.mkdir()
    (project / ".cargo-remote.toml").write_text('remote = "project-host"\n')

    cfg = load_config(project, env=env)

    assert cfg.remote == "project-host"
    assert cfg.build_root == "/srv/builds"


def test_explicit_file_wins_over_everything(tmp_path: Path):
    """Verify --config-file outranks project and user files."""
    env = _xdg(tmp_path, 'remote = "user-host"\n')
    project = tmp_path / "proj"
    project.mkdir()
    (project / ".cargo-remote.toml").write_text('remote = "project-host"\n')
    explicit = tmp_path / "explicit.toml"
    explicit.write_text('remote = "explicit-host"\ntransfer_hidden = true\n')

    cfg = load_config(project, config_path=explicit, env=env)

    assert cfg.remote == "explicit-host"
    assert cfg.transfer_hidden is True


def test_xdg_config_dirs_are_searched(tmp_path: Path):
    """Verify a system-wide XDG directory is used when the user dir is empty."""
    system = tmp_path / "etc"
    (system / "cargo-remote").mkdir(parents=True)
    (system / "cargo-remote" / "cargo-remote.toml").write_text('remote = "sys"\n')
    env = {"XDG_CONFIG_HOME": str(tmp_path / "empty"), "XDG_CONFIG_DIRS": str(system)}

    assert config_files(None, env=env) == [system / "cargo-remote" / "cargo-remote.toml"]
    assert load_config(env=env).remote == "sys"


def test_invalid_files_are_skipped(tmp_path: Path):
    """Verify broken TOML and invalid values are ignored with a warning."""
    env = _xdg(tmp_path, 'remote = "fallback"\n')
    project = tmp_path / "proj"
    project.mkdir()
    (project / ".cargo-remote.toml").write_text("remote = [")

    assert load_config(project, env=env).remote == "fallback"

    (project / ".cargo-remote.toml").write_text('transfer_hidden = "sometimes"\n')
    assert load_config(project, env=env).remote == "fallback"


def test_forward_env_is_merged(tmp_path: Path):
    """Verify forward_env lists from every file are combined."""
    env = _xdg(tmp_path, 'forward_env = ["CC", "RUSTFLAGS"]\n')
    project = tmp_path / "proj"
    project.mkdir()
    (project / ".cargo-remote.toml").write_text('forward_env = ["RUSTFLAGS", "SQLX_OFFLINE"]\n')

    assert load_config(project, env=env).forward_env == ["RUSTFLAGS", "SQLX_OFFLINE", "CC"]


def test_build_settings_cli_overrides(tmp_path: Path):
    """Verify CLI values win and the whitelist is extended, not replaced."""
    env = _xdg(tmp_path, 'remote = "cfg-host"\nignore_patches = true\nforward_env = ["CC"]\n')
    cfg = load_config(None, env=env)

    settings = build_settings(
        cfg,
        remote="cli-host",
        manifest_path=Path("Cargo.toml"),
        command=["build", "--release"],
    )

    assert settings is not None
    assert settings.remote == "cli-host"
    assert settings.ignore_patches is True
    assert settings.build_root == "~/remote-builds"
    assert settings.forward_env == [*WHITELISTED_ENV_VARS, "CC"]
    assert settings.remote_project_dir("app") == "~/remote-builds/app"


def test_build_settings_without_remote(tmp_path: Path):
    """Verify a missing host yields None so the CLI can fail."""
    env = {"XDG_CONFIG_HOME": str(tmp_path), "XDG_CONFIG_DIRS": str(tmp_path)}
    cfg = load_config(None, env=env)
    assert build_settings(cfg, remote=None, manifest_path=Path("Cargo.toml"), command=["check"]) is None
