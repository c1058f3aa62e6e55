"""
TOML configuration loader.

Config files are stacked; for each key the first file that sets it wins:

1. An explicit path argument (``--config-file`` on the CLI).
2. ``<project>/.cargo-remote.toml`` – project-local settings.
3. ``$XDG_CONFIG_HOME/cargo-remote/cargo-remote.toml``, or the first
   ``cargo-remote/cargo-remote.toml`` found in ``$XDG_CONFIG_DIRS``.

Command-line flags sit above all of them and are applied by
:func:`build_settings`.  A file that cannot be read or validated is skipped
with a warning; configuration problems never abort the build on their own.
"""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Iterable, List, Mapping, Optional

import structlog
from pydantic import ValidationError

from .schema import DEFAULT_BUILD_ROOT, WHITELISTED_ENV_VARS, BuildSettings, RemoteConfig

log = structlog.get_logger()

PROJECT_CONFIG_NAME = ".cargo-remote.toml"
USER_CONFIG_NAME = "cargo-remote.toml"
XDG_PREFIX = "cargo-remote"


# --------------------------------------------------------------------------- #
# Helper functions                                                            #
# --------------------------------------------------------------------------- #
def _xdg_config_file(env: Mapping[str, str]) -> Optional[Path]:
    """Return the first user-level config file that exists, if any."""
    home = env.get("XDG_CONFIG_HOME") or str(Path.home() / ".config")
    dirs = [home] + (env.get("XDG_CONFIG_DIRS") or "/etc/xdg").split(os.pathsep)
    for base in dirs:
        if not base:
            continue
        candidate = Path(base).expanduser() / XDG_PREFIX / USER_CONFIG_NAME
        if candidate.is_file():
            return candidate
    return None


def config_files(
    project_dir: Optional[Path] = None,
    *,
    explicit: Optional[Path] = None,
    env: Optional[Mapping[str, str]] = None,
) -> List[Path]:
    """Return existing config files in precedence order."""
    env = os.environ if env is None else env
    candidates: List[Optional[Path]] = [
        explicit,
        project_dir / PROJECT_CONFIG_NAME if project_dir is not None else None,
        _xdg_config_file(env),
    ]
    return [p for p in candidates if p is not None and p.is_file()]


def _load_file(path: Path) -> Optional[RemoteConfig]:
    """Parse *path*; return ``None`` and warn when it is unusable."""
    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
        return RemoteConfig(**data)
    except (OSError, UnicodeDecodeError, tomllib.TOMLDecodeError, ValidationError) as exc:
        log.warning("config.unreadable", path=str(path), error=str(exc))
        return None


def _merge(configs: Iterable[RemoteConfig]) -> RemoteConfig:
    merged: dict = {}
    forward: List[str] = []
    for cfg in configs:
        for key, value in cfg.model_dump(exclude={"forward_env"}).items():
            if value is not None and merged.get(key) is None:
                merged[key] = value
        forward.extend(v for v in cfg.forward_env if v not in forward)
    return RemoteConfig(**merged, forward_env=forward)


# --------------------------------------------------------------------------- #
# Public API                                                                  #
# --------------------------------------------------------------------------- #
def load_config(
    project_dir: Optional[str | Path] = None,
    *,
    config_path: Optional[str | Path] = None,
    env: Optional[Mapping[str, str]] = None,
) -> RemoteConfig:
    """Return the merged :class:`RemoteConfig` for *project_dir*.

    Args:
        project_dir: Local project root; enables the project-local file.
        config_path: Explicit config file with the highest file precedence.
        env: Environment used for XDG lookups.  Defaults to ``os.environ``.

    Returns:
        Merged configuration.  Empty when no file is found.
    """
    project_dir = Path(project_dir).expanduser().resolve() if project_dir else None
    explicit = Path(config_path).expanduser().resolve() if config_path else None

    files = config_files(project_dir, explicit=explicit, env=env)
    log.debug("config.files", files=[str(p) for p in files])
    loaded = [cfg for cfg in (_load_file(p) for p in files) if cfg is not None]
    return _merge(loaded)


def build_settings(
    config: RemoteConfig,
    *,
    remote: Optional[str],
    manifest_path: Path,
    command: Iterable[str],
    build_root: Optional[str] = None,
    build_env: Iterable[str] = (),
    copy_back: Optional[str] = None,
    copy_lock: bool = True,
    transfer_hidden: bool = False,
    ignore_patches: bool = False,
    dry_run: bool = False,
) -> Optional[BuildSettings]:
    """Overlay command-line values on *config*.

    Boolean flags can only switch a feature on; a config file may switch it
    on as well.

    Returns:
        The merged settings, or ``None`` when no remote host is known.
    """
    host = remote or config.remote
    if not host:
        return None

    forward = list(WHITELISTED_ENV_VARS)
    forward.extend(v for v in config.forward_env if v not in forward)

    return BuildSettings(
        remote=host,
        manifest_path=manifest_path,
        command=list(command),
        build_root=build_root or config.build_root or DEFAULT_BUILD_ROOT,
        build_env=list(build_env),
        forward_env=forward,
        copy_back=copy_back,
        copy_lock=copy_lock,
        transfer_hidden=transfer_hidden or bool(config.transfer_hidden),
        ignore_patches=ignore_patches or bool(config.ignore_patches),
        dry_run=dry_run,
    )


__all__ = ["PROJECT_CONFIG_NAME", "config_files", "load_config", "build_settings"]
