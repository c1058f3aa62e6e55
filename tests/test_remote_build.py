from pathlib import Path

import pytest

from cargo_remote.config.schema import BuildSettings
from cargo_remote.engines.base import TransferEngine
from cargo_remote.errors import LockCopyError, PrimaryManifestError, TransferError
from cargo_remote.pipelines import run_remote_build
from cargo_remote.utils.cargo import ProjectInfo


class RecordingEngine(TransferEngine):
    """Transfer engine double recording every call in order."""

    def __init__(self, fail_pull=False):
        self.calls = []
        self.fail_pull = fail_pull

    def push(self, local, host, remote_path, *, hidden=False):
        self.calls.append(("push", local, remote_path, hidden))

    def pull(self, host, remote_path, local):
        self.calls.append(("pull", remote_path, local))
        if self.fail_pull:
            raise TransferError("permission denied")


class FakeShell:
    def __init__(self, status=0):
        self.status = status
        self.commands = []

    def run(self, host, command):
        self.commands.append((host, command))
        return self.status


def _settings(**overrides):
    values = dict(remote="builder", manifest_path=Path("Cargo.toml"), command=["build"])
    values.update(overrides)
    return BuildSettings(**values)


@pytest.fixture()
def info(project):
    return ProjectInfo(root=project, name="app")


def test_build_order_and_patch_remap(root, project, write_crate, info):
    """Verify project push, patch push, ssh run and lock copy happen in order."""
    write_crate(root / "foo-fork")
    write_crate(project, '[patch.crates-io]\nfoo = { path = "../foo-fork" }\n')
    engine, shell = RecordingEngine(), FakeShell(status=0)

    status = run_remote_build(
        _settings(command=["build", "--release"]),
        info,
        transfer=engine,
        shell=shell,
        env={"RUST_BACKTRACE": "full"},
    )

    assert status == 0
    kinds = [c[0] for c in engine.calls]
    assert kinds == ["push", "push", "pull"]
    assert engine.calls[0][1:3] == (project, "~/remote-builds/app")
    assert engine.calls[1][1] == root / "foo-fork"
    assert engine.calls[1][2].startswith("~/remote-builds/.patches/")
    assert engine.calls[2][1:] == ("~/remote-builds/app/Cargo.lock", project / "Cargo.lock")

    ((host, command),) = shell.commands
    assert host == "builder"
    assert command.startswith("cd ~/remote-builds/app; eval $(direnv export bash); ")
    assert "RUST_BACKTRACE=full cargo --config 'patch.crates-io.foo.path=\"../.patches/" in command
    assert command.endswith(" build --release")


def test_remote_failure_status_is_returned(project, write_crate, info):
    """Verify a failed remote cargo run still copies the lock and returns its status."""
    write_crate(project)
    engine = RecordingEngine()

    status = run_remote_build(_settings(), info, transfer=engine, shell=FakeShell(101), env={})

    assert status == 101
    assert engine.calls[-1][0] == "pull"


def test_copy_back_and_no_lock(project, write_crate, info):
    """Verify -c PATH pulls target/PATH and --no-copy-lock skips Cargo.lock."""
    write_crate(project)
    engine = RecordingEngine()

    run_remote_build(
        _settings(copy_back="release/app", copy_lock=False),
        info,
        transfer=engine,
        shell=FakeShell(),
        env={},
    )

    assert engine.calls[1:] == [
        ("pull", "~/remote-builds/app/target/release/app", project / "target" / "release" / "app")
    ]


def test_lock_copy_failure_exit_code(project, write_crate, info):
    """Verify a failed Cargo.lock transfer raises LockCopyError (exit 7)."""
    write_crate(project)
    with pytest.raises(LockCopyError) as err:
        run_remote_build(
            _settings(), info, transfer=RecordingEngine(fail_pull=True), shell=FakeShell(), env={}
        )
    assert err.value.exit_code == 7


def test_broken_primary_manifest_transfers_nothing(project, info):
    """Verify an unparsable primary manifest aborts before any transfer."""
    (project / "Cargo.toml").write_text("[package\n")
    engine, shell = RecordingEngine(), FakeShell()

    with pytest.raises(PrimaryManifestError) as err:
        run_remote_build(_settings(), info, transfer=engine, shell=shell, env={})

    assert err.value.exit_code == 2
    assert engine.calls == []
    assert shell.commands == []


def test_ignore_patches_skips_mirroring(root, project, write_crate, info):
    """Verify --ignore-patches only transfers the project itself."""
    write_crate(root / "foo-fork")
    write_crate(project, '[patch.crates-io]\nfoo = { path = "../foo-fork" }\n')
    engine, shell = RecordingEngine(), FakeShell()

    run_remote_build(
        _settings(ignore_patches=True, copy_lock=False), info, transfer=engine, shell=shell, env={}
    )

    assert [c[1] for c in engine.calls] == [project]
    assert "--config" not in shell.commands[0][1]


def test_dry_run_prints_without_side_effects(root, project, write_crate, info, capsys):
    """Verify --dry-run prints the remote command and transfers nothing."""
    write_crate(root / "foo-fork")
    write_crate(project, '[patch.crates-io]\nfoo = { path = "../foo-fork" }\n')
    engine, shell = RecordingEngine(), FakeShell()

    status = run_remote_build(_settings(dry_run=True), info, transfer=engine, shell=shell, env={})

    captured = capsys.readouterr()
    assert status == 0
    assert engine.calls == [] and shell.commands == []
    assert "cargo --config" in captured.out
    assert "foo-fork" in captured.err
