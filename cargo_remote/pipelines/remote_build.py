"""
End-to-end remote build.

Steps, in order:

1. Plan the ``[patch]`` mirror.  Planning only reads local files, so a broken
   primary manifest aborts the run before anything is transferred.
2. Mirror the project tree to ``<build_root>/<project name>``.
3. Mirror each external patch directory; failures become warnings.
4. Run cargo over ssh, pointing it at the mirrored patches.
5. Copy artifacts and ``Cargo.lock`` back as requested.

The function receives its settings and engines explicitly so tests can run
it against recording fakes.
"""

from __future__ import annotations

import posixpath
from typing import Mapping, Optional

import click
import structlog

from ..config.schema import BuildSettings
from ..engines import RsyncEngine, SshShell, TransferEngine
from ..errors import (
    CopyBackError,
    LockCopyError,
    ManifestError,
    PrimaryManifestError,
    TransferError,
)
from ..models import PatchPlan
from ..patches import mirror_patches, plan_patches
from ..utils.cargo import ProjectInfo
from ..utils.display import echo_banner, echo_plan, echo_warnings
from ..utils.env import build_command, forwarded_env

log = structlog.get_logger()


def prepare_plan(settings: BuildSettings, project: ProjectInfo) -> PatchPlan:
    """Return the patch plan for *project*, or an empty plan when disabled.

    Raises:
        PrimaryManifestError: When the workspace manifest is unusable.
    """
    if settings.ignore_patches:
        log.debug("patch.ignored", reason="--ignore-patches")
        return PatchPlan()
    try:
        return plan_patches(
            project.manifest_path,
            project.root,
            remote_project_dir=settings.remote_project_dir(project.name),
        )
    except ManifestError as exc:
        log.error("patch.primary_manifest", path=str(exc.path), error=str(exc.cause))
        raise PrimaryManifestError(exc) from exc


def run_remote_build(
    settings: BuildSettings,
    project: ProjectInfo,
    *,
    transfer: Optional[TransferEngine] = None,
    shell: Optional[SshShell] = None,
    env: Optional[Mapping[str, str]] = None,
) -> int:
    """Build *project* on ``settings.remote``.

    Args:
        settings: Merged CLI and config-file settings.
        project: Local workspace root and project name.
        transfer: Transfer engine; defaults to :class:`RsyncEngine`.
        shell: Remote shell; defaults to :class:`SshShell`.
        env: Local environment for variable forwarding.

    Returns:
        Exit status of the remote cargo command (``0`` for a dry run).

    Raises:
        PrimaryManifestError: Workspace manifest unusable.
        TransferError: The project tree could not be mirrored.
        RemoteCommandError: ssh could not be started.
        CopyBackError: Artifacts could not be copied back.
        LockCopyError: ``Cargo.lock`` could not be copied back.
    """
    transfer = transfer or RsyncEngine()
    shell = shell or SshShell()
    host = settings.remote
    remote_dir = settings.remote_project_dir(project.name)
    log.debug("build.paths", project=str(project.root), remote=f"{host}:{remote_dir}")

    plan = prepare_plan(settings, project)
    build_env = list(settings.build_env) + forwarded_env(settings.forward_env, env)
    log.debug("build.env", env=build_env)

    if settings.dry_run:
        echo_banner("Patch mirror plan")
        echo_plan(plan.entries, host)
        echo_warnings(plan.warnings)
        echo_banner("Remote command")
        click.echo(
            build_command(
                remote_dir,
                settings.command,
                build_env=build_env,
                config_overrides=plan.config_overrides(),
            )
        )
        return 0

    log.info("build.transfer_sources", host=host, destination=remote_dir)
    try:
        transfer.push(project.root, host, remote_dir, hidden=settings.transfer_hidden)
    except TransferError as exc:
        raise TransferError(
            f"Failed to transfer project to build server (error: {exc.message})"
        ) from exc

    if plan.entries:
        plan = mirror_patches(plan, transfer, host=host, hidden=settings.transfer_hidden)
    echo_warnings(plan.warnings)

    command = build_command(
        remote_dir,
        settings.command,
        build_env=build_env,
        config_overrides=plan.config_overrides(),
    )
    log.info("build.start", host=host, command=settings.command)
    status = shell.run(host, command)
    log.info("build.finished", status=status)

    if settings.copy_back is not None:
        log.info("build.copy_back", path=settings.copy_back or "target")
        try:
            transfer.pull(
                host,
                posixpath.join(remote_dir, "target", settings.copy_back),
                project.root / "target" / settings.copy_back,
            )
        except TransferError as exc:
            raise CopyBackError(
                f"Failed to transfer target back to local machine (error: {exc.message})"
            ) from exc

    if settings.copy_lock:
        log.info("build.copy_lock")
        try:
            transfer.pull(
                host,
                posixpath.join(remote_dir, "Cargo.lock"),
                project.root / "Cargo.lock",
            )
        except TransferError as exc:
            raise LockCopyError(
                f"Failed to transfer Cargo.lock back to local machine (error: {exc.message})"
            ) from exc

    return status


__all__ = ["prepare_plan", "run_remote_build"]
