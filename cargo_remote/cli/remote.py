"""CLI wrapper that runs a cargo sub-command on the remote build host."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import click
import structlog

from ..config import build_settings, load_config
from ..errors import NoRemoteError
from ..pipelines import run_remote_build
from ..utils.cargo import locate_project

log = structlog.get_logger()


@click.command(
    name="remote",
    context_settings=dict(
        help_option_names=["-h", "--help"],
        max_content_width=120,
        ignore_unknown_options=True,
        allow_interspersed_args=False,
    ),
    help="""\b
Mirror the project to the build host and run COMMAND with cargo there.

Everything after the first positional argument is passed to the remote
cargo untouched, e.g. `cargo remote -r host build --release --all`.
""",
)
@click.option("-r", "--remote", metavar="HOST", help="Remote ssh build server.")
@click.option(
    "-b",
    "--build-env",
    multiple=True,
    metavar="KEY=VALUE",
    help="Set remote environment variables. RUST_BACKTRACE, CC, LIB, etc.",
)
@click.option(
    "-c",
    "--copy-back",
    is_flag=False,
    flag_value="",
    default=None,
    metavar="[PATH]",
    help="Transfer the target folder or a specific file inside it back to the local machine.",
)
@click.option("--no-copy-lock", is_flag=True, help="Don't transfer Cargo.lock back.")
@click.option(
    "--manifest-path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=Path("Cargo.toml"),
    show_default=True,
    help="Path to the manifest to execute.",
)
@click.option(
    "-H",
    "--transfer-hidden",
    is_flag=True,
    help="Transfer hidden files and directories to the build server.",
)
@click.option("--ignore-patches", is_flag=True, help="Do not mirror [patch] paths.")
@click.option(
    "--build-root",
    metavar="PATH",
    help="Remote directory holding the mirrored projects (default ~/remote-builds).",
)
@click.option(
    "--config-file",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Config file that takes precedence over the project and user files.",
)
@click.option("--dry-run", is_flag=True, help="Print the patch plan and remote command only.")
@click.argument("command", nargs=-1, required=True, type=click.UNPROCESSED)
@click.pass_context
def cli(
    ctx: click.Context,
    remote: Optional[str],
    build_env: tuple[str, ...],
    copy_back: Optional[str],
    no_copy_lock: bool,
    manifest_path: Path,
    transfer_hidden: bool,
    ignore_patches: bool,
    build_root: Optional[str],
    config_file: Optional[Path],
    dry_run: bool,
    command: tuple[str, ...],
) -> None:
    """Run ``cargo COMMAND...`` on the build host.

    Raises:
        click.ClickException: Any fatal error; the exit status identifies
            the failing step.
    """
    project = locate_project(manifest_path)
    log.info("project.located", root=str(project.root), name=project.name)

    config = load_config(project.root, config_path=config_file)
    settings = build_settings(
        config,
        remote=remote,
        manifest_path=manifest_path,
        command=command,
        build_root=build_root,
        build_env=build_env,
        copy_back=copy_back,
        copy_lock=not no_copy_lock,
        transfer_hidden=transfer_hidden,
        ignore_patches=ignore_patches,
        dry_run=dry_run,
    )
    if settings is None:
        raise NoRemoteError()

    status = run_remote_build(settings, project)
    ctx.exit(status)


__all__ = ["cli"]
