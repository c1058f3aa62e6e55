"""Utility functions to print formatted CLI messages."""

from __future__ import annotations

from typing import Iterable

import click

from ..models import MirrorPlanEntry, PatchWarning

__all__ = ["echo_banner", "echo_success", "echo_plan", "echo_warnings"]


def echo_banner(text: str) -> None:
    """Print a banner announcing a step on stderr.

    Args:
        text: Banner text.
    """
    click.secho(f"\n=== {text} ===", fg="cyan", err=True)


def echo_success(text: str) -> None:
    """Echo a green success message prefixed with a tick."""
    click.secho(f"✓ {text}", fg="green", err=True)


def echo_plan(entries: Iterable[MirrorPlanEntry], host: str) -> None:
    """List planned patch transfers, one per line."""
    entries = list(entries)
    if not entries:
        click.echo("  (no external patches)", err=True)
        return
    for entry in entries:
        click.echo(f"  • {entry.source} → {host}:{entry.destination}", err=True)
        for remap in entry.remaps:
            click.echo(f"      {remap.source}/{remap.name} → {remap.remote_path}", err=True)


def echo_warnings(warnings: Iterable[PatchWarning]) -> None:
    """Summarise skipped overrides so divergence from a local build is explained."""
    warnings = list(warnings)
    if not warnings:
        return
    click.secho(
        f"\n{len(warnings)} patch override(s) skipped; the remote build may "
        "resolve these dependencies differently:",
        fg="yellow",
        err=True,
    )
    for warning in warnings:
        click.secho(f"  ! [{warning.kind}] {warning.describe()}", fg="yellow", err=True)
