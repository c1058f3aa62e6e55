"""
Dependency-patch resolution and mirroring.

Public surface:

* :func:`plan_patches` – read the primary manifest, follow its ``[patch]``
  overrides and return a :class:`~cargo_remote.models.PatchPlan`.  Only a
  broken primary manifest raises; every other problem becomes a warning on
  the plan.
* :func:`mirror_patches` – push each planned entry with a transfer engine,
  one after the other, and return the plan restricted to the entries that
  made it to the remote host.
"""

from __future__ import annotations

import posixpath
from pathlib import Path
from typing import List, Optional

import structlog

from ..engines.base import TransferEngine
from ..errors import TransferError
from ..models import MirrorPlanEntry, PatchPlan, PatchWarning
from .manifest import read_primary_manifest
from .planner import plan_mirror
from .resolve import collect_external_paths

log = structlog.get_logger()

PATCH_DIR_NAME = ".patches"


def default_staging_root(remote_project_dir: str) -> str:
    """Return the staging root that sits next to *remote_project_dir*."""
    parent = posixpath.dirname(remote_project_dir.rstrip("/"))
    return posixpath.join(parent, PATCH_DIR_NAME)


def plan_patches(
    manifest_path: str | Path,
    project_dir: str | Path,
    *,
    remote_project_dir: str,
    staging_root: Optional[str] = None,
) -> PatchPlan:
    """Plan the transfers needed for path overrides outside *project_dir*.

    Args:
        manifest_path: The workspace root ``Cargo.toml``.
        project_dir: Local directory mirrored as a whole.
        remote_project_dir: Remote directory the project is mirrored to.
        staging_root: Remote directory for mirrored patches.  Defaults to
            :func:`default_staging_root`.

    Returns:
        The ordered plan plus any warnings.

    Raises:
        PrimaryManifestUnreadable: The manifest cannot be read.
        PrimaryManifestMalformed: The manifest cannot be parsed.
    """
    remote_project_dir = remote_project_dir.rstrip("/")
    staging_root = staging_root or default_staging_root(remote_project_dir)

    primary = read_primary_manifest(manifest_path)
    externals, warnings = collect_external_paths(primary, Path(project_dir))
    entries = plan_mirror(
        externals,
        staging_root=staging_root,
        remote_project_dir=remote_project_dir,
    )
    log.info("patch.plan", entries=len(entries), warnings=len(warnings))
    return PatchPlan(entries=tuple(entries), warnings=tuple(warnings))


def mirror_patches(
    plan: PatchPlan,
    engine: TransferEngine,
    *,
    host: str,
    hidden: bool = False,
) -> PatchPlan:
    """Transfer every entry of *plan* to *host*.

    A failed transfer is recorded as a ``transfer-failed`` warning and the
    next entry is attempted.

    Returns:
        A plan holding only the entries that were transferred, with the
        transfer warnings appended to the planning warnings.
    """
    mirrored: List[MirrorPlanEntry] = []
    failures: List[PatchWarning] = []
    for entry in plan.entries:
        log.info("patch.mirror", source=str(entry.source), destination=entry.destination)
        try:
            engine.push(entry.source, host, entry.destination, hidden=hidden)
        except TransferError as exc:
            log.warning("patch.mirror_failed", source=str(entry.source), error=exc.message)
            failures.append(
                PatchWarning(
                    kind="transfer-failed",
                    message=f"Could not mirror {entry.source} to {host}:{entry.destination}: {exc.message}",
                    dependency=", ".join(r.name for r in entry.remaps) or None,
                    declared_path=str(entry.source),
                )
            )
            continue
        mirrored.append(entry)
    return PatchPlan(entries=tuple(mirrored), warnings=plan.warnings + tuple(failures))


__all__ = ["PATCH_DIR_NAME", "default_staging_root", "plan_patches", "mirror_patches"]
