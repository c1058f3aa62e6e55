"""Assign remote destinations to external patch directories.

Destinations live under a fixed staging root and keep the source directory's
own name::

    <staging_root>/<sha256(canonical source)[:12]>/<source leaf>

The hash namespace keeps two externals that share a leaf name apart and is
stable across runs, so repeated builds reuse (and rsync incrementally
updates) the same remote copy.
"""

from __future__ import annotations

import hashlib
import posixpath
from typing import Iterable, List, Set

import structlog

from ..models import ExternalPath, MirrorPlanEntry, PatchRemap

log = structlog.get_logger()

_HASH_LEN = 12


def _destination(external: ExternalPath, staging_root: str, taken: Set[str]) -> str:
    digest = hashlib.sha256(str(external.root).encode("utf-8")).hexdigest()
    leaf = external.root.name or "root"
    for width in (_HASH_LEN, len(digest)):
        candidate = posixpath.join(staging_root, digest[:width], leaf)
        if candidate not in taken:
            return candidate
    ordinal = 1
    while True:
        candidate = posixpath.join(staging_root, f"{digest}-{ordinal}", leaf)
        if candidate not in taken:
            return candidate
        ordinal += 1


def plan_mirror(
    externals: Iterable[ExternalPath],
    *,
    staging_root: str,
    remote_project_dir: str,
) -> List[MirrorPlanEntry]:
    """Return one :class:`MirrorPlanEntry` per external path.

    Args:
        externals: Deduplicated external paths, in the order they should be
            transferred.
        staging_root: Remote directory that holds mirrored patches.
        remote_project_dir: Remote directory the project is mirrored to and
            cargo runs in.  Remapped patch paths are relative to it.

    Returns:
        Plan entries in input order; no two share a destination.
    """
    taken: Set[str] = set()
    plan: List[MirrorPlanEntry] = []
    for external in externals:
        destination = _destination(external, staging_root, taken)
        taken.add(destination)

        remaps = []
        for entry in external.overrides:
            # Cargo only honours [patch] in the root manifest.
            if not entry.is_primary or entry.resolved_path is None:
                continue
            sub = entry.resolved_path.relative_to(external.root).as_posix()
            remote = posixpath.normpath(posixpath.join(destination, sub))
            remaps.append(
                PatchRemap(
                    source=entry.source,
                    name=entry.name,
                    remote_path=posixpath.relpath(remote, remote_project_dir),
                )
            )

        plan.append(
            MirrorPlanEntry(
                source=external.root,
                destination=destination,
                remaps=tuple(remaps),
            )
        )
        log.debug("patch.planned", source=str(external.root), destination=destination)
    return plan


__all__ = ["plan_mirror"]
