"""Resolve ``[patch]`` paths to the canonical directories that need mirroring.

The resolver follows override chains: when a patched crate has a manifest
with ``[patch]`` tables of its own, those are folded into the same pass.  A
worklist plus a set of visited canonical manifest paths drives the walk, so
cycles between manifests terminate without recursion.

Resolution steps for each override:

1. Resolve the declared path against the declaring manifest's directory
   (``.``/``..`` segments and symlinks).  Missing paths become warnings.
2. Drop paths inside the primary project tree; the project transfer already
   covers them.
3. Widen the crate directory to its enclosing cargo workspace so sibling
   crates and inherited workspace settings travel with it.
4. Collapse duplicates and roots nested inside other roots.
"""

from __future__ import annotations

import fnmatch
from collections import deque
from pathlib import Path, PurePosixPath
from typing import Any, Deque, Dict, List, Optional, Sequence, Tuple

import structlog

from ..errors import ManifestError, PatchPathMissing
from ..models import ExternalPath, Manifest, OverrideEntry, PatchWarning
from .extract import extract_overrides
from .manifest import MANIFEST_NAME, read_manifest

log = structlog.get_logger()


def is_inside(path: Path, root: Path) -> bool:
    """Return ``True`` when canonical *path* equals or lies below *root*."""
    return path == root or root in path.parents


def resolve_override(entry: OverrideEntry, manifest_dir: Optional[Path] = None) -> Path:
    """Return the canonical directory *entry* points at.

    Args:
        entry: Override to resolve.
        manifest_dir: Directory relative paths are resolved against.
            Defaults to the directory of the manifest declaring *entry*.

    Raises:
        PatchPathMissing: When the path does not exist or is not a directory.
    """
    base = manifest_dir if manifest_dir is not None else entry.manifest_path.parent
    candidate = Path(entry.declared_path)
    if not candidate.is_absolute():
        candidate = base / candidate
    try:
        resolved = candidate.resolve(strict=True)
    except (OSError, RuntimeError) as exc:
        raise PatchPathMissing(entry.name, entry.declared_path, entry.manifest_path) from exc
    if not resolved.is_dir():
        raise PatchPathMissing(entry.name, entry.declared_path, entry.manifest_path)
    return resolved


def _read_quietly(path: Path) -> Optional[Manifest]:
    try:
        return read_manifest(path)
    except ManifestError as exc:
        log.debug("workspace.manifest_skipped", path=str(path), error=str(exc.cause))
        return None


def _glob_match(parts: Sequence[str], pattern: Sequence[str]) -> bool:
    """Match path segments against glob segments; ``*`` never crosses ``/``."""
    if not pattern:
        return not parts
    head, rest = pattern[0], pattern[1:]
    if head == "**":
        return any(_glob_match(parts[i:], rest) for i in range(len(parts) + 1))
    return bool(parts) and fnmatch.fnmatchcase(parts[0], head) and _glob_match(parts[1:], rest)


def _is_member(workspace: Dict[str, Any], root: Path, crate_dir: Path) -> bool:
    """Return whether *crate_dir* is a member of the workspace at *root*."""
    rel = crate_dir.relative_to(root).as_posix()
    for pattern in workspace.get("exclude", []) or []:
        if not isinstance(pattern, str):
            continue
        excluded = PurePosixPath(pattern).as_posix()
        if rel == excluded or rel.startswith(excluded + "/"):
            return False
    parts = PurePosixPath(rel).parts
    for pattern in workspace.get("members", []) or []:
        if isinstance(pattern, str) and _glob_match(parts, PurePosixPath(pattern).parts):
            return True
    return False


def _pointed_workspace(crate_dir: Path, pointer: str) -> Optional[Path]:
    """Return the workspace root named by ``package.workspace`` when it is valid.

    The target must exist, contain *crate_dir* and carry a ``[workspace]``
    table; anything else leaves the crate unwidened.
    """
    try:
        target = (crate_dir / pointer).resolve(strict=True)
    except (OSError, RuntimeError):
        log.debug("workspace.pointer_missing", crate=str(crate_dir), pointer=pointer)
        return None
    if not is_inside(crate_dir, target):
        log.warning(
            "workspace.pointer_invalid",
            crate=str(crate_dir),
            pointer=pointer,
            reason="crate is not below the workspace root",
        )
        return None
    manifest = _read_quietly(target / MANIFEST_NAME)
    if manifest is None or manifest.workspace is None:
        log.warning(
            "workspace.pointer_invalid",
            crate=str(crate_dir),
            pointer=pointer,
            reason="no [workspace] table",
        )
        return None
    return target


def find_workspace_root(crate_dir: Path, project_dir: Optional[Path] = None) -> Path:
    """Return the directory that must be mirrored for the crate at *crate_dir*.

    The result is the enclosing cargo workspace root when one can be found,
    otherwise *crate_dir* itself.  A workspace root that overlaps the primary
    project tree is never returned.
    """
    manifest = _read_quietly(crate_dir / MANIFEST_NAME)
    if manifest is None or manifest.workspace is not None:
        return crate_dir

    root = crate_dir
    if manifest.package_workspace:
        root = _pointed_workspace(crate_dir, manifest.package_workspace) or crate_dir
    else:
        for parent in crate_dir.parents:
            candidate = parent / MANIFEST_NAME
            if not candidate.is_file():
                continue
            parent_manifest = _read_quietly(candidate)
            if parent_manifest is None or parent_manifest.workspace is None:
                continue
            # Cargo stops at the first workspace manifest it meets.
            if _is_member(parent_manifest.workspace, parent, crate_dir):
                root = parent
            break

    if root != crate_dir and project_dir is not None and (
        is_inside(project_dir, root) or is_inside(root, project_dir)
    ):
        log.debug("workspace.overlaps_project", crate=str(crate_dir), root=str(root))
        return crate_dir
    return root


def _missing(exc: PatchPathMissing) -> PatchWarning:
    log.warning(
        "patch.path_missing",
        dependency=exc.name,
        path=exc.declared_path,
        manifest=str(exc.manifest_path),
    )
    return PatchWarning(
        kind="missing-path",
        message=str(exc),
        dependency=exc.name,
        declared_path=exc.declared_path,
        manifest_path=exc.manifest_path,
    )


def collect_external_paths(
    primary: Manifest, project_dir: Path
) -> Tuple[List[ExternalPath], List[PatchWarning]]:
    """Walk the override graph rooted at *primary*.

    Args:
        primary: Parsed primary manifest.
        project_dir: Root of the tree that is mirrored as a whole.

    Returns:
        ``(externals, warnings)`` with externals in discovery order.
    """
    project_dir = project_dir.resolve()
    warnings: List[PatchWarning] = []
    crates: Dict[Path, List[OverrideEntry]] = {}

    visited = {primary.path.resolve()}
    queue: Deque[Tuple[Manifest, int]] = deque([(primary, 0)])
    while queue:
        manifest, depth = queue.popleft()
        entries, found = extract_overrides(manifest, depth=depth)
        warnings.extend(found)

        for entry in entries:
            try:
                resolved = resolve_override(entry)
            except PatchPathMissing as exc:
                warnings.append(_missing(exc))
                continue
            entry = entry.model_copy(update={"resolved_path": resolved})

            chained = (resolved / MANIFEST_NAME).resolve()
            if chained not in visited and chained.is_file():
                visited.add(chained)
                try:
                    queue.append((read_manifest(chained), depth + 1))
                except ManifestError as exc:
                    log.warning("patch.manifest_unreadable", path=str(chained), error=str(exc.cause))
                    warnings.append(
                        PatchWarning(
                            kind="unreadable-manifest",
                            message=str(exc),
                            dependency=entry.name,
                            declared_path=entry.declared_path,
                            manifest_path=chained,
                        )
                    )

            if is_inside(resolved, project_dir):
                log.debug("patch.inside_project", dependency=entry.name, path=str(resolved))
                continue
            crates.setdefault(resolved, []).append(entry)

    roots: Dict[Path, List[OverrideEntry]] = {}
    for crate_dir, entries in crates.items():
        roots.setdefault(find_workspace_root(crate_dir, project_dir), []).extend(entries)

    ordered = list(roots)
    outer = [r for r in ordered if not any(o != r and is_inside(r, o) for o in ordered)]
    grouped: Dict[Path, List[OverrideEntry]] = {r: [] for r in outer}
    for root in ordered:
        owner = next(o for o in outer if is_inside(root, o))
        grouped[owner].extend(roots[root])

    externals = [ExternalPath(root=r, overrides=tuple(grouped[r])) for r in outer]
    log.debug("patch.externals", roots=[str(e.root) for e in externals])
    return externals, warnings


__all__ = [
    "is_inside",
    "resolve_override",
    "find_workspace_root",
    "collect_external_paths",
]
