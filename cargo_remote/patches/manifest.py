"""Read ``Cargo.toml`` files into :class:`~cargo_remote.models.Manifest` objects.

Only the tables the patch pipeline reasons about are kept: the ordinary
dependency tables (opaque), ``[patch.*]``, ``[workspace]`` and the
``package.workspace`` pointer.  Everything else in the manifest is ignored.
"""

from __future__ import annotations

import tomllib
from pathlib import Path
from typing import Any, Dict

import structlog

from ..errors import (
    ManifestMalformed,
    ManifestUnreadable,
    PrimaryManifestMalformed,
    PrimaryManifestUnreadable,
)
from ..models import Manifest

log = structlog.get_logger()

MANIFEST_NAME = "Cargo.toml"
_DEP_SECTIONS = ("dependencies", "dev-dependencies", "build-dependencies")


def _load_toml(path: Path) -> Dict[str, Any]:
    """Return the parsed TOML document at *path*.

    Raises:
        ManifestUnreadable: When the file cannot be read.
        ManifestMalformed: When the contents are not valid TOML.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ManifestUnreadable(path, exc) from exc
    try:
        return tomllib.loads(text)
    except tomllib.TOMLDecodeError as exc:
        raise ManifestMalformed(path, exc) from exc


def _table(data: Dict[str, Any], key: str, path: Path) -> Dict[str, Any]:
    """Return ``data[key]`` or ``{}``; reject values that are not tables."""
    value = data.get(key, {})
    if not isinstance(value, dict):
        raise ManifestMalformed(path, f"'{key}' must be a table")
    return value


def read_manifest(path: str | Path) -> Manifest:
    """Parse the manifest at *path*.

    Args:
        path: Manifest file, or a directory containing ``Cargo.toml``.

    Returns:
        Parsed :class:`Manifest` with an absolute ``path``.

    Raises:
        ManifestUnreadable: I/O failure.
        ManifestMalformed: TOML syntax error or a ``[patch]`` /
            ``[workspace]`` value that is not a table.
    """
    path = Path(path).expanduser().absolute()
    if path.is_dir():
        path = path / MANIFEST_NAME

    data = _load_toml(path)

    dependencies: Dict[str, Any] = {}
    for section in _DEP_SECTIONS:
        value = data.get(section, {})
        # A broken dependency table is not the patch pipeline's concern.
        if isinstance(value, dict):
            dependencies.update(value)

    patches = _table(data, "patch", path)
    workspace = data.get("workspace")
    if workspace is not None and not isinstance(workspace, dict):
        raise ManifestMalformed(path, "'workspace' must be a table")

    package = data.get("package")
    package_workspace = None
    if isinstance(package, dict) and isinstance(package.get("workspace"), str):
        package_workspace = package["workspace"]

    manifest = Manifest(
        path=path,
        dependencies=dependencies,
        patches=patches,
        workspace=workspace,
        package_workspace=package_workspace,
    )
    log.debug(
        "manifest.read",
        path=str(path),
        patch_sources=list(patches),
        workspace=workspace is not None,
    )
    return manifest


def read_primary_manifest(path: str | Path) -> Manifest:
    """Parse the project's own manifest.

    Same as :func:`read_manifest` but re-raises failures as the primary
    variants so callers can treat them as fatal.
    """
    try:
        return read_manifest(path)
    except ManifestUnreadable as exc:
        raise PrimaryManifestUnreadable(exc.path, exc.cause) from exc
    except ManifestMalformed as exc:
        raise PrimaryManifestMalformed(exc.path, exc.cause) from exc


__all__ = ["MANIFEST_NAME", "read_manifest", "read_primary_manifest"]
