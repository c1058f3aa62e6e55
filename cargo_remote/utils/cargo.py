"""Locate the cargo project a build is started from."""

from __future__ import annotations

import json
import subprocess
from pathlib import Path

import structlog
from pydantic import BaseModel

from ..errors import CargoMetadataError

log = structlog.get_logger()


class ProjectInfo(BaseModel, frozen=True):
    """Workspace root and the name used for the remote build directory."""

    root: Path
    name: str

    @property
    def manifest_path(self) -> Path:
        return self.root / "Cargo.toml"


def cargo_metadata(manifest_path: Path, *, cargo: str = "cargo") -> dict:
    """Run ``cargo metadata --no-deps`` for *manifest_path* and parse its JSON.

    Raises:
        CargoMetadataError: If cargo is missing, fails, or prints invalid JSON.
    """
    cmd = [
        cargo,
        "metadata",
        "--format-version",
        "1",
        "--no-deps",
        "--manifest-path",
        str(manifest_path),
    ]
    log.debug("cargo.metadata", command=cmd)
    try:
        proc = subprocess.run(cmd, capture_output=True, text=True, check=True)
    except FileNotFoundError as exc:
        raise CargoMetadataError(f"'{cargo}' not found in PATH") from exc
    except subprocess.CalledProcessError as exc:
        raise CargoMetadataError(
            f"Cargo Metadata execution failed:\n{exc.stderr or ''}".rstrip()
        ) from exc
    try:
        return json.loads(proc.stdout)
    except json.JSONDecodeError as exc:
        raise CargoMetadataError(f"Cargo Metadata returned invalid JSON: {exc}") from exc


def locate_project(manifest_path: Path, *, cargo: str = "cargo") -> ProjectInfo:
    """Return the workspace root and project name for *manifest_path*.

    The name is that of the package whose manifest is the workspace root
    manifest.  Virtual workspaces have no such package; the directory name
    is used instead.
    """
    metadata = cargo_metadata(manifest_path, cargo=cargo)
    try:
        root = Path(metadata["workspace_root"])
    except KeyError as exc:
        raise CargoMetadataError("Cargo Metadata output lacks 'workspace_root'") from exc

    root_manifest = root / "Cargo.toml"
    name = next(
        (
            pkg.get("name")
            for pkg in metadata.get("packages", [])
            if Path(pkg.get("manifest_path", "")) == root_manifest and pkg.get("name")
        ),
        None,
    )
    if name is None:
        log.debug("cargo.no_root_package", root=str(root))
        name = root.name

    log.debug("cargo.project", root=str(root), name=name)
    return ProjectInfo(root=root, name=name)


__all__ = ["ProjectInfo", "cargo_metadata", "locate_project"]
