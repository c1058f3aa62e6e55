"""
Typed, immutable value objects that circulate between the patch pipeline
stages.

Every class inherits from :class:`pydantic.BaseModel` with ``frozen=True``
so instances are hashable and cannot be mutated once a stage has produced
them.  The pipeline builds all of them fresh on each invocation.
"""

from __future__ import annotations

import json
import re
from pathlib import Path
from typing import Any, Dict, List, Literal, Optional, Tuple

from pydantic import BaseModel, Field

_BARE_KEY_RE = re.compile(r"^[A-Za-z0-9_-]+$")


def _toml_key(key: str) -> str:
    """Return *key* as a TOML key segment, quoting it when required."""
    return key if _BARE_KEY_RE.match(key) else json.dumps(key)


# --------------------------------------------------------------------------- #
# 1 – Manifest graph                                                          #
# --------------------------------------------------------------------------- #
class Manifest(BaseModel, frozen=True):
    """One parsed ``Cargo.toml``.

    Attributes
    ----------
    path
        Absolute location of the manifest file.
    dependencies
        Ordinary dependency specs keyed by name.  Opaque to the patch
        pipeline.
    patches
        Raw ``[patch.<source>]`` tables keyed by source (``crates-io`` or a
        git URL) in declaration order.
    workspace
        Raw ``[workspace]`` table, ``None`` when the manifest declares none.
    package_workspace
        Explicit ``package.workspace`` pointer, if any.
    """

    path: Path
    dependencies: Dict[str, Any] = Field(default_factory=dict)
    patches: Dict[str, Any] = Field(default_factory=dict)
    workspace: Optional[Dict[str, Any]] = None
    package_workspace: Optional[str] = None

    @property
    def directory(self) -> Path:
        return self.path.parent


class OverrideEntry(BaseModel, frozen=True):
    """A single ``[patch]`` declaration that targets a local path."""

    name: str
    source: str
    declared_path: str
    manifest_path: Path
    depth: int = 0
    resolved_path: Optional[Path] = None

    @property
    def is_primary(self) -> bool:
        """Whether the entry comes from the primary manifest."""
        return self.depth == 0


class ExternalPath(BaseModel, frozen=True):
    """Canonical directory outside the project tree that must be mirrored."""

    root: Path
    overrides: Tuple[OverrideEntry, ...] = ()


# --------------------------------------------------------------------------- #
# 2 – Mirror plan                                                             #
# --------------------------------------------------------------------------- #
class PatchRemap(BaseModel, frozen=True):
    """Remote location of one patched crate, relative to the remote project."""

    source: str
    name: str
    remote_path: str

    def as_config(self) -> str:
        """Render the remap as a cargo ``--config`` value."""
        return (
            f"patch.{_toml_key(self.source)}.{_toml_key(self.name)}.path="
            f"{json.dumps(self.remote_path)}"
        )


class MirrorPlanEntry(BaseModel, frozen=True):
    """One (local source, remote destination) transfer."""

    source: Path
    destination: str
    remaps: Tuple[PatchRemap, ...] = ()


WarningKind = Literal[
    "missing-path",
    "malformed-override",
    "unreadable-manifest",
    "transfer-failed",
]


class PatchWarning(BaseModel, frozen=True):
    """Non-fatal problem encountered while planning or mirroring patches."""

    kind: WarningKind
    message: str
    dependency: Optional[str] = None
    declared_path: Optional[str] = None
    manifest_path: Optional[Path] = None

    def describe(self) -> str:
        """Return a one-line human readable summary."""
        parts = [self.message]
        if self.manifest_path is not None:
            parts.append(f"(in {self.manifest_path})")
        return " ".join(parts)


class PatchPlan(BaseModel, frozen=True):
    """Result of planning: ordered transfers plus the warnings collected."""

    entries: Tuple[MirrorPlanEntry, ...] = ()
    warnings: Tuple[PatchWarning, ...] = ()

    def config_overrides(self) -> List[str]:
        """Return cargo ``--config`` values for every remapped patch."""
        return [remap.as_config() for entry in self.entries for remap in entry.remaps]


__all__ = [
    "Manifest",
    "OverrideEntry",
    "ExternalPath",
    "PatchRemap",
    "MirrorPlanEntry",
    "PatchWarning",
    "PatchPlan",
]
