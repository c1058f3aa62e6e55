"""
Pydantic models for *cargo-remote* configuration.

Two layers exist:

* :class:`RemoteConfig` mirrors one TOML config file.  Every field is
  optional so that partial files can be stacked in a cascade.
* :class:`BuildSettings` is the fully merged value handed to the build
  pipeline.  It carries everything the run needs, so no module reads
  process-wide state on its own.
"""

from __future__ import annotations

import posixpath
from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_BUILD_ROOT = "~/remote-builds"

# Variables forwarded from the local environment to the remote cargo.
WHITELISTED_ENV_VARS: tuple[str, ...] = ("RUST_BACKTRACE", "RUST_LOG", "CARGO_INCREMENTAL")


class RemoteConfig(BaseModel):
    """Contents of a single ``cargo-remote.toml`` file.

    Attributes:
        remote: ssh build host.
        build_root: Remote directory holding one sub-directory per project.
        transfer_hidden: Include dot-files in transfers.
        ignore_patches: Skip mirroring of ``[patch]`` paths.
        forward_env: Extra environment variable names forwarded to the
            remote cargo in addition to the built-in whitelist.
    """

    model_config = ConfigDict(extra="ignore")

    remote: Optional[str] = None
    build_root: Optional[str] = None
    transfer_hidden: Optional[bool] = None
    ignore_patches: Optional[bool] = None
    forward_env: List[str] = Field(default_factory=list)

    @field_validator("remote", "build_root")
    @classmethod
    def _not_blank(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and not value.strip():
            raise ValueError("must not be empty")
        return value


class BuildSettings(BaseModel, frozen=True):
    """Merged settings for one remote build run."""

    remote: str
    manifest_path: Path
    command: List[str]
    build_root: str = DEFAULT_BUILD_ROOT
    build_env: List[str] = Field(default_factory=list)
    forward_env: List[str] = Field(default_factory=lambda: list(WHITELISTED_ENV_VARS))
    copy_back: Optional[str] = None
    copy_lock: bool = True
    transfer_hidden: bool = False
    ignore_patches: bool = False
    dry_run: bool = False

    def remote_project_dir(self, project_name: str) -> str:
        """Return the remote directory the project is mirrored to."""
        return posixpath.join(self.build_root.rstrip("/"), project_name)


__all__ = [
    "DEFAULT_BUILD_ROOT",
    "WHITELISTED_ENV_VARS",
    "RemoteConfig",
    "BuildSettings",
]
