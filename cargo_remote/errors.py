"""Exceptions raised by the patch pipeline and the remote build wrapper.

Two families live here:

* :class:`ManifestError` and its subclasses are plain exceptions raised by the
  manifest reader.  They carry the offending path and the underlying cause so
  callers can decide whether the failure is fatal (primary manifest) or only
  worth a warning (chained manifest).
* :class:`CargoRemoteError` and its subclasses are :class:`click.ClickException`
  instances with a per-class ``exit_code``.  The CLI lets them propagate so
  Click prints the message and exits with the matching status.
"""

from __future__ import annotations

from pathlib import Path

import click


# --------------------------------------------------------------------------- #
# Manifest errors                                                             #
# --------------------------------------------------------------------------- #
class ManifestError(Exception):
    """Base class for manifest read failures."""

    reason = "cannot be processed"

    def __init__(self, path: Path, cause: BaseException | str) -> None:
        self.path = Path(path)
        self.cause = cause
        super().__init__(f"Manifest {self.path} {self.reason}: {cause}")


class ManifestUnreadable(ManifestError):
    """The manifest file could not be read from disk."""

    reason = "is unreadable"


class ManifestMalformed(ManifestError):
    """The manifest file is not valid TOML or has an invalid structure."""

    reason = "is malformed"


class PrimaryManifestUnreadable(ManifestUnreadable):
    """The project's own manifest could not be read."""


class PrimaryManifestMalformed(ManifestMalformed):
    """The project's own manifest could not be parsed."""


class PatchPathMissing(Exception):
    """A ``[patch]`` entry points at a path that does not exist locally."""

    def __init__(self, name: str, declared_path: str, manifest_path: Path) -> None:
        self.name = name
        self.declared_path = declared_path
        self.manifest_path = Path(manifest_path)
        super().__init__(
            f"Patch '{name}' points at '{declared_path}' which does not exist "
            f"(declared in {self.manifest_path})"
        )


# --------------------------------------------------------------------------- #
# CLI-facing errors                                                           #
# --------------------------------------------------------------------------- #
class CargoRemoteError(click.ClickException):
    """Base class for errors that abort the remote build."""

    exit_code = 1


class CargoMetadataError(CargoRemoteError):
    """``cargo metadata`` failed or returned unusable output."""

    exit_code = 1


class PrimaryManifestError(CargoRemoteError):
    """The primary manifest could not be read or parsed."""

    exit_code = 2

    def __init__(self, error: ManifestError) -> None:
        self.error = error
        super().__init__(str(error))


class NoRemoteError(CargoRemoteError):
    """No build host was given on the command line or in any config file."""

    exit_code = 3

    def __init__(self) -> None:
        super().__init__(
            "No remote build server was defined (use config file or --remote flag)"
        )


class TransferError(CargoRemoteError):
    """rsync failed to transfer a tree."""

    exit_code = 4


class RemoteCommandError(CargoRemoteError):
    """The remote cargo command could not be started."""

    exit_code = 5


class CopyBackError(CargoRemoteError):
    """Build artifacts could not be copied back."""

    exit_code = 6


class LockCopyError(CargoRemoteError):
    """``Cargo.lock`` could not be copied back."""

    exit_code = 7


__all__ = [
    "ManifestError",
    "ManifestUnreadable",
    "ManifestMalformed",
    "PrimaryManifestUnreadable",
    "PrimaryManifestMalformed",
    "PatchPathMissing",
    "CargoRemoteError",
    "CargoMetadataError",
    "PrimaryManifestError",
    "NoRemoteError",
    "TransferError",
    "RemoteCommandError",
    "CopyBackError",
    "LockCopyError",
]
