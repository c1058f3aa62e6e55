from __future__ import annotations

"""Transfer back-ends used to mirror trees to and from the build host."""

from abc import ABC, abstractmethod
from pathlib import Path


class TransferEngine(ABC):
    """Abstract file-synchronisation engine.

    Concrete implementations copy directory trees to a remote host and pull
    single files or trees back.  Both calls are synchronous and raise
    :class:`cargo_remote.errors.TransferError` on failure.
    """

    @abstractmethod
    def push(self, local: Path, host: str, remote_path: str, *, hidden: bool = False) -> None:
        """Mirror the directory *local* to ``host:remote_path``.

        Args:
            local: Absolute local directory.
            host: ssh destination (``user@host`` or an ssh config alias).
            remote_path: Destination directory on *host*; created if needed.
            hidden: Include dot-files and dot-directories.
        """
        raise NotImplementedError

    @abstractmethod
    def pull(self, host: str, remote_path: str, local: Path) -> None:
        """Copy ``host:remote_path`` back to *local*."""
        raise NotImplementedError
