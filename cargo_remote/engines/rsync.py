"""rsync transfer engine."""

from __future__ import annotations

import posixpath
import subprocess
from pathlib import Path
from typing import List, Sequence

import structlog

from ..errors import TransferError
from ..utils.remote import quote_remote_path, remote_spec
from .base import TransferEngine

log = structlog.get_logger()

PROGRESS_FLAG = "--info=progress2"
BASE_FLAGS: tuple[str, ...] = (
    "--links",
    "--recursive",
    "--quiet",
    "--delete",
    "--compress",
    PROGRESS_FLAG,
)


class RsyncEngine(TransferEngine):
    """Mirror trees with ``rsync`` over ssh."""

    def __init__(self, excludes: Sequence[str] = ("target",), binary: str = "rsync") -> None:
        """Configure the engine.

        Args:
            excludes: Patterns excluded from every push.  Build output is
                excluded by default.
            binary: rsync executable name or path.
        """
        self.excludes = tuple(excludes)
        self.binary = binary

    def push_command(
        self, local: Path, host: str, remote_path: str, *, hidden: bool = False
    ) -> List[str]:
        """Return the rsync argv used by :meth:`push`."""
        remote_path = remote_path.rstrip("/")
        cmd: List[str] = [self.binary, *BASE_FLAGS]
        for pattern in self.excludes:
            cmd += ["--exclude", pattern]
        if not hidden:
            cmd += ["--exclude", ".*"]
        parent = posixpath.dirname(remote_path) or "."
        cmd += ["--rsync-path", f"mkdir -p {quote_remote_path(parent)} && rsync"]
        cmd += [f"{local}/", remote_spec(host, f"{remote_path}/")]
        return cmd

    def push(self, local: Path, host: str, remote_path: str, *, hidden: bool = False) -> None:
        """Mirror *local* to ``host:remote_path``.

        Raises:
            TransferError: If rsync is missing or exits with a non-zero status.
        """
        cmd = self.push_command(local, host, remote_path, hidden=hidden)
        log.info("rsync.push", source=str(local), host=host, destination=remote_path)
        self._run(cmd, f"{local} to {host}:{remote_path}")

    def pull(self, host: str, remote_path: str, local: Path) -> None:
        """Copy ``host:remote_path`` to *local*.

        Raises:
            TransferError: If rsync is missing or exits with a non-zero status.
        """
        cmd = [self.binary, *BASE_FLAGS, remote_spec(host, remote_path), str(local)]
        log.info("rsync.pull", host=host, source=remote_path, destination=str(local))
        self._run(cmd, f"{host}:{remote_path} to {local}")

    def _run(self, cmd: List[str], what: str) -> None:
        try:
            subprocess.run(cmd, check=True)
        except FileNotFoundError as exc:
            log.error("rsync.missing", binary=self.binary)
            raise TransferError(f"'{self.binary}' not found in PATH") from exc
        except OSError as exc:
            log.error("rsync.unstartable", binary=self.binary, error=str(exc))
            raise TransferError(f"Could not start '{self.binary}': {exc}") from exc
        except subprocess.CalledProcessError as exc:
            log.error("rsync.failed", returncode=exc.returncode, transfer=what)
            raise TransferError(
                f"rsync exited with status {exc.returncode} while copying {what}"
            ) from exc


__all__ = ["RsyncEngine", "PROGRESS_FLAG"]
