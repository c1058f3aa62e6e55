"""Remote shell session used to run cargo on the build host."""

from __future__ import annotations

import subprocess

import structlog

from ..errors import RemoteCommandError

log = structlog.get_logger()


class SshShell:
    """Run a command on a remote host through ``ssh -t``.

    The terminal is forwarded so cargo keeps its colours and progress bars,
    and stdin/stdout/stderr are inherited from the local process.
    """

    def __init__(self, binary: str = "ssh") -> None:
        self.binary = binary

    def run(self, host: str, command: str) -> int:
        """Execute *command* on *host*.

        Args:
            host: ssh destination.
            command: Shell command line evaluated by the remote login shell.

        Returns:
            Exit status of the remote command.

        Raises:
            RemoteCommandError: If the ssh client cannot be started.
        """
        cmd = [self.binary, "-t", host, command]
        log.info("ssh.run", host=host)
        log.debug("ssh.command", command=command)
        try:
            proc = subprocess.run(cmd, check=False)
        except OSError as exc:
            log.error("ssh.failed", host=host, error=str(exc))
            raise RemoteCommandError(
                f"Failed to run cargo command remotely (error: {exc})"
            ) from exc
        return proc.returncode


__all__ = ["SshShell"]
