"""Transfer and remote execution engines."""

from .base import TransferEngine
from .rsync import RsyncEngine
from .ssh import SshShell

__all__ = ["TransferEngine", "RsyncEngine", "SshShell"]
