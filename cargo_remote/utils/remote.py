"""Helpers for composing paths and shell snippets that run on the build host."""

from __future__ import annotations

import shlex


def quote_remote_path(path: str) -> str:
    """Shell-quote *path* while keeping a leading ``~/`` expandable.

    ``shlex.quote("~/x")`` would suppress tilde expansion on the remote
    shell, so the home prefix is left outside the quotes.

    Args:
        path: POSIX path on the remote host.

    Returns:
        String safe to splice into a remote shell command.
    """
    if path == "~":
        return path
    if path.startswith("~/"):
        rest = path[2:]
        return "~/" + shlex.quote(rest) if rest else "~/"
    return shlex.quote(path)


def remote_spec(host: str, path: str) -> str:
    """Return the ``host:path`` form understood by rsync."""
    return f"{host}:{path}"


__all__ = ["quote_remote_path", "remote_spec"]
