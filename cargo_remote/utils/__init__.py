"""
Public façade for the *utils* package.

Anything imported here becomes part of the stable public API.  Logging and
display helpers are imported from their own modules by the CLI layer.
"""

from __future__ import annotations

# ─── build host helpers ──────────────────────────────────────────────────
from .remote import quote_remote_path, remote_spec

# ─── remote command composition ──────────────────────────────────────────
from .env import build_command, forwarded_env

__all__ = [
    "quote_remote_path",
    "remote_spec",
    "build_command",
    "forwarded_env",
]
