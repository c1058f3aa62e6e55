"""Compose the command line that runs cargo on the build host."""

from __future__ import annotations

import os
import shlex
from typing import Iterable, List, Mapping, Optional, Sequence

from .remote import quote_remote_path


def forwarded_env(
    whitelist: Iterable[str], env: Optional[Mapping[str, str]] = None
) -> List[str]:
    """Return ``KEY="value"`` assignments for whitelisted variables that are set.

    Args:
        whitelist: Variable names allowed to travel to the remote cargo.
        env: Source environment.  Defaults to ``os.environ``.
    """
    env = os.environ if env is None else env
    return [f"{key}={shlex.quote(env[key])}" for key in whitelist if key in env]


def build_command(
    build_path: str,
    cargo_args: Sequence[str],
    *,
    build_env: Sequence[str] = (),
    config_overrides: Sequence[str] = (),
) -> str:
    """Return the shell command executed over ssh.

    The command enters the mirrored project, loads a ``direnv`` environment
    when one is configured there, then runs cargo with the environment
    assignments prefixed.

    Args:
        build_path: Remote project directory.
        cargo_args: Subcommand and arguments passed verbatim to cargo.
        build_env: ``KEY=value`` assignments placed before ``cargo``.
        config_overrides: Values for repeated ``--config`` flags.
    """
    parts: List[str] = list(build_env)
    parts.append("cargo")
    for override in config_overrides:
        parts += ["--config", shlex.quote(override)]
    parts += [shlex.quote(arg) for arg in cargo_args]
    return (
        f"cd {quote_remote_path(build_path)}; "
        f"eval $(direnv export bash); "
        + " ".join(parts)
    )


__all__ = ["forwarded_env", "build_command"]
