"""
Package-level logging configuration.

* Rich console output (colourised, nicely formatted).
* Rotating **JSON** log file when ``$CARGO_REMOTE_LOG_DIR`` is set.
* Optional plain-text mirror controlled via ``--save-logfile`` on the CLI.

The console level follows the CLI flags; ``$CARGO_REMOTE_LOG`` (a level name
such as ``debug``) overrides it so the wrapper can be traced without editing
the cargo alias that invokes it.

The public helper :func:`setup_logging` wires everything and should be the
sole entry-point used by the CLI.
"""

from __future__ import annotations

import atexit
import logging
import logging.handlers
import os
from pathlib import Path
from typing import Mapping, Optional

import structlog
from rich.logging import RichHandler
from structlog.dev import ConsoleRenderer as StructlogConsoleRenderer
from structlog.stdlib import LoggerFactory

__all__ = ["setup_logging", "console_level"]

LOG_LEVEL_ENV = "CARGO_REMOTE_LOG"
LOG_DIR_ENV = "CARGO_REMOTE_LOG_DIR"


# --------------------------------------------------------------------------- #
# Internal helpers – file-based handlers                                      #
# --------------------------------------------------------------------------- #
def _json_file_handler(env: Mapping[str, str], level: int) -> logging.Handler | None:
    """Return a rotating JSON file handler, or *None* when no log dir is set."""
    env_dir = env.get(LOG_DIR_ENV)
    if not env_dir:
        return None

    logdir = Path(env_dir).expanduser()
    logdir.mkdir(parents=True, exist_ok=True)

    handler = logging.handlers.RotatingFileHandler(
        filename=logdir / "cargo-remote.log",
        maxBytes=5_000_000,
        backupCount=3,
        encoding="utf-8",
    )
    handler.setLevel(level)
    return handler


def _plain_text_file_handler(path: Optional[Path], level: int) -> logging.Handler | None:
    """Return a plain-text file handler or *None* when *path* is *None*."""
    if path is None:
        return None

    path = path.expanduser().resolve()
    path.parent.mkdir(parents=True, exist_ok=True)

    handler = logging.FileHandler(path, encoding="utf-8", mode="a")
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter("[%(levelname)s] %(message)s"))
    atexit.register(handler.close)
    return handler


def console_level(
    *, verbose: bool = False, debug: bool = False, env: Optional[Mapping[str, str]] = None
) -> int:
    """Return the console log level for the given flags and environment.

    ``$CARGO_REMOTE_LOG`` wins when it names a valid level; unknown names are
    ignored.
    """
    env = os.environ if env is None else env
    override = env.get(LOG_LEVEL_ENV, "").strip().upper()
    if override:
        level = logging.getLevelName(override)
        if isinstance(level, int):
            return level
    if debug:
        return logging.DEBUG
    return logging.INFO if verbose else logging.WARNING


# --------------------------------------------------------------------------- #
# Public API – main entry-point                                               #
# --------------------------------------------------------------------------- #
def setup_logging(
    *,
    verbose: bool = False,
    debug: bool = False,
    extra_text_log: Optional[Path] = None,
    env: Optional[Mapping[str, str]] = None,
) -> None:
    """Configure rich console logging and optional file mirrors.

    Args:
        verbose: Emit INFO-level messages to the console.
        debug: Emit DEBUG-level messages with rich tracebacks.
        extra_text_log: Optional path for a plain-text mirror of console output.
        env: Environment consulted for overrides.  Defaults to ``os.environ``.
    """
    env = os.environ if env is None else env
    console_lvl = console_level(verbose=verbose, debug=debug, env=env)
    file_lvl = min(console_lvl, logging.INFO)

    handlers: list[logging.Handler] = [
        RichHandler(
            level=console_lvl,
            rich_tracebacks=True,
            tracebacks_show_locals=False,
            markup=False,
            show_path=debug,
        )
    ]

    json_handler = _json_file_handler(env, file_lvl)
    if json_handler:
        handlers.append(json_handler)

    txt_handler = _plain_text_file_handler(extra_text_log, console_lvl)
    if txt_handler:
        handlers.append(txt_handler)

    logging.basicConfig(
        level=logging.DEBUG,
        handlers=handlers,
        format="%(message)s",
        force=True,
    )

    structlog.configure(
        processors=[
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.add_log_level,
            (
                StructlogConsoleRenderer(colors=False)
                if json_handler is None
                else structlog.processors.JSONRenderer()
            ),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(file_lvl),
        logger_factory=LoggerFactory(),
    )
