"""Logging configuration for the envcast pipeline.

Every module obtains its logger with ``get_logger(__name__)``; the root
handlers are installed once, on first use or explicitly from the CLI.
The default level can be set with the ``ENVCAST_LOG_LEVEL`` environment
variable (e.g. ``DEBUG``).
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
import sys

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
LOG_LEVEL_ENV_VAR = "ENVCAST_LOG_LEVEL"


def _resolve_level(level: int | str | None) -> int:
    """Turn a level name, number or None (environment/default) into a logging level."""
    if level is None:
        level = os.environ.get(LOG_LEVEL_ENV_VAR, "INFO")
    if isinstance(level, str):
        resolved = logging.getLevelName(level.upper())
        if not isinstance(resolved, int):
            raise ValueError(f"Unknown log level: {level!r}")
        return resolved
    return int(level)


def setup_logging(
    level: int | str | None = None,
    *,
    log_file: Path | str | None = None,
    force: bool = False,
) -> None:
    """Configure logging for the pipeline.

    Args:
        level: Logging level or level name. None reads ``ENVCAST_LOG_LEVEL``
            and falls back to INFO.
        log_file: Optional file that receives the same records as stdout.
        force: Replace handlers installed by an earlier call.
    """
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file is not None:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_path, encoding="utf-8"))

    logging.basicConfig(
        level=_resolve_level(level),
        format=LOG_FORMAT,
        datefmt=DATE_FORMAT,
        handlers=handlers,
        force=force,
    )


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance for the given module name.

    Args:
        name: Module name (typically __name__).

    Returns:
        Logger instance.
    """
    logger = logging.getLogger(name)
    if not logging.getLogger().handlers:
        setup_logging()
    return logger
