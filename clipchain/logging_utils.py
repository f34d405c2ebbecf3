"""Logging setup shared by every clipchain module."""

import logging
import os

_CONFIGURED = False


def setup_logging(level: str | None = None, force: bool = False) -> None:
    """Configure root logging once with a consistent, readable format.

    Args:
        level: Optional level name ("INFO", "DEBUG", ...). Falls back to the
            ``LOG_LEVEL`` environment variable, then INFO.
        force: Reconfigure even if logging was already set up (the CLI uses
            this to apply ``--verbose`` after module import).
    """
    global _CONFIGURED
    if _CONFIGURED and not force:
        return

    level_name = (level or os.getenv("LOG_LEVEL") or "INFO").upper()
    log_level = getattr(logging, level_name, logging.INFO)

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%H:%M:%S",
        force=force,
    )
    _CONFIGURED = True


def get_logger(name: str) -> logging.Logger:
    """Return a module logger."""
    return logging.getLogger(name)
