"""Logging configuration"""
import logging
import sys

from core.config import LOG_LEVEL

_configured = False

NOISY_LOGGERS = ("sqlalchemy", "sqlalchemy.engine", "alembic", "uvicorn.access")


def setup_logging(verbose: bool = True) -> None:
    """
    Configure application logging.

    With ``verbose`` the root logger runs at ``LOG_LEVEL``; without it only
    warnings and errors are kept. Library loggers stay quiet unless
    ``LOG_LEVEL`` is DEBUG.

    Called once from the application lifespan; repeated calls are no-ops.
    """
    global _configured
    if _configured:
        return

    level = getattr(logging, LOG_LEVEL, logging.INFO) if verbose else logging.WARNING

    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )
    # basicConfig leaves the level alone when handlers already exist
    logging.getLogger().setLevel(level)

    if LOG_LEVEL != "DEBUG":
        for name in NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.ERROR)

    _configured = True
