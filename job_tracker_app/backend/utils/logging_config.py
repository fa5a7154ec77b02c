"""
Logging setup for the Job Tracker application.

Module loggers come from get_logger(__name__); handlers and levels are set up
once, at import of backend.main, from the application settings.
"""
import logging
import sys
from typing import Iterable, Optional

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Chatty third-party loggers, capped at WARNING
NOISY_LOGGERS = ("uvicorn.access", "sqlalchemy.engine", "multipart")


def setup_logging(
    level: str = "INFO",
    log_file: Optional[str] = None,
    verbose_loggers: Iterable[str] = (),
) -> None:
    """
    Replace the root logger's handlers with a stdout handler and, optionally,
    a file handler.

    Args:
        level: Logging level name; unknown names fall back to INFO
        log_file: Optional file path for log output
        verbose_loggers: Loggers from NOISY_LOGGERS to leave at `level`
    """
    numeric_level = getattr(logging, str(level).upper(), logging.INFO)
    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)

    handlers = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file))

    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
    for handler in handlers:
        handler.setFormatter(formatter)
        handler.setLevel(numeric_level)
        root_logger.addHandler(handler)
    root_logger.setLevel(numeric_level)

    keep = set(verbose_loggers)
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(numeric_level if name in keep else logging.WARNING)


def configure_from_settings(settings) -> None:
    """Apply LOG_LEVEL and LOG_FILE; DATABASE_ECHO keeps SQL statements visible."""
    setup_logging(
        level=settings.log_level,
        log_file=settings.log_file,
        verbose_loggers=("sqlalchemy.engine",) if settings.database_echo else (),
    )


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
