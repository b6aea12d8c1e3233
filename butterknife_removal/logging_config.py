"""
Centralized logging configuration.

Usage:
    from butterknife_removal.logging_config import get_logger
    logger = get_logger(__name__)
"""
import logging
import logging.handlers
from pathlib import Path
from typing import Optional

from .constants import LOG_BACKUP_COUNT, LOG_FORMAT, LOG_MAX_SIZE_MB

ROOT_LOGGER = "butterknife_removal"


def _add_file_handler(logger: logging.Logger, log_file: str) -> None:
    log_path = Path(log_file)
    log_path.parent.mkdir(parents=True, exist_ok=True)

    file_handler = logging.handlers.RotatingFileHandler(
        log_path,
        maxBytes=LOG_MAX_SIZE_MB * 1024 * 1024,
        backupCount=LOG_BACKUP_COUNT,
        encoding="utf-8",
    )
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(file_handler)


def setup_logger(name: Optional[str] = None) -> logging.Logger:
    """
    Get or create a configured logger.

    Handlers live on the package root logger only; module loggers propagate
    to it, so calling this for a module name just returns that logger.

    Args:
        name: Logger name. If None, uses the package root logger.

    Returns:
        Configured logging.Logger instance.
    """
    root = logging.getLogger(ROOT_LOGGER)

    # Avoid adding handlers multiple times
    if not root.handlers:
        root.setLevel(logging.INFO)
        root.propagate = False

        # Console handler - stderr, stdout is reserved for per-file results
        console = logging.StreamHandler()
        console.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(console)

    if name is None or name == ROOT_LOGGER:
        return root
    return logging.getLogger(name)


def configure_logging(level: str = "INFO", log_file: Optional[str] = None) -> logging.Logger:
    """Apply the configured level and optional rotating log file."""
    root = setup_logger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    has_file = any(isinstance(h, logging.handlers.RotatingFileHandler) for h in root.handlers)
    if log_file and not has_file:
        _add_file_handler(root, log_file)
    return root


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """
    Alias for setup_logger for convenience.

    Usage:
        logger = get_logger(__name__)
    """
    return setup_logger(name)
