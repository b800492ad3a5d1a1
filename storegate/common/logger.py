"""Logging infrastructure for storegate.

Every module logs through ``get_logger(component)``, which returns a child
of the ``storegate`` logger. The application configures that one logger
from the ``logging`` section of the YAML config with ``configure_logging``.

Handlers installed here are tagged so a later call (a second ``create_app``,
a changed log level) replaces them instead of stacking new ones. Handlers
attached by anything else, such as pytest's capture, are left alone.
"""

import logging
import logging.handlers
import os
from typing import Optional

from .config import LoggingConfig

ROOT_LOGGER_NAME = "storegate"

DEFAULT_FORMAT = "%(asctime)s [%(levelname)s] [%(name)s] %(message)s"
ISO_DATE_FORMAT = "%Y-%m-%dT%H:%M:%S"

_OWNED = "_storegate_handler"


def _resolve_level(level: str) -> int:
    value = logging.getLevelName(str(level).upper())
    if not isinstance(value, int):
        raise ValueError(
            f"Invalid log level: {level}. "
            f"Must be one of: DEBUG, INFO, WARNING, ERROR, CRITICAL"
        )
    return value


def _owned_handlers(logger: logging.Logger) -> list:
    return [h for h in logger.handlers if getattr(h, _OWNED, False)]


def setup_logger(
    name: str = ROOT_LOGGER_NAME,
    log_dir: str = "/var/log/storegate",
    level: str = "INFO",
    log_format: Optional[str] = None,
    file_logging: bool = False,
    console_logging: bool = True,
    max_bytes: int = 10485760,  # 10MB
    backup_count: int = 5,
) -> logging.Logger:
    """Configure a storegate logger, replacing handlers from earlier calls.

    Args:
        name: Logger name (``storegate`` covers every component)
        log_dir: Directory for the rotating log file
        level: DEBUG, INFO, WARNING, ERROR or CRITICAL
        log_format: Format string; timestamps are always ISO 8601
        file_logging: Write ``<name>.log`` under ``log_dir``
        console_logging: Write to stderr
        max_bytes: Size at which the log file rotates
        backup_count: Rotated files to keep

    Returns:
        The configured logger

    Raises:
        ValueError: On an unknown level
    """
    logger = logging.getLogger(name)
    logger.setLevel(_resolve_level(level))

    for handler in _owned_handlers(logger):
        logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(log_format or DEFAULT_FORMAT, datefmt=ISO_DATE_FORMAT)
    handlers: list = []

    if file_logging:
        os.makedirs(log_dir, exist_ok=True)
        handlers.append(logging.handlers.RotatingFileHandler(
            os.path.join(log_dir, f"{name}.log"),
            maxBytes=max_bytes,
            backupCount=backup_count,
        ))
    if console_logging:
        handlers.append(logging.StreamHandler())

    for handler in handlers:
        handler.setFormatter(formatter)
        setattr(handler, _OWNED, True)
        logger.addHandler(handler)

    return logger


def configure_logging(config: LoggingConfig) -> logging.Logger:
    """Apply the ``logging`` section of the application config."""
    return setup_logger(
        level=config.level,
        log_dir=config.dir,
        file_logging=config.file_logging,
    )


def get_logger(component: str) -> logging.Logger:
    """Get the logger for a storegate component.

    Args:
        component: Component name, e.g. ``"catalog"`` or ``"guard"``

    Returns:
        Logger named ``storegate.<component>``
    """
    if component == ROOT_LOGGER_NAME or component.startswith(ROOT_LOGGER_NAME + "."):
        return logging.getLogger(component)
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{component}")
