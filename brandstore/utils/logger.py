"""
Logging for BrandStore.

All modules log under the ``brandstore`` logger tree (``brandstore.catalog.lifecycle``,
``brandstore.api.uploads`` ...) to a single stdout handler. ``LOG_LEVEL`` sets the
level at import; once the service has loaded its StoreConfig, ``create_app``
calls ``set_level`` with ``log_level`` so the YAML value (or its env override)
wins for the rest of the process.
"""
import logging
import os
import sys

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

logger = logging.getLogger("brandstore")
logger.setLevel(os.getenv("LOG_LEVEL", "INFO").upper())

if not logger.handlers:
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT))
    logger.addHandler(handler)

# Keep uvicorn's root handlers from printing every line twice
logger.propagate = False


def get_logger(name: str = None) -> logging.Logger:
    """Logger for ``brandstore.<name>``, or the service root logger when no name is given."""
    if name:
        return logging.getLogger(f"brandstore.{name}")
    return logger


def set_level(level: str) -> None:
    """Apply the configured level to the service root logger."""
    logger.setLevel(level.upper())
