from __future__ import annotations

import logging

PACKAGE_LOGGER = "campus_attendance"


def setup_logging(level: str = "INFO") -> logging.Logger:
    """Set the package logger level without touching the root logger.

    A basic stream handler is attached only when nothing upstream is
    configured, so running under gunicorn/Flask keeps their formatting.
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(getattr(logging, str(level).upper(), logging.INFO))
    if not logger.handlers and not logging.getLogger().handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s [%(name)s] %(message)s"))
        logger.addHandler(handler)
    logger.propagate = True
    return logger


def get_logger(name: str | None = None) -> logging.Logger:
    base = logging.getLogger(PACKAGE_LOGGER)
    if not name:
        return base
    if name.startswith(PACKAGE_LOGGER + "."):
        name = name[len(PACKAGE_LOGGER) + 1 :]
    return base.getChild(name)
