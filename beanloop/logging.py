"""Logging helpers for beanloop.

All modules log under the ``beanloop`` hierarchy. The CLI configures the
handler once per invocation; library callers can attach their own.
"""

from __future__ import annotations

import logging

_LOGGER_NAME = "beanloop"


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a module-scoped logger under the beanloop hierarchy."""
    full_name = f"{_LOGGER_NAME}.{name}" if name else _LOGGER_NAME
    return logging.getLogger(full_name)


def configure_logging(*, verbose: bool = False) -> logging.Logger:
    """Configure the beanloop logger with a console handler.

    Args:
        verbose: Emit DEBUG records when true, INFO otherwise.

    Returns:
        The configured top-level logger.
    """
    level = logging.DEBUG if verbose else logging.INFO
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(level)

    # Reset handlers so repeated CLI invocations don't duplicate output.
    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter("[beanloop] %(levelname)s %(message)s"))
    logger.addHandler(handler)
    return logger


__all__ = ["configure_logging", "get_logger"]
