# log.py
# SPDX-License-Identifier: MIT
"""Logging helpers for the provmeta package.

The package logger carries a NullHandler so that embedding applications see
no output until they opt in through :func:`configure_logging`.
"""

from __future__ import annotations

import logging
import sys

__all__ = [
    "PACKAGE_LOGGER_NAME",
    "get_logger",
    "configure_logging",
]

PACKAGE_LOGGER_NAME = "provmeta"
DEFAULT_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
_OWNED_ATTR = "_provmeta_owned"

logging.getLogger(PACKAGE_LOGGER_NAME).addHandler(logging.NullHandler())


def _coerce_level(level: int | str) -> int:
    if isinstance(level, str):
        return getattr(logging, level.upper(), logging.INFO)
    return level


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a logger under the provmeta namespace.

    Args:
        name (str | None): Fully qualified logger name, usually ``__name__``.
            Defaults to the package logger.

    Returns:
        logging.Logger: Logger instance for the requested name.
    """
    return logging.getLogger(name or PACKAGE_LOGGER_NAME)


def configure_logging(
    *,
    level: int | str = logging.INFO,
    stream=None,
    fmt: str | None = None,
    datefmt: str | None = None,
    propagate: bool | None = None,
    logger_name: str = PACKAGE_LOGGER_NAME,
) -> logging.Logger:
    """Attach (or retarget) the single provmeta stream handler on a logger.

    Args:
        level (int | str): Logging level or level name.
        stream (IO[str] | None): Target stream; defaults to sys.stderr.
        fmt (str | None): Log format string.
        datefmt (str | None): Date format string for the handler.
        propagate (bool | None): Whether records bubble up to ancestor
            loggers. None keeps propagation on so pytest's caplog works.
        logger_name (str): Logger to configure.

    Returns:
        logging.Logger: The configured logger.
    """
    logger = get_logger(logger_name or PACKAGE_LOGGER_NAME)
    logger.setLevel(_coerce_level(level))
    logger.propagate = True if propagate is None else bool(propagate)

    handler = next((h for h in logger.handlers if getattr(h, _OWNED_ATTR, False)), None)
    if handler is None:
        handler = logging.StreamHandler()
        setattr(handler, _OWNED_ATTR, True)
        logger.addHandler(handler)
    # Repeated calls retarget the one handler instead of stacking new ones.
    target = stream if stream is not None else sys.stderr
    if getattr(handler.stream, "closed", False):
        handler.stream = target
    else:
        handler.setStream(target)
    handler.setFormatter(logging.Formatter(fmt=fmt or DEFAULT_FORMAT, datefmt=datefmt))
    return logger

