"""Logging providers used as the fallback for unset error callbacks."""

import logging
from typing import Any, Callable


def noop_log(*args: Any) -> None:
    """Discard everything"""


def logger_provider(
    logger: logging.Logger | logging.LoggerAdapter,
    level: int = logging.WARNING,
) -> Callable[..., None]:
    """Adapt a logger into a print-style logging provider"""

    def log(*args: Any) -> None:
        logger.log(level, " ".join(str(arg) for arg in args))

    return log
