"""
Centralized logging using Loguru with context-aware verbosity.

LOG() reads the verbosity bound to the current execution context instead
of taking it as a parameter, so rules and the executor can log without
threading state through every call.

Verbosity lives in a ContextVar. asyncio copies the context into each task,
so concurrent exports started as separate tasks keep independent levels.

Usage:
    from vaultpress.lib.log import LOG, verbosity_connect

    verbosity_connect(2)
    LOG("Shown at verbosity >= 1", level=1)
    LOG("Shown at verbosity >= 2", level=2)
    LOG("No rule for Table", level=2, severity="WARNING")
"""

from loguru import logger
from typing import Any
from contextvars import ContextVar
import sys

_verbosity: ContextVar[int] = ContextVar('vaultpress_verbosity', default=0)

logger_format = (
    "<green>{time:HH:mm:ss}</green> │ "
    "<level>{level: <7}</level> │ "
    "<cyan>{module: <12}</cyan>:<cyan>{function: <20}</cyan> ║ "
    "<level>{message}</level>"
)

logger.remove()
logger.add(sys.stderr, format=logger_format, level="DEBUG")


def verbosity_connect(verbosity: int) -> None:
    """
    Bind a verbosity level to the current context.

    Args:
        verbosity: 0 = silent, 1 = normal, 2 = verbose, 3 = trace
    """
    _verbosity.set(verbosity)


def state_connectToLogger(state: Any) -> None:
    """
    Bind the verbosity of a ProgramState (or anything with .verbosity).

    Called at the start of the CLI pipeline; objects without a verbosity
    attribute leave logging silent.
    """
    verbosity_connect(getattr(state, 'verbosity', 0))


def verbosity_get() -> int:
    return _verbosity.get()


def LOG(message: str, level: int = 1, severity: str = "DEBUG", **kwargs: Any) -> None:
    """
    Log message if the current context's verbosity allows.

    Args:
        message: Log message to display
        level: Minimum verbosity required (1=normal, 2=verbose, 3=trace)
        severity: Loguru level name used when the message is emitted
        **kwargs: Additional loguru metadata

    Example:
        LOG("Exporting 'intro' for hugo-blowfish", level=1)
        LOG("Rule 'callout' on Callout", level=3)
    """
    if _verbosity.get() >= level:
        logger.opt(depth=1).log(severity, message, **kwargs)
