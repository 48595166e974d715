"""
Fallback-to-default results.

Every collector in the pipeline either produces a value or a fixed default,
never an exception. ``Outcome`` carries which of the two happened so callers
and tests can tell a genuine zero from a failed lookup.
"""

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class Outcome(Generic[T]):
    """Either a successful value or the default used in its place."""

    value: T
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T) -> "Outcome[T]":
        return cls(value=value)

    @classmethod
    def fallback(cls, default: T, error: str) -> "Outcome[T]":
        return cls(value=default, error=error)


def attempt(func: Callable[[], T], default: T, description: str) -> Outcome[T]:
    """
    Run ``func`` and fall back to ``default`` on any exception.

    Args:
        func: Zero-argument callable producing the value
        default: Value used when ``func`` raises
        description: Short action description for the warning log

    Returns:
        Outcome holding the value or the default
    """
    try:
        return Outcome.success(func())
    except Exception as e:
        logger.warning(f"Failed to {description}: {e}")
        return Outcome.fallback(default, str(e))


async def attempt_async(
    factory: Callable[[], Awaitable[T]],
    default: T,
    description: str,
) -> Outcome[T]:
    """Async counterpart of :func:`attempt`."""
    try:
        return Outcome.success(await factory())
    except Exception as e:
        logger.warning(f"Failed to {description}: {e}")
        return Outcome.fallback(default, str(e))
