"""
Run-and-recover helpers.

Parsing, merging, prize checking and number generation must never take the
pipeline down. Those operations run through `safe_execute` (or the `recover`
decorator), which logs the failure and hands back a fallback value instead.
"""
import copy
import functools
from typing import Any, Callable, Optional, TypeVar

from loguru import logger

T = TypeVar("T")


def safe_execute(operation_name: str, func: Callable[..., T], fallback: Any = None, *args, **kwargs) -> T:
    """
    Runs `func(*args, **kwargs)` and returns its result, or a copy of
    `fallback` when it raises.

    Args:
        operation_name: Name used in the log lines
        func: Operation to run
        fallback: Value returned on failure (deep-copied, so mutable
            fallbacks are never shared between calls)

    Returns:
        The operation's result or the fallback value.
    """
    try:
        logger.debug(f"Executing: {operation_name}")
        return func(*args, **kwargs)
    except Exception as e:
        logger.opt(exception=e).error(f"Failed: {operation_name}: {e}")
        return copy.deepcopy(fallback)


def recover(fallback: Any = None, operation_name: Optional[str] = None):
    """
    Decorator form of `safe_execute`.

    Example:
        @recover(fallback=[])
        def parse_rows(payload): ...
    """
    def decorator(func):
        name = operation_name or func.__name__

        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            return safe_execute(name, func, fallback, *args, **kwargs)

        return wrapper

    return decorator
