"""
Decorators for automatic logging of repository operations.

These decorators enable traceability without cluttering business logic.
"""

import functools
import inspect
import time
from typing import Any, Callable

from .logger import get_sprig_logger, log_operation


def track_operation(operation_type: str) -> Callable:
    """
    Decorator to track repository operations.

    Logs the start, completion and failure of an operation together with
    its (truncated) arguments and duration, then re-raises any error.

    Args:
        operation_type: Type of operation (e.g., "commit", "merge", "fetch")

    Example:
        >>> @track_operation("commit")
        ... def commit(self, message: str) -> str:
        ...     ...
    """

    def decorator(func: Callable) -> Callable:
        signature = inspect.signature(func)

        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            log = get_sprig_logger("repository")

            bound_args = signature.bind(*args, **kwargs)
            bound_args.apply_defaults()
            arguments = {
                k: str(v)[:100] for k, v in bound_args.arguments.items() if k != "self"
            }

            log_operation(
                log,
                operation=operation_type,
                function=func.__name__,
                arguments=arguments,
            )
            start = time.perf_counter()

            try:
                result = func(*args, **kwargs)
            except Exception as e:
                log_operation(
                    log,
                    operation=f"{operation_type}_error",
                    function=func.__name__,
                    error=str(e),
                    error_type=type(e).__name__,
                    success=False,
                )
                raise

            log_operation(
                log,
                operation=f"{operation_type}_complete",
                function=func.__name__,
                duration_ms=round((time.perf_counter() - start) * 1000, 3),
                success=True,
            )
            return result

        return wrapper

    return decorator
