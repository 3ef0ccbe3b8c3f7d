"""
Logging infrastructure for sprig.

Provides structured logging and a decorator for tracking operations.
"""

from .logger import (
    SprigLogger,
    get_sprig_logger,
    initialize_logging,
    log_operation,
)

from .decorators import track_operation

__all__ = [
    # Logger
    "SprigLogger",
    "get_sprig_logger",
    "initialize_logging",
    "log_operation",
    # Decorators
    "track_operation",
]
