"""
Logging infrastructure for sprig.

Provides structured logging with:
- Component-specific loggers
- Optional rotating file logs
- Operation tracking for repository commands
"""

import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

from loguru import logger


class SprigLogger:
    """
    Logger setup for sprig.

    Features:
    - Structured logging with context
    - Console output on stderr, so command output on stdout stays clean
    - Log rotation and retention for file logs
    """

    def __init__(
        self,
        log_dir: Optional[Path] = None,
        rotation: str = "10 MB",
        retention: str = "1 month",
        level: str = "WARNING",
        format_string: Optional[str] = None,
        enable_file_logging: bool = False,
        enable_console_logging: bool = True,
    ):
        """
        Initialize the sprig logger.

        Args:
            log_dir: Directory for log files
            rotation: When to rotate log files
            retention: How long to keep old logs
            level: Default log level
            format_string: Custom format string
            enable_file_logging: Whether to log to files
            enable_console_logging: Whether to log to console
        """
        self.log_dir = log_dir or Path(".sprig") / "logs"
        self.rotation = rotation
        self.retention = retention
        self.level = level

        self.format_string = format_string or (
            "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
            "<level>{level: <8}</level> | "
            "<cyan>{extra[component]}</cyan> | "
            "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
            "<level>{message}</level>"
        )

        # Remove default handler
        logger.remove()
        logger.configure(extra={"component": "system"})

        if enable_console_logging:
            logger.add(
                sys.stderr,
                format=self.format_string,
                level=level,
                colorize=True,
            )

        if enable_file_logging:
            self._add_file_handlers()

        self.logger = logger.bind(component="system")

    def _add_file_handlers(self) -> None:
        """Add the main and errors-only log files."""
        self.log_dir.mkdir(parents=True, exist_ok=True)

        logger.add(
            self.log_dir / "sprig.log",
            format=self.format_string,
            level=self.level,
            rotation=self.rotation,
            retention=self.retention,
        )

        logger.add(
            self.log_dir / "errors.log",
            format=self.format_string,
            level="ERROR",
            rotation=self.rotation,
            retention=self.retention,
        )

    def get_logger(self, component: str) -> Any:
        """
        Get a logger bound to a specific component.

        Args:
            component: Component name (e.g., "repository", "remote", "cli")

        Returns:
            Logger instance bound to the component
        """
        return logger.bind(component=component)


def get_sprig_logger(component: str = "system") -> Any:
    """
    Get a component-specific logger.

    Example:
        >>> log = get_sprig_logger("remote")
        >>> log.info("Fetched branch", remote="origin", branch="master")
    """
    return logger.bind(component=component)


def log_operation(logger_instance: Any, operation: str, **kwargs: Any) -> None:
    """
    Log a repository operation event.

    Args:
        logger_instance: Logger to use
        operation: Operation event (e.g., "commit", "commit_complete")
        **kwargs: Additional context
    """
    logger_instance.debug(
        f"Operation: {operation}",
        operation=operation,
        timestamp=datetime.now(timezone.utc).isoformat(),
        **kwargs,
    )


# Global logger instance
_sprig_logger: Optional[SprigLogger] = None


def initialize_logging(
    log_dir: Optional[Path] = None, level: str = "WARNING", **kwargs: Any
) -> SprigLogger:
    """
    Initialize the sprig logging system.

    This should be called once at application startup.

    Args:
        log_dir: Directory for log files
        level: Default log level
        **kwargs: Additional configuration for SprigLogger

    Returns:
        Configured SprigLogger instance
    """
    global _sprig_logger
    _sprig_logger = SprigLogger(log_dir=log_dir, level=level, **kwargs)
    return _sprig_logger

