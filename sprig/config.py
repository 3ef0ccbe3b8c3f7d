"""
Configuration management for sprig.

This module provides centralized configuration for all components:
- Repository layout settings
- Logging settings
"""

import os
from typing import Literal, cast

from dotenv import load_dotenv
from pydantic import BaseModel, Field

# Load environment variables from .env file
load_dotenv()


class RepositoryConfig(BaseModel):
    """Configuration for repository layout and defaults."""

    metadata_dir: str = Field(
        default=".sprig",
        min_length=1,
        description="Name of the metadata directory inside the working directory",
    )
    default_branch: str = Field(
        default="master",
        min_length=1,
        description="Branch created by init and pointed at the root commit",
    )


class LogConfig(BaseModel):
    """Configuration for logging system."""

    level: Literal["TRACE", "DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="WARNING", description="Logging level"
    )
    format: str = Field(
        default="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
        "<level>{level: <8}</level> | "
        "<cyan>{name}</cyan>:<cyan>{function}</cyan> - "
        "<level>{message}</level>",
        description="Log message format",
    )
    rotation: str = Field(default="10 MB", description="Log file rotation size")
    retention: str = Field(default="1 month", description="Log file retention period")
    log_dir: str = Field(default=".sprig/logs", description="Directory for log files")
    enable_file_logging: bool = Field(
        default=False, description="Whether to enable file logging"
    )
    enable_console_logging: bool = Field(
        default=True, description="Whether to enable console logging"
    )


class Config(BaseModel):
    """Main configuration object for sprig."""

    repository: RepositoryConfig = Field(default_factory=RepositoryConfig)
    logging: LogConfig = Field(default_factory=LogConfig)

    @classmethod
    def from_env(cls) -> "Config":
        """Create configuration from environment variables."""
        metadata_dir = os.getenv("SPRIG_DIR", ".sprig")
        return cls(
            repository=RepositoryConfig(
                metadata_dir=metadata_dir,
                default_branch=os.getenv("SPRIG_DEFAULT_BRANCH", "master"),
            ),
            logging=LogConfig(
                level=cast(
                    Literal["TRACE", "DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
                    os.getenv("SPRIG_LOG_LEVEL", "WARNING"),
                ),
                log_dir=os.getenv("SPRIG_LOG_DIR", f"{metadata_dir}/logs"),
                enable_file_logging=os.getenv("SPRIG_LOG_FILE", "false").lower()
                in ("1", "true", "yes"),
            ),
        )


# Global configuration instance
# This can be imported throughout the codebase
config = Config.from_env()
