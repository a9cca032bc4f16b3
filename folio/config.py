"""
Configuration management for folio.

This module provides centralized configuration for:
- Version store settings
- History file location
- Logging settings
"""

import os
from pathlib import Path
from typing import Literal, cast

from dotenv import load_dotenv
from pydantic import BaseModel, Field

# Load environment variables from .env file
load_dotenv()

LogLevel = Literal["TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"]


class StoreConfig(BaseModel):
    """Configuration for the document version store."""

    compression_threshold: int = Field(
        default=5,
        ge=0,
        description="Versions with a larger id are stored as patches against their parent",
    )
    default_branch: str = Field(
        default="main", min_length=1, description="Branch a new store starts on"
    )
    history_file: str = Field(
        default="history.json", description="File used by the save and load commands"
    )

    @property
    def history_path(self) -> Path:
        """Get path to the history file."""
        return Path(self.history_file)


class LogConfig(BaseModel):
    """Configuration for logging system."""

    level: LogLevel = Field(default="WARNING", description="Logging level")
    format: str = Field(
        default="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
        "<level>{level: <8}</level> | "
        "<cyan>{extra[component]}</cyan> | "
        "<level>{message}</level>",
        description="Log message format",
    )
    rotation: str = Field(default="10 MB", description="Log file rotation size")
    retention: str = Field(default="1 month", description="Log file retention period")
    log_dir: str = Field(default="logs", description="Directory for log files")
    enable_file_logging: bool = Field(
        default=False, description="Whether to enable file logging"
    )
    enable_console_logging: bool = Field(
        default=True, description="Whether to enable console logging"
    )


class Config(BaseModel):
    """Main configuration object for folio."""

    store: StoreConfig = Field(default_factory=StoreConfig)
    logging: LogConfig = Field(default_factory=LogConfig)

    @classmethod
    def from_env(cls) -> "Config":
        """Create configuration from environment variables."""
        return cls(
            store=StoreConfig(
                compression_threshold=int(os.getenv("FOLIO_COMPRESSION_THRESHOLD", "5")),
                default_branch=os.getenv("FOLIO_DEFAULT_BRANCH", "main"),
                history_file=os.getenv("FOLIO_HISTORY_FILE", "history.json"),
            ),
            logging=LogConfig(
                level=cast(LogLevel, os.getenv("FOLIO_LOG_LEVEL", "WARNING").upper()),
                log_dir=os.getenv("FOLIO_LOG_DIR", "logs"),
                enable_file_logging=os.getenv("FOLIO_LOG_TO_FILE", "false").lower()
                in ("1", "true", "yes"),
            ),
        )


# Global configuration instance
config = Config.from_env()
