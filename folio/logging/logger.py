"""
Logging infrastructure for folio.

Provides structured logging with:
- Component-bound loggers
- Console and rotating file handlers
- Structured store operation records
"""

import sys
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

from loguru import logger

from folio.config import LogConfig


class FolioLogger:
    """
    Configures loguru handlers for the folio tools.

    Features:
    - Structured logging with a ``component`` context
    - Optional log file with rotation and retention
    - Separate error log
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
        Initialize the folio logger.

        Args:
            log_dir: Directory for log files
            rotation: When to rotate log files
            retention: How long to keep old logs
            level: Default log level
            format_string: Custom format string
            enable_file_logging: Whether to log to files
            enable_console_logging: Whether to log to the console
        """
        self.log_dir = log_dir or Path("logs")
        self.rotation = rotation
        self.retention = retention
        self.level = level
        self.enable_file_logging = enable_file_logging

        self.format_string = format_string or (
            "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
            "<level>{level: <8}</level> | "
            "<cyan>{extra[component]}</cyan> | "
            "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
            "<level>{message}</level>"
        )

        # Records logged through the bare logger still need a component
        logger.configure(extra={"component": "folio"})
        logger.remove()

        if enable_console_logging:
            logger.add(
                sys.stderr,
                format=self.format_string,
                level=level,
                colorize=True,
            )

        if enable_file_logging:
            self.log_dir.mkdir(parents=True, exist_ok=True)
            self._add_file_handlers()

        self.logger = logger.bind(component="system")

    def _add_file_handlers(self) -> None:
        """Add the main and error log files."""
        logger.add(
            self.log_dir / "folio.log",
            format=self.format_string,
            level=self.level,
            rotation=self.rotation,
            retention=self.retention,
            compression="zip",
        )

        logger.add(
            self.log_dir / "errors.log",
            format=self.format_string,
            level="ERROR",
            rotation=self.rotation,
            retention=self.retention,
            compression="zip",
        )

    def get_logger(self, component: str) -> Any:
        """
        Get a logger bound to a specific component.

        Args:
            component: Component name (e.g., "version_control", "storage")
        """
        return logger.bind(component=component)


def get_folio_logger(component: str = "system") -> Any:
    """
    Get a component-specific logger.

    Example:
        >>> log = get_folio_logger("storage")
        >>> log.info("Saved history", path="history.json")
    """
    return logger.bind(component=component)


def log_store_operation(logger_instance: Any, operation: str, **kwargs: Any) -> None:
    """
    Log a state-changing store operation.

    Args:
        logger_instance: Logger to use
        operation: Operation name (e.g., "commit", "rebase")
        **kwargs: Additional context
    """
    logger_instance.info(
        f"Store operation: {operation}",
        operation=operation,
        timestamp=datetime.now().isoformat(),
        **kwargs,
    )


_folio_logger: Optional[FolioLogger] = None


def initialize_logging(
    log_dir: Optional[Path] = None, level: str = "WARNING", **kwargs: Any
) -> FolioLogger:
    """
    Initialize the folio logging system.

    This should be called once at application startup.

    Args:
        log_dir: Directory for log files
        level: Default log level
        **kwargs: Additional configuration for FolioLogger

    Returns:
        Configured FolioLogger instance
    """
    global _folio_logger
    _folio_logger = FolioLogger(log_dir=log_dir, level=level, **kwargs)
    return _folio_logger


def get_logger_instance() -> Optional[FolioLogger]:
    """Get the global logger instance."""
    return _folio_logger


def initialize_logging_from_config(
    log_config: LogConfig, level: Optional[str] = None
) -> FolioLogger:
    """
    Initialize logging from a ``LogConfig``.

    Args:
        log_config: Logging section of the folio configuration
        level: Level overriding ``log_config.level``

    Returns:
        Configured FolioLogger instance
    """
    return initialize_logging(
        log_dir=Path(log_config.log_dir),
        level=(level or log_config.level).upper(),
        format_string=log_config.format,
        rotation=log_config.rotation,
        retention=log_config.retention,
        enable_file_logging=log_config.enable_file_logging,
        enable_console_logging=log_config.enable_console_logging,
    )
