"""
Logging infrastructure for folio.

Provides component-bound loguru loggers and handler configuration.
"""

from .logger import (
    FolioLogger,
    get_folio_logger,
    initialize_logging,
    initialize_logging_from_config,
    get_logger_instance,
    log_store_operation,
)

__all__ = [
    "FolioLogger",
    "get_folio_logger",
    "initialize_logging",
    "initialize_logging_from_config",
    "get_logger_instance",
    "log_store_operation",
]
