"""
Unit tests for logging infrastructure.

Tests FolioLogger handler setup and component loggers.
"""

import tempfile
from pathlib import Path

import pytest
from loguru import logger

from folio.config import LogConfig
from folio.logging import (
    FolioLogger,
    get_folio_logger,
    get_logger_instance,
    initialize_logging,
    initialize_logging_from_config,
    log_store_operation,
)


@pytest.fixture(autouse=True)
def reset_handlers():
    """Drop handlers added by a test so log files can be cleaned up."""
    yield
    logger.remove()


class TestFolioLogger:
    """Tests for FolioLogger class."""

    def test_logger_initialization(self) -> None:
        """Test logger initialization."""
        with tempfile.TemporaryDirectory() as tmpdir:
            folio_logger = FolioLogger(
                log_dir=Path(tmpdir),
                level="INFO",
                enable_file_logging=False,
            )
            assert folio_logger.log_dir == Path(tmpdir)
            assert folio_logger.level == "INFO"

    def test_no_log_directory_without_file_logging(self) -> None:
        """Test that the log directory is only created for file logging."""
        with tempfile.TemporaryDirectory() as tmpdir:
            log_dir = Path(tmpdir) / "logs"
            FolioLogger(log_dir=log_dir, enable_file_logging=False)
            assert not log_dir.exists()

    def test_file_logging_writes_logs(self) -> None:
        """Test that file logging writes the main and error logs."""
        with tempfile.TemporaryDirectory() as tmpdir:
            log_dir = Path(tmpdir) / "logs"
            folio_logger = FolioLogger(
                log_dir=log_dir,
                level="INFO",
                enable_file_logging=True,
                enable_console_logging=False,
            )
            component_logger = folio_logger.get_logger("storage")
            component_logger.info("saved history")
            component_logger.error("write failed")
            logger.remove()

            main_log = (log_dir / "folio.log").read_text()
            error_log = (log_dir / "errors.log").read_text()
            assert "storage" in main_log
            assert "saved history" in main_log
            assert "write failed" in error_log
            assert "saved history" not in error_log

    def test_level_filters_messages(self) -> None:
        """Test that messages below the level are dropped."""
        with tempfile.TemporaryDirectory() as tmpdir:
            log_dir = Path(tmpdir)
            FolioLogger(
                log_dir=log_dir,
                level="WARNING",
                enable_file_logging=True,
                enable_console_logging=False,
            )
            get_folio_logger("test").info("quiet")
            get_folio_logger("test").warning("loud")
            logger.remove()

            content = (log_dir / "folio.log").read_text()
            assert "loud" in content
            assert "quiet" not in content


class TestComponentLoggers:
    """Tests for module-level helpers."""

    def test_get_folio_logger_binds_component(self) -> None:
        """Test that component loggers carry the component name."""
        records = []
        logger.remove()
        logger.add(lambda message: records.append(message.record), level="DEBUG")

        get_folio_logger("version_control").debug("hello")

        assert records[0]["extra"]["component"] == "version_control"
        assert records[0]["message"] == "hello"

    def test_log_store_operation(self) -> None:
        """Test that store operations log their context as extras."""
        records = []
        logger.remove()
        logger.add(lambda message: records.append(message.record), level="DEBUG")

        log_store_operation(get_folio_logger("store"), "commit", version_id=3)

        record = records[0]
        assert record["message"] == "Store operation: commit"
        assert record["extra"]["operation"] == "commit"
        assert record["extra"]["version_id"] == 3
        assert "timestamp" in record["extra"]

    def test_initialize_logging_sets_global(self) -> None:
        """Test that initialize_logging stores the global instance."""
        with tempfile.TemporaryDirectory() as tmpdir:
            folio_logger = initialize_logging(
                log_dir=Path(tmpdir), level="ERROR", enable_console_logging=False
            )
            assert get_logger_instance() is folio_logger
            assert folio_logger.level == "ERROR"

    def test_initialize_logging_from_config(self) -> None:
        """Test that settings and the level override reach the logger."""
        with tempfile.TemporaryDirectory() as tmpdir:
            log_config = LogConfig(
                level="INFO",
                log_dir=str(Path(tmpdir) / "logs"),
                enable_file_logging=True,
                enable_console_logging=False,
            )
            folio_logger = initialize_logging_from_config(log_config, level="debug")
            get_folio_logger("test").debug("detail")
            logger.remove()

            assert folio_logger.level == "DEBUG"
            assert folio_logger.log_dir == Path(tmpdir) / "logs"
            assert "detail" in (Path(tmpdir) / "logs" / "folio.log").read_text()
