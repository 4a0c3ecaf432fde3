"""Tests for logging setup."""

import logging
from pathlib import Path

from sqlsend.config import LoggingConfig
from sqlsend.logging_setup import setup_logging


class TestSetupLogging:
    """Test setup_logging()."""

    def teardown_method(self):
        setup_logging(LoggingConfig())

    def test_level(self):
        logger = setup_logging(LoggingConfig(level="warning"))
        assert logger.level == logging.WARNING

    def test_unknown_level_defaults_to_info(self):
        assert setup_logging(LoggingConfig(level="chatty")).level == logging.INFO

    def test_disabled_has_no_file_handler(self):
        logger = setup_logging(LoggingConfig(enabled=False))
        assert not any(isinstance(h, logging.FileHandler) for h in logger.handlers)

    def test_file_handler(self, temp_dir):
        path = Path(temp_dir) / "logs" / "sqlsend.log"
        logger = setup_logging(LoggingConfig(enabled=True, path=str(path)))
        logging.getLogger("sqlsend.router").info("bound q.sql")
        for handler in logger.handlers:
            handler.flush()
        assert "bound q.sql" in path.read_text()

    def test_debug_adds_stream_handler(self):
        logger = setup_logging(LoggingConfig(level="debug"))
        assert any(type(h) is logging.StreamHandler for h in logger.handlers)

    def test_repeat_calls_replace_handlers(self, temp_dir):
        path = Path(temp_dir) / "sqlsend.log"
        config = LoggingConfig(enabled=True, path=str(path))
        setup_logging(config)
        logger = setup_logging(config)
        assert sum(isinstance(h, logging.FileHandler) for h in logger.handlers) == 1
