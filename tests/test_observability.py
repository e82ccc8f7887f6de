"""
Tests for observability — logging setup and level resolution.
"""

import logging
from pathlib import Path

import pytest

from modpub.core.observability.logging_config import (
    ENV_LOG_FILE,
    ENV_LOG_FILE_LEVEL,
    ENV_LOG_LEVEL,
    resolve_level,
    setup_logging,
)


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


class TestResolveLevel:
    def test_flag_precedence(self):
        env = {ENV_LOG_LEVEL: "ERROR"}
        assert resolve_level(debug=True, verbose=True, environ=env) == "DEBUG"
        assert resolve_level(verbose=True, quiet=True, environ=env) == "INFO"
        assert resolve_level(quiet=True, environ=env) == "ERROR"

    def test_env_fallback(self):
        assert resolve_level(environ={ENV_LOG_LEVEL: "INFO"}) == "INFO"

    def test_default(self):
        assert resolve_level(environ={}) == "WARNING"
        assert resolve_level(environ={ENV_LOG_LEVEL: ""}) == "WARNING"


class TestSetupLogging:
    def test_console_level(self, restore_root_logger):
        assert setup_logging("INFO", environ={}) == logging.INFO
        root = restore_root_logger
        assert root.level == logging.INFO
        assert len(root.handlers) == 1

    def test_level_from_flags(self, restore_root_logger):
        assert setup_logging(verbose=True, environ={ENV_LOG_LEVEL: "ERROR"}) == logging.INFO
        assert setup_logging(environ={ENV_LOG_LEVEL: "ERROR"}) == logging.ERROR
        assert setup_logging(debug=True, quiet=True, environ={}) == logging.DEBUG

    def test_unknown_level_falls_back_to_warning(self, restore_root_logger):
        setup_logging("LOUD", environ={})
        assert restore_root_logger.level == logging.WARNING

    def test_formats_by_level(self, restore_root_logger):
        setup_logging("WARNING", environ={})
        assert restore_root_logger.handlers[0].formatter._fmt == "%(message)s"
        setup_logging("DEBUG", environ={})
        assert "%(lineno)d" in restore_root_logger.handlers[0].formatter._fmt

    def test_file_handler_lower_level(self, restore_root_logger, tmp_path: Path):
        log_file = tmp_path / "modpub.log"
        setup_logging("WARNING", log_file=str(log_file), log_file_level="DEBUG", environ={})
        root = restore_root_logger
        assert root.level == logging.DEBUG
        assert len(root.handlers) == 2

        logging.getLogger("modpub.test").debug("to the file only")
        for handler in root.handlers:
            handler.flush()
        assert "to the file only" in log_file.read_text(encoding="utf-8")

    def test_file_from_environment(self, restore_root_logger, tmp_path: Path):
        log_file = tmp_path / "env.log"
        env = {ENV_LOG_FILE: str(log_file), ENV_LOG_FILE_LEVEL: "INFO"}
        setup_logging(environ=env)
        root = restore_root_logger
        assert root.level == logging.INFO
        assert [h.level for h in root.handlers] == [logging.WARNING, logging.INFO]

    def test_third_party_quieted(self, restore_root_logger):
        setup_logging("INFO", environ={})
        assert logging.getLogger("yaml").level == logging.WARNING
