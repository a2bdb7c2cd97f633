# tests/core/test_logging_config.py

import logging
import os
from logging.handlers import RotatingFileHandler

import pytest

from community_auth.core.config import Settings
from community_auth.core.logging_config import LOG_FILE_NAME, setup_logging


@pytest.fixture
def root_logger():
    """Root logger, restored to its previous handlers and level afterwards"""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level

    yield root

    for handler in list(root.handlers):
        if handler not in handlers:
            root.removeHandler(handler)
            handler.close()
    root.setLevel(level)


def file_handlers(root, log_dir):
    path = os.path.abspath(log_dir / LOG_FILE_NAME)
    return [h for h in root.handlers if isinstance(h, RotatingFileHandler) and h.baseFilename == path]


class TestSetupLogging:

    def test_level_from_settings(self, root_logger, tmp_path):
        setup_logging(Settings(_env_file=None, LOG_LEVEL="debug", LOG_DIR=str(tmp_path)))

        assert root_logger.level == logging.DEBUG
        assert (tmp_path / LOG_FILE_NAME).exists()

    def test_level_from_environment(self, root_logger, tmp_path, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "WARNING")
        monkeypatch.setenv("LOG_DIR", str(tmp_path / "nested"))

        current = Settings(_env_file=None)
        setup_logging(current)

        assert current.LOG_LEVEL == "WARNING"
        assert root_logger.level == logging.WARNING
        assert len(file_handlers(root_logger, tmp_path / "nested")) == 1

    def test_repeated_setup_attaches_handlers_once(self, root_logger, tmp_path):
        current = Settings(_env_file=None, LOG_DIR=str(tmp_path))

        setup_logging(current)
        setup_logging(current.model_copy(update={"LOG_LEVEL": "ERROR"}))

        assert len(file_handlers(root_logger, tmp_path)) == 1
        assert root_logger.level == logging.ERROR

    def test_access_loggers_quieted(self, root_logger, tmp_path):
        setup_logging(Settings(_env_file=None, LOG_DIR=str(tmp_path)))

        assert logging.getLogger("uvicorn.access").level == logging.WARNING
