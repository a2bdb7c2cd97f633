# community_auth/core/logging_config.py
"""Root logger setup driven by Settings.LOG_LEVEL and Settings.LOG_DIR"""

import os
import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from community_auth.core.config import Settings, settings as default_settings

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'
LOG_FILE_NAME = 'community_auth.log'

# 5 MB per file, 5 files
MAX_LOG_BYTES = 5 * 1024 * 1024
LOG_BACKUPS = 5

# Per-request access noise
QUIET_LOGGERS = ("uvicorn.access", "httpx")


def _has_handler(root: logging.Logger, handler_type: type, filename: Optional[str] = None) -> bool:
    for handler in root.handlers:
        # Exact type: FileHandler is a StreamHandler too
        if type(handler) is not handler_type:
            continue
        if filename is None or handler.baseFilename == filename:
            return True
    return False


def setup_logging(app_settings: Optional[Settings] = None) -> logging.Logger:
    """
    Configure the root logger from settings.

    Can be called repeatedly: the level always follows the given settings,
    while the console handler and the file handler for a given log file are
    attached only once.
    """
    app_settings = app_settings or default_settings

    log_dir = Path(app_settings.LOG_DIR)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = os.path.abspath(log_dir / LOG_FILE_NAME)

    root_logger = logging.getLogger()
    root_logger.setLevel(app_settings.LOG_LEVEL.upper())

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    if not _has_handler(root_logger, logging.StreamHandler):
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(formatter)
        root_logger.addHandler(console_handler)

    if not _has_handler(root_logger, RotatingFileHandler, log_file):
        file_handler = RotatingFileHandler(
            filename=log_file,
            maxBytes=MAX_LOG_BYTES,
            backupCount=LOG_BACKUPS,
            encoding='utf-8'
        )
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    return root_logger
