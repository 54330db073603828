"""
Logging setup for Face Attendance Tracker
"""
import logging
import logging.handlers
from pathlib import Path

from config import settings


def setup_logging(log_level=None, log_file=None):
    """
    Configure the root logger

    Args:
        log_level: Level name (DEBUG, INFO, WARNING, ERROR); defaults to LOG_LEVEL
        log_file: Optional rotating log file; defaults to LOG_FILE (empty = console only)
    """
    level = getattr(logging, (log_level or settings.LOG_LEVEL).upper(), logging.INFO)
    formatter = logging.Formatter(settings.LOG_FORMAT, datefmt='%Y-%m-%d %H:%M:%S')

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    log_file = settings.LOG_FILE if log_file is None else log_file
    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=settings.LOG_MAX_BYTES,
            backupCount=settings.LOG_BACKUP_COUNT,
            encoding='utf-8'
        )
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    # Supabase/httpx log every request at INFO
    logging.getLogger('httpx').setLevel(max(level, logging.WARNING))

    return root_logger
