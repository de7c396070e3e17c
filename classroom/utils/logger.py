import logging
import sys
from datetime import date
from pathlib import Path
from typing import Optional

from classroom.config import Config

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


def log_file_path(log_dir: Optional[str] = None, day: Optional[date] = None) -> Path:
    """Daily log file, e.g. logs/classroom_20240301.log"""
    day = day or date.today()
    return Path(log_dir or Config.LOG_DIR) / f"classroom_{day.strftime('%Y%m%d')}.log"


def setup_logger(name: str) -> logging.Logger:
    """
    Logger for the data layer: stdout always, plus the daily file when
    LOG_TO_FILE is on. Calling it again for the same name reuses the handlers.
    """
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger

    level = logging.DEBUG if Config.DEBUG else logging.INFO
    logger.setLevel(level)
    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if Config.LOG_TO_FILE:
        path = log_file_path()
        path.parent.mkdir(parents=True, exist_ok=True)
        # File keeps debug output even when the console is at INFO
        file_handler = logging.FileHandler(path, encoding='utf-8')
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger
