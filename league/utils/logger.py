"""
Logging setup for scripts and long-running tools.

Library modules only call logging.getLogger(__name__); entry points call
configure_root_logger() once to attach handlers.
"""
import logging
import sys
import time
from pathlib import Path
from typing import Optional


LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
LOG_DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

LOG_LEVELS = {
    'DEBUG': logging.DEBUG,
    'INFO': logging.INFO,
    'WARNING': logging.WARNING,
    'ERROR': logging.ERROR,
    'CRITICAL': logging.CRITICAL,
}

_log_configured = False


def setup_logger(
    name: Optional[str] = None,
    level: str = 'INFO',
    log_to_console: bool = True,
    log_dir: Optional[str] = None,
    log_file_name: Optional[str] = None,
    encoding: str = 'utf-8'
) -> logging.Logger:
    """
    Configure and return a logger.

    Args:
        name: Logger name (root logger if None)
        level: Level name, e.g. 'INFO' or 'DEBUG'
        log_to_console: Attach a stdout handler
        log_dir: Directory for a log file (no file handler if None)
        log_file_name: File name inside log_dir (defaults to today's date)
        encoding: Log file encoding

    Returns:
        The configured logger
    """
    logger = logging.getLogger(name) if name else logging.getLogger()

    if logger.handlers:
        return logger

    log_level = LOG_LEVELS.get(level.upper(), logging.INFO)
    logger.setLevel(log_level)
    formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

    if log_to_console:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(log_level)
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

    if log_dir is not None:
        log_path = Path(log_dir)
        log_path.mkdir(parents=True, exist_ok=True)
        if log_file_name is None:
            today = time.strftime('%Y_%m_%d', time.localtime())
            log_file_name = f"ladder_{today}.log"

        file_handler = logging.FileHandler(log_path / log_file_name, encoding=encoding, mode='a')
        file_handler.setLevel(log_level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    if name:
        logger.propagate = False

    return logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Get a logger, configuring it with defaults if it has no handlers yet."""
    logger = logging.getLogger(name) if name else logging.getLogger()

    if not logger.handlers:
        return setup_logger(name=name)

    return logger


def configure_root_logger(
    level: str = 'INFO',
    log_to_console: bool = True,
    log_dir: Optional[str] = None,
    log_file_name: Optional[str] = None
) -> None:
    """Configure the root logger (call once at program start)."""
    global _log_configured

    if _log_configured:
        return

    setup_logger(
        name=None,
        level=level,
        log_to_console=log_to_console,
        log_dir=log_dir,
        log_file_name=log_file_name
    )

    _log_configured = True
