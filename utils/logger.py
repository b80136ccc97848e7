"""
Centralized logging system
"""
import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
import colorlog

from config.settings import LOGGING_SETTINGS


class SystemLogger:
    """Singleton logger for the entire system"""

    _instance = None
    _loggers = {}

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super(SystemLogger, cls).__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self):
        if self._initialized:
            return
        self._initialized = True
        self.level = logging.getLevelName(LOGGING_SETTINGS['level'])

    def setup_logger(self, name, log_file=None, level=None):
        """
        Setup a logger with console and file handlers

        Args:
            name: Logger name
            log_file: Path to log file
            level: Logging level (defaults to the system level)

        Returns:
            logger: Configured logger instance
        """
        if name in self._loggers:
            logger = self._loggers[name]
            if log_file:
                self._add_file_handler(logger, log_file)
            return logger

        level = self.level if level is None else level

        logger = logging.getLogger(name)
        logger.setLevel(level)
        logger.propagate = False

        # Console handler with colors
        console_handler = colorlog.StreamHandler(sys.stdout)
        console_handler.setLevel(level)

        console_format = colorlog.ColoredFormatter(
            '%(log_color)s' + LOGGING_SETTINGS['format'],
            datefmt=LOGGING_SETTINGS['datefmt'],
            log_colors={
                'DEBUG': 'cyan',
                'INFO': 'green',
                'WARNING': 'yellow',
                'ERROR': 'red',
                'CRITICAL': 'red,bg_white',
            }
        )
        console_handler.setFormatter(console_format)
        logger.addHandler(console_handler)

        if log_file:
            self._add_file_handler(logger, log_file)

        self._loggers[name] = logger
        return logger

    def _add_file_handler(self, logger, log_file):
        """Attach a rotating file handler unless one already writes to log_file"""
        log_path = Path(log_file)
        for handler in logger.handlers:
            if isinstance(handler, RotatingFileHandler) and \
                    handler.baseFilename == os.path.abspath(log_path):
                return

        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = RotatingFileHandler(
            log_path,
            maxBytes=LOGGING_SETTINGS['max_bytes'],
            backupCount=LOGGING_SETTINGS['backup_count']
        )
        file_handler.setLevel(logger.level)

        file_format = logging.Formatter(
            LOGGING_SETTINGS['format'],
            datefmt=LOGGING_SETTINGS['datefmt']
        )
        file_handler.setFormatter(file_format)
        logger.addHandler(file_handler)

    def get_logger(self, name):
        """Get existing logger or create new one"""
        if name in self._loggers:
            return self._loggers[name]
        return self.setup_logger(name)

    def set_level(self, level):
        """Change the level of every logger created so far and of future ones"""
        if isinstance(level, str):
            level = logging.getLevelName(level.upper())
        self.level = level
        for logger in self._loggers.values():
            logger.setLevel(level)
            for handler in logger.handlers:
                handler.setLevel(level)

    def add_file(self, log_file):
        """Send the output of every known logger to log_file as well"""
        for logger in self._loggers.values():
            self._add_file_handler(logger, log_file)


def get_logger(name, log_file=None):
    """
    Convenience function to get a logger

    Args:
        name: Logger name
        log_file: Optional log file path

    Returns:
        logger: Logger instance
    """
    system_logger = SystemLogger()
    if log_file:
        return system_logger.setup_logger(name, log_file)
    return system_logger.get_logger(name)


def set_level(level):
    """Set the level for all system loggers"""
    SystemLogger().set_level(level)
