"""
Logging configuration for AWS Assume Role

Console output goes to stderr: stdout is reserved for credential exports
that the calling shell evaluates.
"""

import logging
import sys
from pathlib import Path
from typing import Optional, TextIO


LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


class ColoredFormatter(logging.Formatter):
    """Formatter that colors the level name for terminal output"""

    colors = {
        'DEBUG': '\033[36m',    # Cyan
        'INFO': '\033[32m',     # Green
        'WARNING': '\033[33m',  # Yellow
        'ERROR': '\033[31m',    # Red
        'CRITICAL': '\033[35m', # Magenta
    }
    reset = '\033[0m'

    def format(self, record):
        levelname = record.levelname
        if levelname in self.colors:
            record.levelname = f"{self.colors[levelname]}{levelname}{self.reset}"
        try:
            return super().format(record)
        finally:
            record.levelname = levelname


def setup_logging(
    log_level: str = "WARNING",
    log_file: Optional[str] = None,
    enable_file_logging: bool = False,
    enable_console_logging: bool = True,
    stream: Optional[TextIO] = None
) -> logging.Logger:
    """Setup application logging configuration"""
    stream = stream or sys.stderr

    file_formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)
    if hasattr(stream, 'isatty') and stream.isatty():
        console_formatter = ColoredFormatter(LOG_FORMAT, datefmt=DATE_FORMAT)
    else:
        console_formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    # Only configure the package logger so botocore stays at its own level
    logger = logging.getLogger('aws_assume_role')
    logger.setLevel(getattr(logging, log_level.upper(), logging.WARNING))
    logger.propagate = False

    # Clear existing handlers
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    if enable_file_logging and log_file:
        log_path = Path(log_file).expanduser()
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path)
        file_handler.setFormatter(file_formatter)
        logger.addHandler(file_handler)

    if enable_console_logging:
        console_handler = logging.StreamHandler(stream)
        console_handler.setFormatter(console_formatter)
        logger.addHandler(console_handler)

    return logger


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance"""
    return logging.getLogger(name)


class LoggerMixin:
    """Mixin class to add logging functionality"""

    @property
    def logger(self) -> logging.Logger:
        """Get logger for this class, namespaced under its module"""
        return logging.getLogger(f"{self.__class__.__module__}.{self.__class__.__name__}")
