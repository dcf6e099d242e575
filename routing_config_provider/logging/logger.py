"""
Structured logging setup for the configuration provider.

Console output always, a rotating log file when a log directory is given,
and an optional JSON line format for log shippers.
"""

import json
import logging
import logging.handlers
import sys
import traceback
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional

_RESERVED_ATTRS = frozenset([
    'name', 'msg', 'args', 'levelname', 'levelno', 'pathname', 'filename',
    'module', 'lineno', 'funcName', 'created', 'msecs', 'relativeCreated',
    'thread', 'threadName', 'processName', 'process', 'exc_info', 'exc_text',
    'stack_info', 'taskName', 'message',
])


class StructuredFormatter(logging.Formatter):
    """Formats log records as one JSON object per line."""

    def __init__(self, include_extra: bool = True):
        super().__init__()
        self.include_extra = include_extra

    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {
            'timestamp': datetime.fromtimestamp(record.created).isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
            'module': record.module,
            'function': record.funcName,
            'line': record.lineno
        }

        if record.exc_info:
            log_data['exception'] = {
                'type': record.exc_info[0].__name__ if record.exc_info[0] else None,
                'message': str(record.exc_info[1]) if record.exc_info[1] else None,
                'traceback': traceback.format_exception(*record.exc_info)
            }

        if self.include_extra:
            extra_fields = {
                k: v for k, v in record.__dict__.items()
                if k not in _RESERVED_ATTRS
            }
            if extra_fields:
                log_data['extra'] = extra_fields

        return json.dumps(log_data, ensure_ascii=False, default=str)


class LoggerManager:
    """
    Root logger configuration for the provider process.

    Installs a console handler and, when ``log_dir`` is set, a size-rotated
    log file next to a separate error log.
    """

    def __init__(self,
                 log_dir: Optional[str] = None,
                 log_level: str = "INFO",
                 max_file_size: int = 10 * 1024 * 1024,
                 backup_count: int = 5,
                 console_output: bool = True,
                 structured_format: bool = False):
        """
        Args:
            log_dir: Directory for log files, None for console only
            log_level: Minimum log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
            max_file_size: Maximum size per log file in bytes
            backup_count: Number of rotated files to keep
            console_output: Whether to log to stderr
            structured_format: Whether to use the JSON formatter
        """
        self.log_dir = Path(log_dir) if log_dir else None
        self.log_level = getattr(logging, log_level.upper())
        self.max_file_size = max_file_size
        self.backup_count = backup_count
        self.console_output = console_output
        self.structured_format = structured_format

        if self.log_dir is not None:
            self.log_dir.mkdir(parents=True, exist_ok=True)

        self._setup_logging()
        self.logger = logging.getLogger(__name__)
        self.logger.debug("LoggerManager initialized", extra={
            'log_dir': str(self.log_dir) if self.log_dir else None,
            'log_level': log_level
        })

    def _formatter(self) -> logging.Formatter:
        if self.structured_format:
            return StructuredFormatter()
        return logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')

    def _setup_logging(self) -> None:
        root_logger = logging.getLogger()
        root_logger.handlers.clear()
        root_logger.setLevel(self.log_level)

        if self.log_dir is not None:
            file_handler = logging.handlers.RotatingFileHandler(
                filename=self.log_dir / "provider.log",
                maxBytes=self.max_file_size,
                backupCount=self.backup_count,
                encoding='utf-8'
            )
            file_handler.setLevel(self.log_level)
            file_handler.setFormatter(self._formatter())
            root_logger.addHandler(file_handler)

            error_handler = logging.handlers.RotatingFileHandler(
                filename=self.log_dir / "errors.log",
                maxBytes=self.max_file_size,
                backupCount=self.backup_count,
                encoding='utf-8'
            )
            error_handler.setLevel(logging.ERROR)
            error_handler.setFormatter(self._formatter())
            root_logger.addHandler(error_handler)

        if self.console_output:
            console_handler = logging.StreamHandler(sys.stderr)
            console_handler.setLevel(self.log_level)
            console_handler.setFormatter(self._formatter())
            root_logger.addHandler(console_handler)

    def get_logger(self, name: str) -> logging.Logger:
        return logging.getLogger(name)


_logger_manager: Optional[LoggerManager] = None


def initialize_logging(log_dir: Optional[str] = None,
                       log_level: str = "INFO",
                       **kwargs) -> LoggerManager:
    """Initialize the process-wide logging configuration."""
    global _logger_manager
    _logger_manager = LoggerManager(log_dir=log_dir, log_level=log_level, **kwargs)
    return _logger_manager


def get_logger(name: str) -> logging.Logger:
    """Get a logger, initializing console logging on first use."""
    global _logger_manager
    if _logger_manager is None:
        _logger_manager = LoggerManager()
    return _logger_manager.get_logger(name)
