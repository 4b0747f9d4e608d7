"""Logging configuration for the consensus backtester.

Every component logs through a child of the ``consensus_backtester`` root logger.
Records carry ``run_id`` and ``symbol`` context so a replay over one ticker can be
followed across indicators, adapters and the engine.
"""

import json
import logging
import logging.handlers
import os
import sys
from datetime import datetime
from enum import StrEnum
from typing import Any


class LogLevel(StrEnum):
    """Log level enumeration."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"

    def __lt__(self, other: object) -> bool:
        """Enable comparison between log levels."""
        if isinstance(other, LogLevel):
            order = [self.DEBUG, self.INFO, self.WARNING, self.ERROR, self.CRITICAL]
            return order.index(self) < order.index(other)
        return NotImplemented


_RESERVED_RECORD_FIELDS = frozenset(
    {
        'name',
        'msg',
        'args',
        'levelname',
        'levelno',
        'pathname',
        'filename',
        'module',
        'lineno',
        'funcName',
        'created',
        'msecs',
        'relativeCreated',
        'thread',
        'threadName',
        'processName',
        'process',
        'taskName',
        'getMessage',
        'exc_info',
        'exc_text',
        'stack_info',
    }
)


class StructuredFormatter(logging.Formatter):
    """Render log records as single-line JSON documents."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_entry: dict[str, Any] = {
            'timestamp': datetime.fromtimestamp(record.created).isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
            'module': record.module,
            'function': record.funcName,
            'line': record.lineno,
        }

        if record.exc_info:
            log_entry['exception'] = self.formatException(record.exc_info)

        # extra= fields and context attributes
        for key, value in record.__dict__.items():
            if key not in _RESERVED_RECORD_FIELDS:
                log_entry[key] = value

        return json.dumps(log_entry, default=str)


class LoggerContextFilter(logging.Filter):
    """Ensure every record has ``run_id`` and ``symbol`` attributes."""

    def __init__(
        self,
        run_id: str | None = None,
        symbol: str | None = None,
        *,
        is_default: bool = False,
    ) -> None:
        """Initialize the filter with optional context overrides."""
        super().__init__()
        self.run_id = run_id
        self.symbol = symbol
        self.is_default = is_default

    def filter(self, record: logging.LogRecord) -> bool:
        """Inject contextual attributes if they are missing."""
        if self.run_id is not None:
            record.run_id = self.run_id
        elif getattr(record, 'run_id', None) is None:
            record.run_id = '-'

        if self.symbol is not None:
            record.symbol = self.symbol
        elif getattr(record, 'symbol', None) is None:
            record.symbol = '-'
        return True


ROOT_LOGGER_NAME = "consensus_backtester"

TEXT_FORMAT = (
    '%(asctime)s | %(levelname)s | %(name)s | run=%(run_id)s symbol=%(symbol)s | '
    '%(module)s:%(funcName)s:%(lineno)d | %(message)s'
)


def _normalized_logger_name(name: str) -> str:
    if not name or name == ROOT_LOGGER_NAME:
        return ROOT_LOGGER_NAME
    if name.startswith(f"{ROOT_LOGGER_NAME}."):
        return name
    return f"{ROOT_LOGGER_NAME}.{name}"


def _ensure_default_context(filterable: logging.Filterer) -> None:
    """Attach a default context filter so format strings can reference run_id/symbol."""
    for existing in filterable.filters:
        if isinstance(existing, LoggerContextFilter) and existing.is_default:
            return
    filterable.addFilter(LoggerContextFilter(is_default=True))


def bind_logger_context(
    logger: logging.Logger,
    *,
    run_id: str | None = None,
    symbol: str | None = None,
) -> logging.Logger:
    """Bind contextual metadata to an existing logger instance.

    Values not supplied keep whatever the logger was previously bound to.
    """
    current_run_id: str | None = None
    current_symbol: str | None = None
    for existing in logger.filters:
        if isinstance(existing, LoggerContextFilter) and not existing.is_default:
            current_run_id = existing.run_id
            current_symbol = existing.symbol
            break

    new_run_id = run_id if run_id is not None else current_run_id
    new_symbol = symbol if symbol is not None else current_symbol

    if new_run_id is None and new_symbol is None:
        return logger

    for existing in list(logger.filters):
        if isinstance(existing, LoggerContextFilter) and not existing.is_default:
            logger.removeFilter(existing)
    logger.addFilter(LoggerContextFilter(run_id=new_run_id, symbol=new_symbol))
    return logger


def get_backtester_logger(
    name: str = ROOT_LOGGER_NAME,
    *,
    run_id: str | None = None,
    symbol: str | None = None,
    **kwargs: Any,
) -> logging.Logger:
    """Get a child of the backtester root logger with contextual metadata.

    Args:
        name: Logger name; module paths outside the package are nested under the root
        run_id: Optional run identifier bound to every record
        symbol: Optional ticker bound to every record
        **kwargs: Forwarded to ``BacktesterLogger.get_logger`` for the root logger

    Returns:
        Configured logger instance
    """
    root_logger = BacktesterLogger.get_logger(ROOT_LOGGER_NAME, **kwargs)
    normalized_name = _normalized_logger_name(name)
    if normalized_name == root_logger.name:
        target_logger = root_logger
    else:
        relative_name = normalized_name.split(f"{ROOT_LOGGER_NAME}.", 1)[1]
        target_logger = root_logger.getChild(relative_name)
        _ensure_default_context(target_logger)
    if run_id is not None or symbol is not None:
        return bind_logger_context(target_logger, run_id=run_id, symbol=symbol)
    return target_logger


class BacktesterLogger:
    """Factory and cache for handler-configured loggers."""

    _loggers: dict[str, logging.Logger] = {}

    @classmethod
    def get_logger(
        cls,
        name: str,
        level: str = "INFO",
        file_path: str | None = None,
        max_file_size: int = 10485760,  # 10MB
        backup_count: int = 5,
        console: bool = True,
        structured: bool = False,
    ) -> logging.Logger:
        """Get or create a logger with the specified configuration."""
        if name in cls._loggers:
            return cls._loggers[name]

        logger = logging.getLogger(name)
        logger.setLevel(getattr(logging, str(level).upper()))
        logger.handlers.clear()

        formatter: logging.Formatter
        if structured:
            formatter = StructuredFormatter()
        else:
            formatter = logging.Formatter(TEXT_FORMAT)

        if console:
            console_handler = logging.StreamHandler(sys.stdout)
            console_handler.setFormatter(formatter)
            logger.addHandler(console_handler)
            _ensure_default_context(console_handler)

        if file_path:
            directory = os.path.dirname(file_path)
            if directory:
                os.makedirs(directory, exist_ok=True)

            file_handler = logging.handlers.RotatingFileHandler(
                file_path, maxBytes=max_file_size, backupCount=backup_count
            )
            file_handler.setFormatter(formatter)
            logger.addHandler(file_handler)
            _ensure_default_context(file_handler)

        _ensure_default_context(logger)

        cls._loggers[name] = logger
        return logger

    @classmethod
    def configure(
        cls,
        *,
        level: str = "INFO",
        file_path: str | None = None,
        structured: bool = False,
        console: bool = True,
    ) -> logging.Logger:
        """Rebuild the root backtester logger with new handler settings."""
        cls.reset(ROOT_LOGGER_NAME)
        return cls.get_logger(
            ROOT_LOGGER_NAME,
            level=level,
            file_path=file_path,
            structured=structured,
            console=console,
        )

    @classmethod
    def reset(cls, name: str | None = None) -> None:
        """Forget cached loggers and close their handlers."""
        names = [name] if name is not None else list(cls._loggers)
        for logger_name in names:
            logger = cls._loggers.pop(logger_name, None)
            if logger is None:
                continue
            for handler in list(logger.handlers):
                handler.close()
                logger.removeHandler(handler)
