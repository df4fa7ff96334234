"""Logging system with structured output and operation timing"""

import json
import logging
import logging.handlers
import time
from datetime import datetime
from typing import Dict, Any, Optional
from pathlib import Path
from functools import wraps
import inspect
import threading

from .settings import get_settings


_RESERVED_ATTRS = {
    'name', 'msg', 'args', 'levelname', 'levelno', 'pathname',
    'filename', 'module', 'exc_info', 'exc_text', 'stack_info',
    'lineno', 'funcName', 'created', 'msecs', 'relativeCreated',
    'thread', 'threadName', 'processName', 'process', 'getMessage',
    'taskName', 'message', 'asctime'
}


class StructuredFormatter(logging.Formatter):
    """
    Custom formatter for structured JSON logging.

    Outputs logs in JSON format for better parsing and analysis.
    """

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as structured JSON"""

        log_data = {
            'timestamp': datetime.fromtimestamp(record.created).isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
            'module': record.module,
            'function': record.funcName,
            'line': record.lineno,
        }

        if record.exc_info:
            log_data['exception'] = {
                'type': record.exc_info[0].__name__,
                'message': str(record.exc_info[1]),
                'traceback': self.formatException(record.exc_info)
            }

        # Fields passed through ``extra=``
        extra_fields = {
            key: value for key, value in record.__dict__.items()
            if key not in _RESERVED_ATTRS
        }
        if extra_fields:
            log_data['extra'] = extra_fields

        return json.dumps(log_data, default=str, ensure_ascii=False)


class PerformanceMetrics:
    """Track timing metrics for operations"""

    def __init__(self):
        self._metrics: Dict[str, Dict[str, Any]] = {}
        self._lock = threading.Lock()

    def record_operation(self, operation: str, duration: float, success: bool = True):
        """Record timing for one call of an operation"""
        with self._lock:
            if operation not in self._metrics:
                self._metrics[operation] = {
                    'total_calls': 0,
                    'successful_calls': 0,
                    'failed_calls': 0,
                    'total_duration': 0.0,
                    'min_duration': float('inf'),
                    'max_duration': 0.0,
                    'last_call': None
                }

            metrics = self._metrics[operation]
            metrics['total_calls'] += 1
            metrics['total_duration'] += duration
            metrics['min_duration'] = min(metrics['min_duration'], duration)
            metrics['max_duration'] = max(metrics['max_duration'], duration)
            metrics['last_call'] = datetime.now().isoformat()

            if success:
                metrics['successful_calls'] += 1
            else:
                metrics['failed_calls'] += 1

    def get_metrics(self, operation: Optional[str] = None) -> Dict[str, Any]:
        """Get timing metrics for one operation or all of them"""
        with self._lock:
            if operation:
                metrics = self._metrics.get(operation)
                return self._summarize(metrics) if metrics else {}
            return {op: self._summarize(m) for op, m in self._metrics.items()}

    @staticmethod
    def _summarize(metrics: Dict[str, Any]) -> Dict[str, Any]:
        summary = metrics.copy()
        summary['avg_duration'] = metrics['total_duration'] / metrics['total_calls']
        summary['success_rate'] = metrics['successful_calls'] / metrics['total_calls']
        return summary

    def reset(self, operation: Optional[str] = None):
        """Reset metrics"""
        with self._lock:
            if operation:
                self._metrics.pop(operation, None)
            else:
                self._metrics.clear()


# Global performance metrics instance
performance_metrics = PerformanceMetrics()


class LoggingManager:
    """
    Centralized logging configuration.

    Console output is human-readable in development and JSON in production.
    Rotating file handlers are added when ``log_to_file`` is enabled.
    """

    def __init__(self):
        self.configured = False
        self.loggers: Dict[str, logging.Logger] = {}

    def setup_logging(self):
        """Configure logging system"""
        if self.configured:
            return

        settings = get_settings()
        level = getattr(logging, settings.log_level)

        root_logger = logging.getLogger()
        root_logger.setLevel(level)

        for handler in root_logger.handlers[:]:
            root_logger.removeHandler(handler)

        console_handler = logging.StreamHandler()
        console_handler.setLevel(level)
        if settings.is_production:
            console_handler.setFormatter(StructuredFormatter())
        else:
            console_format = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
            console_handler.setFormatter(logging.Formatter(console_format))
        root_logger.addHandler(console_handler)

        if settings.log_to_file:
            log_dir = Path(settings.log_dir)
            log_dir.mkdir(parents=True, exist_ok=True)

            file_handler = logging.handlers.RotatingFileHandler(
                log_dir / "application.log",
                maxBytes=20 * 1024 * 1024,  # 20MB
                backupCount=5
            )
            file_handler.setLevel(logging.INFO)
            file_handler.setFormatter(StructuredFormatter())
            root_logger.addHandler(file_handler)

            error_handler = logging.handlers.RotatingFileHandler(
                log_dir / "errors.log",
                maxBytes=10 * 1024 * 1024,  # 10MB
                backupCount=3
            )
            error_handler.setLevel(logging.ERROR)
            error_handler.setFormatter(StructuredFormatter())
            root_logger.addHandler(error_handler)

        self.configured = True

        logging.getLogger(__name__).debug(
            "Logging system initialized",
            extra={
                'environment': settings.environment,
                'log_level': settings.log_level,
                'structured_logging': settings.is_production
            }
        )

    def get_logger(self, name: str) -> logging.Logger:
        """Get a named logger; handlers are attached by setup_logging()"""
        if name not in self.loggers:
            self.loggers[name] = logging.getLogger(name)
        return self.loggers[name]


# Global logging manager
logging_manager = LoggingManager()


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance"""
    return logging_manager.get_logger(name)


def setup_logging():
    """Initialize the logging system"""
    logging_manager.setup_logging()


def log_performance(operation: str):
    """
    Decorator that logs start/completion of a call and records its duration.

    Works for both plain functions and coroutine functions.

    Args:
        operation: Name of the operation for metrics
    """
    def decorator(func):
        logger = get_logger(func.__module__)

        def _finish(start_time: float, success: bool):
            duration = time.time() - start_time
            performance_metrics.record_operation(operation, duration, success)
            logger.info(
                f"Completed {operation}",
                extra={'operation': operation, 'duration': duration, 'success': success}
            )

        def _failed(e: Exception):
            logger.error(
                f"Operation {operation} failed: {e}",
                extra={'operation': operation, 'error_type': type(e).__name__}
            )

        @wraps(func)
        async def async_wrapper(*args, **kwargs):
            logger.info(f"Starting {operation}", extra={'operation': operation})
            start_time = time.time()
            success = True
            try:
                return await func(*args, **kwargs)
            except Exception as e:
                success = False
                _failed(e)
                raise
            finally:
                _finish(start_time, success)

        @wraps(func)
        def sync_wrapper(*args, **kwargs):
            logger.info(f"Starting {operation}", extra={'operation': operation})
            start_time = time.time()
            success = True
            try:
                return func(*args, **kwargs)
            except Exception as e:
                success = False
                _failed(e)
                raise
            finally:
                _finish(start_time, success)

        if inspect.iscoroutinefunction(func):
            return async_wrapper
        return sync_wrapper

    return decorator


def get_performance_metrics(operation: Optional[str] = None) -> Dict[str, Any]:
    """Get performance metrics"""
    return performance_metrics.get_metrics(operation)


def reset_performance_metrics(operation: Optional[str] = None):
    """Reset performance metrics"""
    performance_metrics.reset(operation)
