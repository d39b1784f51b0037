"""
Structured Logging Module

Provides JSON or text logging for the watchlist services, with request
tracing through context variables (request id and the caller's email).
"""

import logging
import sys
import traceback
from datetime import datetime
from typing import Dict, Any, Optional
from contextvars import ContextVar
from pathlib import Path
import os

from pythonjsonlogger import jsonlogger


# Context variables for request tracing
request_id_var: ContextVar[Optional[str]] = ContextVar('request_id', default=None)
user_email_var: ContextVar[Optional[str]] = ContextVar('user_email', default=None)

TEXT_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


class ContextFilter(logging.Filter):
    """Filter that adds contextual information to log records"""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = request_id_var.get()
        record.user_email = user_email_var.get()
        record.service_name = os.getenv('SERVICE_NAME', 'unknown')
        record.environment = os.getenv('ENVIRONMENT', 'development')
        return True


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """Custom JSON formatter with additional fields"""

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]):
        super().add_fields(log_record, record, message_dict)

        log_record['timestamp'] = datetime.utcnow().isoformat()
        log_record['level'] = record.levelname
        log_record['logger'] = record.name
        log_record['file'] = f"{record.filename}:{record.lineno}"

        if getattr(record, 'request_id', None):
            log_record['request_id'] = record.request_id

        if getattr(record, 'user_email', None):
            log_record['user_email'] = record.user_email

        if hasattr(record, 'service_name'):
            log_record['service_name'] = record.service_name

        if hasattr(record, 'environment'):
            log_record['environment'] = record.environment

        if record.exc_info:
            log_record['exception'] = {
                'type': record.exc_info[0].__name__,
                'message': str(record.exc_info[1]),
                'traceback': traceback.format_exception(*record.exc_info)
            }


def setup_service_logger(
    service_name: str,
    level: str = "INFO",
    log_file: Optional[str] = None,
    json_format: bool = False
) -> logging.Logger:
    """
    Set up logging for a service entry point.

    Handlers are attached to the root logger so that every module logger
    created with ``logging.getLogger(__name__)`` shares the same output.

    Args:
        service_name: Name of the service
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional file path for file logging
        json_format: Use JSON format

    Returns:
        Logger named after the service

    Example:
        logger = setup_service_logger("web_viewer", level="INFO", json_format=True)
    """
    os.environ['SERVICE_NAME'] = service_name

    log_level = getattr(logging, level.upper(), logging.INFO)

    if json_format:
        formatter = CustomJsonFormatter('%(timestamp)s %(level)s %(service_name)s %(logger)s %(message)s')
    else:
        formatter = logging.Formatter(TEXT_FORMAT, datefmt='%Y-%m-%d %H:%M:%S')

    handlers = [logging.StreamHandler(sys.stdout)]

    if log_file:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(path))

    root = logging.getLogger()
    root.setLevel(log_level)
    root.handlers = []

    context_filter = ContextFilter()
    for handler in handlers:
        handler.setLevel(log_level)
        handler.setFormatter(formatter)
        handler.addFilter(context_filter)
        root.addHandler(handler)

    return logging.getLogger(service_name)


def set_request_context(request_id: Optional[str] = None, user_email: Optional[str] = None):
    """Set context variables for request tracing"""
    request_id_var.set(request_id)
    user_email_var.set(user_email)


def clear_request_context():
    """Clear context variables"""
    request_id_var.set(None)
    user_email_var.set(None)


def log_business_event(logger: logging.Logger, event_type: str, **kwargs):
    """Log business events"""
    logger.info(
        f"Business Event: {event_type}",
        extra={
            "event_type": event_type,
            "metric_type": "business_event",
            **kwargs
        }
    )


def log_error(logger: logging.Logger, error: Exception, context: Optional[Dict[str, Any]] = None):
    """Log errors with full context"""
    extra = {
        "error_type": type(error).__name__,
        "error_message": str(error),
        "metric_type": "error"
    }

    if context:
        extra.update(context)

    logger.error(
        f"Error occurred: {str(error)}",
        exc_info=True,
        extra=extra
    )
