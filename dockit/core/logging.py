"""
Logging configuration.

Service code logs through the standard library with ``extra`` fields::

    logger = get_logger(__name__)
    logger.info("Settlement initiated", extra={"vendor_id": ..., "amount": ...})

Records are rendered as JSON (python-json-logger) or plain text. Domain
events sent to the notification dispatcher go through structlog so they can
be shipped separately. Both paths pick up the request and actor ids bound by
the request middleware, and both mask bank account fields.
"""

import logging
import logging.handlers
import sys
from contextvars import ContextVar
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, MutableMapping, Optional, Tuple

import structlog
from pythonjsonlogger import jsonlogger

from .config import settings

SERVICE_NAME = 'dockit-licensing-core'

# Bound per request by RequestIDMiddleware
request_id: ContextVar[Optional[str]] = ContextVar('request_id', default=None)
actor_id: ContextVar[Optional[str]] = ContextVar('actor_id', default=None)

SENSITIVE_KEYS = (
    'password', 'token', 'secret', 'authorization',
    'account_number', 'ifsc',
)
REDACTED = '[REDACTED]'

TEXT_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - [%(request_id)s] %(message)s'


def _is_sensitive(key: str) -> bool:
    lowered = key.lower()
    return any(sensitive in lowered for sensitive in SENSITIVE_KEYS)


def _redact(values: MutableMapping[str, Any]) -> None:
    for key in list(values.keys()):
        if _is_sensitive(key):
            values[key] = REDACTED
        elif isinstance(values[key], dict):
            _redact(values[key])


def _request_context() -> Dict[str, Any]:
    context = {}
    if request_id.get():
        context['request_id'] = request_id.get()
    if actor_id.get():
        context['actor_id'] = actor_id.get()
    return context


# ---------------------------------------------------------------------------
# structlog processors (domain event records)
# ---------------------------------------------------------------------------

def add_request_context(logger, method_name, event_dict):
    for key, value in _request_context().items():
        event_dict.setdefault(key, value)
    event_dict['timestamp'] = datetime.now(timezone.utc).isoformat()
    event_dict['service'] = SERVICE_NAME
    event_dict['environment'] = settings.ENVIRONMENT.value
    return event_dict


def redact_sensitive(logger, method_name, event_dict):
    _redact(event_dict)
    return event_dict


def _structlog_processors() -> List[Any]:
    processors = [
        structlog.stdlib.filter_by_level,
        add_request_context,
        redact_sensitive,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.format_exc_info,
    ]
    if settings.logging.LOG_FORMAT == 'json':
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.processors.KeyValueRenderer(key_order=['event', 'request_id']))
    return processors


# ---------------------------------------------------------------------------
# Standard library logging (service and request records)
# ---------------------------------------------------------------------------

class RedactingFilter(logging.Filter):
    """Masks bank and credential fields passed through ``extra``."""

    def filter(self, record: logging.LogRecord) -> bool:
        for key in list(vars(record).keys()):
            if _is_sensitive(key):
                setattr(record, key, REDACTED)
        if not hasattr(record, 'request_id'):
            record.request_id = '-'
        return True


class DockitJsonFormatter(jsonlogger.JsonFormatter):
    def add_fields(self, log_record, record, message_dict):
        super().add_fields(log_record, record, message_dict)
        log_record['level'] = record.levelname
        log_record['logger'] = record.name
        log_record['service'] = SERVICE_NAME
        if record.exc_info:
            log_record['exception'] = self.formatException(record.exc_info)


def _build_formatter() -> logging.Formatter:
    if settings.logging.LOG_FORMAT == 'json':
        return DockitJsonFormatter('%(asctime)s %(name)s %(levelname)s %(message)s')
    return logging.Formatter(TEXT_FORMAT)


def _build_handlers(level: int) -> List[logging.Handler]:
    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stdout)]

    if settings.logging.LOG_FILE:
        log_path = Path(settings.logging.LOG_FILE)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(
            logging.handlers.RotatingFileHandler(log_path, maxBytes=10 * 1024 * 1024, backupCount=5)
        )

    formatter = _build_formatter()
    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        handler.addFilter(RedactingFilter())
    return handlers


class LoggerAdapter(logging.LoggerAdapter):
    """Merges the bound request and actor ids into each record's ``extra``."""

    def __init__(self, logger: logging.Logger):
        super().__init__(logger, {})

    def process(self, msg: Any, kwargs: MutableMapping[str, Any]) -> Tuple[Any, MutableMapping[str, Any]]:
        extra = _request_context()
        extra.update(kwargs.get('extra') or {})
        kwargs['extra'] = extra
        return msg, kwargs


def get_logger(name: Optional[str] = None) -> LoggerAdapter:
    return LoggerAdapter(logging.getLogger(name or 'dockit'))


def get_event_logger(name: str = 'dockit.events'):
    """structlog logger for domain event records."""
    return structlog.get_logger(name)


def setup_logging() -> None:
    """Configure the root logger and, when enabled, structlog."""
    level = getattr(logging, settings.logging.LOG_LEVEL.value)

    if settings.logging.ENABLE_STRUCTURED_LOGGING:
        structlog.configure(
            processors=_structlog_processors(),
            wrapper_class=structlog.stdlib.BoundLogger,
            logger_factory=structlog.stdlib.LoggerFactory(),
            context_class=dict,
            cache_logger_on_first_use=True,
        )

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()
    for handler in _build_handlers(level):
        root_logger.addHandler(handler)

    logging.getLogger('uvicorn.access').setLevel(logging.WARNING)
    logging.getLogger('sqlalchemy.engine').setLevel(
        logging.INFO if settings.logging.LOG_SQL_QUERIES else logging.WARNING
    )

    get_logger(__name__).info('Logging configured', extra={
        'log_level': settings.logging.LOG_LEVEL.value,
        'log_format': settings.logging.LOG_FORMAT,
        'structured_logging': settings.logging.ENABLE_STRUCTURED_LOGGING,
    })


__all__ = [
    'get_logger',
    'get_event_logger',
    'setup_logging',
    'LoggerAdapter',
    'RedactingFilter',
    'request_id',
    'actor_id',
]
