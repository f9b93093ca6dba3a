"""
Structured JSON logging for the market service.

Every record carries the service name, the request it belongs to and, where
known, the order or user it concerns, so a checkout can be followed from the
create call through the payment webhook.
"""

import json
import logging
import logging.handlers
import os
import re
import sys
import time
import traceback
import uuid
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

request_id_var: ContextVar[Optional[str]] = ContextVar('request_id', default=None)
order_id_var: ContextVar[Optional[str]] = ContextVar('order_id', default=None)
user_id_var: ContextVar[Optional[str]] = ContextVar('user_id', default=None)


class StructuredFormatter(logging.Formatter):
    """Render log records as one JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        log_obj = {
            "@timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "service": os.getenv('SERVICE_NAME', 'sello-backend'),
            "environment": os.getenv('ENVIRONMENT', 'development'),
        }

        trace_context = self._get_trace_context()
        if trace_context:
            log_obj["trace"] = trace_context

        log_obj["location"] = {
            "file": record.pathname,
            "line": record.lineno,
            "function": record.funcName,
        }

        if record.exc_info:
            log_obj["error"] = {
                "type": record.exc_info[0].__name__,
                "message": str(record.exc_info[1]),
                "stacktrace": traceback.format_exception(*record.exc_info),
            }

        if hasattr(record, 'extra_fields'):
            log_obj["custom"] = record.extra_fields

        return json.dumps(log_obj, default=str, ensure_ascii=False)

    def _get_trace_context(self) -> Optional[Dict[str, Any]]:
        context = {
            "request_id": request_id_var.get(),
            "order_id": order_id_var.get(),
            "user_id": user_id_var.get(),
        }
        context = {k: v for k, v in context.items() if v}
        return context or None


class SecurityFilter(logging.Filter):
    """Redact secrets and one-time codes before they reach a handler."""

    SENSITIVE_KEYS = {
        'password', 'token', 'secret', 'secret_key', 'authorization',
        'code', 'verification_code', 'x-admin-token',
    }
    CODE_PATTERN = re.compile(r'(?<![\w-])\d{6}\b')

    def filter(self, record: logging.LogRecord) -> bool:
        if isinstance(record.msg, str) and 'code' in record.msg.lower():
            record.msg = self.CODE_PATTERN.sub('******', record.msg)

        fields = getattr(record, 'extra_fields', None)
        if isinstance(fields, dict):
            record.extra_fields = {
                k: ('***REDACTED***' if k.lower() in self.SENSITIVE_KEYS else v)
                for k, v in fields.items()
            }
        return True


def setup_logging(
    service_name: str,
    level: str = "INFO",
    log_file: Optional[str] = None,
) -> None:
    """
    Configure the root logger with JSON output.

    Args:
        service_name: Name reported in every record
        level: Log level name
        log_file: Optional path for a rotating file handler
    """
    os.environ['SERVICE_NAME'] = service_name

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    root_logger.handlers = []

    formatter = StructuredFormatter()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    console_handler.addFilter(SecurityFilter())
    root_logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=10485760,  # 10MB
            backupCount=5,
        )
        file_handler.setFormatter(formatter)
        file_handler.addFilter(SecurityFilter())
        root_logger.addHandler(file_handler)

    logging.getLogger('uvicorn').setLevel(logging.WARNING)
    logging.getLogger('httpx').setLevel(logging.WARNING)
    logging.getLogger('sqlalchemy.engine').setLevel(logging.WARNING)

    root_logger.info(
        "Logging initialized",
        extra={'extra_fields': {'service': service_name, 'level': level}},
    )


class LoggerAdapter(logging.LoggerAdapter):
    """Attach the current request/order/user ids to ``extra``."""

    def process(self, msg, kwargs):
        extra = kwargs.get('extra', {})
        for key, var in (
            ('request_id', request_id_var),
            ('order_id', order_id_var),
            ('user_id', user_id_var),
        ):
            value = var.get()
            if value:
                extra.setdefault(key, value)
        kwargs['extra'] = extra
        return msg, kwargs


def get_logger(name: str) -> LoggerAdapter:
    return LoggerAdapter(logging.getLogger(name), {})


def set_request_context(
    request_id: Optional[str] = None,
    order_id: Optional[str] = None,
    user_id: Optional[str] = None,
) -> None:
    """Bind ids to the current context; ``None`` leaves a value untouched."""
    if request_id:
        request_id_var.set(request_id)
    if order_id:
        order_id_var.set(order_id)
    if user_id:
        user_id_var.set(str(user_id))


def generate_request_id() -> str:
    return str(uuid.uuid4())


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log each request with its duration and echo ``X-Request-ID``."""

    async def dispatch(self, request: Request, call_next) -> Response:
        request_id = request.headers.get('X-Request-ID') or generate_request_id()
        request_id_var.set(request_id)
        order_id_var.set(None)
        user_id_var.set(None)

        logger = get_logger(__name__)
        start_time = time.time()

        try:
            response = await call_next(request)
        except Exception:
            logger.error(
                f"Request failed: {request.method} {request.url.path}",
                exc_info=True,
                extra={'extra_fields': {
                    'method': request.method,
                    'path': request.url.path,
                    'duration_ms': (time.time() - start_time) * 1000,
                }},
            )
            raise

        logger.info(
            f"{request.method} {request.url.path} -> {response.status_code}",
            extra={'extra_fields': {
                'method': request.method,
                'path': request.url.path,
                'status_code': response.status_code,
                'duration_ms': (time.time() - start_time) * 1000,
                'client_host': request.client.host if request.client else None,
            }},
        )
        response.headers['X-Request-ID'] = request_id
        return response
