"""
Centralized Error Handling and Logging System
Maps service failures to HTTP responses and logs them as structured JSON.
"""

import json
import logging
import traceback
import uuid
from typing import Any, Dict, Optional, Union
from contextvars import ContextVar

from fastapi import Request
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware

from utils.helpers import isoformat_utc, utc_now

# Context variable for request tracing
request_id_var: ContextVar[str] = ContextVar('request_id', default='')

logger = logging.getLogger(__name__)

class ErrorHandlingConfig:
    """Centralized configuration for error handling behavior"""

    # Security settings
    SANITIZE_SENSITIVE_FIELDS = True
    SENSITIVE_FIELD_PATTERNS = [
        'password', 'token', 'key', 'secret', 'authorization',
        'auth', 'bearer', 'credential', 'api_key', 'cookie'
    ]

    # Logging settings
    LOG_REQUEST_BODIES = True
    LOG_HEADERS = True
    MAX_BODY_LOG_SIZE = 5000  # Truncate large bodies

    # Error response settings
    INCLUDE_TRACE_ID = True
    INCLUDE_TIMESTAMP = True
    VALIDATION_STATUS_CODE = 400

    @classmethod
    def is_sensitive_field(cls, field_name: str) -> bool:
        """Check if a field contains sensitive data"""
        field_lower = field_name.lower()
        return any(pattern in field_lower for pattern in cls.SENSITIVE_FIELD_PATTERNS)

    @classmethod
    def sanitize_data(cls, data: Union[Dict, str, Any]) -> Any:
        """Recursively sanitize sensitive data from logs"""
        if not cls.SANITIZE_SENSITIVE_FIELDS:
            return data

        if isinstance(data, dict):
            return {
                key: "***REDACTED***" if cls.is_sensitive_field(key) else cls.sanitize_data(value)
                for key, value in data.items()
            }
        elif isinstance(data, list):
            return [cls.sanitize_data(item) for item in data]
        elif isinstance(data, str) and len(data) > cls.MAX_BODY_LOG_SIZE:
            return data[:cls.MAX_BODY_LOG_SIZE] + "...[TRUNCATED]"
        else:
            return data

class StructuredLogger:
    """Structured logging with consistent format and context"""

    @staticmethod
    def log_error(
        error_type: str,
        message: str,
        request: Optional[Request] = None,
        exception: Optional[Exception] = None,
        extra_context: Optional[Dict] = None,
        include_traceback: bool = True,
        level: int = logging.ERROR
    ) -> str:
        """Log structured error with full context and return its trace ID"""

        # Reuse the request's trace ID so logs and the X-Trace-ID header agree
        trace_id = request_id_var.get('') or str(uuid.uuid4())[:8]

        log_entry = {
            "timestamp": isoformat_utc(utc_now()),
            "trace_id": trace_id,
            "error_type": error_type,
            "message": message,
            "level": logging.getLevelName(level)
        }

        if request:
            headers = dict(request.headers)
            log_entry["request"] = {
                "method": request.method,
                "path": request.url.path,
                "query_params": dict(request.query_params),
                "headers": ErrorHandlingConfig.sanitize_data(headers) if ErrorHandlingConfig.LOG_HEADERS else {},
                "client_ip": request.client.host if request.client else None,
                "user_agent": headers.get("user-agent", "unknown")
            }

        if exception:
            log_entry["exception"] = {
                "type": type(exception).__name__,
                "details": str(exception),
                "module": getattr(exception, '__module__', 'unknown')
            }

            if include_traceback:
                log_entry["exception"]["traceback"] = traceback.format_exc()

        if extra_context:
            log_entry["context"] = ErrorHandlingConfig.sanitize_data(extra_context)

        logger.log(level, json.dumps(log_entry, indent=2, default=str))

        return trace_id

def _captured_body(request: Request) -> Optional[Any]:
    """Decode the body stored by RequestContextMiddleware, parsing JSON when possible"""
    body = getattr(request.state, 'captured_body', None)
    if not body:
        return None
    try:
        text = body.decode('utf-8')
    except UnicodeDecodeError:
        return "DECODE_ERROR"
    try:
        return json.loads(text)
    except ValueError:
        return text

def _error_response(status_code: int, content: Dict[str, Any], trace_id: Optional[str]) -> JSONResponse:
    if ErrorHandlingConfig.INCLUDE_TRACE_ID and trace_id:
        content["trace_id"] = trace_id

    if ErrorHandlingConfig.INCLUDE_TIMESTAMP:
        content["timestamp"] = isoformat_utc(utc_now())

    return JSONResponse(status_code=status_code, content=content)

class RequestContextMiddleware(BaseHTTPMiddleware):
    """Middleware to capture request context and add request IDs"""

    async def dispatch(self, request: Request, call_next):
        trace_id = str(uuid.uuid4())[:8]
        request_id_var.set(trace_id)

        # Store request body for potential error logging
        body = None
        if ErrorHandlingConfig.LOG_REQUEST_BODIES and request.method in ("POST", "PUT", "PATCH"):
            body = await request.body()

        request.state.captured_body = body
        request.state.trace_id = trace_id

        response = await call_next(request)
        # Add trace ID to response headers for client-side debugging
        response.headers["X-Trace-ID"] = trace_id
        return response

# Global Exception Handlers
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Handle HTTP exceptions with logging"""

    # Client errors are expected traffic; only server errors carry a traceback
    level = logging.ERROR if exc.status_code >= 500 else logging.WARNING
    trace_id = StructuredLogger.log_error(
        f"http_{exc.status_code}",
        f"HTTP {exc.status_code}: {exc.detail}",
        request=request,
        exception=exc if exc.status_code >= 500 else None,
        extra_context={
            "status_code": exc.status_code,
            "request_body": _captured_body(request)
        },
        include_traceback=False,
        level=level
    )

    return _error_response(
        exc.status_code,
        {
            "error": f"HTTP {exc.status_code}",
            "message": exc.detail,
        },
        trace_id
    )

async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Handle request validation errors as 400 Bad Request"""

    validation_details = []
    for error in exc.errors():
        validation_details.append({
            "field": " -> ".join(str(loc) for loc in error.get("loc", [])),
            "message": error.get("msg", "Unknown validation error"),
            "type": error.get("type", "unknown")
        })

    trace_id = StructuredLogger.log_error(
        "validation_error",
        f"Request validation failed: {len(validation_details)} validation errors",
        request=request,
        extra_context={
            "validation_errors": validation_details,
            "request_body": _captured_body(request)
        },
        include_traceback=False,
        level=logging.WARNING
    )

    return _error_response(
        ErrorHandlingConfig.VALIDATION_STATUS_CODE,
        {
            "error": "Validation Error",
            "message": "Request validation failed",
            "detail": validation_details,
            "error_count": len(validation_details)
        },
        trace_id
    )

async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle all other exceptions"""

    trace_id = StructuredLogger.log_error(
        "internal_server_error",
        f"Unhandled exception: {str(exc)}",
        request=request,
        exception=exc,
        extra_context={
            "request_body": _captured_body(request)
        },
        include_traceback=True
    )

    # Build safe response (don't expose internal details)
    return _error_response(
        500,
        {
            "error": "Internal Server Error",
            "message": "An unexpected error occurred",
        },
        trace_id
    )

def setup_error_handling(app):
    """Setup centralized error handling for FastAPI app"""

    app.add_middleware(RequestContextMiddleware)

    # Most specific first
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)

    logger.info("Centralized error handling initialized")
