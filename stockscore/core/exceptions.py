"""Custom exceptions and centralized exception handlers."""

from __future__ import annotations

from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from .config import get_settings
from .logging import get_logger


logger = get_logger("error")


class AppException(Exception):
    """Base application exception with structured error response."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    error_code: str = "INTERNAL_ERROR"
    message: str = "An unexpected error occurred"

    def __init__(
        self,
        message: str | None = None,
        error_code: str | None = None,
        status_code: int | None = None,
        details: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ):
        self.message = message or self.message
        self.error_code = error_code or self.error_code
        self.status_code = status_code or self.status_code
        self.details = details or {}
        self.headers = headers or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Convert to RFC 7807 problem+json style response."""
        return {
            "error": self.error_code,
            "message": self.message,
            "status": self.status_code,
            **({"details": self.details} if self.details else {}),
        }


class NotFoundError(AppException):
    """Resource not found."""

    status_code = status.HTTP_404_NOT_FOUND
    error_code = "NOT_FOUND"
    message = "Resource not found"


class BadRequestError(AppException):
    """Bad request."""

    status_code = status.HTTP_400_BAD_REQUEST
    error_code = "BAD_REQUEST"
    message = "Bad request"


class InvalidTickerError(BadRequestError):
    """Ticker symbol failed sanitization."""

    error_code = "INVALID_TICKER"
    message = "Invalid ticker symbol"


class ValidationError(AppException):
    """Request validation failed."""

    status_code = status.HTTP_422_UNPROCESSABLE_CONTENT
    error_code = "VALIDATION_ERROR"
    message = "Validation failed"


class RateLimitError(AppException):
    """Rate limit exceeded."""

    status_code = status.HTTP_429_TOO_MANY_REQUESTS
    error_code = "RATE_LIMIT_EXCEEDED"
    message = "Too many requests. Please try again later."


class ExternalServiceError(AppException):
    """External service error (network, bad status, empty content)."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    error_code = "EXTERNAL_SERVICE_ERROR"
    message = "External service temporarily unavailable"


class UpstreamTimeoutError(ExternalServiceError):
    """External service did not answer within the configured timeout."""

    status_code = status.HTTP_504_GATEWAY_TIMEOUT
    error_code = "UPSTREAM_TIMEOUT"
    message = "External service timed out"


class NarrativeGenerationError(ExternalServiceError):
    """Score rationale could not be generated. Recovered by the scoring engine."""

    error_code = "NARRATIVE_UNAVAILABLE"
    message = "Score reasoning unavailable"


class UpstreamValidationError(AppException):
    """External payload was malformed or did not match its expected shape."""

    status_code = status.HTTP_502_BAD_GATEWAY
    error_code = "UPSTREAM_VALIDATION_ERROR"
    message = "External service returned malformed data"


class JSONExtractionError(UpstreamValidationError):
    """No parseable JSON in the external text."""

    error_code = "UPSTREAM_JSON_ERROR"
    message = "Failed to parse JSON from external response"


class SchemaValidationError(UpstreamValidationError):
    """Parsed JSON did not match the expected schema."""

    error_code = "UPSTREAM_SCHEMA_ERROR"
    message = "External response validation failed"


class MetricsParseError(UpstreamValidationError):
    """Scoring metrics payload was not a JSON object."""

    error_code = "METRICS_PARSE_ERROR"
    message = "Scoring metrics payload must be an object"


def _request_id(request: Request) -> str:
    return getattr(request.state, "request_id", "unknown")


def _expose_internal_errors(request: Request) -> bool:
    app_settings = getattr(request.app.state, "settings", None) or get_settings()
    return app_settings.debug


def register_exception_handlers(app: FastAPI) -> None:
    """Map AppException subclasses to their JSON body and everything else to a 500."""

    @app.exception_handler(AppException)
    async def app_exception_handler(
        request: Request, exc: AppException
    ) -> JSONResponse:
        # 4xx are client mistakes; upstream trouble is worth a warning
        if exc.status_code >= 500:
            logger.warning(
                f"{exc.error_code} on {request.url.path}: {exc.message}",
                extra={"path": request.url.path, "details": exc.details},
            )
        return JSONResponse(
            status_code=exc.status_code,
            content=exc.to_dict(),
            headers={"X-Request-ID": _request_id(request), **exc.headers},
        )

    @app.exception_handler(Exception)
    async def generic_exception_handler(
        request: Request, exc: Exception
    ) -> JSONResponse:
        logger.exception(
            "Unhandled exception",
            extra={"path": request.url.path, "method": request.method},
        )
        message = str(exc) if _expose_internal_errors(request) else AppException.message
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": AppException.error_code,
                "message": message,
                "status": status.HTTP_500_INTERNAL_SERVER_ERROR,
            },
            headers={"X-Request-ID": _request_id(request)},
        )
