"""Core infrastructure: settings, logging, exceptions, request identity."""

from .client_identity import UNKNOWN_CLIENT, get_client_ip
from .config import Settings, get_settings, settings
from .exceptions import (
    AppException,
    BadRequestError,
    ExternalServiceError,
    InvalidTickerError,
    JSONExtractionError,
    MetricsParseError,
    NarrativeGenerationError,
    NotFoundError,
    RateLimitError,
    SchemaValidationError,
    UpstreamTimeoutError,
    UpstreamValidationError,
    ValidationError,
)
from .sanitize import is_valid_ticker, sanitize_ticker


__all__ = [
    "AppException",
    "BadRequestError",
    "ExternalServiceError",
    "InvalidTickerError",
    "JSONExtractionError",
    "MetricsParseError",
    "NarrativeGenerationError",
    "NotFoundError",
    "RateLimitError",
    "SchemaValidationError",
    "Settings",
    "UNKNOWN_CLIENT",
    "UpstreamTimeoutError",
    "UpstreamValidationError",
    "ValidationError",
    "get_client_ip",
    "get_settings",
    "is_valid_ticker",
    "sanitize_ticker",
    "settings",
]
