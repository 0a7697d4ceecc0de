"""LogicMonitor REST API modules.

This package provides the signed HTTP client and its supporting pieces
for talking to the LogicMonitor REST API (v3).

Classes:
    LMClient: HTTP client with LMv1 signing and offset pagination
    RequestSigner: LMv1 Authorization header construction
    AccessKey: Secret holder for the API access key
    Credentials: Access id, access key and account name

Functions:
    escape_filter: Percent-encode quoted values in filter expressions
    sanitize_error_message: Redact secrets from error text

Exceptions:
    LMError: Base exception for all client errors
    ConfigurationError: Missing or invalid configuration
    InvalidInputError: Malformed caller input
    InvalidCredentialsError: Signature rejected by the portal
    APIError: API request failures
    NetworkError: Network connectivity issues
    PartialMutationError: Some instance updates in a batch failed
"""
from .auth import AccessKey, Credentials, RequestSigner
from .client import (
    API_VERSION,
    DEFAULT_DOMAIN,
    LMClient,
    PaginationConfig,
)
from .error_sanitizer import ErrorSanitizer, get_sanitizer, sanitize_error_message
from .exceptions import (
    APIError,
    AuthenticationError,
    ConfigurationError,
    ConnectionError,
    ErrorCollector,
    InvalidCredentialsError,
    InvalidInputError,
    LMError,
    NetworkError,
    NotFoundError,
    PartialMutationError,
    RateLimitError,
    ServerError,
    TimeoutError,
    ValidationError,
)
from .filters import escape_filter

__all__ = [
    # Auth
    "AccessKey",
    "Credentials",
    "RequestSigner",
    # Client
    "LMClient",
    "PaginationConfig",
    "DEFAULT_DOMAIN",
    "API_VERSION",
    # Filters
    "escape_filter",
    # Sanitization
    "ErrorSanitizer",
    "get_sanitizer",
    "sanitize_error_message",
    # Exceptions
    "LMError",
    "ConfigurationError",
    "InvalidInputError",
    "AuthenticationError",
    "InvalidCredentialsError",
    "APIError",
    "RateLimitError",
    "NotFoundError",
    "ValidationError",
    "ServerError",
    "NetworkError",
    "ConnectionError",
    "TimeoutError",
    "PartialMutationError",
    "ErrorCollector",
]
