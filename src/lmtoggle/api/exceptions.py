#!/usr/bin/env python3
"""Errors raised by the LogicMonitor client and the instance toggle.

Everything derives from LMError so callers can catch one type at the
workflow boundary. The client maps HTTP statuses and aiohttp failures
onto the subclasses below; the mutator folds per-instance failures into
a PartialMutationError through ErrorCollector.

    LMError
    ├── ConfigurationError      missing credentials or bad environment values
    ├── InvalidInputError       caller input rejected before any request
    ├── AuthenticationError
    │   └── InvalidCredentialsError   401/403
    ├── APIError                any other non-2xx, or an unreadable body
    │   ├── RateLimitError      429
    │   ├── NotFoundError       404
    │   ├── ValidationError     400/422
    │   └── ServerError         5xx
    ├── NetworkError
    │   ├── ConnectionError
    │   └── TimeoutError
    └── PartialMutationError
"""
from typing import Any, Optional

# ============================================
# Base Exception
# ============================================

class LMError(Exception):
    """Base exception for all LogicMonitor client errors.

    Attributes:
        message: Human-readable error description
        code: Short upper-case error code (e.g., "NOT_FOUND")
        details: Extra context rendered into str()
        cause: The exception this one was raised from
    """

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
        cause: Optional[Exception] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__.upper()
        self.details = details or {}
        self.cause = cause

        if cause:
            self.__cause__ = cause

    def __str__(self) -> str:
        text = f"[{self.code}] {self.message}"
        if self.details:
            text += " (" + ", ".join(f"{k}={v}" for k, v in self.details.items()) + ")"
        return text

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(message={self.message!r}, code={self.code!r})"


# ============================================
# Configuration and Input Errors
# ============================================

class ConfigurationError(LMError):
    """Credentials or environment settings are missing or unparseable."""

    def __init__(self, message: str, missing_keys: Optional[list[str]] = None, **kwargs):
        details = kwargs.pop("details", {})
        if missing_keys:
            details["missing_keys"] = missing_keys
        super().__init__(message, code="CONFIGURATION_ERROR", details=details, **kwargs)


class InvalidInputError(LMError):
    """Caller input is malformed.

    Raised before any network call: a device reference without an id,
    both or neither of the device parameters, no module selectors.
    """

    def __init__(self, message: str, field: Optional[str] = None, **kwargs):
        details = kwargs.pop("details", {})
        if field:
            details["field"] = field
        super().__init__(message, code="INVALID_INPUT", details=details, **kwargs)
        self.field = field


# ============================================
# Authentication Errors
# ============================================

class AuthenticationError(LMError):
    """The portal did not accept the request's credentials."""


class InvalidCredentialsError(AuthenticationError):
    """The LMv1 signature was rejected (HTTP 401/403)."""

    def __init__(
        self,
        message: str = "Invalid access id or access key",
        status_code: Optional[int] = None,
        **kwargs,
    ):
        details = kwargs.pop("details", {})
        if status_code:
            details["status_code"] = status_code
        super().__init__(message, code="INVALID_CREDENTIALS", details=details, **kwargs)
        self.status_code = status_code


# ============================================
# API Errors
# ============================================

class APIError(LMError):
    """A request reached the portal but did not produce a usable response.

    Attributes:
        status_code: HTTP status code
        endpoint: Resource path that was called
        method: HTTP method
        response_body: Sanitized response body, if any
    """

    def __init__(
        self,
        message: str,
        status_code: int,
        endpoint: Optional[str] = None,
        response_body: Optional[str] = None,
        method: str = "GET",
        **kwargs,
    ):
        details = kwargs.pop("details", {})
        details["status_code"] = status_code
        if endpoint:
            details["endpoint"] = endpoint
        details["method"] = method
        if response_body:
            details["response_body"] = response_body[:500]

        kwargs.setdefault("code", f"API_ERROR_{status_code}")
        super().__init__(message, details=details, **kwargs)
        self.status_code = status_code
        self.endpoint = endpoint
        self.response_body = response_body
        self.method = method


class RateLimitError(APIError):
    """HTTP 429."""

    def __init__(self, message: str = "Rate limit exceeded", **kwargs):
        kwargs.setdefault("status_code", 429)
        super().__init__(message, code="RATE_LIMIT_EXCEEDED", **kwargs)


class NotFoundError(APIError):
    """HTTP 404 for a device, module or instance path."""

    def __init__(self, resource_type: str, resource_id: Optional[str] = None, **kwargs):
        message = f"{resource_type} '{resource_id}' not found" if resource_id else f"{resource_type} not found"
        kwargs.setdefault("status_code", 404)
        super().__init__(message, code="NOT_FOUND", **kwargs)


class ValidationError(APIError):
    """HTTP 400/422, usually a rejected filter expression or PATCH body."""

    def __init__(self, message: str, **kwargs):
        kwargs.setdefault("status_code", 400)
        super().__init__(message, code="VALIDATION_ERROR", **kwargs)


class ServerError(APIError):
    """HTTP 5xx."""

    def __init__(self, message: str = "Server error", **kwargs):
        kwargs.setdefault("status_code", 500)
        super().__init__(message, code="SERVER_ERROR", **kwargs)


# ============================================
# Network Errors
# ============================================

class NetworkError(LMError):
    """The request never produced an HTTP response."""


class ConnectionError(NetworkError):
    """The portal host could not be reached."""

    def __init__(self, message: str = "Failed to connect to server", host: Optional[str] = None, **kwargs):
        details = kwargs.pop("details", {})
        if host:
            details["host"] = host
        super().__init__(message, code="CONNECTION_ERROR", details=details, **kwargs)


class TimeoutError(NetworkError):
    """The request exceeded the client timeout."""

    def __init__(self, message: str = "Request timed out", timeout_seconds: Optional[float] = None, **kwargs):
        details = kwargs.pop("details", {})
        if timeout_seconds:
            details["timeout_seconds"] = timeout_seconds
        super().__init__(message, code="TIMEOUT_ERROR", details=details, **kwargs)


# ============================================
# Mutation Errors
# ============================================

class PartialMutationError(LMError):
    """Some PATCH requests in a module's batch failed.

    Attributes:
        succeeded: Number of instances updated
        failed: Number of instances that failed
        errors: The per-instance errors
    """

    def __init__(
        self,
        message: str,
        succeeded: int = 0,
        failed: int = 0,
        errors: Optional[list[Exception]] = None,
        **kwargs,
    ):
        details = kwargs.pop("details", {})
        details["succeeded"] = succeeded
        details["failed"] = failed
        if errors:
            details["sample_errors"] = [str(e)[:100] for e in errors[:5]]

        super().__init__(message, code="PARTIAL_MUTATION_ERROR", details=details, **kwargs)
        self.succeeded = succeeded
        self.failed = failed
        self.errors = errors or []


class ErrorCollector:
    """Accumulates per-instance failures while a batch keeps going.

    Example:
        collector = ErrorCollector()
        for instance in instances:
            try:
                await patch(instance)
            except LMError as e:
                collector.add(e, context={"instance_id": instance.id})

        if collector.has_errors():
            logger.error(str(collector.to_exception(succeeded=n_ok)))
    """

    def __init__(self):
        self.errors: list[tuple[Exception, dict[str, Any]]] = []

    def add(self, error: Exception, context: Optional[dict[str, Any]] = None):
        self.errors.append((error, context or {}))

    def has_errors(self) -> bool:
        return bool(self.errors)

    def to_exception(self, succeeded: int = 0) -> PartialMutationError:
        """Summarize the collected failures.

        Raises:
            ValueError: If nothing was collected
        """
        if not self.errors:
            raise ValueError("No errors to convert")

        return PartialMutationError(
            message=f"{len(self.errors)} instance update(s) failed",
            succeeded=succeeded,
            failed=len(self.errors),
            errors=[e for e, _ in self.errors],
        )


__all__ = [
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
