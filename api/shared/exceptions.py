"""Shared exceptions for the chat service.

Every error kind carries the HTTP status it surfaces as; the exception
handlers in ``api.main`` do the translation.
"""
from typing import Any, Dict, Optional


class ChatServiceException(Exception):
    """Base exception for the chat service."""

    status_code: int = 500

    def __init__(
        self,
        message: str,
        error_code: str = "INTERNAL_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        super().__init__(self.message)


class InternalError(ChatServiceException):
    """Raised for failures that fit no other kind."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, "INTERNAL_ERROR", details)


class BadRequestError(ChatServiceException):
    """Raised when a request body is malformed or misses a field."""

    status_code = 400

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, "BAD_REQUEST", details)


class NotFoundError(ChatServiceException):
    """Raised when a resource is not found."""

    status_code = 404

    def __init__(self, resource: str, identifier: str):
        message = f"{resource} with identifier '{identifier}' not found"
        super().__init__(message, "NOT_FOUND", {"resource": resource, "identifier": identifier})


class ConflictError(ChatServiceException):
    """Raised when concurrent writes could not be serialized."""

    status_code = 409

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, "CONFLICT", details)


class StoreUnavailableError(ChatServiceException):
    """Raised when the backing store cannot be reached or fails on I/O."""

    status_code = 503

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, "STORE_UNAVAILABLE", details)


class ClientDisconnectedError(ChatServiceException):
    """Raised when the caller went away before the response was ready."""

    status_code = 499

    def __init__(self, message: str = "Client disconnected"):
        super().__init__(message, "CLIENT_DISCONNECTED")


class UpstreamError(ChatServiceException):
    """Base for failures of the upstream model provider."""

    status_code = 502

    def __init__(
        self,
        message: str,
        error_code: str = "UPSTREAM_ERROR",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(f"LLM provider error: {message}", error_code, details)


class UpstreamUnavailableError(UpstreamError):
    """Raised when the model provider is unreachable or fails server-side."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, "UPSTREAM_UNAVAILABLE", details)


class UpstreamTimeoutError(UpstreamError):
    """Raised when the model call exceeds its deadline."""

    status_code = 504

    def __init__(self, timeout_seconds: float):
        super().__init__(
            f"no response within {timeout_seconds:g} seconds",
            "UPSTREAM_TIMEOUT",
            {"timeout_seconds": timeout_seconds},
        )


class UpstreamRejectedError(UpstreamError):
    """Raised when the provider refuses the request as invalid."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, "UPSTREAM_REJECTED", details)


class UpstreamRateLimitedError(UpstreamError):
    """Raised when the provider answers 429."""

    status_code = 429

    def __init__(self, message: str, retry_after: Optional[str] = None):
        self.retry_after = retry_after
        details = {"retry_after": retry_after} if retry_after else None
        super().__init__(message, "UPSTREAM_RATE_LIMITED", details)


class UpstreamMalformedError(UpstreamError):
    """Raised when a structured completion cannot be parsed."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, "UPSTREAM_MALFORMED", details)
