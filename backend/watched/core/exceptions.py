"""Custom exceptions for application-specific error handling."""

from __future__ import annotations

from typing import Optional, Dict, Any


class WatchedException(Exception):
    """Base exception for all application errors."""

    def __init__(
        self,
        message: str,
        *,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        status_code: int = 400,
        headers: Optional[Dict[str, str]] = None,
    ):
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        self.status_code = status_code
        self.headers = headers
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for API responses."""
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "error_code": self.error_code,
            "details": self.details,
        }


class NotFoundError(WatchedException):
    """Raised when a requested resource is not found."""

    def __init__(self, message: str = "not_found", *, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, error_code="NOT_FOUND", details=details, status_code=404)


class ConflictError(WatchedException):
    """Raised when a request conflicts with current state."""

    def __init__(self, message: str = "conflict", *, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, error_code="CONFLICT", details=details, status_code=409)


class BadRequestError(WatchedException):
    """Raised when request is invalid."""

    def __init__(self, message: str = "bad_request", *, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, error_code="BAD_REQUEST", details=details, status_code=400)


class RateLimitExceeded(WatchedException):
    """Raised when a client exceeds rate limits."""

    def __init__(self, *, retry_after: int, limit: int, window_seconds: int):
        headers = {
            "Retry-After": str(retry_after),
            "X-RateLimit-Limit": str(limit),
            "X-RateLimit-Window": str(window_seconds),
        }
        super().__init__(
            "rate_limit_exceeded",
            error_code="RATE_LIMIT",
            details={"retry_after": retry_after, "limit": limit, "window_seconds": window_seconds},
            status_code=429,
            headers=headers,
        )


# ===== EXTERNAL PROVIDER EXCEPTIONS =====


class ExternalServiceError(WatchedException):
    """Raised when an outbound provider (OMDb, Gemini) fails.

    The provider status and raw body are echoed back to the caller.
    """

    def __init__(self, message: str, *, provider: str, status_code: Optional[int] = None, content: str | None = None):
        details: Dict[str, Any] = {"provider": provider}
        if status_code is not None:
            details["status_code"] = status_code
        if content is not None:
            details["content"] = content
        super().__init__(message, error_code="EXTERNAL_SERVICE_ERROR", details=details, status_code=500)


# ===== AUTHENTICATION/AUTHORIZATION EXCEPTIONS =====


class AuthenticationException(WatchedException):
    """Base exception for authentication errors."""

    def __init__(
        self,
        message: str = "not_authenticated",
        *,
        error_code: Optional[str] = "NOT_AUTHENTICATED",
        details: Optional[Dict[str, Any]] = None,
        status_code: int = 401,
        headers: Optional[Dict[str, str]] = None,
    ):
        super().__init__(
            message,
            error_code=error_code,
            details=details,
            status_code=status_code,
            headers=headers if headers is not None else {"WWW-Authenticate": "Bearer"},
        )


class ExpiredTokenError(AuthenticationException):
    """Raised when token has expired."""

    def __init__(self, message: str = "Token has expired"):
        super().__init__(message, error_code="EXPIRED_TOKEN", status_code=401)


class InsufficientPermissionsError(AuthenticationException):
    """Raised when user lacks required permissions."""

    def __init__(self, message: str = "Insufficient permissions"):
        super().__init__(message, error_code="INSUFFICIENT_PERMISSIONS", status_code=403, headers={})
