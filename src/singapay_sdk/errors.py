"""Error taxonomy raised by the SDK."""

from __future__ import annotations

from typing import Any, Mapping, Optional


class SingaPayError(Exception):
    """Base class; every SDK error carries a message, a numeric code and an optional cause."""

    def __init__(self, message: str, code: int = 0, cause: Optional[BaseException] = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.cause = cause
        if cause is not None:
            self.__cause__ = cause

    def __repr__(self) -> str:
        return f"{type(self).__name__}(message={self.message!r}, code={self.code})"


class AuthenticationError(SingaPayError):
    """Token acquisition failed, or a request was rejected with 401."""


class ValidationError(SingaPayError):
    """Request rejected with 422, or local field validation failed."""

    def __init__(
        self,
        message: str,
        errors: Optional[Mapping[str, Any]] = None,
        code: int = 0,
        cause: Optional[BaseException] = None,
    ) -> None:
        super().__init__(message, code=code, cause=cause)
        self.errors: dict[str, Any] = dict(errors or {})


class ApiError(SingaPayError):
    """Any other non-success response, or a network/timeout failure (code 0)."""


class ConfigurationError(SingaPayError):
    """Fatal misconfiguration; never retried."""


__all__ = [
    "ApiError",
    "AuthenticationError",
    "ConfigurationError",
    "SingaPayError",
    "ValidationError",
]
