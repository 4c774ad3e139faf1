"""
Exception classes for the domain binder.

All exceptions inherit from DomainBinderError and carry a code, a message
and optional details. Raw provider responses go under details["response"].
"""

from typing import Optional


class DomainBinderError(Exception):
    """Base exception for all domain binder errors."""

    def __init__(
        self,
        code: str,
        message: str,
        details: Optional[dict] = None,
    ) -> None:
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code!r}, message={self.message!r})"

    def to_dict(self) -> dict:
        """Convert exception to dictionary for serialization."""
        return {
            "error_type": self.__class__.__name__,
            "code": self.code,
            "message": self.message,
            "details": self.details,
        }


class PrerequisiteError(DomainBinderError):
    """Raised when a tool, credential or argument is missing before any external call."""

    pass


class ProviderError(DomainBinderError):
    """Raised when a hosting provider call fails or reports failure."""

    pass


class DnsLookupError(DomainBinderError):
    """Raised when the DNS zone for a root domain cannot be found."""

    pass


class DnsWriteError(DomainBinderError):
    """Raised when a DNS record upsert is rejected."""

    pass


class ValidationTimeoutError(DomainBinderError):
    """Raised when the validation token never appears within the attempt limit."""

    def __init__(
        self,
        attempts: int,
        message: Optional[str] = None,
        details: Optional[dict] = None,
    ) -> None:
        self.attempts = attempts
        details = dict(details or {})
        details.setdefault("attempts", attempts)
        super().__init__(
            code="validation_timeout",
            message=message or f"Validation token not available after {attempts} attempts",
            details=details,
        )


class WorkflowStateError(DomainBinderError):
    """Raised on an illegal state machine transition."""

    pass


class WorkflowCancelledError(DomainBinderError):
    """Raised when a pending wait is interrupted."""

    pass
