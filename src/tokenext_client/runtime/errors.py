"""
Token Extension Error Model

This module provides the error handling framework for the token extension SDK.
Every error carries a stable code, optional structured details and the
underlying cause, so callers can branch on the kind of failure without
parsing messages.
"""

from __future__ import annotations
from typing import Optional, Dict, Any, List, TYPE_CHECKING
from enum import IntEnum

if TYPE_CHECKING:
    from ..composer.rules import CompatibilityRule


class ErrorCode(IntEnum):
    """Error codes used across the SDK."""

    # Success
    OK = 0

    # General errors (1-99)
    UNKNOWN = 1
    INTERNAL = 2
    NOT_FOUND = 4

    # Configuration errors (100-199)
    INVALID_CONFIGURATION = 100
    UNSUPPORTED_EXTENSION = 101
    BUILDER_CONSUMED = 102

    # Composition errors (200-299)
    INCOMPATIBLE_EXTENSIONS = 200
    LAYOUT_TOO_LARGE = 201

    # Network errors (300-399)
    NETWORK_ERROR = 300
    TIMEOUT = 301

    # Submission errors (400-499)
    SUBMISSION_REJECTED = 400
    ACCOUNT_DOES_NOT_EXIST = 401


class TokenExtError(Exception):
    """
    Base class for all token extension SDK errors.

    Provides structured error information: a code, a message, optional
    details and the exception that caused it.
    """

    def __init__(self, message: str, code: ErrorCode = ErrorCode.UNKNOWN,
                 details: Optional[Dict[str, Any]] = None, cause: Optional[Exception] = None):
        """
        Initialize an SDK error.

        Args:
            message: Error message
            code: Error code
            details: Additional error details
            cause: Underlying exception that caused this error
        """
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}
        self.cause = cause

    def __str__(self) -> str:
        """String representation of the error."""
        parts = [f"[{self.code.name}] {self.message}"]
        if self.details:
            parts.append(f"Details: {self.details}")
        if self.cause:
            parts.append(f"Caused by: {self.cause}")
        return " | ".join(parts)

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary representation."""
        result = {
            "code": self.code.value,
            "message": self.message,
        }
        if self.details:
            result["details"] = self.details
        if self.cause:
            result["cause"] = str(self.cause)
        return result


class ConfigurationError(TokenExtError):
    """A feature's parameters violate its own constraints."""

    def __init__(self, message: str, issues: Optional[List[str]] = None,
                 code: ErrorCode = ErrorCode.INVALID_CONFIGURATION,
                 cause: Optional[Exception] = None):
        self.issues = list(issues or [])
        details = {"issues": self.issues} if self.issues else None
        super().__init__(message, code, details, cause)


class UnsupportedExtensionError(ConfigurationError):
    """The requested extension is recognised but deliberately not implemented."""

    def __init__(self, message: str, extension: Optional[str] = None):
        super().__init__(message, code=ErrorCode.UNSUPPORTED_EXTENSION)
        self.extension = extension
        if extension:
            self.details["extension"] = extension


class BuilderConsumedError(TokenExtError):
    """A composition builder was used after its terminal call."""

    def __init__(self, message: str = "Builder has already been consumed by a terminal call"):
        super().__init__(message, ErrorCode.BUILDER_CONSUMED)


class CompatibilityError(TokenExtError):
    """The requested feature set contains one or more forbidden pairs."""

    def __init__(self, violations: List["CompatibilityRule"]):
        self.violations = list(violations)
        reasons = [rule.describe() for rule in self.violations]
        super().__init__(
            "Incompatible extensions: " + "; ".join(reasons),
            ErrorCode.INCOMPATIBLE_EXTENSIONS,
            {"violations": reasons},
        )


class LayoutError(TokenExtError):
    """The computed account layout exceeds a protocol ceiling."""

    def __init__(self, message: str, size: Optional[int] = None, limit: Optional[int] = None):
        details: Dict[str, Any] = {}
        if size is not None:
            details["size"] = size
        if limit is not None:
            details["limit"] = limit
        super().__init__(message, ErrorCode.LAYOUT_TOO_LARGE, details)
        self.size = size
        self.limit = limit


class NetworkError(TokenExtError):
    """Network-related errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None, cause: Optional[Exception] = None):
        super().__init__(message, ErrorCode.NETWORK_ERROR, details, cause)


class SubmissionError(TokenExtError):
    """The ledger rejected an atomic bundle."""

    def __init__(self, reason: str, details: Optional[Dict[str, Any]] = None,
                 cause: Optional[Exception] = None, code: ErrorCode = ErrorCode.SUBMISSION_REJECTED):
        super().__init__(f"Submission rejected: {reason}", code, details, cause)
        self.reason = reason


class AccountNotFoundError(TokenExtError):
    """Account does not exist."""

    def __init__(self, message: str = "Account not found",
                 details: Optional[Dict[str, Any]] = None, cause: Optional[Exception] = None):
        super().__init__(message, ErrorCode.ACCOUNT_DOES_NOT_EXIST, details, cause)


__all__ = [
    "ErrorCode",
    "TokenExtError",
    "ConfigurationError",
    "UnsupportedExtensionError",
    "BuilderConsumedError",
    "CompatibilityError",
    "LayoutError",
    "NetworkError",
    "SubmissionError",
    "AccountNotFoundError",
]
