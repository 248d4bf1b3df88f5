# core/exceptions.py
"""
╔════════════════════════════════════════════════════════════════════════════╗
║  CleanMissingData — Exceptions                                            ║
║  ─────────────────────────────────────────────────────────────────────────  ║
║  ✓ Centralized Exception Hierarchy                                       ║
║  ✓ Error Code & Severity System                                          ║
║  ✓ Context & Details Tracking                                            ║
║  ✓ Exception Context Manager                                             ║
╚════════════════════════════════════════════════════════════════════════════╝

Exception System Structure:
```
    CleaningError (Base)
    ├── ConfigurationError      (also ValueError)
    ├── UnsupportedTypeError    (also TypeError)
    ├── AlreadyExistsError      (also FileExistsError)
    ├── ArtifactNotFoundError   (also FileNotFoundError)
    └── CorruptArtifactError
```

Every exception is raised to the immediate caller. Nothing here retries.

Usage:
```python
    from core.exceptions import ConfigurationError, exception_context

    raise ConfigurationError(
        "inputCols and outputCols differ in length",
        details={"input_cols": 2, "output_cols": 3}
    )

    with exception_context(to=CorruptArtifactError, message="Unreadable part"):
        payload = json.loads(blob)
```
"""

from __future__ import annotations

from contextlib import contextmanager
from enum import Enum
from typing import Any, Dict, Iterator, Optional, Type

from loguru import logger

__all__ = [
    "ErrorCode",
    "ErrorSeverity",
    "CleaningError",
    "ConfigurationError",
    "UnsupportedTypeError",
    "AlreadyExistsError",
    "ArtifactNotFoundError",
    "CorruptArtifactError",
    "handle_exception",
    "exception_context",
]


# ═══════════════════════════════════════════════════════════════════════════
# Error Taxonomy
# ═══════════════════════════════════════════════════════════════════════════

class ErrorSeverity(str, Enum):
    """🚨 Severity classification for errors."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCode(str, Enum):
    """🏷️ Standardized error codes for categorization."""
    UNKNOWN = "unknown_error"
    CONFIG = "configuration_error"
    UNSUPPORTED_TYPE = "unsupported_type"
    ALREADY_EXISTS = "already_exists"
    NOT_FOUND = "not_found"
    CORRUPT_ARTIFACT = "corrupt_artifact"


# ═══════════════════════════════════════════════════════════════════════════
# Base Exception
# ═══════════════════════════════════════════════════════════════════════════

class CleaningError(Exception):
    """
    🎯 **Base Cleaning Exception**

    Base exception class with error code, severity, details, context and the
    original cause when wrapping a foreign exception.

    Usage:
```python
        raise CleaningError(
            "Operation failed",
            details={"reason": "invalid input"},
            context={"uid": "CleanMissingData_1a2b3c4d5e6f"}
        )
```
    """

    default_code: ErrorCode = ErrorCode.UNKNOWN

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        *,
        error_code: Optional[ErrorCode] = None,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: Optional[Dict[str, Any]] = None,
        cause: Optional[BaseException] = None
    ):
        """
        Initialize exception.

        Args:
            message: Error message
            details: Additional details dictionary
            error_code: Error code classification (class default if None)
            severity: Error severity level
            context: Execution context dictionary
            cause: Original exception (if wrapping)
        """
        super().__init__(message)
        self.message = message
        self.details: Dict[str, Any] = details or {}
        self.error_code: ErrorCode = error_code or self.default_code
        self.severity: ErrorSeverity = severity
        self.context: Dict[str, Any] = context or {}
        self.cause = cause

    def __str__(self) -> str:
        """String representation with full context."""
        parts = [f"{self.error_code.value}: {self.message}"]

        if self.details:
            parts.append(f"Details: {self.details}")

        if self.context:
            parts.append(f"Context: {self.context}")

        if self.cause:
            parts.append(f"Cause: {type(self.cause).__name__}: {self.cause}")

        return " | ".join(parts)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "error": {
                "code": self.error_code.value,
                "type": type(self).__name__,
                "message": self.message,
                "details": self.details,
                "context": self.context,
                "severity": self.severity.value,
                "cause": str(self.cause) if self.cause else None
            }
        }

    @classmethod
    def from_exc(
        cls,
        exc: BaseException,
        *,
        message: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        context: Optional[Dict[str, Any]] = None,
        severity: ErrorSeverity = ErrorSeverity.ERROR
    ) -> "CleaningError":
        """
        Create from an existing exception.

        A CleaningError is returned unchanged.
        """
        if isinstance(exc, CleaningError):
            return exc

        return cls(
            message or str(exc) or "An unexpected error occurred",
            details=details,
            severity=severity,
            context=context,
            cause=exc
        )


# ═══════════════════════════════════════════════════════════════════════════
# Specific Exception Classes
# ═══════════════════════════════════════════════════════════════════════════

class ConfigurationError(CleaningError, ValueError):
    """⚙️ Invalid column mapping, unknown column, unknown mode or bad literal."""
    default_code = ErrorCode.CONFIG


class UnsupportedTypeError(CleaningError, TypeError):
    """🔢 Column type not supported by the requested mode or fill."""
    default_code = ErrorCode.UNSUPPORTED_TYPE


class AlreadyExistsError(CleaningError, FileExistsError):
    """📁 Artifact path already exists and overwrite was not requested."""
    default_code = ErrorCode.ALREADY_EXISTS


class ArtifactNotFoundError(CleaningError, FileNotFoundError):
    """🔍 Artifact or blob not found."""
    default_code = ErrorCode.NOT_FOUND


class CorruptArtifactError(CleaningError):
    """💥 Artifact component missing, undecodable or inconsistent."""
    default_code = ErrorCode.CORRUPT_ARTIFACT


# ═══════════════════════════════════════════════════════════════════════════
# Helper Functions
# ═══════════════════════════════════════════════════════════════════════════

def handle_exception(e: Exception, context: str = "") -> str:
    """
    📝 **Format Exception for Display**

    Args:
        e: Exception to format
        context: Additional context

    Returns:
        Formatted message string
    """
    if isinstance(e, CleaningError):
        msg = f"❌ Error [{e.error_code.value}]: {e.message}"

        if context:
            msg += f" | Context: {context}"

        if e.details:
            msg += f" | Details: {e.details}"

        return msg

    msg = f"❌ Unexpected Error: {e}"

    if context:
        msg += f" | Context: {context}"

    return msg


@contextmanager
def exception_context(
    *,
    to: Type[CleaningError] = CleaningError,
    message: str = "Operation failed",
    severity: ErrorSeverity = ErrorSeverity.ERROR,
    context: Optional[Dict[str, Any]] = None,
    log: bool = True
) -> Iterator[None]:
    """
    🔒 **Exception Context Manager**

    Wraps foreign exceptions raised inside the block into ``to``.
    CleaningError instances pass through untouched.

    Example:
```python
        with exception_context(
            to=CorruptArtifactError,
            message="Failed to decode inputCols"
        ):
            cols = json.loads(blob)
```
    """
    try:
        yield
    except CleaningError:
        raise
    except Exception as e:
        wrapped = to(
            message,
            details={"original_error": str(e)},
            severity=severity,
            context=context,
            cause=e
        )

        if log:
            logger.opt(exception=e).error(str(wrapped))

        raise wrapped from e
