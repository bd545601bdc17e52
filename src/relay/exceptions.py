"""Exception hierarchy for the relay agent runtime.

Design Principles:
    - All exceptions inherit from RelayError
    - Exceptions preserve context (original error, timestamps, details)
    - Exceptions are categorized by recoverability

Only configuration and registration errors ever reach callers of
``Agent.answer``. Transport and tool errors are recovered inside the
conversation loop and turned into conversation messages.

Exception Hierarchy:
    RelayError (base)
    ├── ConfigurationError (unrecoverable - fix config)
    ├── TransportError (recoverable - try another provider)
    │   └── EmptyResponseError
    ├── ProviderPoolExhaustedError
    └── ToolError
        ├── ToolAlreadyExistsError
        └── ToolArgumentsError
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Optional

from .domain.entities import ErrorType

# ============================================
# Base Exception
# ============================================


class RelayError(Exception):
    """Base exception for all relay errors.

    Attributes:
        message: Human-readable error description
        code: Machine-readable error code (e.g., "TOOL_ALREADY_EXISTS")
        details: Additional context as a dictionary
        timestamp: When the error occurred
        cause: The original exception that caused this error
        recoverable: Whether this error might be recoverable with retry
    """

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
        cause: Optional[Exception] = None,
        recoverable: bool = False,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__.upper()
        self.details = details or {}
        self.timestamp = datetime.now(timezone.utc)
        self.cause = cause
        self.recoverable = recoverable

        if cause:
            self.__cause__ = cause

    def __str__(self) -> str:
        parts = [self.message]
        if self.code:
            parts.insert(0, f"[{self.code}]")
        if self.details:
            detail_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            parts.append(f"({detail_str})")
        return " ".join(parts)

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"code={self.code!r}, "
            f"details={self.details!r}, "
            f"recoverable={self.recoverable})"
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for logging/serialization."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "code": self.code,
            "details": self.details,
            "timestamp": self.timestamp.isoformat(),
            "recoverable": self.recoverable,
            "cause": str(self.cause) if self.cause else None,
        }


# ============================================
# Configuration Errors (Unrecoverable)
# ============================================


class ConfigurationError(RelayError):
    """Raised when agent or provider configuration is missing or invalid."""

    def __init__(
        self,
        message: str,
        missing_keys: Optional[list[str]] = None,
        **kwargs,
    ):
        details = kwargs.pop("details", {})
        if missing_keys:
            details["missing_keys"] = missing_keys
        super().__init__(
            message,
            code="CONFIGURATION_ERROR",
            details=details,
            recoverable=False,
            **kwargs,
        )


# ============================================
# Transport Errors (Recoverable)
# ============================================


class TransportError(RelayError):
    """Raised when a backend cannot produce a completion.

    Attributes:
        error_type: Classification used for logging (rate limit, timeout...)
        endpoint: Endpoint of the provider that failed
    """

    def __init__(
        self,
        message: str,
        error_type: ErrorType = ErrorType.RECOVERABLE,
        endpoint: Optional[str] = None,
        **kwargs,
    ):
        details = kwargs.pop("details", {})
        details["error_type"] = error_type.value
        if endpoint:
            details["endpoint"] = endpoint
        kwargs.setdefault("code", "TRANSPORT_ERROR")
        kwargs.setdefault("recoverable", True)
        super().__init__(message, details=details, **kwargs)
        self.error_type = error_type
        self.endpoint = endpoint


class EmptyResponseError(TransportError):
    """Raised when a backend answers with zero choices."""

    def __init__(self, message: str = "Backend returned no choices", **kwargs):
        super().__init__(message, code="EMPTY_RESPONSE", **kwargs)


class ProviderPoolExhaustedError(RelayError):
    """Raised when a provider is requested from an empty pool."""

    def __init__(self, message: str = "No providers left in the pool", **kwargs):
        super().__init__(message, code="PROVIDER_POOL_EXHAUSTED", **kwargs)


# ============================================
# Tool Errors
# ============================================


class ToolError(RelayError):
    """Base class for tool registration and dispatch errors."""

    def __init__(self, message: str, tool_name: Optional[str] = None, **kwargs):
        details = kwargs.pop("details", {})
        if tool_name:
            details["tool_name"] = tool_name
        super().__init__(message, details=details, **kwargs)
        self.tool_name = tool_name


class ToolAlreadyExistsError(ToolError):
    """Raised when registering a tool whose name is already taken."""

    def __init__(self, tool_name: str, **kwargs):
        super().__init__(
            f"Tool '{tool_name}' already exists",
            tool_name=tool_name,
            code="TOOL_ALREADY_EXISTS",
            recoverable=False,
            **kwargs,
        )


class ToolArgumentsError(ToolError):
    """Raised when tool call arguments cannot be parsed into a parameter map."""

    def __init__(self, message: str, tool_name: Optional[str] = None, **kwargs):
        super().__init__(
            message,
            tool_name=tool_name,
            code="TOOL_ARGUMENTS_INVALID",
            recoverable=True,
            **kwargs,
        )
