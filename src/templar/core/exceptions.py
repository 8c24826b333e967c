"""
Templar Exception Hierarchy

Defines the exceptions raised by the compile/parse/execute pipeline and the workspace.
"""

from enum import Enum
from typing import Any, Dict, Optional


class TemplarException(Exception):
    """Base exception for all Templar errors."""

    label = "error"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} (Details: {self.details})"
        return self.message


class CompilationError(TemplarException):
    """A template could not be rendered (undefined variable or bad syntax)."""

    label = "compilation"

    def __init__(
        self,
        message: str,
        variable: Optional[str] = None,
        line: Optional[int] = None,
        column: Optional[int] = None,
    ) -> None:
        if line is not None:
            message = f"{message} at line {line}, column {column}"
        super().__init__(message)
        self.variable = variable
        self.line = line
        self.column = column


class MalformedRequestError(TemplarException):
    """Compiled text does not describe a valid HTTP request."""

    label = "malformed request"

    def __init__(self, message: str, line: Optional[int] = None) -> None:
        if line is not None:
            message = f"{message} (line {line})"
        super().__init__(message)
        self.line = line


class NetworkErrorKind(str, Enum):
    """Failure categories reported by the request runner."""

    CONNECTION_FAILED = "connection_failed"
    DNS_FAILURE = "dns_failure"
    TIMEOUT = "timeout"
    CANCELLED = "cancelled"
    TLS_ERROR = "tls_error"
    PROTOCOL_ERROR = "protocol_error"


class NetworkError(TemplarException):
    """Network-related errors."""

    def __init__(
        self,
        kind: NetworkErrorKind,
        message: str,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, details)
        self.kind = kind

    @property
    def label(self) -> str:  # type: ignore[override]
        return f"network: {self.kind.value}"


class NotFoundError(TemplarException):
    """An operation referenced an id that does not exist in the workspace."""

    label = "not found"


class StorageError(TemplarException):
    """Workspace storage and retrieval errors."""

    label = "storage"


class ConfigurationError(TemplarException):
    """Configuration-related errors."""

    label = "configuration"


def format_error(error: TemplarException) -> str:
    """
    Render an error as the text shown in place of a response.

    Args:
        error: Error raised somewhere in the pipeline

    Returns:
        Single labeled line, e.g. ``ERROR [network: timeout] Request timed out``
    """
    return f"ERROR [{error.label}] {error}"
