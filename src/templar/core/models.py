"""
Templar Core Data Models

Defines the data structures shared by the workspace, compiler, parser and runner.
"""

from enum import Enum
from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator


class HTTPMethod(str, Enum):
    """Request verbs accepted on the request line."""

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"
    HEAD = "HEAD"
    OPTIONS = "OPTIONS"
    PATCH = "PATCH"
    TRACE = "TRACE"
    CONNECT = "CONNECT"

    @classmethod
    def names(cls) -> List[str]:
        return [member.value for member in cls]


Header = Tuple[str, str]


class Environment(BaseModel):
    """Named, flat set of substitution variables."""

    id: int = Field(description="Workspace-unique environment ID")
    name: str = Field(description="Environment name")
    variables: Dict[str, str] = Field(
        default_factory=dict, description="Substitution variables"
    )

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Environment name cannot be empty")
        return v.strip()

    def resolve(self, key: str) -> Optional[str]:
        """Return the value bound to ``key``, or None when it is undefined."""
        return self.variables.get(key)

    def set(self, key: str, value: str) -> None:
        self.variables[key] = value

    def remove(self, key: str) -> bool:
        """Remove ``key``; returns False if it was not defined."""
        return self.variables.pop(key, None) is not None


class Request(BaseModel):
    """A named, editable request template."""

    id: int = Field(description="Workspace-unique request ID")
    name: str = Field(default="Untitled", description="Display name")
    template: str = Field(default="", description="Request template text")


class HTTPRequest(BaseModel):
    """Structured HTTP request produced by the raw request parser."""

    method: str = Field(description="HTTP method")
    url: str = Field(description="Request URL")
    headers: List[Header] = Field(
        default_factory=list, description="Ordered header pairs, duplicates allowed"
    )
    body: Optional[bytes] = Field(default=None, description="Request body")

    model_config = ConfigDict(frozen=True)

    @field_validator("method")
    @classmethod
    def validate_method(cls, v: str) -> str:
        if v.upper() not in HTTPMethod.names():
            raise ValueError(f"Invalid HTTP method: {v}")
        return v.upper()

    @field_validator("body")
    @classmethod
    def empty_body_is_none(cls, v: Optional[bytes]) -> Optional[bytes]:
        return v or None

    def header_values(self, name: str) -> List[str]:
        """All values of header ``name``, case-insensitively, in order."""
        return [value for key, value in self.headers if key.lower() == name.lower()]


class HTTPResponse(BaseModel):
    """Structured HTTP response returned by the request runner."""

    version: str = Field(default="HTTP/1.1", description="Protocol version")
    status_code: int = Field(description="HTTP status code")
    reason: str = Field(default="", description="Reason phrase")
    headers: List[Header] = Field(
        default_factory=list, description="Ordered header pairs, duplicates allowed"
    )
    body: Optional[bytes] = Field(default=None, description="Response body")
    elapsed_ms: Optional[int] = Field(
        default=None, description="Round trip time in milliseconds"
    )

    model_config = ConfigDict(frozen=True)

    @field_validator("status_code")
    @classmethod
    def validate_status_code(cls, v: int) -> int:
        if not (100 <= v <= 599):
            raise ValueError(f"Invalid HTTP status code: {v}")
        return v

    @field_validator("body")
    @classmethod
    def empty_body_is_none(cls, v: Optional[bytes]) -> Optional[bytes]:
        return v or None

    def header_values(self, name: str) -> List[str]:
        """All values of header ``name``, case-insensitively, in order."""
        return [value for key, value in self.headers if key.lower() == name.lower()]


class WorkspaceDocument(BaseModel):
    """Persisted form of a workspace."""

    version: str = Field(default="1.0", description="Document format version")
    name: str = Field(description="Workspace name")
    next_request_id: int = Field(default=1, ge=1)
    next_environment_id: int = Field(default=1, ge=1)
    requests: List[Request] = Field(default_factory=list)
    environments: List[Environment] = Field(default_factory=list)
