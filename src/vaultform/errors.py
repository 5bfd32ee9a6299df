"""Error kinds raised while mapping resources and the diagnostics they become."""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel


class Severity(StrEnum):
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


class ResourceError(Exception):
    """Base class for all resource mapping failures."""

    severity = Severity.ERROR

    def __init__(self, message: str, *, path: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.path = path

    @property
    def kind(self) -> str:
        return type(self).__name__

    def __str__(self) -> str:
        if self.path:
            return f"{self.message} (path: {self.path})"
        return self.message


class InvalidConfiguration(ResourceError):
    """Schema violation detected before any remote call."""


class InvalidState(ResourceError):
    """Lifecycle operation attempted from the wrong state."""


class RemoteError(ResourceError):
    """The remote API reported a failure."""


class DecodeError(ResourceError):
    """A remote value could not be coerced to the declared field type."""


class ReplacementRequired(ResourceError):
    """A replace-triggering field changed; the resource must be recreated."""

    severity = Severity.WARNING

    def __init__(self, message: str, *, path: str | None = None, fields: list[str] | None = None) -> None:
        super().__init__(message, path=path)
        self.fields = fields or []


class NotFound(ResourceError):
    """The import target does not exist."""


class Diagnostic(BaseModel):
    """Structured report handed back to the configuration engine."""

    severity: Severity
    summary: str
    kind: str | None = None
    path: str | None = None

    @classmethod
    def from_error(cls, err: ResourceError) -> Diagnostic:
        return cls(severity=err.severity, summary=err.message, kind=err.kind, path=err.path)

    @classmethod
    def info(cls, summary: str, path: str | None = None) -> Diagnostic:
        return cls(severity=Severity.INFO, summary=summary, path=path)

    def __str__(self) -> str:
        prefix = f"[{self.severity}]"
        if self.kind:
            prefix = f"{prefix} {self.kind}:"
        text = f"{prefix} {self.summary}"
        if self.path:
            text = f"{text} ({self.path})"
        return text
