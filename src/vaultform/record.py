"""In-memory representation of one resource instance."""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, Field


class ResourceState(StrEnum):
    UNMANAGED = "unmanaged"
    CREATED = "created"
    SYNCED = "synced"
    DELETED = "deleted"


class Record(BaseModel):
    """A resource instance: configured values plus its remote identifier.

    ``values`` only holds fields that are set; a missing key means the field
    is absent, which is distinct from an empty value. ``synced`` holds the
    values last known to match the remote object and is what updates are
    diffed against.
    """

    kind: str
    values: dict[str, Any] = Field(default_factory=dict)
    id: str | None = None
    state: ResourceState = ResourceState.UNMANAGED
    synced: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def restore(cls, kind: str, identifier: str, values: dict[str, Any] | None = None) -> Record:
        """Rebuild a record from a persisted identifier."""
        return cls(kind=kind, values=dict(values or {}), id=identifier, state=ResourceState.CREATED)

    @property
    def managed(self) -> bool:
        return self.id is not None

    def discard(self) -> None:
        """Forget the remote object; used after delete or when it went missing."""
        self.id = None
        self.state = ResourceState.DELETED
        self.synced = {}
