"""Resource kind base class and the registry of kinds."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Iterator, Mapping
from typing import Any, ClassVar

from ..schema import ResourceSchema

logger = logging.getLogger(__name__)


class Resource(ABC):
    """Base class for all resource kinds.

    A kind is stateless: it owns the schema and knows how to derive remote
    paths and identifiers. Instances are shared across every record of the kind.
    """

    kind: ClassVar[str]
    schema: ClassVar[ResourceSchema]

    @abstractmethod
    def remote_path(self, values: Mapping[str, Any]) -> str:
        """Path written to on create, derived from configured values only."""

    def identify(self, path: str, response: Mapping[str, Any]) -> str:
        """Identifier assigned after a successful create (defaults to the path)."""
        return path

    def read_path(self, identifier: str) -> str:
        """Path used to read, update and delete an existing object."""
        return identifier

    def select(self, values: dict[str, Any]) -> dict[str, Any]:
        """Narrow validated values to those written in one request."""
        return values

    def shape(self, payload: Mapping[str, Any], identifier: str) -> Mapping[str, Any]:
        """Restructure a remote payload into the schema's nesting before decoding."""
        return payload


class Registry(Mapping[str, Resource]):
    """Explicit registry of resource kinds, built once at startup."""

    def __init__(self) -> None:
        self._kinds: dict[str, Resource] = {}

    def register(self, resource: Resource) -> ResourceSchema:
        """Add a resource kind and return its schema.

        Raises ValueError if the kind name is already registered.
        """
        if resource.kind in self._kinds:
            raise ValueError(f"Duplicate resource kind: '{resource.kind}'")
        logger.debug("Registering resource kind '%s'", resource.kind)
        self._kinds[resource.kind] = resource
        return resource.schema

    def schema(self, kind: str) -> ResourceSchema:
        return self[kind].schema

    def __getitem__(self, kind: str) -> Resource:
        try:
            return self._kinds[kind]
        except KeyError:
            raise KeyError(f"Unknown resource kind: '{kind}'") from None

    def __iter__(self) -> Iterator[str]:
        return iter(self._kinds)

    def __len__(self) -> int:
        return len(self._kinds)

    def __repr__(self) -> str:
        return f"Registry(kinds={sorted(self._kinds)})"
