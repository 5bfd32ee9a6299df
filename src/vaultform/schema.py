"""Field descriptors and resource schemas."""

from __future__ import annotations

from collections.abc import Iterator
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, model_validator


class FieldType(StrEnum):
    """Semantic type of a configuration field."""

    STRING = "string"
    BOOL = "bool"
    MAP = "map"
    BLOCK = "block"


class FieldSpec(BaseModel):
    """Describes one configuration field."""

    model_config = ConfigDict(frozen=True)

    name: str
    type: FieldType = FieldType.STRING
    required: bool = False
    computed: bool = False
    force_new: bool = False
    default: Any = None
    description: str = ""

    # only meaningful for blocks
    block: ResourceSchema | None = None
    max_items: int | None = None

    @model_validator(mode="after")
    def _check_block(self) -> FieldSpec:
        if self.type is FieldType.BLOCK and self.block is None:
            raise ValueError(f"Block field '{self.name}' has no nested schema")
        if self.type is not FieldType.BLOCK and self.block is not None:
            raise ValueError(f"Field '{self.name}' is not a block but has a nested schema")
        if self.required and self.default is not None:
            raise ValueError(f"Required field '{self.name}' cannot have a default")
        return self

    @property
    def is_block(self) -> bool:
        return self.type is FieldType.BLOCK

    @property
    def nested(self) -> ResourceSchema:
        """Schema of a block field."""
        if self.block is None:
            raise TypeError(f"Field '{self.name}' is not a block")
        return self.block


class ResourceSchema(BaseModel):
    """Declaration-ordered collection of field specs."""

    model_config = ConfigDict(frozen=True)

    fields: tuple[FieldSpec, ...] = ()

    @model_validator(mode="after")
    def _check_unique(self) -> ResourceSchema:
        seen: set[str] = set()
        for field in self.fields:
            if field.name in seen:
                raise ValueError(f"Duplicate field: '{field.name}'")
            seen.add(field.name)
        return self

    def __getitem__(self, name: str) -> FieldSpec:
        for field in self.fields:
            if field.name == name:
                return field
        raise KeyError(name)

    def __contains__(self, name: object) -> bool:
        return any(field.name == name for field in self.fields)

    def __iter__(self) -> Iterator[FieldSpec]:  # type: ignore[override]
        return iter(self.fields)

    def __len__(self) -> int:
        return len(self.fields)

    def names(self) -> list[str]:
        return [field.name for field in self.fields]

    def blocks(self) -> list[FieldSpec]:
        return [field for field in self.fields if field.is_block]


FieldSpec.model_rebuild()
ResourceSchema.model_rebuild()


def string(name: str, description: str = "", **kwargs: Any) -> FieldSpec:
    """Shorthand for a string field."""
    return FieldSpec(name=name, type=FieldType.STRING, description=description, **kwargs)


def boolean(name: str, description: str = "", **kwargs: Any) -> FieldSpec:
    """Shorthand for a boolean carried as a string on the wire."""
    return FieldSpec(name=name, type=FieldType.BOOL, description=description, **kwargs)


def mapping(name: str, description: str = "", **kwargs: Any) -> FieldSpec:
    """Shorthand for a map of strings."""
    return FieldSpec(name=name, type=FieldType.MAP, description=description, **kwargs)


def block(
    name: str,
    *fields: FieldSpec,
    description: str = "",
    max_items: int | None = 1,
    **kwargs: Any,
) -> FieldSpec:
    """Shorthand for a nested block with its own schema."""
    return FieldSpec(
        name=name,
        type=FieldType.BLOCK,
        description=description,
        block=ResourceSchema(fields=fields),
        max_items=max_items,
        **kwargs,
    )
