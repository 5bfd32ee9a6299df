"""Encoder and decoder between records and untyped API payloads."""

from __future__ import annotations

import copy
import logging
from collections.abc import Collection, Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from .errors import DecodeError, InvalidConfiguration
from .schema import FieldSpec, FieldType, ResourceSchema

if TYPE_CHECKING:
    from .record import Record
    from .resources.base import Resource

logger = logging.getLogger(__name__)

_TRUE = {"1", "t", "T", "true", "TRUE", "True"}
_FALSE = {"0", "f", "F", "false", "FALSE", "False"}


# -- Coercion --


def _to_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        if value in _TRUE:
            return True
        if value in _FALSE:
            return False
    raise ValueError(f"expected a boolean, got {value!r}")


def _to_string(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (str, int, float)):
        return str(value)
    raise ValueError(f"expected a string, got {type(value).__name__}")


def _to_map(value: Any) -> dict[str, str]:
    if not isinstance(value, Mapping):
        raise ValueError(f"expected a map, got {type(value).__name__}")
    return {str(k): _to_string(v) for k, v in value.items()}


def _block_items(spec: FieldSpec, value: Any) -> list[Mapping[str, Any]]:
    """Normalize a block value to a list of attribute mappings.

    Parsed HCL yields a list of dicts per block name; a bare mapping is
    accepted as a single instance.
    """
    if isinstance(value, Mapping):
        return [value]
    if isinstance(value, list) and all(isinstance(item, Mapping) for item in value):
        return value
    raise ValueError(f"expected a '{spec.name}' block, got {type(value).__name__}")


def _coerce(spec: FieldSpec, value: Any) -> Any:
    match spec.type:
        case FieldType.BOOL:
            return _to_bool(value)
        case FieldType.MAP:
            return _to_map(value)
        case _:
            return _to_string(value)


def _wire(spec: FieldSpec, value: Any) -> Any:
    """Convert a normalized local value to its payload form."""
    if spec.type is FieldType.MAP:
        return dict(value)
    return _to_string(value)


# -- Validation --


def validate(values: Mapping[str, Any], schema: ResourceSchema, *, where: str = "") -> dict[str, Any]:
    """Check configured values against a schema and return them normalized.

    Raises InvalidConfiguration on unknown fields, missing required fields,
    values of the wrong type, and blocks configured more often than allowed.
    """
    for name in values:
        if name not in schema:
            raise InvalidConfiguration(f"Unsupported argument '{where}{name}'")

    result: dict[str, Any] = {}
    for spec in schema:
        label = f"{where}{spec.name}"
        value = values.get(spec.name)
        if value is None:
            if spec.required:
                raise InvalidConfiguration(f"Missing required argument '{label}'")
            continue

        if spec.is_block:
            try:
                items = _block_items(spec, value)
            except ValueError as exc:
                raise InvalidConfiguration(f"Invalid value for '{label}': {exc}") from exc
            if spec.max_items is not None and len(items) > spec.max_items:
                raise InvalidConfiguration(
                    f"Too many '{label}' blocks: no more than {spec.max_items} allowed, got {len(items)}"
                )
            if spec.required and not items:
                raise InvalidConfiguration(f"Missing required block '{label}'")
            result[spec.name] = [
                validate(item, spec.nested, where=f"{label}.{idx}.") for idx, item in enumerate(items)
            ]
            continue

        try:
            result[spec.name] = _coerce(spec, value)
        except ValueError as exc:
            raise InvalidConfiguration(f"Invalid value for '{label}': {exc}") from exc

    return result


# -- Encoding --


def build_payload(
    values: Mapping[str, Any],
    schema: ResourceSchema,
    *,
    only: Collection[str] | None = None,
) -> dict[str, Any]:
    """Flatten normalized values into an API payload.

    Set fields are always written; absent fields are written only when they
    carry a default. When ``only`` is given, top-level fields outside it are
    skipped and defaults are not filled in for them.
    """
    payload: dict[str, Any] = {}
    for spec in schema:
        if only is not None and spec.name not in only:
            continue
        if spec.is_block:
            for item in values.get(spec.name, []):
                payload.update(build_payload(item, spec.nested))
        elif spec.name in values:
            payload[spec.name] = _wire(spec, values[spec.name])
        elif spec.default is not None and only is None:
            payload[spec.name] = _wire(spec, spec.default)
    return payload


def encode(record: Record, resource: Resource) -> tuple[str, dict[str, Any]]:
    """Encode a record into its remote path and write payload."""
    values = resource.select(validate(record.values, resource.schema))
    path = resource.remote_path(values)
    payload = build_payload(values, resource.schema)
    logger.debug("Encoded %s -> %s (%d field(s))", resource.kind, path, len(payload))
    return path, payload


# -- Decoding --


def decode(payload: Mapping[str, Any], schema: ResourceSchema) -> dict[str, Any]:
    """Decode a remote payload into record values.

    Only fields declared in the schema are copied; absent fields stay absent.
    """
    result: dict[str, Any] = {}
    for spec in schema:
        value = payload.get(spec.name)
        if value is None:
            continue
        try:
            if spec.is_block:
                result[spec.name] = [decode(item, spec.nested) for item in _block_items(spec, value)]
            else:
                result[spec.name] = _coerce(spec, value)
        except ValueError as exc:
            raise DecodeError(f"Cannot decode '{spec.name}': {exc}") from exc
    return result


# -- Reconciliation --


@dataclass
class Diff:
    """Top-level fields that differ, and the replace-triggering subset (dotted)."""

    changed: list[str] = field(default_factory=list)
    replace: list[str] = field(default_factory=list)

    def __bool__(self) -> bool:
        return bool(self.changed)


def diff(values: Mapping[str, Any], synced: Mapping[str, Any], schema: ResourceSchema) -> Diff:
    """Compare configured values against the last synced values.

    Fields absent from ``values`` are never reported; they are either unset
    or computed remotely.
    """
    result = Diff()
    for spec in schema:
        if spec.name not in values:
            continue
        want = values[spec.name]
        have = synced.get(spec.name)

        if not spec.is_block:
            if want != have:
                result.changed.append(spec.name)
                if spec.force_new:
                    result.replace.append(spec.name)
            continue

        have_items = have or []
        block_changed = len(want) != len(have_items)
        for idx, item in enumerate(want):
            other = have_items[idx] if idx < len(have_items) else {}
            inner = diff(item, other, spec.nested)
            if inner:
                block_changed = True
            result.replace.extend(f"{spec.name}.{idx}.{name}" for name in inner.replace)
        if block_changed:
            result.changed.append(spec.name)
            if spec.force_new:
                result.replace.append(spec.name)
    return result


def merge(base: Mapping[str, Any], overlay: Mapping[str, Any], schema: ResourceSchema) -> dict[str, Any]:
    """Overlay decoded remote values onto known values.

    Fields the remote does not report (write-only secrets, for instance) keep
    their known value. Blocks are merged instance by instance.
    """
    result = copy.deepcopy(dict(base))
    for spec in schema:
        if spec.name not in overlay:
            continue
        if spec.is_block and spec.name in result:
            known = result[spec.name]
            result[spec.name] = [
                merge(known[idx] if idx < len(known) else {}, item, spec.nested)
                for idx, item in enumerate(overlay[spec.name])
            ]
        else:
            result[spec.name] = copy.deepcopy(overlay[spec.name])
    return result


def drop_blocks(values: Mapping[str, Any], schema: ResourceSchema, *, keep: Collection[str]) -> dict[str, Any]:
    """Copy values without the block fields that are not named in ``keep``."""
    return {
        name: value
        for name, value in values.items()
        if name in keep or name not in schema or not schema[name].is_block
    }
