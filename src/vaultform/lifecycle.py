"""Lifecycle driver: create, read, update, delete and import resources."""

from __future__ import annotations

import copy
import logging
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, Field

from .client import RemoteClient
from .codec import build_payload, decode, diff, drop_blocks, encode, merge, validate
from .errors import (
    DecodeError,
    Diagnostic,
    InvalidConfiguration,
    InvalidState,
    NotFound,
    ReplacementRequired,
    ResourceError,
    Severity,
)
from .record import Record, ResourceState
from .resources import Registry, Resource

logger = logging.getLogger(__name__)


class Outcome(BaseModel):
    """Result of one lifecycle operation as seen by the configuration engine."""

    record: Record | None = None
    diagnostics: list[Diagnostic] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not any(d.severity is Severity.ERROR for d in self.diagnostics)

    @property
    def errors(self) -> list[Diagnostic]:
        return [d for d in self.diagnostics if d.severity is Severity.ERROR]


class LifecycleDriver:
    """Drives records through their lifecycle against a remote client.

    The driver keeps no per-record state, so one instance can serve distinct
    records concurrently. Public operations never raise ResourceError; failures
    come back as diagnostics on the Outcome.
    """

    def __init__(self, client: RemoteClient, registry: Registry) -> None:
        self.client = client
        self.registry = registry

    def __repr__(self) -> str:
        return f"LifecycleDriver(kinds={list(self.registry)})"

    # -- Boundary --

    def create(self, record: Record) -> Outcome:
        try:
            self._create(record)
        except ResourceError as err:
            return self._failed(record, err)
        return Outcome(record=record)

    def read(self, record: Record) -> Outcome:
        if record.state is ResourceState.DELETED:
            logger.debug("Skipping read of %s; already deleted", record.kind)
            return Outcome(record=record, diagnostics=[Diagnostic.info("already deleted")])
        try:
            self._read(record)
        except ResourceError as err:
            return self._failed(record, err)
        return Outcome(record=record)

    def update(self, record: Record) -> Outcome:
        try:
            self._update(record)
        except ReplacementRequired as err:
            logger.info("Replacing %s %s: %s", record.kind, record.id, ", ".join(err.fields))
            outcome = Outcome(record=record, diagnostics=[Diagnostic.from_error(err)])
            try:
                self._delete(record)
                self._create(record)
            except ResourceError as inner:
                outcome.diagnostics.append(Diagnostic.from_error(inner))
            return outcome
        except ResourceError as err:
            return self._failed(record, err)
        return Outcome(record=record)

    def delete(self, record: Record) -> Outcome:
        if record.state is ResourceState.DELETED:
            logger.debug("Skipping delete of %s; already deleted", record.kind)
            return Outcome(record=record, diagnostics=[Diagnostic.info("already deleted")])
        try:
            self._delete(record)
        except ResourceError as err:
            return self._failed(record, err)
        return Outcome(record=record)

    def import_resource(self, kind: str, identifier: str) -> Outcome:
        try:
            record = self._import(kind, identifier)
        except ResourceError as err:
            logger.error("Import of %s '%s' failed: %s", kind, identifier, err)
            return Outcome(diagnostics=[Diagnostic.from_error(err)])
        return Outcome(record=record)

    @staticmethod
    def _failed(record: Record, err: ResourceError) -> Outcome:
        logger.error("%s on %s failed: %s", err.kind, record.kind, err)
        return Outcome(record=record, diagnostics=[Diagnostic.from_error(err)])

    # -- Operations --

    def _resource(self, kind: str) -> Resource:
        try:
            return self.registry[kind]
        except KeyError:
            raise InvalidConfiguration(f"Unknown resource kind: '{kind}'") from None

    def _create(self, record: Record) -> None:
        if record.state not in (ResourceState.UNMANAGED, ResourceState.DELETED):
            raise InvalidState(f"Cannot create a resource in state '{record.state}'", path=record.id)

        resource = self._resource(record.kind)
        path, payload = encode(record, resource)
        logger.info("Creating %s at %s", record.kind, path)
        response = self.client.write(path, payload)

        record.id = resource.identify(path, response)
        record.state = ResourceState.CREATED
        record.synced = resource.select(validate(record.values, resource.schema))
        logger.debug("Created %s with id %s", record.kind, record.id)

    def _read(self, record: Record) -> None:
        if record.id is None:
            raise InvalidState(f"Cannot read {record.kind} without an identifier")

        resource = self._resource(record.kind)
        path = resource.read_path(record.id)
        logger.debug("Reading %s at %s", record.kind, path)
        remote = self.client.read(path)
        if remote is None:
            logger.info("%s at %s no longer exists; removing from state", record.kind, path)
            record.discard()
            return
        self._sync(record, resource, remote, path)

    def _sync(self, record: Record, resource: Resource, remote: Mapping[str, Any], path: str) -> None:
        if record.id is None:
            raise InvalidState(f"Cannot sync {record.kind} without an identifier", path=path)
        try:
            decoded = decode(resource.shape(remote, record.id), resource.schema)
        except DecodeError as err:
            err.path = path
            raise
        # a block the remote object does not report is not part of it
        known = drop_blocks(record.values, resource.schema, keep=decoded)
        record.values = merge(known, decoded, resource.schema)
        record.synced = copy.deepcopy(record.values)
        record.state = ResourceState.SYNCED

    def _update(self, record: Record) -> None:
        if record.id is None or record.state is not ResourceState.SYNCED:
            raise InvalidState(
                f"Cannot update {record.kind} in state '{record.state}'; read it first",
                path=record.id,
            )

        resource = self._resource(record.kind)
        path = resource.read_path(record.id)
        values = resource.select(validate(record.values, resource.schema))
        changes = diff(values, record.synced, resource.schema)
        if changes.replace:
            raise ReplacementRequired(
                f"Changing {', '.join(changes.replace)} requires replacing the resource",
                path=path,
                fields=changes.replace,
            )
        if not changes:
            logger.debug("Skipping update of %s; no changes", path)
            return

        payload = build_payload(values, resource.schema, only=changes.changed)
        logger.info("Updating %s at %s: %s", record.kind, path, ", ".join(changes.changed))
        self.client.write(path, payload)
        record.synced = merge(record.synced, values, resource.schema)

    def _delete(self, record: Record) -> None:
        if record.id is None:
            raise InvalidState(f"Cannot delete {record.kind} without an identifier")

        path = self._resource(record.kind).read_path(record.id)
        logger.info("Deleting %s at %s", record.kind, path)
        self.client.delete(path)
        record.discard()
        logger.debug("Deleted %s", path)

    def _import(self, kind: str, identifier: str) -> Record:
        resource = self._resource(kind)
        path = resource.read_path(identifier)
        logger.info("Importing %s from %s", kind, path)
        remote = self.client.read(path)
        if remote is None:
            raise NotFound(f"Cannot import non-existent remote object '{identifier}'", path=path)
        record = Record.restore(kind, identifier)
        self._sync(record, resource, remote, path)
        return record
