"""ResourceOp strategies: present, ensure and absent."""

from __future__ import annotations

import copy
import logging
from abc import ABC, abstractmethod

from .codec import Diff, diff, drop_blocks, merge, validate
from .context import Context
from .errors import Diagnostic, ResourceError
from .lifecycle import Outcome
from .record import Record, ResourceState

logger = logging.getLogger(__name__)


class ResourceOp(ABC):
    """Wraps a declared resource with conditional lifecycle logic."""

    def __init__(self, address: str, record: Record) -> None:
        self.address = address
        self.record = record
        self.desired = copy.deepcopy(record.values)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.address!r})"

    @abstractmethod
    def __call__(self, ctx: Context) -> Outcome: ...

    def _refresh(self, ctx: Context) -> Outcome | None:
        """Read the remote object if one is known; return the outcome on failure."""
        if self.record.id is None:
            return None
        outcome = ctx.driver.read(self.record)
        return None if outcome.ok else outcome

    def _create(self, ctx: Context) -> Outcome:
        self.record.values = copy.deepcopy(self.desired)
        outcome = ctx.driver.create(self.record)
        if not outcome.ok:
            return outcome
        return _combine(outcome, ctx.driver.read(self.record))

    def _changes(self, ctx: Context) -> Diff:
        resource = ctx.driver.registry[self.record.kind]
        # blocks come from the configuration only; a remote block left out of it is being replaced
        current = drop_blocks(self.record.values, resource.schema, keep=self.desired)
        self.record.values = merge(current, self.desired, resource.schema)
        values = resource.select(validate(self.record.values, resource.schema))
        return diff(values, self.record.synced, resource.schema)


def _combine(first: Outcome, second: Outcome) -> Outcome:
    return Outcome(record=second.record, diagnostics=[*first.diagnostics, *second.diagnostics])


class Present(ResourceOp):
    """Create only if the resource doesn't exist."""

    def __call__(self, ctx: Context) -> Outcome:
        if (failed := self._refresh(ctx)) is not None:
            return failed
        if self.record.state is ResourceState.SYNCED:
            logger.debug("Skipping %s; already exists", self.address)
            return Outcome(record=self.record)
        if ctx.dry_run:
            logger.info("[DRY RUN] Would create %s", self.address)
            return Outcome(record=self.record)
        logger.info("Creating %s", self.address)
        return self._create(ctx)


class Ensure(ResourceOp):
    """Create if missing, update if the remote state doesn't match."""

    def __call__(self, ctx: Context) -> Outcome:
        if (failed := self._refresh(ctx)) is not None:
            return failed
        if self.record.state is not ResourceState.SYNCED:
            if ctx.dry_run:
                logger.info("[DRY RUN] Would create %s", self.address)
                return Outcome(record=self.record)
            logger.info("Creating %s", self.address)
            return self._create(ctx)

        try:
            changes = self._changes(ctx)
        except ResourceError as err:
            return Outcome(record=self.record, diagnostics=[Diagnostic.from_error(err)])

        if not changes:
            logger.debug("Skipping %s; up to date", self.address)
            return Outcome(record=self.record)
        if ctx.dry_run:
            action = "replace" if changes.replace else "update"
            logger.info("[DRY RUN] Would %s %s", action, self.address)
            return Outcome(record=self.record)

        logger.info("Updating %s", self.address)
        outcome = ctx.driver.update(self.record)
        if outcome.ok and self.record.state is ResourceState.CREATED:
            # replaced; pick up the new object's remote state
            return _combine(outcome, ctx.driver.read(self.record))
        return outcome


class Absent(ResourceOp):
    """Remove if the resource is known."""

    def __call__(self, ctx: Context) -> Outcome:
        if self.record.id is None:
            logger.debug("Skipping removal of %s; not present", self.address)
            return Outcome(record=self.record)
        if ctx.dry_run:
            logger.info("[DRY RUN] Would remove %s", self.address)
            return Outcome(record=self.record)
        logger.info("Removing %s", self.address)
        return ctx.driver.delete(self.record)
