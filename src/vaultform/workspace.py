"""Workspace: the declared resources of a configuration, keyed by address."""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from pathlib import Path
from typing import Any

from .codec import validate
from .context import Context
from .errors import InvalidConfiguration
from .hcl import load as load_hcl
from .lifecycle import Outcome
from .ops import Absent, Ensure, Present, ResourceOp
from .record import Record, ResourceState
from .resolve import Resolver, default_context
from .resources import Registry
from .state import StateFile

logger = logging.getLogger(__name__)

_STRATEGY_MAP: dict[str, type[ResourceOp]] = {
    "present": Present,
    "ensure": Ensure,
    "absent": Absent,
}


class Workspace(Mapping[str, ResourceOp]):
    """Accumulates resource declarations and applies them in declaration order.

    Declarations take the form ``<strategy> "<kind>" "<label>" { ... }`` and
    are addressed as ``<kind>.<label>``.
    """

    def __init__(self, registry: Registry, *, context: dict[str, Any] | None = None) -> None:
        self._registry = registry
        self._context = {**default_context(), **(context or {})}
        self._resolver = Resolver(self._context)
        self._ops: dict[str, ResourceOp] = {}

    def scan(self, path: str | Path, *, recurse: bool = True) -> None:
        """Load every .hcl file under a directory, in sorted order."""
        path = Path(path)
        files = sorted(path.rglob("*.hcl") if recurse else path.glob("*.hcl"))
        logger.debug("Found %d file(s) under %s", len(files), path)
        for file in files:
            self.load_file(file)

    def load_file(self, file: str | Path) -> None:
        file = Path(file)
        logger.debug("Loading %s", file)
        self.load(load_hcl(file, context=self._context))

    def load(self, data: dict[str, Any]) -> None:
        """Extract resource declarations from a parsed data dict.

        Raises ValueError for unknown kinds or duplicate addresses and
        InvalidConfiguration when attributes do not match the kind's schema.

        Parsed structure:
            {"ensure": [{"vault_managed_keys": {"keys": {"aws": [{...}]}}}], ...}
        """
        for strategy_name, strategy_cls in _STRATEGY_MAP.items():
            for block in data.get(strategy_name, []):
                for kind, labeled in block.items():
                    for label, attrs in labeled.items():
                        self._declare(strategy_cls, kind, label, attrs)

    def _declare(self, strategy_cls: type[ResourceOp], kind: str, label: str, attrs: dict[str, Any]) -> None:
        address = f"{kind}.{label}"
        if address in self._ops:
            raise ValueError(f"Duplicate resource: '{address}'")
        if kind not in self._registry:
            raise ValueError(f"Unknown resource kind: '{kind}'")

        schema = self._registry.schema(kind)
        try:
            resolved = self._resolver.resolve(attrs)
        except ValueError as exc:
            raise InvalidConfiguration(f"{address}: {exc}") from exc
        try:
            values = validate(resolved, schema)
        except InvalidConfiguration as err:
            raise InvalidConfiguration(f"{address}: {err.message}") from err

        logger.debug("Found %s '%s'", strategy_cls.__name__.lower(), address)
        self._ops[address] = strategy_cls(address, Record(kind=kind, values=values))

    def apply(self, ctx: Context, state: StateFile | None = None) -> dict[str, Outcome]:
        """Run every operation; known identifiers are taken from and written back to state."""
        logger.debug("Applying %d resource(s)", len(self._ops))
        results: dict[str, Outcome] = {}
        for address, op in self._ops.items():
            if state is not None and op.record.id is None:
                identifier = state.get(address)
                if identifier is not None:
                    op.record.id = identifier
                    op.record.state = ResourceState.CREATED

            outcome = op(ctx)
            results[address] = outcome
            for diagnostic in outcome.diagnostics:
                logger.debug("%s: %s", address, diagnostic)

            if state is not None and not ctx.dry_run:
                state.track(address, op.record)
        return results

    def __getitem__(self, address: str) -> ResourceOp:
        return self._ops[address]

    def __contains__(self, address: object) -> bool:
        return address in self._ops

    def __iter__(self) -> Iterator[str]:
        return iter(self._ops)

    def __len__(self) -> int:
        return len(self._ops)

    def __repr__(self) -> str:
        return f"Workspace(kinds={len(self._registry)}, resources={len(self._ops)})"
