"""Resolver: expand ${...} references in resource attributes."""

from __future__ import annotations

import logging
import os
import re
from collections.abc import Mapping
from typing import Any

logger = logging.getLogger(__name__)

_REF_PATTERN = re.compile(r"\$\$\{|\$\{([^{}]+)\}")
_WHOLE_REF = re.compile(r"\$\{([^{}]+)\}")


def default_context() -> dict[str, Any]:
    """Context available to every configuration file."""
    return {"env": dict(os.environ), "cwd": os.getcwd}


class Resolver:
    """Resolve ${...} references against a context mapping.

    A value that is exactly one reference resolves to the referenced object
    itself; references embedded in text are stringified. ``$${`` produces a
    literal ``${``.
    """

    def __init__(self, context: Mapping[str, Any] | None = None) -> None:
        self._context = dict(context or {})

    def lookup(self, ref: str) -> Any:
        """Resolve a dotted reference such as 'env.VAULT_ADDR'."""
        current: Any = self._context
        for part in ref.split("."):
            if isinstance(current, Mapping) and part in current:
                current = current[part]
            elif hasattr(current, part) and not isinstance(current, Mapping):
                current = getattr(current, part)
            else:
                raise ValueError(f"undefined variable '{ref}'")

        if callable(current) and not isinstance(current, type):
            current = current()
        return current

    def expand(self, value: str) -> Any:
        if "${" not in value:
            return value

        if match := _WHOLE_REF.fullmatch(value):
            return self.lookup(match.group(1).strip())

        def _replace(m: re.Match[str]) -> str:
            if m.group(1) is None:
                return "${"
            return str(self.lookup(m.group(1).strip()))

        return _REF_PATTERN.sub(_replace, value)

    def resolve(self, data: Any) -> Any:
        """Walk nested dicts and lists, expanding every string."""
        if isinstance(data, dict):
            return {k: self.resolve(v) for k, v in data.items()}
        if isinstance(data, list):
            return [self.resolve(item) for item in data]
        if isinstance(data, str):
            return self.expand(data)
        return data
