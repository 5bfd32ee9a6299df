"""State file: the identifiers of managed resources between runs."""

from __future__ import annotations

import logging
from pathlib import Path

from pydantic import BaseModel, Field

from .record import Record

logger = logging.getLogger(__name__)


class StateFile(BaseModel):
    """Persisted map of resource address -> remote identifier."""

    version: int = 1
    resources: dict[str, str] = Field(default_factory=dict)

    @classmethod
    def load(cls, path: str | Path) -> StateFile:
        """Read a state file; a missing file is an empty state."""
        path = Path(path)
        if not path.exists():
            logger.debug("No state at %s; starting empty", path)
            return cls()
        return cls.model_validate_json(path.read_text())

    def save(self, path: str | Path) -> None:
        path = Path(path)
        path.write_text(self.model_dump_json(indent=2) + "\n")
        logger.debug("Saved %d resource(s) to %s", len(self.resources), path)

    def get(self, address: str) -> str | None:
        return self.resources.get(address)

    def track(self, address: str, record: Record) -> None:
        """Record the identifier of a resource, dropping it once deleted."""
        if record.id is None:
            if self.resources.pop(address, None) is not None:
                logger.debug("Forgetting %s", address)
        else:
            self.resources[address] = record.id
