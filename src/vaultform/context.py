"""Runtime execution context for applying resources."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .lifecycle import LifecycleDriver


class Context:
    """Runtime state passed through the apply chain."""

    def __init__(self, driver: LifecycleDriver, *, dry_run: bool = False) -> None:
        self.driver = driver
        self.dry_run = dry_run
