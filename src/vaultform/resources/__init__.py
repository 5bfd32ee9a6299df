"""Built-in resource kinds."""

from .base import Registry as Registry
from .base import Resource as Resource
from .entity_alias import EntityAlias as EntityAlias
from .managed_keys import ManagedKeys as ManagedKeys


def build_registry() -> Registry:
    """Return a registry holding every built-in resource kind."""
    registry = Registry()
    registry.register(ManagedKeys())
    registry.register(EntityAlias())
    return registry
