"""Identity entity aliases."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from ..errors import RemoteError
from ..schema import ResourceSchema, mapping, string
from .base import Resource

ENTITY_ALIAS_PATH = "identity/entity-alias"


class EntityAlias(Resource):
    kind = "vault_identity_entity_alias"
    schema = ResourceSchema(
        fields=(
            string("name", "Name of the entity alias", required=True),
            string("mount_accessor", "Mount accessor to which this alias belongs to", required=True),
            string("canonical_id", "ID of the entity to which this is an alias", required=True),
            mapping("custom_metadata", "Custom metadata to be associated with this alias"),
        )
    )

    def remote_path(self, values: Mapping[str, Any]) -> str:
        return ENTITY_ALIAS_PATH

    def identify(self, path: str, response: Mapping[str, Any]) -> str:
        alias_id = response.get("id")
        if not alias_id:
            raise RemoteError("Entity alias was written but no id was returned", path=path)
        return str(alias_id)

    def read_path(self, identifier: str) -> str:
        return f"{ENTITY_ALIAS_PATH}/id/{identifier}"
