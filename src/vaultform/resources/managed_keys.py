"""Managed keys: external key backends registered under sys/managed-keys."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from ..errors import InvalidConfiguration
from ..schema import ResourceSchema, block, boolean, string
from .base import Resource

logger = logging.getLogger(__name__)

KMS_TYPE_PKCS = "pkcs11"
KMS_TYPE_AWS = "awskms"
KMS_TYPE_AZURE = "azurekeyvault"

MANAGED_KEYS_PREFIX = "sys/managed-keys"

_NAME_DESCRIPTION = "A unique lowercase name that serves as identifying the key"

PKCS_BLOCK = block(
    "pkcs",
    string("name", _NAME_DESCRIPTION, required=True, force_new=True),
    string(
        "library",
        "The name of the kms_library stanza to use from Vault's config to lookup the local library path",
        required=True,
    ),
    string("key_label", "The label of the key to use", required=True),
    string("key_id", "The id of a PKCS#11 key to use", required=True),
    string(
        "mechanism",
        "The encryption/decryption mechanism to use, specified as a hexadecimal (prefixed by 0x) string",
        required=True,
    ),
    string("pin", "The PIN for login", required=True),
    string("slot", "The slot number to use, specified as a string in a decimal format"),
    string("token_label", "The slot token label to use"),
    string("curve", "Supplies the curve value when using the 'CKM_ECDSA' mechanism"),
    string(
        "key_bits",
        "Supplies the size in bits of the key when using 'CKM_RSA_PKCS_PSS', "
        "'CKM_RSA_PKCS_OAEP' or 'CKM_RSA_PKCS' as a value for 'mechanism'",
    ),
    string("force_rw_session", "Force all operations to open up a read-write session to the HSM"),
    description="Configuration block for PKCS Managed Keys",
)

AWS_BLOCK = block(
    "aws",
    string("name", _NAME_DESCRIPTION, required=True, force_new=True),
    string(
        "access_key",
        "The AWS access key to use. This can also be provided with the 'AWS_ACCESS_KEY_ID' env variable",
        required=True,
    ),
    string(
        "secret_key",
        "The AWS secret key to use. This can also be provided with the 'AWS_SECRET_ACCESS_KEY' env variable",
        required=True,
    ),
    string("curve", "The curve to use for an ECDSA key. Used when key_type is 'ECDSA'"),
    string("endpoint", "Used to specify a custom AWS endpoint"),
    string("key_bits", "The size in bits for an RSA key", required=True),
    string("key_type", "The type of key to use", required=True),
    string("kms_key", "An identifier for the key", required=True),
    string("region", "The AWS region where the keys are stored (or will be stored)", default="us-east-1"),
    description="Configuration block for AWS Managed Keys",
)

AZURE_BLOCK = block(
    "azure",
    string("name", _NAME_DESCRIPTION, required=True, force_new=True),
    string("tenant_id", "The tenant id for the Azure Active Directory organization", required=True),
    string("client_id", "The client id for credentials to query the Azure APIs", required=True),
    string("client_secret", "The client secret for credentials to query the Azure APIs", required=True),
    string("environment", "The Azure Cloud environment API endpoints to use", default="AZUREPUBLICCLOUD"),
    string(
        "vault_name",
        "The Key Vault vault to use the encryption keys for encryption and decryption",
        required=True,
    ),
    string("key_name", "The Key Vault key to use for encryption and decryption", required=True),
    string("resource", "The Azure Key Vault resource's DNS Suffix to connect to", default="vault.azure.net"),
    string("key_bits", "The size in bits for an RSA key"),
    string("key_type", "The type of key to use", required=True),
    description="Configuration block for Azure Managed Keys",
)

# backend block name -> type segment of the API path, in precedence order
BACKENDS: dict[str, str] = {
    "pkcs": KMS_TYPE_PKCS,
    "aws": KMS_TYPE_AWS,
    "azure": KMS_TYPE_AZURE,
}


def managed_keys_path(key_type: str, name: str) -> str:
    return f"{MANAGED_KEYS_PREFIX}/{key_type}/{name}"


class ManagedKeys(Resource):
    kind = "vault_managed_keys"
    schema = ResourceSchema(
        fields=(
            boolean(
                "allow_generate_key",
                "If no existing key can be found in the referenced backend, "
                "instructs Vault to generate a key within the backend",
                computed=True,
            ),
            boolean(
                "allow_store_key",
                "Controls the ability for Vault to import a key to the configured "
                "backend, if 'false', those operations will be forbidden",
                computed=True,
            ),
            boolean(
                "any_mount",
                "Allow usage from any mount point within the namespace if 'true'",
                computed=True,
            ),
            PKCS_BLOCK,
            AWS_BLOCK,
            AZURE_BLOCK,
        )
    )

    @staticmethod
    def _active_backend(values: Mapping[str, Any]) -> str | None:
        for block_name in BACKENDS:
            if values.get(block_name):
                return block_name
        return None

    def select(self, values: dict[str, Any]) -> dict[str, Any]:
        active = self._active_backend(values)
        ignored = [name for name in BACKENDS if name != active and values.get(name)]
        if ignored:
            logger.warning(
                "Multiple managed key backends configured; using '%s', ignoring %s",
                active,
                ", ".join(f"'{name}'" for name in ignored),
            )
        return {k: v for k, v in values.items() if k not in ignored}

    def remote_path(self, values: Mapping[str, Any]) -> str:
        active = self._active_backend(values)
        if active is None:
            raise InvalidConfiguration(
                f"One of {', '.join(repr(name) for name in BACKENDS)} blocks is required"
            )
        return managed_keys_path(BACKENDS[active], values[active][0]["name"])

    def shape(self, payload: Mapping[str, Any], identifier: str) -> Mapping[str, Any]:
        """Fold the flat backend fields back into the block matching the path."""
        key_type, _, name = identifier.removeprefix(f"{MANAGED_KEYS_PREFIX}/").partition("/")
        for block_name, backend_type in BACKENDS.items():
            if backend_type == key_type:
                break
        else:
            logger.debug("Unrecognized managed key type in '%s'", identifier)
            return payload

        block_schema = self.schema[block_name].nested
        inner = {k: v for k, v in payload.items() if k in block_schema}
        inner.setdefault("name", name)
        shaped = {k: v for k, v in payload.items() if k not in block_schema}
        shaped[block_name] = [inner]
        return shaped
