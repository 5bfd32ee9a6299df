"""Shared fixtures: an in-memory stand-in for the Vault API."""

from __future__ import annotations

import copy
import uuid
from collections.abc import Mapping
from typing import Any

import pytest

from vaultform.errors import RemoteError
from vaultform.lifecycle import LifecycleDriver
from vaultform.resources import build_registry
from vaultform.resources.entity_alias import ENTITY_ALIAS_PATH


class FakeClient:
    """Path-addressed store that mimics the parts of Vault the kinds use."""

    def __init__(self) -> None:
        self.objects: dict[str, dict[str, Any]] = {}
        self.calls: list[tuple[str, str, dict[str, Any] | None]] = []
        self.failing: set[str] = set()

    def _check(self, path: str) -> None:
        if path in self.failing:
            raise RemoteError(f"Error at {path}: permission denied", path=path)

    def write(self, path: str, payload: Mapping[str, Any]) -> dict[str, Any]:
        self.calls.append(("write", path, dict(payload)))
        self._check(path)
        if path == ENTITY_ALIAS_PATH:
            alias_id = str(uuid.uuid4())
            self.objects[f"{path}/id/{alias_id}"] = {**payload, "id": alias_id, "creation_time": "now"}
            return {"id": alias_id, "canonical_id": payload.get("canonical_id")}
        self.objects.setdefault(path, {}).update(copy.deepcopy(dict(payload)))
        return {}

    def read(self, path: str) -> dict[str, Any] | None:
        self.calls.append(("read", path, None))
        self._check(path)
        obj = self.objects.get(path)
        return copy.deepcopy(obj) if obj is not None else None

    def delete(self, path: str) -> None:
        self.calls.append(("delete", path, None))
        self._check(path)
        self.objects.pop(path, None)

    def ops(self, kind: str) -> list[str]:
        return [path for op, path, _ in self.calls if op == kind]


@pytest.fixture
def client() -> FakeClient:
    return FakeClient()


@pytest.fixture
def registry():
    return build_registry()


@pytest.fixture
def driver(client, registry) -> LifecycleDriver:
    return LifecycleDriver(client, registry)


AWS_BLOCK = {
    "name": "aws-key",
    "access_key": "AKIA123",
    "secret_key": "s3cr3t",
    "key_bits": "2048",
    "key_type": "RSA",
    "kms_key": "alias/vault",
}

PKCS_BLOCK = {
    "name": "hsm-key",
    "library": "softhsm",
    "key_label": "vault-key",
    "key_id": "0x1",
    "mechanism": "0x0001",
    "pin": "1234",
}

ALIAS = {
    "name": "user_1",
    "mount_accessor": "token_1f2bd5",
    "canonical_id": "49877D63-07AD-4B85-BDA8-B61626C477E8",
}
