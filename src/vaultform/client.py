"""Remote client protocol and its hvac-backed implementation."""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from typing import Any, Protocol, runtime_checkable

import hvac
import hvac.exceptions
import requests
from pydantic import BaseModel, Field, SecretStr

from .errors import RemoteError

logger = logging.getLogger(__name__)


@runtime_checkable
class RemoteClient(Protocol):
    """Path-addressed key-value view of the remote API."""

    def write(self, path: str, payload: Mapping[str, Any]) -> dict[str, Any]: ...

    def read(self, path: str) -> dict[str, Any] | None: ...

    def delete(self, path: str) -> None: ...


class ClientConfig(BaseModel):
    """Connection settings for the Vault API."""

    url: str = "http://127.0.0.1:8200"
    token: SecretStr | None = None
    namespace: str | None = None
    timeout: float = Field(default=30.0, gt=0)
    verify: bool = True

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> ClientConfig:
        """Build settings from the standard VAULT_* environment variables."""
        env = os.environ if environ is None else environ
        kwargs: dict[str, Any] = {}
        if "VAULT_ADDR" in env:
            kwargs["url"] = env["VAULT_ADDR"]
        if "VAULT_TOKEN" in env:
            kwargs["token"] = env["VAULT_TOKEN"]
        if "VAULT_NAMESPACE" in env:
            kwargs["namespace"] = env["VAULT_NAMESPACE"]
        if "VAULT_CLIENT_TIMEOUT" in env:
            kwargs["timeout"] = env["VAULT_CLIENT_TIMEOUT"]
        if "VAULT_SKIP_VERIFY" in env:
            kwargs["verify"] = env["VAULT_SKIP_VERIFY"].lower() not in ("1", "t", "true", "yes")
        return cls(**kwargs)


def _data(response: Any) -> dict[str, Any]:
    """Extract the ``data`` section of an API response.

    Writes that return no body come back from hvac as a bare HTTP response.
    """
    if isinstance(response, dict):
        return dict(response.get("data") or {})
    return {}


class VaultClient:
    """RemoteClient backed by an hvac.Client."""

    def __init__(self, client: hvac.Client) -> None:
        self._client = client

    @classmethod
    def from_config(cls, config: ClientConfig) -> VaultClient:
        logger.debug("Connecting to Vault at %s", config.url)
        return cls(
            hvac.Client(
                url=config.url,
                token=config.token.get_secret_value() if config.token else None,
                namespace=config.namespace,
                verify=config.verify,
                timeout=config.timeout,
            )
        )

    def write(self, path: str, payload: Mapping[str, Any]) -> dict[str, Any]:
        logger.debug("Writing %s", path)
        try:
            response = self._client.write_data(path, data=dict(payload))
        except (hvac.exceptions.VaultError, requests.exceptions.RequestException) as exc:
            raise RemoteError(f"Error writing {path}: {exc}", path=path) from exc
        return _data(response)

    def read(self, path: str) -> dict[str, Any] | None:
        logger.debug("Reading %s", path)
        try:
            response = self._client.read(path)
        except (hvac.exceptions.VaultError, requests.exceptions.RequestException) as exc:
            raise RemoteError(f"Error reading {path}: {exc}", path=path) from exc
        if response is None:
            return None
        return _data(response)

    def delete(self, path: str) -> None:
        logger.debug("Deleting %s", path)
        try:
            self._client.delete(path)
        except hvac.exceptions.InvalidPath:
            logger.debug("Nothing to delete at %s", path)
        except (hvac.exceptions.VaultError, requests.exceptions.RequestException) as exc:
            raise RemoteError(f"Error deleting {path}: {exc}", path=path) from exc
