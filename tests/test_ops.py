"""Tests for vaultform.ops."""

from __future__ import annotations

import logging

from conftest import ALIAS, AWS_BLOCK

from vaultform.context import Context
from vaultform.ops import Absent, Ensure, Present
from vaultform.record import Record, ResourceState

AWS_PATH = "sys/managed-keys/awskms/aws-key"
AZURE_PATH = "sys/managed-keys/azurekeyvault/az-key"

AZURE_BLOCK = {
    "name": "az-key",
    "tenant_id": "tenant",
    "client_id": "client",
    "client_secret": "s3cr3t",
    "vault_name": "hc-vault",
    "key_name": "vault-key",
    "key_type": "RSA-HSM",
}


def _key(**extra) -> Record:
    return Record(kind="vault_managed_keys", values={"aws": [dict(AWS_BLOCK)], **extra})


def _ctx(driver, dry_run: bool = False) -> Context:
    return Context(driver, dry_run=dry_run)


# -- Present tests --


class TestPresent:
    def test_creates_when_unknown(self, driver, client):
        op = Present("vault_managed_keys.k", _key())
        outcome = op(_ctx(driver))
        assert outcome.ok
        assert op.record.id == AWS_PATH
        assert op.record.state is ResourceState.SYNCED
        assert client.ops("write") == [AWS_PATH]

    def test_skips_when_exists(self, driver, client):
        op = Present("vault_managed_keys.k", _key())
        op(_ctx(driver))
        op.record.values["any_mount"] = True
        op(_ctx(driver))
        assert client.ops("write") == [AWS_PATH]

    def test_recreates_when_gone(self, driver, client):
        op = Present("vault_managed_keys.k", _key())
        op(_ctx(driver))
        client.objects.clear()
        outcome = op(_ctx(driver))
        assert outcome.ok
        assert client.ops("write") == [AWS_PATH, AWS_PATH]
        assert op.record.state is ResourceState.SYNCED

    def test_dry_run_skips_create(self, driver, client):
        op = Present("vault_managed_keys.k", _key())
        op(_ctx(driver, dry_run=True))
        assert client.calls == []
        assert op.record.id is None

    def test_create_failure_reported(self, driver, client):
        client.failing.add(AWS_PATH)
        outcome = Present("vault_managed_keys.k", _key())(_ctx(driver))
        assert not outcome.ok
        assert outcome.errors[0].kind == "RemoteError"


# -- Ensure tests --


class TestEnsure:
    def test_creates_when_unknown(self, driver, client):
        op = Ensure("vault_identity_entity_alias.a", Record(kind="vault_identity_entity_alias", values=dict(ALIAS)))
        outcome = op(_ctx(driver))
        assert outcome.ok
        assert op.record.state is ResourceState.SYNCED
        assert op.record.values == ALIAS

    def test_skips_when_up_to_date(self, driver, client):
        op = Ensure("vault_managed_keys.k", _key())
        op(_ctx(driver))
        op(_ctx(driver))
        assert client.ops("write") == [AWS_PATH]

    def test_updates_on_drift(self, driver, client):
        op = Ensure("vault_managed_keys.k", _key(any_mount=False))
        op(_ctx(driver))
        client.objects[AWS_PATH]["any_mount"] = "true"
        outcome = op(_ctx(driver))
        assert outcome.ok
        assert client.calls[-1] == ("write", AWS_PATH, {"any_mount": "false"})
        assert client.objects[AWS_PATH]["any_mount"] == "false"

    def test_computed_fields_do_not_drift(self, driver, client):
        op = Ensure("vault_managed_keys.k", _key())
        op(_ctx(driver))
        client.objects[AWS_PATH]["allow_generate_key"] = False
        op(_ctx(driver))
        assert client.ops("write") == [AWS_PATH]
        assert op.record.values["allow_generate_key"] is False

    def test_replaces_on_identifying_change(self, driver, client):
        op = Ensure("vault_managed_keys.k", _key())
        op(_ctx(driver))
        op.desired["aws"][0]["name"] = "new-key"
        outcome = op(_ctx(driver))
        assert outcome.ok
        assert outcome.diagnostics[0].kind == "ReplacementRequired"
        assert op.record.id == "sys/managed-keys/awskms/new-key"
        assert op.record.state is ResourceState.SYNCED
        assert AWS_PATH not in client.objects

    def test_replaces_on_backend_switch(self, driver, client, caplog):
        op = Ensure("vault_managed_keys.k", _key())
        op(_ctx(driver))
        op.desired = {"azure": [dict(AZURE_BLOCK)]}
        with caplog.at_level(logging.WARNING, logger="vaultform"):
            outcome = op(_ctx(driver))
        assert outcome.ok
        assert outcome.diagnostics[0].kind == "ReplacementRequired"
        assert op.record.id == AZURE_PATH
        assert op.record.state is ResourceState.SYNCED
        assert "aws" not in op.record.values
        assert AWS_PATH not in client.objects
        assert client.objects[AZURE_PATH]["vault_name"] == "hc-vault"
        assert "Multiple managed key backends" not in caplog.text

    def test_replaces_on_backend_switch_from_known_identifier(self, driver, client):
        driver.create(_key())
        record = Record(kind="vault_managed_keys", values={"azure": [dict(AZURE_BLOCK)]})
        record.id = AWS_PATH
        record.state = ResourceState.CREATED
        outcome = Ensure("vault_managed_keys.k", record)(_ctx(driver))
        assert outcome.ok
        assert record.id == AZURE_PATH
        assert client.ops("delete") == [AWS_PATH]
        assert client.ops("write")[-1] == AZURE_PATH

    def test_dry_run_skips_update(self, driver, client):
        op = Ensure("vault_managed_keys.k", _key(any_mount=False))
        op(_ctx(driver))
        client.objects[AWS_PATH]["any_mount"] = "true"
        op(_ctx(driver, dry_run=True))
        assert client.ops("write") == [AWS_PATH]


# -- Absent tests --


class TestAbsent:
    def test_removes_when_known(self, driver, client):
        record = _key()
        driver.create(record)
        op = Absent("vault_managed_keys.k", record)
        assert op(_ctx(driver)).ok
        assert op.record.state is ResourceState.DELETED
        assert client.ops("delete") == [AWS_PATH]

    def test_skips_when_not_known(self, driver, client):
        op = Absent("vault_managed_keys.k", _key())
        op(_ctx(driver))
        assert client.calls == []

    def test_dry_run_skips_remove(self, driver, client):
        record = _key()
        driver.create(record)
        op = Absent("vault_managed_keys.k", record)
        op(_ctx(driver, dry_run=True))
        assert client.ops("delete") == []
        assert op.record.id == AWS_PATH


# -- Logging tests --


class TestResourceOpLogging:
    def test_present_logs_skip(self, driver, caplog):
        op = Present("vault_managed_keys.k", _key())
        op(_ctx(driver))
        with caplog.at_level(logging.DEBUG, logger="vaultform.ops"):
            op(_ctx(driver))
        assert "already exists" in caplog.text

    def test_ensure_logs_skip(self, driver, caplog):
        op = Ensure("vault_managed_keys.k", _key())
        op(_ctx(driver))
        with caplog.at_level(logging.DEBUG, logger="vaultform.ops"):
            op(_ctx(driver))
        assert "up to date" in caplog.text

    def test_absent_logs_skip(self, driver, caplog):
        with caplog.at_level(logging.DEBUG, logger="vaultform.ops"):
            Absent("vault_managed_keys.k", _key())(_ctx(driver))
        assert "not present" in caplog.text

    def test_present_logs_dry_run(self, driver, caplog):
        with caplog.at_level(logging.INFO, logger="vaultform.ops"):
            Present("vault_managed_keys.k", _key())(_ctx(driver, dry_run=True))
        assert "[DRY RUN] Would create vault_managed_keys.k" in caplog.text

    def test_ensure_logs_dry_run_replace(self, driver, caplog):
        op = Ensure("vault_managed_keys.k", _key())
        op(_ctx(driver))
        op.desired["aws"][0]["name"] = "new-key"
        with caplog.at_level(logging.INFO, logger="vaultform.ops"):
            op(_ctx(driver, dry_run=True))
        assert "[DRY RUN] Would replace" in caplog.text

    def test_absent_logs_dry_run(self, driver, caplog):
        record = _key()
        driver.create(record)
        with caplog.at_level(logging.INFO, logger="vaultform.ops"):
            Absent("vault_managed_keys.k", record)(_ctx(driver, dry_run=True))
        assert "DRY RUN" in caplog.text

    def test_repr(self):
        assert repr(Absent("vault_managed_keys.k", _key())) == "Absent('vault_managed_keys.k')"
