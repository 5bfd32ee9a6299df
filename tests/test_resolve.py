"""Tests for vaultform.resolve: ${...} references in resource attributes."""

import pytest

from vaultform.resolve import Resolver, default_context


class TestLookup:
    def test_bare_reference(self):
        r = Resolver({"name": "user_1"})
        assert r.lookup("name") == "user_1"

    def test_dotted_reference_dict(self):
        r = Resolver({"env": {"AWS_ACCESS_KEY_ID": "AKIA123"}})
        assert r.lookup("env.AWS_ACCESS_KEY_ID") == "AKIA123"

    def test_dotted_reference_getattr(self):
        class Settings:
            region = "us-east-1"

        r = Resolver({"settings": Settings()})
        assert r.lookup("settings.region") == "us-east-1"

    def test_undefined_raises(self):
        r = Resolver({"name": "x"})
        with pytest.raises(ValueError, match="missing"):
            r.lookup("missing")

    def test_undefined_env_raises(self):
        r = Resolver({"env": {}})
        with pytest.raises(ValueError, match="env.AWS_SECRET_ACCESS_KEY"):
            r.lookup("env.AWS_SECRET_ACCESS_KEY")

    def test_callable_value(self):
        r = Resolver({"cwd": lambda: "/tmp/work"})
        assert r.lookup("cwd") == "/tmp/work"


class TestExpand:
    def test_no_reference(self):
        assert Resolver({}).expand("plain") == "plain"

    def test_whole_reference_preserves_type(self):
        r = Resolver({"flag": True})
        assert r.expand("${flag}") is True

    def test_whole_reference_strips_whitespace(self):
        r = Resolver({"name": "k"})
        assert r.expand("${ name }") == "k"

    def test_embedded_reference(self):
        r = Resolver({"env": {"TEAM": "eng"}})
        assert r.expand("alias-${env.TEAM}-1") == "alias-eng-1"

    def test_escaped_reference(self):
        r = Resolver({"name": "k"})
        assert r.expand("$${name} is ${name}") == "${name} is k"


class TestResolve:
    def test_walks_blocks(self):
        r = Resolver({"env": {"SECRET": "s3cr3t"}})
        data = {"aws": [{"secret_key": "${env.SECRET}", "key_bits": "2048"}], "any_mount": True}
        assert r.resolve(data) == {"aws": [{"secret_key": "s3cr3t", "key_bits": "2048"}], "any_mount": True}

    def test_default_context_has_environment(self, monkeypatch):
        monkeypatch.setenv("VAULTFORM_TEST", "yes")
        r = Resolver(default_context())
        assert r.expand("${env.VAULTFORM_TEST}") == "yes"
