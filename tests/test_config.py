"""
Tests for config.py.

Covers:
  - _env(): blanks and @secret: placeholders count as unset
  - env_bool()
  - is_config_valid(): per-provider readiness
"""
from __future__ import annotations

import pytest

import config
from config import _env, env_bool, is_config_valid


class TestEnv:
    def test_missing_returns_default(self, monkeypatch):
        monkeypatch.delenv("INSPECT_TEST_VAR", raising=False)
        assert _env("INSPECT_TEST_VAR") is None
        assert _env("INSPECT_TEST_VAR", "fallback") == "fallback"

    def test_value_is_stripped(self, monkeypatch):
        monkeypatch.setenv("INSPECT_TEST_VAR", "  value  ")
        assert _env("INSPECT_TEST_VAR") == "value"

    @pytest.mark.parametrize("raw", ["", "   ", "@secret:SUPABASE_ANON_KEY"])
    def test_blank_and_placeholder_are_unset(self, monkeypatch, raw):
        monkeypatch.setenv("INSPECT_TEST_VAR", raw)
        assert _env("INSPECT_TEST_VAR", "fallback") == "fallback"


class TestEnvBool:
    @pytest.mark.parametrize("raw,expected", [
        ("true", True), ("1", True), ("yes", True),
        ("false", False), ("0", False), ("No", False),
    ])
    def test_values(self, monkeypatch, raw, expected):
        monkeypatch.setenv("INSPECT_TEST_FLAG", raw)
        assert env_bool("INSPECT_TEST_FLAG", not expected) is expected

    @pytest.mark.parametrize("raw", ["@secret:INSPECT_TEST_FLAG", "  "])
    def test_placeholder_uses_default(self, monkeypatch, raw):
        monkeypatch.setenv("INSPECT_TEST_FLAG", raw)
        assert env_bool("INSPECT_TEST_FLAG", True) is True
        assert env_bool("INSPECT_TEST_FLAG", False) is False

    def test_default(self, monkeypatch):
        monkeypatch.delenv("INSPECT_TEST_FLAG", raising=False)
        assert env_bool("INSPECT_TEST_FLAG", True) is True
        assert env_bool("INSPECT_TEST_FLAG", False) is False


class TestIsConfigValid:
    @pytest.fixture(autouse=True)
    def _complete(self, monkeypatch):
        monkeypatch.setattr(config, "MCP_URL", "https://example.supabase.co/functions/v1/mcp-server")
        monkeypatch.setattr(config, "SUPABASE_ANON_KEY", "anon-key")
        monkeypatch.setattr(config, "OPENAI_API_KEY", "sk-test")

    def test_all_configured(self):
        assert is_config_valid() == {"mcp": True, "openai": True, "all": True}

    def test_mcp_needs_http_url(self, monkeypatch):
        monkeypatch.setattr(config, "MCP_URL", "example.supabase.co")
        status = is_config_valid()
        assert status["mcp"] is False
        assert status["all"] is False

    def test_mcp_needs_key(self, monkeypatch):
        monkeypatch.setattr(config, "SUPABASE_ANON_KEY", None)
        assert is_config_valid()["mcp"] is False

    def test_openai_optional(self, monkeypatch):
        monkeypatch.setattr(config, "OPENAI_API_KEY", None)
        assert is_config_valid() == {"mcp": True, "openai": False, "all": False}
