"""
Central configuration — reads from .env file.

Every setting is a module attribute so code reading config.X always gets the
current value, and tests can monkeypatch individual attributes.

Values that still hold an unsubstituted build placeholder (``@secret:NAME``)
are treated exactly like missing values.
"""
from __future__ import annotations

import os
from typing import Optional

from dotenv import load_dotenv

load_dotenv()

_PLACEHOLDER_PREFIX = "@secret:"


def _env(name: str, default: Optional[str] = None) -> Optional[str]:
    """Read an env var, ignoring blanks and @secret: placeholders."""
    raw = os.getenv(name)
    if raw is None:
        return default
    raw = raw.strip()
    if not raw or raw.startswith(_PLACEHOLDER_PREFIX):
        return default
    return raw


def env_bool(name: str, default: bool) -> bool:
    raw = _env(name, "true" if default else "false")
    return raw.lower() not in ("false", "0", "no")


# ── Backend (multi-tool MCP server) ──────────────────────────────────────────
SUPABASE_URL: Optional[str]      = _env("SUPABASE_URL")
SUPABASE_ANON_KEY: Optional[str] = _env("SUPABASE_ANON_KEY")

# Defaults to the edge function path under the Supabase project URL
MCP_URL: Optional[str] = _env(
    "MCP_URL",
    f"{SUPABASE_URL.rstrip('/')}/functions/v1/mcp-server" if SUPABASE_URL else None,
)

# ── Direct vision fallback (OpenAI-compatible chat completions) ──────────────
OPENAI_API_KEY: Optional[str]  = _env("OPENAI_API_KEY")
OPENAI_BASE_URL: Optional[str] = _env("OPENAI_BASE_URL")
OPENAI_VISION_MODEL: str       = _env("OPENAI_VISION_MODEL", "gpt-4o")
ENABLE_OPENAI_FALLBACK: bool   = env_bool("ENABLE_OPENAI_FALLBACK", True)

# ── Request / retry behaviour ────────────────────────────────────────────────
PROVIDER_TIMEOUT_SECS: float = float(_env("PROVIDER_TIMEOUT_SECS", "30"))
RETRY_MAX_RETRIES: int       = int(_env("RETRY_MAX_RETRIES", "3"))
RETRY_BASE_DELAY: float      = float(_env("RETRY_BASE_DELAY", "1.0"))
RETRY_MAX_DELAY: float       = float(_env("RETRY_MAX_DELAY", "5.0"))
# Auth failures cannot be fixed by retrying; set true for the old uniform retry
RETRY_AUTH_FAILURES: bool    = env_bool("RETRY_AUTH_FAILURES", False)

# ── Inspection defaults ──────────────────────────────────────────────────────
DEFAULT_PROJECT_TYPE: str = _env("DEFAULT_PROJECT_TYPE", "residential")
DEFAULT_JURISDICTION: str = _env("DEFAULT_JURISDICTION", "Honolulu")

LOG_LEVEL: str = _env("LOG_LEVEL", "INFO")


def is_config_valid() -> dict[str, bool]:
    """Report which providers have enough configuration to be built."""
    mcp = bool(MCP_URL and MCP_URL.startswith("http") and SUPABASE_ANON_KEY)
    openai = bool(OPENAI_API_KEY)
    return {"mcp": mcp, "openai": openai, "all": mcp and openai}
