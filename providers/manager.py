"""
Provider Manager — builds the fallback chain and orchestrator from config.

  primary   — MCP backend (required: MCP_URL + SUPABASE_ANON_KEY)
  secondary — direct OpenAI-compatible vision model (optional: OPENAI_API_KEY)

The secondary can be switched off without removing its key:
  ENABLE_OPENAI_FALLBACK=true/false

Nothing here is cached at module level: each inspection session gets its own
orchestrator from build_orchestrator().
"""
from __future__ import annotations

import logging
from typing import Optional

import config
from providers.base import InspectionProvider
from providers.fallback import FallbackChain
from retry import RetryPolicy

logger = logging.getLogger(__name__)


def build_primary():
    if not (config.MCP_URL and config.SUPABASE_ANON_KEY):
        raise RuntimeError(
            "No primary inspection provider configured.\n"
            "Set MCP_URL (or SUPABASE_URL) and SUPABASE_ANON_KEY."
        )
    from providers.mcp_provider import MCPProvider
    p = MCPProvider(config.MCP_URL, config.SUPABASE_ANON_KEY)
    logger.info("Loaded provider: %s", p.full_name)
    return p


def build_secondary() -> Optional[InspectionProvider]:
    if not config.OPENAI_API_KEY:
        logger.info("No OPENAI_API_KEY — running without a fallback provider")
        return None
    # Re-read at build time so a toggle applies to the next session
    if not config.env_bool("ENABLE_OPENAI_FALLBACK", config.ENABLE_OPENAI_FALLBACK):
        logger.info("Skipped fallback provider openai/%s (disabled by ENABLE_OPENAI_FALLBACK)",
                    config.OPENAI_VISION_MODEL)
        return None
    from providers.openai_provider import OpenAIVisionProvider
    p = OpenAIVisionProvider(
        config.OPENAI_API_KEY,
        model=config.OPENAI_VISION_MODEL,
        base_url=config.OPENAI_BASE_URL,
    )
    logger.info("Loaded fallback provider: %s", p.full_name)
    return p


def build_chain(retry_policy: Optional[RetryPolicy] = None) -> FallbackChain:
    return FallbackChain(
        primary=build_primary(),
        secondary=build_secondary(),
        retry_policy=retry_policy or RetryPolicy.from_config(),
    )


def build_orchestrator(retry_policy: Optional[RetryPolicy] = None):
    """A fresh orchestrator owned by one inspection session."""
    from orchestrator import InspectionOrchestrator
    chain = build_chain(retry_policy)
    return InspectionOrchestrator(chain)
