"""
Shared types and base class for all inspection providers.
"""
from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Union

import config
from analysis import AnalysisContext, ImagePayload, RawProviderResult

logger = logging.getLogger(__name__)

# ── Prompt (used by direct vision providers) ─────────────────────────────────

INSPECTION_PROMPT = """You are a building inspector analysing a construction site photo.

Look for:
1. Building code violations (cite codes: IRC 2018, IBC 2018, NEC 2020, IPC 2018)
2. Safety hazards (OSHA violations)
3. Structural defects
4. Quality issues

Return ONLY a valid JSON object — no markdown, no prose:
{
  "violations": [{
    "id":       "unique_id",
    "code":     "HBC 1808.3",
    "issue":    "Brief description",
    "severity": "critical|high|medium|low",
    "category": "structural|electrical|plumbing|safety|quality"
  }],
  "summary":    "One-sentence summary",
  "confidence": 0-100
}

If there are no violations return {"violations": [], "summary": "No violations detected", "confidence": 90}
"""


def build_user_prompt(context: AnalysisContext) -> str:
    return (
        f"Inspect this {context.project_type} {context.inspection_type} site "
        f"under {context.jurisdiction} building codes and return the JSON."
    )


# ── Reply decoding ───────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Ok:
    payload: dict


@dataclass(frozen=True)
class Malformed:
    reason: str
    raw: str


DecodeResult = Union[Ok, Malformed]


def parse_json_response(raw: str, provider_name: str) -> dict:
    """
    Parse JSON from a model response, handling markdown fences gracefully.
    Raises ValueError on parse failure.
    """
    text = raw.strip()
    # Strip ```json ... ``` or ``` ... ``` fences if present
    if text.startswith("```"):
        lines = text.split("\n")
        text = "\n".join(lines[1:-1] if lines[-1].strip() == "```" else lines[1:])
    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        # Models sometimes wrap the object in a sentence
        start, end = text.find("{"), text.rfind("}")
        if 0 <= start < end:
            try:
                return json.loads(text[start:end + 1])
            except json.JSONDecodeError:
                pass
        logger.error("[%s] Non-JSON response: %s", provider_name, raw[:300])
        raise ValueError(f"[{provider_name}] JSON parse error: {exc}") from exc


def decode_inspection_payload(raw: str, provider_name: str) -> DecodeResult:
    """Decode a text-encoded `{violations, summary, confidence}` reply."""
    if not isinstance(raw, str):
        return Malformed(f"expected text, got {type(raw).__name__}", repr(raw))
    if not raw.strip():
        return Malformed("empty reply", raw)
    try:
        data = parse_json_response(raw, provider_name)
    except ValueError as exc:
        return Malformed(str(exc), raw)
    if not isinstance(data, dict):
        return Malformed(f"expected an object, got {type(data).__name__}", raw)
    return Ok(data)


# ── Abstract base ────────────────────────────────────────────────────────────

class InspectionProvider(ABC):
    """Base class all inspection providers must implement."""

    name: str           # e.g. "mcp"
    model_id: str       # e.g. "analyze_live_inspection" or "gpt-4o"
    timeout: float = config.PROVIDER_TIMEOUT_SECS

    @abstractmethod
    async def call(self, payload: ImagePayload, context: AnalysisContext) -> RawProviderResult:
        """
        Analyse one frame. Must return RawProviderResult or raise a
        providers.errors.ProviderError subclass.
        """
        ...

    @property
    def full_name(self) -> str:
        return f"{self.name}/{self.model_id}"
