"""
Response normalizer — maps provider results onto the canonical Analysis.

The mapping is deterministic and provider-agnostic: two providers describing
the same violation yield the same category, issue string and narration
shape. The timestamp is the only field that depends on when normalize()
ran, and it can be pinned with `now`.
"""
from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any, Optional

from analysis import (
    NONE_VISIBLE, SEVERITIES,
    Analysis, AnalysisContext, MaterialIdentification, PlanAnalysis,
    RawProviderResult, Violation,
)

logger = logging.getLogger(__name__)

_CATEGORY_MAP = {
    "structural":  "structural",
    "electrical":  "electrical",
    "plumbing":    "plumbing",
    "safety":      "fire-safety",
    "fire":        "fire-safety",
    "fire safety": "fire-safety",
    "fire-safety": "fire-safety",
    "quality":     "general",
    "general":     "general",
}

# Display labels used for Analysis.category
_CATEGORY_LABELS = {"fire-safety": "fire safety"}

_SEVERITY_ALIASES = {"major": "high", "minor": "low"}

HIGH_SEVERITIES = ("critical", "high")

NO_ISSUES_NARRATION = "No visible issues detected. Area appears compliant."
ENCODING_NARRATION  = "Unable to analyze image. Please try again."

DPP_PERMIT_INFO = {
    "authority":    "Honolulu Department of Planning and Permitting (DPP)",
    "referenceUrl": "https://www.honolulu.gov/dpp/permitting/building-permits-home/building-permits-inspection/",
    "message":      "Verify requirements with DPP before submission",
}


def map_category(category: Any) -> str:
    key = str(category or "").strip().lower().replace("_", " ")
    if key and key not in _CATEGORY_MAP:
        logger.debug("Unrecognised category %r mapped to general", category)
    return _CATEGORY_MAP.get(key, "general")


def category_label(category: str) -> str:
    return _CATEGORY_LABELS.get(category, category)


def map_severity(severity: Any) -> str:
    key = str(severity or "").strip().lower()
    key = _SEVERITY_ALIASES.get(key, key)
    return key if key in SEVERITIES else "warning"


def coerce_confidence(value: Any) -> int:
    try:
        confidence = int(round(float(value)))
    # NaN raises ValueError, +/-inf raises OverflowError
    except (TypeError, ValueError, OverflowError):
        return 0
    return max(0, min(100, confidence))


def _iso_now(now: Optional[datetime]) -> str:
    return (now or datetime.now(timezone.utc)).isoformat()


def to_violations(raw_violations: list[dict], context: AnalysisContext) -> tuple[Violation, ...]:
    violations = []
    for idx, v in enumerate(raw_violations):
        vid = v.get("id")
        violations.append(Violation(
            id=str(vid) if vid else f"{context.session_id}_{context.frame_number}_{idx}",
            code=str(v.get("code") or v.get("code_reference") or v.get("codeReference") or "Unknown"),
            issue=str(v.get("issue") or v.get("description") or v.get("text") or "Violation"),
            severity=map_severity(v.get("severity")),
            category=map_category(v.get("category")),
        ))
    return tuple(violations)


def build_narration(violations: tuple[Violation, ...], summary: str) -> str:
    if not violations:
        return NO_ISSUES_NARRATION

    for v in violations:
        if v.severity in HIGH_SEVERITIES:
            return f"{v.severity.upper()} issue detected: {v.issue}. {summary}".strip()

    n = len(violations)
    noun = "issue" if n == 1 else "issues"
    return f"Found {n} {noun}: {violations[0].issue}. {summary}".strip()


def normalize(
    raw: RawProviderResult,
    provider_id: str,
    context: AnalysisContext,
    now: Optional[datetime] = None,
) -> Analysis:
    """Build the canonical Analysis for one provider result."""
    if raw.error is not None:
        return degraded_analysis(raw.error, raw.narration or ENCODING_NARRATION, now=now)

    violations = to_violations(raw.violations, context)
    if violations:
        issues = tuple(f"{v.code}: {v.issue}" for v in violations)
        category = category_label(violations[0].category)
        compliance = "Code violations detected"
    else:
        issues = (NONE_VISIBLE,)
        category = "general"
        compliance = "No violations found"

    return Analysis(
        category=category,
        issues=issues,
        violations=violations,
        compliance=compliance,
        narration=build_narration(violations, raw.summary),
        timestamp=_iso_now(now),
        raw_text=json.dumps(raw.payload, indent=2, ensure_ascii=False, default=str),
        confidence=coerce_confidence(raw.confidence),
        provider=provider_id,
    )


def degraded_analysis(error: str, narration: str, now: Optional[datetime] = None) -> Analysis:
    return Analysis(
        category="Error",
        issues=("Analysis error",),
        violations=(),
        compliance="Unable to check compliance",
        narration=narration,
        timestamp=_iso_now(now),
        raw_text=json.dumps({"error": error}, indent=2),
        confidence=0,
        provider=None,
        error=error,
    )


# ── Single-shot photo tools ──────────────────────────────────────────────────

def _str_tuple(value: Any) -> tuple[str, ...]:
    if not isinstance(value, list):
        return ()
    return tuple(str(x) for x in value)


def normalize_plan(data: dict, now: Optional[datetime] = None) -> PlanAnalysis:
    violations = data.get("violations") or []
    if not isinstance(violations, list):
        violations = []
    violations = [v for v in violations if isinstance(v, dict)]
    return PlanAnalysis(
        category=str(data.get("category") or "Residential Construction"),
        compliance=str(data.get("compliance") or "Code compliance check complete"),
        issues=tuple(str(v.get("issue", "")) for v in violations),
        violations=tuple(violations),
        summary=str(data.get("summary") or "Plan analyzed"),
        recommendations=_str_tuple(data.get("recommendations")),
        permit_info=dict(DPP_PERMIT_INFO),
        timestamp=_iso_now(now),
    )


def normalize_material(data: dict, now: Optional[datetime] = None) -> MaterialIdentification:
    return MaterialIdentification(
        materials=_str_tuple(data.get("materials")),
        compliance=str(data.get("compliance") or "Material identified"),
        specifications=_str_tuple(data.get("specifications")),
        recommendations=_str_tuple(data.get("recommendations")),
        timestamp=_iso_now(now),
    )
