"""
analysis.py — canonical home of the inspection data model.

Everything that leaves the analysis core (screens, voice narration, reports)
consumes these types; provider-specific shapes never get past normalizer.py.
"""
from __future__ import annotations

import base64
from dataclasses import dataclass, field
from typing import Any, Optional

import config

SEVERITIES = ("critical", "high", "medium", "low", "warning")
CATEGORIES = ("structural", "electrical", "plumbing", "fire-safety", "general")

NONE_VISIBLE = "None visible"


@dataclass(frozen=True)
class AnalysisContext:
    """Caller-supplied context for one analysis call."""
    project_type: str = field(default_factory=lambda: config.DEFAULT_PROJECT_TYPE)
    jurisdiction: str = field(default_factory=lambda: config.DEFAULT_JURISDICTION)
    session_id: str = ""
    frame_number: int = 0
    project_id: Optional[str] = None
    project_name: Optional[str] = None
    inspection_type: str = "building"

    def as_arguments(self) -> dict[str, Any]:
        """Context fields in the backend's camelCase argument naming."""
        return {
            "sessionId":      self.session_id,
            "frameNumber":    self.frame_number,
            "projectType":    self.project_type,
            "jurisdiction":   self.jurisdiction,
            "projectId":      self.project_id or "unknown",
            "projectName":    self.project_name or "Unknown",
            "inspectionType": self.inspection_type,
        }


@dataclass(frozen=True)
class ImagePayload:
    """Encoded image bytes plus the local reference they were read from."""
    data: bytes
    media_type: str
    source: str

    @property
    def data_url(self) -> str:
        b64 = base64.b64encode(self.data).decode()
        return f"data:{self.media_type};base64,{b64}"


@dataclass
class RawProviderResult:
    """
    Provider reply after adapter-level decoding.

    Both adapters translate their reply into this shape; `error` and
    `narration` are only set on the "unavailable" sentinel built by the
    fallback chain when every provider failed.
    """
    violations: list[dict]
    summary: str = ""
    confidence: Any = 0
    payload: dict = field(default_factory=dict)
    error: Optional[str] = None
    narration: Optional[str] = None

    @classmethod
    def from_payload(cls, payload: dict) -> "RawProviderResult":
        violations = payload.get("violations") or []
        if not isinstance(violations, list):
            violations = []
        return cls(
            violations=[v for v in violations if isinstance(v, dict)],
            summary=str(payload.get("summary") or ""),
            confidence=payload.get("confidence", 0),
            payload=payload,
        )

    @classmethod
    def unavailable(cls, error: str, narration: str) -> "RawProviderResult":
        return cls(
            violations=[],
            summary="",
            confidence=0,
            payload={"error": error},
            error=error,
            narration=narration,
        )


@dataclass(frozen=True)
class Violation:
    id: str
    code: str               # e.g. "HBC 1808.3", may be "Unknown"
    issue: str
    severity: str           # one of SEVERITIES
    category: str           # one of CATEGORIES


@dataclass(frozen=True)
class Analysis:
    """Canonical, immutable result of one frame analysis."""
    category: str
    issues: tuple[str, ...]
    violations: tuple[Violation, ...]
    compliance: str
    narration: str
    timestamp: str
    raw_text: str           # diagnostic echo only; never parse this
    confidence: int = 0
    provider: Optional[str] = None
    error: Optional[str] = None

    @property
    def is_degraded(self) -> bool:
        return self.error is not None


@dataclass(frozen=True)
class PlanAnalysis:
    """Result of a single-shot building plan compliance review."""
    category: str
    compliance: str
    issues: tuple[str, ...]
    violations: tuple[dict, ...]
    summary: str
    recommendations: tuple[str, ...]
    permit_info: dict
    timestamp: str


@dataclass(frozen=True)
class MaterialIdentification:
    materials: tuple[str, ...]
    compliance: str
    specifications: tuple[str, ...]
    recommendations: tuple[str, ...]
    timestamp: str
    category: str = "Material Identification"
