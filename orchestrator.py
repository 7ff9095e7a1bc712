"""
InspectionOrchestrator — the single public entry point for frame analysis.

One orchestrator belongs to one inspection session. It owns the session id,
the frame counter, the last successful Analysis and the single-flight slot:
while a call is in flight, further analyze() calls await that same call
instead of issuing new provider requests. A capture loop polling every few
seconds therefore never stacks up billed requests. Image files are read in
a worker thread (asyncio.to_thread) so a large frame never blocks the loop.

analyze() never raises. analyze_plan() and identify_material() are
deliberate single-shot user actions; they skip the fallback chain and let
provider failures reach the caller.
"""
from __future__ import annotations

import asyncio
import logging
import os
import secrets
import time
from dataclasses import replace
from typing import Optional, Union

import frame_encoder
from analysis import Analysis, AnalysisContext, MaterialIdentification, PlanAnalysis
from normalizer import (
    ENCODING_NARRATION,
    degraded_analysis,
    normalize,
    normalize_material,
    normalize_plan,
)
from providers.errors import EncodingFailure
from providers.fallback import UNAVAILABLE_NARRATION, FallbackChain
from providers.mcp_provider import PHOTO_TOOL, MCPProvider

logger = logging.getLogger(__name__)

ImageRef = Union[str, os.PathLike]


def new_session_id() -> str:
    return f"session_{int(time.time() * 1000)}_{secrets.token_hex(4)}"


class InspectionOrchestrator:

    def __init__(
        self,
        chain: FallbackChain,
        photo_provider: Optional[MCPProvider] = None,
    ):
        self._chain = chain
        # Plan / material uploads go straight to the primary backend
        self._photo_provider = photo_provider or chain.primary
        self._inflight: Optional[asyncio.Task] = None
        self._last_analysis: Optional[Analysis] = None
        self.session_id = new_session_id()
        self.frame_number = 0

    # ── State ────────────────────────────────────────────────────────────────

    @property
    def is_analyzing(self) -> bool:
        return self._inflight is not None

    @property
    def last_analysis(self) -> Optional[Analysis]:
        return self._last_analysis

    def reset_session(self) -> None:
        """Start a new inspection: fresh session id, frame 0, no last analysis."""
        self.session_id = new_session_id()
        self.frame_number = 0
        self._last_analysis = None
        logger.info("New inspection session %s", self.session_id)

    clear_history = reset_session

    # ── Live frames ──────────────────────────────────────────────────────────

    async def analyze(
        self,
        image_ref: ImageRef,
        context: Optional[AnalysisContext] = None,
    ) -> Analysis:
        """Analyse one frame; concurrent callers share the in-flight result."""
        if self._inflight is None:
            self.frame_number += 1
            ctx = replace(
                context or AnalysisContext(),
                session_id=self.session_id,
                frame_number=self.frame_number,
            )
            self._inflight = asyncio.ensure_future(self._run(image_ref, ctx))
        else:
            logger.debug("Analysis already in progress — joining frame %d", self.frame_number)
        # shield: a cancelled caller must not cancel the call others are awaiting
        return await asyncio.shield(self._inflight)

    async def _run(self, image_ref: ImageRef, ctx: AnalysisContext) -> Analysis:
        try:
            try:
                payload = await asyncio.to_thread(frame_encoder.encode, image_ref)
            except EncodingFailure as exc:
                logger.error("Frame %d not analysed: %s", ctx.frame_number, exc)
                return degraded_analysis(str(exc), ENCODING_NARRATION)

            raw, provider_id = await self._chain.run(payload, ctx)
            analysis = normalize(raw, provider_id, ctx)

            if not analysis.is_degraded and ctx.session_id == self.session_id:
                self._last_analysis = analysis
            return analysis
        except Exception as exc:
            logger.exception("Frame %d analysis failed: %s", ctx.frame_number, exc)
            return degraded_analysis(str(exc), UNAVAILABLE_NARRATION)
        finally:
            if self._inflight is asyncio.current_task():
                self._inflight = None

    # ── Single-shot uploads ──────────────────────────────────────────────────

    async def analyze_plan(
        self,
        image_ref: ImageRef,
        context: Optional[AnalysisContext] = None,
    ) -> PlanAnalysis:
        """Review a building plan for code compliance. Raises on failure."""
        ctx = context or AnalysisContext()
        payload = await asyncio.to_thread(frame_encoder.encode, image_ref)
        logger.info("Analysing building plan against %s requirements", ctx.jurisdiction)
        data = await self._photo_provider.call_tool(PHOTO_TOOL, {
            "imageUrl":     payload.data_url,
            "analysisType": "code_compliance",
            "projectType":  ctx.project_type,
            "jurisdiction": ctx.jurisdiction,
        })
        return normalize_plan(data)

    async def identify_material(self, image_ref: ImageRef) -> MaterialIdentification:
        """Identify construction materials in a photo. Raises on failure."""
        payload = await asyncio.to_thread(frame_encoder.encode, image_ref)
        data = await self._photo_provider.call_tool(PHOTO_TOOL, {
            "imageUrl":     payload.data_url,
            "analysisType": "material_identification",
        })
        return normalize_material(data)
