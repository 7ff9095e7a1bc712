"""
Shared pytest fixtures.

Provider tests never touch the network: adapters are driven through mocked
aiohttp sessions / OpenAI clients, and orchestration tests use FakeProvider.
"""
from __future__ import annotations

import asyncio
import sys
from pathlib import Path
from typing import Optional

import pytest

# ── Make the project root importable without installing the package ────────────
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from analysis import AnalysisContext, ImagePayload, RawProviderResult  # noqa: E402
from providers.base import InspectionProvider  # noqa: E402

JPEG_BYTES = b"\xff\xd8\xff\xe0" + b"\x00" * 64
PNG_BYTES  = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64


class FakeProvider(InspectionProvider):
    """
    Scripted provider. `script` items are returned in order; exceptions are
    raised. The last item repeats once the script runs out.
    """

    def __init__(self, name: str, script: list, delay: Optional[float] = None):
        self.name = name
        self.model_id = "fake"
        self.script = list(script)
        self.delay = delay
        self.calls: list[AnalysisContext] = []

    async def call(self, payload: ImagePayload, context: AnalysisContext) -> RawProviderResult:
        self.calls.append(context)
        if self.delay is not None:
            await asyncio.sleep(self.delay)
        idx = min(len(self.calls), len(self.script)) - 1
        item = self.script[idx]
        if isinstance(item, BaseException):
            raise item
        return item


def raw_result(violations: Optional[list] = None, summary: str = "", confidence=0) -> RawProviderResult:
    return RawProviderResult.from_payload({
        "violations": violations or [],
        "summary":    summary,
        "confidence": confidence,
    })


@pytest.fixture
def image_file(tmp_path) -> Path:
    path = tmp_path / "frame.jpg"
    path.write_bytes(JPEG_BYTES)
    return path


@pytest.fixture
def payload() -> ImagePayload:
    return ImagePayload(data=JPEG_BYTES, media_type="image/jpeg", source="frame.jpg")


@pytest.fixture
def context() -> AnalysisContext:
    return AnalysisContext(
        project_type="residential",
        jurisdiction="Honolulu",
        session_id="session_test",
        frame_number=1,
    )
