"""
MCP backend provider — the primary, multi-tool inspection backend.

The backend exposes server-side tools through a single endpoint:

  POST {MCP_URL}/call-tool
  {"name": "<tool>", "arguments": {...}}

and answers with the tool output embedded as text:

  {"content": [{"type": "text", "text": "<JSON document>"}]}

Tools used here:
  analyze_live_inspection — fast live-frame analysis (violations + summary)
  analyze_photo           — static plan / material uploads (analysisType arg)

Auth: the same anon key is sent twice, as `apikey` and as a Bearer token.
"""
from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, Optional

import aiohttp

import config
from analysis import AnalysisContext, ImagePayload, RawProviderResult
from providers.base import InspectionProvider, Malformed, decode_inspection_payload
from providers.errors import (
    GenericServiceError,
    ProviderUnavailable,
    TimeoutFailure,
    raise_for_status,
)

logger = logging.getLogger(__name__)

LIVE_TOOL  = "analyze_live_inspection"
PHOTO_TOOL = "analyze_photo"


class MCPProvider(InspectionProvider):

    def __init__(
        self,
        base_url: str,
        api_key: str,
        tool: str = LIVE_TOOL,
        timeout: Optional[float] = None,
    ):
        self.name      = "mcp"
        self.model_id  = tool
        self._base_url = base_url.rstrip("/")
        self._headers  = {
            "Content-Type":  "application/json",
            "apikey":        api_key,
            "Authorization": f"Bearer {api_key}",
        }
        self.timeout = timeout if timeout is not None else config.PROVIDER_TIMEOUT_SECS

    async def call(self, payload: ImagePayload, context: AnalysisContext) -> RawProviderResult:
        arguments = {
            "imageUrl":  payload.data_url,
            **context.as_arguments(),
            "timestamp": int(time.time() * 1000),
        }
        t0 = time.monotonic()
        data = await self.call_tool(self.model_id, arguments)
        latency_ms = int((time.monotonic() - t0) * 1000)

        result = RawProviderResult.from_payload(data)
        logger.info(
            "[%s] OK — %d violation(s) confidence=%s latency=%dms frame=%d",
            self.full_name, len(result.violations), result.confidence,
            latency_ms, context.frame_number,
        )
        return result

    async def call_tool(self, tool: str, arguments: dict[str, Any]) -> dict:
        """
        Invoke a server-side tool and return its decoded JSON payload.
        Raises a ProviderError subclass on any failure.
        """
        body = {"name": tool, "arguments": arguments}
        try:
            async with aiohttp.ClientSession() as session:
                async with session.post(
                    f"{self._base_url}/call-tool",
                    headers=self._headers,
                    json=body,
                    timeout=aiohttp.ClientTimeout(total=self.timeout),
                ) as resp:
                    if resp.status < 200 or resp.status >= 300:
                        text = await resp.text()
                        logger.error("[%s] HTTP %d: %s", self.full_name, resp.status, text[:200])
                        raise_for_status(resp.status, text, self.full_name)
                    try:
                        envelope = await resp.json(content_type=None)
                    except ValueError as exc:
                        raise GenericServiceError(
                            "Invalid MCP response (body is not JSON)",
                            provider=self.full_name, status=resp.status,
                        ) from exc
        except asyncio.TimeoutError as exc:
            raise TimeoutFailure(
                f"Request timed out after {self.timeout:.0f}s",
                provider=self.full_name,
            ) from exc
        except aiohttp.ClientError as exc:
            raise ProviderUnavailable(
                f"Network connection failed: {exc}",
                provider=self.full_name,
            ) from exc

        return self._unwrap(envelope)

    def _unwrap(self, envelope: Any) -> dict:
        try:
            text = envelope["content"][0]["text"]
        except (KeyError, IndexError, TypeError):
            text = None
        # Some tool versions hand back the document already decoded
        if isinstance(text, dict):
            return text
        if not text or not isinstance(text, str):
            raise GenericServiceError(
                "Invalid MCP response format (missing content)",
                provider=self.full_name,
            )

        decoded = decode_inspection_payload(text, self.full_name)
        if isinstance(decoded, Malformed):
            raise GenericServiceError(
                f"Invalid MCP response payload: {decoded.reason}",
                provider=self.full_name,
            )
        return decoded.payload

    async def health(self) -> int:
        """HTTP status of the backend health endpoint, 0 when unreachable."""
        try:
            async with aiohttp.ClientSession() as session:
                async with session.get(
                    f"{self._base_url}/health",
                    headers=self._headers,
                    timeout=aiohttp.ClientTimeout(total=self.timeout),
                ) as resp:
                    return resp.status
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            logger.error("[%s] Health check failed: %s", self.full_name, exc)
            return 0
