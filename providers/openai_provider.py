"""
Direct vision provider — the secondary (fallback) provider.

Talks to any OpenAI-compatible chat completions endpoint with a
vision-capable model (gpt-4o by default). The model is asked for the same
`{violations, summary, confidence}` document the MCP backend returns, so the
normalizer sees one shape regardless of which provider answered.

A reply that cannot be decoded does not fail the call: it is replaced by an
empty-violations result so the inspector still gets a renderable answer.
"""
from __future__ import annotations

import logging
import time
from typing import Optional

import openai

import config
from analysis import AnalysisContext, ImagePayload, RawProviderResult
from providers.base import (
    INSPECTION_PROMPT, build_user_prompt,
    InspectionProvider, Malformed, decode_inspection_payload,
)
from providers.errors import (
    AuthenticationFailure,
    GenericServiceError,
    ProviderUnavailable,
    TimeoutFailure,
    raise_for_status,
)

logger = logging.getLogger(__name__)

_MALFORMED_DEFAULT = {
    "violations": [],
    "summary":    "Analysis parsing error",
    "confidence": 0,
}


class OpenAIVisionProvider(InspectionProvider):

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4o",
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        self.name     = "openai"
        self.model_id = model
        self.timeout  = timeout if timeout is not None else config.PROVIDER_TIMEOUT_SECS
        # Retries are owned by the fallback chain, not the SDK
        self._client  = openai.AsyncOpenAI(
            api_key=api_key,
            base_url=base_url,
            timeout=self.timeout,
            max_retries=0,
        )

    async def call(self, payload: ImagePayload, context: AnalysisContext) -> RawProviderResult:
        t0 = time.monotonic()
        try:
            response = await self._client.chat.completions.create(
                model=self.model_id,
                max_tokens=800,
                temperature=0.3,
                messages=[
                    {"role": "system", "content": INSPECTION_PROMPT},
                    {
                        "role": "user",
                        "content": [
                            {
                                "type": "image_url",
                                "image_url": {"url": payload.data_url, "detail": "high"},
                            },
                            {"type": "text", "text": build_user_prompt(context)},
                        ],
                    },
                ],
            )
        except openai.APITimeoutError as exc:
            raise TimeoutFailure(
                f"Request timed out after {self.timeout:.0f}s", provider=self.full_name,
            ) from exc
        except (openai.AuthenticationError, openai.PermissionDeniedError) as exc:
            raise AuthenticationFailure(
                "Authentication failed. Please check your credentials.",
                provider=self.full_name, status=exc.status_code,
            ) from exc
        except openai.APIStatusError as exc:
            raise_for_status(exc.status_code, str(exc), self.full_name)
            raise GenericServiceError(str(exc), provider=self.full_name) from exc
        except openai.APIConnectionError as exc:
            raise ProviderUnavailable(
                f"Network connection failed: {exc}", provider=self.full_name,
            ) from exc

        latency_ms = int((time.monotonic() - t0) * 1000)
        raw = ""
        if response.choices:
            raw = response.choices[0].message.content or ""

        decoded = decode_inspection_payload(raw, self.full_name)
        if isinstance(decoded, Malformed):
            logger.warning("[%s] Malformed reply (%s) — using empty result", self.full_name, decoded.reason)
            data = dict(_MALFORMED_DEFAULT)
        else:
            data = decoded.payload

        result = RawProviderResult.from_payload(data)
        logger.info(
            "[%s] OK — %d violation(s) confidence=%s latency=%dms",
            self.full_name, len(result.violations), result.confidence, latency_ms,
        )
        return result
