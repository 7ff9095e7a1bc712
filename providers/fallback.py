"""
FallbackChain — primary provider with retries, then one secondary attempt.

When every provider has failed the chain does not raise: it returns the
"unavailable" sentinel so the normalizer can still build a renderable,
degraded Analysis.
"""
from __future__ import annotations

import logging
from typing import Optional

from analysis import AnalysisContext, ImagePayload, RawProviderResult
from providers.base import InspectionProvider
from retry import RetryPolicy

logger = logging.getLogger(__name__)

UNAVAILABLE_PROVIDER = "unavailable"
UNAVAILABLE_NARRATION = (
    "Unable to reach the AI service. Please check your connection and try again."
)


class FallbackChain:

    def __init__(
        self,
        primary: InspectionProvider,
        secondary: Optional[InspectionProvider] = None,
        retry_policy: Optional[RetryPolicy] = None,
    ):
        self.primary      = primary
        self.secondary    = secondary
        self.retry_policy = retry_policy or RetryPolicy()

    async def run(
        self,
        payload: ImagePayload,
        context: AnalysisContext,
    ) -> tuple[RawProviderResult, str]:
        """Returns (raw_result, provider_id). Never raises provider failures."""
        try:
            result = await self.retry_policy.execute(
                lambda: self.primary.call(payload, context),
                label=self.primary.full_name,
            )
            return result, self.primary.full_name
        except Exception as exc:
            primary_error = exc
            logger.error("[%s] Failed after retries: %s", self.primary.full_name, exc)

        if self.secondary is not None:
            logger.info("Falling back to %s", self.secondary.full_name)
            try:
                result = await self.secondary.call(payload, context)
                return result, self.secondary.full_name
            except Exception as exc:
                logger.error("[%s] Failed: %s", self.secondary.full_name, exc)
                return self._unavailable(exc), UNAVAILABLE_PROVIDER

        return self._unavailable(primary_error), UNAVAILABLE_PROVIDER

    @staticmethod
    def _unavailable(exc: Exception) -> RawProviderResult:
        logger.error("All inspection providers failed — returning degraded result")
        return RawProviderResult.unavailable(str(exc), UNAVAILABLE_NARRATION)
