"""
Typed failures raised by the frame encoder and the provider adapters.

Every adapter maps its transport errors onto these classes so the retry
executor and fallback chain never have to look at HTTP details.
"""
from __future__ import annotations

from typing import Optional


class InspectionError(Exception):
    """Base class for all analysis-core failures."""

    retriable: bool = False

    def __init__(
        self,
        message: str,
        provider: Optional[str] = None,
        status: Optional[int] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.provider = provider
        self.status = status

    def __str__(self) -> str:
        if self.provider:
            return f"[{self.provider}] {self.message}"
        return self.message


class EncodingFailure(InspectionError):
    """The local image could not be read. Retrying cannot help."""


class ProviderError(InspectionError):
    """A remote provider call failed."""

    retriable = True


class AuthenticationFailure(ProviderError):
    """401/403 — the credential was rejected."""

    retriable = False


class ProviderUnavailable(ProviderError):
    """5xx or network failure — transient."""


class TimeoutFailure(ProviderError):
    """The request was aborted after the adapter timeout."""


class GenericServiceError(ProviderError):
    """Any other non-2xx status, or a reply we could not decode."""


def raise_for_status(status: int, body: str, provider: str) -> None:
    """Raise the typed failure matching an HTTP status; no-op on 2xx."""
    if 200 <= status < 300:
        return
    if status in (401, 403):
        raise AuthenticationFailure(
            "Authentication failed. Please check your credentials.",
            provider=provider, status=status,
        )
    if status >= 500:
        raise ProviderUnavailable(
            "AI service is temporarily unavailable. Please try again.",
            provider=provider, status=status,
        )
    raise GenericServiceError(
        f"Service error ({status}): {body[:200] or 'Unknown error'}",
        provider=provider, status=status,
    )
