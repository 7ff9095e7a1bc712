"""
Tests for providers/base.py and the RawProviderResult constructors.

Covers:
  - parse_json_response: plain JSON, markdown-fenced JSON, embedded JSON, invalid JSON
  - decode_inspection_payload: Ok vs Malformed variants
  - RawProviderResult.from_payload / unavailable
  - build_user_prompt carries the context
"""
from __future__ import annotations

import pytest

from analysis import AnalysisContext, RawProviderResult
from providers.base import (
    Malformed, Ok,
    build_user_prompt, decode_inspection_payload, parse_json_response,
)


# ── parse_json_response ───────────────────────────────────────────────────────

class TestParseJsonResponse:
    def test_plain_json(self):
        raw = '{"summary": "Clean", "confidence": 90}'
        data = parse_json_response(raw, "testprovider")
        assert data["summary"] == "Clean"
        assert data["confidence"] == 90

    def test_json_fenced_with_backticks(self):
        raw = "```json\n{\"summary\": \"Clean\"}\n```"
        data = parse_json_response(raw, "testprovider")
        assert data["summary"] == "Clean"

    def test_json_fenced_without_language_hint(self):
        raw = "```\n{\"summary\": \"Clean\"}\n```"
        data = parse_json_response(raw, "testprovider")
        assert data["summary"] == "Clean"

    def test_object_embedded_in_prose(self):
        raw = 'Here is the analysis: {"violations": [], "summary": "ok"} Hope this helps.'
        data = parse_json_response(raw, "testprovider")
        assert data["summary"] == "ok"

    def test_leading_trailing_whitespace(self):
        raw = '  \n  {"summary": "Clean"}  \n  '
        data = parse_json_response(raw, "testprovider")
        assert data["summary"] == "Clean"

    def test_invalid_json_raises_value_error(self):
        with pytest.raises(ValueError, match="JSON parse error"):
            parse_json_response("This is not JSON at all.", "testprovider")

    def test_truncated_json_raises_value_error(self):
        with pytest.raises(ValueError):
            parse_json_response('{"summary": "Cle', "testprovider")


# ── decode_inspection_payload ─────────────────────────────────────────────────

class TestDecodeInspectionPayload:
    def test_valid_object_is_ok(self):
        result = decode_inspection_payload('{"violations": []}', "p")
        assert isinstance(result, Ok)
        assert result.payload == {"violations": []}

    def test_empty_reply_is_malformed(self):
        result = decode_inspection_payload("   ", "p")
        assert isinstance(result, Malformed)
        assert result.reason == "empty reply"

    def test_garbage_is_malformed(self):
        result = decode_inspection_payload("I cannot see the image.", "p")
        assert isinstance(result, Malformed)
        assert result.raw == "I cannot see the image."

    @pytest.mark.parametrize("raw", [{"violations": []}, None, 7])
    def test_non_text_is_malformed(self, raw):
        result = decode_inspection_payload(raw, "p")
        assert isinstance(result, Malformed)
        assert "expected text" in result.reason

    def test_json_array_is_malformed(self):
        result = decode_inspection_payload("[1, 2, 3]", "p")
        assert isinstance(result, Malformed)
        assert "list" in result.reason


# ── RawProviderResult ─────────────────────────────────────────────────────────

class TestRawProviderResult:
    def test_from_payload_keeps_fields(self):
        payload = {
            "violations": [{"code": "NEC 210.8", "issue": "No GFCI"}],
            "summary": "One electrical issue",
            "confidence": 72,
        }
        r = RawProviderResult.from_payload(payload)
        assert r.violations == payload["violations"]
        assert r.summary == "One electrical issue"
        assert r.confidence == 72
        assert r.payload is payload
        assert r.error is None

    def test_from_payload_missing_violations(self):
        r = RawProviderResult.from_payload({"summary": "No violations detected"})
        assert r.violations == []

    def test_from_payload_drops_non_dict_violations(self):
        r = RawProviderResult.from_payload({"violations": ["bad", {"issue": "ok"}, None]})
        assert r.violations == [{"issue": "ok"}]

    def test_from_payload_violations_not_a_list(self):
        r = RawProviderResult.from_payload({"violations": "none"})
        assert r.violations == []

    def test_unavailable_sentinel(self):
        r = RawProviderResult.unavailable("boom", "Please check your connection")
        assert r.error == "boom"
        assert r.narration == "Please check your connection"
        assert r.violations == []


def test_user_prompt_mentions_context():
    ctx = AnalysisContext(project_type="commercial", jurisdiction="Maui")
    prompt = build_user_prompt(ctx)
    assert "commercial" in prompt
    assert "Maui" in prompt
