"""
Tests for frame_encoder.py.
"""
from __future__ import annotations

import base64

import pytest

from conftest import JPEG_BYTES, PNG_BYTES
from frame_encoder import detect_media_type, encode
from providers.errors import EncodingFailure


class TestDetectMediaType:
    def test_png(self):
        assert detect_media_type(PNG_BYTES) == "image/png"

    def test_gif(self):
        assert detect_media_type(b"GIF89a" + b"\x00" * 10) == "image/gif"

    def test_webp(self):
        assert detect_media_type(b"RIFF\x00\x00\x00\x00WEBPVP8 ") == "image/webp"

    def test_defaults_to_jpeg(self):
        assert detect_media_type(JPEG_BYTES) == "image/jpeg"


class TestEncode:
    def test_reads_file(self, image_file):
        payload = encode(image_file)
        assert payload.data == JPEG_BYTES
        assert payload.media_type == "image/jpeg"
        assert payload.source == str(image_file)

    def test_accepts_str_path(self, image_file):
        assert encode(str(image_file)).data == JPEG_BYTES

    def test_accepts_file_uri(self, image_file):
        assert encode(image_file.as_uri()).data == JPEG_BYTES

    def test_data_url_property(self, tmp_path):
        path = tmp_path / "plan.png"
        path.write_bytes(PNG_BYTES)
        payload = encode(path)
        b64 = base64.b64encode(PNG_BYTES).decode()
        assert payload.data_url == f"data:image/png;base64,{b64}"

    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(EncodingFailure, match="Cannot read image"):
            encode(tmp_path / "nope.jpg")

    def test_empty_file_raises(self, tmp_path):
        path = tmp_path / "empty.jpg"
        path.write_bytes(b"")
        with pytest.raises(EncodingFailure, match="empty"):
            encode(path)

    def test_data_url_passthrough(self):
        b64 = base64.b64encode(PNG_BYTES).decode()
        payload = encode(f"data:image/png;base64,{b64}")
        assert payload.data == PNG_BYTES
        assert payload.media_type == "image/png"

    def test_bad_data_url_raises(self):
        with pytest.raises(EncodingFailure):
            encode("data:image/jpeg;base64,***not-base64***")

    def test_non_base64_data_url_raises(self):
        with pytest.raises(EncodingFailure, match="base64"):
            encode("data:text/plain,hello")
