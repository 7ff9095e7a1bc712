"""
Frame encoder — turns a local image reference into an ImagePayload.

Accepts a filesystem path, a ``file://`` URI or an existing ``data:`` URL.
Any failure here is fatal for the call: a corrupt local read will not get
better on retry, so EncodingFailure is never retried.
"""
from __future__ import annotations

import base64
import binascii
import logging
import os
from pathlib import Path
from typing import Union
from urllib.parse import unquote, urlparse

from analysis import ImagePayload
from providers.errors import EncodingFailure

logger = logging.getLogger(__name__)


def detect_media_type(data: bytes) -> str:
    if data[:8] == b"\x89PNG\r\n\x1a\n":
        return "image/png"
    if data[:4] == b"GIF8":
        return "image/gif"
    if data[:4] == b"RIFF" and data[8:12] == b"WEBP":
        return "image/webp"
    return "image/jpeg"


def _decode_data_url(image_ref: str) -> ImagePayload:
    header, _, b64 = image_ref.partition(",")
    if not b64 or ";base64" not in header:
        raise EncodingFailure("Unsupported data URL (expected base64 encoding)")
    try:
        data = base64.b64decode(b64, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise EncodingFailure(f"Invalid base64 image data: {exc}") from exc
    if not data:
        raise EncodingFailure("Image is empty")
    media_type = header[len("data:"):].split(";", 1)[0] or detect_media_type(data)
    return ImagePayload(data=data, media_type=media_type, source="data-url")


def encode(image_ref: Union[str, os.PathLike]) -> ImagePayload:
    """Read and encode one frame. Raises EncodingFailure."""
    ref = os.fspath(image_ref)
    if isinstance(ref, str) and ref.startswith("data:"):
        return _decode_data_url(ref)

    if isinstance(ref, str) and ref.startswith("file://"):
        ref = unquote(urlparse(ref).path)

    path = Path(ref)
    try:
        data = path.read_bytes()
    except OSError as exc:
        raise EncodingFailure(f"Cannot read image {path}: {exc}") from exc

    if not data:
        raise EncodingFailure(f"Image {path} is empty")

    payload = ImagePayload(data=data, media_type=detect_media_type(data), source=str(path))
    logger.debug("Encoded %s (%d bytes, %s)", path, len(data), payload.media_type)
    return payload
