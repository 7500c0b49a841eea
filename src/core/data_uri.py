"""Decoding of data-URI payloads (``data:<type>;base64,<payload>``)."""
import base64
import binascii
import re

from pydantic import BaseModel

DEFAULT_CONTENT_TYPE = "application/octet-stream"

_CONTENT_TYPE_RE = re.compile(r":(.*?);")
_NON_BASE64_RE = re.compile(r"[^A-Za-z0-9+/]")


class DecodedPayload(BaseModel):
    content: bytes
    content_type: str = DEFAULT_CONTENT_TYPE


def _parse_content_type(prefix: str) -> str:
    match = _CONTENT_TYPE_RE.search(prefix)
    if match and match.group(1).strip():
        return match.group(1).strip()
    return DEFAULT_CONTENT_TYPE


def _decode_base64_lenient(payload: str) -> bytes:
    cleaned = _NON_BASE64_RE.sub("", payload)
    # A lone trailing symbol can never form a byte
    if len(cleaned) % 4 == 1:
        cleaned = cleaned[:-1]
    cleaned += "=" * (-len(cleaned) % 4)
    try:
        return base64.b64decode(cleaned)
    except (binascii.Error, ValueError):
        return b""


def decode_data_uri(value: str) -> DecodedPayload:
    """Split a data URI into raw bytes and its declared content type.

    Never raises. A missing or malformed prefix yields the generic binary
    content type, and the payload is decoded best-effort.
    """
    if "," in value:
        prefix, payload = value.split(",", 1)
        content_type = _parse_content_type(prefix)
    else:
        payload = value
        content_type = DEFAULT_CONTENT_TYPE
    return DecodedPayload(content=_decode_base64_lenient(payload), content_type=content_type)
