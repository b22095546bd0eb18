"""Base64url encoding without padding, as used by JWS segments."""

import base64
import binascii
import re

from jwtkit.core.errors import TokenFormatError

_BASE64URL_ALPHABET = re.compile(r"[A-Za-z0-9_-]*")


def encode_url(base64_text: str) -> str:
    """Convert standard base64 text into unpadded base64url."""
    return base64_text.replace("+", "-").replace("/", "_").rstrip("=")


def b64url_encode(data: bytes) -> str:
    """Encode bytes as unpadded base64url text."""
    return encode_url(base64.b64encode(data).decode("ascii"))


def decode_url(text: str) -> bytes:
    """Decode unpadded base64url text into bytes.

    A length of 1 mod 4 cannot come from any byte string and is rejected
    rather than truncated. Text whose final character carries non-zero
    unused bits is rejected too, so each byte string has exactly one
    accepted encoding.
    """
    if not isinstance(text, str) or not _BASE64URL_ALPHABET.fullmatch(text):
        raise TokenFormatError("Segment is not base64url text")

    remainder = len(text) % 4
    if remainder == 1:
        raise TokenFormatError("Invalid base64url length")
    padded = text.replace("-", "+").replace("_", "/") + "=" * ((4 - remainder) % 4)

    try:
        data = base64.b64decode(padded, validate=True)
    except binascii.Error as exc:
        raise TokenFormatError("Invalid base64url segment") from exc
    if b64url_encode(data) != text:
        raise TokenFormatError("Non-canonical base64url segment")
    return data
