"""Compact JWS serialization: splitting, joining, and decoding segments."""

import json
import logging
import re
from collections.abc import Mapping
from typing import Any, NamedTuple

from jwtkit.codec.base64url import b64url_encode, decode_url
from jwtkit.core.errors import TokenFormatError
from jwtkit.crypto.types import DecodedToken

logger = logging.getLogger(__name__)

TOKEN_PATTERN = re.compile(r"[A-Za-z0-9_-]+\.[A-Za-z0-9_-]+\.([A-Za-z0-9_-]+)?")


class TokenSegments(NamedTuple):
    """The three base64url segments of a compact token, as transmitted."""

    header: str
    payload: str
    signature: str

    @property
    def signing_input(self) -> str:
        return join_segments(self.header, self.payload)


def join_segments(*segments: str) -> str:
    """Join base64url segments with dots."""
    return ".".join(segments)


def split_token(token: str | bytes) -> TokenSegments:
    """Split a compact token after checking its three-segment shape."""
    if isinstance(token, bytes | bytearray):
        try:
            token = bytes(token).decode("ascii")
        except UnicodeDecodeError as exc:
            raise TokenFormatError("Token is not ASCII") from exc
    if not isinstance(token, str) or not TOKEN_PATTERN.fullmatch(token):
        raise TokenFormatError("Token is not in compact JWS format")
    header, payload, signature = token.split(".")
    return TokenSegments(header, payload, signature)


def encode_segment(value: Mapping[str, Any]) -> str:
    """Serialize a mapping as compact JSON and base64url-encode it."""
    raw = json.dumps(value, separators=(",", ":"), ensure_ascii=False, allow_nan=False)
    return b64url_encode(raw.encode("utf-8"))


def decode_segment(segment: str, name: str) -> dict[str, Any]:
    """Base64url-decode a segment and parse it as a JSON object."""
    try:
        value = json.loads(decode_url(segment).decode("utf-8"))
    except (ValueError, RecursionError) as exc:
        raise TokenFormatError(f"Error parsing jwt token {name}") from exc
    if not isinstance(value, dict):
        raise TokenFormatError(f"JWT {name} is not a JSON object")
    return value


def parse_token(token: str | bytes) -> tuple[TokenSegments, DecodedToken]:
    """Split and decode a token, raising TokenFormatError on any defect."""
    segments = split_token(token)
    decoded = DecodedToken(
        header=decode_segment(segments.header, "header"),
        payload=decode_segment(segments.payload, "payload"),
        signature=decode_url(segments.signature),
    )
    return segments, decoded


def decode(token: str | bytes) -> DecodedToken | None:
    """Decode a token without verifying its signature.

    Returns None for anything that is not a well-formed, signed token.
    """
    try:
        segments, decoded = parse_token(token)
    except TokenFormatError as exc:
        logger.debug("Unable to decode token: %s", exc)
        return None
    if not segments.signature:
        logger.debug("Unable to decode token: empty signature segment")
        return None
    return decoded
