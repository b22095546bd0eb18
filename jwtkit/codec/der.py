"""ECDSA signature transcoding between ASN.1 DER and JOSE raw R||S form.

Signature providers produce and consume DER:

    SEQUENCE { INTEGER r, INTEGER s }

while JWS (RFC 7518, section 3.4) carries the two integers as fixed-width
big-endian octet strings concatenated, each exactly as long as the curve
order requires (32, 48 or 66 bytes).
"""

from jwtkit.core.errors import AlgorithmNotSupportedError, SignatureFormatError
from jwtkit.crypto.algorithms import AlgorithmFamily, get_algorithm

DER_SEQUENCE = 0x30
DER_INTEGER = 0x02
_LONG_FORM = 0x80


def _part_length(algorithm: str) -> int:
    spec = get_algorithm(algorithm)
    if spec.family is not AlgorithmFamily.ECDSA or spec.part_length is None:
        raise AlgorithmNotSupportedError(algorithm)
    return spec.part_length


def _strip_leading_zeros(value: bytes) -> bytes:
    """Drop leading zero bytes, keeping at least one byte."""
    stripped = value.lstrip(b"\x00")
    return stripped or b"\x00"


def _encode_length(length: int) -> bytes:
    if length < _LONG_FORM:
        return bytes([length])
    body = length.to_bytes((length.bit_length() + 7) // 8, "big")
    return bytes([_LONG_FORM | len(body)]) + body


def _encode_integer(value: bytes) -> bytes:
    value = _strip_leading_zeros(value)
    if value[0] & 0x80:
        # A set high bit would read as a negative INTEGER.
        value = b"\x00" + value
    return bytes([DER_INTEGER]) + _encode_length(len(value)) + value


def _read_length(der: bytes, offset: int) -> tuple[int, int]:
    """Read a DER length at ``offset``; return (length, offset after it)."""
    if offset >= len(der):
        raise SignatureFormatError("Invalid DER signature (truncated length)")
    first = der[offset]
    offset += 1
    if first < _LONG_FORM:
        return first, offset

    num_bytes = first & 0x7F
    if num_bytes == 0:
        raise SignatureFormatError("Invalid DER signature (indefinite length)")
    if offset + num_bytes > len(der):
        raise SignatureFormatError("Invalid DER signature (bad length)")
    length = int.from_bytes(der[offset : offset + num_bytes], "big")
    return length, offset + num_bytes


def _read_integer(der: bytes, offset: int, end: int, name: str) -> tuple[bytes, int]:
    if offset >= end or der[offset] != DER_INTEGER:
        raise SignatureFormatError(f"Invalid DER signature (missing {name})")
    length, offset = _read_length(der, offset + 1)
    if offset + length > end:
        raise SignatureFormatError(f"Invalid DER signature ({name} overruns buffer)")
    return der[offset : offset + length], offset + length


def jose_to_der(raw: bytes, algorithm: str) -> bytes:
    """Convert a JOSE R||S signature into a DER SEQUENCE of two INTEGERs."""
    part_length = _part_length(algorithm)
    if len(raw) != 2 * part_length:
        raise SignatureFormatError("Invalid JOSE signature length")

    body = _encode_integer(raw[:part_length]) + _encode_integer(raw[part_length:])
    return bytes([DER_SEQUENCE]) + _encode_length(len(body)) + body


def der_to_jose(der: bytes, algorithm: str) -> bytes:
    """Convert a DER-encoded ECDSA signature into JOSE R||S bytes."""
    part_length = _part_length(algorithm)

    if not der or der[0] != DER_SEQUENCE:
        raise SignatureFormatError("Invalid DER signature (expected SEQUENCE)")
    seq_length, offset = _read_length(der, 1)
    end = offset + seq_length
    if end != len(der):
        raise SignatureFormatError("Invalid DER signature (bad length)")

    r, offset = _read_integer(der, offset, end, "r")
    s, offset = _read_integer(der, offset, end, "s")
    if offset != end:
        raise SignatureFormatError("Invalid DER signature (trailing data)")

    parts = []
    for value in (r, s):
        value = value.lstrip(b"\x00")
        if len(value) > part_length:
            raise SignatureFormatError("Invalid DER signature (r/s length)")
        parts.append(value.rjust(part_length, b"\x00"))
    return b"".join(parts)
