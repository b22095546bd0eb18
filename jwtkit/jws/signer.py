"""JWT creation for the HMAC, RSA, RSA-PSS and ECDSA algorithm families."""

import calendar
import logging
from collections.abc import Mapping
from datetime import datetime
from typing import Any

from jwtkit.codec.base64url import b64url_encode
from jwtkit.codec.der import der_to_jose
from jwtkit.codec.token import encode_segment, join_segments
from jwtkit.core.errors import InvalidPayloadError
from jwtkit.crypto.algorithms import AlgorithmFamily, AlgorithmSpec, get_algorithm
from jwtkit.crypto.keys import AsymmetricKey, signing_key_for
from jwtkit.crypto.provider import DEFAULT_PROVIDER, SignatureProvider
from jwtkit.crypto.types import SignOptions

logger = logging.getLogger(__name__)

TOKEN_TYPE = "JWT"
NUMERIC_DATE_CLAIMS = ("exp", "nbf", "iat")


def build_header(algorithm: str, kid: str | None = None) -> dict[str, str]:
    """Build the JOSE header; kid is left out when not given."""
    header = {"alg": algorithm, "typ": TOKEN_TYPE}
    if kid is not None:
        header["kid"] = kid
    return header


def _serializable_claims(payload: Mapping[str, Any]) -> dict[str, Any]:
    claims = dict(payload)
    for name in NUMERIC_DATE_CLAIMS:
        if isinstance(claims.get(name), datetime):
            # Naive values are taken as UTC, never host local time.
            claims[name] = calendar.timegm(claims[name].utctimetuple())
    return claims


def _create_signature(
    spec: AlgorithmSpec,
    key: bytes | AsymmetricKey,
    signing_input: bytes,
    provider: SignatureProvider,
) -> bytes:
    if spec.family is AlgorithmFamily.HMAC:
        assert isinstance(key, bytes)
        return provider.digest(key, signing_input, spec)
    assert not isinstance(key, bytes)
    signature = provider.sign(key, signing_input, spec)
    if spec.family is AlgorithmFamily.ECDSA:
        return der_to_jose(signature, spec.name)
    return signature


def sign(
    payload: Mapping[str, Any],
    options: SignOptions,
    provider: SignatureProvider = DEFAULT_PROVIDER,
) -> str:
    """Create a signed compact JWT from a claims mapping."""
    if not isinstance(payload, Mapping):
        raise InvalidPayloadError("Invalid payload passed to create JWT token")
    spec = get_algorithm(options.algorithm)
    key = signing_key_for(spec, options.key)

    try:
        signing_input = join_segments(
            encode_segment(build_header(spec.name, options.kid)),
            encode_segment(_serializable_claims(payload)),
        )
    except (TypeError, ValueError) as exc:
        raise InvalidPayloadError("JWT payload is not JSON-serializable") from exc

    signature = _create_signature(spec, key, signing_input.encode("ascii"), provider)
    logger.debug("Signed JWT with %s (kid=%s)", spec.name, options.kid)
    return join_segments(signing_input, b64url_encode(signature))
