"""JWT signature verification and claim validation.

Caller mistakes (a disallowed algorithm, missing or mismatched key material,
malformed options) raise. Anything wrong with the token itself, including
signatures that cannot be transcoded, yields False.
"""

import logging

from jwtkit.codec.base64url import b64url_encode
from jwtkit.codec.der import jose_to_der
from jwtkit.codec.token import TokenSegments, parse_token
from jwtkit.core.errors import (
    AlgorithmNotAllowedError,
    SignatureFormatError,
    TokenFormatError,
)
from jwtkit.crypto.algorithms import (
    ALGORITHMS,
    SUPPORTED_ALGORITHMS,
    AlgorithmFamily,
    AlgorithmSpec,
)
from jwtkit.crypto.compare import constant_time_equals
from jwtkit.crypto.keys import AsymmetricKey, verification_key_for
from jwtkit.crypto.provider import DEFAULT_PROVIDER, SignatureProvider
from jwtkit.crypto.types import DecodedToken, VerifyOptions
from jwtkit.jws.claims import validate_claims

logger = logging.getLogger(__name__)


def _check_signature(
    spec: AlgorithmSpec,
    key: bytes | AsymmetricKey,
    segments: TokenSegments,
    decoded: DecodedToken,
    provider: SignatureProvider,
) -> bool:
    content = segments.signing_input.encode("ascii")

    if spec.family is AlgorithmFamily.HMAC:
        assert isinstance(key, bytes)
        expected = b64url_encode(provider.digest(key, content, spec))
        return constant_time_equals(expected, segments.signature)

    assert not isinstance(key, bytes)
    signature = decoded.signature
    if spec.family is AlgorithmFamily.ECDSA:
        try:
            signature = jose_to_der(signature, spec.name)
        except SignatureFormatError as exc:
            logger.debug("Token rejected: %s", exc)
            return False
    return provider.verify(key, signature, content, spec)


def verify(
    token: str | bytes,
    options: VerifyOptions,
    provider: SignatureProvider = DEFAULT_PROVIDER,
    now: int | None = None,
) -> bool:
    """Verify a token's signature and configured claims."""
    try:
        segments, decoded = parse_token(token)
    except TokenFormatError as exc:
        logger.debug("Token rejected: %s", exc)
        return False

    algorithm = decoded.header.get("alg")
    if not algorithm or not isinstance(algorithm, str):
        logger.debug("Token rejected: missing alg header")
        return False

    allowed = options.allowed_algorithms or SUPPORTED_ALGORITHMS
    if algorithm not in allowed:
        logger.warning("JWT algorithm %r is not allowed", algorithm)
        raise AlgorithmNotAllowedError(algorithm)
    spec = ALGORITHMS[algorithm]

    key = verification_key_for(spec, options.key, decoded)

    if not _check_signature(spec, key, segments, decoded, provider):
        logger.debug("Token rejected: invalid %s signature", spec.name)
        return False

    return validate_claims(decoded.payload, options, now=now)
