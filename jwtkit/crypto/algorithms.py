"""Registry of supported JWS algorithms."""

from enum import StrEnum
from types import MappingProxyType

from pydantic import BaseModel, ConfigDict

from jwtkit.core.errors import AlgorithmNotSupportedError


class AlgorithmFamily(StrEnum):
    """Signing scheme shared by a group of algorithms."""

    HMAC = "HMAC"
    RSA = "RSA"
    RSA_PSS = "RSA-PSS"
    ECDSA = "ECDSA"


class AlgorithmSpec(BaseModel):
    """Immutable registry entry for one JWS algorithm identifier."""

    model_config = ConfigDict(frozen=True)

    name: str
    family: AlgorithmFamily
    digest: str
    # ECDSA only: byte length of each of R and S, and the required curve.
    part_length: int | None = None
    curve: str | None = None


def _spec(name: str, family: AlgorithmFamily, digest: str, **extra: object) -> AlgorithmSpec:
    return AlgorithmSpec(name=name, family=family, digest=digest, **extra)


ALGORITHMS = MappingProxyType(
    {
        "HS256": _spec("HS256", AlgorithmFamily.HMAC, "SHA256"),
        "HS384": _spec("HS384", AlgorithmFamily.HMAC, "SHA384"),
        "HS512": _spec("HS512", AlgorithmFamily.HMAC, "SHA512"),
        "RS256": _spec("RS256", AlgorithmFamily.RSA, "SHA256"),
        "RS384": _spec("RS384", AlgorithmFamily.RSA, "SHA384"),
        "RS512": _spec("RS512", AlgorithmFamily.RSA, "SHA512"),
        "PS256": _spec("PS256", AlgorithmFamily.RSA_PSS, "SHA256"),
        "PS384": _spec("PS384", AlgorithmFamily.RSA_PSS, "SHA384"),
        "PS512": _spec("PS512", AlgorithmFamily.RSA_PSS, "SHA512"),
        "ES256": _spec(
            "ES256", AlgorithmFamily.ECDSA, "SHA256", part_length=32, curve="secp256r1"
        ),
        "ES384": _spec(
            "ES384", AlgorithmFamily.ECDSA, "SHA384", part_length=48, curve="secp384r1"
        ),
        "ES512": _spec(
            "ES512", AlgorithmFamily.ECDSA, "SHA512", part_length=66, curve="secp521r1"
        ),
    }
)

SUPPORTED_ALGORITHMS = frozenset(ALGORITHMS)


def get_algorithm(name: object) -> AlgorithmSpec:
    """Look up an algorithm by its exact identifier."""
    if not isinstance(name, str) or name not in ALGORITHMS:
        raise AlgorithmNotSupportedError(name)
    return ALGORITHMS[name]
