"""Shared test fixtures for jwtkit."""

from collections.abc import Callable
from typing import Any

import pytest
from cryptography.hazmat.primitives.asymmetric import ec, rsa

RSA_KEY_SIZE = 2048
HMAC_SECRET = "jwtkit-test-secret-0123456789abcdefghijklmnopqrstuvwxyz-0123456789"

_CURVES = {
    "ES256": ec.SECP256R1,
    "ES384": ec.SECP384R1,
    "ES512": ec.SECP521R1,
}


@pytest.fixture(autouse=True)
def _clear_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep host JWT_* settings out of the tests."""
    for name in (
        "JWT_CLOCK_TOLERANCE",
        "JWT_REQUIRE_EXPIRATION",
        "JWT_ALLOWED_ALGORITHMS",
        "JWT_ISSUER",
        "JWT_AUDIENCE",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def hmac_secret() -> str:
    """A shared secret long enough for HS512."""
    return HMAC_SECRET


@pytest.fixture(scope="session")
def rsa_private_key() -> rsa.RSAPrivateKey:
    """One RSA-2048 key for the whole session."""
    return rsa.generate_private_key(public_exponent=65537, key_size=RSA_KEY_SIZE)


@pytest.fixture(scope="session")
def ec_private_keys() -> dict[str, ec.EllipticCurvePrivateKey]:
    """EC keys on the curve each ESxxx algorithm requires."""
    return {alg: ec.generate_private_key(curve()) for alg, curve in _CURVES.items()}


@pytest.fixture(scope="session")
def key_pair_for(
    rsa_private_key: rsa.RSAPrivateKey,
    ec_private_keys: dict[str, ec.EllipticCurvePrivateKey],
) -> Callable[[str], tuple[Any, Any]]:
    """Return (signing key, verification key) for an algorithm identifier."""

    def _pair(algorithm: str) -> tuple[Any, Any]:
        if algorithm.startswith("HS"):
            return HMAC_SECRET, HMAC_SECRET
        if algorithm.startswith("ES"):
            key = ec_private_keys[algorithm]
            return key, key.public_key()
        return rsa_private_key, rsa_private_key.public_key()

    return _pair
