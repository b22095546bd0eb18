"""Key material for signing and verification: secrets, key handles, resolvers."""

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

from cryptography import x509
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec, rsa
from jwt.algorithms import ECAlgorithm, RSAAlgorithm
from jwt.exceptions import InvalidKeyError

from jwtkit.codec.base64url import decode_url
from jwtkit.core.errors import KeyMismatchError, KeyNotSuppliedError, TokenFormatError
from jwtkit.crypto.algorithms import AlgorithmFamily, AlgorithmSpec
from jwtkit.crypto.types import DecodedToken

_PRIVATE_TYPES = (rsa.RSAPrivateKey, ec.EllipticCurvePrivateKey)
_PUBLIC_TYPES = (rsa.RSAPublicKey, ec.EllipticCurvePublicKey)

AsymmetricKey = (
    rsa.RSAPrivateKey | rsa.RSAPublicKey | ec.EllipticCurvePrivateKey | ec.EllipticCurvePublicKey
)


@dataclass(frozen=True)
class SharedSecret:
    """HMAC secret bytes."""

    value: bytes


@dataclass(frozen=True)
class KeyHandle:
    """An RSA or EC key object."""

    key: AsymmetricKey

    @property
    def is_private(self) -> bool:
        return isinstance(self.key, _PRIVATE_TYPES)


@dataclass(frozen=True)
class KeyResolver:
    """Deferred lookup of verification key material from the decoded token."""

    resolve: Callable[[DecodedToken], Any]


KeyMaterial = SharedSecret | KeyHandle | KeyResolver


def load_pem_key(pem: str | bytes) -> AsymmetricKey:
    """Load a PEM private key, public key, or certificate's public key."""
    data = pem.encode() if isinstance(pem, str) else pem
    try:
        if b"-----BEGIN CERTIFICATE-----" in data:
            loaded = x509.load_pem_x509_certificate(data).public_key()
        elif b"PRIVATE KEY-----" in data:
            loaded = serialization.load_pem_private_key(data, password=None)
        else:
            loaded = serialization.load_pem_public_key(data)
    except (ValueError, TypeError) as exc:
        raise KeyMismatchError("Unable to load PEM key material") from exc
    if not isinstance(loaded, _PRIVATE_TYPES + _PUBLIC_TYPES):
        raise KeyMismatchError(f"Unsupported key type {type(loaded).__name__}")
    return loaded


def jwk_to_key_material(jwk: Mapping[str, Any]) -> SharedSecret | KeyHandle:
    """Convert a JSON Web Key (oct, RSA or EC) into key material."""
    kty = jwk.get("kty")
    try:
        if kty == "oct":
            secret = decode_url(jwk.get("k", ""))
            if not secret:
                raise KeyNotSuppliedError("JWK has an empty 'k' value")
            return SharedSecret(secret)
        if kty == "RSA":
            return KeyHandle(RSAAlgorithm.from_jwk(dict(jwk)))
        if kty == "EC":
            return KeyHandle(ECAlgorithm.from_jwk(dict(jwk)))
    except (InvalidKeyError, TokenFormatError, ValueError) as exc:
        raise KeyNotSuppliedError(f"Unusable {kty} JWK") from exc
    raise KeyNotSuppliedError(f"Unsupported JWK key type {kty!r}")


def to_key_material(value: Any) -> KeyMaterial:
    """Coerce a caller-supplied key into the KeyMaterial sum type."""
    if isinstance(value, SharedSecret | KeyHandle | KeyResolver):
        return value
    if value is None or (isinstance(value, str | bytes | bytearray) and not value):
        raise KeyNotSuppliedError("Public key, private key or secret not supplied")
    if isinstance(value, str | bytes | bytearray):
        data = value.encode() if isinstance(value, str) else bytes(value)
        if data.lstrip().startswith(b"-----BEGIN "):
            return KeyHandle(load_pem_key(data))
        return SharedSecret(data)
    if isinstance(value, x509.Certificate):
        return to_key_material(value.public_key())
    if isinstance(value, _PRIVATE_TYPES + _PUBLIC_TYPES):
        return KeyHandle(value)
    if isinstance(value, Mapping):
        return jwk_to_key_material(value)
    if callable(value):
        return KeyResolver(value)
    raise KeyMismatchError(f"Unsupported key material type {type(value).__name__}")


def _key_for_family(
    spec: AlgorithmSpec, material: SharedSecret | KeyHandle, private: bool
) -> bytes | AsymmetricKey:
    if spec.family is AlgorithmFamily.HMAC:
        if not isinstance(material, SharedSecret):
            raise KeyMismatchError(f"{spec.name} requires a shared secret")
        return material.value
    if not isinstance(material, KeyHandle):
        raise KeyMismatchError(f"{spec.name} requires an asymmetric key, not a shared secret")

    key = material.key
    if private and not material.is_private:
        raise KeyMismatchError(f"{spec.name} signing requires a private key")
    if not private and material.is_private:
        key = key.public_key()

    if spec.family is AlgorithmFamily.ECDSA:
        if not isinstance(key, ec.EllipticCurvePrivateKey | ec.EllipticCurvePublicKey):
            raise KeyMismatchError(f"{spec.name} requires an EC key")
        if key.curve.name != spec.curve:
            raise KeyMismatchError(f"{spec.name} requires curve {spec.curve}, got {key.curve.name}")
    elif not isinstance(key, rsa.RSAPrivateKey | rsa.RSAPublicKey):
        raise KeyMismatchError(f"{spec.name} requires an RSA key")
    return key


def signing_key_for(spec: AlgorithmSpec, value: Any) -> bytes | AsymmetricKey:
    """Resolve and type-check signing key material for an algorithm."""
    material = to_key_material(value)
    if isinstance(material, KeyResolver):
        raise KeyMismatchError("Signing requires a secret or private key, not a resolver")
    return _key_for_family(spec, material, private=True)


def verification_key_for(
    spec: AlgorithmSpec, value: Any, decoded: DecodedToken
) -> bytes | AsymmetricKey:
    """Resolve and type-check verification key material for a decoded token."""
    material = to_key_material(value)
    if isinstance(material, KeyResolver):
        resolved = material.resolve(decoded)
        if resolved is None:
            raise KeyNotSuppliedError("Key resolver returned no key material")
        material = to_key_material(resolved)
        if isinstance(material, KeyResolver):
            raise KeyMismatchError("Key resolver must return key material, not another resolver")
    return _key_for_family(spec, material, private=False)
