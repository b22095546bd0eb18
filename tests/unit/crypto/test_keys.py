"""Tests for key material coercion, PEM and JWK loading."""

from datetime import UTC, datetime, timedelta

import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec, ed25519, rsa
from cryptography.x509.oid import NameOID
from jwt.algorithms import ECAlgorithm, RSAAlgorithm

from jwtkit.core.errors import KeyMismatchError, KeyNotSuppliedError
from jwtkit.crypto.algorithms import get_algorithm
from jwtkit.crypto.keys import (
    KeyHandle,
    KeyResolver,
    SharedSecret,
    jwk_to_key_material,
    load_pem_key,
    signing_key_for,
    to_key_material,
    verification_key_for,
)
from jwtkit.crypto.types import DecodedToken


def _private_pem(key: rsa.RSAPrivateKey) -> str:
    return key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    ).decode()


def _public_pem(key: rsa.RSAPrivateKey) -> str:
    return (
        key.public_key()
        .public_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PublicFormat.SubjectPublicKeyInfo,
        )
        .decode()
    )


def _certificate(key: rsa.RSAPrivateKey) -> x509.Certificate:
    name = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, "jwtkit-test")])
    now = datetime.now(UTC)
    return (
        x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(name)
        .public_key(key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(now)
        .not_valid_after(now + timedelta(days=1))
        .sign(key, hashes.SHA256())
    )


def _decoded(**header: str) -> DecodedToken:
    return DecodedToken(header={"alg": "RS256", **header}, payload={}, signature=b"")


class TestToKeyMaterial:
    """Tests for coercing caller input into key material."""

    def test_string_is_shared_secret(self) -> None:
        assert to_key_material("secret") == SharedSecret(b"secret")

    def test_bytes_is_shared_secret(self) -> None:
        assert to_key_material(b"\x00\x01") == SharedSecret(b"\x00\x01")

    def test_private_pem_loads_private_key(self, rsa_private_key: rsa.RSAPrivateKey) -> None:
        material = to_key_material(_private_pem(rsa_private_key))
        assert isinstance(material, KeyHandle)
        assert material.is_private

    def test_public_pem_loads_public_key(self, rsa_private_key: rsa.RSAPrivateKey) -> None:
        material = to_key_material(_public_pem(rsa_private_key))
        assert isinstance(material, KeyHandle)
        assert not material.is_private
        assert material.key.public_numbers() == rsa_private_key.public_key().public_numbers()

    def test_certificate_object_uses_public_key(self, rsa_private_key: rsa.RSAPrivateKey) -> None:
        material = to_key_material(_certificate(rsa_private_key))
        assert isinstance(material, KeyHandle)
        assert isinstance(material.key, rsa.RSAPublicKey)

    def test_certificate_pem_uses_public_key(self, rsa_private_key: rsa.RSAPrivateKey) -> None:
        pem = _certificate(rsa_private_key).public_bytes(serialization.Encoding.PEM)
        assert isinstance(load_pem_key(pem), rsa.RSAPublicKey)

    def test_key_object_is_handle(
        self, ec_private_keys: dict[str, ec.EllipticCurvePrivateKey]
    ) -> None:
        key = ec_private_keys["ES256"]
        assert to_key_material(key) == KeyHandle(key)

    def test_callable_is_resolver(self) -> None:
        def resolver(_decoded: DecodedToken) -> str:
            return "secret"

        assert to_key_material(resolver) == KeyResolver(resolver)

    def test_existing_material_passes_through(self) -> None:
        secret = SharedSecret(b"s")
        assert to_key_material(secret) is secret

    @pytest.mark.parametrize("value", [None, "", b""])
    def test_missing_key_rejected(self, value: object) -> None:
        with pytest.raises(KeyNotSuppliedError):
            to_key_material(value)

    def test_unsupported_type_rejected(self) -> None:
        with pytest.raises(KeyMismatchError):
            to_key_material(12345)

    def test_broken_pem_rejected(self) -> None:
        with pytest.raises(KeyMismatchError):
            to_key_material("-----BEGIN PUBLIC KEY-----\nnot-a-key\n-----END PUBLIC KEY-----")

    def test_unsupported_key_type_rejected(self) -> None:
        with pytest.raises(KeyMismatchError):
            to_key_material(ed25519.Ed25519PrivateKey.generate())


class TestJWK:
    """Tests for JSON Web Key conversion."""

    def test_oct_key(self) -> None:
        assert jwk_to_key_material({"kty": "oct", "k": "c2VjcmV0"}) == SharedSecret(b"secret")

    def test_rsa_key(self, rsa_private_key: rsa.RSAPrivateKey) -> None:
        jwk = RSAAlgorithm.to_jwk(rsa_private_key.public_key(), as_dict=True)
        material = jwk_to_key_material(jwk)
        assert isinstance(material, KeyHandle)
        assert material.key.public_numbers() == rsa_private_key.public_key().public_numbers()

    def test_ec_key(self, ec_private_keys: dict[str, ec.EllipticCurvePrivateKey]) -> None:
        public_key = ec_private_keys["ES384"].public_key()
        material = jwk_to_key_material(ECAlgorithm.to_jwk(public_key, as_dict=True))
        assert isinstance(material, KeyHandle)
        assert material.key.public_numbers() == public_key.public_numbers()

    @pytest.mark.parametrize(
        "jwk",
        [
            {"kty": "RSA", "n": "AQID"},
            {"kty": "EC", "crv": "P-256", "x": "AQ"},
            {"kty": "oct", "k": ""},
            {"kty": "oct", "k": "!!"},
            {"kty": "OKP", "crv": "Ed25519", "x": "AQ"},
            {},
        ],
    )
    def test_unusable_jwk_rejected(self, jwk: dict[str, str]) -> None:
        with pytest.raises(KeyNotSuppliedError):
            jwk_to_key_material(jwk)

    def test_mapping_input_is_converted(self) -> None:
        assert to_key_material({"kty": "oct", "k": "c2VjcmV0"}) == SharedSecret(b"secret")


class TestSigningKeyFor:
    """Tests for matching signing keys to algorithm families."""

    def test_hmac_returns_secret_bytes(self) -> None:
        assert signing_key_for(get_algorithm("HS256"), "secret") == b"secret"

    def test_hmac_rejects_asymmetric_key(self, rsa_private_key: rsa.RSAPrivateKey) -> None:
        with pytest.raises(KeyMismatchError):
            signing_key_for(get_algorithm("HS256"), rsa_private_key)

    def test_hmac_rejects_public_key_pem(self, rsa_private_key: rsa.RSAPrivateKey) -> None:
        with pytest.raises(KeyMismatchError):
            signing_key_for(get_algorithm("HS256"), _public_pem(rsa_private_key))

    def test_rsa_rejects_secret(self) -> None:
        with pytest.raises(KeyMismatchError):
            signing_key_for(get_algorithm("RS256"), "secret")

    def test_rsa_rejects_public_key(self, rsa_private_key: rsa.RSAPrivateKey) -> None:
        with pytest.raises(KeyMismatchError):
            signing_key_for(get_algorithm("RS256"), rsa_private_key.public_key())

    def test_rsa_rejects_ec_key(
        self, ec_private_keys: dict[str, ec.EllipticCurvePrivateKey]
    ) -> None:
        with pytest.raises(KeyMismatchError):
            signing_key_for(get_algorithm("PS256"), ec_private_keys["ES256"])

    def test_ecdsa_rejects_wrong_curve(
        self, ec_private_keys: dict[str, ec.EllipticCurvePrivateKey]
    ) -> None:
        with pytest.raises(KeyMismatchError):
            signing_key_for(get_algorithm("ES256"), ec_private_keys["ES384"])

    def test_ecdsa_rejects_rsa_key(self, rsa_private_key: rsa.RSAPrivateKey) -> None:
        with pytest.raises(KeyMismatchError):
            signing_key_for(get_algorithm("ES512"), rsa_private_key)

    def test_resolver_rejected(self) -> None:
        with pytest.raises(KeyMismatchError):
            signing_key_for(get_algorithm("HS256"), lambda _decoded: "secret")

    def test_private_pem_accepted(self, rsa_private_key: rsa.RSAPrivateKey) -> None:
        key = signing_key_for(get_algorithm("RS256"), _private_pem(rsa_private_key))
        assert isinstance(key, rsa.RSAPrivateKey)


class TestVerificationKeyFor:
    """Tests for resolving verification keys."""

    def test_private_key_yields_public_key(self, rsa_private_key: rsa.RSAPrivateKey) -> None:
        key = verification_key_for(get_algorithm("RS256"), rsa_private_key, _decoded())
        assert isinstance(key, rsa.RSAPublicKey)

    def test_resolver_receives_decoded_token(self, rsa_private_key: rsa.RSAPrivateKey) -> None:
        keys = {"key-1": rsa_private_key.public_key()}

        def resolver(decoded: DecodedToken) -> rsa.RSAPublicKey | None:
            return keys.get(decoded.header.get("kid", ""))

        key = verification_key_for(get_algorithm("RS256"), resolver, _decoded(kid="key-1"))
        assert key is keys["key-1"]

    def test_resolver_returning_nothing(self) -> None:
        with pytest.raises(KeyNotSuppliedError):
            verification_key_for(get_algorithm("RS256"), lambda _decoded: None, _decoded())

    def test_resolver_returning_resolver(self) -> None:
        with pytest.raises(KeyMismatchError):
            verification_key_for(
                get_algorithm("HS256"), lambda _d: (lambda _e: "secret"), _decoded()
            )

    def test_resolver_returning_jwk(self, rsa_private_key: rsa.RSAPrivateKey) -> None:
        jwk = RSAAlgorithm.to_jwk(rsa_private_key.public_key(), as_dict=True)
        key = verification_key_for(get_algorithm("RS256"), lambda _decoded: jwk, _decoded())
        assert isinstance(key, rsa.RSAPublicKey)

    def test_missing_key(self) -> None:
        with pytest.raises(KeyNotSuppliedError):
            verification_key_for(get_algorithm("HS256"), None, _decoded())
