"""Signature provider: the primitive HMAC, RSA and ECDSA operations."""

from typing import Protocol

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives import hmac as crypto_hmac
from cryptography.hazmat.primitives.asymmetric import ec, padding, rsa
from cryptography.hazmat.primitives.asymmetric.types import (
    PrivateKeyTypes,
    PublicKeyTypes,
)

from jwtkit.core.errors import KeyMismatchError
from jwtkit.crypto.algorithms import AlgorithmFamily, AlgorithmSpec

_HASHES: dict[str, type[hashes.HashAlgorithm]] = {
    "SHA256": hashes.SHA256,
    "SHA384": hashes.SHA384,
    "SHA512": hashes.SHA512,
}


class SignatureProvider(Protocol):
    """Primitive operations the signer and verifier delegate to."""

    def digest(self, secret: bytes, data: bytes, spec: AlgorithmSpec) -> bytes:
        """Return the HMAC of ``data`` under ``secret``."""
        ...

    def sign(self, private_key: PrivateKeyTypes, data: bytes, spec: AlgorithmSpec) -> bytes:
        """Sign ``data``; ECDSA signatures are returned DER-encoded."""
        ...

    def verify(
        self,
        public_key: PublicKeyTypes,
        signature: bytes,
        data: bytes,
        spec: AlgorithmSpec,
    ) -> bool:
        """Check a signature; ECDSA signatures are expected DER-encoded."""
        ...


def _hash_for(spec: AlgorithmSpec) -> hashes.HashAlgorithm:
    return _HASHES[spec.digest]()


def _rsa_padding(spec: AlgorithmSpec, hash_alg: hashes.HashAlgorithm) -> padding.AsymmetricPadding:
    if spec.family is AlgorithmFamily.RSA_PSS:
        return padding.PSS(
            mgf=padding.MGF1(hash_alg),
            salt_length=hash_alg.digest_size,
        )
    return padding.PKCS1v15()


class CryptographySignatureProvider:
    """SignatureProvider backed by the ``cryptography`` library."""

    def digest(self, secret: bytes, data: bytes, spec: AlgorithmSpec) -> bytes:
        """Compute an HMAC with the algorithm's hash."""
        mac = crypto_hmac.HMAC(secret, _hash_for(spec))
        mac.update(data)
        return mac.finalize()

    def sign(self, private_key: PrivateKeyTypes, data: bytes, spec: AlgorithmSpec) -> bytes:
        """Sign with an RSA or EC private key."""
        hash_alg = _hash_for(spec)
        if spec.family is AlgorithmFamily.ECDSA:
            if not isinstance(private_key, ec.EllipticCurvePrivateKey):
                raise KeyMismatchError(f"{spec.name} requires an EC private key")
            return private_key.sign(data, ec.ECDSA(hash_alg))
        if spec.family in (AlgorithmFamily.RSA, AlgorithmFamily.RSA_PSS):
            if not isinstance(private_key, rsa.RSAPrivateKey):
                raise KeyMismatchError(f"{spec.name} requires an RSA private key")
            return private_key.sign(data, _rsa_padding(spec, hash_alg), hash_alg)
        raise KeyMismatchError(f"{spec.name} is not a public-key algorithm")

    def verify(
        self,
        public_key: PublicKeyTypes,
        signature: bytes,
        data: bytes,
        spec: AlgorithmSpec,
    ) -> bool:
        """Verify with an RSA or EC public key; False on any mismatch."""
        hash_alg = _hash_for(spec)
        try:
            if spec.family is AlgorithmFamily.ECDSA:
                if not isinstance(public_key, ec.EllipticCurvePublicKey):
                    raise KeyMismatchError(f"{spec.name} requires an EC public key")
                public_key.verify(signature, data, ec.ECDSA(hash_alg))
            elif spec.family in (AlgorithmFamily.RSA, AlgorithmFamily.RSA_PSS):
                if not isinstance(public_key, rsa.RSAPublicKey):
                    raise KeyMismatchError(f"{spec.name} requires an RSA public key")
                public_key.verify(signature, data, _rsa_padding(spec, hash_alg), hash_alg)
            else:
                raise KeyMismatchError(f"{spec.name} is not a public-key algorithm")
        except InvalidSignature:
            return False
        return True


DEFAULT_PROVIDER = CryptographySignatureProvider()
