"""Exception hierarchy for JWT signing, decoding, and verification."""


class JWTError(Exception):
    """Base class for all jwtkit errors."""


class InvalidPayloadError(JWTError):
    """The payload passed to sign is not a JSON-serializable mapping."""


class AlgorithmNotSupportedError(JWTError):
    """The algorithm identifier is not in the registry."""

    def __init__(self, algorithm: object) -> None:
        self.algorithm = algorithm
        super().__init__(f"JWT algorithm {algorithm!r} not supported")


class AlgorithmNotAllowedError(JWTError):
    """The token's algorithm is outside the caller's allowlist."""

    def __init__(self, algorithm: str) -> None:
        self.algorithm = algorithm
        super().__init__(f"JWT algorithm {algorithm!r} not allowed")


class KeyMismatchError(JWTError):
    """Key material does not fit the algorithm family."""


class KeyNotSuppliedError(JWTError):
    """No usable key material was supplied or resolved."""


class TokenFormatError(JWTError):
    """Malformed token, base64url segment, or JSON segment."""


class SignatureFormatError(JWTError):
    """An ECDSA signature could not be transcoded between DER and JOSE."""
