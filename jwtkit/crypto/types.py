"""Type definitions for decoded tokens and sign/verify options."""

from collections.abc import Iterable
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from jwtkit.core.settings import EngineSettings
from jwtkit.crypto.algorithms import SUPPORTED_ALGORITHMS


class DecodedToken(BaseModel):
    """Parsed JWT parts; the signature is raw bytes, not yet verified."""

    model_config = ConfigDict(frozen=True)

    header: dict[str, Any]
    payload: dict[str, Any]
    signature: bytes


class SignOptions(BaseModel):
    """Options for creating a signed token."""

    model_config = ConfigDict(frozen=True)

    algorithm: str
    key: Any = None
    kid: str | None = None


class VerifyOptions(BaseModel):
    """Options for verifying a token.

    ``key`` is a shared secret, a public key / certificate / PEM text, a JWK
    mapping, or a callable receiving the DecodedToken and returning any of
    those.
    """

    model_config = ConfigDict(frozen=True)

    key: Any = None
    allowed_algorithms: frozenset[str] | None = None
    audience: str | frozenset[str] | None = None
    issuer: str | None = None
    ignore_expiration: bool = False
    require_expiration: bool = False
    clock_tolerance: float = Field(default=0, ge=0, allow_inf_nan=False)

    @field_validator("allowed_algorithms", mode="before")
    @classmethod
    def _normalize_algorithms(cls, value: Any) -> Any:
        if value is None:
            return None
        if isinstance(value, str):
            value = [value]
        elif not isinstance(value, Iterable):
            raise ValueError("allowed_algorithms must be a string or a collection")
        try:
            algorithms = frozenset(value)
        except TypeError as exc:
            raise ValueError("allowed_algorithms must contain algorithm names") from exc
        if not algorithms:
            raise ValueError("allowed_algorithms must not be empty")
        unknown = sorted(str(a) for a in algorithms - SUPPORTED_ALGORITHMS)
        if unknown:
            raise ValueError(f"Unsupported algorithms in allowlist: {unknown}")
        return algorithms

    @classmethod
    def from_settings(cls, settings: EngineSettings, **overrides: Any) -> "VerifyOptions":
        """Build options from process settings; keyword overrides win."""
        values: dict[str, Any] = {
            "clock_tolerance": settings.clock_tolerance,
            "require_expiration": settings.require_expiration,
        }
        allowed = settings.get_allowed_algorithm_list()
        if allowed:
            values["allowed_algorithms"] = allowed
        if settings.issuer:
            values["issuer"] = settings.issuer
        if settings.audience:
            values["audience"] = settings.audience
        values.update(overrides)
        return cls(**values)
