"""Registered claim checks: exp, nbf, iat, aud, iss."""

import logging
import math
import re
from collections.abc import Mapping
from datetime import UTC, datetime
from typing import Any

from jwtkit.crypto.types import VerifyOptions

logger = logging.getLogger(__name__)

_DIGITS = re.compile(r"[0-9]+")


def current_timestamp() -> int:
    """Current time in whole seconds since the epoch."""
    return int(datetime.now(UTC).timestamp())


def parse_numeric_date(value: Any) -> int | float | None:
    """Parse a NumericDate claim; None when the value is not one."""
    if isinstance(value, bool):
        return None
    if isinstance(value, float):
        return value if math.isfinite(value) else None
    if isinstance(value, str) and _DIGITS.fullmatch(value):
        try:
            value = int(value)
        except ValueError:
            return None
    if isinstance(value, int):
        try:
            float(value)
        except OverflowError:
            # Out of range for comparison against a float tolerance.
            return None
        return value
    return None


def _check_expiration(payload: Mapping[str, Any], options: VerifyOptions, now: int) -> bool:
    if options.ignore_expiration:
        return True
    if payload.get("exp") is None:
        if options.require_expiration:
            logger.debug("Token rejected: missing exp claim")
            return False
        return True
    exp = parse_numeric_date(payload["exp"])
    if exp is None:
        logger.debug("Token rejected: malformed exp claim")
        return False
    if now >= exp + options.clock_tolerance:
        logger.debug("Token rejected: expired")
        return False
    return True


def _check_not_before(payload: Mapping[str, Any], options: VerifyOptions, now: int) -> bool:
    if payload.get("nbf") is None:
        return True
    nbf = parse_numeric_date(payload["nbf"])
    if nbf is None:
        logger.debug("Token rejected: malformed nbf claim")
        return False
    if now + options.clock_tolerance < nbf:
        logger.debug("Token rejected: not yet valid")
        return False
    return True


def _check_issued_at(payload: Mapping[str, Any], options: VerifyOptions, now: int) -> bool:
    if payload.get("iat") is None:
        return True
    iat = parse_numeric_date(payload["iat"])
    if iat is None:
        logger.debug("Token rejected: malformed iat claim")
        return False
    if iat - options.clock_tolerance > now:
        logger.debug("Token rejected: issued in the future")
        return False
    return True


def _check_audience(payload: Mapping[str, Any], options: VerifyOptions) -> bool:
    if options.audience is None:
        return True
    expected = {options.audience} if isinstance(options.audience, str) else options.audience
    aud = payload.get("aud")
    if isinstance(aud, str):
        actual = {aud}
    elif isinstance(aud, list):
        actual = {a for a in aud if isinstance(a, str)}
    else:
        actual = set()
    if actual.isdisjoint(expected):
        logger.debug("Token rejected: audience mismatch")
        return False
    return True


def _check_issuer(payload: Mapping[str, Any], options: VerifyOptions) -> bool:
    if options.issuer is None:
        return True
    if payload.get("iss") != options.issuer:
        logger.debug("Token rejected: issuer mismatch")
        return False
    return True


def validate_claims(
    payload: Mapping[str, Any], options: VerifyOptions, now: int | None = None
) -> bool:
    """Return True when every configured claim check passes."""
    if now is None:
        now = current_timestamp()
    return (
        _check_expiration(payload, options, now)
        and _check_not_before(payload, options, now)
        and _check_issued_at(payload, options, now)
        and _check_audience(payload, options)
        and _check_issuer(payload, options)
    )
