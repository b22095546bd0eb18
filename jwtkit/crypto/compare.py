"""Constant-time equality for signature comparison."""

import secrets


def _as_bytes(value: str | bytes) -> bytes:
    return value.encode("utf-8") if isinstance(value, str) else bytes(value)


def constant_time_equals(expected: str | bytes, actual: str | bytes) -> bool:
    """Compare two values without short-circuiting on the first difference.

    The whole of ``actual`` is scanned even when the lengths differ; a
    length mismatch only changes the final result.
    """
    return secrets.compare_digest(_as_bytes(expected), _as_bytes(actual))
