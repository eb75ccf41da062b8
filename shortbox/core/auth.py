"""
Admin Authentication

Single shared-secret bearer token, compared in constant time.

Security:
- Neither the presented token nor the configured secret is ever logged
- A missing or short configured secret disables admin access entirely
- Failures are plain booleans, never a descriptive reason
"""

from typing import Mapping, Optional

MIN_SECRET_LENGTH = 16

BEARER_PREFIX = "Bearer "


def constant_time_equals(presented: str, reference: str) -> bool:
    """
    Compare two secrets without leaking the position of the first mismatch.

    The loop always runs over the whole presented value and never exits
    early. On a length mismatch it still runs, reading the reference
    cyclically, and then reports inequality.

    Args:
        presented: Token supplied by the client
        reference: Configured secret

    Returns:
        True only if both strings are identical
    """
    presented_bytes = presented.encode("utf-8", "surrogatepass")
    reference_bytes = reference.encode("utf-8", "surrogatepass")
    reference_length = len(reference_bytes)

    if len(presented_bytes) != reference_length:
        diff = 0
        for index, byte in enumerate(presented_bytes):
            other = reference_bytes[index % reference_length] if reference_length else 0
            diff |= byte ^ other
        return False

    diff = 0
    for left, right in zip(presented_bytes, reference_bytes):
        diff |= left ^ right
    return diff == 0


def extract_bearer_token(authorization: Optional[str]) -> Optional[str]:
    """Return the token from an "Authorization: Bearer <token>" value, if any."""
    value = (authorization or "").strip()
    if not value.startswith(BEARER_PREFIX):
        return None
    return value[len(BEARER_PREFIX):]


def check_bearer_auth(headers: Mapping[str, str], configured_secret: Optional[str]) -> bool:
    """
    Check a request's bearer token against the configured admin secret.

    Args:
        headers: Request headers (a case-insensitive mapping such as
            starlette's Headers, or a plain dict)
        configured_secret: Secret from settings; None when unset

    Returns:
        True if the request is authorized
    """
    if not configured_secret or len(configured_secret) < MIN_SECRET_LENGTH:
        return False

    authorization = headers.get("Authorization")
    if authorization is None:
        authorization = headers.get("authorization")

    token = extract_bearer_token(authorization)
    if token is None:
        return False

    return constant_time_equals(token, configured_secret)
