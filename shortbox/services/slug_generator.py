"""
Slug Generator

Produces random short codes for links created without a custom slug.

Design Decisions:
- Alphabet [a-z0-9]: case-insensitive, URL-safe, readable
- secrets module: codes are not predictable from earlier ones
- Every candidate must pass the same strict policy as custom slugs, so a
  generated code can never shadow a route such as "ping"
- Collision-checked retries, growing the code by one after a few misses
"""

import logging
import secrets
import string

from shortbox.core.slugs import validate_assigned_slug
from shortbox.services.link_store import LinkStore

logger = logging.getLogger(__name__)

SLUG_ALPHABET = string.ascii_lowercase + string.digits

# Attempts made at the base length before growing by one character
ATTEMPTS_AT_BASE_LENGTH = 5


def generate_code(length: int) -> str:
    """Random code of the given length drawn from SLUG_ALPHABET."""
    return "".join(secrets.choice(SLUG_ALPHABET) for _ in range(length))


def generate_assignable_code(length: int) -> str:
    """Random code that the strict slug policy accepts."""
    while True:
        code = generate_code(length)
        if validate_assigned_slug(code).ok:
            return code


async def generate_unique_slug(
    store: LinkStore,
    length: int = 4,
    max_retries: int = 8,
) -> str:
    """
    Generate a slug that is not yet in the store.

    Args:
        store: Link store used for the collision check
        length: Base code length
        max_retries: Collision-checked attempts

    Returns:
        A free slug, or after max_retries misses an unchecked code two
        characters longer than the base length
    """
    for attempt in range(max_retries):
        size = length if attempt < ATTEMPTS_AT_BASE_LENGTH else length + 1
        slug = generate_assignable_code(size)
        if not await store.exists(slug):
            return slug

    logger.warning(f"No free {length}/{length + 1}-character slug after {max_retries} attempts")
    return generate_assignable_code(length + 2)
