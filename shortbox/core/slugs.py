"""
Slug Policy

Two validators with deliberately different strictness:

- validate_assigned_slug: for slugs being created (user-chosen or
  generated). Strict charset, 2-32 chars, reserved words and the "api"
  route prefix refused.
- validate_lookup_slug: for slugs arriving in read/delete requests. Looser
  charset and length and no reserved-word check, so any key that could ever
  have been stored stays reachable.

Both refuse ".." so a slug can never be mistaken for a path.
"""

import re

from shortbox.core.results import ErrorKind, ValidationResult
from shortbox.core.sanitize import normalize_text, strip_control_chars

# Route names, framework files, auth-flow words and dotfiles
RESERVED_SLUGS = frozenset({
    "api", "admin", "assets", "static", "public", "cdn",
    "_headers", "_redirects", "_routes", "favicon", "robots",
    "sitemap", "index", "health", "ping", "status",
    "login", "logout", "signup", "register", "dashboard",
    "wp-admin", "wp-login", ".env", ".git",
})

# The redirect route never treats a path under this prefix as a short code
ROUTE_PREFIX = "api"

ASSIGNED_MIN_LENGTH = 2
ASSIGNED_MAX_LENGTH = 32
LOOKUP_MIN_LENGTH = 1
LOOKUP_MAX_LENGTH = 64

ASSIGNED_SLUG_PATTERN = re.compile(r"^[a-z0-9][a-z0-9_-]{1,31}$")
LOOKUP_SLUG_PATTERN = re.compile(r"^[a-z0-9_-]+$")


def validate_assigned_slug(raw: object, field_name: str = "customSlug") -> ValidationResult[str]:
    """
    Validate a slug that is about to be written to the store.

    Args:
        raw: Untrusted value
        field_name: Payload field name used in error messages

    Returns:
        Success carrying the normalized (lowercase, NFKC) slug, or a failure
    """
    if not isinstance(raw, str):
        return ValidationResult.failure(f"{field_name} must be a string.", ErrorKind.TYPE)

    slug = normalize_text(strip_control_chars(raw).strip().lower())

    if len(slug) < ASSIGNED_MIN_LENGTH:
        return ValidationResult.failure(
            f"{field_name} must be at least {ASSIGNED_MIN_LENGTH} characters.", ErrorKind.FORMAT
        )

    if len(slug) > ASSIGNED_MAX_LENGTH:
        return ValidationResult.failure(
            f"{field_name} must be {ASSIGNED_MAX_LENGTH} characters or fewer.", ErrorKind.FORMAT
        )

    if not ASSIGNED_SLUG_PATTERN.match(slug):
        return ValidationResult.failure(
            f"{field_name} may only contain a-z, 0-9, hyphens, and underscores, "
            "and must start with a letter or number.",
            ErrorKind.FORMAT,
        )

    if slug in RESERVED_SLUGS:
        return ValidationResult.failure(
            f'The slug "{slug}" is reserved and cannot be used.', ErrorKind.POLICY
        )

    if slug.startswith(ROUTE_PREFIX):
        return ValidationResult.failure(
            f'{field_name} must not start with "{ROUTE_PREFIX}".', ErrorKind.POLICY
        )

    if ".." in slug or "/" in slug or "\\" in slug:
        return ValidationResult.failure(
            f"{field_name} must not contain path separators.", ErrorKind.POLICY
        )

    return ValidationResult.success(slug)


def validate_lookup_slug(raw: object) -> ValidationResult[str]:
    """Validate a slug used to read or delete an existing record."""
    if not isinstance(raw, str):
        return ValidationResult.failure("slug must be a string.", ErrorKind.TYPE)

    slug = strip_control_chars(raw).strip().lower()

    if not LOOKUP_MIN_LENGTH <= len(slug) <= LOOKUP_MAX_LENGTH:
        return ValidationResult.failure(
            f"slug must be between {LOOKUP_MIN_LENGTH} and {LOOKUP_MAX_LENGTH} characters.",
            ErrorKind.FORMAT,
        )

    if not LOOKUP_SLUG_PATTERN.match(slug):
        return ValidationResult.failure("slug contains invalid characters.", ErrorKind.FORMAT)

    if ".." in slug:
        return ValidationResult.failure(
            "slug must not contain path traversal sequences.", ErrorKind.POLICY
        )

    return ValidationResult.success(slug)
