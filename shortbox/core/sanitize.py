"""
Text Sanitizer

Strips invisible and control code points from untrusted strings before any
length or format check runs.

Callers sanitize, then trim, then NFKC-normalize, in that order:
normalization can change both length and case, so it must see the
already-cleaned text.
"""

import re
import unicodedata

# C0 controls and DEL, zero-width space/non-joiner/joiner, word joiner,
# BOM, bidi embeddings/overrides (LRE..RLO) and bidi isolates (LRI..PDI).
_INVISIBLE_CHARS = re.compile(
    "[\u0000-\u001f\u007f\u200b-\u200d\u2060\u202a-\u202e\u2066-\u2069\ufeff]"
)


def strip_control_chars(text: str) -> str:
    """
    Remove control, zero-width and direction-override characters.

    No other transformation is applied, so the function is idempotent.

    Args:
        text: Untrusted input

    Returns:
        The input with the offending code points removed
    """
    return _INVISIBLE_CHARS.sub("", text)


def normalize_text(text: str) -> str:
    """Apply NFKC so visually confusable characters collapse to one form."""
    return unicodedata.normalize("NFKC", text)
