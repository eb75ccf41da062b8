"""Tests for control/zero-width stripping and NFKC normalization."""

import pytest

from shortbox.core.sanitize import normalize_text, strip_control_chars


class TestStripControlChars:
    """strip_control_chars removes invisible characters and nothing else."""

    @pytest.mark.parametrize("char", [
        "\x00", "\x07", "\x1f", "\x7f", "\t", "\n", "\r",
        "\u200b", "\u200c", "\u200d", "\u2060", "\ufeff",
        "\u202a", "\u202b", "\u202c", "\u202d", "\u202e",
        "\u2066", "\u2069",
    ])
    def test_removes_invisible_character(self, char):
        assert strip_control_chars(f"ab{char}cd") == "abcd"

    def test_leaves_visible_text_alone(self):
        text = "Hello, W\u00f6rld! \uff21 \u00e9 https://example.com/?q=1"
        assert strip_control_chars(text) == text

    def test_is_idempotent(self):
        text = "\u202eevil\u200b\x00 link\ufeff"
        once = strip_control_chars(text)
        assert strip_control_chars(once) == once
        assert once == "evil link"

    def test_does_not_trim_or_normalize(self):
        assert strip_control_chars("  \uff41  ") == "  \uff41  "


class TestNormalizeText:
    def test_collapses_fullwidth_characters(self):
        assert normalize_text("\uff48\uff54\uff54\uff50\uff53") == "https"

    def test_collapses_compatibility_ligatures(self):
        assert normalize_text("\ufb01le") == "file"
