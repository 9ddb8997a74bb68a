"""
Unit tests for text_normalization module.

Covers the bullet, tokenizing, detection and repair helpers with realistic
resume extraction artifacts.
"""

import pytest

from app.core.text_normalization import (
    despace_if_needed,
    detect_location,
    detect_url,
    is_bullet_line,
    normalize_bullets,
    repair_hyphenation,
    split_highlights,
    title_case,
    tokenize,
)


class TestBullets:

    @pytest.mark.parametrize("line", ["• Built X", "- Built X", "* Built X", "1. Built X", "● Built X"])
    def test_bullet_lines(self, line):
        assert is_bullet_line(line)

    @pytest.mark.parametrize("line", ["Built X", "Jan 2020 - Present", ""])
    def test_non_bullet_lines(self, line):
        assert not is_bullet_line(line)

    def test_normalize_bullet_glyphs(self):
        assert normalize_bullets("● one ∙ two") == "• one • two"

    def test_split_highlights_multiple_per_line(self):
        assert split_highlights(["• Built X • Built Y", "- Shipped Z"]) == ["Built X", "Built Y", "Shipped Z"]

    def test_split_highlights_skips_empty(self):
        assert split_highlights(["•", ""]) == []


class TestTokenize:

    def test_mixed_delimiters(self):
        assert tokenize("Python; Go • Rust, SQL") == ["Python", "Go", "Rust", "SQL"]

    def test_drops_empty_tokens(self):
        assert tokenize("a,, b ,") == ["a", "b"]


class TestDetection:

    def test_location_with_zip(self):
        assert detect_location("123 Main St, Austin, TX 78701") == "Austin, TX 78701"

    def test_location_missing(self):
        assert detect_location("Remote friendly") is None
        assert detect_location(None) is None

    def test_url(self):
        assert detect_url("Portfolio (https://janedoe.dev/work) online") == "https://janedoe.dev/work"

    def test_no_url(self):
        assert detect_url("janedoe.dev") is None


class TestRepair:

    @pytest.mark.parametrize("text,expected", [
        ("manage-\nment", "management"),
        ("full -stack", "full-stack"),
        ("self- taught", "self-taught"),
        ("2019 - 2020", "2019 - 2020"),
    ])
    def test_repair_hyphenation(self, text, expected):
        assert repair_hyphenation(text) == expected

    def test_despace_single_word(self):
        assert despace_if_needed("E X P E R I E N C E") == "EXPERIENCE"

    def test_despace_keeps_word_boundary(self):
        assert despace_if_needed("J O H N   D O E") == "JOHN DOE"

    def test_despace_leaves_normal_text(self):
        assert despace_if_needed("Work Experience") == "Work Experience"

    def test_title_case(self):
        assert title_case("WORK EXPERIENCE") == "Work Experience"
