"""
Tests for the scam pattern catalog.
"""

import re
import pytest

from mindshield.core.patterns import (
    SCAM_PATTERNS, ScamPattern, PatternCatalogError, catalog_categories,
    GOVERNMENT_IMPERSONATION, TECH_SUPPORT, THREATS_INTIMIDATION
)


class TestScamPatternCatalog:
    """Test cases for the built-in catalog."""

    def test_catalog_is_immutable_table(self):
        assert isinstance(SCAM_PATTERNS, tuple)
        with pytest.raises(Exception):
            SCAM_PATTERNS[0].weight = 99

    def test_every_entry_is_well_formed(self):
        for entry in SCAM_PATTERNS:
            assert entry.matcher.pattern
            assert entry.category
            assert isinstance(entry.weight, int) and entry.weight > 0
            assert entry.matcher.flags & re.IGNORECASE

    def test_categories(self):
        assert catalog_categories() == (
            "Government Impersonation",
            "Financial Fraud",
            "Urgency/Pressure",
            "Threats/Intimidation",
            "Identity Theft",
            "Prize/Lottery Scam",
            "Tech Support Scam",
        )

    def test_weights_range(self):
        weights = [entry.weight for entry in SCAM_PATTERNS]
        assert min(weights) == 8
        assert max(weights) == 20

    def test_patterns_are_word_bounded(self):
        irs = next(p for p in SCAM_PATTERNS if p.matcher.pattern == r"\bIRS\b")
        assert irs.matcher.search("the irs called")
        assert irs.matcher.search("FIRST") is None

    def test_arrest_matches_inflections(self):
        arrest = next(
            p for p in SCAM_PATTERNS
            if p.category == THREATS_INTIMIDATION and p.matcher.pattern.startswith(r"\barrest")
        )
        for text in ("arrest", "arrested", "arresting", "ARRESTED"):
            assert arrest.matcher.search(f"you will be {text}"), text
        assert arrest.matcher.search("arrestor") is None

    def test_apostrophe_is_optional(self):
        hang_up = next(p for p in SCAM_PATTERNS if "hang" in p.matcher.pattern)
        assert hang_up.matcher.search("Don't hang up")
        assert hang_up.matcher.search("dont hang up")

    def test_high_specificity_phrases_have_top_weights(self):
        by_pattern = {p.matcher.pattern: p for p in SCAM_PATTERNS}
        assert by_pattern[r"\barrest\s+warrant\b"].weight == 20
        assert by_pattern[r"\barrest\s+warrant\b"].category == GOVERNMENT_IMPERSONATION
        assert by_pattern[r"\bcomputer\s+has\s+a\s+virus\b"].weight == 20
        assert by_pattern[r"\bcomputer\s+has\s+a\s+virus\b"].category == TECH_SUPPORT


class TestScamPatternValidation:
    """Test cases for entry validation."""

    def test_rejects_non_positive_weight(self):
        with pytest.raises(PatternCatalogError):
            ScamPattern(re.compile("scam"), "Category", 0)

    def test_rejects_empty_category(self):
        with pytest.raises(PatternCatalogError):
            ScamPattern(re.compile("scam"), "", 5)

    def test_rejects_empty_pattern(self):
        with pytest.raises(PatternCatalogError):
            ScamPattern(re.compile(""), "Category", 5)
