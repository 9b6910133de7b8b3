"""Tests for the normalization module.

This module tests raw field normalization, GPA classification and
school-name canonicalization.
"""

from __future__ import annotations

import pytest

from catalog_reconciler.normalization import (
    NA,
    assign_gpa,
    calculate_gpa,
    clean_description,
    coalesce,
    dedupe_school_names,
    find_canonical_name,
    merge_school_names,
    names_are_equivalent,
    normalize_na,
    normalize_school_name,
    parse_credits,
    parse_grades,
    resolve_source_school,
    school_name_to_slug,
    union_preserving_order,
)
from tests.conftest import make_course

# =============================================================================
# FIELD NORMALIZER TESTS
# =============================================================================


class TestNormalizeNA:
    """Tests for the "n/a" sentinel."""

    @pytest.mark.parametrize("value", [None, "", "   ", "N/A", "n/a", " n/A ", "-"])
    def test_unknown_values_collapse_to_sentinel(self, value: str | None) -> None:
        """Test that every spelling of "not available" becomes "n/a"."""
        assert normalize_na(value) == NA

    def test_meaningful_text_is_trimmed(self) -> None:
        """Test that real values are trimmed, not replaced."""
        assert normalize_na("  Algebra 1 ") == "Algebra 1"

    def test_coalesce_prefers_informative_value(self) -> None:
        """Test that coalesce falls back only for "n/a"."""
        assert coalesce("Math", "Science") == "Math"
        assert coalesce(NA, "Science") == "Science"
        assert coalesce("", "Science") == "Science"


class TestParseCredits:
    """Tests for credit parsing."""

    def test_parses_decimal(self) -> None:
        """Test plain decimal credit values."""
        assert parse_credits("0.5") == 0.5

    def test_parses_first_number_in_text(self) -> None:
        """Test credit values embedded in text."""
        assert parse_credits("1 credit") == 1.0
        assert parse_credits("Credits: 0.5 per semester") == 0.5

    def test_numbers_pass_through(self) -> None:
        """Test that numeric input is kept."""
        assert parse_credits(2) == 2.0
        assert parse_credits(0.5) == 0.5

    @pytest.mark.parametrize("value", [None, "", "n/a", "varies"])
    def test_no_number_is_zero(self, value: str | None) -> None:
        """Test that input without a number parses to zero."""
        assert parse_credits(value) == 0.0


class TestParseGrades:
    """Tests for eligible-grade parsing."""

    def test_splits_and_trims(self) -> None:
        """Test comma splitting with whitespace and empty tokens."""
        assert parse_grades("9th, 10th, ,11th ") == ["9th", "10th", "11th"]

    def test_sentinel_is_empty(self) -> None:
        """Test that "n/a" means no grades."""
        assert parse_grades("n/a") == []
        assert parse_grades(None) == []

    def test_list_input_is_cleaned(self) -> None:
        """Test that already split input is trimmed and filtered."""
        assert parse_grades(["  9th ", "", "N/A", "10th"]) == ["9th", "10th"]


class TestCleanDescription:
    """Tests for description cleanup."""

    def test_collapses_whitespace(self) -> None:
        """Test that newlines, tabs and runs of spaces collapse."""
        assert clean_description("Line one\nline\ttwo   three ") == "Line one line two three"

    def test_strips_replacement_and_control_characters(self) -> None:
        """Test removal of U+FFFD and control characters."""
        assert clean_description("Caf\ufffd menu\x07") == "Caf menu"

    def test_applies_nfc(self) -> None:
        """Test that decomposed accents are composed."""
        assert clean_description("Cafe\u0301") == "Caf\u00e9"

    @pytest.mark.parametrize("value", [None, "", "   ", "\x00\x01"])
    def test_empty_result_is_sentinel(self, value: str | None) -> None:
        """Test that nothing left after cleaning yields "n/a"."""
        assert clean_description(value) == NA


class TestUnionPreservingOrder:
    """Tests for list unions."""

    def test_appends_missing_items_only(self) -> None:
        """Test that existing order is kept and duplicates are skipped."""
        assert union_preserving_order(["AP", "STEM"], ["STEM", "DC"]) == ["AP", "STEM", "DC"]

    def test_is_case_sensitive(self) -> None:
        """Test that differently cased tags are distinct."""
        assert union_preserving_order(["AP"], ["ap"]) == ["AP", "ap"]


# =============================================================================
# GPA CLASSIFIER TESTS
# =============================================================================


class TestCalculateGpa:
    """Tests for GPA classification."""

    def test_advanced_placement_name(self) -> None:
        """Test that AP in the name gives 5.0."""
        assert calculate_gpa("AP Biology", []) == 5.0

    def test_kap_name(self) -> None:
        """Test that KAP in the name gives 5.0."""
        assert calculate_gpa("Chemistry KAP", []) == 5.0

    def test_dual_credit_tag(self) -> None:
        """Test that a DC tag gives 4.5."""
        assert calculate_gpa("Biology", ["DC"]) == 4.5

    def test_dual_credit_name(self) -> None:
        """Test that "Dual Credit" in the name gives 4.5."""
        assert calculate_gpa("English 4 Dual Credit", []) == 4.5

    def test_regular(self) -> None:
        """Test the default scale."""
        assert calculate_gpa("Biology", []) == 4.0

    def test_advanced_precedes_dual_credit(self) -> None:
        """Test that AP wins over dual credit."""
        assert calculate_gpa("AP Dual Credit Seminar", ["DC"]) == 5.0

    def test_tags_are_case_insensitive(self) -> None:
        """Test lowercase tags."""
        assert calculate_gpa("Biology", ["ap"]) == 5.0
        assert calculate_gpa("Biology", ["dc"]) == 4.5

    def test_name_check_is_substring(self) -> None:
        """Test that the name check is a plain substring test."""
        # "GRAPHIC" contains "AP"
        assert calculate_gpa("Graphic Design", []) == 5.0


class TestAssignGpa:
    """Tests for the whole-catalog GPA pass."""

    def test_updates_stale_values(self) -> None:
        """Test that a stale GPA is re-derived."""
        stale = make_course("0380", "AP Calculus AB").model_copy(update={"gpa": 4.0})
        regular = make_course("0310", "Algebra 1")

        courses, stats = assign_gpa([stale, regular])

        assert [c.gpa for c in courses] == [5.0, 4.0]
        assert stats.updated == 1
        assert stats.unchanged == 1
        assert stats.distribution == {5.0: 1, 4.0: 1}

    def test_is_idempotent(self) -> None:
        """Test that a second pass changes nothing."""
        stale = make_course("0380", "AP Calculus AB").model_copy(update={"gpa": 4.5})

        once, _ = assign_gpa([stale])
        twice, stats = assign_gpa(once)

        assert twice == once
        assert stats.updated == 0


# =============================================================================
# SCHOOL-NAME CANONICALIZER TESTS
# =============================================================================


class TestSchoolNames:
    """Tests for school-name equivalence."""

    def test_spaced_and_compact_are_equivalent(self) -> None:
        """Test that formatting differences do not change identity."""
        assert normalize_school_name("Seven Lakes High School") == normalize_school_name(
            "SevenLakesHighSchool"
        )
        assert names_are_equivalent("Adams Junior High", "adamsjuniorhigh")

    def test_different_schools_differ(self) -> None:
        """Test that distinct schools are not merged."""
        assert not names_are_equivalent("Seven Lakes High School", "Tompkins High School")

    def test_slug_drops_punctuation(self) -> None:
        """Test the file-name form of a school name."""
        assert school_name_to_slug("Seven Lakes High School") == "SevenLakesHighSchool"
        assert school_name_to_slug("St. John's Academy") == "StJohnsAcademy"

    def test_find_canonical_prefers_spaced_form(self) -> None:
        """Test that a spaced candidate beats an earlier compact one."""
        candidates = ["SevenLakesHighSchool", "Seven Lakes High School"]
        assert find_canonical_name("sevenlakeshighschool", candidates) == "Seven Lakes High School"

    def test_find_canonical_falls_back_to_first_match(self) -> None:
        """Test compact-only candidates and no candidates."""
        assert find_canonical_name("sevenlakeshighschool", ["SevenLakesHighSchool"]) == (
            "SevenLakesHighSchool"
        )
        assert find_canonical_name("sevenlakeshighschool", ["Katy High School"]) is None


class TestMergeSchoolNames:
    """Tests for school-list unions."""

    def test_spaced_form_replaces_compact_in_place(self) -> None:
        """Test that a better-formatted name replaces the existing entry."""
        merged = merge_school_names(
            ["Katy High School", "SevenLakesHighSchool"], ["Seven Lakes High School"]
        )
        assert merged == ["Katy High School", "Seven Lakes High School"]

    def test_compact_form_does_not_replace_spaced(self) -> None:
        """Test that the spaced form is kept."""
        merged = merge_school_names(["Seven Lakes High School"], ["SevenLakesHighSchool"])
        assert merged == ["Seven Lakes High School"]

    def test_new_school_is_appended(self) -> None:
        """Test that a non-equivalent name is added."""
        merged = merge_school_names(["Katy High School"], ["Tompkins High School", "  "])
        assert merged == ["Katy High School", "Tompkins High School"]

    def test_both_forms_yield_single_spaced_entry(self) -> None:
        """Test de-duplication within one list."""
        assert dedupe_school_names(["SevenLakesHighSchool", "Seven Lakes High School"]) == [
            "Seven Lakes High School"
        ]


class TestResolveSourceSchool:
    """Tests for choosing a source's school name."""

    def test_spaced_name_found_in_courses(self) -> None:
        """Test that a compact file-name slug is upgraded from course data."""
        courses = [
            {"schools": ["SevenLakesHighSchool"]},
            {"schools": ["Seven Lakes High School"]},
        ]
        assert resolve_source_school("SevenLakesHighSchool", courses) == "Seven Lakes High School"

    def test_declared_spaced_name_is_kept(self) -> None:
        """Test that an already spaced name is returned as-is."""
        assert resolve_source_school("Katy High School", []) == "Katy High School"

    def test_no_equivalent_keeps_declared(self) -> None:
        """Test the fallback when courses carry no equivalent name."""
        courses = [{"schools": ["Katy High School"]}, {"courseCode": "0100"}]
        assert resolve_source_school("SevenLakesHighSchool", courses) == "SevenLakesHighSchool"
