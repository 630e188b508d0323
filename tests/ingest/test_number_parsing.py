"""
Tests for spreadsheet cell parsing: numbers, densities and UUIDs.
"""

import math

import pytest

from oekodata.ingest import (
    clean_text,
    is_uuid,
    normalize_uuid,
    parse_density,
    parse_number,
)


class TestParseNumber:
    """Tests for parse_number."""

    def test_missing_values(self):
        """Empty cells and placeholders are None, not zero."""
        assert parse_number(None) is None
        assert parse_number(float("nan")) is None
        assert parse_number("") is None
        assert parse_number("   ") is None
        assert parse_number("-") is None

    def test_numeric_cells_pass_through(self):
        assert parse_number(42) == 42
        assert parse_number(0) == 0
        assert parse_number(-3.25) == -3.25

    def test_bool_is_not_a_number(self):
        assert parse_number(True) is None

    @pytest.mark.parametrize("n", [0, 7, 123, 4567, 1234567, 0.5, 12.75, -8.125, 1e-05, 2400.0])
    def test_string_round_trip(self, n):
        """parse_number(str(n)) == n for plain integers and decimals."""
        assert parse_number(str(n)) == n

    def test_apostrophe_thousands_with_decimal_comma(self):
        assert parse_number("1'234,5") == 1234.5

    def test_typographic_apostrophe_and_thin_space(self):
        assert parse_number("1’234,5") == 1234.5
        assert parse_number("1 234,5") == 1234.5
        assert parse_number("1 234") == 1234

    def test_comma_as_decimal(self):
        assert parse_number("0,5") == 0.5
        assert parse_number("12,75") == 12.75

    def test_comma_followed_by_three_digits_is_grouping(self):
        """A comma followed by exactly three digits is a thousands separator."""
        assert parse_number("1,234") == 1234
        assert parse_number("12,345 kg") == 12345

    def test_comma_followed_by_other_digit_runs_is_decimal(self):
        assert parse_number("1,2345") == 1.2345
        assert parse_number("1,23") == 1.23

    def test_dot_grouping_with_decimal_comma(self):
        assert parse_number("1.234,5") == 1234.5

    def test_residual_characters_stripped(self):
        assert parse_number("12 kg") == 12
        assert parse_number("~3.5") == 3.5

    def test_range_is_not_a_number(self):
        assert parse_number("20-25") is None
        assert parse_number("20 - 25") is None

    def test_garbage_is_none(self):
        assert parse_number("n/a") is None
        assert parse_number("abc") is None

    def test_result_is_never_nan(self):
        value = parse_number("1,5")
        assert value is not None and not math.isnan(value)


class TestParseDensity:
    """Tests for parse_density."""

    def test_single_value(self):
        density = parse_density("2400")
        assert density.raw == "2400"
        assert density.min == 2400
        assert density.max == 2400

    def test_numeric_cell(self):
        density = parse_density(2400.0)
        assert density.raw == "2400"
        assert density.min == density.max == 2400.0

    def test_range(self):
        density = parse_density("1800-2000")
        assert density.raw == "1800-2000"
        assert density.min == 1800
        assert density.max == 2000

    def test_range_with_grouping_and_spaces(self):
        density = parse_density("1'800 - 2'000")
        assert density.min == 1800
        assert density.max == 2000

    def test_placeholder(self):
        for value in (None, "", "-", "–"):
            density = parse_density(value)
            assert density.raw is None
            assert density.min is None
            assert density.max is None


class TestUuidHelpers:
    """Tests for UUID normalization and validation."""

    def test_normalize_strips_punctuation_and_uppercases(self):
        assert normalize_uuid("3f2504e0-4f89-41d3-9a0c-0305e82c3301") == \
            "3F2504E04F8941D39A0C0305E82C3301"

    @pytest.mark.parametrize("value", [
        "3f2504e0-4f89-41d3-9a0c-0305e82c3301",
        "{3F2504E0-4F89-41D3-9A0C-0305E82C3301}",
        " 3f2504e04f8941d39a0c0305e82c3301 ",
        "3F2504E0_4F89_41D3_9A0C_0305E82C3301",
    ])
    def test_normalize_is_idempotent(self, value):
        once = normalize_uuid(value)
        assert normalize_uuid(once) == once
        assert once == "3F2504E04F8941D39A0C0305E82C3301"

    def test_normalize_none(self):
        assert normalize_uuid(None) == ""

    def test_is_uuid_accepts_hyphenated_v4(self):
        assert is_uuid("3f2504e0-4f89-41d3-9a0c-0305e82c3301")
        assert is_uuid("3F2504E0-4F89-41D3-9A0C-0305E82C3301")

    def test_is_uuid_rejects_other_shapes(self):
        assert not is_uuid("not-a-uuid")
        assert not is_uuid("3f2504e04f8941d39a0c0305e82c3301")
        assert not is_uuid("3f2504e0-4f89-01d3-9a0c-0305e82c3301")  # version nibble 0
        assert not is_uuid("3f2504e0-4f89-41d3-7a0c-0305e82c3301")  # variant nibble 7
        assert not is_uuid(None)
        assert not is_uuid("")


class TestCleanText:

    def test_trims_and_blanks(self):
        assert clean_text("  Beton ") == "Beton"
        assert clean_text("") is None
        assert clean_text(None) is None
        assert clean_text(float("nan")) is None

    def test_integral_float_rendered_as_int(self):
        assert clean_text(12.0) == "12"
