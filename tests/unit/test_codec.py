"""
Unit tests for the cell value codec.

Tests edit text rendering, type-preserving coercion of edited text,
SQL literal rendering and row copy formats.
"""

import pytest

from tabledit.codec import (
    format_number,
    format_row_csv,
    format_row_insert,
    from_edit_text,
    parse_number,
    to_edit_text,
    to_sql_literal,
    values_equal,
)


class TestToEditText:
    """Test to_edit_text"""

    def test_null_is_empty(self):
        assert to_edit_text(None) == ""

    def test_string_unchanged(self):
        assert to_edit_text("O'Brien") == "O'Brien"

    def test_integral_float_drops_fraction(self):
        assert to_edit_text(31.0) == "31"

    def test_fractional_float(self):
        assert to_edit_text(12.5) == "12.5"

    def test_int(self):
        assert to_edit_text(-4) == "-4"

    def test_bool(self):
        assert to_edit_text(True) == "true"
        assert to_edit_text(False) == "false"


class TestFromEditText:
    """Test from_edit_text coercion against the original cell type"""

    @pytest.mark.parametrize("text", ["", "null", "NULL", "Null"])
    def test_null_markers(self, text):
        assert from_edit_text(text, "anything") is None
        assert from_edit_text(text, 30) is None

    def test_numeric_original_parses_float(self):
        value = from_edit_text("31", 30)

        assert value == 31
        assert isinstance(value, float)

    def test_numeric_original_lenient_prefix(self):
        assert from_edit_text("12.5kg", 1) == 12.5

    def test_numeric_original_garbage_becomes_zero(self):
        assert from_edit_text("abc", 30) == 0

    def test_bool_original(self):
        assert from_edit_text("TRUE", False) is True
        assert from_edit_text("yes", True) is False

    def test_string_original_keeps_text(self):
        assert from_edit_text("42", "Bob") == "42"

    def test_null_original_keeps_text(self):
        assert from_edit_text("Alice", None) == "Alice"

    @pytest.mark.parametrize("value", ["Bob", 30, 12.5, True, False, None])
    def test_edit_text_round_trip(self, value):
        assert values_equal(from_edit_text(to_edit_text(value), value), value)


class TestParseNumber:
    """Test parse_number"""

    @pytest.mark.parametrize(
        "text, expected",
        [
            ("42", 42.0),
            ("  -3.5", -3.5),
            (".5", 0.5),
            ("1e3", 1000.0),
            ("7 apples", 7.0),
            ("", 0.0),
            ("x1", 0.0),
            ("1e999", 0.0),
        ],
    )
    def test_parse(self, text, expected):
        assert parse_number(text) == expected


class TestValuesEqual:
    """Test type-aware equality"""

    def test_int_and_float(self):
        assert values_equal(30, 30.0)

    def test_bool_is_not_number(self):
        assert not values_equal(True, 1)
        assert not values_equal(0, False)

    def test_string_is_not_number(self):
        assert not values_equal("30", 30)

    def test_null(self):
        assert values_equal(None, None)
        assert not values_equal(None, "")
        assert not values_equal(0, None)

    def test_strings(self):
        assert values_equal("a", "a")
        assert not values_equal("a", "A")


class TestToSqlLiteral:
    """Test to_sql_literal"""

    def test_null(self):
        assert to_sql_literal(None) == "NULL"

    def test_string_quotes_doubled(self):
        assert to_sql_literal("O'Brien") == "'O''Brien'"

    def test_numbers_unquoted(self):
        assert to_sql_literal(28) == "28"
        assert to_sql_literal(31.0) == "31"
        assert to_sql_literal(0.25) == "0.25"

    def test_bool(self):
        assert to_sql_literal(True) == "TRUE"
        assert to_sql_literal(False) == "FALSE"

    def test_empty_string_is_not_null(self):
        assert to_sql_literal("") == "''"

    def test_other_types_quoted_as_text(self):
        from datetime import date

        assert to_sql_literal(date(2024, 1, 2)) == "'2024-01-02'"

    @pytest.mark.parametrize(
        "value, expected",
        [
            (float("nan"), "'NaN'"),
            (float("inf"), "'Infinity'"),
            (float("-inf"), "'-Infinity'"),
        ],
    )
    def test_non_finite_float_literal(self, value, expected):
        assert to_sql_literal(value) == expected


class TestFormatNumber:
    """Test format_number"""

    def test_large_integral_float(self):
        assert format_number(1e15) == "1000000000000000"


class TestRowFormats:
    """Test copy-row formats"""

    def test_csv(self):
        assert format_row_csv([5, 'say "hi"', None, True]) == '5,"say ""hi""",NULL,true'

    def test_insert(self):
        sql = format_row_insert("users", ["id", "name"], [5, "O'Brien"])

        assert sql == 'INSERT INTO "users" ("id", "name") VALUES (5, \'O\'\'Brien\');'
