"""
Tests for `column=op.value` row filters.
"""

import pytest

from change_feed.filters import ChangeFilter, InvalidFilterError


class TestParse:
    def test_eq(self):
        f = ChangeFilter.parse("user_id=eq.42")

        assert f.column == "user_id"
        assert f.operator == "eq"
        assert f.values == ("42",)
        assert str(f) == "user_id=eq.42"

    def test_value_may_contain_dots(self):
        f = ChangeFilter.parse("email=eq.ada@example.co.uk")

        assert f.values == ("ada@example.co.uk",)

    def test_in(self):
        f = ChangeFilter.parse("page_id=in.(a, b,c)")

        assert f.values == ("a", "b", "c")
        assert str(f) == "page_id=in.(a,b,c)"

    @pytest.mark.parametrize("expression", [
        "user_id",
        "user_id=42",
        "=eq.42",
        "user_id=like.42",
        "page_id=in.a,b",
    ])
    def test_invalid(self, expression):
        with pytest.raises(InvalidFilterError):
            ChangeFilter.parse(expression)

    def test_invalid_filter_is_a_value_error(self):
        assert issubclass(InvalidFilterError, ValueError)


class TestMatches:
    def test_eq_compares_as_strings(self):
        f = ChangeFilter.equals("user_id", 42)

        assert f.matches({"user_id": 42})
        assert f.matches({"user_id": "42"})
        assert not f.matches({"user_id": 43})

    def test_missing_column_or_row(self):
        f = ChangeFilter.parse("user_id=eq.1")

        assert not f.matches({"id": "x"})
        assert not f.matches(None)
        assert not f.matches({})

    def test_non_object_row(self):
        f = ChangeFilter.parse("user_id=eq.u1")

        assert not f.matches("user_id")
        assert not f.matches(["user_id"])

    def test_neq(self):
        f = ChangeFilter.parse("status=neq.archived")

        assert f.matches({"status": "active"})
        assert not f.matches({"status": "archived"})

    def test_in(self):
        f = ChangeFilter.parse("page_id=in.(p1,p2)")

        assert f.matches({"page_id": "p2"})
        assert not f.matches({"page_id": "p3"})
