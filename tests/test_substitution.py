"""Tests for featurespec.directives.substitution."""

import pytest

from featurespec.directives.substitution import find_placeholders, substitute
from featurespec.errors import UnresolvedPlaceholder


class TestSubstitute:
    def test_replaces_every_occurrence(self):
        text = "Given I am <user>\nThen <user> sees <page>"
        result = substitute(text, [("user", "bob"), ("page", "home")])
        assert result == "Given I am bob\nThen bob sees home"

    def test_dollar_value_is_literal(self):
        assert substitute("I pay <amount>", [("amount", "$5")]) == "I pay $5"

    def test_backslash_value_is_literal(self):
        assert substitute("match <re>", [("re", r"\1 \2")]) == r"match \1 \2"

    def test_later_pairs_see_earlier_replacements(self):
        # No fixed-point iteration: only one sweep per declared pair.
        result = substitute("<a>", [("a", "<b>"), ("b", "done")])
        assert result == "done"

    def test_earlier_pairs_do_not_see_later_replacements(self):
        with pytest.raises(UnresolvedPlaceholder):
            substitute("<b>", [("a", "x"), ("b", "<a>")])

    def test_unresolved_placeholder_raises(self):
        with pytest.raises(UnresolvedPlaceholder, match="not replaced") as exc_info:
            substitute("Given <user> with <role>", [("user", "bob")])
        assert exc_info.value.placeholders == ["<role>"]

    def test_no_params_and_no_placeholders(self):
        assert substitute("Given nothing", []) == "Given nothing"


class TestFindPlaceholders:
    def test_distinct_in_order(self):
        assert find_placeholders("<b> <a> <b>") == ["<b>", "<a>"]

    def test_ignores_comparison_operators(self):
        assert find_placeholders("Then 1 < 2 and 3 > 2") == []
