import pytest

from chartc.core.errors import SpecError
from chartc.expr import (
    field_valid_predicate,
    flat_access_with_datum,
    format_number,
    predicate_expression,
    replace_path_in_field,
    split_access_path,
)


def test_split_access_path_dots_brackets_and_escapes() -> None:
    assert split_access_path("a.b") == ["a", "b"]
    assert split_access_path('a["b.c"]') == ["a", "b.c"]
    assert split_access_path("a\\.b") == ["a.b"]


def test_split_access_path_unbalanced_brackets() -> None:
    with pytest.raises(SpecError):
        split_access_path("a[b")
    with pytest.raises(SpecError):
        split_access_path("a]")


def test_nested_fields_are_flattened_for_access_and_escaped_for_names() -> None:
    assert flat_access_with_datum("a.b") == 'datum["a.b"]'
    assert flat_access_with_datum("price", "parent") == 'parent["price"]'
    assert replace_path_in_field('a["b.c"]') == "a\\.b\\.c"


def test_format_number_drops_trailing_zero() -> None:
    assert format_number(3.0) == "3"
    assert format_number(1.5) == "1.5"
    assert format_number(2) == "2"


def test_field_valid_predicate_both_polarities() -> None:
    ref = 'datum["v"]'
    assert field_valid_predicate(ref) == 'isValid(datum["v"]) && isFinite(+datum["v"])'
    assert field_valid_predicate(ref, False) == '!isValid(datum["v"]) || !isFinite(+datum["v"])'


def test_predicate_expression_field_predicates() -> None:
    assert predicate_expression({"field": "a", "equal": "x"}) == 'datum["a"]==="x"'
    assert predicate_expression({"field": "a", "lte": 2.0}) == 'datum["a"]<=2'
    assert predicate_expression({"field": "a", "range": [0, None]}) == 'datum["a"] >= 0'
    assert (
        predicate_expression({"field": "a", "range": [0, 5]}) == 'inrange(datum["a"], [0, 5])'
    )
    assert (
        predicate_expression({"field": "a", "oneOf": [1, 2]})
        == 'indexof([1, 2], datum["a"]) !== -1'
    )


def test_predicate_expression_logical_composition() -> None:
    expr = predicate_expression({"and": ["datum.a > 1", {"not": {"field": "b", "lt": 2}}]})
    assert expr == '(datum.a > 1) && (!(datum["b"]<2))'
    assert predicate_expression({"or": ["x", "y"]}) == "(x) || (y)"


def test_predicate_expression_rejects_unknown_shapes() -> None:
    with pytest.raises(SpecError):
        predicate_expression({"field": "a", "between": [1, 2]})
    with pytest.raises(SpecError):
        predicate_expression(42)
