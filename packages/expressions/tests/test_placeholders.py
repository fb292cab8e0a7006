"""Binding values into raw SQL strings."""

from __future__ import annotations

import pytest

from sqlweave_expressions import (
    POSTGRES,
    InvalidExpressionError,
    MissingPlaceholderError,
    PlaceholderCountError,
    PlaceholderFragment,
    RawFragment,
    bind_placeholders,
    col,
    compile_filter,
    func,
    raw,
    table,
    to_expression,
)


def test_string_without_bindings_is_verbatim():
    node = to_expression("price > 10 AND name = '?'")
    assert node == RawFragment("price > 10 AND name = '?'")
    assert compile_filter(node).sql == "price > 10 AND name = '?'"


def test_positional_placeholders():
    compiled = compile_filter("price > ? AND qty < ?", params=[10, 5])
    assert compiled.sql == "price > ? AND qty < ?"
    assert compiled.params == (10, 5)


def test_positional_placeholders_in_dialect_style():
    compiled = compile_filter("price > ? AND qty < ?", POSTGRES, params=[10, 5])
    assert compiled.sql == "price > $1 AND qty < $2"


@pytest.mark.parametrize("values", [(1,), (1, 2, 3)])
def test_positional_count_mismatch(values):
    with pytest.raises(PlaceholderCountError) as exc_info:
        bind_placeholders("a = ? AND b = ?", *values)
    assert exc_info.value.expected == 2
    assert exc_info.value.given == len(values)


def test_count_mismatch_is_an_invalid_expression():
    with pytest.raises(InvalidExpressionError):
        to_expression("a = ?", 1, 2)


def test_named_placeholders():
    compiled = compile_filter("category = :cat OR tag = :cat", params={"cat": "books"})
    assert compiled.sql == "category = ? OR tag = ?"
    assert compiled.params == ("books", "books")


def test_named_placeholders_as_keywords():
    node = to_expression("qty BETWEEN :low AND :high", low=1, high=9)
    assert isinstance(node, PlaceholderFragment)
    assert node.parts == ("qty BETWEEN ", " AND ", "")


def test_postgres_cast_is_not_a_placeholder():
    compiled = compile_filter("price::int > :min", params={"min": 3})
    assert compiled.sql == "price::int > ?"
    assert compiled.params == (3,)


def test_missing_named_placeholder_suggests_keys():
    with pytest.raises(MissingPlaceholderError) as exc_info:
        to_expression("category = :categry", category="books")
    error = exc_info.value
    assert error.name == "categry"
    assert error.suggestions == ["category"]
    assert "Did you mean: category?" in str(error)


def test_mixing_positional_and_named_is_rejected():
    with pytest.raises(InvalidExpressionError):
        bind_placeholders("a = ? AND b = :b", 1, b=2)


def test_sequence_values_expand_to_lists():
    compiled = compile_filter("id IN ?", params=[[1, 2, 3]])
    assert compiled.sql == "id IN (?, ?, ?)"
    assert compiled.params == (1, 2, 3)


def test_empty_sequence_value_renders_null_list():
    assert compile_filter("id IN ?", params=[[]]).sql == "id IN (NULL)"


def test_expression_values_render_in_place():
    compiled = compile_filter("? > 10", params=[func.length(col("name"))])
    assert compiled.sql == 'length("name") > 10'
    assert compiled.params == ()


def test_subselect_value_renders_parenthesised():
    sub = table("orders").select("customer_id")
    compiled = compile_filter("id IN ?", params=[sub])
    assert compiled.sql == 'id IN (SELECT "customer_id" FROM "orders")'


def test_fragment_composes_with_expressions():
    node = to_expression("price > ?", 10) & (col("qty") < 5)
    compiled = compile_filter(node)
    assert compiled.sql == '((price > ?) AND ("qty" < ?))'
    assert compiled.params == (10, 5)


def test_fragment_is_grouped_inside_and():
    node = to_expression("a = 1 OR b = 2") & (col("c") < 5)
    assert compile_filter(node).sql == '((a = 1 OR b = 2) AND ("c" < ?))'


def test_fragment_is_grouped_under_not():
    assert compile_filter(~raw("a = 1 OR b = 2")).sql == "(NOT (a = 1 OR b = 2))"


def test_bound_fragment_is_grouped_under_not():
    compiled = compile_filter(~to_expression("a = ? OR b = ?", 1, 2))
    assert compiled.sql == "(NOT (a = ? OR b = ?))"
    assert compiled.params == (1, 2)


def test_empty_mapping_still_requires_every_name():
    with pytest.raises(MissingPlaceholderError) as exc_info:
        compile_filter("category = :c", params={})
    assert exc_info.value.name == "c"


def test_empty_sequence_still_requires_every_question_mark():
    with pytest.raises(PlaceholderCountError) as exc_info:
        compile_filter("category = ?", params=[])
    assert exc_info.value.expected == 1
    assert exc_info.value.given == 0


def test_empty_bindings_without_placeholders():
    assert compile_filter("price > 10", params=[]) == ("price > 10", ())
    assert compile_filter("price > 10", params={}) == ("price > 10", ())
