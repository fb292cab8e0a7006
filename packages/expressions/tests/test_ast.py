"""Expression tree construction and immutability."""

from __future__ import annotations

import dataclasses

import pytest

from sqlweave_expressions import (
    BooleanCombination,
    BooleanOperator,
    CaseExpression,
    Comparison,
    ComparisonOperator,
    FunctionCall,
    Identifier,
    InvalidExpressionError,
    Literal,
    Negation,
    Ordered,
    PlaceholderFragment,
    UnknownOperatorError,
    ValueList,
    VirtualRow,
    and_,
    col,
    invert,
    not_,
    or_,
)


def test_nodes_are_immutable():
    node = col("price") > 10
    with pytest.raises(dataclasses.FrozenInstanceError):
        node.op = ComparisonOperator.LT  # type: ignore[misc]


def test_qualify_returns_a_new_identifier():
    original = col("price")
    qualified = original.qualify("items")
    assert original.table is None
    assert qualified == Identifier("price", table="items")


def test_col_splits_on_the_rightmost_dot():
    assert col("s.t.c") == Identifier("c", table="s.t")
    assert col("c", table="t") == Identifier("c", table="t")


def test_empty_identifier_is_rejected():
    with pytest.raises(InvalidExpressionError):
        Identifier("")


def test_and_flattens_nested_conjunctions():
    a, b, c = col("a").eq(1), col("b").eq(2), col("c").eq(3)
    node = and_(and_(a, b), c)
    assert isinstance(node, BooleanCombination)
    assert node.operands == (a, b, c)


def test_and_does_not_flatten_or():
    a, b, c = col("a").eq(1), col("b").eq(2), col("c").eq(3)
    node = and_(or_(a, b), c)
    assert len(node.operands) == 2


def test_single_operand_collapses_to_itself():
    a = col("a").eq(1)
    assert and_(a) is a
    assert or_(a) is a


def test_operands_are_shared_not_copied():
    shared = col("a").eq(1)
    first = shared & col("b").eq(2)
    second = shared | col("c").eq(3)
    assert first.operands[0] is shared
    assert second.operands[0] is shared


def test_operator_and_accepts_mappings():
    node = col("a").eq(1) & {"b": 2}
    assert isinstance(node, BooleanCombination)
    assert node.operands[1] == Comparison(col("b"), ComparisonOperator.EQ, Literal(2))


def test_operator_and_rejects_scalars():
    with pytest.raises(InvalidExpressionError):
        col("a").eq(1) & 5


def test_invert_and_not_are_aliases():
    node = col("flag")
    assert invert(node) == not_(node) == Negation(node)


def test_invert_empty_and_gives_empty_or():
    node = invert(BooleanCombination(BooleanOperator.AND, ()))
    assert node == BooleanCombination(BooleanOperator.OR, ())


def test_is_only_accepts_truth_constants():
    with pytest.raises(InvalidExpressionError):
        Comparison(col("a"), ComparisonOperator.IS, Literal(1))
    with pytest.raises(InvalidExpressionError):
        col("a").is_("yes")  # type: ignore[arg-type]


def test_in_requires_a_list_or_subselect():
    with pytest.raises(InvalidExpressionError):
        Comparison(col("a"), ComparisonOperator.IN, Literal(1))


def test_value_list_only_valid_for_membership():
    with pytest.raises(InvalidExpressionError):
        Comparison(col("a"), ComparisonOperator.EQ, ValueList((Literal(1),)))


def test_string_operator_is_coerced():
    node = Comparison(col("a"), ">=", Literal(1))  # type: ignore[arg-type]
    assert node.op is ComparisonOperator.GE


def test_unknown_operator_in_comparison_node():
    with pytest.raises(UnknownOperatorError):
        Comparison(col("a"), "=~", Literal(1))  # type: ignore[arg-type]


def test_non_expression_operands_are_rejected():
    with pytest.raises(InvalidExpressionError):
        Comparison(col("a"), ComparisonOperator.EQ, 1)  # type: ignore[arg-type]
    with pytest.raises(InvalidExpressionError):
        and_(col("a").eq(1), "b = 2")  # type: ignore[arg-type]


def test_like_requires_a_pattern():
    with pytest.raises(InvalidExpressionError):
        col("a").like()


def test_between_builds_closed_range():
    node = col("qty").between(1, 5)
    assert isinstance(node, BooleanCombination)
    assert [c.op for c in node.operands] == [ComparisonOperator.GE, ComparisonOperator.LE]


def test_function_name_is_validated():
    with pytest.raises(InvalidExpressionError):
        FunctionCall("count(*); --")


def test_case_expression_requires_branches():
    with pytest.raises(InvalidExpressionError):
        CaseExpression((), Literal(0))


def test_ordered_nulls_is_validated():
    assert Ordered(col("a"), nulls="FIRST").nulls == "first"
    with pytest.raises(InvalidExpressionError):
        col("a").asc(nulls="middle")


def test_placeholder_fragment_shape_is_checked():
    with pytest.raises(InvalidExpressionError):
        PlaceholderFragment(("a", "b"), ())


def test_bool_of_an_expression_is_an_error():
    with pytest.raises(InvalidExpressionError) as exc_info:
        bool(col("a").eq(1))
    assert "'&'" in str(exc_info.value)


def test_virtual_row():
    row = VirtualRow()
    assert row.price == Identifier("price")
    assert row["items"].price == Identifier("price", table="items")
    assert row["public"]["items"].price == Identifier("price", table="public.items")
    assert row.fn.count(row.id) == FunctionCall("count", (Identifier("id"),))


def test_virtual_row_does_not_fake_dunder_attributes():
    with pytest.raises(AttributeError):
        VirtualRow().__wrapped__  # noqa: B018
