"""
Fluent builder for constructing filter expressions.

Example::

    condition = (
        FilterBuilder()
        .where("status", "=", "active")
        .where("age", ">", 18)
        .build()
    )
    # → AND(status = 'active', age > 18)

    condition = (
        FilterBuilder()
        .or_group()
            .where("role", "=", "admin")
            .where("role", "=", "superuser")
        .end_group()
        .where("active", "=", True)
        .build()
    )
    # → AND(OR(role = 'admin', role = 'superuser'), active IS TRUE)
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from .ast import Expression, and_, invert, or_
from .filters import _key, comparison, condition_for, to_expression
from .operators import ComparisonOperator

if TYPE_CHECKING:
    from .filters import FilterSpec


class FilterBuilder:
    """
    Fluent builder for composing filter expressions.

    Conditions added at the same level are combined with AND by default.
    Use ``or_group()`` / ``and_group()`` / ``not_group()`` for explicit
    grouping, and ``end_group()`` to close the current group.
    """

    def __init__(self) -> None:
        self._conditions: list[Expression] = []
        self._stack: list[tuple[str, list[Expression]]] = []
        # stack items: (group_operator, conditions_list)

    # -- leaf conditions -----------------------------------------------------

    def where(
        self,
        column: str | Expression,
        op: ComparisonOperator | str,
        value: Any = None,
    ) -> FilterBuilder:
        """
        Add a single column condition to the current group.

        ``=`` dispatches on the value's shape like a filter mapping does
        (``None`` → ``IS NULL``, list → ``IN``); other operators are explicit.
        """
        if op in ("=", "==", "eq", ComparisonOperator.EQ):
            condition = condition_for(_key(column), value)
        else:
            condition = comparison(column, op, value)
        self._current_list().append(condition)
        return self

    def add(self, filter_spec: FilterSpec, *args: Any, **named: Any) -> FilterBuilder:
        """Add an already-built expression (or any filter spec) to the current group."""
        self._current_list().append(to_expression(filter_spec, *args, **named))
        return self

    # -- grouping ------------------------------------------------------------

    def and_group(self) -> FilterBuilder:
        """Open a new AND group.  Close with ``end_group()``."""
        self._stack.append(("and", []))
        return self

    def or_group(self) -> FilterBuilder:
        """Open a new OR group.  Close with ``end_group()``."""
        self._stack.append(("or", []))
        return self

    def not_group(self) -> FilterBuilder:
        """Open a new NOT group (single child).  Close with ``end_group()``."""
        self._stack.append(("not", []))
        return self

    def end_group(self) -> FilterBuilder:
        """Close the current group and add it to the parent."""
        if not self._stack:
            raise ValueError("No open group to close")
        group_op, conditions = self._stack.pop()
        self._current_list().append(_combine(group_op, conditions))
        return self

    # -- build ---------------------------------------------------------------

    def build(self) -> Expression:
        """
        Finalise and return the composed expression.

        If there is a single condition, returns it directly.
        Multiple conditions at the top level are combined with AND.

        Raises:
            ValueError: If groups are still open or no conditions were added.
        """
        if self._stack:
            raise ValueError(
                f"{len(self._stack)} group(s) still open; "
                f"call end_group() before build()"
            )
        if not self._conditions:
            raise ValueError("No conditions added to builder")
        return _combine("and", self._conditions)

    def reset(self) -> FilterBuilder:
        """Clear all conditions and return ``self`` for reuse."""
        self._conditions.clear()
        self._stack.clear()
        return self

    # -- internals -----------------------------------------------------------

    def _current_list(self) -> list[Expression]:
        """Return the list that new conditions should be appended to."""
        if self._stack:
            return self._stack[-1][1]
        return self._conditions


def _combine(op: str, conditions: list[Expression]) -> Expression:
    """Combine a list of conditions with the given logical operator."""
    if not conditions:
        raise ValueError("Cannot create an empty group")
    if op == "and":
        return and_(*conditions)
    if op == "or":
        return or_(*conditions)
    if op == "not":
        if len(conditions) != 1:
            raise ValueError("NOT group must contain exactly one condition")
        return invert(conditions[0])
    raise ValueError(f"Unknown group operator: {op}")
