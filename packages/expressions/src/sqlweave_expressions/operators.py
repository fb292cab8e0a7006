from enum import Enum


class ComparisonOperator(str, Enum):
    """Operators a :class:`Comparison` node may carry."""

    EQ = "="
    NE = "!="
    LT = "<"
    LE = "<="
    GT = ">"
    GE = ">="
    LIKE = "LIKE"
    NOT_LIKE = "NOT LIKE"
    ILIKE = "ILIKE"
    NOT_ILIKE = "NOT ILIKE"
    IN = "IN"
    NOT_IN = "NOT IN"
    IS = "IS"
    IS_NOT = "IS NOT"

    @property
    def negated(self) -> "ComparisonOperator":
        return _NEGATIONS[self]

    @property
    def is_like(self) -> bool:
        return self in _LIKE_FAMILY

    @property
    def is_membership(self) -> bool:
        return self in (ComparisonOperator.IN, ComparisonOperator.NOT_IN)

    @property
    def is_identity(self) -> bool:
        return self in (ComparisonOperator.IS, ComparisonOperator.IS_NOT)

    @property
    def is_case_insensitive(self) -> bool:
        return self in (ComparisonOperator.ILIKE, ComparisonOperator.NOT_ILIKE)

    @property
    def is_negative(self) -> bool:
        return self in (
            ComparisonOperator.NOT_LIKE,
            ComparisonOperator.NOT_ILIKE,
            ComparisonOperator.NOT_IN,
            ComparisonOperator.IS_NOT,
        )


class BooleanOperator(str, Enum):
    """Operators joining the operands of a :class:`BooleanCombination`."""

    AND = "AND"
    OR = "OR"

    @property
    def flipped(self) -> "BooleanOperator":
        if self is BooleanOperator.AND:
            return BooleanOperator.OR
        return BooleanOperator.AND


class ArithmeticOperator(str, Enum):
    """Operators an :class:`Arithmetic` node may carry."""

    ADD = "+"
    SUB = "-"
    MUL = "*"
    DIV = "/"


_NEGATIONS: dict[ComparisonOperator, ComparisonOperator] = {
    ComparisonOperator.EQ: ComparisonOperator.NE,
    ComparisonOperator.NE: ComparisonOperator.EQ,
    ComparisonOperator.LT: ComparisonOperator.GE,
    ComparisonOperator.GE: ComparisonOperator.LT,
    ComparisonOperator.GT: ComparisonOperator.LE,
    ComparisonOperator.LE: ComparisonOperator.GT,
    ComparisonOperator.LIKE: ComparisonOperator.NOT_LIKE,
    ComparisonOperator.NOT_LIKE: ComparisonOperator.LIKE,
    ComparisonOperator.ILIKE: ComparisonOperator.NOT_ILIKE,
    ComparisonOperator.NOT_ILIKE: ComparisonOperator.ILIKE,
    ComparisonOperator.IN: ComparisonOperator.NOT_IN,
    ComparisonOperator.NOT_IN: ComparisonOperator.IN,
    ComparisonOperator.IS: ComparisonOperator.IS_NOT,
    ComparisonOperator.IS_NOT: ComparisonOperator.IS,
}

_LIKE_FAMILY = frozenset(
    {
        ComparisonOperator.LIKE,
        ComparisonOperator.NOT_LIKE,
        ComparisonOperator.ILIKE,
        ComparisonOperator.NOT_ILIKE,
    }
)

# Spellings accepted by ``comparison()`` and the builder, lower-cased.
OPERATOR_ALIASES: dict[str, ComparisonOperator] = {
    **{op.value.lower(): op for op in ComparisonOperator},
    "==": ComparisonOperator.EQ,
    "<>": ComparisonOperator.NE,
    "eq": ComparisonOperator.EQ,
    "ne": ComparisonOperator.NE,
    "lt": ComparisonOperator.LT,
    "le": ComparisonOperator.LE,
    "gt": ComparisonOperator.GT,
    "ge": ComparisonOperator.GE,
    "not_like": ComparisonOperator.NOT_LIKE,
    "not_ilike": ComparisonOperator.NOT_ILIKE,
    "not_in": ComparisonOperator.NOT_IN,
    "is_not": ComparisonOperator.IS_NOT,
}
