"""
Dialect descriptors.

A :class:`DialectConfig` is an immutable, process-wide description of how a
target database spells identifiers, parameters, literals and the handful of
operators that differ between engines. Presets are registered under their
``name``; :func:`get_dialect` looks them up.
"""

from __future__ import annotations

import datetime as dt
import math
import threading
import uuid
from dataclasses import dataclass, replace
from decimal import Decimal
from enum import Enum
from typing import Any

from .exceptions import DialectNotFoundError, InvalidExpressionError


class IdentifierCase(str, Enum):
    PRESERVE = "preserve"
    UPPER = "upper"
    LOWER = "lower"


class ParamStyle(str, Enum):
    """DB-API bind parameter styles supported by the compiler."""

    QMARK = "qmark"  # ?
    FORMAT = "format"  # %s
    NUMERIC = "numeric"  # :1
    NUMERIC_DOLLAR = "numeric_dollar"  # $1


class LimitStyle(str, Enum):
    LIMIT_OFFSET = "limit_offset"
    OFFSET_FETCH = "offset_fetch"


@dataclass(frozen=True)
class RegexOperators:
    """Operators for regex matching; negative forms are used by NOT LIKE."""

    match: str
    imatch: str
    not_match: str
    not_imatch: str

    def for_pattern(self, *, ignore_case: bool, negated: bool) -> str:
        if negated:
            return self.not_imatch if ignore_case else self.not_match
        return self.imatch if ignore_case else self.match


@dataclass(frozen=True)
class DialectConfig:
    """
    Immutable description of a target database.

    Attributes:
        name: Registry key (``"postgres"``, ``"sqlite"``...).
        quote_open / quote_close: Identifier quote characters.
        quote_identifiers: When False identifiers render unquoted.
        identifier_case: Case folding applied before quoting.
        param_style: Bind parameter placeholder style.
        like_case_sensitive: Whether plain LIKE compares case-sensitively.
        supports_ilike: Native ILIKE operator available.
        case_sensitive_like_operator: Operator for a case-sensitive LIKE
            where plain LIKE is not (``LIKE BINARY`` on MySQL).
        like_escape: Optional ``ESCAPE`` character appended to LIKE.
        regex: Regex operator set, or None when unsupported.
        supports_window_functions: ``OVER (...)`` available.
        concat_operator: Infix concatenation operator; None → ``CONCAT()``.
        boolean_literals: Spellings of TRUE/FALSE for inline rendering.
        limit_style: ``LIMIT n OFFSET m`` or ``OFFSET m ROWS FETCH ...``.
        escape_backslashes: Double backslashes in inline string literals.
    """

    name: str
    quote_open: str = '"'
    quote_close: str = '"'
    quote_identifiers: bool = True
    identifier_case: IdentifierCase = IdentifierCase.PRESERVE
    param_style: ParamStyle = ParamStyle.QMARK
    like_case_sensitive: bool = True
    supports_ilike: bool = False
    case_sensitive_like_operator: str = "LIKE"
    like_escape: str | None = None
    regex: RegexOperators | None = None
    supports_window_functions: bool = True
    concat_operator: str | None = "||"
    boolean_literals: tuple[str, str] = ("TRUE", "FALSE")
    limit_style: LimitStyle = LimitStyle.LIMIT_OFFSET
    escape_backslashes: bool = False

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("Dialect name must not be empty")
        object.__setattr__(self, "identifier_case", IdentifierCase(self.identifier_case))
        object.__setattr__(self, "param_style", ParamStyle(self.param_style))
        object.__setattr__(self, "limit_style", LimitStyle(self.limit_style))
        if self.like_escape is not None and len(self.like_escape) != 1:
            raise ValueError("like_escape must be a single character")

    # -- identifiers ---------------------------------------------------------

    def fold_case(self, name: str) -> str:
        if self.identifier_case is IdentifierCase.UPPER:
            return name.upper()
        if self.identifier_case is IdentifierCase.LOWER:
            return name.lower()
        return name

    def quote_identifier(self, name: str) -> str:
        """Fold and quote a single identifier part; ``*`` is left bare."""
        if name == "*":
            return name
        name = self.fold_case(name)
        if not self.quote_identifiers:
            return name
        escaped = name.replace(self.quote_close, self.quote_close * 2)
        return f"{self.quote_open}{escaped}{self.quote_close}"

    # -- parameters ----------------------------------------------------------

    def placeholder(self, position: int) -> str:
        """Placeholder for the ``position``-th bound value (1-based)."""
        if self.param_style is ParamStyle.QMARK:
            return "?"
        if self.param_style is ParamStyle.FORMAT:
            return "%s"
        if self.param_style is ParamStyle.NUMERIC:
            return f":{position}"
        return f"${position}"

    def with_param_style(self, style: ParamStyle | str) -> DialectConfig:
        return replace(self, param_style=ParamStyle(style))

    # -- literals ------------------------------------------------------------

    def literal(self, value: Any) -> str:
        """Escape ``value`` for inline rendering."""
        if value is None:
            return "NULL"
        if value is True:
            return self.boolean_literals[0]
        if value is False:
            return self.boolean_literals[1]
        if isinstance(value, int):
            return str(value)
        if isinstance(value, float):
            if math.isnan(value) or math.isinf(value):
                raise InvalidExpressionError(f"Cannot inline non-finite float {value!r}")
            return repr(value)
        if isinstance(value, Decimal):
            if not value.is_finite():
                raise InvalidExpressionError(f"Cannot inline non-finite decimal {value}")
            return str(value)
        if isinstance(value, str):
            return self._quote_string(value)
        if isinstance(value, dt.datetime):
            return self._quote_string(value.isoformat(sep=" "))
        if isinstance(value, dt.date | dt.time):
            return self._quote_string(value.isoformat())
        if isinstance(value, uuid.UUID):
            return self._quote_string(str(value))
        if isinstance(value, bytes | bytearray | memoryview):
            return f"X'{bytes(value).hex().upper()}'"
        raise InvalidExpressionError(
            f"Cannot render a {type(value).__name__} as an inline literal"
        )

    def _quote_string(self, value: str) -> str:
        if self.escape_backslashes:
            value = value.replace("\\", "\\\\")
        return "'" + value.replace("'", "''") + "'"


DEFAULT = DialectConfig(name="default")

POSTGRES = DialectConfig(
    name="postgres",
    param_style=ParamStyle.NUMERIC_DOLLAR,
    supports_ilike=True,
    regex=RegexOperators(match="~", imatch="~*", not_match="!~", not_imatch="!~*"),
)

SQLITE = DialectConfig(
    name="sqlite",
    like_case_sensitive=False,
    boolean_literals=("1", "0"),
)

MYSQL = DialectConfig(
    name="mysql",
    quote_open="`",
    quote_close="`",
    param_style=ParamStyle.FORMAT,
    like_case_sensitive=False,
    case_sensitive_like_operator="LIKE BINARY",
    regex=RegexOperators(
        match="REGEXP BINARY",
        imatch="REGEXP",
        not_match="NOT REGEXP BINARY",
        not_imatch="NOT REGEXP",
    ),
    concat_operator=None,
    escape_backslashes=True,
)

MSSQL = DialectConfig(
    name="mssql",
    quote_open="[",
    quote_close="]",
    like_case_sensitive=False,
    concat_operator="+",
    boolean_literals=("1", "0"),
    limit_style=LimitStyle.OFFSET_FETCH,
)

ORACLE = DialectConfig(
    name="oracle",
    identifier_case=IdentifierCase.UPPER,
    param_style=ParamStyle.NUMERIC,
    boolean_literals=("1", "0"),
    limit_style=LimitStyle.OFFSET_FETCH,
)


_registry_lock = threading.Lock()
_DIALECTS: dict[str, DialectConfig] = {
    d.name: d for d in (DEFAULT, POSTGRES, SQLITE, MYSQL, MSSQL, ORACLE)
}
_ALIASES = {"postgresql": "postgres", "mariadb": "mysql", "sqlserver": "mssql"}


def register_dialect(config: DialectConfig, *, replace_existing: bool = False) -> None:
    """Make ``config`` available to :func:`get_dialect` under its name."""
    with _registry_lock:
        if config.name in _DIALECTS and not replace_existing:
            raise ValueError(f"Dialect '{config.name}' is already registered")
        _DIALECTS[config.name] = config


def get_dialect(name: str) -> DialectConfig:
    key = name.lower()
    key = _ALIASES.get(key, key)
    try:
        return _DIALECTS[key]
    except KeyError:
        raise DialectNotFoundError(name, list(_DIALECTS)) from None


def available_dialects() -> list[str]:
    return sorted(_DIALECTS)
