"""Dialect descriptors, registry and inline literal escaping."""

from __future__ import annotations

import dataclasses
import datetime as dt
import uuid
from decimal import Decimal

import pytest

from sqlweave_expressions import (
    DEFAULT,
    MSSQL,
    MYSQL,
    ORACLE,
    POSTGRES,
    SQLITE,
    DialectConfig,
    DialectNotFoundError,
    InvalidExpressionError,
    ParamStyle,
    available_dialects,
    get_dialect,
    register_dialect,
)


def test_presets_are_registered():
    assert {"default", "postgres", "sqlite", "mysql", "mssql", "oracle"} <= set(
        available_dialects()
    )
    assert get_dialect("postgres") is POSTGRES
    assert get_dialect("SQLite") is SQLITE


def test_driver_names_are_aliased():
    assert get_dialect("postgresql") is POSTGRES
    assert get_dialect("mariadb") is MYSQL


def test_unknown_dialect_suggests_close_names():
    with pytest.raises(DialectNotFoundError) as exc_info:
        get_dialect("postgress")
    assert "postgres" in exc_info.value.suggestions
    assert exc_info.value.to_dict()["error"] == "DIALECT_NOT_FOUND"


def test_register_dialect():
    custom = DialectConfig(name="test-custom-dialect", quote_open="`", quote_close="`")
    register_dialect(custom)
    assert get_dialect("test-custom-dialect") is custom
    with pytest.raises(ValueError, match="already registered"):
        register_dialect(custom)
    replacement = dataclasses.replace(custom, supports_ilike=True)
    register_dialect(replacement, replace_existing=True)
    assert get_dialect("test-custom-dialect") is replacement


def test_dialects_are_immutable():
    with pytest.raises(dataclasses.FrozenInstanceError):
        DEFAULT.supports_ilike = True  # type: ignore[misc]


def test_invalid_like_escape():
    with pytest.raises(ValueError):
        DialectConfig(name="x", like_escape="\\\\")


@pytest.mark.parametrize(
    ("style", "expected"),
    [
        (ParamStyle.QMARK, ("?", "?")),
        (ParamStyle.FORMAT, ("%s", "%s")),
        (ParamStyle.NUMERIC, (":1", ":2")),
        (ParamStyle.NUMERIC_DOLLAR, ("$1", "$2")),
    ],
)
def test_placeholders(style, expected):
    dialect = DEFAULT.with_param_style(style)
    assert (dialect.placeholder(1), dialect.placeholder(2)) == expected


def test_with_param_style_accepts_strings():
    assert POSTGRES.with_param_style("format").placeholder(3) == "%s"
    assert POSTGRES.param_style is ParamStyle.NUMERIC_DOLLAR


def test_quote_identifier():
    assert DEFAULT.quote_identifier("a") == '"a"'
    assert MSSQL.quote_identifier("a]b") == "[a]]b]"
    assert ORACLE.quote_identifier("name") == '"NAME"'
    assert DEFAULT.quote_identifier("*") == "*"


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (None, "NULL"),
        (True, "TRUE"),
        (False, "FALSE"),
        (42, "42"),
        (1.5, "1.5"),
        (Decimal("1.50"), "1.50"),
        ("it's", "'it''s'"),
        (dt.date(2024, 1, 2), "'2024-01-02'"),
        (dt.datetime(2024, 1, 2, 3, 4, 5), "'2024-01-02 03:04:05'"),
        (dt.time(3, 4, 5), "'03:04:05'"),
        (b"\x01\xff", "X'01FF'"),
        (
            uuid.UUID("12345678-1234-5678-1234-567812345678"),
            "'12345678-1234-5678-1234-567812345678'",
        ),
    ],
)
def test_literal_escaping(value, expected):
    assert DEFAULT.literal(value) == expected


def test_mysql_doubles_backslashes():
    assert MYSQL.literal("a\\b") == "'a\\\\b'"
    assert DEFAULT.literal("a\\b") == "'a\\b'"


def test_boolean_literal_spellings():
    assert MSSQL.literal(True) == "1"
    assert SQLITE.literal(False) == "0"


@pytest.mark.parametrize("value", [float("nan"), float("inf"), Decimal("NaN"), object()])
def test_unrenderable_literals(value):
    with pytest.raises(InvalidExpressionError):
        DEFAULT.literal(value)
