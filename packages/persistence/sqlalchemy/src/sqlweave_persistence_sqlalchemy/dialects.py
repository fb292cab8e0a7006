"""Map SQLAlchemy dialects onto sqlweave ``DialectConfig`` presets."""

from __future__ import annotations

from typing import Any

from sqlweave_expressions import (
    DEFAULT,
    MSSQL,
    MYSQL,
    ORACLE,
    POSTGRES,
    SQLITE,
    DialectConfig,
    ParamStyle,
    UnsupportedFeatureError,
)

DIALECTS_BY_NAME: dict[str, DialectConfig] = {
    "postgresql": POSTGRES,
    "sqlite": SQLITE,
    "mysql": MYSQL,
    "mariadb": MYSQL,
    "mssql": MSSQL,
    "oracle": ORACLE,
}

# Positional styles only: the executor always passes a tuple.
PARAM_STYLES: dict[str, ParamStyle] = {
    "qmark": ParamStyle.QMARK,
    "format": ParamStyle.FORMAT,
    "pyformat": ParamStyle.FORMAT,
    "numeric": ParamStyle.NUMERIC,
    "named": ParamStyle.NUMERIC,
    "numeric_dollar": ParamStyle.NUMERIC_DOLLAR,
}


def dialect_for(bind: Any) -> DialectConfig:
    """
    The preset for ``bind``'s database, using the driver's parameter style.

    ``bind`` may be an engine, a connection or a SQLAlchemy ``Dialect``.
    Unknown databases get ``DEFAULT`` quoting rules.

    Raises:
        UnsupportedFeatureError: The driver's parameter style has no
            positional equivalent.
    """
    sa_dialect = getattr(bind, "dialect", bind)
    config = DIALECTS_BY_NAME.get(sa_dialect.name, DEFAULT)
    style = PARAM_STYLES.get(sa_dialect.paramstyle)
    if style is None:
        raise UnsupportedFeatureError(
            f"the '{sa_dialect.paramstyle}' parameter style", sa_dialect.name
        )
    return config.with_param_style(style)
