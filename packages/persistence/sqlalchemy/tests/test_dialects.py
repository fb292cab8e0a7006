from types import SimpleNamespace

import pytest
from sqlalchemy.dialects.mysql import pymysql
from sqlalchemy.dialects.postgresql import psycopg2
from sqlalchemy.dialects.sqlite import pysqlite

from sqlweave_expressions import (
    DEFAULT,
    SQLITE,
    ParamStyle,
    UnsupportedFeatureError,
)
from sqlweave_persistence_sqlalchemy import dialect_for


def test_sqlite_maps_to_the_preset():
    assert dialect_for(pysqlite.dialect()) == SQLITE


def test_driver_param_style_wins_over_the_preset():
    postgres = dialect_for(psycopg2.dialect())

    assert postgres.name == "postgres"
    assert postgres.param_style is ParamStyle.FORMAT


def test_mysql_format_style():
    mysql = dialect_for(pymysql.dialect())

    assert mysql.name == "mysql"
    assert mysql.param_style is ParamStyle.FORMAT
    assert mysql.quote_open == "`"


def test_engine_like_objects_are_unwrapped():
    engine = SimpleNamespace(dialect=SimpleNamespace(name="mariadb", paramstyle="qmark"))

    mariadb = dialect_for(engine)

    assert mariadb.name == "mysql"
    assert mariadb.param_style is ParamStyle.QMARK


def test_unknown_database_gets_default_rules():
    config = dialect_for(SimpleNamespace(name="firebird", paramstyle="qmark"))

    assert config == DEFAULT


def test_unsupported_param_style():
    with pytest.raises(UnsupportedFeatureError, match="weird"):
        dialect_for(SimpleNamespace(name="sqlite", paramstyle="weird"))
