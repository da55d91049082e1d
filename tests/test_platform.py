import datetime

import pytest

from spannerdbal import ParameterType, SpannerPlatform


@pytest.fixture
def platform():
    return SpannerPlatform()


@pytest.mark.parametrize(
    "sql, expected",
    [
        ("CREATE TABLE x", True),
        ("DROP TABLE x", True),
        ("ALTER TABLE x", True),
        ("   create table x", True),
        ("\n\tDrop INDEX idx", True),
        ("AlTeR TABLE x ADD COLUMN y INT64", True),
        ("SELECT * FROM x", False),
        ("DELETE FROM x WHERE id = 1", False),
        ("CREATED_AT", False),
        ("DROPPED", False),
        ("TRUNCATE TABLE x", False),
        ("COMMENT ON TABLE x IS 'y'", False),
        ("", False),
    ],
)
def test_is_ddl_statement(platform, sql, expected):
    assert platform.is_ddl_statement(sql) is expected


@pytest.mark.parametrize(
    "value, type_, expected",
    [
        ("abc", ParameterType.STRING, '"abc"'),
        (5, ParameterType.INTEGER, "5"),
        (1.5, ParameterType.INTEGER, "1.5"),
        ("abc", ParameterType.BINARY, '"abc"'),
        (b"ab\x00", ParameterType.BINARY, 'B"ab\\x00"'),
        (True, ParameterType.BOOLEAN, "TRUE"),
        (False, ParameterType.BOOLEAN, "FALSE"),
        (None, ParameterType.STRING, "NULL"),
        ('a"b', ParameterType.STRING, '"a\\"b"'),
        ("back\\slash", ParameterType.STRING, '"back\\\\slash"'),
        (b'q"\\', ParameterType.BINARY, 'B"q\\"\\\\"'),
    ],
)
def test_quote(platform, value, type_, expected):
    assert platform.quote(value, type_) == expected


def test_register_encoder(platform):
    platform.register_encoder(ParameterType.STRING, lambda v: "'" + v.replace("'", "\\'") + "'")
    assert platform.quote("it's", ParameterType.STRING) == "'it\\'s'"
    assert platform.where_clause({"name": "it's"}) == "name = 'it\\'s'"


def test_where_clause(platform):
    assert platform.where_clause({"id": 1}) == "id = 1"
    assert platform.where_clause({"a": "x", "b": 2, "c": None}) == 'a = "x" AND b = 2 AND c IS NULL'
    assert platform.where_clause({"flag": True}) == "flag = TRUE"
    assert platform.where_clause({}) == ""


def test_where_clause_keeps_mapping_order(platform):
    assert platform.where_clause({"z": 1, "a": 2}) == "z = 1 AND a = 2"


def test_set_clause(platform):
    assert platform.set_clause({"name": "n", "count": 4, "note": None}) == 'name = "n", count = 4, note = NULL'


def test_is_read_statement(platform):
    assert platform.is_read_statement("SELECT 1")
    assert platform.is_read_statement("  with t AS (SELECT 1) SELECT * FROM t")
    assert not platform.is_read_statement("UPDATE t SET a = 1 WHERE true")
    assert not platform.is_read_statement("INSERT INTO t (a) VALUES (1)")


@pytest.mark.parametrize(
    "value, expected",
    [
        (datetime.date(2024, 1, 2), 'DATE "2024-01-02"'),
        (datetime.datetime(2024, 1, 2, 3, 4, 5), 'TIMESTAMP "2024-01-02T03:04:05Z"'),
        (
            datetime.datetime(2024, 1, 2, 3, 4, 5, 600, tzinfo=datetime.timezone.utc),
            'TIMESTAMP "2024-01-02T03:04:05.000600+00:00"',
        ),
    ],
)
def test_quote_value_dates(platform, value, expected):
    assert platform.quote_value(value) == expected


def test_quote_declared_date_types(platform):
    assert platform.quote("2024-01-02", ParameterType.DATE) == 'DATE "2024-01-02"'
    assert platform.quote(datetime.datetime(2024, 1, 2, 9), ParameterType.DATE) == 'DATE "2024-01-02"'
    assert platform.quote(datetime.date(2024, 1, 2), ParameterType.TIMESTAMP) == 'TIMESTAMP "2024-01-02T00:00:00Z"'


def test_update_sql_with_dates(platform):
    sql = platform.update_sql(
        "users",
        {"seen": datetime.datetime(2024, 1, 2, 3, 4, 5)},
        {"day": datetime.date(2024, 1, 2)},
    )
    assert sql == 'UPDATE users SET seen = TIMESTAMP "2024-01-02T03:04:05Z" WHERE day = DATE "2024-01-02"'
