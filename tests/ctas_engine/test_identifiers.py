import pytest

import src.ctas_engine.identifiers as ids
from src.ctas_engine.identifiers import (
    TableIdentifier,
    format_table_identifier,
    normalize_identifier,
    parse_table_identifier,
    quote_identifier,
    quote_qualified_name,
    quote_table_identifier,
)


def test_quote_identifier_doubles_backticks():
    assert quote_identifier("a`b") == "`a``b`"


def test_quote_qualified_name_strips_existing_backticks():
    assert quote_qualified_name("`db`", " tbl ") == "`db`.`tbl`"


@pytest.mark.parametrize("parts", [(), ("db", ""), ("db", None)])
def test_quote_qualified_name_rejects_empty_parts(parts):
    with pytest.raises(ValueError):
        quote_qualified_name(*parts)


def test_quote_and_format_two_and_three_part_names():
    two = TableIdentifier("db", "tbl")
    three = TableIdentifier("db", "tbl", catalog="spark_catalog")

    assert quote_table_identifier(two) == "`db`.`tbl`"
    assert quote_table_identifier(three) == "`spark_catalog`.`db`.`tbl`"
    assert format_table_identifier(three) == "spark_catalog.db.tbl"
    assert str(two) == "db.tbl"


def test_parse_table_identifier_variants():
    assert parse_table_identifier("`db`.`tbl`") == TableIdentifier("db", "tbl")
    assert parse_table_identifier("c.db.tbl") == TableIdentifier("db", "tbl", catalog="c")
    assert parse_table_identifier("tbl", default_database="staging") == TableIdentifier(
        "staging", "tbl"
    )


def test_parse_bare_name_uses_settings_default_database(monkeypatch):
    monkeypatch.setattr(ids.settings, "DEFAULT_DATABASE", "analytics")
    assert parse_table_identifier("tbl") == TableIdentifier("analytics", "tbl")


@pytest.mark.parametrize("bad", ["", "a..b", "a.b.c.d", " . "])
def test_parse_table_identifier_rejects_malformed(bad):
    with pytest.raises(ValueError):
        parse_table_identifier(bad)


def test_normalize_identifier():
    assert normalize_identifier("Day", case_sensitive=False) == "day"
    assert normalize_identifier("Day", case_sensitive=True) == "Day"
