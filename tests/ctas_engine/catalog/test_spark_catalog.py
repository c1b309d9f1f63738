from types import SimpleNamespace

import pyspark.sql.types as T
import pytest

import src.ctas_engine.catalog.spark_catalog as catalog_mod
from src.ctas_engine.catalog.spark_catalog import SparkCatalog
from src.ctas_engine.errors import (
    TableAlreadyExistsError,
    TableNotFoundError,
    UnexpectedCatalogStateError,
)
from src.ctas_engine.identifiers import TableIdentifier
from src.ctas_engine.models import Column, StorageFormat, TableDescriptor
from src.enums import TableType

IDENT = TableIdentifier("db", "tbl")


# ---------- fakes ----------


class FakeResult:
    def collect(self):
        return []


class FakeCatalogApi:
    def __init__(self):
        self.tables: dict[str, SimpleNamespace] = {}
        self.columns: dict[str, list[SimpleNamespace]] = {}

    def tableExists(self, name):
        return name in self.tables

    def getTable(self, name):
        return self.tables[name]

    def listColumns(self, name):
        return self.columns[name]


class FakeSpark:
    def __init__(self):
        self.catalog = FakeCatalogApi()
        self.statements: list[str] = []
        self.sql_exc: Exception | None = None

    def sql(self, statement):
        self.statements.append(statement)
        if self.sql_exc:
            raise self.sql_exc
        return FakeResult()


class FakeAnalysisException(Exception):
    def __init__(self, message, error_class=None):
        super().__init__(message)
        self._error_class = error_class

    def getErrorClass(self):
        return self._error_class


def register(spark, name="db.tbl", table_type="MANAGED", temporary=False, partitions=("day",)):
    spark.catalog.tables[name] = SimpleNamespace(tableType=table_type, isTemporary=temporary)
    spark.catalog.columns[name] = [
        SimpleNamespace(name="id", isPartition=False),
        *[SimpleNamespace(name=p, isPartition=True) for p in partitions],
    ]


def make_descriptor():
    return TableDescriptor(
        identifier=IDENT,
        columns=(Column("id", T.IntegerType()), Column("day", T.StringType())),
        partition_columns=("day",),
        storage=StorageFormat().with_defaults(),
    )


# ---------- tests ----------


def test_exists_uses_unquoted_name():
    spark = FakeSpark()
    register(spark)
    assert SparkCatalog(spark).exists(IDENT) is True
    assert SparkCatalog(spark).exists(TableIdentifier("db", "other")) is False


def test_create_table_runs_rendered_ddl_eagerly():
    spark = FakeSpark()
    SparkCatalog(spark).create_table(make_descriptor(), ignore_if_exists=False)

    assert len(spark.statements) == 1
    assert spark.statements[0].startswith("CREATE TABLE `db`.`tbl` (`id` int) PARTITIONED BY")


def test_create_table_strict_raises_when_table_exists():
    spark = FakeSpark()
    register(spark)

    with pytest.raises(TableAlreadyExistsError):
        SparkCatalog(spark).create_table(make_descriptor(), ignore_if_exists=False)
    assert spark.statements == []


def test_create_table_translates_already_exists_from_racing_creator(monkeypatch):
    monkeypatch.setattr(catalog_mod, "AnalysisException", FakeAnalysisException)
    spark = FakeSpark()
    spark.sql_exc = FakeAnalysisException("[TABLE_OR_VIEW_ALREADY_EXISTS] ...", "TABLE_OR_VIEW_ALREADY_EXISTS")

    with pytest.raises(TableAlreadyExistsError) as excinfo:
        SparkCatalog(spark).create_table(make_descriptor(), ignore_if_exists=False)
    assert excinfo.value.__cause__ is spark.sql_exc


def test_create_table_other_analysis_errors_propagate(monkeypatch):
    monkeypatch.setattr(catalog_mod, "AnalysisException", FakeAnalysisException)
    spark = FakeSpark()
    spark.sql_exc = FakeAnalysisException("[SCHEMA_NOT_FOUND] db", "SCHEMA_NOT_FOUND")

    with pytest.raises(FakeAnalysisException, match="SCHEMA_NOT_FOUND"):
        SparkCatalog(spark).create_table(make_descriptor(), ignore_if_exists=False)


def test_lookup_builds_handle_with_partition_columns():
    spark = FakeSpark()
    register(spark, table_type="EXTERNAL")

    handle = SparkCatalog(spark).lookup(IDENT)

    assert handle.identifier == IDENT
    assert handle.table_type is TableType.EXTERNAL
    assert handle.column_names == ("id", "day")
    assert handle.partition_column_names == ("day",)


def test_lookup_reports_views_and_temporaries_as_such():
    spark = FakeSpark()
    register(spark, table_type="VIEW", partitions=())
    assert SparkCatalog(spark).lookup(IDENT).table_type is TableType.VIEW

    register(spark, table_type=None, temporary=True, partitions=())
    assert SparkCatalog(spark).lookup(IDENT).table_type is TableType.TEMPORARY


def test_lookup_unknown_type_and_missing_table():
    spark = FakeSpark()
    with pytest.raises(TableNotFoundError):
        SparkCatalog(spark).lookup(IDENT)

    register(spark, table_type="MATERIALIZED_VIEW")
    with pytest.raises(UnexpectedCatalogStateError, match="MATERIALIZED_VIEW"):
        SparkCatalog(spark).lookup(IDENT)


def test_drop_table_ignoring_absent_table_is_silent():
    spark = FakeSpark()
    SparkCatalog(spark).drop_table(IDENT, ignore_if_not_exists=True, purge=False)
    assert spark.statements == ["DROP TABLE IF EXISTS `db`.`tbl`"]


def test_drop_table_strict_on_absent_table_raises():
    spark = FakeSpark()
    with pytest.raises(TableNotFoundError):
        SparkCatalog(spark).drop_table(IDENT, ignore_if_not_exists=False, purge=True)
    assert spark.statements == []
