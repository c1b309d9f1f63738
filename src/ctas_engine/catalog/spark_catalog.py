"""
SparkCatalog

Catalog adapter over a Hive-enabled SparkSession.

- Existence and resolution go through `spark.catalog`.
- Registration and drop render SQL via `catalog.ddl` and execute it eagerly so
  errors surface at the call site (not lazily on a later action).
"""

from __future__ import annotations

from pyspark.errors import AnalysisException
from pyspark.sql import SparkSession

from src.ctas_engine.catalog.ddl import render_create_table, render_drop_table
from src.ctas_engine.catalog.ports import CatalogTableHandle
from src.ctas_engine.errors import (
    TableAlreadyExistsError,
    TableNotFoundError,
    UnexpectedCatalogStateError,
)
from src.ctas_engine.identifiers import TableIdentifier, format_table_identifier
from src.ctas_engine.models import TableDescriptor
from src.enums import TableType
from src.logger import LOGGER

_ALREADY_EXISTS_ERROR_CLASSES = frozenset({"TABLE_OR_VIEW_ALREADY_EXISTS"})


class SparkCatalog:
    """Read and mutate the Spark session catalog for one table at a time."""

    def __init__(self, spark: SparkSession) -> None:
        self.spark = spark

    # ---------- reads ----------

    def exists(self, identifier: TableIdentifier) -> bool:
        """Return True if the table exists in the catalog."""
        return bool(self.spark.catalog.tableExists(format_table_identifier(identifier)))

    def lookup(self, identifier: TableIdentifier) -> CatalogTableHandle:
        """
        Resolve `identifier` to a handle carrying its type and column layout.

        Raises:
            TableNotFoundError: the table is not registered.
            UnexpectedCatalogStateError: the catalog reports a type this engine does not know.
        """
        if not self.exists(identifier):
            raise TableNotFoundError(identifier)

        name = format_table_identifier(identifier)
        table = self.spark.catalog.getTable(name)
        columns = self.spark.catalog.listColumns(name)
        return CatalogTableHandle(
            identifier=identifier,
            table_type=self._table_type(identifier, table.tableType, table.isTemporary),
            column_names=tuple(c.name for c in columns),
            partition_column_names=tuple(c.name for c in columns if c.isPartition),
        )

    # ---------- writes ----------

    def create_table(self, descriptor: TableDescriptor, *, ignore_if_exists: bool) -> None:
        """
        Register `descriptor` in the catalog.

        Raises:
            TableAlreadyExistsError: the table exists and `ignore_if_exists` is False,
            including when another session created it after our existence check.
        """
        identifier = descriptor.identifier
        if not ignore_if_exists and self.exists(identifier):
            raise TableAlreadyExistsError(identifier)

        sql = render_create_table(descriptor, ignore_if_exists=ignore_if_exists)
        try:
            self._run(sql)
        except AnalysisException as error:
            if _is_already_exists(error):
                raise TableAlreadyExistsError(identifier) from error
            raise

    def drop_table(
        self, identifier: TableIdentifier, *, ignore_if_not_exists: bool, purge: bool
    ) -> None:
        """
        Drop the table definition (and managed data).

        Raises:
            TableNotFoundError: the table is absent and `ignore_if_not_exists` is False.
        """
        if not ignore_if_not_exists and not self.exists(identifier):
            raise TableNotFoundError(identifier)
        self._run(render_drop_table(identifier, if_exists=ignore_if_not_exists, purge=purge))

    # ---------- helpers ----------

    def _run(self, sql_text: str) -> None:
        """Execute the SQL immediately so catalog errors surface now."""
        LOGGER.debug("Executing: %s", sql_text)
        self.spark.sql(sql_text).collect()

    @staticmethod
    def _table_type(
        identifier: TableIdentifier, raw_type: str | None, is_temporary: bool
    ) -> TableType:
        if is_temporary:
            return TableType.TEMPORARY
        try:
            return TableType(str(raw_type).upper())
        except ValueError:
            raise UnexpectedCatalogStateError(
                identifier, f"unknown table type {raw_type!r}"
            ) from None


def _is_already_exists(error: AnalysisException) -> bool:
    error_class = error.getErrorClass() if hasattr(error, "getErrorClass") else None
    if error_class in _ALREADY_EXISTS_ERROR_CLASSES:
        return True
    return "already exists" in str(error).lower()
