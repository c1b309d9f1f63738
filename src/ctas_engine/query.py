"""
Query plans: the source side of a CREATE TABLE AS SELECT.

- QueryPlan: protocol for "a query whose output populates the table".
- DataFrameQuery / SqlQuery: Spark-backed plans.
- ReconciledPlan: a plan wrapped in a projection matching the target column order.

Plans are never mutated; reconciliation wraps, and the projection is only applied
when the DataFrame is materialised for the insert.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from functools import cached_property
from typing import Protocol

from pyspark.sql import DataFrame, SparkSession

from src.ctas_engine.identifiers import quote_identifier
from src.ctas_engine.models import Column


class QueryPlan(Protocol):
    """Anything exposing ordered output columns and a DataFrame to read them from."""

    @property
    def output_columns(self) -> tuple[Column, ...]: ...

    def to_dataframe(self) -> DataFrame: ...


@dataclass(frozen=True)
class DataFrameQuery:
    """A QueryPlan over an already-built DataFrame."""

    dataframe: DataFrame

    @property
    def output_columns(self) -> tuple[Column, ...]:
        return tuple(Column.from_struct_field(f) for f in self.dataframe.schema.fields)

    def to_dataframe(self) -> DataFrame:
        return self.dataframe


class SqlQuery:
    """A QueryPlan over a SQL SELECT statement, analysed on first use."""

    def __init__(self, spark: SparkSession, sql_text: str) -> None:
        self.spark = spark
        self.sql_text = sql_text

    @cached_property
    def _dataframe(self) -> DataFrame:
        return self.spark.sql(self.sql_text)

    @property
    def output_columns(self) -> tuple[Column, ...]:
        return tuple(Column.from_struct_field(f) for f in self._dataframe.schema.fields)

    def to_dataframe(self) -> DataFrame:
        return self._dataframe

    def __repr__(self) -> str:
        return f"SqlQuery({self.sql_text!r})"


@dataclass(frozen=True)
class ReconciledPlan:
    """`query` projected onto `columns`, which are in target-table order."""

    query: QueryPlan
    columns: tuple[Column, ...] = field(default_factory=tuple)

    @property
    def output_columns(self) -> tuple[Column, ...]:
        return self.columns

    @property
    def column_names(self) -> tuple[str, ...]:
        return tuple(column.name for column in self.columns)

    def to_dataframe(self) -> DataFrame:
        """Select the reconciled columns, by name, in target order."""
        dataframe = self.query.to_dataframe()
        return dataframe.select(*[quote_identifier(name) for name in self.column_names])
