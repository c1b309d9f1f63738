"""
Engine: high-level entry point for the CTAS engine.

Responsibilities
----------------
- Wire default components (catalog, insert engine, reconciler, materializer).
- Expose a single entry point per command:
    - run(command)
    - create_table_as_select(descriptor, query, ignore_if_exists)

Notes:
-----
- No SQL or Spark logic here; work is delegated to injected components.
- Defaults are provided, but everything can be overridden for testing or custom behaviour.
"""

from __future__ import annotations

from pyspark.sql import DataFrame, Row, SparkSession

from src.ctas_engine.catalog.ports import Catalog
from src.ctas_engine.catalog.spark_catalog import SparkCatalog
from src.ctas_engine.execute.ports import InsertEngine
from src.ctas_engine.execute.spark_insert import SparkInsertEngine
from src.ctas_engine.materializer import TableMaterializer
from src.ctas_engine.models import TableDescriptor
from src.ctas_engine.orchestrator import CreateTableAsSelect, CreateTableAsSelectOrchestrator
from src.ctas_engine.query import DataFrameQuery, QueryPlan, SqlQuery
from src.ctas_engine.reconciler import SchemaReconciler


class Engine:
    """
    High-level entry point for the CTAS engine.

    You can:
      - pass your own components (for custom behaviour), or
      - rely on defaults (simple, batteries included).
    """

    def __init__(
        self,
        spark: SparkSession,
        catalog: Catalog | None = None,
        insert_engine: InsertEngine | None = None,
        reconciler: SchemaReconciler | None = None,
        materializer: TableMaterializer | None = None,
    ) -> None:
        self.spark = spark

        self.catalog = catalog or SparkCatalog(spark)
        self.insert_engine = insert_engine or SparkInsertEngine(spark)
        self.reconciler = reconciler or SchemaReconciler()
        self.materializer = materializer or TableMaterializer(self.catalog)

        self.orchestrator = CreateTableAsSelectOrchestrator(
            catalog=self.catalog,
            insert_engine=self.insert_engine,
            reconciler=self.reconciler,
            materializer=self.materializer,
        )

    def run(self, command: CreateTableAsSelect) -> tuple[Row, ...]:
        return self.orchestrator.run(command)

    def create_table_as_select(
        self,
        descriptor: TableDescriptor,
        query: QueryPlan | DataFrame | str,
        ignore_if_exists: bool = False,
    ) -> tuple[Row, ...]:
        """Create `descriptor` from `query` (a QueryPlan, a DataFrame or SELECT text)."""
        command = CreateTableAsSelect(
            descriptor=descriptor,
            query=self._as_query_plan(query),
            ignore_if_exists=ignore_if_exists,
        )
        return self.run(command)

    def _as_query_plan(self, query: QueryPlan | DataFrame | str) -> QueryPlan:
        if isinstance(query, str):
            return SqlQuery(self.spark, query)
        if isinstance(query, DataFrame):
            return DataFrameQuery(query)
        return query
