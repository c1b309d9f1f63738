"""
SparkInsertEngine

Writes a reconciled plan into a resolved Hive table with Spark SQL:

  1) enable dynamic partitioning when any partition value is not static
  2) register the reconciled DataFrame as a uniquely named temp view
  3) INSERT OVERWRITE|INTO TABLE ... SELECT ... FROM <view>
  4) drop the temp view and restore the session conf, whatever happened in 3)

Errors raised by the INSERT are not caught here. A failed view drop is only logged.
"""

from __future__ import annotations

import uuid
from collections.abc import Mapping

from pyspark.sql import SparkSession

from src import settings
from src.constants import DYNAMIC_PARTITION_CONF, DYNAMIC_PARTITION_MODE_CONF, TEMP_VIEW_PREFIX
from src.ctas_engine.catalog.ddl import render_insert
from src.ctas_engine.catalog.ports import CatalogTableHandle
from src.ctas_engine.query import ReconciledPlan
from src.logger import LOGGER


class SparkInsertEngine:
    """Insert-overwrite (or append) a ReconciledPlan into a catalog table."""

    def __init__(self, spark: SparkSession, dynamic_partition_mode: str | None = None) -> None:
        self.spark = spark
        self.dynamic_partition_mode = dynamic_partition_mode or settings.DYNAMIC_PARTITION_MODE

    def execute_insert(
        self,
        target: CatalogTableHandle,
        partition_spec: Mapping[str, str | None],
        plan: ReconciledPlan,
        *,
        overwrite: bool,
        if_not_exists: bool,
    ) -> None:
        view_name = f"{TEMP_VIEW_PREFIX}{uuid.uuid4().hex}"
        sql = render_insert(
            target.identifier,
            view_name,
            plan.column_names,
            partition_column_names=target.partition_column_names,
            partition_spec=partition_spec,
            overwrite=overwrite,
            if_not_exists=if_not_exists,
        )
        if self._has_dynamic_partitions(target, partition_spec):
            previous_conf = self._set_conf(
                {
                    DYNAMIC_PARTITION_CONF: "true",
                    DYNAMIC_PARTITION_MODE_CONF: str(self.dynamic_partition_mode),
                }
            )
        else:
            previous_conf = {}

        try:
            plan.to_dataframe().createOrReplaceTempView(view_name)
            try:
                LOGGER.debug("Executing: %s", sql)
                self.spark.sql(sql).collect()
            finally:
                self._drop_view(view_name)
        finally:
            self._restore_conf(previous_conf)

    # ---------- helpers ----------

    @staticmethod
    def _has_dynamic_partitions(
        target: CatalogTableHandle, partition_spec: Mapping[str, str | None]
    ) -> bool:
        static = {k.lower() for k, v in partition_spec.items() if v is not None}
        return any(name.lower() not in static for name in target.partition_column_names)

    def _set_conf(self, values: Mapping[str, str]) -> dict[str, str | None]:
        """Apply `values` to the session conf; return what they replaced (None = unset)."""
        previous = {key: self.spark.conf.get(key, None) for key in values}
        for key, value in values.items():
            self.spark.conf.set(key, value)
        return previous

    def _restore_conf(self, previous: Mapping[str, str | None]) -> None:
        for key, value in previous.items():
            if value is None:
                self.spark.conf.unset(key)
            else:
                self.spark.conf.set(key, value)

    def _drop_view(self, view_name: str) -> None:
        """Drop the source view; a failure here never replaces the insert's own error."""
        try:
            self.spark.catalog.dropTempView(view_name)
        except Exception:
            LOGGER.exception("Could not drop temporary view %s.", view_name)
