"""
Create-table-as-select orchestration.

Flow (one command):
  1) Reconcile the query output with the declared columns (pure; fails before any mutation).
  2) CHECK: does the target exist?
       - exists + ignore_if_exists  → EXISTS_OK: nothing to do
       - exists + not ignoring      → EXISTS_FAIL: TableAlreadyExistsError
  3) MATERIALIZE: register the table and resolve a writable handle.
       - registration fails → error propagates, nothing to undo
       - resolution fails   → ROLLED_BACK: drop the new table, re-raise the lookup error
  4) INSERT: insert-overwrite the reconciled plan into the handle.
       - ok     → DONE
       - failed → ROLLED_BACK: drop the new table, re-raise the insert's own error

Notes:
- The existence check and the registration are not atomic. A table created by someone
  else in between makes the strict registration fail; nothing is rolled back then.
- Fatal errors (see `errors.is_fatal`) skip the rollback and propagate directly.
- No retries anywhere.
"""

from __future__ import annotations

from dataclasses import dataclass

from pyspark.sql import Row

from src.ctas_engine.catalog.ports import Catalog, CatalogTableHandle
from src.ctas_engine.errors import TableAlreadyExistsError, is_fatal
from src.ctas_engine.execute.ports import InsertEngine, InsertOutcome
from src.ctas_engine.materializer import TableMaterializer
from src.ctas_engine.models import TableDescriptor
from src.ctas_engine.query import QueryPlan, ReconciledPlan
from src.ctas_engine.reconciler import SchemaReconciler
from src.enums import CtasState
from src.logger import LOGGER


@dataclass(frozen=True)
class CreateTableAsSelect:
    """
    Create a table and insert the query result into it.

    descriptor:
        The table to create, including storage format and partition columns.
    query:
        The query whose result populates the new table.
    ignore_if_exists:
        If True an existing table makes the command a no-op; otherwise it is an error.
    """

    descriptor: TableDescriptor
    query: QueryPlan
    ignore_if_exists: bool = False

    @property
    def arg_string(self) -> str:
        identifier = self.descriptor.identifier
        return (
            f"[Database:{identifier.database}, "
            f"TableName: {identifier.table}, "
            "InsertIntoHiveTable]"
        )

    def __str__(self) -> str:
        return f"{type(self).__name__} {self.arg_string}"


class CreateTableAsSelectOrchestrator:
    """
    Glue for reconcile → check → materialize → insert (→ rollback).

    This class does not do any SQL or Spark operations itself; it delegates to injected components.
    """

    def __init__(
        self,
        catalog: Catalog,
        insert_engine: InsertEngine,
        reconciler: SchemaReconciler | None = None,
        materializer: TableMaterializer | None = None,
    ) -> None:
        self._catalog = catalog
        self._insert_engine = insert_engine
        self._reconciler = reconciler or SchemaReconciler()
        self._materializer = materializer or TableMaterializer(catalog)

    # ----- public API -----

    def run(self, command: CreateTableAsSelect) -> tuple[Row, ...]:
        """Run the command once. Returns an empty result on success."""
        descriptor = command.descriptor
        LOGGER.info("Starting %s.", command)

        reconciled = self._reconciler.reconcile(descriptor, command.query)

        self._transition(descriptor, CtasState.CHECK)
        if self._catalog.exists(descriptor.identifier):
            if command.ignore_if_exists:
                self._transition(descriptor, CtasState.EXISTS_OK)
                return ()
            self._transition(descriptor, CtasState.EXISTS_FAIL)
            raise TableAlreadyExistsError(descriptor.identifier)

        self._transition(descriptor, CtasState.MATERIALIZE)
        prepared = self._materializer.register(descriptor, reconciled)
        try:
            handle = self._materializer.resolve(prepared)
        except Exception as error:
            if is_fatal(error):
                raise
            self._rollback(
                descriptor,
                f"Lookup of {descriptor.full_name} failed: {type(error).__name__}: {error}",
            )
            self._transition(descriptor, CtasState.ROLLED_BACK)
            raise

        self._transition(descriptor, CtasState.INSERT)
        outcome = self._insert(handle, reconciled)
        if not outcome.ok:
            self._rollback(descriptor, outcome.message)
            self._transition(descriptor, CtasState.ROLLED_BACK)
            raise outcome.error  # type: ignore[misc]

        self._transition(descriptor, CtasState.DONE)
        return ()

    # ----- steps -----

    def _insert(self, handle: CatalogTableHandle, reconciled: ReconciledPlan) -> InsertOutcome:
        """Submit the insert-overwrite and return its outcome as a value."""
        try:
            self._insert_engine.execute_insert(
                handle,
                {},
                reconciled,
                overwrite=True,
                if_not_exists=False,
            )
        except Exception as error:
            if is_fatal(error):
                raise
            return InsertOutcome.failed(
                error, f"Insert into {handle.full_name} failed: {type(error).__name__}: {error}"
            )
        return InsertOutcome.succeeded(f"Inserted query result into {handle.full_name}")

    def _rollback(self, descriptor: TableDescriptor, reason: str) -> None:
        """Drop the table created by this run. Absent tables are not an error."""
        LOGGER.warning("%s; dropping %s.", reason, descriptor.full_name)
        try:
            self._catalog.drop_table(descriptor.identifier, ignore_if_not_exists=True, purge=False)
        except Exception as error:
            if is_fatal(error):
                raise
            # The error that triggered the rollback is what the caller sees.
            LOGGER.exception("Rollback of %s failed.", descriptor.full_name)

    @staticmethod
    def _transition(descriptor: TableDescriptor, state: CtasState) -> None:
        LOGGER.info("%s: %s", descriptor.full_name, state.value)
