"""
Schema Reconciler

Aligns the output columns of a query with the declared column order of the target
table. Reconciliation only reorders: every declared column must be produced by the
query exactly once and the query may not produce anything undeclared.

When the descriptor declares no columns, the table takes its shape from the query:
the query's non-partition columns keep their order and the declared partition
columns move to the end, in partition order.

Pure: no catalog access, no type checks (coercion is the engine's job).
"""

from __future__ import annotations

from collections.abc import Sequence

from src import settings
from src.ctas_engine.errors import SchemaMismatchError
from src.ctas_engine.identifiers import normalize_identifier
from src.ctas_engine.models import Column, TableDescriptor
from src.ctas_engine.query import QueryPlan, ReconciledPlan


class SchemaReconciler:
    """Wrap a QueryPlan in a projection whose output order matches the target table."""

    def __init__(self, case_sensitive: bool | None = None) -> None:
        self.case_sensitive = settings.CASE_SENSITIVE if case_sensitive is None else case_sensitive

    def reconcile(self, descriptor: TableDescriptor, query: QueryPlan) -> ReconciledPlan:
        """
        Return `query` projected onto the descriptor's column order.

        Raises:
            SchemaMismatchError: a declared (typically partition) column is missing from
            or ambiguous in the query output, or the query produces undeclared columns.
        """
        output = tuple(query.output_columns)
        if descriptor.columns:
            target_names = descriptor.column_names
        else:
            target_names = self._inferred_order(output, descriptor.partition_column_names)

        reordered = tuple(self._lookup(output, name) for name in target_names)
        self._check_nothing_dropped(output, target_names)
        return ReconciledPlan(query=query, columns=reordered)

    # ---------- helpers ----------

    def _key(self, name: str) -> str:
        return normalize_identifier(name, self.case_sensitive)

    def _lookup(self, output: Sequence[Column], name: str) -> Column:
        matches = [column for column in output if self._key(column.name) == self._key(name)]
        if not matches:
            raise SchemaMismatchError.missing(name)
        if len(matches) > 1:
            raise SchemaMismatchError.ambiguous(name, [m.name for m in matches])
        return matches[0]

    def _inferred_order(
        self, output: Sequence[Column], partition_names: Sequence[str]
    ) -> tuple[str, ...]:
        partition_keys = {self._key(name) for name in partition_names}
        data_names = [c.name for c in output if self._key(c.name) not in partition_keys]
        return (*data_names, *partition_names)

    def _check_nothing_dropped(self, output: Sequence[Column], target_names: Sequence[str]) -> None:
        wanted = {self._key(name) for name in target_names}
        extra = [c.name for c in output if self._key(c.name) not in wanted]
        if extra:
            raise SchemaMismatchError.unexpected(extra)
