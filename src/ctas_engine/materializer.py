"""
TableMaterializer

Turns a declared TableDescriptor into a registered, writable table:

  1) fill unset storage formats with the plain-text defaults
  2) take the column list from the reconciled query when none was declared
  3) check the partition layout
  4) register strictly (ignore_if_exists=False)
  5) resolve the identifier back to a concrete table handle

This is the only component that adds catalog entries. The caller guarantees the
table did not exist when it decided to materialize.
"""

from __future__ import annotations

from src import settings
from src.ctas_engine.catalog.ports import Catalog, CatalogTableHandle
from src.ctas_engine.errors import UnexpectedCatalogStateError
from src.ctas_engine.models import TableDescriptor
from src.ctas_engine.query import ReconciledPlan
from src.logger import LOGGER


class TableMaterializer:
    """Register a table in the catalog and hand back something writable."""

    def __init__(self, catalog: Catalog, case_sensitive: bool | None = None) -> None:
        self.catalog = catalog
        self.case_sensitive = settings.CASE_SENSITIVE if case_sensitive is None else case_sensitive

    def prepare(self, descriptor: TableDescriptor, reconciled: ReconciledPlan) -> TableDescriptor:
        """Return the catalog-ready descriptor (no catalog access)."""
        prepared = descriptor.with_storage(descriptor.storage.with_defaults())
        if not prepared.columns:
            prepared = prepared.with_columns(reconciled.output_columns)
        prepared.validate_partitioning(case_sensitive=self.case_sensitive)
        return prepared

    def materialize(
        self, descriptor: TableDescriptor, reconciled: ReconciledPlan
    ) -> CatalogTableHandle:
        """
        Register the table and resolve it.

        Raises:
            InvalidTableDescriptorError: the partition layout cannot be registered.
            UnexpectedCatalogStateError: the lookup did not yield a plain table.
            Any error from the catalog's create call, unchanged.
        """
        return self.resolve(self.register(descriptor, reconciled))

    def register(self, descriptor: TableDescriptor, reconciled: ReconciledPlan) -> TableDescriptor:
        """Prepare and strictly create the table; return the descriptor that was registered."""
        prepared = self.prepare(descriptor, reconciled)
        self.catalog.create_table(prepared, ignore_if_exists=False)
        LOGGER.info(
            "Registered %s with %d column(s), partitioned by [%s].",
            prepared.full_name,
            len(prepared.columns),
            ", ".join(prepared.partition_column_names),
        )
        return prepared

    def resolve(self, prepared: TableDescriptor) -> CatalogTableHandle:
        """Look the registered table up; only managed or external tables are accepted."""
        resolved = self.catalog.lookup(prepared.identifier)
        if not isinstance(resolved, CatalogTableHandle):
            raise UnexpectedCatalogStateError(
                prepared.identifier, f"lookup returned {type(resolved).__name__}"
            )
        if not resolved.table_type.is_writable_table:
            raise UnexpectedCatalogStateError(
                prepared.identifier, f"lookup returned a {resolved.table_type.value} relation"
            )
        return resolved
