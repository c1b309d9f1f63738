"""
Catalog port and handle types.

- Catalog: protocol for the metadata store (Spark session catalog, fakes, etc.)
- CatalogTableHandle: a resolved, writable table returned by `Catalog.lookup`
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from src.ctas_engine.identifiers import TableIdentifier, format_table_identifier
from src.ctas_engine.models import TableDescriptor
from src.enums import TableType


@dataclass(frozen=True)
class CatalogTableHandle:
    """Concrete table the catalog resolved an identifier to."""

    identifier: TableIdentifier
    table_type: TableType
    column_names: tuple[str, ...] = ()
    partition_column_names: tuple[str, ...] = ()

    @property
    def full_name(self) -> str:
        return format_table_identifier(self.identifier)

    @property
    def is_partitioned(self) -> bool:
        return bool(self.partition_column_names)


class Catalog(Protocol):
    """Metadata store mapping table identifiers to table definitions."""

    def exists(self, identifier: TableIdentifier) -> bool: ...

    def create_table(self, descriptor: TableDescriptor, *, ignore_if_exists: bool) -> None:
        """Register the table; raise TableAlreadyExistsError when it exists and not ignoring."""
        ...

    def lookup(self, identifier: TableIdentifier) -> object:
        """Resolve the identifier; raise TableNotFoundError when absent."""
        ...

    def drop_table(
        self, identifier: TableIdentifier, *, ignore_if_not_exists: bool, purge: bool
    ) -> None: ...
