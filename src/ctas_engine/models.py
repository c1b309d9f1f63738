"""Domain models for declaring Hive-format tables (logical schema + storage)."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any

import pyspark.sql.types as T

from src import settings
from src.constants import DEFAULT_INPUT_FORMAT, DEFAULT_OUTPUT_FORMAT, DEFAULT_SERDE
from src.ctas_engine.errors import InvalidTableDescriptorError
from src.ctas_engine.identifiers import (
    TableIdentifier,
    format_table_identifier,
    normalize_identifier,
)
from src.enums import TableType


@dataclass(frozen=True)
class Column:
    """Table or query output column."""

    name: str
    data_type: T.DataType
    comment: str = ""
    is_nullable: bool = True

    @classmethod
    def from_struct_field(cls, struct_field: T.StructField) -> Column:
        return cls(
            name=struct_field.name,
            data_type=struct_field.dataType,
            comment=struct_field.metadata.get("comment", "") if struct_field.metadata else "",
            is_nullable=struct_field.nullable,
        )


@dataclass(frozen=True)
class StorageFormat:
    """Physical storage of a Hive table: formats, serde, compression and location."""

    input_format: str | None = None
    output_format: str | None = None
    serde: str | None = None
    compressed: bool = False
    location: str | None = None
    serde_properties: Mapping[str, str] = field(default_factory=dict)

    def with_defaults(self) -> StorageFormat:
        """Fill unset formats with plain-text fallbacks; explicit values are kept."""
        return replace(
            self,
            input_format=self.input_format or DEFAULT_INPUT_FORMAT,
            output_format=self.output_format or DEFAULT_OUTPUT_FORMAT,
            serde=self.serde or DEFAULT_SERDE,
        )


@dataclass(frozen=True)
class TableDescriptor:
    """
    Declarative definition of the table to create.

    `columns` lists every column in stored order, partition columns included; the
    partition columns must be the trailing ones. An empty `columns` means the shape
    is taken from the query.
    """

    identifier: TableIdentifier
    columns: Sequence[Column] = ()
    partition_columns: Sequence[str] = ()
    storage: StorageFormat = field(default_factory=StorageFormat)
    comment: str = ""
    properties: Mapping[str, str] = field(default_factory=dict)

    # --------- Convenience properties ---------

    @property
    def full_name(self) -> str:
        """Unquoted name: 'database.table'."""
        return format_table_identifier(self.identifier)

    @property
    def column_names(self) -> tuple[str, ...]:
        """Column names in declared order."""
        return tuple(column.name for column in self.columns)

    @property
    def partition_column_names(self) -> tuple[str, ...]:
        return tuple(self.partition_columns)

    @property
    def data_columns(self) -> tuple[Column, ...]:
        """Declared columns that are not partition columns, in declared order."""
        partition_keys = {_key(name) for name in self.partition_columns}
        return tuple(c for c in self.columns if _key(c.name) not in partition_keys)

    @property
    def partition_column_objects(self) -> tuple[Column, ...]:
        """Partition columns in partition order, resolved against `columns`."""
        by_key = {_key(column.name): column for column in self.columns}
        return tuple(
            by_key[_key(name)] for name in self.partition_columns if _key(name) in by_key
        )

    @property
    def table_type(self) -> TableType:
        return TableType.EXTERNAL if self.storage.location else TableType.MANAGED

    @property
    def string_properties(self) -> Mapping[str, str]:
        """User properties with keys/values coerced to strings (read-only)."""
        return MappingProxyType(_normalize_properties(self.properties))

    # --------- Copy helpers ---------

    def with_storage(self, storage: StorageFormat) -> TableDescriptor:
        return replace(self, storage=storage)

    def with_columns(self, columns: Sequence[Column]) -> TableDescriptor:
        return replace(self, columns=tuple(columns))

    # --------- Validation ---------

    def validate_partitioning(self, case_sensitive: bool | None = None) -> None:
        """
        Check that the descriptor can be registered.

        Raises:
            InvalidTableDescriptorError: if column names collide, a partition column is
            not declared or repeated, or partition columns are not the trailing columns.
        """
        if case_sensitive is None:
            case_sensitive = settings.CASE_SENSITIVE
        keys = [normalize_identifier(name, case_sensitive) for name in self.column_names]
        duplicates = sorted({k for k in keys if keys.count(k) > 1})
        if duplicates:
            raise InvalidTableDescriptorError(
                self.identifier, f"duplicate column(s): {', '.join(duplicates)}"
            )

        partition_keys = [normalize_identifier(n, case_sensitive) for n in self.partition_columns]
        if len(set(partition_keys)) != len(partition_keys):
            raise InvalidTableDescriptorError(
                self.identifier, "partition columns must not repeat"
            )
        for name, key in zip(self.partition_columns, partition_keys):
            if key not in keys:
                raise InvalidTableDescriptorError(
                    self.identifier, f"partition column [{name}] is not a declared column"
                )

        if not partition_keys:
            return
        if len(partition_keys) == len(keys):
            raise InvalidTableDescriptorError(
                self.identifier, "cannot use all columns for partitioning"
            )
        trailing = keys[len(keys) - len(partition_keys):]
        if trailing != partition_keys:
            raise InvalidTableDescriptorError(
                self.identifier,
                "partition columns must be the last columns of the schema "
                f"(expected trailing {', '.join(self.partition_columns)}, "
                f"got {', '.join(self.column_names[len(keys) - len(partition_keys):])})",
            )


# -----------------
# Helpers
# -----------------


def _key(name: str) -> str:
    return normalize_identifier(name, settings.CASE_SENSITIVE)


def _normalize_properties(props: Mapping[Any, Any]) -> dict[str, str]:
    """Coerce mapping keys/values to strings."""
    return {str(k): str(v) for k, v in dict(props).items()}
