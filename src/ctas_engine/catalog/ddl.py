"""
SQL string builders for Hive-format tables.

All functions return fully-formed SQL strings. Identifiers are ALWAYS quoted with
backticks and literals escaped via `escape_sql_literal`.

Design guarantees
- Deterministic, side-effect free string generation.
- No business rules: the materializer/orchestrator decide policy.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence

from src.ctas_engine.identifiers import (
    TableIdentifier,
    quote_identifier,
    quote_table_identifier,
)
from src.ctas_engine.models import Column, TableDescriptor
from src.ctas_engine.utils import escape_sql_literal, format_properties
from src.enums import TableType


def render_column_definition(column: Column) -> str:
    """Render: `name` TYPE [COMMENT '...']. Hive does not store nullability."""
    comment_sql = f"COMMENT '{escape_sql_literal(column.comment)}'" if column.comment else ""
    parts = [quote_identifier(column.name), column.data_type.simpleString(), comment_sql]
    return " ".join(p for p in parts if p)


def render_create_table(descriptor: TableDescriptor, *, ignore_if_exists: bool = False) -> str:
    """
    CREATE [EXTERNAL] TABLE [IF NOT EXISTS] ... STORED AS INPUTFORMAT ... OUTPUTFORMAT ...

    Partition columns go to PARTITIONED BY (with their types), never to the column list.
    Storage formats must already be filled in (see `StorageFormat.with_defaults`).
    """
    storage = descriptor.storage
    if not (storage.input_format and storage.output_format and storage.serde):
        raise ValueError(
            f"Storage formats for {descriptor.full_name} must be set before rendering DDL."
        )

    external = "EXTERNAL " if descriptor.table_type is TableType.EXTERNAL else ""
    if_not_exists = "IF NOT EXISTS " if ignore_if_exists else ""
    parts: list[str] = [
        f"CREATE {external}TABLE {if_not_exists}{quote_table_identifier(descriptor.identifier)}"
    ]

    data_columns = [render_column_definition(c) for c in descriptor.data_columns]
    if data_columns:
        parts.append(f"({', '.join(data_columns)})")
    if descriptor.comment:
        parts.append(f"COMMENT '{escape_sql_literal(descriptor.comment)}'")

    partition_columns = [render_column_definition(c) for c in descriptor.partition_column_objects]
    if partition_columns:
        parts.append(f"PARTITIONED BY ({', '.join(partition_columns)})")

    parts.append(f"ROW FORMAT SERDE '{escape_sql_literal(storage.serde)}'")
    if storage.serde_properties:
        parts.append(f"WITH SERDEPROPERTIES ({format_properties(storage.serde_properties)})")
    parts.append(
        f"STORED AS INPUTFORMAT '{escape_sql_literal(storage.input_format)}' "
        f"OUTPUTFORMAT '{escape_sql_literal(storage.output_format)}'"
    )
    if storage.location:
        parts.append(f"LOCATION '{escape_sql_literal(storage.location)}'")
    if descriptor.properties:
        parts.append(f"TBLPROPERTIES ({format_properties(descriptor.string_properties)})")

    return " ".join(parts)


def render_drop_table(identifier: TableIdentifier, *, if_exists: bool, purge: bool) -> str:
    """DROP TABLE [IF EXISTS] ... [PURGE]"""
    if_exists_sql = "IF EXISTS " if if_exists else ""
    purge_sql = " PURGE" if purge else ""
    return f"DROP TABLE {if_exists_sql}{quote_table_identifier(identifier)}{purge_sql}"


def render_insert(
    identifier: TableIdentifier,
    source_view: str,
    column_names: Sequence[str],
    *,
    partition_column_names: Sequence[str] = (),
    partition_spec: Mapping[str, str | None] | None = None,
    overwrite: bool,
    if_not_exists: bool = False,
) -> str:
    """
    INSERT OVERWRITE|INTO TABLE ... [PARTITION (...)] [IF NOT EXISTS] SELECT ... FROM view

    `partition_spec` maps partition column → static value, or None for a dynamic
    partition. Partition columns absent from the spec are dynamic. Static partition
    columns are left out of the select list; the rest keep `column_names` order.
    """
    if if_not_exists and not overwrite:
        raise ValueError("IF NOT EXISTS is only supported together with OVERWRITE.")

    spec = _normalize_spec(partition_spec or {}, partition_column_names)
    static = {name for name, value in spec.items() if value is not None}

    mode = "OVERWRITE" if overwrite else "INTO"
    parts = [f"INSERT {mode} TABLE {quote_table_identifier(identifier)}"]
    if partition_column_names:
        assignments = []
        for name in partition_column_names:
            value = spec.get(name.lower())
            if value is None:
                assignments.append(quote_identifier(name))
            else:
                assignments.append(f"{quote_identifier(name)} = '{escape_sql_literal(value)}'")
        parts.append(f"PARTITION ({', '.join(assignments)})")
    if if_not_exists:
        parts.append("IF NOT EXISTS")

    selected = [quote_identifier(n) for n in column_names if n.lower() not in static]
    parts.append(f"SELECT {', '.join(selected)} FROM {quote_identifier(source_view)}")
    return " ".join(parts)


# ---------- helpers ----------


def _normalize_spec(
    partition_spec: Mapping[str, str | None], partition_column_names: Sequence[str]
) -> dict[str, str | None]:
    """Lower-case spec keys and reject keys that are not partition columns."""
    known = {name.lower() for name in partition_column_names}
    normalized: dict[str, str | None] = {}
    for key, value in partition_spec.items():
        if key.lower() not in known:
            raise ValueError(f"Partition spec names non-partition column [{key}].")
        normalized[key.lower()] = None if value is None else str(value)
    return normalized
