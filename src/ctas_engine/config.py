"""
Load create-table-as-select commands from YAML.

Example:

    table: sales.daily_totals
    comment: Totals per store and day
    query: SELECT store, amount, day FROM sales.raw
    if_not_exists: true
    partition_by: [day]
    columns:            # optional; inferred from the query when omitted
      - {name: store, type: string, comment: Store code}
      - {name: amount, type: "decimal(18,2)"}
      - {name: day, type: date}
    storage:            # optional; plain text when omitted
      serde: org.apache.hadoop.hive.ql.io.parquet.serde.ParquetHiveSerDe
      compressed: false
    properties: {owner: "${LOGGER_NAME}"}

Values written as `${NAME}` resolve to the attribute of the same name in
`src.settings`.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import pyspark.sql.types as T
import yaml

from src import settings
from src.ctas_engine.identifiers import parse_table_identifier
from src.ctas_engine.models import Column, StorageFormat, TableDescriptor

_DECIMAL = re.compile(r"^decimal\(\s*(\d+)\s*,\s*(\d+)\s*\)$")
_SIMPLE_TYPES: dict[str, T.DataType] = {
    "string": T.StringType(),
    "boolean": T.BooleanType(),
    "tinyint": T.ByteType(),
    "smallint": T.ShortType(),
    "int": T.IntegerType(),
    "integer": T.IntegerType(),
    "bigint": T.LongType(),
    "float": T.FloatType(),
    "double": T.DoubleType(),
    "decimal": T.DecimalType(),
    "date": T.DateType(),
    "timestamp": T.TimestampType(),
    "binary": T.BinaryType(),
}


@dataclass(frozen=True)
class CommandConfig:
    """A create-table-as-select command as written in YAML."""

    descriptor: TableDescriptor
    query: str
    ignore_if_exists: bool = False


def load_command_config(path: str | Path) -> CommandConfig:
    """Load and resolve a command from a YAML file."""
    with Path(path).open("r") as f:
        raw = yaml.safe_load(f)
    if not isinstance(raw, dict):
        raise ValueError(f"Expected a mapping at the top of {path}, got {type(raw).__name__}.")
    return parse_command_config(raw)


def parse_command_config(raw: dict[str, Any]) -> CommandConfig:
    """Build a CommandConfig from an already-parsed mapping."""
    for key in ("table", "query"):
        if not raw.get(key):
            raise ValueError(f"Command config is missing required key '{key}'.")

    descriptor = TableDescriptor(
        identifier=parse_table_identifier(_resolve(raw["table"])),
        columns=tuple(_parse_column(c) for c in raw.get("columns") or ()),
        partition_columns=tuple(str(p) for p in raw.get("partition_by") or ()),
        storage=_parse_storage(raw.get("storage") or {}),
        comment=_resolve(raw.get("comment") or ""),
        properties={str(k): _resolve(v) for k, v in (raw.get("properties") or {}).items()},
    )
    return CommandConfig(
        descriptor=descriptor,
        query=str(raw["query"]),
        ignore_if_exists=bool(raw.get("if_not_exists", False)),
    )


def parse_data_type(type_string: str) -> T.DataType:
    """Map a Hive type name (e.g. 'bigint', 'decimal(18,2)') to a PySpark DataType."""
    text = type_string.strip().lower()
    match = _DECIMAL.match(text)
    if match:
        return T.DecimalType(int(match.group(1)), int(match.group(2)))
    if text not in _SIMPLE_TYPES:
        raise ValueError(f"Unsupported column type: {type_string!r}")
    return _SIMPLE_TYPES[text]


# ---------- helpers ----------


def _parse_column(conf: dict[str, Any]) -> Column:
    if "name" not in conf or "type" not in conf:
        raise ValueError(f"Column entries need 'name' and 'type', got: {conf!r}")
    return Column(
        name=str(conf["name"]),
        data_type=parse_data_type(str(conf["type"])),
        comment=str(conf.get("comment", "")),
        is_nullable=bool(conf.get("nullable", True)),
    )


def _parse_storage(conf: dict[str, Any]) -> StorageFormat:
    return StorageFormat(
        input_format=conf.get("input_format"),
        output_format=conf.get("output_format"),
        serde=conf.get("serde"),
        compressed=bool(conf.get("compressed", False)),
        location=_resolve(conf["location"]) if conf.get("location") else None,
        serde_properties={str(k): str(v) for k, v in (conf.get("serde_properties") or {}).items()},
    )


def _resolve(raw: Any) -> str:
    """Replace a whole-value `${NAME}` with settings.NAME; other scalars become strings."""
    value = str(raw)
    if value.startswith("${") and value.endswith("}"):
        var_name = value[2:-1]
        if not hasattr(settings, var_name):
            raise ValueError(f"Unknown setting referenced in config: {value}")
        return str(getattr(settings, var_name))
    return value
