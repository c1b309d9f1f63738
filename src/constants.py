"""Shared constant values used across the CTAS engine."""

from typing import Final

# Fallback Hive storage for tables declared without an explicit format:
# plain text lines, delimited by the lazy simple serde.
DEFAULT_INPUT_FORMAT: Final[str] = "org.apache.hadoop.mapred.TextInputFormat"
DEFAULT_OUTPUT_FORMAT: Final[str] = "org.apache.hadoop.hive.ql.io.HiveIgnoreKeyTextOutputFormat"
DEFAULT_SERDE: Final[str] = "org.apache.hadoop.hive.serde2.lazy.LazySimpleSerDe"

DYNAMIC_PARTITION_CONF: Final[str] = "hive.exec.dynamic.partition"
DYNAMIC_PARTITION_MODE_CONF: Final[str] = "hive.exec.dynamic.partition.mode"

TEMP_VIEW_PREFIX: Final[str] = "__ctas_source_"
