"""Enumerations used throughout the CTAS engine."""

from enum import StrEnum


class TableType(StrEnum):
    """Table type as reported by the Spark catalog."""

    MANAGED = "MANAGED"
    EXTERNAL = "EXTERNAL"
    VIEW = "VIEW"
    TEMPORARY = "TEMPORARY"

    @property
    def is_writable_table(self) -> bool:
        """Only plain (managed or external) tables can be the target of an insert."""
        return self in (TableType.MANAGED, TableType.EXTERNAL)


class DynamicPartitionMode(StrEnum):
    """Values accepted by `hive.exec.dynamic.partition.mode`."""

    STRICT = "strict"
    NONSTRICT = "nonstrict"


class CtasState(StrEnum):
    """States of a single create-table-as-select run."""

    CHECK = "CHECK"
    EXISTS_OK = "EXISTS_OK"
    EXISTS_FAIL = "EXISTS_FAIL"
    MATERIALIZE = "MATERIALIZE"
    INSERT = "INSERT"
    DONE = "DONE"
    ROLLED_BACK = "ROLLED_BACK"
