from __future__ import annotations

from collections.abc import Mapping


def escape_sql_literal(value: str) -> str:
    """
    Escape a Python string for use as a single-quoted SQL literal.
    Spark SQL literals are backslash-escaped, so backslashes and single quotes get one.
    Empty/None → empty string.
    """
    return (value or "").replace("\\", "\\\\").replace("'", "\\'")


def format_properties(props: Mapping[str, str]) -> str:
    """
    Format property assignments: `'key' = 'value', 'k2' = 'v2'`.
    Used for both TBLPROPERTIES and SERDEPROPERTIES.
    Keys and values are SQL string literals (NOT identifiers).
    Keys are sorted for deterministic output.
    """
    return ", ".join(
        f"'{escape_sql_literal(k)}' = '{escape_sql_literal(v)}'"
        for k, v in sorted(props.items(), key=lambda item: item[0])
    )
