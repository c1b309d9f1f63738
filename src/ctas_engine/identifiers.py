"""
Identifier utilities for the CTAS engine.

This module defines:
- Canonical table identifier dataclass: TableIdentifier.
- Helpers to quote, format, parse and normalise identifiers.

Conventions:
- Verbs: quote_*, format_*, parse_*, normalize_*.
- Use `identifier` for variables/parameters of type TableIdentifier.
- Hive compares identifiers case-insensitively; `normalize_identifier` is the
  single place that decides how two names compare.
"""

from __future__ import annotations

from dataclasses import dataclass

from src import settings


# -----------------------------
# Core name data structure
# -----------------------------


@dataclass(frozen=True)
class TableIdentifier:
    """Table name: [catalog.]database.table."""

    database: str
    table: str
    catalog: str | None = None

    def __str__(self) -> str:
        return format_table_identifier(self)


# -----------------------------
# String helpers
# -----------------------------


def quote_identifier(identifier: str) -> str:
    """Quote a single SQL identifier using backticks, doubling any embedded backticks."""
    text = str(identifier)
    return f"`{text.replace('`', '``')}`"


def quote_qualified_name(*parts: str) -> str:
    """
    Return a dot-delimited, backticked qualified name from the provided parts.

    Examples:
        quote_qualified_name("db", "table")
        -> "`db`.`table`"

    Rules:
    - Reject None or empty parts.
    - Strips surrounding backticks on inputs to avoid double-quoting.
    """
    if not parts:
        raise ValueError("At least one name part must be provided.")

    cleaned_parts: list[str] = []
    for raw_part in parts:
        if raw_part is None:
            raise ValueError("Qualified name parts must not be None.")
        part = str(raw_part).strip()
        if part.startswith("`") and part.endswith("`") and len(part) >= 2:
            part = part[1:-1]
        if part == "":
            raise ValueError("Qualified name parts must not be empty.")
        cleaned_parts.append(quote_identifier(part))
    return ".".join(cleaned_parts)


def _parts(identifier: TableIdentifier) -> tuple[str, ...]:
    if identifier.catalog:
        return (identifier.catalog, identifier.database, identifier.table)
    return (identifier.database, identifier.table)


def quote_table_identifier(identifier: TableIdentifier) -> str:
    """Backticked: `` `database`.`table` `` (three parts when a catalog is set)."""
    return quote_qualified_name(*_parts(identifier))


def format_table_identifier(identifier: TableIdentifier) -> str:
    """Unquoted: 'database.table' or 'catalog.database.table'."""
    return ".".join(_parts(identifier))


def parse_table_identifier(name: str, default_database: str | None = None) -> TableIdentifier:
    """
    Parse 'table', 'database.table' or 'catalog.database.table' into a TableIdentifier.

    Backticks and surrounding whitespace are stripped from each part. A bare table name
    is placed in `default_database` (falls back to settings.DEFAULT_DATABASE).
    """
    cleaned = name.replace("`", "").strip()
    parts = [p.strip() for p in cleaned.split(".")]
    if not 1 <= len(parts) <= 3 or any(p == "" for p in parts):
        raise ValueError(
            f"Expected 'table', 'database.table' or 'catalog.database.table', got: {name!r}"
        )
    if len(parts) == 1:
        return TableIdentifier(database=default_database or settings.DEFAULT_DATABASE, table=parts[0])
    if len(parts) == 2:
        return TableIdentifier(database=parts[0], table=parts[1])
    return TableIdentifier(catalog=parts[0], database=parts[1], table=parts[2])


def normalize_identifier(name: str, case_sensitive: bool) -> str:
    """Return the form of `name` used for comparisons under the catalog's rules."""
    return name if case_sensitive else name.lower()
