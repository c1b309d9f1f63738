"""
Error taxonomy for the CTAS engine.

- SchemaMismatchError: query output cannot be aligned with the declared columns.
- TableAlreadyExistsError: target exists and the caller did not allow that.
- TableNotFoundError: lookup/drop of an absent table.
- UnexpectedCatalogStateError: catalog returned something other than a plain table.
- InvalidTableDescriptorError: descriptor is not registrable (partitioning, duplicates).

Insert failures are not wrapped: the engine's own exception is re-raised after the
compensating drop. `is_fatal` decides which exceptions skip that compensation.
"""

from __future__ import annotations

from collections.abc import Sequence

from src.ctas_engine.identifiers import TableIdentifier, format_table_identifier

# JVM throwables that Py4J surfaces as Python exceptions but which mean the
# driver itself is no longer healthy.
_FATAL_JVM_ERRORS = frozenset(
    {
        "java.lang.OutOfMemoryError",
        "java.lang.StackOverflowError",
        "java.lang.InternalError",
        "java.lang.LinkageError",
        "java.lang.ThreadDeath",
        "java.lang.InterruptedException",
    }
)


class CtasError(Exception):
    """Base class for errors raised by the CTAS engine."""


class SchemaMismatchError(CtasError):
    """Declared columns and query output columns cannot be reconciled by reordering."""

    def __init__(
        self,
        message: str,
        *,
        missing_columns: Sequence[str] = (),
        unexpected_columns: Sequence[str] = (),
    ) -> None:
        super().__init__(message)
        self.missing_columns = tuple(missing_columns)
        self.unexpected_columns = tuple(unexpected_columns)

    @classmethod
    def missing(cls, column_name: str) -> SchemaMismatchError:
        return cls(
            f"Column [{column_name}] does not exist in query output",
            missing_columns=(column_name,),
        )

    @classmethod
    def ambiguous(cls, column_name: str, candidates: Sequence[str]) -> SchemaMismatchError:
        return cls(
            f"Column [{column_name}] is ambiguous in query output: {', '.join(candidates)}",
            missing_columns=(column_name,),
        )

    @classmethod
    def unexpected(cls, column_names: Sequence[str]) -> SchemaMismatchError:
        return cls(
            f"Query output has undeclared column(s): {', '.join(column_names)}",
            unexpected_columns=column_names,
        )


class _TableError(CtasError):
    def __init__(self, identifier: TableIdentifier, message: str) -> None:
        super().__init__(message)
        self.identifier = identifier


class TableAlreadyExistsError(_TableError):
    def __init__(self, identifier: TableIdentifier) -> None:
        super().__init__(identifier, f"{format_table_identifier(identifier)} already exists.")


class TableNotFoundError(_TableError):
    def __init__(self, identifier: TableIdentifier) -> None:
        super().__init__(identifier, f"Table {format_table_identifier(identifier)} not found.")


class UnexpectedCatalogStateError(_TableError):
    """The catalog resolved the identifier to something that cannot be written to."""

    def __init__(self, identifier: TableIdentifier, detail: str) -> None:
        super().__init__(
            identifier,
            f"Unexpected catalog state for {format_table_identifier(identifier)}: {detail}",
        )


class InvalidTableDescriptorError(_TableError):
    def __init__(self, identifier: TableIdentifier, detail: str) -> None:
        super().__init__(
            identifier,
            f"Invalid table definition for {format_table_identifier(identifier)}: {detail}",
        )


def is_fatal(error: BaseException) -> bool:
    """
    Return True for errors that must not trigger compensation.

    Interpreter-level exits (KeyboardInterrupt, SystemExit, GeneratorExit), memory and
    recursion exhaustion, and JVM errors relayed by Py4J are fatal; everything else
    derived from Exception is recoverable.
    """
    if not isinstance(error, Exception):
        return True
    if isinstance(error, (MemoryError, RecursionError)):
        return True
    return _jvm_class_name(error) in _FATAL_JVM_ERRORS


def _jvm_class_name(error: Exception) -> str | None:
    """Class name of the Java throwable behind a Py4JJavaError, if there is one."""
    java_exception = getattr(error, "java_exception", None)
    if java_exception is None:
        return None
    return str(java_exception.getClass().getName())
