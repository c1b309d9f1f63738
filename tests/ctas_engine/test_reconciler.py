import itertools

import pyspark.sql.types as T
import pytest

from src.ctas_engine.errors import SchemaMismatchError
from src.ctas_engine.identifiers import TableIdentifier
from src.ctas_engine.models import Column, TableDescriptor
from src.ctas_engine.reconciler import SchemaReconciler


class FakeQuery:
    def __init__(self, columns):
        self.output_columns = tuple(columns)


def col(name, data_type=None):
    return Column(name, data_type or T.StringType())


def make_descriptor(names=(), partitions=()):
    return TableDescriptor(
        identifier=TableIdentifier("db", "tbl"),
        columns=tuple(col(n) for n in names),
        partition_columns=tuple(partitions),
    )


@pytest.mark.parametrize("query_order", list(itertools.permutations(["a", "b", "c", "p"])))
def test_output_order_matches_declared_order_for_any_query_order(query_order):
    descriptor = make_descriptor(["a", "b", "c", "p"], partitions=["p"])
    reconciled = SchemaReconciler().reconcile(descriptor, FakeQuery(col(n) for n in query_order))

    assert reconciled.column_names == ("a", "b", "c", "p")


def test_reconcile_keeps_query_columns_and_types_untouched():
    query = FakeQuery([col("b", T.LongType()), col("a", T.DateType())])
    reconciled = SchemaReconciler().reconcile(make_descriptor(["a", "b"]), query)

    assert reconciled.output_columns == (col("a", T.DateType()), col("b", T.LongType()))
    assert reconciled.query is query
    assert query.output_columns == (col("b", T.LongType()), col("a", T.DateType()))


def test_missing_declared_column_raises_schema_mismatch_naming_it():
    descriptor = make_descriptor(["a", "b", "day"], partitions=["day"])

    with pytest.raises(SchemaMismatchError, match=r"Column \[day\] does not exist") as excinfo:
        SchemaReconciler().reconcile(descriptor, FakeQuery([col("a"), col("b")]))

    assert excinfo.value.missing_columns == ("day",)


def test_undeclared_query_column_is_rejected():
    with pytest.raises(SchemaMismatchError, match="undeclared") as excinfo:
        SchemaReconciler().reconcile(
            make_descriptor(["a"]), FakeQuery([col("a"), col("extra")])
        )

    assert excinfo.value.unexpected_columns == ("extra",)


def test_case_insensitive_match_by_default():
    reconciled = SchemaReconciler(case_sensitive=False).reconcile(
        make_descriptor(["id", "name"]), FakeQuery([col("NAME"), col("Id")])
    )
    assert reconciled.column_names == ("Id", "NAME")


def test_case_sensitive_match_treats_case_as_different():
    with pytest.raises(SchemaMismatchError, match=r"\[id\]"):
        SchemaReconciler(case_sensitive=True).reconcile(
            make_descriptor(["id"]), FakeQuery([col("ID")])
        )


def test_ambiguous_match_under_case_insensitive_rules():
    with pytest.raises(SchemaMismatchError, match="ambiguous"):
        SchemaReconciler(case_sensitive=False).reconcile(
            make_descriptor(["id"]), FakeQuery([col("id"), col("ID")])
        )


def test_no_declared_columns_moves_partition_columns_last():
    descriptor = make_descriptor(partitions=["day", "region"])
    query = FakeQuery([col("region"), col("id"), col("day"), col("amount")])

    reconciled = SchemaReconciler().reconcile(descriptor, query)

    assert reconciled.column_names == ("id", "amount", "day", "region")


def test_no_declared_columns_missing_partition_column():
    with pytest.raises(SchemaMismatchError, match=r"\[day\]"):
        SchemaReconciler().reconcile(make_descriptor(partitions=["day"]), FakeQuery([col("id")]))


def test_reconcile_is_deterministic():
    descriptor = make_descriptor(["a", "b"])
    query = FakeQuery([col("b"), col("a")])
    reconciler = SchemaReconciler()

    assert reconciler.reconcile(descriptor, query) == reconciler.reconcile(descriptor, query)
