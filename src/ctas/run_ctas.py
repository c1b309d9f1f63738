"""Entry point for running a CREATE TABLE AS SELECT from the command line."""

from __future__ import annotations

import argparse
from collections.abc import Sequence

from pyspark.sql import SparkSession

from src.ctas_engine.config import CommandConfig, load_command_config
from src.ctas_engine.engine import Engine
from src.ctas_engine.identifiers import parse_table_identifier
from src.ctas_engine.models import TableDescriptor
from src.logger import LOGGER, set_log_level


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="run-ctas",
        description="Create a Hive table and populate it from a query; rolled back on failure.",
    )
    parser.add_argument("--config", help="YAML file describing the command.")
    parser.add_argument("--table", help="Target table: [catalog.]database.table")
    parser.add_argument("--query", help="SELECT statement that populates the table.")
    parser.add_argument(
        "--partition-by",
        action="append",
        default=[],
        metavar="COLUMN",
        help="Partition column (repeatable, in partition order).",
    )
    parser.add_argument(
        "--if-not-exists",
        action="store_true",
        help="Do nothing if the table already exists.",
    )
    parser.add_argument("--log-level", help="Override LOG_LEVEL for this run.")
    return parser


def command_config_from_args(args: argparse.Namespace) -> CommandConfig:
    """Build the command from `--config`, or from `--table`/`--query` flags."""
    if args.config:
        return load_command_config(args.config)
    if not args.table or not args.query:
        raise ValueError("Either --config or both --table and --query are required.")
    descriptor = TableDescriptor(
        identifier=parse_table_identifier(args.table),
        partition_columns=tuple(args.partition_by),
    )
    return CommandConfig(
        descriptor=descriptor, query=args.query, ignore_if_exists=args.if_not_exists
    )


def run_ctas(spark: SparkSession, config: CommandConfig) -> None:
    """Run one command through the default engine."""
    Engine(spark).create_table_as_select(
        config.descriptor, config.query, ignore_if_exists=config.ignore_if_exists
    )
    LOGGER.info("Table %s is ready.", config.descriptor.full_name)


def main(argv: Sequence[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.log_level:
        set_log_level(args.log_level.upper())
    try:
        config = command_config_from_args(args)
    except ValueError as error:
        parser.error(str(error))

    from src.runtime import spark

    run_ctas(spark, config)


if __name__ == "__main__":
    main()
