import logging

import pytest
from pyspark.sql import SparkSession

# Tests requesting this fixture need a JVM and are opt-in
_SPARK_FIXTURE_NAME = "spark_fixture"


def quiet_py4j() -> None:
    """Turn down Spark logging during the test context."""
    logging.getLogger("py4j").setLevel(logging.WARN)


@pytest.fixture(scope="session")
def spark_fixture(tmp_path_factory: pytest.TempPathFactory):
    quiet_py4j()
    warehouse = tmp_path_factory.mktemp("warehouse")
    metastore = tmp_path_factory.mktemp("metastore")

    spark = (
        SparkSession.Builder()
        .appName("CTAS Integration Test PySpark")
        # Tiny data: one core, one shuffle partition
        .master("local[1]")
        .config("spark.sql.shuffle.partitions", "1")
        .config("spark.default.parallelism", "1")
        .config("spark.driver.memory", "2g")
        # fail faster if there's an issue with initial [local] connections
        .config("spark.network.timeout", "10000")
        .config("spark.executor.heartbeatInterval", "1000")
        .config("spark.ui.showConsoleProgress", "false")
        .config("spark.ui.enabled", "false")
        .config("spark.dynamicAllocation.enabled", "false")
        # Throwaway Hive metastore and warehouse for the session
        .config("spark.sql.warehouse.dir", str(warehouse))
        .config(
            "spark.hadoop.javax.jdo.option.ConnectionURL",
            f"jdbc:derby:;databaseName={metastore}/metastore_db;create=true",
        )
        .enableHiveSupport()
        .getOrCreate()
    )

    yield spark

    spark.stop()


def _mark_tests_using_spark_fixture(tests: list[pytest.Item]) -> None:
    """Add the `requires_spark` marker to every test that asks for the Spark fixture."""
    for test in tests:
        if _SPARK_FIXTURE_NAME in getattr(test, "fixturenames", ()):
            test.add_marker(pytest.mark.requires_spark)


def _skip_spark_tests(test: pytest.Item) -> None:
    """Skip `test` if it carries the `requires_spark` marker."""
    if list(test.iter_markers(name="requires_spark")):
        pytest.skip("Skipped tests that require a SparkSession")


def pytest_addoption(parser: pytest.Parser):
    parser.addoption(
        "--include-spark-tests",
        action="store_true",
        default=False,
        help="Run tests that start a local Hive-enabled SparkSession.",
    )


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]):
    if not config.getoption("--include-spark-tests"):
        _mark_tests_using_spark_fixture(tests=items)


def pytest_runtest_setup(item: pytest.Item):
    if not item.config.getoption("--include-spark-tests"):
        _skip_spark_tests(test=item)
