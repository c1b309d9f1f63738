"""Spark session initialisation used across jobs."""

from pyspark.sql import SparkSession

from src import settings

spark = SparkSession.builder.appName(settings.APP_NAME).enableHiveSupport().getOrCreate()
