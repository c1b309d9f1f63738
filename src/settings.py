"""Configuration values sourced from environment variables."""

import os
from typing import Final

from src.enums import DynamicPartitionMode

_dynamic_partition_mode = os.getenv("DYNAMIC_PARTITION_MODE", default="nonstrict")


APP_NAME: Final[str] = os.getenv(key="APP_NAME", default="ctas-engine")
DEFAULT_DATABASE: Final[str] = os.getenv(key="DEFAULT_DATABASE", default="default")
CASE_SENSITIVE: Final[bool] = bool(
    os.getenv(key="CASE_SENSITIVE", default="False").upper() == "TRUE"
)
DYNAMIC_PARTITION_MODE: Final[str] = DynamicPartitionMode(_dynamic_partition_mode)
LOG_LEVEL: Final[str] = os.getenv(key="LOG_LEVEL", default="INFO")
LOGGER_NAME: Final[str] = os.getenv(key="LOGGER_NAME", default="ctas-engine")
LOG_COLOUR_ENABLED: Final[bool] = bool(
    os.getenv(key="LOG_COLOUR_ENABLED", default="True").upper() == "TRUE"
)
