"""Report settings loaded from environment variables."""

import logging
from functools import lru_cache
from typing import Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)


class ReportSettings(BaseSettings):
    """Configuration for az-zone-report.

    Values are read from ``AZ_ZONE_REPORT_*`` environment variables
    (case-insensitive) and optionally from a ``.env`` file in the working
    directory.  Command-line options take precedence.
    """

    tenant_id: str | None = None

    request_timeout: int = 30
    arm_api_version: str = "2022-12-01"
    compute_api_version: str = "2024-07-01"

    # "suffix" keeps the token after the last "-" (eastus-az3 -> az3),
    # "full" keeps the label exactly as ARM publishes it.
    physical_zone_format: Literal["suffix", "full"] = "suffix"

    report_title: str = "VM Availability Zone Distribution"

    model_config = {
        "env_prefix": "AZ_ZONE_REPORT_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    @field_validator("request_timeout")
    @classmethod
    def _positive_timeout(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("AZ_ZONE_REPORT_REQUEST_TIMEOUT must be a positive number of seconds")
        return value


@lru_cache(maxsize=1)
def get_settings() -> ReportSettings:
    """Return the process-wide settings, loaded on first use."""
    return ReportSettings()
