"""Shared test fixtures for az-zone-report tests."""

from __future__ import annotations

import logging
from unittest.mock import MagicMock, patch

import pytest
import requests

from az_zone_report.settings import ReportSettings, get_settings


def _mock_response(payload: object = None, status_code: int = 200) -> MagicMock:
    """Build a ``requests.Response`` stand-in returning *payload* as JSON."""
    resp = MagicMock()
    resp.status_code = status_code
    resp.ok = status_code < 400
    resp.json.return_value = payload
    if status_code >= 400:
        resp.raise_for_status.side_effect = requests.HTTPError(
            f"{status_code} Error", response=resp
        )
    else:
        resp.raise_for_status.return_value = None
    return resp


@pytest.fixture()
def mock_response():
    """Factory for fake ARM responses."""
    return _mock_response


@pytest.fixture(autouse=True)
def _mock_credential():
    """Prevent real Azure credential calls in every test."""
    mock_token = MagicMock()
    mock_token.token = "fake-token"
    with patch("az_zone_report.azure_api._auth.credential") as cred:
        cred.get_token.return_value = mock_token
        yield cred


@pytest.fixture(autouse=True)
def _clear_settings_cache(monkeypatch):
    """Start every test from default settings."""
    for name in ("TENANT_ID", "PHYSICAL_ZONE_FORMAT", "REQUEST_TIMEOUT"):
        monkeypatch.delenv(f"AZ_ZONE_REPORT_{name}", raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture()
def settings() -> ReportSettings:
    return ReportSettings(_env_file=None)


@pytest.fixture()
def prod_locations() -> list[dict]:
    """ARM locations of the "Prod" subscription; westus has no zones."""
    return [
        {"name": "westus", "displayName": "West US", "metadata": {"regionType": "Physical"}},
        {
            "name": "eastus",
            "displayName": "East US",
            "metadata": {"regionType": "Physical"},
            "availabilityZoneMappings": [
                {"logicalZone": "3", "physicalZone": "eastus-az2"},
                {"logicalZone": "1", "physicalZone": "eastus-az3"},
                {"logicalZone": "2", "physicalZone": "eastus-az1"},
            ],
        },
        {
            "name": "westeurope",
            "displayName": "West Europe",
            "metadata": {"regionType": "Physical"},
            "availabilityZoneMappings": [
                {"logicalZone": "1", "physicalZone": "westeurope-az1"},
                {"logicalZone": "2", "physicalZone": "westeurope-az2"},
                {"logicalZone": "3", "physicalZone": "westeurope-az3"},
            ],
        },
    ]


@pytest.fixture()
def prod_subscription() -> dict:
    return {"id": "sub-prod", "name": "Prod", "tenantId": "tid-1", "state": "Enabled"}


@pytest.fixture(autouse=True)
def _reset_logging():
    """Undo CLI logging setup so ``caplog`` keeps seeing records."""
    yield
    app_logger = logging.getLogger("az_zone_report")
    app_logger.handlers = []
    app_logger.propagate = True
    app_logger.setLevel(logging.NOTSET)
