"""Virtual machine inventory."""

from __future__ import annotations

import logging

from az_zone_report.azure_api._auth import AZURE_MGMT_URL, _get_headers
from az_zone_report.azure_api._pagination import _paginate
from az_zone_report.settings import ReportSettings, get_settings

logger = logging.getLogger(__name__)


def list_virtual_machines(
    subscription_id: str,
    tenant_id: str | None = None,
    settings: ReportSettings | None = None,
) -> list[dict]:
    """Return every VM of *subscription_id* with its instance view statuses.

    ``statusOnly=true`` makes ARM include ``properties.instanceView`` so the
    power state is available without one extra call per VM.
    """
    settings = settings or get_settings()
    headers = _get_headers(tenant_id)
    url = (
        f"{AZURE_MGMT_URL}/subscriptions/{subscription_id}/providers/"
        f"Microsoft.Compute/virtualMachines?api-version={settings.compute_api_version}"
        "&statusOnly=true"
    )
    vms = _paginate(url, headers, timeout=settings.request_timeout)
    logger.debug("Subscription %s: %d VMs", subscription_id, len(vms))
    return vms


def resource_group_of(resource_id: str | None) -> str:
    """Return the resource group segment of an ARM resource ID, or ``""``."""
    parts = (resource_id or "").split("/")
    for idx, part in enumerate(parts[:-1]):
        if part.lower() == "resourcegroups":
            return parts[idx + 1]
    return ""
