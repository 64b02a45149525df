"""Subscription and region discovery."""

from __future__ import annotations

import logging

import requests

from az_zone_report.azure_api._auth import AZURE_MGMT_URL, _get_headers
from az_zone_report.azure_api._pagination import MalformedResponseError, _paginate
from az_zone_report.errors import DiscoveryError, SubscriptionNotFoundError
from az_zone_report.settings import ReportSettings, get_settings

logger = logging.getLogger(__name__)


def _subscription(raw: dict) -> dict:
    return {
        "id": raw["subscriptionId"],
        "name": raw.get("displayName") or raw["subscriptionId"],
        "tenantId": raw.get("tenantId"),
        "state": raw.get("state"),
    }


def list_subscriptions(
    tenant_id: str | None = None,
    settings: ReportSettings | None = None,
) -> list[dict]:
    """Return enabled subscriptions as ``[{"id": ..., "name": ..., ...}, ...]``.

    Subscriptions are returned in provider order.  When *tenant_id* is set
    the token is scoped to that tenant and foreign subscriptions are dropped.
    """
    settings = settings or get_settings()
    headers = _get_headers(tenant_id)
    url = f"{AZURE_MGMT_URL}/subscriptions?api-version={settings.arm_api_version}"
    all_subs = _paginate(url, headers, timeout=settings.request_timeout)

    subs: list[dict] = []
    for raw in all_subs:
        sub = _subscription(raw)
        if sub["state"] != "Enabled":
            logger.debug("Ignoring subscription %s in state %s", sub["id"], sub["state"])
            continue
        if tenant_id and sub["tenantId"] and sub["tenantId"] != tenant_id:
            continue
        subs.append(sub)
    return subs


def get_subscription(
    subscription_id: str,
    tenant_id: str | None = None,
    settings: ReportSettings | None = None,
) -> dict:
    """Return a single subscription or raise :class:`SubscriptionNotFoundError`."""
    settings = settings or get_settings()
    headers = _get_headers(tenant_id)
    url = (
        f"{AZURE_MGMT_URL}/subscriptions/{subscription_id}"
        f"?api-version={settings.arm_api_version}"
    )
    resp = requests.get(url, headers=headers, timeout=settings.request_timeout)
    if resp.status_code in (403, 404):
        raise SubscriptionNotFoundError(subscription_id, tenant_id)
    resp.raise_for_status()

    sub = _subscription(resp.json())
    if tenant_id and sub["tenantId"] and sub["tenantId"] != tenant_id:
        raise SubscriptionNotFoundError(subscription_id, tenant_id)
    return sub


def resolve_targets(
    subscription_id: str | None = None,
    tenant_id: str | None = None,
    settings: ReportSettings | None = None,
) -> list[dict]:
    """Return the subscriptions a run should cover.

    Either the single requested subscription, or every enabled subscription
    of the tenant.  Listing failures raise :class:`DiscoveryError`; a
    missing subscription raises :class:`SubscriptionNotFoundError`.
    """
    try:
        if subscription_id:
            return [get_subscription(subscription_id, tenant_id, settings)]
        return list_subscriptions(tenant_id, settings)
    except (requests.RequestException, MalformedResponseError, KeyError, TypeError) as exc:
        raise DiscoveryError(f"Could not list subscriptions: {exc}") from exc


def list_locations(
    subscription_id: str,
    tenant_id: str | None = None,
    settings: ReportSettings | None = None,
) -> list[dict]:
    """Return the raw ARM locations of *subscription_id* in provider order.

    Each entry carries the region metadata, including
    ``availabilityZoneMappings`` for zone-enabled regions.  A 404 raises
    :class:`SubscriptionNotFoundError`.
    """
    settings = settings or get_settings()
    headers = _get_headers(tenant_id)
    url = (
        f"{AZURE_MGMT_URL}/subscriptions/{subscription_id}/locations"
        f"?api-version={settings.arm_api_version}"
    )
    try:
        return _paginate(url, headers, timeout=settings.request_timeout)
    except requests.HTTPError as exc:
        if exc.response is not None and exc.response.status_code == 404:
            raise SubscriptionNotFoundError(subscription_id, tenant_id) from exc
        raise
