"""Logical→physical availability zone resolution.

For each subscription the first region (in provider order) that publishes
``availabilityZoneMappings`` is used; mappings are never merged across
regions.  Provider order is assumed stable, which ARM does not promise.
"""

from __future__ import annotations

import logging

import requests

from az_zone_report import azure_api
from az_zone_report.azure_api import MalformedResponseError
from az_zone_report.cache import ZoneMappingCache
from az_zone_report.errors import SubscriptionNotFoundError
from az_zone_report.models import ZoneMapping, ZoneMappingSet, ZoneMapReport
from az_zone_report.observer import NullObserver, ReportObserver
from az_zone_report.settings import ReportSettings, get_settings

logger = logging.getLogger(__name__)

LOGICAL_ZONES = (1, 2, 3)


class MalformedRegionError(ValueError):
    """A region's ``availabilityZoneMappings`` attribute cannot be read."""


def parse_physical_zone(label: str, fmt: str = "suffix") -> str:
    """Return the canonical form of an ARM physical zone label.

    ``"suffix"`` keeps the token after the last ``-`` (``eastus-az3`` →
    ``az3``); ``"full"`` returns *label* unchanged.
    """
    if fmt == "full":
        return label
    return label.rsplit("-", 1)[-1]


def _region_pairs(location: dict) -> dict[int, str]:
    """Return ``{logical_zone: raw_physical_label}`` for one region."""
    raw = location.get("availabilityZoneMappings")
    if not isinstance(raw, list):
        raise MalformedRegionError("availabilityZoneMappings is not a list")

    pairs: dict[int, str] = {}
    for entry in raw:
        if not isinstance(entry, dict):
            raise MalformedRegionError(f"unexpected mapping entry {entry!r}")
        try:
            logical = int(entry["logicalZone"])
            physical = entry["physicalZone"]
        except (KeyError, TypeError, ValueError) as exc:
            raise MalformedRegionError(f"unreadable mapping entry {entry!r}") from exc
        if not isinstance(physical, str) or not physical:
            raise MalformedRegionError(f"empty physical zone in {entry!r}")
        if logical in LOGICAL_ZONES:
            # first occurrence wins
            pairs.setdefault(logical, physical)
    return pairs


def extract_zone_mappings(
    locations: list[dict],
    subscription_id: str,
    subscription_name: str = "",
    fmt: str = "suffix",
) -> ZoneMappingSet:
    """Build the zone mapping of a subscription from its ARM locations.

    Returns an empty set when no region carries a mapping.  Regions with a
    malformed mapping attribute are skipped with a warning.
    """
    for location in locations:
        if not isinstance(location, dict):
            logger.warning(
                "Skipping unreadable location %r of subscription %s", location, subscription_id
            )
            continue
        if not location.get("availabilityZoneMappings"):
            continue
        region = location.get("name") or ""
        try:
            pairs = _region_pairs(location)
        except MalformedRegionError as exc:
            logger.warning(
                "Skipping region %s of subscription %s: %s", region, subscription_id, exc
            )
            continue
        if not pairs:
            logger.debug(
                "Region %s of subscription %s maps no logical zone 1-3", region, subscription_id
            )
            continue

        mappings = tuple(
            ZoneMapping(
                subscriptionId=subscription_id,
                subscriptionName=subscription_name,
                region=region,
                logicalZone=logical,
                physicalZone=parse_physical_zone(pairs[logical], fmt),
                physicalZoneLabel=pairs[logical],
            )
            for logical in sorted(pairs)
        )
        return ZoneMappingSet(
            subscriptionId=subscription_id,
            subscriptionName=subscription_name,
            region=region,
            mappings=mappings,
        )

    return ZoneMappingSet(subscriptionId=subscription_id, subscriptionName=subscription_name)


def resolve_zone_mapping(
    subscription: dict,
    *,
    tenant_id: str | None = None,
    cache: ZoneMappingCache | None = None,
    observer: ReportObserver | None = None,
    settings: ReportSettings | None = None,
) -> ZoneMappingSet:
    """Return the zone mapping of *subscription*, querying ARM at most once per run.

    Raises :class:`~az_zone_report.errors.SubscriptionNotFoundError` when ARM
    does not know the subscription.  Transport and HTTP errors propagate as
    :class:`requests.RequestException`; a malformed body yields an empty set.
    """
    settings = settings or get_settings()
    observer = observer or NullObserver()
    sub_id = subscription["id"]

    if cache is not None:
        cached = cache.get(sub_id)
        if cached is not None:
            return cached

    try:
        locations = azure_api.list_locations(sub_id, tenant_id, settings)
    except MalformedResponseError as exc:
        logger.warning("Malformed locations response for subscription %s: %s", sub_id, exc)
        locations = []

    mapping = extract_zone_mappings(
        locations,
        sub_id,
        subscription.get("name", ""),
        settings.physical_zone_format,
    )
    if mapping.is_empty:
        logger.info("Subscription %s has no zone-enabled region", sub_id)

    if cache is not None:
        cache.set(mapping)
    observer.zone_mapping_resolved(mapping)
    return mapping


def resolve_tenant_zone_mappings(
    subscription_id: str | None = None,
    tenant_id: str | None = None,
    *,
    cache: ZoneMappingCache | None = None,
    observer: ReportObserver | None = None,
    settings: ReportSettings | None = None,
) -> ZoneMapReport:
    """Resolve the zone mapping of one subscription or of every subscription.

    A missing subscription that was asked for by ID propagates.  Any other
    subscription whose lookup fails is logged, reported to *observer* and
    skipped.
    """
    settings = settings or get_settings()
    observer = observer or NullObserver()
    cache = cache if cache is not None else ZoneMappingCache()

    targets = azure_api.resolve_targets(subscription_id, tenant_id, settings)

    rows: list[ZoneMapping] = []
    skipped: list[str] = []
    for index, sub in enumerate(targets, start=1):
        observer.subscription_started(sub, index, len(targets))
        try:
            mapping = resolve_zone_mapping(
                sub, tenant_id=tenant_id, cache=cache, observer=observer, settings=settings
            )
        except SubscriptionNotFoundError:
            if subscription_id:
                raise
            logger.warning("Subscription %s disappeared during the run", sub["id"])
            skipped.append(sub["id"])
            observer.subscription_skipped(sub, "not found")
            continue
        except requests.RequestException as exc:
            logger.warning("Error fetching zone mappings for subscription %s: %s", sub["id"], exc)
            skipped.append(sub["id"])
            observer.subscription_skipped(sub, str(exc))
            continue
        rows.extend(mapping.mappings)

    observer.run_finished(None)
    return ZoneMapReport(mappings=tuple(rows), skippedSubscriptions=tuple(skipped))
