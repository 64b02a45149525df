"""VM placement across physical availability zones.

Joins the VM inventory of each subscription against that subscription's
logical→physical zone mapping and aggregates the result.
"""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Iterable

import requests
from pydantic import ValidationError

from az_zone_report import azure_api
from az_zone_report.azure_api import MalformedResponseError
from az_zone_report.cache import ZoneMappingCache
from az_zone_report.errors import SubscriptionNotFoundError
from az_zone_report.models import (
    NO_AVAILABILITY_SET,
    UNASSIGNED,
    UNRESOLVABLE,
    ProtectionLevel,
    VmRecord,
    VmZoneReport,
    ZoneDistributionSummary,
    ZoneMappingSet,
)
from az_zone_report.observer import NullObserver, ReportObserver
from az_zone_report.settings import ReportSettings, get_settings
from az_zone_report.zones import resolve_zone_mapping

logger = logging.getLogger(__name__)

_POWER_STATE_PREFIX = "powerstate/"


# ---------------------------------------------------------------------------
# Field extraction
# ---------------------------------------------------------------------------


def logical_zone_of(vm: dict) -> int | None:
    """Return the first assigned zone of *vm*, or ``None`` when it has none."""
    zones = vm.get("zones") or []
    if not zones:
        return None
    try:
        return int(zones[0])
    except (TypeError, ValueError):
        logger.warning("VM %s has an unreadable zone %r", vm.get("name"), zones[0])
        return None


def availability_set_name_of(vm: dict) -> str | None:
    """Return the availability set name (last segment of its ARM ID)."""
    ref = (vm.get("properties") or {}).get("availabilitySet") or {}
    ref_id = ref.get("id") if isinstance(ref, dict) else None
    if not ref_id:
        return None
    return ref_id.rstrip("/").split("/")[-1] or None


def _power_state_from_statuses(statuses: object) -> str | None:
    if not isinstance(statuses, list):
        return None
    for status in statuses:
        code = (status.get("code") or "") if isinstance(status, dict) else ""
        if code.lower().startswith(_POWER_STATE_PREFIX):
            return code.split("/", 1)[1]
    return None


def power_state_of(vm: dict) -> str:
    """Return the power state of *vm* (``running``, ``deallocated``, …).

    Looked up, in order, in a direct ``powerState`` field, a ``statuses``
    list, then ``properties.instanceView.statuses``.  Defaults to
    ``"unknown"``.
    """
    props = vm.get("properties") or {}

    direct = vm.get("powerState") or props.get("powerState")
    if direct:
        direct = str(direct)
        if direct.lower().startswith(_POWER_STATE_PREFIX):
            return direct.split("/", 1)[1]
        # "VM running" as printed by the Azure CLI
        return direct.removeprefix("VM ").strip()

    state = _power_state_from_statuses(vm.get("statuses") or props.get("statuses"))
    if state:
        return state

    instance_view = props.get("instanceView") or {}
    state = _power_state_from_statuses(instance_view.get("statuses"))
    return state or "unknown"


def classify_protection(logical_zone: int | None, availability_set: str | None) -> ProtectionLevel:
    if logical_zone is not None:
        return ProtectionLevel.zone_isolated
    if availability_set:
        return ProtectionLevel.availability_set
    return ProtectionLevel.none


def resolve_physical_zone(logical_zone: int | None, mapping: ZoneMappingSet) -> str:
    """Return the physical zone for *logical_zone* in *mapping*.

    ``"unassigned"`` when the VM is not zonal, ``"unresolvable"`` when the
    mapping has no entry for that logical zone.
    """
    if logical_zone is None:
        return UNASSIGNED
    return mapping.lookup(logical_zone) or UNRESOLVABLE


def build_vm_record(vm: dict, subscription: dict, mapping: ZoneMappingSet) -> VmRecord:
    logical_zone = logical_zone_of(vm)
    avset = availability_set_name_of(vm)
    props = vm.get("properties") or {}
    return VmRecord(
        vmName=vm.get("name") or "",
        subscriptionId=subscription["id"],
        subscriptionName=subscription.get("name", subscription["id"]),
        resourceGroup=azure_api.resource_group_of(vm.get("id")),
        region=vm.get("location") or "",
        logicalZone=logical_zone,
        physicalZone=resolve_physical_zone(logical_zone, mapping),
        availabilitySetName=avset or NO_AVAILABILITY_SET,
        protectionLevel=classify_protection(logical_zone, avset),
        size=(props.get("hardwareProfile") or {}).get("vmSize") or "",
        powerState=power_state_of(vm),
    )


# ---------------------------------------------------------------------------
# Aggregation
# ---------------------------------------------------------------------------


def summarize(
    records: Iterable[VmRecord],
    *,
    scanned: int = 0,
    skipped: int = 0,
) -> ZoneDistributionSummary:
    """Count *records* per physical zone and per protection level."""
    by_zone: Counter[str] = Counter()
    by_level: Counter[str] = Counter()
    for record in records:
        by_zone[record.physicalZone] += 1
        by_level[record.protectionLevel.value] += 1

    return ZoneDistributionSummary(
        totalVms=sum(by_zone.values()),
        zonedVms=by_level[ProtectionLevel.zone_isolated.value],
        availabilitySetVms=by_level[ProtectionLevel.availability_set.value],
        unprotectedVms=by_level[ProtectionLevel.none.value],
        byPhysicalZone=dict(sorted(by_zone.items())),
        byProtectionLevel={level.value: by_level[level.value] for level in ProtectionLevel},
        subscriptionsScanned=scanned,
        subscriptionsSkipped=skipped,
    )


# ---------------------------------------------------------------------------
# Job
# ---------------------------------------------------------------------------


class VmZoneReporter:
    """Scan the VMs of a tenant and place each one in a physical zone.

    Pass the same :class:`ZoneMappingCache` to
    :func:`~az_zone_report.zones.resolve_tenant_zone_mappings` to reuse the
    mappings it resolved.
    """

    def __init__(
        self,
        tenant_id: str | None = None,
        *,
        observer: ReportObserver | None = None,
        cache: ZoneMappingCache | None = None,
        settings: ReportSettings | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.tenant_id = tenant_id or self.settings.tenant_id
        self.observer = observer or NullObserver()
        self.cache = cache if cache is not None else ZoneMappingCache()

    def _scan_subscription(self, sub: dict) -> tuple[ZoneMappingSet, list[VmRecord]]:
        mapping = resolve_zone_mapping(
            sub,
            tenant_id=self.tenant_id,
            cache=self.cache,
            observer=self.observer,
            settings=self.settings,
        )
        vms = azure_api.list_virtual_machines(sub["id"], self.tenant_id, self.settings)
        records: list[VmRecord] = []
        for vm in vms:
            if not isinstance(vm, dict):
                raise MalformedResponseError(f"unreadable VM entry {vm!r}")
            record = build_vm_record(vm, sub, mapping)
            self.observer.vm_recorded(record)
            records.append(record)
        return mapping, records

    def run(self, subscription_id: str | None = None) -> VmZoneReport:
        """Scan one subscription (when given) or every subscription of the tenant.

        Raises :class:`SubscriptionNotFoundError` when *subscription_id* is
        not in the tenant.  Other per-subscription failures are skipped.
        """
        targets = azure_api.resolve_targets(subscription_id, self.tenant_id, self.settings)

        records: list[VmRecord] = []
        mappings: list[ZoneMappingSet] = []
        skipped: list[str] = []
        for index, sub in enumerate(targets, start=1):
            self.observer.subscription_started(sub, index, len(targets))
            try:
                mapping, sub_records = self._scan_subscription(sub)
            except SubscriptionNotFoundError:
                if subscription_id:
                    raise
                logger.warning("Subscription %s disappeared during the run", sub["id"])
                skipped.append(sub["id"])
                self.observer.subscription_skipped(sub, "not found")
                continue
            except (requests.RequestException, MalformedResponseError, ValidationError) as exc:
                logger.warning("Skipping subscription %s: %s", sub["id"], exc)
                skipped.append(sub["id"])
                self.observer.subscription_skipped(sub, str(exc))
                continue
            mappings.append(mapping)
            records.extend(sub_records)

        summary = summarize(records, scanned=len(targets) - len(skipped), skipped=len(skipped))
        self.observer.run_finished(summary)
        return VmZoneReport(
            records=tuple(records),
            summary=summary,
            zoneMappings=tuple(mappings),
            skippedSubscriptions=tuple(skipped),
        )
