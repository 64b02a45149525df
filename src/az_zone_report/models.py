"""Pydantic models for zone mappings and VM placement records.

Field names follow the camelCase keys used in the JSON payloads and CSV
headers; every model is frozen once built.
"""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field

UNASSIGNED = "unassigned"
UNRESOLVABLE = "unresolvable"
NO_AVAILABILITY_SET = "none"


class ProtectionLevel(StrEnum):
    """Placement robustness of a VM, strongest first."""

    zone_isolated = "zone-isolated"
    availability_set = "availability-set"
    none = "none"


# ---------------------------------------------------------------------------
# Zone mappings
# ---------------------------------------------------------------------------


class ZoneMapping(BaseModel):
    model_config = ConfigDict(frozen=True)

    subscriptionId: str
    subscriptionName: str
    region: str
    logicalZone: int = Field(ge=1, le=3)
    physicalZone: str
    physicalZoneLabel: str


class ZoneMappingSet(BaseModel):
    """The logical→physical mapping of one subscription.

    Empty when the subscription has no zone-enabled region.
    """

    model_config = ConfigDict(frozen=True)

    subscriptionId: str
    subscriptionName: str = ""
    region: str | None = None
    mappings: tuple[ZoneMapping, ...] = ()

    def lookup(self, logical_zone: int) -> str | None:
        for mapping in self.mappings:
            if mapping.logicalZone == logical_zone:
                return mapping.physicalZone
        return None

    @property
    def is_empty(self) -> bool:
        return not self.mappings


# ---------------------------------------------------------------------------
# VM placement
# ---------------------------------------------------------------------------


class VmRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    vmName: str
    subscriptionId: str
    subscriptionName: str
    resourceGroup: str
    region: str
    logicalZone: int | None = None
    physicalZone: str = UNASSIGNED
    availabilitySetName: str = NO_AVAILABILITY_SET
    protectionLevel: ProtectionLevel = ProtectionLevel.none
    size: str = ""
    powerState: str = "unknown"

    @property
    def logical_zone_label(self) -> str:
        return UNASSIGNED if self.logicalZone is None else str(self.logicalZone)


class ZoneDistributionSummary(BaseModel):
    model_config = ConfigDict(frozen=True)

    totalVms: int = 0
    zonedVms: int = 0
    availabilitySetVms: int = 0
    unprotectedVms: int = 0
    byPhysicalZone: dict[str, int] = Field(default_factory=dict)
    byProtectionLevel: dict[str, int] = Field(default_factory=dict)
    subscriptionsScanned: int = 0
    subscriptionsSkipped: int = 0


# ---------------------------------------------------------------------------
# Job results
# ---------------------------------------------------------------------------


class ZoneMapReport(BaseModel):
    model_config = ConfigDict(frozen=True)

    mappings: tuple[ZoneMapping, ...] = ()
    skippedSubscriptions: tuple[str, ...] = ()


class VmZoneReport(BaseModel):
    model_config = ConfigDict(frozen=True)

    records: tuple[VmRecord, ...] = ()
    summary: ZoneDistributionSummary = Field(default_factory=ZoneDistributionSummary)
    zoneMappings: tuple[ZoneMappingSet, ...] = ()
    skippedSubscriptions: tuple[str, ...] = ()
