"""CSV and HTML writers for zone map and VM placement reports."""

from __future__ import annotations

import csv
import logging
from collections import defaultdict
from collections.abc import Iterable
from datetime import datetime
from pathlib import Path

from jinja2 import Environment, PackageLoader, select_autoescape

from az_zone_report import __version__
from az_zone_report.models import VmRecord, VmZoneReport, ZoneMapping
from az_zone_report.settings import ReportSettings, get_settings

logger = logging.getLogger(__name__)

ZONE_MAP_COLUMNS = ["Subscription", "SubscriptionId", "PhysicalZone", "LogicalZone"]
VM_COLUMNS = [
    "VMName",
    "SubscriptionName",
    "ResourceGroup",
    "Location",
    "LogicalZone",
    "PhysicalZone",
    "AvailabilitySet",
    "ProtectionLevel",
    "VMSize",
    "PowerState",
]

HTML_SUFFIXES = {".html", ".htm"}

_env = Environment(
    loader=PackageLoader("az_zone_report", "templates"),
    autoescape=select_autoescape(["html", "j2"]),
    trim_blocks=True,
    lstrip_blocks=True,
)


# ---------------------------------------------------------------------------
# Rows
# ---------------------------------------------------------------------------


def zone_mapping_row(mapping: ZoneMapping) -> dict[str, str]:
    return {
        "Subscription": mapping.subscriptionName,
        "SubscriptionId": mapping.subscriptionId,
        "PhysicalZone": mapping.physicalZone,
        "LogicalZone": str(mapping.logicalZone),
    }


def vm_record_row(record: VmRecord) -> dict[str, str]:
    return {
        "VMName": record.vmName,
        "SubscriptionName": record.subscriptionName,
        "ResourceGroup": record.resourceGroup,
        "Location": record.region,
        "LogicalZone": record.logical_zone_label,
        "PhysicalZone": record.physicalZone,
        "AvailabilitySet": record.availabilitySetName,
        "ProtectionLevel": record.protectionLevel.value,
        "VMSize": record.size,
        "PowerState": record.powerState,
    }


def _write_csv(path: Path, columns: list[str], rows: Iterable[dict[str, str]]) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", newline="", encoding="utf-8") as fh:
        writer = csv.DictWriter(fh, fieldnames=columns)
        writer.writeheader()
        writer.writerows(rows)
    logger.info("Wrote %s", path)
    return path


def write_zone_map_csv(mappings: Iterable[ZoneMapping], path: str | Path) -> Path:
    return _write_csv(Path(path), ZONE_MAP_COLUMNS, (zone_mapping_row(m) for m in mappings))


def write_vm_csv(records: Iterable[VmRecord], path: str | Path) -> Path:
    return _write_csv(Path(path), VM_COLUMNS, (vm_record_row(r) for r in records))


# ---------------------------------------------------------------------------
# HTML
# ---------------------------------------------------------------------------


def zone_distribution_rows(report: VmZoneReport) -> list[dict]:
    """Return one row per physical zone: count, share, subscriptions, bar width."""
    summary = report.summary
    subs_by_zone: dict[str, set[str]] = defaultdict(set)
    for record in report.records:
        subs_by_zone[record.physicalZone].add(record.subscriptionName)

    peak = max(summary.byPhysicalZone.values(), default=0)
    rows: list[dict] = []
    for zone, count in summary.byPhysicalZone.items():
        rows.append(
            {
                "zone": zone,
                "count": count,
                "share": round(100 * count / summary.totalVms, 1) if summary.totalVms else 0.0,
                "width": round(100 * count / peak) if peak else 0,
                "subscriptions": sorted(subs_by_zone[zone]),
            }
        )
    return rows


def render_vm_html(
    report: VmZoneReport,
    *,
    title: str | None = None,
    settings: ReportSettings | None = None,
) -> str:
    """Render *report* as a self-contained HTML document."""
    settings = settings or get_settings()
    template = _env.get_template("vm_zone_report.html.j2")
    return template.render(
        title=title or settings.report_title,
        version=__version__,
        generated_at=datetime.now().strftime("%Y-%m-%d %H:%M:%S"),
        summary=report.summary,
        distribution=zone_distribution_rows(report),
        zone_mappings=report.zoneMappings,
        rows=[vm_record_row(r) for r in report.records],
        columns=VM_COLUMNS,
        skipped=report.skippedSubscriptions,
    )


def write_vm_html(
    report: VmZoneReport,
    path: str | Path,
    *,
    title: str | None = None,
    settings: ReportSettings | None = None,
) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(render_vm_html(report, title=title, settings=settings), encoding="utf-8")
    logger.info("Wrote %s", path)
    return path


def write_vm_report(
    report: VmZoneReport,
    path: str | Path,
    *,
    settings: ReportSettings | None = None,
) -> Path:
    """Write *report* as HTML or CSV depending on the suffix of *path*."""
    path = Path(path)
    if path.suffix.lower() in HTML_SUFFIXES:
        return write_vm_html(report, path, settings=settings)
    return write_vm_csv(report.records, path)
