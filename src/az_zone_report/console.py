"""Console rendering for reports printed without an output file."""

from __future__ import annotations

from collections.abc import Sequence

import click

from az_zone_report.models import UNASSIGNED, UNRESOLVABLE, ZoneDistributionSummary, ZoneMapping

_LEVEL_COLOURS = {
    "zone-isolated": "green",
    "availability-set": "yellow",
    "none": "red",
}


def _table(headers: Sequence[str], rows: Sequence[Sequence[str]]) -> list[str]:
    widths = [len(h) for h in headers]
    for row in rows:
        widths = [max(w, len(cell)) for w, cell in zip(widths, row, strict=True)]
    lines = [
        "  ".join(h.ljust(w) for h, w in zip(headers, widths, strict=True)),
        "  ".join("-" * w for w in widths),
    ]
    lines.extend("  ".join(c.ljust(w) for c, w in zip(row, widths, strict=True)) for row in rows)
    return lines


def print_zone_map(mappings: Sequence[ZoneMapping], skipped: Sequence[str] = ()) -> None:
    if not mappings:
        click.echo(click.style("No zone mappings found.", fg="yellow"))
    else:
        rows = [
            [m.subscriptionName, m.subscriptionId, m.region, str(m.logicalZone), m.physicalZone]
            for m in mappings
        ]
        headers = ["Subscription", "SubscriptionId", "Region", "LogicalZone", "PhysicalZone"]
        for line in _table(headers, rows):
            click.echo(line)
    if skipped:
        click.echo(click.style(f"\n{len(skipped)} subscription(s) skipped.", fg="yellow"))


def print_summary(summary: ZoneDistributionSummary) -> None:
    click.echo(click.style("\nVM zone distribution", bold=True))
    click.echo(f"  Subscriptions scanned : {summary.subscriptionsScanned}")
    if summary.subscriptionsSkipped:
        click.echo(
            f"  Subscriptions skipped : {click.style(str(summary.subscriptionsSkipped), fg='yellow')}"
        )
    click.echo(f"  Total VMs             : {summary.totalVms}")
    click.echo(f"  Zone-isolated         : {click.style(str(summary.zonedVms), fg='green')}")
    click.echo(
        f"  In availability sets  : {click.style(str(summary.availabilitySetVms), fg='yellow')}"
    )
    click.echo(f"  No protection         : {click.style(str(summary.unprotectedVms), fg='red')}")

    if not summary.totalVms:
        click.echo(click.style("\nNo virtual machines found.", fg="yellow"))
        return

    click.echo("")
    rows = []
    for zone, count in summary.byPhysicalZone.items():
        share = f"{100 * count / summary.totalVms:.1f}%"
        rows.append([zone, str(count), share])
    for line in _table(["PhysicalZone", "VMs", "Share"], rows):
        click.echo(line)

    sentinel = summary.byPhysicalZone.get(UNRESOLVABLE, 0)
    if sentinel:
        click.echo(
            click.style(
                f"\n{sentinel} zonal VM(s) could not be mapped to a physical zone.", fg="yellow"
            )
        )
    unassigned = summary.byPhysicalZone.get(UNASSIGNED, 0)
    if unassigned:
        click.echo(f"{unassigned} VM(s) are not pinned to a zone.")

    levels = ", ".join(
        click.style(f"{level}={count}", fg=_LEVEL_COLOURS.get(level))
        for level, count in summary.byProtectionLevel.items()
    )
    click.echo(f"\nProtection levels: {levels}")
