"""Progress callbacks for the reporting jobs.

The jobs report what they are doing through a :class:`ReportObserver`;
they never print.  The CLI plugs in :class:`ConsoleObserver`, library
callers get :class:`NullObserver` unless they pass their own.
"""

from __future__ import annotations

from typing import Protocol

import click

from az_zone_report.models import VmRecord, ZoneDistributionSummary, ZoneMappingSet


class ReportObserver(Protocol):
    def subscription_started(self, subscription: dict, index: int, total: int) -> None: ...

    def subscription_skipped(self, subscription: dict, reason: str) -> None: ...

    def zone_mapping_resolved(self, mapping: ZoneMappingSet) -> None: ...

    def vm_recorded(self, record: VmRecord) -> None: ...

    def run_finished(self, summary: ZoneDistributionSummary | None) -> None: ...


class NullObserver:
    """Observer that ignores every event."""

    def subscription_started(self, subscription: dict, index: int, total: int) -> None:
        pass

    def subscription_skipped(self, subscription: dict, reason: str) -> None:
        pass

    def zone_mapping_resolved(self, mapping: ZoneMappingSet) -> None:
        pass

    def vm_recorded(self, record: VmRecord) -> None:
        pass

    def run_finished(self, summary: ZoneDistributionSummary | None) -> None:
        pass


class ConsoleObserver(NullObserver):
    """Write coloured progress lines to stderr."""

    def __init__(self, verbose: bool = False) -> None:
        self.verbose = verbose

    def subscription_started(self, subscription: dict, index: int, total: int) -> None:
        counter = click.style(f"[{index}/{total}]", fg="cyan")
        click.echo(f"{counter} {subscription['name']} ({subscription['id']})", err=True)

    def subscription_skipped(self, subscription: dict, reason: str) -> None:
        click.echo(
            f"  {click.style('skipped', fg='yellow')} {subscription['name']}: {reason}",
            err=True,
        )

    def zone_mapping_resolved(self, mapping: ZoneMappingSet) -> None:
        if mapping.is_empty:
            click.echo(f"  {click.style('no zone-enabled region', fg='yellow')}", err=True)
            return
        pairs = ", ".join(f"{m.logicalZone}→{m.physicalZone}" for m in mapping.mappings)
        click.echo(f"  zones ({mapping.region}): {pairs}", err=True)

    def vm_recorded(self, record: VmRecord) -> None:
        if self.verbose:
            click.echo(f"    {record.vmName}: {record.physicalZone}", err=True)

    def run_finished(self, summary: ZoneDistributionSummary | None) -> None:
        click.echo(click.style("✦ done", fg="green", bold=True), err=True)
