"""Unified CLI for az-zone-report.

Provides two subcommands:
    az-zone-report zone-map  – logical→physical zone mapping per subscription
    az-zone-report vm-zones  – VM distribution across physical zones
"""

import logging
import sys

import click

from az_zone_report import __version__, azure_api
from az_zone_report.errors import SetupError


class _LevelPrefixFormatter(logging.Formatter):
    """``LEVEL:    name - message`` with a coloured level, like uvicorn's."""

    _COLOURS = {
        logging.DEBUG: "cyan",
        logging.INFO: "green",
        logging.WARNING: "yellow",
        logging.ERROR: "red",
        logging.CRITICAL: "bright_red",
    }

    def __init__(self, use_colors: bool = True) -> None:
        super().__init__("%(levelprefix)s %(name)s - %(message)s")
        self.use_colors = use_colors

    def formatMessage(self, record: logging.LogRecord) -> str:  # noqa: N802
        prefix = f"{record.levelname}:".ljust(9)
        if self.use_colors:
            prefix = click.style(prefix, fg=self._COLOURS.get(record.levelno))
        record.__dict__["levelprefix"] = prefix
        return super().formatMessage(record)


def _setup_logging(level: int = logging.WARNING) -> None:
    """Configure the root ``az_zone_report`` logger."""
    handler = logging.StreamHandler()
    handler.setFormatter(_LevelPrefixFormatter(use_colors=sys.stderr.isatty()))
    app_logger = logging.getLogger("az_zone_report")
    app_logger.handlers = [handler]
    app_logger.setLevel(level)
    app_logger.propagate = False

    # Silence noisy third-party loggers
    logging.getLogger("azure").setLevel(logging.WARNING)


def _fail(exc: SetupError) -> None:
    click.echo(click.style(f"✘ {exc}", fg="red", bold=True), err=True)
    sys.exit(1)


_verbose_option = click.option(
    "--verbose",
    "-v",
    is_flag=True,
    default=False,
    help="Enable verbose logging.",
)
_subscription_option = click.option(
    "--subscription-id",
    "-s",
    default=None,
    help="Only report on this subscription.",
)


@click.group()
@click.version_option(version=__version__, prog_name="az-zone-report")
def cli() -> None:
    """Azure availability zone reports."""


@cli.command("zone-map")
@_subscription_option
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False, writable=True),
    default=None,
    help="Write the mapping as CSV to this path instead of printing it.",
)
@_verbose_option
def zone_map(subscription_id: str | None, output: str | None, verbose: bool) -> None:
    """Show how logical zones 1-3 map to physical zones per subscription."""
    from az_zone_report.console import print_zone_map
    from az_zone_report.exporters import write_zone_map_csv
    from az_zone_report.observer import ConsoleObserver
    from az_zone_report.settings import get_settings
    from az_zone_report.zones import resolve_tenant_zone_mappings

    _setup_logging(level=logging.DEBUG if verbose else logging.WARNING)
    settings = get_settings()
    tenant_id = settings.tenant_id

    try:
        azure_api.ensure_authenticated(tenant_id)
        report = resolve_tenant_zone_mappings(
            subscription_id,
            tenant_id,
            observer=ConsoleObserver(verbose=verbose),
            settings=settings,
        )
    except SetupError as exc:
        _fail(exc)
        return

    if output:
        path = write_zone_map_csv(report.mappings, output)
        click.echo(f"Zone mappings written to {click.style(str(path), fg='cyan')}")
    else:
        print_zone_map(report.mappings, report.skippedSubscriptions)


@cli.command("vm-zones")
@_subscription_option
@click.option("--tenant-id", "-t", default=None, help="Tenant to scan (default: current).")
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False, writable=True),
    default=None,
    help="Write the report to this path (.html for HTML, anything else for CSV).",
)
@click.option(
    "--csv",
    "csv_path",
    type=click.Path(dir_okay=False, writable=True),
    default=None,
    help="Also write the raw VM list as CSV to this path.",
)
@_verbose_option
def vm_zones(
    subscription_id: str | None,
    tenant_id: str | None,
    output: str | None,
    csv_path: str | None,
    verbose: bool,
) -> None:
    """Report how virtual machines are spread across physical zones."""
    from az_zone_report.console import print_summary
    from az_zone_report.exporters import write_vm_csv, write_vm_report
    from az_zone_report.observer import ConsoleObserver
    from az_zone_report.reporter import VmZoneReporter
    from az_zone_report.settings import get_settings

    _setup_logging(level=logging.DEBUG if verbose else logging.WARNING)
    settings = get_settings()
    tenant_id = tenant_id or settings.tenant_id

    reporter = VmZoneReporter(
        tenant_id, observer=ConsoleObserver(verbose=verbose), settings=settings
    )
    try:
        azure_api.ensure_authenticated(tenant_id)
        report = reporter.run(subscription_id)
    except SetupError as exc:
        _fail(exc)
        return

    if output:
        path = write_vm_report(report, output, settings=settings)
        click.echo(f"Report written to {click.style(str(path), fg='cyan')}")
    if csv_path:
        path = write_vm_csv(report.records, csv_path)
        click.echo(f"CSV export written to {click.style(str(path), fg='cyan')}")
    if not output and not csv_path:
        print_summary(report.summary)
