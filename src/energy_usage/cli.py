"""Command-line interface for household energy usage."""

import json
import logging
from pathlib import Path
from zoneinfo import ZoneInfo

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from .buckets import partitions_for, to_instant
from .config import load_settings
from .exceptions import EnergyUsageError
from .models import DataType, EnergyType, format_cost
from .service import fetch_usage
from .tariffs import build_tariff_index

console = Console()


@click.group()
@click.option("--config", "config_path", type=click.Path(exists=True), help="Path to energy.yaml")
@click.option("--verbose", "-v", is_flag=True, help="Show debug logging")
@click.pass_context
def cli(ctx, config_path, verbose):
    """Household energy usage - half-hourly electricity and gas costs."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )

    ctx.ensure_object(dict)
    try:
        ctx.obj["settings"] = load_settings(Path(config_path) if config_path else None)
    except ValueError as e:
        console.print(f"[red]Invalid configuration: {e}[/red]")
        ctx.exit(1)


@cli.command()
@click.option("--user-id", required=True, help="Household identifier")
@click.option("--start", required=True, help="Start (epoch seconds or ISO date/time)")
@click.option("--end", required=True, help="End (epoch seconds or ISO date/time)")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def usage(ctx, user_id, start, end, as_json):
    """Show half-hourly electricity and gas usage and cost."""
    settings = ctx.obj["settings"]
    try:
        records = fetch_usage(
            user_id,
            start,
            end,
            settings.record_source(),
            tz=settings.timezone,
            conflicts=settings.tariff_conflicts,
        )
    except EnergyUsageError as e:
        console.print(f"[red]Error: {e}[/red]")
        ctx.exit(1)

    if as_json:
        click.echo(json.dumps([r.to_dict() for r in records], indent=2))
        return

    zone = ZoneInfo(settings.timezone)
    table = Table(title=f"Energy usage for {user_id}")
    table.add_column("Time", style="cyan")
    table.add_column("Electricity kWh", justify="right")
    table.add_column("Electricity (p)", justify="right")
    table.add_column("Gas kWh", justify="right")
    table.add_column("Gas (p)", justify="right")

    for r in records:
        table.add_row(
            r.timestamp.astimezone(zone).strftime("%Y-%m-%d %H:%M"),
            f"{r.electricity_consumption:.3f}",
            format_cost(r.electricity_cost),
            f"{r.gas_consumption:.3f}",
            format_cost(r.gas_cost),
        )

    elec_cost = sum(r.electricity_cost for r in records)
    gas_cost = sum(r.gas_cost for r in records)
    table.add_row(
        "[bold]Total[/bold]",
        f"{sum(r.electricity_consumption for r in records):.3f}",
        f"£{elec_cost / 100:.2f}",
        f"{sum(r.gas_consumption for r in records):.3f}",
        f"£{gas_cost / 100:.2f}",
        end_section=True,
    )

    console.print(table)
    console.print(f"[green]Total cost: £{(elec_cost + gas_cost) / 100:.2f}[/green]")


@cli.command()
@click.option("--user-id", required=True, help="Household identifier")
@click.option(
    "--energy",
    type=click.Choice([e.value for e in EnergyType]),
    default=EnergyType.ELECTRICITY.value,
    show_default=True,
)
@click.option("--start", required=True, help="Start (epoch seconds or ISO date/time)")
@click.option("--end", required=True, help="End (epoch seconds or ISO date/time)")
@click.pass_context
def tariffs(ctx, user_id, energy, start, end):
    """Show the time-of-use rates and standing charges for a period."""
    settings = ctx.obj["settings"]
    energy_type = EnergyType(energy)
    try:
        days = partitions_for(to_instant(start), to_instant(end), settings.timezone)
        rows = settings.record_source().retrieve(user_id, energy_type, DataType.TARIFF, days)
        index = build_tariff_index(energy_type, rows, settings.tariff_conflicts)
    except EnergyUsageError as e:
        console.print(f"[red]Error: {e}[/red]")
        ctx.exit(1)

    if not index.rates and not index.standing_charges:
        console.print("[yellow]No tariff records found[/yellow]")
        return

    zone = ZoneInfo(settings.timezone)

    table = Table(title=f"{energy_type.value.title()} time-of-use rates")
    table.add_column("From", style="cyan")
    table.add_column("Rate (p/kWh)", justify="right")
    for instant, rate in sorted(index.rates.items()):
        table.add_row(instant.astimezone(zone).strftime("%Y-%m-%d %H:%M"), f"{rate:.2f}")
    console.print(table)

    if index.standing_charges:
        table = Table(title=f"{energy_type.value.title()} standing charges")
        table.add_column("From", style="cyan")
        table.add_column("Charge (p/day)", justify="right")
        for instant, charge in sorted(index.standing_charges.items()):
            table.add_row(instant.astimezone(zone).strftime("%Y-%m-%d %H:%M"), f"{charge:.2f}")
        console.print(table)


if __name__ == "__main__":
    cli()
