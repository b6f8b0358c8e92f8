"""Weight tracking commands."""

from datetime import datetime

import click

from ..db.repositories import WeightEntryRepository
from ..exceptions import InvalidInputError
from ..models.timestamps import local_day
from ..models.weight import WeightUnit
from ..services.weight_trends import TrendView, aggregate_weight_history
from .base import (
    async_command,
    echo_error,
    echo_info,
    echo_success,
    ensure_initialized,
    format_table,
    get_store,
    require_identity,
)

UNIT_CHOICE = click.Choice([unit.value for unit in WeightUnit])


@click.group()
def weight():
    """Log and review body weight."""
    pass


@weight.command("add")
@click.argument("value", type=float)
@click.option("--unit", "-u", type=UNIT_CHOICE, default=WeightUnit.KG.value, help="Unit (default: kg)")
@click.option("--date", "-d", "entry_date", type=click.DateTime(), default=None, help="When it was measured (default: now)")
@click.pass_context
@async_command
async def add(ctx: click.Context, value: float, unit: str, entry_date: datetime | None):
    """Record a weight measurement."""
    ensure_initialized(ctx)
    store = get_store(ctx)
    identity = await require_identity(ctx, store)

    try:
        await WeightEntryRepository(store).add_weight_entry(identity.id, value, entry_date, unit)
    except InvalidInputError as e:
        echo_error(str(e))
        ctx.exit(1)

    echo_success(f"Recorded {value:g} {unit}")


@weight.command("history")
@click.option("--limit", "-l", default=15, type=int, help="Number of entries to show")
@click.pass_context
@async_command
async def history(ctx: click.Context, limit: int):
    """List recent weight entries."""
    ensure_initialized(ctx)
    store = get_store(ctx)
    identity = await require_identity(ctx, store)

    entries = await WeightEntryRepository(store).get_weight_history(identity.id, limit)
    if not entries:
        echo_info("No weight entries yet.")
        return

    rows = [[local_day(e.date).isoformat(), f"{e.weight:g}", e.unit.value] for e in entries]
    click.echo()
    click.echo(format_table(["Date", "Weight", "Unit"], rows))


@weight.command("trend")
@click.option("--view", "-v", type=click.Choice([v.value for v in TrendView]), default=TrendView.MONTH.value)
@click.option("--unit", "-u", type=UNIT_CHOICE, default=WeightUnit.KG.value)
@click.pass_context
@async_command
async def trend(ctx: click.Context, view: str, unit: str):
    """Show weight averaged by day, week or month."""
    ensure_initialized(ctx)
    store = get_store(ctx)
    identity = await require_identity(ctx, store)

    entries = await WeightEntryRepository(store).get_weight_history(identity.id, 400)
    points = aggregate_weight_history(entries, TrendView(view), WeightUnit(unit))
    if not points:
        echo_info("No weight entries yet.")
        return

    rows = [[p.period_start.isoformat(), f"{p.weight:g}", str(p.entries)] for p in points]
    click.echo()
    click.echo(format_table(["Period", f"Weight ({unit})", "Entries"], rows))
