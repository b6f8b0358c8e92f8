"""Weekly challenge and fasting score commands."""

import click

from ..db.repositories import FastingSessionRepository
from ..services.dashboard import load_score, load_weekly_challenges
from .base import async_command, echo_info, ensure_initialized, format_table, get_store, require_identity


@click.command()
@click.pass_context
@async_command
async def challenges(ctx: click.Context):
    """Show this week's fasting challenges.

    Each of the last seven days has a goal; meeting it earns points, and
    completing all seven earns a bonus.
    """
    ensure_initialized(ctx)
    store = get_store(ctx)
    identity = await require_identity(ctx, store)

    weekly = await load_weekly_challenges(FastingSessionRepository(store), identity.id)

    rows = [
        [
            day.day_label,
            day.target_date.isoformat(),
            f"{day.goal_hours}h",
            "done" if day.is_completed else "-",
            f"{day.points_earned}/{day.points_possible}",
        ]
        for day in weekly.days
    ]
    click.echo()
    click.echo(format_table(["Day", "Date", "Goal", "Status", "Points"], rows))
    click.echo()
    click.echo(f"Completed: {weekly.completed_count}/7")
    if weekly.bonus_awarded:
        click.echo(click.style(f"Weekly bonus: +{weekly.bonus_points}", fg="green"))
    click.echo(click.style(f"Total points: {weekly.total_points}", bold=True))


@click.command()
@click.pass_context
@async_command
async def score(ctx: click.Context):
    """Show the 1-10 fasting score for the last 30 days."""
    ensure_initialized(ctx)
    store = get_store(ctx)
    identity = await require_identity(ctx, store)

    summary = await load_score(FastingSessionRepository(store), identity.id)
    if not summary.has_data:
        echo_info("Score not available yet. Complete a fast to get one.")
        return

    click.echo()
    click.echo(click.style(f"Fasting score: {summary.total_score}/10", bold=True))
    click.echo(f"  Frequency:   {summary.frequency_sub_score}/5 ({summary.frequency_label})")
    click.echo(f"  Consistency: {summary.consistency_sub_score}/5")
    click.echo(f"  Fasts in the last 7 days:  {summary.fasts_last_7_days}")
    click.echo(f"  Fasts in the last 30 days: {summary.fasts_last_30_days}")
    if summary.consistency_percentage is not None:
        click.echo(f"  Goals met: {summary.consistency_percentage:.0f}%")
