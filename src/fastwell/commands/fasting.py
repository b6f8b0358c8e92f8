"""Fasting session commands."""

import click

from ..db.repositories import FastingSessionRepository, UserProfileRepository
from ..exceptions import ActiveFastExistsError, InvalidInputError
from ..models.fasting import resolve_goal_hours
from ..models.timestamps import utc_now
from .base import (
    async_command,
    echo_error,
    echo_info,
    echo_success,
    ensure_initialized,
    format_duration,
    format_table,
    get_store,
    require_identity,
)


def _local_time(value) -> str:
    return value.astimezone().strftime("%Y-%m-%d %H:%M")


@click.group()
def fast():
    """Start, end and review fasts."""
    pass


@fast.command("start")
@click.option("--goal", "-g", type=float, default=None, help="Goal in hours (default: profile goal or 16)")
@click.pass_context
@async_command
async def start(ctx: click.Context, goal: float | None):
    """Start a new fast."""
    ensure_initialized(ctx)
    store = get_store(ctx)
    identity = await require_identity(ctx, store)

    if goal is None:
        profile = await UserProfileRepository(store).get_user_profile(identity.id)
        goal = resolve_goal_hours(None, profile.fasting_goal_hours if profile else None)

    try:
        session_id = await FastingSessionRepository(store).start_new_fast(identity.id, goal)
    except ActiveFastExistsError:
        echo_error("You already have an active fast. End it with 'fastwell fast end'.")
        ctx.exit(1)
    except InvalidInputError as e:
        echo_error(str(e))
        ctx.exit(1)

    echo_success(f"Fast started with a {goal:g} hour goal (id: {session_id})")


@fast.command("end")
@click.option("--notes", "-n", default=None, help="Notes about this fast")
@click.pass_context
@async_command
async def end(ctx: click.Context, notes: str | None):
    """End the active fast."""
    ensure_initialized(ctx)
    store = get_store(ctx)
    identity = await require_identity(ctx, store)

    repo = FastingSessionRepository(store)
    active = await repo.get_active_fast(identity.id)
    if active is None:
        echo_info("No active fast to end.")
        return

    session = await repo.end_current_fast(active.id, notes)
    echo_success(f"Fast completed: {format_duration(session.actual_duration_minutes * 60)}")
    if session.has_goal:
        if session.met_goal():
            echo_success(f"Goal of {session.goal_duration_hours:g} hours reached!")
        else:
            echo_info(f"Goal of {session.goal_duration_hours:g} hours not reached this time.")


@fast.command("status")
@click.pass_context
@async_command
async def status(ctx: click.Context):
    """Show the running fast timer."""
    ensure_initialized(ctx)
    store = get_store(ctx)
    identity = await require_identity(ctx, store)

    session = await FastingSessionRepository(store).get_active_fast(identity.id)
    if session is None:
        echo_info("Not fasting. Start with 'fastwell fast start'.")
        return

    profile = await UserProfileRepository(store).get_user_profile(identity.id)
    profile_goal = profile.fasting_goal_hours if profile else None
    now = utc_now()

    click.echo()
    click.echo(click.style("Fasting", bold=True))
    click.echo("=" * 40)
    click.echo(f"Started:   {_local_time(session.start_time)}")
    click.echo(f"Goal:      {resolve_goal_hours(session.goal_duration_hours, profile_goal):g} hours")
    click.echo(f"Elapsed:   {format_duration(session.elapsed(now).total_seconds())}")
    click.echo(f"Remaining: {format_duration(session.remaining(now, profile_goal).total_seconds())}")
    click.echo(f"Progress:  {session.progress_percentage(now, profile_goal):.1f}%")


@fast.command("history")
@click.option("--count", "-c", default=7, type=int, help="Number of fasts to show")
@click.pass_context
@async_command
async def history(ctx: click.Context, count: int):
    """List recent completed fasts."""
    ensure_initialized(ctx)
    store = get_store(ctx)
    identity = await require_identity(ctx, store)

    sessions = await FastingSessionRepository(store).get_fasting_history(identity.id, count)
    if not sessions:
        echo_info("No completed fasts yet.")
        return

    rows = []
    for session in sessions:
        goal = f"{session.goal_duration_hours:g}h" if session.has_goal else "-"
        rows.append(
            [
                _local_time(session.start_time),
                format_duration((session.actual_duration_minutes or 0) * 60),
                goal,
                "yes" if session.met_goal() else "no",
                session.notes,
            ]
        )

    click.echo()
    click.echo(format_table(["Started", "Duration", "Goal", "Met", "Notes"], rows))
