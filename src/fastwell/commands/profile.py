"""User profile commands."""

from dataclasses import asdict

import click

from ..clients import ProfileQuestionnaire
from ..db.repositories import UserProfileRepository
from ..exceptions import InvalidInputError
from ..models.fasting import DEFAULT_FASTING_GOAL_HOURS
from ..models.user_profile import (
    ACTIVITY_LEVEL_OPTIONS,
    DIET_TYPE_OPTIONS,
    FASTING_EXPERIENCE_OPTIONS,
    GENDER_OPTIONS,
    AIProfile,
    MealPreferences,
)
from .base import (
    async_command,
    echo_error,
    echo_info,
    echo_success,
    ensure_initialized,
    get_store,
    require_identity,
)


def _choice(options: tuple[tuple[str, str], ...]) -> click.Choice:
    return click.Choice([value for value, _ in options])


def _show(label: str, value) -> None:
    click.echo(f"  {label:<20} {value if value not in (None, '') else '-'}")


@click.group()
def profile():
    """View and edit your profile."""
    pass


@profile.command("show")
@click.pass_context
@async_command
async def show(ctx: click.Context):
    """Show the profile used for goals, suggestions and meal plans."""
    ensure_initialized(ctx)
    store = get_store(ctx)
    identity = await require_identity(ctx, store)

    user = await UserProfileRepository(store).ensure_profile(
        identity.id, identity.email, identity.display_name
    )

    click.echo()
    click.echo(click.style(user.display_name or user.email or user.uid, bold=True))
    click.echo("=" * 40)
    goal = user.fasting_goal_hours or DEFAULT_FASTING_GOAL_HOURS
    _show("Fasting goal", f"{goal:g} hours")

    click.echo()
    click.echo(click.style("AI profile", bold=True))
    ai = user.ai_profile
    _show("Age", ai.age)
    _show("Gender", ai.gender)
    _show("Activity level", ai.activity_level)
    _show("Sleep schedule", ai.sleep_schedule)
    _show("Daily routine", ai.daily_routine)
    _show("Fasting experience", ai.fasting_experience)

    click.echo()
    click.echo(click.style("Meal preferences", bold=True))
    meals = user.meal_preferences
    _show("Diet type", meals.diet_type)
    _show("Food intolerances", meals.food_intolerances)
    _show("Calorie goal", meals.calorie_goal)


@profile.command("goal")
@click.argument("hours", type=float)
@click.pass_context
@async_command
async def goal(ctx: click.Context, hours: float):
    """Set the default fasting goal (12-72 hours)."""
    ensure_initialized(ctx)
    store = get_store(ctx)
    identity = await require_identity(ctx, store)

    try:
        await UserProfileRepository(store).update_fasting_goal(identity.id, hours)
    except InvalidInputError as e:
        echo_error(str(e))
        ctx.exit(1)
    echo_success(f"Fasting goal set to {hours:g} hours")


@profile.command("ai")
@click.option("--age", type=int, default=None)
@click.option("--gender", type=_choice(GENDER_OPTIONS), default=None)
@click.option("--activity-level", type=_choice(ACTIVITY_LEVEL_OPTIONS), default=None)
@click.option("--sleep-schedule", default=None, help='e.g. "10 PM - 6 AM"')
@click.option("--daily-routine", default=None)
@click.option("--fasting-experience", type=_choice(FASTING_EXPERIENCE_OPTIONS), default=None)
@click.pass_context
@async_command
async def ai_profile(ctx: click.Context, **fields):
    """Update the details used for fasting-time suggestions.

    Only the options given are changed.
    """
    ensure_initialized(ctx)
    store = get_store(ctx)
    identity = await require_identity(ctx, store)

    repo = UserProfileRepository(store)
    user = await repo.ensure_profile(identity.id, identity.email, identity.display_name)
    updates = {name: value for name, value in fields.items() if value is not None}
    merged = AIProfile(**{**asdict(user.ai_profile), **updates})

    try:
        await repo.update_ai_profile(identity.id, merged)
    except InvalidInputError as e:
        echo_error(str(e))
        ctx.exit(1)
    echo_success("AI profile updated")


@profile.command("meals")
@click.option("--diet-type", type=_choice(DIET_TYPE_OPTIONS), default=None)
@click.option("--intolerances", "food_intolerances", default=None, help="Comma-separated, e.g. gluten,lactose")
@click.option("--calories", "calorie_goal", type=int, default=None, help="Daily calorie goal")
@click.pass_context
@async_command
async def meals(ctx: click.Context, **fields):
    """Update meal preferences used for meal plans."""
    ensure_initialized(ctx)
    store = get_store(ctx)
    identity = await require_identity(ctx, store)

    repo = UserProfileRepository(store)
    user = await repo.ensure_profile(identity.id, identity.email, identity.display_name)
    updates = {name: value for name, value in fields.items() if value is not None}
    merged = MealPreferences(**{**asdict(user.meal_preferences), **updates})

    try:
        await repo.update_meal_preferences(identity.id, merged)
    except InvalidInputError as e:
        echo_error(str(e))
        ctx.exit(1)
    echo_success("Meal preferences updated")


@profile.command("setup")
@click.pass_context
@async_command
async def setup(ctx: click.Context):
    """Fill in your whole profile with an interactive questionnaire."""
    ensure_initialized(ctx)
    store = get_store(ctx)
    identity = await require_identity(ctx, store)

    repo = UserProfileRepository(store)
    user = await repo.ensure_profile(identity.id, identity.email, identity.display_name)
    questionnaire = ProfileQuestionnaire()

    hours = await questionnaire.collect_fasting_goal(user.fasting_goal_hours)
    ai_profile = await questionnaire.collect_ai_profile(user.ai_profile)
    preferences = await questionnaire.collect_meal_preferences(user.meal_preferences)

    try:
        if hours is not None:
            await repo.update_fasting_goal(identity.id, hours)
        if ai_profile is not None:
            await repo.update_ai_profile(identity.id, ai_profile)
        if preferences is not None:
            await repo.update_meal_preferences(identity.id, preferences)
    except InvalidInputError as e:
        echo_error(str(e))
        ctx.exit(1)

    if hours is None and ai_profile is None and preferences is None:
        echo_info("Nothing changed.")
        return
    echo_success("Profile saved. Review it with 'fastwell profile show'.")
