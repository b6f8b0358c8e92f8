"""AI suggestion and meal-plan commands."""

from dataclasses import asdict

import click

from ..ai.client import CompletionClient
from ..db.repositories import UserProfileRepository
from ..db.store import DocumentStore
from ..exceptions import DailyLimitExceededError, InvalidInputError
from ..models.ai_requests import AIRequest, RequestKind, RequestStatus
from ..models.user_profile import AIProfile, MealPreferences
from ..services.ai_requests import AIRequestService
from .base import (
    async_command,
    echo_error,
    echo_info,
    echo_warning,
    ensure_initialized,
    format_table,
    get_settings,
    get_store,
    require_identity,
)


def _service(ctx: click.Context, store: DocumentStore, needs_key: bool = True) -> AIRequestService:
    settings = get_settings(ctx)
    if needs_key and not settings.gemini_api_key:
        echo_warning("GEMINI_API_KEY is not set; the request will be stored with an error.")
    return AIRequestService(
        store,
        CompletionClient.from_settings(settings),
        meal_plan_daily_limit=settings.meal_plan_daily_limit,
    )


def print_suggestion(request: AIRequest) -> None:
    output = request.output or {}
    click.echo()
    click.echo(click.style("Suggested fasting window", bold=True))
    click.echo("=" * 40)
    click.echo(f"Start: {output.get('suggestedStartTime', '-')}")
    click.echo(f"End:   {output.get('suggestedEndTime', '-')}")
    click.echo()
    click.echo(output.get("reasoning", ""))


def print_meal_plan(request: AIRequest) -> None:
    output = request.output or {}
    plan = output.get("mealPlan") or []
    if not plan:
        echo_info("The AI returned an empty meal plan.")
    for day in plan:
        click.echo()
        click.echo(click.style(day.get("day", ""), bold=True))
        for meal in day.get("meals", []):
            click.echo(f"  {meal.get('name', '')}: {meal.get('description', '')}")
    if output.get("disclaimer"):
        click.echo()
        click.echo(click.style(output["disclaimer"], dim=True))


def _report(request: AIRequest, printer) -> None:
    if request.status == RequestStatus.ERROR:
        echo_error(request.error or "AI request failed.")
        return
    printer(request)


@click.group()
def ai():
    """AI fasting suggestions and meal plans."""
    pass


@ai.command("suggest")
@click.option("--age", type=int, default=None)
@click.option("--gender", default=None)
@click.option("--activity-level", default=None)
@click.option("--sleep-schedule", default=None)
@click.option("--daily-routine", default=None)
@click.option("--fasting-experience", default=None)
@click.pass_context
@async_command
async def suggest(ctx: click.Context, **fields):
    """Suggest a fasting window from your AI profile.

    Options override the saved profile for this request only.
    """
    ensure_initialized(ctx)
    store = get_store(ctx)
    identity = await require_identity(ctx, store)

    user = await UserProfileRepository(store).get_user_profile(identity.id)
    stored = user.ai_profile if user else AIProfile()
    overrides = {name: value for name, value in fields.items() if value is not None}
    ai_profile = AIProfile(**{**asdict(stored), **overrides})

    service = _service(ctx, store)
    try:
        request_id = await service.create_suggestion_request(identity.id, ai_profile)
    except InvalidInputError as e:
        echo_error(str(e))
        click.echo("Fill in your profile with 'fastwell profile ai'.")
        ctx.exit(1)

    echo_info("Asking the AI for a fasting window...")
    request = await service.process_request(RequestKind.SUGGESTION, request_id)
    _report(request, print_suggestion)


@ai.command("meal-plan")
@click.option("--days", "number_of_days", type=click.IntRange(1, 7), default=3, help="Days to plan (1-7)")
@click.option("--diet-type", default=None)
@click.option("--intolerances", "food_intolerances", default=None)
@click.option("--calories", "calorie_goal", type=int, default=None)
@click.pass_context
@async_command
async def meal_plan(ctx: click.Context, number_of_days: int, **fields):
    """Generate a meal plan from your meal preferences."""
    ensure_initialized(ctx)
    store = get_store(ctx)
    identity = await require_identity(ctx, store)

    preferences = MealPreferences(**fields)
    if preferences.is_empty():
        user = await UserProfileRepository(store).get_user_profile(identity.id)
        if user:
            preferences = user.meal_preferences

    service = _service(ctx, store)
    try:
        request_id = await service.create_meal_plan_request(identity.id, preferences, number_of_days)
    except (InvalidInputError, DailyLimitExceededError) as e:
        echo_error(str(e))
        ctx.exit(1)

    echo_info(f"Asking the AI for a {number_of_days}-day meal plan...")
    request = await service.process_request(RequestKind.MEAL_PLAN, request_id)
    _report(request, print_meal_plan)


@ai.command("history")
@click.argument("kind", type=click.Choice([k.value for k in RequestKind]))
@click.pass_context
@async_command
async def history(ctx: click.Context, kind: str):
    """List past requests of one kind, newest first."""
    ensure_initialized(ctx)
    store = get_store(ctx)
    identity = await require_identity(ctx, store)

    requests = await _service(ctx, store, needs_key=False).get_history(RequestKind(kind), identity.id)
    if not requests:
        echo_info("No requests yet.")
        return

    rows = [
        [
            r.id,
            r.created_at.astimezone().strftime("%Y-%m-%d %H:%M"),
            r.status.value,
            (r.error or "")[:40],
        ]
        for r in requests
    ]
    click.echo()
    click.echo(format_table(["ID", "Created", "Status", "Error"], rows))
