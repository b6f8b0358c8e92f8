"""AI feature flows: typed entry points over the completion client."""

from ..exceptions import CompletionError
from .client import Completer
from .prompts import GENERATE_MEAL_PLAN, SUGGEST_FASTING_TIMES
from .schemas import (
    GenerateMealPlanInput,
    GenerateMealPlanOutput,
    SuggestFastingTimesInput,
    SuggestFastingTimesOutput,
)

DEFAULT_MEAL_PLAN_DISCLAIMER = (
    "Remember: this meal plan is an AI-generated suggestion and does not replace "
    "advice from a nutritionist or health professional. Adapt it to your needs "
    "and consult a specialist."
)


async def suggest_fasting_times(
    client: Completer, structured_input: SuggestFastingTimesInput
) -> SuggestFastingTimesOutput:
    """Suggest a fasting window for the given profile."""
    output = await client.complete(SUGGEST_FASTING_TIMES, structured_input)
    if output is None:
        raise CompletionError("AI service returned no suggestion")
    return output


async def generate_meal_plan(
    client: Completer, structured_input: GenerateMealPlanInput
) -> GenerateMealPlanOutput:
    """Generate a meal plan, always carrying a disclaimer."""
    output = await client.complete(GENERATE_MEAL_PLAN, structured_input)
    if output is None:
        return GenerateMealPlanOutput(meal_plan=[], disclaimer=DEFAULT_MEAL_PLAN_DISCLAIMER)
    if not output.disclaimer:
        output = output.model_copy(update={"disclaimer": DEFAULT_MEAL_PLAN_DISCLAIMER})
    return output
