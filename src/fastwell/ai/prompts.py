"""Prompt templates for the AI features."""

import json
from dataclasses import dataclass

from pydantic import BaseModel

from .schemas import (
    GenerateMealPlanInput,
    GenerateMealPlanOutput,
    SuggestFastingTimesInput,
    SuggestFastingTimesOutput,
)

NOT_SPECIFIED = "not specified"


@dataclass(frozen=True)
class PromptTemplate:
    """A prompt with typed input and output.

    `text` uses str.format placeholders named after the input model's
    fields; nested models are reachable with attribute syntax
    ({user_profile.age}). Missing optional values render as
    "not specified".
    """

    name: str
    text: str
    input_model: type[BaseModel]
    output_model: type[BaseModel]

    def render(self, structured_input: BaseModel, response_language: str) -> str:
        values = {}
        for field_name in type(structured_input).model_fields:
            value = getattr(structured_input, field_name)
            values[field_name] = NOT_SPECIFIED if value is None else value

        body = self.text.format(**values)
        schema = json.dumps(self.output_model.model_json_schema(by_alias=True), indent=2)
        return (
            f"{body}\n"
            f"Respond in {response_language}.\n"
            "Return ONLY a JSON object matching this JSON schema:\n"
            f"{schema}\n"
        )


SUGGEST_FASTING_TIMES = PromptTemplate(
    name="suggestFastingTimes",
    input_model=SuggestFastingTimesInput,
    output_model=SuggestFastingTimesOutput,
    text="""You are an AI assistant specialized in intermittent fasting and wellness. Your task is to suggest personalized fasting times for users based on their profile and daily habits.

Analyze the following user profile:
Age: {user_profile.age}
Gender: {user_profile.gender}
Activity level: {user_profile.activity_level}
Sleep schedule: {user_profile.sleep_schedule}
Daily routine: {user_profile.daily_routine}
Fasting experience: {user_profile.fasting_experience}

Based on this information, suggest a start time and an end time for the fast, together with a short explanation (reasoning) for the suggestion.
""",
)


GENERATE_MEAL_PLAN = PromptTemplate(
    name="generateMealPlan",
    input_model=GenerateMealPlanInput,
    output_model=GenerateMealPlanOutput,
    text="""You are a virtual nutritionist who creates personalized, healthy meal plans that complement intermittent fasting routines.
Generate a meal plan for the user based on these preferences:

- Diet type: {diet_type} (if not specified, assume a balanced and varied diet).
- Intolerances/allergies: {food_intolerances} (respect these restrictions).
- Approximate daily calorie goal: {calorie_goal} kcal (if not specified, focus on nutritious meals and moderate portions).
- Number of days: {number_of_days}

For each day provide 3 main meals: Breakfast, Lunch and Dinner.
Meal descriptions should be clear, suggest ingredients and, where possible, a short preparation idea.
Keep the plan practical, with accessible foods and simple preparations.
Prioritize whole foods, lean proteins, healthy fats, fruits and vegetables.
Avoid ultra-processed foods and excess sugar.

Provide a plan for {number_of_days} days.
Include a short disclaimer reminding the user that the suggestions are AI-generated and do not replace advice from a health professional or nutritionist.
""",
)
