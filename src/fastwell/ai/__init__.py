"""Generative-AI integration for fastwell."""

from .client import Completer, CompletionClient
from .flows import DEFAULT_MEAL_PLAN_DISCLAIMER, generate_meal_plan, suggest_fasting_times
from .prompts import GENERATE_MEAL_PLAN, SUGGEST_FASTING_TIMES, PromptTemplate

__all__ = [
    "Completer",
    "CompletionClient",
    "DEFAULT_MEAL_PLAN_DISCLAIMER",
    "GENERATE_MEAL_PLAN",
    "generate_meal_plan",
    "PromptTemplate",
    "SUGGEST_FASTING_TIMES",
    "suggest_fasting_times",
]
