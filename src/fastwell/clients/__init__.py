"""Interactive input clients."""

from .questionnaire import ProfileQuestionnaire

__all__ = ["ProfileQuestionnaire"]
