"""Data models for fastwell."""

from .ai_requests import AIRequest, RequestKind, RequestStatus
from .challenges import ChallengeDay, ChallengeDayResult, ScoreSummary, WeeklyChallenges
from .fasting import FastingSession, FastingStatus
from .user_profile import AIProfile, MealPreferences, UserProfile
from .weight import WeightEntry, WeightUnit

__all__ = [
    "AIProfile",
    "AIRequest",
    "ChallengeDay",
    "ChallengeDayResult",
    "FastingSession",
    "FastingStatus",
    "MealPreferences",
    "RequestKind",
    "RequestStatus",
    "ScoreSummary",
    "UserProfile",
    "WeeklyChallenges",
    "WeightEntry",
    "WeightUnit",
]
