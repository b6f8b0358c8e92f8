"""AI request lifecycle: create, process out-of-band, observe.

A request document is created `pending`; a background task moves it to
`processing` and then to `completed` (with output) or `error` (with a
message). Observers follow the document through the change feed.
Requests cannot be cancelled and no timeout is enforced.
"""

import asyncio
import logging
from collections.abc import AsyncIterator
from datetime import date

from pydantic import ValidationError

from ..ai.client import Completer
from ..ai.flows import generate_meal_plan, suggest_fasting_times
from ..ai.schemas import (
    DEFAULT_PLAN_DAYS,
    FastingProfileInput,
    GenerateMealPlanInput,
    SuggestFastingTimesInput,
)
from ..db.repositories import AIRequestRepository
from ..db.store import DocumentStore
from ..exceptions import DailyLimitExceededError, DocumentNotFoundError, InvalidInputError
from ..models.ai_requests import AIRequest, RequestKind, RequestStatus
from ..models.timestamps import local_day, utc_now
from ..models.user_profile import AIProfile, MealPreferences

logger = logging.getLogger(__name__)

FALLBACK_ERRORS = {
    RequestKind.SUGGESTION: "Failed to generate fasting suggestion with AI.",
    RequestKind.MEAL_PLAN: "Failed to generate meal plan with AI.",
}


def _log_task_failure(task: asyncio.Task, kind: RequestKind, request_id: str) -> None:
    """Report background processing that failed outside the AI call itself."""
    if task.cancelled():
        return
    error = task.exception()
    if error is not None:
        logger.error(
            "Processing %s/%s failed: %s",
            kind.collection,
            request_id,
            error,
            exc_info=error,
        )


class AIRequestService:
    """Creates AI requests and drives them to a terminal status."""

    def __init__(
        self,
        store: DocumentStore,
        completer: Completer,
        meal_plan_daily_limit: int = 0,
    ):
        self.store = store
        self.requests = AIRequestRepository(store)
        self.completer = completer
        self.meal_plan_daily_limit = meal_plan_daily_limit
        self._tasks: set[asyncio.Task] = set()

    async def create_suggestion_request(self, user_id: str, profile: AIProfile) -> str:
        """Validate the profile and store a pending suggestion request."""
        if not user_id:
            raise InvalidInputError("User ID is required to create a suggestion request.")
        missing = profile.missing_fields()
        if missing:
            raise InvalidInputError(
                "All profile fields are required for a suggestion request "
                f"(missing: {', '.join(missing)})."
            )

        try:
            structured = SuggestFastingTimesInput(
                user_profile=FastingProfileInput.model_validate(profile.to_dict())
            )
        except ValidationError as e:
            raise InvalidInputError(f"Invalid profile for suggestion request: {e}") from e

        return await self.requests.create(
            RequestKind.SUGGESTION, user_id, structured.user_profile.to_document()
        )

    async def create_meal_plan_request(
        self,
        user_id: str,
        preferences: MealPreferences | None,
        number_of_days: int = DEFAULT_PLAN_DAYS,
        today: date | None = None,
    ) -> str:
        """Validate preferences and store a pending meal-plan request."""
        if not user_id:
            raise InvalidInputError("User ID is required to create a meal plan request.")
        if preferences is None or preferences.is_empty():
            raise InvalidInputError(
                "At least one meal preference (diet type, intolerances or calorie goal) is required."
            )

        try:
            structured = GenerateMealPlanInput(
                diet_type=preferences.diet_type,
                food_intolerances=preferences.food_intolerances,
                calorie_goal=preferences.calorie_goal,
                number_of_days=number_of_days,
            )
        except ValidationError as e:
            raise InvalidInputError(f"Invalid meal plan request: {e}") from e

        if self.meal_plan_daily_limit > 0:
            made_today = await self.count_todays_meal_plan_requests(user_id, today)
            if made_today >= self.meal_plan_daily_limit:
                raise DailyLimitExceededError(
                    f"Daily limit of {self.meal_plan_daily_limit} meal plan requests reached."
                )

        return await self.requests.create(RequestKind.MEAL_PLAN, user_id, structured.to_document())

    async def process_request(self, kind: RequestKind, request_id: str) -> AIRequest:
        """Run the AI flow for a stored request and record the outcome.

        Failures of the AI service end up in the document's `error` field
        rather than propagating.
        """
        request = await self.requests.get(kind, request_id)
        if request is None:
            raise DocumentNotFoundError(kind.collection, request_id)

        await self.requests.set_status(kind, request_id, RequestStatus.PROCESSING)

        try:
            output = await self._run_flow(kind, request.user_input)
        except Exception as e:
            logger.error("AI request %s/%s failed: %s", kind.collection, request_id, e)
            await self.requests.set_status(
                kind, request_id, RequestStatus.ERROR, error=str(e) or FALLBACK_ERRORS[kind]
            )
        else:
            await self.requests.set_status(
                kind, request_id, RequestStatus.COMPLETED, output=output
            )
            logger.info("AI request %s/%s completed", kind.collection, request_id)

        return await self.requests.get(kind, request_id)

    async def _run_flow(self, kind: RequestKind, user_input: dict) -> dict:
        if kind == RequestKind.SUGGESTION:
            structured = SuggestFastingTimesInput(
                user_profile=FastingProfileInput.model_validate(user_input)
            )
            result = await suggest_fasting_times(self.completer, structured)
        else:
            result = await generate_meal_plan(
                self.completer, GenerateMealPlanInput.model_validate(user_input)
            )
        return result.to_document()

    async def submit_suggestion_request(self, user_id: str, profile: AIProfile) -> str:
        """Create a suggestion request and process it in the background."""
        request_id = await self.create_suggestion_request(user_id, profile)
        self._schedule(RequestKind.SUGGESTION, request_id)
        return request_id

    async def submit_meal_plan_request(
        self,
        user_id: str,
        preferences: MealPreferences | None,
        number_of_days: int = DEFAULT_PLAN_DAYS,
    ) -> str:
        """Create a meal-plan request and process it in the background."""
        request_id = await self.create_meal_plan_request(user_id, preferences, number_of_days)
        self._schedule(RequestKind.MEAL_PLAN, request_id)
        return request_id

    def _schedule(self, kind: RequestKind, request_id: str) -> None:
        task = asyncio.create_task(self.process_request(kind, request_id))
        # Keep a reference so the task is not garbage collected mid-flight
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        task.add_done_callback(lambda t: _log_task_failure(t, kind, request_id))

    async def drain(self) -> None:
        """Wait for all background processing started by this service."""
        if self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def get_request(self, kind: RequestKind, request_id: str) -> AIRequest | None:
        return await self.requests.get(kind, request_id)

    async def get_history(self, kind: RequestKind, user_id: str) -> list[AIRequest]:
        """All of a user's requests of one kind, newest first."""
        return await self.requests.list_for_user(kind, user_id)

    async def count_todays_meal_plan_requests(self, user_id: str, today: date | None = None) -> int:
        return await self.requests.count_created_on(
            RequestKind.MEAL_PLAN, user_id, today or local_day(utc_now())
        )

    async def watch(self, kind: RequestKind, request_id: str) -> AsyncIterator[AIRequest]:
        """Yield request snapshots as they change, ending at a terminal status."""
        queue: asyncio.Queue[dict] = asyncio.Queue()
        subscription = await self.store.subscribe(kind.collection, request_id, queue.put_nowait)
        try:
            if queue.empty():
                raise DocumentNotFoundError(kind.collection, request_id)
            while True:
                request = AIRequest.from_dict(kind, await queue.get())
                yield request
                if request.status.is_terminal:
                    return
        finally:
            subscription.unsubscribe()
