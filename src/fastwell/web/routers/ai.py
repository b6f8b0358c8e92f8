"""AI suggestion and meal-plan request routes."""

import json
from collections.abc import AsyncGenerator
from dataclasses import asdict

from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse

from ...auth import Identity
from ...db.repositories import UserProfileRepository
from ...exceptions import DocumentNotFoundError
from ...models.ai_requests import AIRequest, RequestKind
from ...models.user_profile import AIProfile
from ...services.ai_requests import AIRequestService
from ..dependencies import get_ai_service, get_current_identity, get_profile_repo
from ..schemas import AIProfileBody, MealPlanRequestBody

router = APIRouter(prefix="/ai", tags=["ai"])


def _accepted(kind: RequestKind, request_id: str) -> dict:
    return {
        "id": request_id,
        "kind": kind.value,
        "status": "pending",
        "streamUrl": f"/ai/{kind.value}/{request_id}/stream",
    }


async def _owned_request(
    service: AIRequestService, kind: RequestKind, request_id: str, identity: Identity
) -> AIRequest:
    request = await service.get_request(kind, request_id)
    if request is None or request.user_id != identity.id:
        raise DocumentNotFoundError(kind.collection, request_id)
    return request


@router.post("/suggestions", status_code=202)
async def request_suggestion(
    body: AIProfileBody | None = None,
    identity: Identity = Depends(get_current_identity),
    service: AIRequestService = Depends(get_ai_service),
    profiles: UserProfileRepository = Depends(get_profile_repo),
):
    """Ask for suggested fasting times.

    Fields missing from the body are taken from the saved AI profile.
    """
    profile = await profiles.get_user_profile(identity.id)
    stored = profile.ai_profile if profile else AIProfile()
    overrides = body.model_dump(exclude_none=True) if body else {}
    ai_profile = AIProfile(**{**asdict(stored), **overrides})

    request_id = await service.submit_suggestion_request(identity.id, ai_profile)
    return _accepted(RequestKind.SUGGESTION, request_id)


@router.post("/meal-plans", status_code=202)
async def request_meal_plan(
    body: MealPlanRequestBody | None = None,
    identity: Identity = Depends(get_current_identity),
    service: AIRequestService = Depends(get_ai_service),
    profiles: UserProfileRepository = Depends(get_profile_repo),
):
    """Ask for a meal plan; without preferences in the body the saved ones are used."""
    body = body or MealPlanRequestBody()
    preferences = body.to_model()
    if preferences.is_empty():
        profile = await profiles.get_user_profile(identity.id)
        if profile:
            preferences = profile.meal_preferences

    request_id = await service.submit_meal_plan_request(
        identity.id, preferences, body.number_of_days
    )
    return _accepted(RequestKind.MEAL_PLAN, request_id)


@router.get("/meal-plans/today-count")
async def todays_meal_plan_count(
    identity: Identity = Depends(get_current_identity),
    service: AIRequestService = Depends(get_ai_service),
):
    count = await service.count_todays_meal_plan_requests(identity.id)
    return {"count": count, "dailyLimit": service.meal_plan_daily_limit or None}


@router.get("/{kind}/history")
async def request_history(
    kind: RequestKind,
    identity: Identity = Depends(get_current_identity),
    service: AIRequestService = Depends(get_ai_service),
):
    """All of the user's requests of one kind, newest first."""
    history = await service.get_history(kind, identity.id)
    return {"requests": [request.to_client_dict() for request in history]}


@router.get("/{kind}/{request_id}")
async def get_request(
    kind: RequestKind,
    request_id: str,
    identity: Identity = Depends(get_current_identity),
    service: AIRequestService = Depends(get_ai_service),
):
    request = await _owned_request(service, kind, request_id, identity)
    return request.to_client_dict()


@router.get("/{kind}/{request_id}/stream")
async def stream_request(
    kind: RequestKind,
    request_id: str,
    identity: Identity = Depends(get_current_identity),
    service: AIRequestService = Depends(get_ai_service),
):
    """Stream request snapshots as Server-Sent Events until it finishes."""
    await _owned_request(service, kind, request_id, identity)

    async def event_stream() -> AsyncGenerator[str, None]:
        async for request in service.watch(kind, request_id):
            yield f"data: {json.dumps(request.to_client_dict())}\n\n"

    return StreamingResponse(
        event_stream(),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
        },
    )
