"""Weight tracking routes."""

from fastapi import APIRouter, Depends, Query

from ...auth import Identity
from ...db.repositories import WeightEntryRepository
from ...models.weight import WeightUnit
from ...services.weight_trends import TrendView, aggregate_weight_history
from ..dependencies import get_current_identity, get_weight_repo
from ..schemas import WeightEntryBody

router = APIRouter(prefix="/weight", tags=["weight"])

# A year of daily entries covers the 12-month view
TREND_HISTORY_LIMIT = 400


@router.post("", status_code=201)
async def add_weight(
    body: WeightEntryBody,
    identity: Identity = Depends(get_current_identity),
    weights: WeightEntryRepository = Depends(get_weight_repo),
):
    """Record a weight measurement."""
    entry_id = await weights.add_weight_entry(identity.id, body.weight, body.date, body.unit)
    return {"id": entry_id}


@router.get("/history")
async def weight_history(
    limit: int = Query(90, ge=1, le=1000),
    identity: Identity = Depends(get_current_identity),
    weights: WeightEntryRepository = Depends(get_weight_repo),
):
    """Latest entries, oldest first."""
    entries = await weights.get_weight_history(identity.id, limit)
    return {"entries": [entry.to_client_dict() for entry in entries]}


@router.get("/trend")
async def weight_trend(
    view: TrendView = TrendView.MONTH,
    unit: WeightUnit = WeightUnit.KG,
    identity: Identity = Depends(get_current_identity),
    weights: WeightEntryRepository = Depends(get_weight_repo),
):
    """Chart points for the day, week or month view."""
    entries = await weights.get_weight_history(identity.id, TREND_HISTORY_LIMIT)
    points = aggregate_weight_history(entries, view, unit)
    return {
        "view": view.value,
        "unit": unit.value,
        "points": [point.to_dict() for point in points],
    }
