"""Weight history aggregation for progress charts."""

from dataclasses import dataclass
from datetime import date, timedelta
from enum import Enum

from ..models.timestamps import local_day
from ..models.weight import WeightEntry, WeightUnit

DAY_VIEW_ENTRIES = 15
MAX_INTERVALS = 12


class TrendView(str, Enum):
    """Chart granularity."""

    DAY = "day"
    WEEK = "week"
    MONTH = "month"


@dataclass
class WeightPoint:
    """One bar of the weight chart."""

    period_start: date
    weight: float
    entries: int = 1

    def to_dict(self) -> dict:
        return {
            "periodStart": self.period_start.isoformat(),
            "weight": self.weight,
            "entries": self.entries,
        }


def week_start(day: date) -> date:
    """Sunday on or before the given day."""
    return day - timedelta(days=(day.weekday() + 1) % 7)


def month_start(day: date) -> date:
    return day.replace(day=1)


def aggregate_weight_history(
    entries: list[WeightEntry],
    view: TrendView = TrendView.MONTH,
    unit: WeightUnit = WeightUnit.KG,
) -> list[WeightPoint]:
    """Turn raw weight entries into chart points, oldest first.

    The day view shows the last 15 entries as-is. Week and month views
    average the entries in each period and keep the last 12 periods.
    """
    ordered = sorted(entries, key=lambda e: e.date)

    if view == TrendView.DAY:
        return [
            WeightPoint(local_day(e.date), round(e.weight_in(unit), 2))
            for e in ordered[-DAY_VIEW_ENTRIES:]
        ]

    bucket_of = week_start if view == TrendView.WEEK else month_start
    totals: dict[date, list[float]] = {}
    for entry in ordered:
        totals.setdefault(bucket_of(local_day(entry.date)), []).append(entry.weight_in(unit))

    points = [
        WeightPoint(start, round(sum(values) / len(values), 2), len(values))
        for start, values in sorted(totals.items())
    ]
    return points[-MAX_INTERVALS:]
