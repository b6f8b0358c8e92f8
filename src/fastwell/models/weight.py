"""Weight entry data model."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from .timestamps import parse_iso, to_iso

SCHEMA_VERSION = 1

KG_PER_LB = 0.45359237


class WeightUnit(str, Enum):
    """Unit a weight was recorded in."""

    KG = "kg"
    LBS = "lbs"


def convert_weight(value: float, from_unit: WeightUnit, to_unit: WeightUnit) -> float:
    """Convert a weight between kilograms and pounds."""
    if from_unit == to_unit:
        return value
    if from_unit == WeightUnit.LBS:
        return value * KG_PER_LB
    return value / KG_PER_LB


@dataclass
class WeightEntry:
    """A single body-weight measurement. Immutable once stored."""

    user_id: str
    weight: float
    date: datetime
    unit: WeightUnit = WeightUnit.KG
    id: str | None = None

    def weight_in(self, unit: WeightUnit) -> float:
        return convert_weight(self.weight, self.unit, unit)

    def to_dict(self) -> dict:
        """Convert to a document for storage."""
        return {
            "schemaVersion": SCHEMA_VERSION,
            "userId": self.user_id,
            "weight": self.weight,
            "date": to_iso(self.date),
            "unit": self.unit.value,
        }

    def to_client_dict(self) -> dict:
        data = self.to_dict()
        del data["schemaVersion"]
        data["id"] = self.id
        return data

    @classmethod
    def from_dict(cls, data: dict, id: str | None = None) -> "WeightEntry":
        """Create from a stored document. Entries saved without a unit are kg."""
        return cls(
            id=id or data.get("id"),
            user_id=data["userId"],
            weight=float(data["weight"]),
            date=parse_iso(data["date"]),
            unit=WeightUnit(data.get("unit") or "kg"),
        )
