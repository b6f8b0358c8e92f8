"""AI request documents and their lifecycle states."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from .timestamps import parse_iso, to_iso

SCHEMA_VERSION = 1


class RequestStatus(str, Enum):
    """Lifecycle of one generative-AI invocation."""

    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    ERROR = "error"

    @property
    def is_terminal(self) -> bool:
        return self in (RequestStatus.COMPLETED, RequestStatus.ERROR)


class RequestKind(str, Enum):
    """AI feature a request belongs to."""

    SUGGESTION = "suggestions"
    MEAL_PLAN = "meal-plans"

    @property
    def collection(self) -> str:
        return _COLLECTIONS[self]

    @property
    def legacy_output_field(self) -> str:
        """Field name older documents used for the output."""
        return _LEGACY_OUTPUT_FIELDS[self]


_COLLECTIONS = {
    RequestKind.SUGGESTION: "ai_suggestion_requests",
    RequestKind.MEAL_PLAN: "ai_meal_plan_requests",
}

_LEGACY_OUTPUT_FIELDS = {
    RequestKind.SUGGESTION: "suggestionOutput",
    RequestKind.MEAL_PLAN: "mealPlanOutput",
}


@dataclass
class AIRequest:
    """Persisted state of one AI request.

    user_input and output hold the feature-specific payloads as plain
    dicts (see fastwell.ai.schemas for their shapes).
    """

    kind: RequestKind
    user_id: str
    user_input: dict
    status: RequestStatus
    created_at: datetime
    updated_at: datetime
    output: dict | None = None
    error: str | None = None
    id: str | None = None

    def to_dict(self) -> dict:
        """Convert to a document for storage."""
        return {
            "schemaVersion": SCHEMA_VERSION,
            "userId": self.user_id,
            "userInput": self.user_input,
            "status": self.status.value,
            "createdAt": to_iso(self.created_at),
            "updatedAt": to_iso(self.updated_at),
            "output": self.output,
            "error": self.error,
        }

    def to_client_dict(self) -> dict:
        data = self.to_dict()
        del data["schemaVersion"]
        data["id"] = self.id
        data["kind"] = self.kind.value
        return data

    @classmethod
    def from_dict(cls, kind: RequestKind, data: dict, id: str | None = None) -> "AIRequest":
        """Create from a stored document.

        Raises KeyError or ValueError for documents missing required fields,
        such as the timestamps.
        """
        output = data.get("output")
        if output is None:
            output = data.get(kind.legacy_output_field)

        user_input = data["userInput"]
        if not isinstance(user_input, dict):
            raise ValueError("userInput must be an object")

        return cls(
            id=id or data.get("id"),
            kind=kind,
            user_id=data["userId"],
            user_input=user_input,
            status=RequestStatus(data["status"]),
            created_at=parse_iso(data["createdAt"]),
            updated_at=parse_iso(data["updatedAt"]),
            output=output,
            error=data.get("error"),
        )
