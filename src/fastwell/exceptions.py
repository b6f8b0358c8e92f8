"""Exception hierarchy for fastwell."""


class FastwellError(Exception):
    """Base class for all fastwell errors."""


class InvalidInputError(FastwellError, ValueError):
    """Required user input is missing or out of range.

    Raised before any store or AI call is made.
    """


class ActiveFastExistsError(InvalidInputError):
    """The user already has an active fasting session."""


class DocumentNotFoundError(FastwellError, LookupError):
    """A document id did not resolve to a stored document."""

    def __init__(self, collection: str, doc_id: str):
        super().__init__(f"Document '{doc_id}' not found in '{collection}'")
        self.collection = collection
        self.doc_id = doc_id


class AuthenticationError(FastwellError):
    """Credentials or token were rejected."""


class CompletionError(FastwellError):
    """The generative-AI service failed or returned unusable output."""


class DailyLimitExceededError(FastwellError):
    """The per-day request cap for a feature has been reached."""
