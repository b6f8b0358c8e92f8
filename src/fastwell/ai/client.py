"""Generative-AI completion client backed by Gemini."""

import logging
from typing import Protocol, runtime_checkable

from google import genai
from google.genai import errors as genai_errors
from google.genai import types as genai_types
from pydantic import BaseModel, ValidationError

from ..config import DEFAULT_GEMINI_MODEL, DEFAULT_RESPONSE_LANGUAGE, Settings
from ..exceptions import CompletionError
from .prompts import PromptTemplate

logger = logging.getLogger(__name__)


@runtime_checkable
class Completer(Protocol):
    """Anything that can run a typed prompt."""

    async def complete(
        self, template: PromptTemplate, structured_input: BaseModel
    ) -> BaseModel | None:
        """Render the template, call the model and validate its output.

        Returns:
            The validated output model, or None when the model answered null
        """
        ...


class CompletionClient:
    """Runs prompt templates against the Gemini API with JSON output."""

    def __init__(
        self,
        api_key: str | None,
        model: str = DEFAULT_GEMINI_MODEL,
        response_language: str = DEFAULT_RESPONSE_LANGUAGE,
        temperature: float = 0.7,
    ):
        self.api_key = api_key
        self.model = model
        self.response_language = response_language
        self.temperature = temperature
        self._client: genai.Client | None = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "CompletionClient":
        return cls(
            api_key=settings.gemini_api_key,
            model=settings.gemini_model,
            response_language=settings.response_language,
        )

    def _get_client(self) -> genai.Client:
        if self._client is None:
            if not self.api_key:
                raise CompletionError("GEMINI_API_KEY is not configured")
            self._client = genai.Client(api_key=self.api_key)
        return self._client

    async def complete(
        self, template: PromptTemplate, structured_input: BaseModel
    ) -> BaseModel | None:
        if not isinstance(structured_input, template.input_model):
            raise TypeError(
                f"{template.name} expects {template.input_model.__name__}, "
                f"got {type(structured_input).__name__}"
            )

        prompt = template.render(structured_input, self.response_language)
        client = self._get_client()

        try:
            response = await client.aio.models.generate_content(
                model=self.model,
                contents=prompt,
                config=genai_types.GenerateContentConfig(
                    response_mime_type="application/json",
                    temperature=self.temperature,
                ),
            )
        except genai_errors.APIError as e:
            raise CompletionError(f"AI service call failed: {e}") from e

        text = (response.text or "").strip()
        if not text:
            raise CompletionError("AI service returned an empty response")
        if text == "null":
            return None

        try:
            return template.output_model.model_validate_json(text)
        except ValidationError as e:
            logger.warning("%s returned output that does not match its schema: %s", template.name, e)
            raise CompletionError("AI service returned output in an unexpected format") from e
