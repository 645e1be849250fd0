import logging
from datetime import datetime, timezone
from typing import Optional, Type, TypeVar

from google import genai
from google.genai import types
from pydantic import BaseModel

from ..settings import Settings

logger = logging.getLogger("recipebox.ai")

T = TypeVar("T", bound=BaseModel)


class AIClient:
    def __init__(
        self,
        *,
        mode: str = "mock",
        api_key: Optional[str] = None,
        text_model: str = "gemini-2.5-flash",
    ):
        self.api_key = api_key
        self.mode = mode  # "mock" or "gemini"
        self.text_model = text_model
        self._client: Optional[genai.Client] = None
        self.last_error: Optional[str] = None
        self.last_error_at: Optional[datetime] = None

        if self.mode == "gemini" and self.api_key:
            self._client = genai.Client(api_key=self.api_key)

    @classmethod
    def from_settings(cls, settings: Settings) -> "AIClient":
        return cls(
            mode=settings.ai_mode,
            api_key=settings.gemini_api_key,
            text_model=settings.gemini_text_model,
        )

    def is_available(self) -> bool:
        return self.mode == "gemini" and self._client is not None

    async def generate_structured(
        self,
        prompt: str,
        response_model: Type[T],
        model: Optional[str] = None,
        system_instruction: Optional[str] = None,
    ) -> Optional[T]:
        """
        Generate structured JSON output using Gemini (Async).
        Returns None if AI is disabled/unavailable or fails.
        """
        if not self.is_available():
            logger.warning("AI is not available (mode=%s), skipping generation", self.mode)
            return None

        model_id = model or self.text_model

        try:
            config = types.GenerateContentConfig(
                response_mime_type="application/json",
                response_schema=response_model,
                system_instruction=system_instruction,
            )

            response = await self._client.aio.models.generate_content(
                model=model_id,
                contents=prompt,
                config=config,
            )

            if not response.text:
                logger.warning("Gemini returned empty response")
                return None

            parsed = response.parsed
            if isinstance(parsed, response_model):
                return parsed
            # Older SDKs hand back raw JSON when the schema could not be applied
            return response_model.model_validate_json(response.text)

        except Exception as e:
            self.last_error = f"{e.__class__.__name__}: {str(e)}"
            self.last_error_at = datetime.now(timezone.utc)
            logger.warning(f"Gemini generation failed: {e}")
            return None
