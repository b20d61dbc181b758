"""Thin Gemini client wrapper for multimodal call analysis."""

from __future__ import annotations

import logging
import re
from typing import Any, Mapping, Optional

import google.generativeai as genai
from pydantic import SecretStr

from callqa.application.interfaces import InferenceClient, InferenceResponse
from callqa.config.settings import GeminiConfig
from callqa.domain.errors import ConfigurationError

logger = logging.getLogger(__name__)

_API_KEY_PATTERN = re.compile(r"^[A-Za-z0-9_\-]{30,}$")


def validate_api_key(secret_value: SecretStr | str | None) -> str:
    """Return the usable credential or raise :class:`ConfigurationError`."""

    if isinstance(secret_value, SecretStr):
        secret_value = secret_value.get_secret_value()
    if not secret_value or not secret_value.strip():
        raise ConfigurationError(
            "GEMINI_API_KEY is missing. Configure it before running an analysis."
        )

    candidate = secret_value.strip()
    if not _API_KEY_PATTERN.match(candidate):
        raise ConfigurationError("GEMINI_API_KEY has an invalid format.")
    return candidate


def _extract_text(response: Any) -> Optional[str]:
    """Return the aggregate response text, or ``None`` for blocked/empty completions."""

    try:
        text = response.text
    except ValueError:
        feedback = getattr(response, "prompt_feedback", None)
        logger.warning("Gemini devolvió una respuesta sin texto (prompt_feedback=%s)", feedback)
        return None
    return text or None


class GeminiInferenceClient(InferenceClient):
    """Invoke Gemini models with inline audio and a JSON response schema."""

    def __init__(
        self,
        *,
        api_key: str,
        model_id: str,
        temperature: float | None = None,
    ) -> None:
        genai.configure(api_key=api_key)
        self._model_id = model_id
        self._temperature = temperature
        self._model = genai.GenerativeModel(model_id)

    @property
    def model_id(self) -> str:
        return self._model_id

    async def generate(
        self,
        *,
        encoded_audio: str,
        media_type: str,
        prompt_text: str,
        schema: Mapping[str, Any],
    ) -> InferenceResponse:
        """Run one ``generate_content`` call and return its text output."""

        generation_config: dict[str, Any] = {
            "response_mime_type": "application/json",
            "response_schema": dict(schema),
        }
        if self._temperature is not None:
            generation_config["temperature"] = self._temperature

        # Base64 strings are accepted for blob bytes by the SDK's proto marshalling.
        contents = [
            {"mime_type": media_type, "data": encoded_audio},
            prompt_text,
        ]
        response = await self._model.generate_content_async(
            contents,
            generation_config=generation_config,
        )
        return InferenceResponse(text=_extract_text(response))


def create_inference_client(config: GeminiConfig) -> GeminiInferenceClient:
    """Build the Gemini client, failing fast on a missing or malformed credential."""

    api_key = validate_api_key(config.api_key)
    logger.info("Inicializando cliente Gemini model=%s", config.model_id)
    return GeminiInferenceClient(
        api_key=api_key,
        model_id=config.model_id,
        temperature=config.temperature,
    )


__all__ = [
    "GeminiInferenceClient",
    "create_inference_client",
    "validate_api_key",
]
