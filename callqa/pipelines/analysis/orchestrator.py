"""Single-call orchestration of encode → prompt → infer → validate.

One :meth:`AnalysisOrchestrator.analyze` call performs exactly one inference
round-trip and either returns a validated :class:`AnalysisResult` or raises
an :class:`AnalysisError` subclass. Nothing is retried or cached here; the
instance keeps no per-call state, so concurrent analyses are independent.
"""

from __future__ import annotations

import asyncio
import logging
import time
from uuid import uuid4

from callqa.application.interfaces import InferenceClient, InferenceResponse
from callqa.config.settings import Settings
from callqa.domain.errors import (
    AnalysisCancelledError,
    AnalysisError,
    EmptyResponseError,
    InferenceTransportError,
    InvalidInputError,
)
from callqa.domain.models import AnalysisResult
from callqa.domain.schema import ANALYSIS_SCHEMA, SchemaContract
from callqa.services.llm_client import create_inference_client
from callqa.services.prompt_builder import SopRubric, build_prompt, load_rubric
from callqa.services.response_contract import ResultValidator
from callqa.telemetry import record_analysis

from .ingestion import AudioSource, EncodedPayload, encode_audio, is_audio_media_type

logger = logging.getLogger("callqa.pipelines.analysis")


def _truncate(value: str, max_length: int = 500) -> str:
    if len(value) <= max_length:
        return value
    return value[: max_length - 3] + "..."


class AnalysisOrchestrator:
    """Coordinate one call analysis against an injected inference client."""

    def __init__(
        self,
        client: InferenceClient,
        *,
        rubric: SopRubric,
        contract: SchemaContract = ANALYSIS_SCHEMA,
        validator: ResultValidator | None = None,
        timeout_seconds: float | None = None,
    ) -> None:
        self._client = client
        self._rubric = rubric
        self._contract = contract
        self._validator = validator or ResultValidator(contract)
        self._timeout_seconds = timeout_seconds

    @property
    def rubric(self) -> SopRubric:
        return self._rubric

    @property
    def contract(self) -> SchemaContract:
        return self._contract

    @property
    def model_id(self) -> str | None:
        return self._client.model_id

    async def analyze(self, audio: AudioSource, media_type: str) -> AnalysisResult:
        """Analyze one recording; raises a classified :class:`AnalysisError` on failure."""

        analysis_id = uuid4().hex[:12]
        started = time.perf_counter()
        try:
            result = await self._run(analysis_id, audio, media_type)
        except AnalysisError as exc:
            elapsed = time.perf_counter() - started
            record_analysis(exc.kind.value, elapsed)
            logger.warning(
                "Análisis fallido id=%s kind=%s reason=%s: %s",
                analysis_id,
                exc.kind.value,
                exc.reason,
                exc.message,
            )
            if exc.raw_text is not None:
                logger.info(
                    "Respuesta cruda rechazada id=%s: %s",
                    analysis_id,
                    _truncate(exc.raw_text),
                )
            raise

        elapsed = time.perf_counter() - started
        record_analysis("success", elapsed)
        logger.info(
            "Análisis completado id=%s turns=%s sentiment_points=%s duration=%.2fs",
            analysis_id,
            len(result.transcript),
            len(result.sentiment),
            elapsed,
        )
        return result

    async def _run(
        self,
        analysis_id: str,
        audio: AudioSource,
        media_type: str,
    ) -> AnalysisResult:
        if isinstance(audio, (bytes, bytearray, memoryview)) and len(audio) == 0:
            raise InvalidInputError("The audio payload is empty.")
        if not is_audio_media_type(media_type):
            raise InvalidInputError(
                f"Media type {media_type!r} is not an audio type (expected audio/*)."
            )

        payload = encode_audio(audio, media_type)
        if payload.size == 0:
            raise InvalidInputError("The audio payload is empty.")

        prompt_text = build_prompt(self._rubric.text)
        logger.info(
            "Solicitud de análisis id=%s media_type=%s bytes=%s rubric=%s@%s schema=%s",
            analysis_id,
            payload.media_type,
            payload.size,
            self._rubric.name,
            self._rubric.version,
            self._contract.version,
        )

        response = await self._invoke(payload, prompt_text)
        raw_text = response.text
        if raw_text is None or not raw_text.strip():
            raise EmptyResponseError("The model returned an empty response.")

        logger.info("Respuesta cruda id=%s: %s", analysis_id, _truncate(raw_text))
        return self._validator.parse(raw_text)

    async def _invoke(self, payload: EncodedPayload, prompt_text: str) -> InferenceResponse:
        """The single suspension point: one outbound inference call."""

        try:
            if self._timeout_seconds is not None:
                return await asyncio.wait_for(
                    self._call_client(payload, prompt_text),
                    timeout=self._timeout_seconds,
                )
            return await self._call_client(payload, prompt_text)
        except asyncio.TimeoutError as exc:
            raise AnalysisCancelledError(
                f"The inference call timed out after {self._timeout_seconds}s."
            ) from exc
        except asyncio.CancelledError as exc:
            task = asyncio.current_task()
            # Python 3.11+ tracks pending cancel requests on the task.
            if task is not None and hasattr(task, "uncancel"):
                task.uncancel()
            raise AnalysisCancelledError("The analysis was cancelled by the caller.") from exc

    async def _call_client(self, payload: EncodedPayload, prompt_text: str) -> InferenceResponse:
        # Client failures are classified here so the timeout handler above
        # only sees the deadline imposed by wait_for.
        try:
            return await self._client.generate(
                encoded_audio=payload.data,
                media_type=payload.media_type,
                prompt_text=prompt_text,
                schema=self._contract.response_schema,
            )
        except AnalysisError:
            raise
        except Exception as exc:
            raise InferenceTransportError(
                str(exc) or type(exc).__name__,
                cause_type=type(exc).__name__,
            ) from exc


def create_orchestrator(app_settings: Settings) -> AnalysisOrchestrator:
    """Build the orchestrator once from validated settings."""

    client = create_inference_client(app_settings.gemini)
    rubric = load_rubric(app_settings.analysis.rubric_path)
    return AnalysisOrchestrator(
        client,
        rubric=rubric,
        timeout_seconds=app_settings.gemini.request_timeout_seconds,
    )


__all__ = ["AnalysisOrchestrator", "create_orchestrator"]
