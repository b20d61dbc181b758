"""Validation of the model's JSON payload into an :class:`AnalysisResult`.

Nothing is coerced: numeric strings, bools in number slots, unknown speakers
or out-of-order timelines are rejected so upstream model errors surface
instead of reaching the presentation layer.
"""

from __future__ import annotations

import json
from typing import Any, Mapping

from pydantic import ValidationError

from callqa.domain.errors import MalformedReason, MalformedResponseError
from callqa.domain.models import AnalysisResult
from callqa.domain.schema import ANALYSIS_SCHEMA, SchemaContract


def _clean_json_payload(payload: str) -> str:
    """Strip a surrounding Markdown code fence, if any."""

    cleaned = payload.strip()
    if cleaned.startswith("```json"):
        cleaned = cleaned[7:]
    elif cleaned.startswith("```"):
        cleaned = cleaned[3:]

    if cleaned.endswith("```"):
        cleaned = cleaned[:-3]

    return cleaned.strip()


def _format_validation_error(exc: ValidationError, limit: int = 5) -> str:
    parts = []
    for error in exc.errors()[:limit]:
        location = ".".join(str(item) for item in error.get("loc", ()))
        parts.append(f"{location or '<root>'}: {error.get('msg')}")
    remaining = exc.error_count() - limit
    if remaining > 0:
        parts.append(f"(+{remaining} more)")
    return "; ".join(parts)


class ResultValidator:
    """Parse raw model text into the immutable analysis aggregate."""

    def __init__(self, contract: SchemaContract = ANALYSIS_SCHEMA) -> None:
        self._contract = contract

    @property
    def contract(self) -> SchemaContract:
        return self._contract

    def parse(self, raw_text: str) -> AnalysisResult:
        data = self._decode(raw_text)
        self._check_required(data, raw_text)

        if not data["transcript"]:
            raise MalformedResponseError(
                "The model returned an empty transcript.",
                reason=MalformedReason.EMPTY_TRANSCRIPT,
                raw_text=raw_text,
            )
        if not data["sentiment"]:
            raise MalformedResponseError(
                "The model returned an empty sentiment curve.",
                reason=MalformedReason.EMPTY_SENTIMENT,
                raw_text=raw_text,
            )

        try:
            result = AnalysisResult.model_validate(data)
        except ValidationError as exc:
            raise MalformedResponseError(
                f"Response does not match the analysis schema: {_format_validation_error(exc)}",
                reason=MalformedReason.SCHEMA_VIOLATION,
                raw_text=raw_text,
            ) from exc

        self._check_ordering(result, raw_text)
        return result

    @staticmethod
    def _decode(raw_text: str) -> dict[str, Any]:
        if not isinstance(raw_text, str):
            raise MalformedResponseError(
                f"Expected text payload, got {type(raw_text).__name__}",
                reason=MalformedReason.INVALID_JSON,
                raw_text=repr(raw_text),
            )
        try:
            data = json.loads(_clean_json_payload(raw_text))
        except json.JSONDecodeError as exc:
            raise MalformedResponseError(
                f"Response is not valid JSON: {exc}",
                reason=MalformedReason.INVALID_JSON,
                raw_text=raw_text,
            ) from exc

        if not isinstance(data, dict):
            raise MalformedResponseError(
                f"Expected a JSON object at the top level, got {type(data).__name__}",
                reason=MalformedReason.NOT_AN_OBJECT,
                raw_text=raw_text,
            )
        return data

    def _check_required(self, data: Mapping[str, Any], raw_text: str) -> None:
        missing = [name for name in self._contract.required_fields if name not in data]
        if missing:
            raise MalformedResponseError(
                f"Response is missing required fields: {', '.join(missing)}",
                reason=MalformedReason.MISSING_FIELD,
                raw_text=raw_text,
            )

        for name in ("transcript", "sentiment"):
            if not isinstance(data[name], list):
                raise MalformedResponseError(
                    f"Field '{name}' must be an array",
                    reason=MalformedReason.SCHEMA_VIOLATION,
                    raw_text=raw_text,
                )

    @staticmethod
    def _check_ordering(result: AnalysisResult, raw_text: str) -> None:
        previous = -1
        for index, entry in enumerate(result.transcript):
            offset = entry.offset_seconds
            if offset < previous:
                raise MalformedResponseError(
                    f"Transcript timestamps go backwards at entry {index} ({entry.timestamp})",
                    reason=MalformedReason.UNORDERED_TRANSCRIPT,
                    raw_text=raw_text,
                )
            previous = offset

        last_seconds: float | None = None
        for index, point in enumerate(result.sentiment):
            if last_seconds is not None and point.seconds <= last_seconds:
                raise MalformedResponseError(
                    f"Sentiment points are not strictly increasing at index {index} ({point.seconds}s)",
                    reason=MalformedReason.UNORDERED_SENTIMENT,
                    raw_text=raw_text,
                )
            last_seconds = point.seconds


_DEFAULT_VALIDATOR = ResultValidator()


def parse_analysis_result(raw_text: str) -> AnalysisResult:
    """Validate ``raw_text`` with the default contract."""

    return _DEFAULT_VALIDATOR.parse(raw_text)


__all__ = ["ResultValidator", "parse_analysis_result"]
