"""Error taxonomy for the call analysis pipeline.

Every failure surfaced by :class:`AnalysisOrchestrator` is one of the
subclasses below. Callers branch on the exception type (or on ``kind``)
instead of parsing messages; nothing here is retried automatically.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, ClassVar


class ErrorKind(str, Enum):
    """Stable identifiers reported to callers and HTTP clients."""

    CONFIGURATION = "configuration"
    INVALID_INPUT = "invalid-input"
    UNSUPPORTED_MEDIA = "unsupported-media"
    ENCODING = "encoding"
    INFERENCE_TRANSPORT = "inference-transport"
    EMPTY_RESPONSE = "empty-response"
    MALFORMED_RESPONSE = "malformed-response"
    CANCELLED = "cancelled"


class MalformedReason(str, Enum):
    """Reason codes attached to :class:`MalformedResponseError`."""

    INVALID_JSON = "invalid-json"
    NOT_AN_OBJECT = "not-an-object"
    MISSING_FIELD = "missing-field"
    EMPTY_TRANSCRIPT = "empty-transcript"
    EMPTY_SENTIMENT = "empty-sentiment"
    SCHEMA_VIOLATION = "schema-violation"
    UNORDERED_TRANSCRIPT = "unordered-transcript"
    UNORDERED_SENTIMENT = "unordered-sentiment"


class AnalysisError(RuntimeError):
    """Base class for every classified analysis failure."""

    kind: ClassVar[ErrorKind]

    def __init__(
        self,
        message: str,
        *,
        reason: str | None = None,
        raw_text: str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.reason = reason
        self.raw_text = raw_text

    def to_dict(self, *, include_raw: bool = False) -> dict[str, Any]:
        """Serialize the error for logs and API responses."""

        payload: dict[str, Any] = {"kind": self.kind.value, "message": self.message}
        if self.reason is not None:
            payload["reason"] = self.reason
        if include_raw and self.raw_text is not None:
            payload["raw_text"] = self.raw_text
        return payload


class ConfigurationError(AnalysisError):
    """The inference credential is missing or malformed, or the rubric is unavailable."""

    kind = ErrorKind.CONFIGURATION


class InvalidInputError(AnalysisError):
    """Audio payload is empty or not declared as ``audio/*``."""

    kind = ErrorKind.INVALID_INPUT


class UnsupportedMediaError(InvalidInputError):
    """Raised by the encoder when handed a non-audio media type."""

    kind = ErrorKind.UNSUPPORTED_MEDIA


class EncodingError(AnalysisError):
    """The source audio could not be read to completion."""

    kind = ErrorKind.ENCODING


class InferenceTransportError(AnalysisError):
    """Network, authentication or rate-limit failure on the inference call."""

    kind = ErrorKind.INFERENCE_TRANSPORT

    def __init__(self, message: str, *, cause_type: str | None = None) -> None:
        super().__init__(message)
        self.cause_type = cause_type

    def to_dict(self, *, include_raw: bool = False) -> dict[str, Any]:
        payload = super().to_dict(include_raw=include_raw)
        if self.cause_type:
            payload["cause_type"] = self.cause_type
        return payload


class EmptyResponseError(AnalysisError):
    """The inference call succeeded but returned no text."""

    kind = ErrorKind.EMPTY_RESPONSE


class MalformedResponseError(AnalysisError):
    """The model's payload failed structural or content validation."""

    kind = ErrorKind.MALFORMED_RESPONSE

    def __init__(
        self,
        message: str,
        *,
        reason: MalformedReason,
        raw_text: str,
    ) -> None:
        super().__init__(message, reason=reason.value, raw_text=raw_text)
        self.reason_code = reason


class AnalysisCancelledError(AnalysisError):
    """The inference call was cancelled by the caller or timed out."""

    kind = ErrorKind.CANCELLED


__all__ = [
    "AnalysisCancelledError",
    "AnalysisError",
    "ConfigurationError",
    "EmptyResponseError",
    "EncodingError",
    "ErrorKind",
    "InferenceTransportError",
    "InvalidInputError",
    "MalformedReason",
    "MalformedResponseError",
    "UnsupportedMediaError",
]
