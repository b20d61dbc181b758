"""Domain layer: result models, error taxonomy and the response contract."""

from .errors import (
    AnalysisCancelledError,
    AnalysisError,
    ConfigurationError,
    EmptyResponseError,
    EncodingError,
    ErrorKind,
    InferenceTransportError,
    InvalidInputError,
    MalformedReason,
    MalformedResponseError,
    UnsupportedMediaError,
)
from .models import (
    AnalysisResult,
    CoachingReport,
    SentimentPoint,
    Speaker,
    TranscriptEntry,
    parse_timestamp,
)
from .schema import ANALYSIS_SCHEMA, SCHEMA_VERSION, SchemaContract

__all__ = [
    "ANALYSIS_SCHEMA",
    "AnalysisCancelledError",
    "AnalysisError",
    "AnalysisResult",
    "CoachingReport",
    "ConfigurationError",
    "EmptyResponseError",
    "EncodingError",
    "ErrorKind",
    "InferenceTransportError",
    "InvalidInputError",
    "MalformedReason",
    "MalformedResponseError",
    "SCHEMA_VERSION",
    "SchemaContract",
    "SentimentPoint",
    "Speaker",
    "TranscriptEntry",
    "UnsupportedMediaError",
    "parse_timestamp",
]
