"""Immutable domain models for a completed call analysis."""

from __future__ import annotations

import re
from enum import Enum
from typing import Any, Final

from pydantic import BaseModel, ConfigDict, Field, field_validator

TIMESTAMP_PATTERN: Final[str] = r"^\d{1,3}:[0-5]\d$"
_TIMESTAMP_RE = re.compile(TIMESTAMP_PATTERN)


class Speaker(str, Enum):
    SALESPERSON = "Salesperson"
    PROSPECT = "Prospect"


def parse_timestamp(value: str) -> int:
    """Convert an ``MM:SS`` label into absolute seconds."""

    if not isinstance(value, str) or not _TIMESTAMP_RE.match(value):
        raise ValueError(f"Invalid MM:SS timestamp: {value!r}")
    minutes, seconds = value.split(":", 1)
    return int(minutes) * 60 + int(seconds)


def _require_text(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        raise ValueError("must not be blank")
    return value


def _require_number(value: Any) -> Any:
    # JSON numbers only; bools and numeric strings are upstream model errors.
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError("must be a JSON number")
    return value


class _FrozenModel(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")


class TranscriptEntry(_FrozenModel):
    speaker: Speaker
    text: str = Field(min_length=1)
    timestamp: str = Field(pattern=TIMESTAMP_PATTERN)

    @field_validator("text")
    @classmethod
    def text_not_blank(cls, value: str) -> str:
        return _require_text(value)

    @property
    def offset_seconds(self) -> int:
        return parse_timestamp(self.timestamp)


class SentimentPoint(_FrozenModel):
    time: str = Field(pattern=TIMESTAMP_PATTERN)
    seconds: float = Field(ge=0, allow_inf_nan=False)
    score: float = Field(ge=0, le=100, allow_inf_nan=False)

    @field_validator("seconds", "score", mode="before")
    @classmethod
    def numbers_only(cls, value: Any) -> Any:
        return _require_number(value)


class CoachingReport(_FrozenModel):
    """SOP evaluation. Empty finding lists are a legitimate outcome."""

    strengths: tuple[str, ...]
    missed_opportunities: tuple[str, ...] = Field(alias="missedOpportunities")
    summary: str = Field(min_length=1)

    @field_validator("summary")
    @classmethod
    def summary_not_blank(cls, value: str) -> str:
        return _require_text(value)


class AnalysisResult(_FrozenModel):
    """Aggregate returned once per successful analysis; never mutated."""

    transcript: tuple[TranscriptEntry, ...] = Field(min_length=1)
    sentiment: tuple[SentimentPoint, ...] = Field(min_length=1)
    coaching: CoachingReport

    @property
    def duration_seconds(self) -> float:
        """Latest offset observed in either the transcript or the sentiment curve."""

        last_turn = self.transcript[-1].offset_seconds
        last_point = self.sentiment[-1].seconds
        return float(max(last_turn, last_point))

    @property
    def average_sentiment(self) -> float:
        return sum(point.score for point in self.sentiment) / len(self.sentiment)

    def turns_by(self, speaker: Speaker | str) -> tuple[TranscriptEntry, ...]:
        target = Speaker(speaker)
        return tuple(entry for entry in self.transcript if entry.speaker is target)

    def to_payload(self) -> dict[str, Any]:
        """JSON-ready dict using the wire field names."""

        return self.model_dump(mode="json", by_alias=True)


__all__ = [
    "AnalysisResult",
    "CoachingReport",
    "SentimentPoint",
    "Speaker",
    "TIMESTAMP_PATTERN",
    "TranscriptEntry",
    "parse_timestamp",
]
