"""Structured-output contract shared by the Gemini request and the validator.

The dict below is sent verbatim as ``response_schema`` and names the exact
keys :mod:`callqa.services.response_contract` validates. Change both together.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Any, Mapping

from callqa.domain.models import Speaker

SCHEMA_VERSION = "1.0"

_TRANSCRIPT_ENTRY = {
    "type": "object",
    "properties": {
        "speaker": {
            "type": "string",
            "format": "enum",
            "enum": [speaker.value for speaker in Speaker],
        },
        "text": {"type": "string"},
        "timestamp": {"type": "string", "description": "Format MM:SS"},
    },
    "required": ["speaker", "text", "timestamp"],
}

_SENTIMENT_POINT = {
    "type": "object",
    "properties": {
        "time": {"type": "string", "description": "Format MM:SS"},
        "seconds": {"type": "number", "description": "Time in absolute seconds"},
        "score": {"type": "number", "description": "Sentiment score from 0 to 100"},
    },
    "required": ["time", "seconds", "score"],
}

_COACHING = {
    "type": "object",
    "properties": {
        "strengths": {
            "type": "array",
            "items": {"type": "string"},
            "description": "Specific things the agent did well based on the SOP.",
        },
        "missedOpportunities": {
            "type": "array",
            "items": {"type": "string"},
            "description": "Specific SOP violations or missed cues.",
        },
        "summary": {
            "type": "string",
            "description": "A brief executive summary identifying brand, plan number, and outcome.",
        },
    },
    "required": ["strengths", "missedOpportunities", "summary"],
}

_ANALYSIS_SCHEMA = {
    "type": "object",
    "properties": {
        "transcript": {"type": "array", "items": _TRANSCRIPT_ENTRY},
        "sentiment": {
            "type": "array",
            "description": (
                "A list of roughly 15-20 data points representing "
                "engagement/sentiment over the duration of the call."
            ),
            "items": _SENTIMENT_POINT,
        },
        "coaching": _COACHING,
    },
    "required": ["transcript", "sentiment", "coaching"],
}


@dataclass(frozen=True)
class SchemaContract:
    """Versioned description of the JSON shape the model must return."""

    version: str
    definition: Mapping[str, Any] = field(repr=False)

    @property
    def required_fields(self) -> tuple[str, ...]:
        return tuple(self.definition["required"])

    def required_fields_of(self, name: str) -> tuple[str, ...]:
        """Required keys of a nested object (array items are unwrapped)."""

        node = self.definition["properties"][name]
        if node.get("type") == "array":
            node = node["items"]
        return tuple(node.get("required", ()))

    @property
    def response_schema(self) -> dict[str, Any]:
        """Deep copy safe to hand to an SDK that rewrites schema keys in place."""

        return copy.deepcopy(dict(self.definition))


ANALYSIS_SCHEMA = SchemaContract(version=SCHEMA_VERSION, definition=_ANALYSIS_SCHEMA)


__all__ = ["ANALYSIS_SCHEMA", "SCHEMA_VERSION", "SchemaContract"]
