"""Shared fixtures: a canned model payload and a scriptable inference client."""

from __future__ import annotations

import asyncio
import copy
import json
import sys
from pathlib import Path
from typing import Any, Mapping

import pytest

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

from callqa.application.interfaces import InferenceClient, InferenceResponse  # noqa: E402
from callqa.pipelines.analysis import AnalysisOrchestrator  # noqa: E402
from callqa.services.prompt_builder import SopRubric  # noqa: E402

VALID_PAYLOAD: dict[str, Any] = {
    "transcript": [
        {
            "speaker": "Salesperson",
            "text": "Thanks for calling Archival Designs, this is Paulo. Are you calling about a specific plan, or exploring options?",
            "timestamp": "00:00",
        },
        {
            "speaker": "Prospect",
            "text": "Hi, I'm looking at plan 42-018 but I need it a bit smaller.",
            "timestamp": "00:07",
        },
        {
            "speaker": "Salesperson",
            "text": "The best route is our Modification Request form; you'll get a free estimate in 1-3 business days.",
            "timestamp": "00:15",
        },
        {
            "speaker": "Prospect",
            "text": "Great. It's jane at gmail dot com.",
            "timestamp": "00:29",
        },
    ],
    "sentiment": [
        {"time": "00:00", "seconds": 0, "score": 55},
        {"time": "00:10", "seconds": 10, "score": 62.5},
        {"time": "00:20", "seconds": 20, "score": 70},
        {"time": "00:30", "seconds": 30, "score": 81},
    ],
    "coaching": {
        "strengths": ["Used the standard Archival Designs greeting."],
        "missedOpportunities": ["Did not verify the email spelling with the NATO alphabet."],
        "summary": "Archival Designs call about plan 42-018; prospect routed to the Modification Request form.",
    },
}


class FakeInferenceClient(InferenceClient):
    """Records every call and answers with a canned text, error or delay."""

    def __init__(
        self,
        text: str | None = None,
        *,
        error: BaseException | None = None,
        delay: float = 0.0,
    ) -> None:
        self.text = text
        self.error = error
        self.delay = delay
        self.calls: list[dict[str, Any]] = []

    @property
    def model_id(self) -> str:
        return "fake-model"

    async def generate(
        self,
        *,
        encoded_audio: str,
        media_type: str,
        prompt_text: str,
        schema: Mapping[str, Any],
    ) -> InferenceResponse:
        self.calls.append(
            {
                "encoded_audio": encoded_audio,
                "media_type": media_type,
                "prompt_text": prompt_text,
                "schema": schema,
            }
        )
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return InferenceResponse(text=self.text)


@pytest.fixture
def payload() -> dict[str, Any]:
    return copy.deepcopy(VALID_PAYLOAD)


@pytest.fixture
def payload_text(payload: dict[str, Any]) -> str:
    return json.dumps(payload)


@pytest.fixture
def rubric() -> SopRubric:
    return SopRubric(
        name="test-sop",
        version="7",
        text="SOP SUMMARY:\n1. Verify email spelling with the NATO alphabet.",
    )


@pytest.fixture
def fake_client_cls() -> type[FakeInferenceClient]:
    return FakeInferenceClient


@pytest.fixture
def make_orchestrator(rubric: SopRubric):
    """Build an orchestrator around a fake client answering with ``text``."""

    def _factory(text: str | None = None, **client_kwargs: Any):
        client = FakeInferenceClient(text, **client_kwargs)
        return AnalysisOrchestrator(client, rubric=rubric), client

    return _factory
