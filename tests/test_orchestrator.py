"""Behavioural tests for AnalysisOrchestrator.analyze."""

from __future__ import annotations

import asyncio
import base64
import io
import json

import pytest
from prometheus_client import REGISTRY

from callqa.application.interfaces import InferenceClient, InferenceResponse
from callqa.domain.errors import (
    AnalysisCancelledError,
    EmptyResponseError,
    EncodingError,
    ErrorKind,
    InferenceTransportError,
    InvalidInputError,
    MalformedResponseError,
)
from callqa.domain.models import AnalysisResult
from callqa.domain.schema import ANALYSIS_SCHEMA
from callqa.pipelines.analysis import AnalysisOrchestrator

AUDIO = b"ID3\x04\x00fake-mp3-frames" * 4


def _outcome_count(outcome: str) -> float:
    value = REGISTRY.get_sample_value("callqa_analyses_total", {"outcome": outcome})
    return value or 0.0


@pytest.mark.asyncio
async def test_analyze_returns_result_matching_model_payload(make_orchestrator, payload, payload_text):
    orchestrator, client = make_orchestrator(payload_text)

    result = await orchestrator.analyze(AUDIO, "audio/mpeg")

    assert isinstance(result, AnalysisResult)
    assert result.to_payload() == payload
    assert len(client.calls) == 1


@pytest.mark.asyncio
async def test_analyze_sends_encoded_audio_prompt_and_schema(make_orchestrator, payload_text, rubric):
    orchestrator, client = make_orchestrator(payload_text)

    await orchestrator.analyze(AUDIO, "audio/wav")

    call = client.calls[0]
    assert base64.b64decode(call["encoded_audio"]) == AUDIO
    assert call["media_type"] == "audio/wav"
    assert rubric.text in call["prompt_text"]
    assert "diarized transcript" in call["prompt_text"]
    assert call["schema"] == dict(ANALYSIS_SCHEMA.definition)


@pytest.mark.asyncio
async def test_analyze_reads_stream_sources(make_orchestrator, payload_text):
    orchestrator, client = make_orchestrator(payload_text)

    await orchestrator.analyze(io.BytesIO(AUDIO), "audio/ogg; codecs=opus")

    assert base64.b64decode(client.calls[0]["encoded_audio"]) == AUDIO


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "media_type",
    ["video/mp4", "text/plain", "application/octet-stream", "", "audio", "audiox/mp3", "audio/"],
)
async def test_non_audio_media_type_is_rejected_before_any_call(make_orchestrator, payload_text, media_type):
    orchestrator, client = make_orchestrator(payload_text)

    with pytest.raises(InvalidInputError) as excinfo:
        await orchestrator.analyze(AUDIO, media_type)

    assert excinfo.value.kind is ErrorKind.INVALID_INPUT
    assert client.calls == []


@pytest.mark.asyncio
@pytest.mark.parametrize("audio", [b"", bytearray(), io.BytesIO(b"")])
async def test_empty_audio_is_rejected_before_any_call(make_orchestrator, payload_text, audio):
    orchestrator, client = make_orchestrator(payload_text)

    with pytest.raises(InvalidInputError):
        await orchestrator.analyze(audio, "audio/mpeg")

    assert client.calls == []


@pytest.mark.asyncio
async def test_unreadable_source_raises_encoding_error(make_orchestrator, payload_text):
    class BrokenStream:
        def read(self):
            raise OSError("device not ready")

    orchestrator, client = make_orchestrator(payload_text)

    with pytest.raises(EncodingError, match="device not ready"):
        await orchestrator.analyze(BrokenStream(), "audio/mpeg")

    assert client.calls == []


@pytest.mark.asyncio
@pytest.mark.parametrize("text", [None, "", "   \n"])
async def test_missing_text_raises_empty_response(make_orchestrator, text):
    orchestrator, client = make_orchestrator(text)

    with pytest.raises(EmptyResponseError):
        await orchestrator.analyze(AUDIO, "audio/mpeg")

    assert len(client.calls) == 1


@pytest.mark.asyncio
async def test_invalid_json_keeps_raw_text(make_orchestrator):
    raw = '{"transcript": [ {"speaker": "Prospect", '
    orchestrator, _ = make_orchestrator(raw)

    with pytest.raises(MalformedResponseError) as excinfo:
        await orchestrator.analyze(AUDIO, "audio/mpeg")

    assert excinfo.value.reason == "invalid-json"
    assert excinfo.value.raw_text == raw


@pytest.mark.asyncio
async def test_empty_transcript_is_reported_with_reason(make_orchestrator, payload):
    payload["transcript"] = []
    orchestrator, _ = make_orchestrator(json.dumps(payload))

    with pytest.raises(MalformedResponseError) as excinfo:
        await orchestrator.analyze(AUDIO, "audio/mpeg")

    assert excinfo.value.reason == "empty-transcript"


@pytest.mark.asyncio
async def test_empty_coaching_lists_are_accepted(make_orchestrator, payload):
    payload["coaching"]["strengths"] = []
    payload["coaching"]["missedOpportunities"] = []
    orchestrator, _ = make_orchestrator(json.dumps(payload))

    result = await orchestrator.analyze(AUDIO, "audio/mpeg")

    assert result.coaching.strengths == ()
    assert result.coaching.missed_opportunities == ()


@pytest.mark.asyncio
async def test_client_failure_becomes_transport_error(make_orchestrator):
    orchestrator, client = make_orchestrator(error=RuntimeError("429 Resource has been exhausted"))

    with pytest.raises(InferenceTransportError) as excinfo:
        await orchestrator.analyze(AUDIO, "audio/mpeg")

    assert "429" in excinfo.value.message
    assert excinfo.value.cause_type == "RuntimeError"
    assert isinstance(excinfo.value.__cause__, RuntimeError)
    assert len(client.calls) == 1


@pytest.mark.asyncio
@pytest.mark.parametrize("timeout_seconds", [None, 5])
async def test_client_timeout_error_is_a_transport_failure(fake_client_cls, rubric, timeout_seconds):
    client = fake_client_cls(error=TimeoutError("read timed out on socket"))
    orchestrator = AnalysisOrchestrator(client, rubric=rubric, timeout_seconds=timeout_seconds)

    with pytest.raises(InferenceTransportError) as excinfo:
        await orchestrator.analyze(AUDIO, "audio/mpeg")

    assert excinfo.value.cause_type == "TimeoutError"
    assert "read timed out" in excinfo.value.message


@pytest.mark.asyncio
async def test_timeout_is_reported_as_cancellation(fake_client_cls, payload_text, rubric):
    client = fake_client_cls(payload_text, delay=5)
    orchestrator = AnalysisOrchestrator(client, rubric=rubric, timeout_seconds=0.01)

    with pytest.raises(AnalysisCancelledError):
        await orchestrator.analyze(AUDIO, "audio/mpeg")


@pytest.mark.asyncio
async def test_caller_cancellation_yields_cancelled_error_and_no_result(rubric):
    started = asyncio.Event()

    class BlockingClient(InferenceClient):
        async def generate(self, **kwargs):
            started.set()
            await asyncio.Event().wait()
            return InferenceResponse(text="{}")

    orchestrator = AnalysisOrchestrator(BlockingClient(), rubric=rubric)
    task = asyncio.create_task(orchestrator.analyze(AUDIO, "audio/mpeg"))
    await started.wait()

    task.cancel()

    with pytest.raises(AnalysisCancelledError):
        await task
    assert task.exception() is not None
    if hasattr(task, "cancelling"):
        assert task.cancelling() == 0


@pytest.mark.asyncio
async def test_concurrent_analyses_do_not_cross_contaminate(rubric, payload):
    first = json.loads(json.dumps(payload))
    second = json.loads(json.dumps(payload))
    second["coaching"]["summary"] = "Standard Homes call about plan 9-300; prospect asked for a discount."
    second["sentiment"] = [{"time": "00:05", "seconds": 5, "score": 20}]

    responses = {
        base64.b64encode(b"first-call").decode("ascii"): (json.dumps(first), 0.05),
        base64.b64encode(b"second-call").decode("ascii"): (json.dumps(second), 0.0),
    }

    class RoutingClient(InferenceClient):
        async def generate(self, *, encoded_audio, media_type, prompt_text, schema):
            text, delay = responses[encoded_audio]
            await asyncio.sleep(delay)
            return InferenceResponse(text=text)

    orchestrator = AnalysisOrchestrator(RoutingClient(), rubric=rubric)

    result_one, result_two = await asyncio.gather(
        orchestrator.analyze(b"first-call", "audio/mpeg"),
        orchestrator.analyze(b"second-call", "audio/wav"),
    )

    assert result_one.to_payload() == first
    assert result_two.to_payload() == second


@pytest.mark.asyncio
async def test_repeated_calls_are_independent(make_orchestrator, payload_text):
    orchestrator, client = make_orchestrator(payload_text)

    first = await orchestrator.analyze(AUDIO, "audio/mpeg")
    second = await orchestrator.analyze(AUDIO, "audio/mpeg")

    assert first == second
    assert first is not second
    assert len(client.calls) == 2


@pytest.mark.asyncio
async def test_outcomes_are_counted(make_orchestrator, payload_text):
    before_success = _outcome_count("success")
    before_empty = _outcome_count("empty-response")

    orchestrator, _ = make_orchestrator(payload_text)
    await orchestrator.analyze(AUDIO, "audio/mpeg")
    failing, _ = make_orchestrator(None)
    with pytest.raises(EmptyResponseError):
        await failing.analyze(AUDIO, "audio/mpeg")

    assert _outcome_count("success") == before_success + 1
    assert _outcome_count("empty-response") == before_empty + 1
