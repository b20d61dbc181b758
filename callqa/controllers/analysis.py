"""Call analysis endpoint.

The POST `/analysis/` endpoint reads the uploaded recording, resolves its
media type and hands it to the orchestrator; classified failures are rendered
by the ``AnalysisError`` handler registered in `callqa.main`.
"""

import logging

from fastapi import APIRouter, File, UploadFile, status

from callqa.config.settings import settings
from callqa.controllers.dependencies import OrchestratorDep
from callqa.domain.errors import ErrorKind, InvalidInputError, UnsupportedMediaError
from callqa.pipelines.analysis import guess_media_type, is_audio_media_type
from callqa.views import AnalysisResponse, ErrorResponse

router = APIRouter(prefix="/analysis", tags=["analysis"])

logger = logging.getLogger(__name__)

ERROR_STATUS_CODES: dict[ErrorKind, int] = {
    ErrorKind.CONFIGURATION: status.HTTP_503_SERVICE_UNAVAILABLE,
    ErrorKind.INVALID_INPUT: status.HTTP_400_BAD_REQUEST,
    ErrorKind.UNSUPPORTED_MEDIA: status.HTTP_415_UNSUPPORTED_MEDIA_TYPE,
    ErrorKind.ENCODING: status.HTTP_400_BAD_REQUEST,
    ErrorKind.INFERENCE_TRANSPORT: status.HTTP_502_BAD_GATEWAY,
    ErrorKind.EMPTY_RESPONSE: status.HTTP_502_BAD_GATEWAY,
    ErrorKind.MALFORMED_RESPONSE: status.HTTP_502_BAD_GATEWAY,
    ErrorKind.CANCELLED: status.HTTP_504_GATEWAY_TIMEOUT,
}

_AUDIO_FILE_UPLOAD = File(...)


def resolve_content_type(audio_file: UploadFile) -> str:
    """Accept any ``audio/*`` upload, guessing from the filename when the client sent none."""

    content_type = guess_media_type(audio_file.filename, audio_file.content_type)
    if not is_audio_media_type(content_type):
        raise UnsupportedMediaError(
            "Please upload a valid audio file (MP3, WAV, etc.)."
        )
    return content_type


async def read_audio_bytes(audio_file: UploadFile, max_bytes: int) -> bytes:
    """Load the upload fully into memory, rejecting empty or oversized payloads."""

    audio_bytes = await audio_file.read(max_bytes + 1)
    await audio_file.close()

    if not audio_bytes:
        raise InvalidInputError("Uploaded audio file is empty.")
    if len(audio_bytes) > max_bytes:
        raise InvalidInputError(
            f"Uploaded audio file exceeds the {max_bytes} byte limit."
        )
    return audio_bytes


@router.post(
    "/",
    response_model=AnalysisResponse,
    responses={
        code: {"model": ErrorResponse}
        for code in sorted(set(ERROR_STATUS_CODES.values()))
    },
)
async def analyze_call(
    orchestrator: OrchestratorDep,
    audio_file: UploadFile = _AUDIO_FILE_UPLOAD,
) -> AnalysisResponse:
    """Transcribe, score and coach one recorded sales call."""

    content_type = resolve_content_type(audio_file)
    audio_bytes = await read_audio_bytes(audio_file, settings.analysis.max_upload_bytes)
    logger.info(
        "Grabación recibida filename=%s content_type=%s bytes=%s",
        audio_file.filename,
        content_type,
        len(audio_bytes),
    )

    result = await orchestrator.analyze(audio_bytes, content_type)
    return AnalysisResponse(
        result=result,
        schema_version=orchestrator.contract.version,
        rubric_name=orchestrator.rubric.name,
        rubric_version=orchestrator.rubric.version,
        model_id=orchestrator.model_id,
    )


__all__ = ["ERROR_STATUS_CODES", "router"]
