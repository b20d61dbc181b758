"""Call analysis pipeline package.

Modules follow the order in which ``AnalysisOrchestrator.analyze`` runs:

1. `ingestion` – media-type checks and base64 encoding of the recording.
2. `orchestrator` – prompt assembly, the Gemini call and result validation.
"""

from .ingestion import (
    EncodedPayload,
    encode_audio,
    guess_media_type,
    is_audio_media_type,
    read_source,
)
from .orchestrator import AnalysisOrchestrator, create_orchestrator

__all__ = [
    "AnalysisOrchestrator",
    "EncodedPayload",
    "create_orchestrator",
    "encode_audio",
    "guess_media_type",
    "is_audio_media_type",
    "read_source",
]
