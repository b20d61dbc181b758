from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Mapping, Optional


@dataclass(frozen=True)
class InferenceResponse:
    """Textual payload of one inference round-trip (``None`` when the model produced nothing)."""

    text: Optional[str]


class InferenceClient(ABC):
    """Contract for the remote multimodal model used by the analysis pipeline"""

    @property
    def model_id(self) -> Optional[str]:
        return None

    @abstractmethod
    async def generate(
        self,
        *,
        encoded_audio: str,
        media_type: str,
        prompt_text: str,
        schema: Mapping[str, Any],
    ) -> InferenceResponse:
        ...
