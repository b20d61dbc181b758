"""Service layer helpers for prompts, response validation and the Gemini client."""

from .llm_client import GeminiInferenceClient, create_inference_client, validate_api_key
from .prompt_builder import SopRubric, build_prompt, load_rubric, parse_rubric
from .response_contract import ResultValidator, parse_analysis_result

__all__ = [
    "GeminiInferenceClient",
    "ResultValidator",
    "SopRubric",
    "build_prompt",
    "create_inference_client",
    "load_rubric",
    "parse_analysis_result",
    "parse_rubric",
    "validate_api_key",
]
