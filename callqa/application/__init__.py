"""Application-layer contracts."""

from .interfaces import InferenceClient, InferenceResponse

__all__ = ["InferenceClient", "InferenceResponse"]
