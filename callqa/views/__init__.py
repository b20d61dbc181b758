"""Pydantic schemas used as views in the MVC architecture."""

from .analysis import AnalysisResponse
from .common import ErrorResponse

__all__ = ["AnalysisResponse", "ErrorResponse"]
