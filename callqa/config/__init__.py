"""Configuration package."""

from .settings import AnalysisConfig, GeminiConfig, Settings, settings

__all__ = ["AnalysisConfig", "GeminiConfig", "Settings", "settings"]
