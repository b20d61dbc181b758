"""Response schema for the call analysis endpoint."""

from typing import Optional

from pydantic import BaseModel, ConfigDict

from callqa.domain.models import AnalysisResult


class AnalysisResponse(BaseModel):
    result: AnalysisResult
    schema_version: str
    rubric_name: str
    rubric_version: str
    model_id: Optional[str] = None

    model_config = ConfigDict(protected_namespaces=())
