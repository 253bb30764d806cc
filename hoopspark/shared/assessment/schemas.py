"""Pydantic schemas for classification and assessment requests."""

from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, model_validator


class ClassifyRequest(BaseModel):
    skill_focus: Optional[str] = None


class ClassifyResponse(BaseModel):
    category: str
    skill_area: str


class AssessRequest(BaseModel):
    """Either a category or free-text skill focus (classified first)."""
    category: Optional[str] = None
    skill_focus: Optional[str] = None
    self_rating: Optional[float] = Field(None, description="Self estimate, clamped to 0-10")


class AnalyzeVideoRequest(BaseModel):
    """Body of the analyze-video function. Field names follow the function's wire format."""
    videoId: Optional[str] = None
    bucket: Optional[str] = None
    key: Optional[str] = None
    skillFocus: Optional[Any] = None
    questionnaire: Optional[Dict[str, Any]] = None

    @model_validator(mode='after')
    def drop_non_string_focus(self):
        if not isinstance(self.skillFocus, str):
            self.skillFocus = None
        return self
