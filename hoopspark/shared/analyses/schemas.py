"""Pydantic schemas for the upload history API."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, field_serializer


class VideoListItem(BaseModel):
    """Schema for a video in the caller's list, with a short-lived playback URL."""
    model_config = ConfigDict(from_attributes=True)

    id: str
    file_url: str
    bucket_name: str
    original_filename: Optional[str] = None
    skill_focus: Optional[str] = None
    status: Optional[str] = None
    uploaded_at: datetime
    signed_url: Optional[str] = None
    thumbnail_url: Optional[str] = None

    @field_serializer('uploaded_at')
    def serialize_uploaded_at(self, v: datetime):
        return v.replace(microsecond=0).isoformat() if v else None


class VideoListResponse(BaseModel):
    videos: List[VideoListItem]
    total: int
    limit: int
    offset: int


class FeedbackResponse(BaseModel):
    """Schema for the stored assessment of a video."""
    model_config = ConfigDict(from_attributes=True)

    id: str
    score: float
    skill_area: str
    issues: List[str]
    suggestions: str
    ai_response: Optional[str] = None
    created_at: datetime

    @field_serializer('created_at')
    def serialize_created_at(self, v: datetime):
        return v.replace(microsecond=0).isoformat() if v else None


class AnalysisResponse(BaseModel):
    """Schema for one video with its latest feedback (None until analyzed)."""
    video: VideoListItem
    feedback: Optional[FeedbackResponse] = None
