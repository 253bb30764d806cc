"""Database models for uploaded videos and their feedback.

Rows are owned by the user who uploaded them; every read filters by user_id.
JSON columns are stored as JSONB on PostgreSQL.
"""

from datetime import datetime, timezone
import uuid

from sqlalchemy import JSON, Column, DateTime, Float, ForeignKey, Index, Integer, String, Text
from sqlalchemy.dialects.postgresql import JSONB

from hoopspark.shared.records.database import Base

JSONType = JSON().with_variant(JSONB(), "postgresql")


def _utcnow():
    return datetime.now(timezone.utc)


class Video(Base):
    """
    Video model - one uploaded clip.

    file_url holds the storage key (not a URL); playback URLs are signed on read.
    """
    __tablename__ = "videos"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String, nullable=False, index=True)

    # Storage location
    file_url = Column(String, nullable=False)  # storage key in bucket_name
    bucket_name = Column(String, nullable=False)
    thumbnail_key = Column(String, nullable=True)

    # File information
    original_filename = Column(String, nullable=True)
    filename = Column(String, nullable=True)  # key without the owner segment
    file_size = Column(Integer, nullable=False)

    skill_focus = Column(String, nullable=True)
    status = Column(String, nullable=False, default="uploaded")  # uploaded, analyzed

    uploaded_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False, index=True)

    __table_args__ = (
        Index('idx_videos_user_uploaded', 'user_id', 'uploaded_at'),
    )


class Feedback(Base):
    """Feedback model - one assessment of a video."""
    __tablename__ = "feedback"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String, nullable=False, index=True)
    video_id = Column(String, ForeignKey("videos.id", ondelete="CASCADE"), nullable=False, index=True)

    score = Column(Float, nullable=False)
    skill_area = Column(String, nullable=False)
    issues = Column(JSONType, nullable=False)
    suggestions = Column(Text, nullable=False)
    ai_response = Column(String, nullable=True)  # provenance tag
    questionnaire_data = Column(JSONType, nullable=True)

    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False, index=True)

    __table_args__ = (
        Index('idx_feedback_user_created', 'user_id', 'created_at'),
    )


TABLES = {
    Video.__tablename__: Video,
    Feedback.__tablename__: Feedback,
}
