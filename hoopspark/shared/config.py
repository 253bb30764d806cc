"""
Deployment-time tunables for the intake pipeline.

An IntakeConfig is built once (usually from the environment) and passed
explicitly into the validator, thumbnail extractor, orchestrator and
assessment providers.
"""

import os
from typing import Literal, Optional, Tuple

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

ENV_PREFIX = "HOOPSPARK_"

DEFAULT_ALLOWED_TYPES = ("video/mp4", "video/quicktime", "video/webm")


class IntakeConfig(BaseModel):
    """Limits, buckets and thumbnail settings for one deployment."""
    max_file_size_mb: float = Field(100, gt=0)
    max_duration_seconds: float = Field(60, gt=0)
    allowed_types: Tuple[str, ...] = DEFAULT_ALLOWED_TYPES
    thumbnail_width: int = Field(640, gt=0)
    thumbnail_quality: float = Field(0.85, gt=0, le=1)
    thumbnail_at_seconds: float = 1.0
    thumbnail_timeout_seconds: float = Field(15, gt=0)
    metadata_timeout_seconds: float = Field(15, gt=0)
    video_bucket: str = "videos"
    thumb_bucket: str = "thumbnails"
    signed_url_ttl_seconds: int = Field(3600, gt=0)
    cache_control: str = "3600"
    assessment_provider: Literal["local", "remote"] = "local"
    assessment_function: str = "analyze-video"

    @field_validator('allowed_types', mode='before')
    @classmethod
    def split_allowed_types(cls, v):
        """Accept a comma separated string as well as a sequence."""
        if isinstance(v, str):
            v = [t for t in v.split(",")]
        cleaned = tuple(t.strip().lower() for t in v if t and t.strip())
        if not cleaned:
            raise ValueError("allowed_types cannot be empty")
        return cleaned

    @property
    def max_file_size_bytes(self) -> float:
        return self.max_file_size_mb * 1024 * 1024

    @classmethod
    def from_env(cls, env_file: Optional[str] = None) -> "IntakeConfig":
        """
        Build config from HOOPSPARK_* environment variables.

        Loads a .env file first (without overriding variables already set).
        Unset variables keep their defaults.
        """
        load_dotenv(env_file)
        values = {}
        for name in cls.model_fields:
            raw = os.environ.get(f"{ENV_PREFIX}{name.upper()}")
            if raw is not None and raw != "":
                values[name] = raw
        return cls(**values)


def get_database_url() -> str:
    """Get DATABASE_URL, defaulting to a local SQLite file."""
    default_db_url = "sqlite:///./hoopspark.db"
    if os.environ.get("DYNO"):  # Heroku
        default_db_url = "sqlite:////tmp/hoopspark.db"
    database_url = os.environ.get("DATABASE_URL", default_db_url)
    # Fix Heroku postgres:// URL
    if database_url.startswith("postgres://"):
        database_url = database_url.replace("postgres://", "postgresql://", 1)
    return database_url
