"""
Video validation component
Applies format, size and duration policy before anything is uploaded
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Awaitable, Callable, Optional

from hoopspark.shared.config import IntakeConfig
from hoopspark.shared.errors import MetadataUnreadable
from hoopspark.shared.rounding import format_fixed, format_limit
from hoopspark.shared.upload_video.media_file import MediaFile
from hoopspark.shared.upload_video.video_metadata import VideoMeta, read_metadata

logger = logging.getLogger(__name__)

MetadataReader = Callable[[MediaFile, float], Awaitable[VideoMeta]]


class RejectionReason(str, Enum):
    NO_FILE = "no_file"
    UNSUPPORTED_TYPE = "unsupported_type"
    TOO_LARGE = "too_large"
    TOO_LONG = "too_long"
    METADATA_UNREADABLE = "metadata_unreadable"


@dataclass(frozen=True)
class ValidationResult:
    """Either ok with metadata, or rejected with a reason and a message. Never both."""
    ok: bool
    meta: Optional[VideoMeta] = None
    reason: Optional[RejectionReason] = None
    message: Optional[str] = None

    @classmethod
    def accept(cls, meta: VideoMeta) -> "ValidationResult":
        return cls(ok=True, meta=meta)

    @classmethod
    def reject(cls, reason: RejectionReason, message: str) -> "ValidationResult":
        return cls(ok=False, reason=reason, message=message)

    def to_dict(self) -> dict:
        """Convert to dictionary for API responses."""
        if self.ok:
            return {"ok": True, "meta": self.meta.to_dict()}
        return {"ok": False, "reason": self.reason.value, "message": self.message}


def validate_file_type(media: MediaFile, config: IntakeConfig) -> bool:
    """Exact membership in the allowed MIME set. No prefix or wildcard matching."""
    return (media.content_type or "").lower() in config.allowed_types


def file_size_mb(media: MediaFile) -> float:
    return media.size / (1024 * 1024)


def validate_video_duration(meta: VideoMeta, config: IntakeConfig) -> Optional[str]:
    """Returns a rejection message if the clip is longer than allowed, else None."""
    if meta.duration > config.max_duration_seconds:
        return (f"Clip is {format_fixed(meta.duration, 0)}s. "
                f"Max is {format_limit(config.max_duration_seconds)}s.")
    return None


async def validate_video(
    media: Optional[MediaFile],
    config: IntakeConfig,
    metadata_reader: MetadataReader = read_metadata,
) -> ValidationResult:
    """
    Validates a selected clip. Checks run in order and stop at the first failure:
    presence, MIME type, byte size, metadata readability, duration.

    Args:
        media: The selected clip, or None if nothing was selected
        config: Limits to enforce
        metadata_reader: Async reader returning VideoMeta (injectable for tests)

    Returns:
        ValidationResult; rejections are returned, never raised
    """
    if media is None:
        return ValidationResult.reject(RejectionReason.NO_FILE, "Choose a video file first.")

    if not validate_file_type(media, config):
        return ValidationResult.reject(RejectionReason.UNSUPPORTED_TYPE, "Unsupported file type.")

    if media.size > config.max_file_size_bytes:
        return ValidationResult.reject(
            RejectionReason.TOO_LARGE,
            f"File is too large ({format_fixed(file_size_mb(media), 1)} MB). "
            f"Max is {format_limit(config.max_file_size_mb)} MB."
        )

    try:
        meta = await metadata_reader(media, config.metadata_timeout_seconds)
    except MetadataUnreadable as e:
        logger.info("Metadata unreadable for %s: %s", media.filename, e.message)
        return ValidationResult.reject(RejectionReason.METADATA_UNREADABLE, "Could not read video metadata.")

    too_long_message = validate_video_duration(meta, config)
    if too_long_message:
        return ValidationResult.reject(RejectionReason.TOO_LONG, too_long_message)

    return ValidationResult.accept(meta)
