"""
Video metadata reader
Reads duration and frame size from container headers without decoding frames
"""

import asyncio
import math
from dataclasses import dataclass

import cv2

from hoopspark.shared.errors import MetadataUnreadable
from hoopspark.shared.upload_video.media_file import MediaFile, save_video_temp


@dataclass(frozen=True)
class VideoMeta:
    """Derived clip metadata. All fields strictly positive."""
    duration: float
    width: int
    height: int

    @property
    def aspect_ratio(self) -> float:
        return self.width / self.height

    def to_dict(self) -> dict:
        return {"duration": self.duration, "width": self.width, "height": self.height}


def _is_positive_finite(value) -> bool:
    """Checks value is a real number above zero (not NaN, not Infinity)."""
    if value is None:
        return False
    try:
        value = float(value)
    except (TypeError, ValueError):
        return False
    return math.isfinite(value) and value > 0


def read_duration(cap) -> float:
    """
    Clip length in seconds from an open capture, or 0.0 if unknown.

    Uses frame count over fps. WebM often carries no frame count, so the
    fallback seeks to end of stream and reads the position there; the read
    position is left at the end in that case.
    """
    fps = cap.get(cv2.CAP_PROP_FPS)
    frame_count = cap.get(cv2.CAP_PROP_FRAME_COUNT)
    if _is_positive_finite(fps) and _is_positive_finite(frame_count):
        return frame_count / fps
    if not cap.set(cv2.CAP_PROP_POS_AVI_RATIO, 1):
        return 0.0
    duration = cap.get(cv2.CAP_PROP_POS_MSEC) / 1000.0
    return duration if _is_positive_finite(duration) else 0.0


def read_video_metadata(video_path: str) -> VideoMeta:
    """
    Reads duration/width/height of a video file using OpenCV header properties.
    Raises MetadataUnreadable if any field is missing, zero or non-finite.
    """
    cap = cv2.VideoCapture(video_path)
    if not cap.isOpened():
        cap.release()
        raise MetadataUnreadable("Failed to load video metadata.")
    try:
        width = cap.get(cv2.CAP_PROP_FRAME_WIDTH)
        height = cap.get(cv2.CAP_PROP_FRAME_HEIGHT)
        duration = read_duration(cap)
    finally:
        cap.release()

    if not (_is_positive_finite(duration) and _is_positive_finite(width) and _is_positive_finite(height)):
        raise MetadataUnreadable("Could not read video metadata.")
    return VideoMeta(duration=float(duration), width=int(width), height=int(height))


def _read_media_metadata(media: MediaFile) -> VideoMeta:
    with save_video_temp(media) as temp_path:
        try:
            return read_video_metadata(temp_path)
        except cv2.error as e:
            raise MetadataUnreadable(f"Failed to load video metadata: {e}")


async def read_metadata(media: MediaFile, timeout: float = 15.0) -> VideoMeta:
    """
    Reads metadata of an uploaded clip off the event loop.
    A single attempt; a timeout counts as unreadable.
    """
    try:
        return await asyncio.wait_for(asyncio.to_thread(_read_media_metadata, media), timeout)
    except asyncio.TimeoutError:
        raise MetadataUnreadable("Timed out reading video metadata.")
