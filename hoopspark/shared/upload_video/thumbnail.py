"""
Thumbnail extraction component
Seeks into the clip, rasterizes one decoded frame and encodes it as JPEG.

Best-effort: callers treat every failure (seek, decode, encode, timeout) as a
single ExtractionError and carry on without a thumbnail.
"""

import asyncio
from dataclasses import dataclass, field

import cv2

from hoopspark.shared.errors import ExtractionError
from hoopspark.shared.rounding import round_half_up
from hoopspark.shared.upload_video.media_file import MediaFile, save_video_temp
from hoopspark.shared.upload_video.video_metadata import read_duration

THUMBNAIL_TIME_SECONDS = 1.0
THUMBNAIL_WIDTH = 640
THUMBNAIL_QUALITY = 0.85
FALLBACK_ASPECT_RATIO = 16 / 9
SEEK_EPSILON_SECONDS = 0.05  # stay clear of end-of-stream


@dataclass(frozen=True)
class ThumbnailArtifact:
    """Encoded JPEG still plus the source timestamp it was taken from."""
    data: bytes = field(repr=False)
    timestamp: float
    width: int
    height: int
    content_type: str = "image/jpeg"
    filename: str = "thumb.jpg"


def seek_target(at_seconds: float, duration: float) -> float:
    """Clamps the requested timestamp into [0, duration - epsilon]."""
    target = max(0.0, at_seconds)
    if duration and duration > 0:
        target = min(target, duration - SEEK_EPSILON_SECONDS)
    return max(0.0, target)


def scaled_height(target_width: int, source_width: float, source_height: float) -> int:
    """Height for target_width that keeps the source aspect ratio (16:9 if unknown)."""
    ratio = (source_width / source_height) if source_width and source_height else 0
    if not ratio:
        ratio = FALLBACK_ASPECT_RATIO
    return max(1, int(round_half_up(target_width / ratio)))


def encode_jpeg(frame, quality: float) -> bytes:
    """Encodes a BGR frame as JPEG. quality is a fraction in (0, 1]."""
    ok, buffer = cv2.imencode(".jpg", frame, [int(cv2.IMWRITE_JPEG_QUALITY), int(round(quality * 100))])
    if not ok:
        raise ExtractionError("Failed to encode thumbnail.")
    return buffer.tobytes()


def grab_thumbnail(video_path: str, at_seconds: float = THUMBNAIL_TIME_SECONDS,
                   target_width: int = THUMBNAIL_WIDTH,
                   quality: float = THUMBNAIL_QUALITY) -> ThumbnailArtifact:
    """
    Reads the frame at at_seconds from a video file and returns it as a JPEG,
    scaled to target_width.
    """
    cap = cv2.VideoCapture(video_path)
    if not cap.isOpened():
        cap.release()
        raise ExtractionError("Failed to load video for thumbnail.")
    try:
        target = seek_target(at_seconds, read_duration(cap))
        # the duration fallback can leave the read position at end of stream
        needs_seek = target > 0 or cap.get(cv2.CAP_PROP_POS_FRAMES) > 0
        if needs_seek and not cap.set(cv2.CAP_PROP_POS_MSEC, target * 1000.0):
            raise ExtractionError("Failed to seek video for thumbnail.")
        ret, frame = cap.read()
    finally:
        cap.release()

    if not ret or frame is None or frame.size == 0:
        raise ExtractionError("Failed to seek video for thumbnail.")

    source_height, source_width = frame.shape[0], frame.shape[1]
    height = scaled_height(target_width, source_width, source_height)
    resized = cv2.resize(frame, (target_width, height), interpolation=cv2.INTER_AREA)
    return ThumbnailArtifact(
        data=encode_jpeg(resized, quality),
        timestamp=target,
        width=target_width,
        height=height,
    )


def _extract_from_media(media: MediaFile, at_seconds: float, target_width: int,
                        quality: float) -> ThumbnailArtifact:
    with save_video_temp(media) as temp_path:
        try:
            return grab_thumbnail(temp_path, at_seconds, target_width, quality)
        except cv2.error as e:
            raise ExtractionError(f"Failed to decode video frame: {e}")


async def extract_thumbnail(media: MediaFile, at_seconds: float = THUMBNAIL_TIME_SECONDS,
                            target_width: int = THUMBNAIL_WIDTH,
                            quality: float = THUMBNAIL_QUALITY,
                            timeout: float = 15.0) -> ThumbnailArtifact:
    """
    Creates a JPEG thumbnail from the clip at at_seconds (default 1s).

    Runs the decode off the event loop and bounds it with a timeout;
    a timeout is reported as an ordinary ExtractionError.
    """
    if target_width <= 0:
        raise ExtractionError(f"Invalid thumbnail width: {target_width}")
    try:
        return await asyncio.wait_for(
            asyncio.to_thread(_extract_from_media, media, at_seconds, target_width, quality),
            timeout,
        )
    except asyncio.TimeoutError:
        raise ExtractionError("Timed out extracting thumbnail.")
