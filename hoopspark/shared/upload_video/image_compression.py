"""Downscale and recompress still images (profile pictures, previews) as JPEG."""

from dataclasses import dataclass, field

import cv2
import numpy as np

from hoopspark.shared.errors import ExtractionError
from hoopspark.shared.rounding import round_half_up
from hoopspark.shared.upload_video.thumbnail import encode_jpeg

DEFAULT_MAX_WIDTH = 1280
DEFAULT_QUALITY = 0.82


@dataclass(frozen=True)
class ImageArtifact:
    data: bytes = field(repr=False)
    width: int
    height: int
    filename: str = "image.jpg"
    content_type: str = "image/jpeg"


def compress_image(data: bytes, max_width: int = DEFAULT_MAX_WIDTH,
                   quality: float = DEFAULT_QUALITY, name: str = "image.jpg") -> ImageArtifact:
    """
    Decodes an image, scales it down to at most max_width keeping its aspect
    ratio, and re-encodes it as JPEG. Never upscales.
    """
    if not data:
        raise ExtractionError("Image is empty.")
    image = cv2.imdecode(np.frombuffer(data, dtype=np.uint8), cv2.IMREAD_COLOR)
    if image is None:
        raise ExtractionError("Failed to decode image.")

    source_height, source_width = image.shape[0], image.shape[1]
    ratio = (source_width / source_height) if source_height else 0
    ratio = ratio or 1
    width = min(max_width, source_width)
    height = max(1, int(round_half_up(width / ratio)))
    if (width, height) != (source_width, source_height):
        image = cv2.resize(image, (width, height), interpolation=cv2.INTER_AREA)
    return ImageArtifact(data=encode_jpeg(image, quality), width=width, height=height, filename=name)
