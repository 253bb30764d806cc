import cv2
import numpy as np
import pytest

from hoopspark.shared.errors import ExtractionError
from hoopspark.shared.upload_video.image_compression import compress_image


def png_bytes(width, height):
    image = np.zeros((height, width, 3), dtype=np.uint8)
    image[:, : width // 2] = (255, 128, 0)
    ok, buffer = cv2.imencode(".png", image)
    assert ok
    return buffer.tobytes()


def test_downscales_to_max_width():
    result = compress_image(png_bytes(2000, 1000), name="avatar.png")
    assert (result.width, result.height) == (1280, 640)
    assert result.filename == "avatar.png"
    assert result.content_type == "image/jpeg"
    decoded = cv2.imdecode(np.frombuffer(result.data, dtype=np.uint8), cv2.IMREAD_COLOR)
    assert decoded.shape == (640, 1280, 3)


def test_never_upscales():
    result = compress_image(png_bytes(200, 100), max_width=1280)
    assert (result.width, result.height) == (200, 100)


def test_custom_width():
    result = compress_image(png_bytes(400, 300), max_width=100, quality=0.5)
    assert (result.width, result.height) == (100, 75)


@pytest.mark.parametrize("data", [b"", b"definitely not an image"])
def test_undecodable_input(data):
    with pytest.raises(ExtractionError):
        compress_image(data)
