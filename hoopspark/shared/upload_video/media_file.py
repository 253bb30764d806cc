"""
Receives uploaded video files and holds them for one upload attempt.
Materializes the bytes to a temporary file when OpenCV needs a path.
"""

import mimetypes
import os
import tempfile
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator, Optional

from fastapi import UploadFile


@dataclass(frozen=True)
class MediaFile:
    """Selected clip: raw bytes, declared MIME type, size and display name."""
    data: bytes = field(repr=False)
    content_type: str
    filename: str
    size: int = -1

    def __post_init__(self):
        if self.size < 0:
            object.__setattr__(self, "size", len(self.data))

    @property
    def extension(self) -> str:
        suffix = os.path.splitext(self.filename)[1] if self.filename else ""
        return suffix or ".mp4"

    @classmethod
    def from_path(cls, path: str, content_type: Optional[str] = None) -> "MediaFile":
        """Loads a local clip, guessing the MIME type from the extension."""
        p = Path(path)
        if content_type is None:
            content_type = mimetypes.guess_type(p.name)[0] or "application/octet-stream"
        return cls(data=p.read_bytes(), content_type=content_type, filename=p.name)


async def accept_video_file(file: UploadFile) -> Optional[MediaFile]:
    """
    Reads a FormData upload into a MediaFile.
    Returns None when no file was selected.
    """
    if file is None or not file.filename:
        return None
    contents = await file.read()
    await file.seek(0)
    return MediaFile(
        data=contents,
        content_type=(file.content_type or "").lower(),
        filename=file.filename,
    )


@contextmanager
def save_video_temp(media: MediaFile) -> Iterator[str]:
    """
    Saves the clip to a temporary file for the duration of the block.
    Yields the path; the file is always removed afterwards.
    """
    temp_file = tempfile.NamedTemporaryFile(delete=False, suffix=media.extension)
    try:
        temp_file.write(media.data)
        temp_file.close()
        yield temp_file.name
    finally:
        if not temp_file.closed:
            temp_file.close()
        if os.path.exists(temp_file.name):
            os.unlink(temp_file.name)
