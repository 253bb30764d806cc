#!/usr/bin/env python3
"""
Script to check a local clip against the upload policy.
Usage: python check_clip.py <path> [--thumbnail out.jpg]
"""

import asyncio
import os
import sys

# Add the project root to the path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))


async def check_clip(path: str, thumbnail_path: str = None) -> bool:
    """Validate a clip and optionally write its thumbnail. Returns True if valid."""
    from hoopspark.shared.config import IntakeConfig
    from hoopspark.shared.errors import ExtractionError
    from hoopspark.shared.upload_video.media_file import MediaFile
    from hoopspark.shared.upload_video.thumbnail import extract_thumbnail
    from hoopspark.shared.upload_video.video_validation import validate_video

    config = IntakeConfig.from_env()
    media = MediaFile.from_path(path)
    result = await validate_video(media, config)

    print(f"File: {media.filename}")
    print(f"Type: {media.content_type}")
    print(f"Size: {media.size} bytes ({round(media.size / (1024 * 1024), 2)} MB)")
    if not result.ok:
        print(f"Rejected ({result.reason.value}): {result.message}")
        return False
    print(f"Duration: {result.meta.duration:.2f}s")
    print(f"Dimensions: {result.meta.width}x{result.meta.height}")

    if thumbnail_path:
        try:
            thumbnail = await extract_thumbnail(
                media,
                at_seconds=config.thumbnail_at_seconds,
                target_width=config.thumbnail_width,
                quality=config.thumbnail_quality,
                timeout=config.thumbnail_timeout_seconds,
            )
        except ExtractionError as e:
            print(f"Thumbnail failed: {e.message}")
        else:
            with open(thumbnail_path, "wb") as f:
                f.write(thumbnail.data)
            print(f"Thumbnail: {thumbnail_path} ({thumbnail.width}x{thumbnail.height} at {thumbnail.timestamp:.2f}s)")
    return True


if __name__ == "__main__":
    args = sys.argv[1:]
    thumbnail_path = None
    if "--thumbnail" in args:
        index = args.index("--thumbnail")
        if index + 1 >= len(args):
            print("Error: --thumbnail needs an output path")
            sys.exit(1)
        thumbnail_path = args[index + 1]
        del args[index:index + 2]

    if len(args) != 1:
        print("Usage: python check_clip.py <path> [--thumbnail out.jpg]")
        sys.exit(1)

    if not os.path.exists(args[0]):
        print(f"Error: File '{args[0]}' not found")
        sys.exit(1)

    is_valid = asyncio.run(check_clip(args[0], thumbnail_path))
    sys.exit(0 if is_valid else 1)
