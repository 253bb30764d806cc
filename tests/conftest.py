from datetime import datetime, timedelta, timezone
from pathlib import Path

import cv2
import numpy as np
import pytest
from sqlalchemy.orm import sessionmaker

from hoopspark.shared.config import IntakeConfig
from hoopspark.shared.errors import ConstraintError, StorageError
from hoopspark.shared.records.database import create_db_engine, init_db
from hoopspark.shared.records.record_store import SqlRecordStore
from hoopspark.shared.upload_video.media_file import MediaFile


def write_clip(path: Path, seconds: float = 2.0, fps: int = 10, width: int = 320, height: int = 180) -> Path:
    """Writes a small mp4v clip whose frames get brighter over time."""
    writer = cv2.VideoWriter(str(path), cv2.VideoWriter_fourcc(*"mp4v"), fps, (width, height))
    for i in range(int(seconds * fps)):
        frame = np.full((height, width, 3), (i * 9) % 256, dtype=np.uint8)
        cv2.rectangle(frame, (10, 10), (width // 3, height // 3), (0, 0, 255), -1)
        writer.write(frame)
    writer.release()
    return path


def video_row(video_id="video-1", user_id="user-123", minutes_ago=0):
    return {
        "id": video_id,
        "user_id": user_id,
        "file_url": f"{user_id}/tok_{video_id}.mp4",
        "original_filename": f"{video_id}.mp4",
        "filename": f"tok_{video_id}.mp4",
        "bucket_name": "videos",
        "file_size": 1024,
        "uploaded_at": datetime.now(timezone.utc) - timedelta(minutes=minutes_ago),
        "skill_focus": "shooting",
        "thumbnail_key": None,
        "status": "uploaded",
    }


class FakeStorage:
    def __init__(self):
        self.puts = []
        self.signed = []
        self.fail_buckets = set()
        self.fail_sign = False

    def put(self, bucket, key, data, content_type, cache_control="3600", upsert=False):
        self.puts.append({
            "bucket": bucket, "key": key, "size": len(data), "content_type": content_type,
            "cache_control": cache_control, "upsert": upsert,
        })
        if bucket in self.fail_buckets:
            raise StorageError("Bucket not found")

    def sign(self, bucket, key, ttl_seconds):
        if self.fail_sign:
            raise StorageError("Signing disabled")
        self.signed.append((bucket, key, ttl_seconds))
        return f"https://storage.test/{bucket}/{key}?ttl={ttl_seconds}"


class FakeRecordStore:
    def __init__(self):
        self.rows = {}
        self.inserts = []
        self.updates = []
        self.fail_tables = set()

    def insert(self, table, row):
        self.inserts.append((table, dict(row)))
        if table in self.fail_tables:
            raise ConstraintError(f'new row violates row-level security policy for table "{table}"')
        self.rows.setdefault(table, {})[row["id"]] = dict(row)

    def update(self, table, row_id, patch):
        self.updates.append((table, row_id, dict(patch)))
        if row_id not in self.rows.get(table, {}):
            raise ConstraintError(f"{table} row not found: {row_id}")
        self.rows[table][row_id].update(patch)


class FakeAuth:
    def __init__(self, user_id="user-123"):
        self.user_id = user_id
        self.calls = 0

    def get_current_user(self):
        self.calls += 1
        return self.user_id


@pytest.fixture
def config():
    return IntakeConfig()


@pytest.fixture
def storage():
    return FakeStorage()


@pytest.fixture
def records():
    return FakeRecordStore()


@pytest.fixture
def auth():
    return FakeAuth()


@pytest.fixture
def clip_path(tmp_path):
    return write_clip(tmp_path / "clip.mp4")


@pytest.fixture
def clip_media(clip_path):
    return MediaFile.from_path(str(clip_path), content_type="video/mp4")


@pytest.fixture
def sql_store(tmp_path):
    engine = create_db_engine(f"sqlite:///{tmp_path / 'hoopspark.db'}")
    init_db(bind=engine)
    yield SqlRecordStore(sessionmaker(autocommit=False, autoflush=False, bind=engine))
    engine.dispose()
