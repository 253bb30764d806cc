"""
Record store for video and feedback rows.

The upload pipeline only needs insert and update; the read helpers back the
history endpoints and always scope by user_id.
"""

import logging
from typing import Dict, List, Optional, Protocol, Tuple

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from hoopspark.shared.errors import ConstraintError
from hoopspark.shared.records.database import SessionLocal
from hoopspark.shared.records.models import TABLES, Feedback, Video

logger = logging.getLogger(__name__)


class RecordStore(Protocol):
    """Structured row persistence consumed by the orchestrator."""

    def insert(self, table: str, row: Dict) -> None:
        ...

    def update(self, table: str, row_id: str, patch: Dict) -> None:
        ...


def row_to_dict(obj) -> Dict:
    """Converts an ORM row to a plain dict of its columns."""
    return {column.name: getattr(obj, column.name) for column in obj.__table__.columns}


class SqlRecordStore:
    """RecordStore backed by SQLAlchemy sessions."""

    def __init__(self, session_factory=SessionLocal):
        self._session_factory = session_factory

    def _model(self, table: str):
        model = TABLES.get(table)
        if model is None:
            raise ConstraintError(f"Unknown table: {table}")
        return model

    def _check_columns(self, model, values: Dict) -> None:
        unknown = set(values) - {column.name for column in model.__table__.columns}
        if unknown:
            raise ConstraintError(f"Unknown column(s) for {model.__tablename__}: {', '.join(sorted(unknown))}")

    def insert(self, table: str, row: Dict) -> None:
        """Inserts one row. Integrity violations raise ConstraintError."""
        model = self._model(table)
        self._check_columns(model, row)
        with self._session_factory() as db:
            try:
                db.add(model(**row))
                db.commit()
            except IntegrityError as e:
                db.rollback()
                raise ConstraintError(f"Could not insert into {table}: {e.orig}")
            except SQLAlchemyError as e:
                db.rollback()
                raise ConstraintError(f"Could not insert into {table}: {e}")

    def update(self, table: str, row_id: str, patch: Dict) -> None:
        """Applies patch to the row with row_id. Missing rows raise ConstraintError."""
        model = self._model(table)
        self._check_columns(model, patch)
        with self._session_factory() as db:
            try:
                obj = db.get(model, row_id)
                if obj is None:
                    raise ConstraintError(f"{table} row not found: {row_id}")
                for key, value in patch.items():
                    setattr(obj, key, value)
                db.commit()
            except (IntegrityError, SQLAlchemyError) as e:
                db.rollback()
                raise ConstraintError(f"Could not update {table}: {e}")

    def get_video(self, video_id: str, user_id: str) -> Optional[Dict]:
        """Returns the caller's video row, or None if missing or owned by someone else."""
        with self._session_factory() as db:
            video = db.query(Video).filter(Video.id == video_id, Video.user_id == user_id).first()
            return row_to_dict(video) if video else None

    def list_videos(self, user_id: str, limit: int = 50, offset: int = 0) -> Tuple[List[Dict], int]:
        """Returns (rows, total) of the caller's videos, newest first."""
        with self._session_factory() as db:
            query = db.query(Video).filter(Video.user_id == user_id)
            total = query.count()
            rows = query.order_by(Video.uploaded_at.desc()).offset(offset).limit(limit).all()
            return [row_to_dict(r) for r in rows], total

    def get_feedback(self, video_id: str, user_id: str) -> Optional[Dict]:
        """Returns the latest feedback row for the caller's video, or None."""
        with self._session_factory() as db:
            feedback = (
                db.query(Feedback)
                .filter(Feedback.video_id == video_id, Feedback.user_id == user_id)
                .order_by(Feedback.created_at.desc())
                .first()
            )
            return row_to_dict(feedback) if feedback else None
