"""Upload history routes: the caller's videos and their analyses."""

import asyncio
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from hoopspark.shared.analyses.schemas import (
    AnalysisResponse,
    FeedbackResponse,
    VideoListItem,
    VideoListResponse,
)
from hoopspark.shared.auth.auth_provider import AuthProvider
from hoopspark.shared.auth.dependencies import (
    get_auth_provider,
    get_config,
    get_object_storage,
    get_record_store,
)
from hoopspark.shared.config import IntakeConfig
from hoopspark.shared.records.record_store import SqlRecordStore
from hoopspark.shared.storage.object_storage import ObjectStorage, sign_or_none

router = APIRouter(prefix="/api", tags=["analyses"])


async def require_user(auth: AuthProvider = Depends(get_auth_provider)) -> str:
    """Resolves the caller or fails with 401."""
    user_id: Optional[str] = await asyncio.to_thread(auth.get_current_user)
    if not user_id:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Please sign in.")
    return user_id


def _video_item(row: dict, storage: ObjectStorage, config: IntakeConfig) -> VideoListItem:
    ttl = config.signed_url_ttl_seconds
    return VideoListItem(
        **row,
        signed_url=sign_or_none(storage, row["bucket_name"], row["file_url"], ttl),
        thumbnail_url=sign_or_none(storage, config.thumb_bucket, row.get("thumbnail_key"), ttl),
    )


@router.get("/videos", response_model=VideoListResponse)
async def list_videos(
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    user_id: str = Depends(require_user),
    records: SqlRecordStore = Depends(get_record_store),
    storage: ObjectStorage = Depends(get_object_storage),
    config: IntakeConfig = Depends(get_config),
):
    """List the caller's videos, newest first, each with a signed playback URL."""
    rows, total = await asyncio.to_thread(records.list_videos, user_id, limit, offset)
    videos = [_video_item(row, storage, config) for row in rows]
    return VideoListResponse(videos=videos, total=total, limit=limit, offset=offset)


@router.get("/analysis/{video_id}", response_model=AnalysisResponse)
async def get_analysis(
    video_id: str,
    user_id: str = Depends(require_user),
    records: SqlRecordStore = Depends(get_record_store),
    storage: ObjectStorage = Depends(get_object_storage),
    config: IntakeConfig = Depends(get_config),
):
    """Get one of the caller's videos with its latest feedback."""
    video = await asyncio.to_thread(records.get_video, video_id, user_id)
    if not video:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Video not found")
    feedback = await asyncio.to_thread(records.get_feedback, video_id, user_id)
    return AnalysisResponse(
        video=_video_item(video, storage, config),
        feedback=FeedbackResponse(**feedback) if feedback else None,
    )
