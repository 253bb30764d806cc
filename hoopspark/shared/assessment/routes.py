"""
analyze-video function: assesses an uploaded video and records the feedback.

This is the server side of RemoteAssessmentProvider.
"""

import asyncio
import logging
from typing import Optional

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from hoopspark.shared.assessment.assessment import compute_analysis, resolve_skill_focus
from hoopspark.shared.assessment.providers import record_assessment
from hoopspark.shared.assessment.schemas import AnalyzeVideoRequest
from hoopspark.shared.auth.auth_provider import AuthProvider
from hoopspark.shared.auth.dependencies import get_auth_provider, get_record_store
from hoopspark.shared.errors import ConstraintError
from hoopspark.shared.records.record_store import SqlRecordStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/functions/v1", tags=["functions"])


def _error(message: str, status_code: int) -> JSONResponse:
    return JSONResponse(content={"error": message}, status_code=status_code)


@router.post("/analyze-video")
async def analyze_video(
    body: AnalyzeVideoRequest,
    auth: AuthProvider = Depends(get_auth_provider),
    records: SqlRecordStore = Depends(get_record_store),
):
    """
    Computes the assessment for a stored video.

    Skill focus comes from the request, else the video row, else
    questionnaire["focus"], else "General". Responds 400 on missing fields,
    401 without a valid caller, 404 when the caller has no such video.
    """
    try:
        if not body.videoId or not body.bucket or not body.key:
            return _error("Missing required fields: videoId, bucket, key", 400)

        user_id: Optional[str] = await asyncio.to_thread(auth.get_current_user)
        if not user_id:
            return _error("Unauthorized", 401)

        video = await asyncio.to_thread(records.get_video, body.videoId, user_id)
        if not video:
            return _error("Video not found", 404)

        focus = resolve_skill_focus(body.skillFocus, video.get("skill_focus"), body.questionnaire)
        analysis = compute_analysis(focus, body.questionnaire)

        try:
            await asyncio.to_thread(
                record_assessment, records, user_id, body.videoId, analysis, body.questionnaire
            )
        except ConstraintError as e:
            return _error(e.message, 400)

        return {"ok": True, "analysis": {**analysis.model_dump(), "ai_response": analysis.provenance_tag}}
    except Exception as e:
        logger.error("analyze-video failed: %s", e, exc_info=True)
        return _error(str(e) or "Internal error", 500)
