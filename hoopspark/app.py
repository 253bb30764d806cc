"""
HoopSpark Intake Service - FastAPI server
Main entry point for clip upload, validation, thumbnails and skill feedback

FastAPI is the web framework (defines routes, endpoints, middleware)
Uvicorn is the ASGI server (runs the FastAPI application)
"""

import logging
import os
from typing import Optional

from fastapi import Depends, FastAPI, File, Form, HTTPException, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import Response

from hoopspark.shared.analyses.routes import router as analyses_router
from hoopspark.shared.assessment.assessment import assess, classify
from hoopspark.shared.assessment.providers import build_assessment_provider
from hoopspark.shared.assessment.routes import router as functions_router
from hoopspark.shared.assessment.schemas import AssessRequest, ClassifyRequest, ClassifyResponse
from hoopspark.shared.auth.auth_provider import AuthProvider
from hoopspark.shared.auth.dependencies import (
    get_auth_provider,
    get_bearer_token,
    get_config,
    get_object_storage,
    get_record_store,
)
from hoopspark.shared.config import IntakeConfig
from hoopspark.shared.errors import ExtractionError, OrchestratorError, SubmissionInProgress, Unauthenticated
from hoopspark.shared.records.database import init_db
from hoopspark.shared.records.record_store import SqlRecordStore
from hoopspark.shared.skills import get_skill
from hoopspark.shared.storage.object_storage import ObjectStorage
from hoopspark.shared.upload_video.image_compression import DEFAULT_MAX_WIDTH, DEFAULT_QUALITY, compress_image
from hoopspark.shared.upload_video.media_file import accept_video_file
from hoopspark.shared.upload_video.orchestrator import UploadOrchestrator
from hoopspark.shared.upload_video.thumbnail import extract_thumbnail
from hoopspark.shared.upload_video.video_validation import validate_video

logger = logging.getLogger(__name__)

app = FastAPI(
    title="HoopSpark Intake Service",
    description="Basketball clip intake: validation, thumbnails and skill feedback",
    version="0.1.0"
)

# Configure CORS to allow frontend connections
app.add_middleware(
    CORSMiddleware,
    allow_origins=os.environ.get("CORS_ORIGINS", "http://localhost:3000").split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(functions_router)
app.include_router(analyses_router)


@app.on_event("startup")
async def startup_event():
    init_db()


@app.get("/")
async def root():
    """Health check endpoint"""
    return {"message": "HoopSpark Intake Service is running", "status": "ok"}


@app.get("/health")
async def health():
    """Health check endpoint"""
    return {"status": "healthy"}


@app.post("/validate-video")
async def validate_video_endpoint(
    video: Optional[UploadFile] = File(None),
    config: IntakeConfig = Depends(get_config),
):
    """Validates type, size and duration of a clip without storing anything."""
    media = await accept_video_file(video) if video else None
    result = await validate_video(media, config)
    return result.to_dict()


@app.post("/thumbnail")
async def thumbnail_endpoint(
    video: UploadFile = File(...),
    at_seconds: Optional[float] = Form(None),
    width: Optional[int] = Form(None),
    config: IntakeConfig = Depends(get_config),
):
    """Returns a JPEG preview frame of the clip."""
    media = await accept_video_file(video)
    if media is None:
        raise HTTPException(status_code=400, detail="No file provided")
    try:
        thumbnail = await extract_thumbnail(
            media,
            at_seconds=config.thumbnail_at_seconds if at_seconds is None else at_seconds,
            target_width=width or config.thumbnail_width,
            quality=config.thumbnail_quality,
            timeout=config.thumbnail_timeout_seconds,
        )
    except ExtractionError as e:
        raise HTTPException(status_code=422, detail=e.message)
    return Response(
        content=thumbnail.data,
        media_type=thumbnail.content_type,
        headers={"X-Thumbnail-Timestamp": f"{thumbnail.timestamp:.3f}"},
    )


@app.post("/compress-image")
async def compress_image_endpoint(
    image: UploadFile = File(...),
    max_width: int = Form(DEFAULT_MAX_WIDTH),
    quality: float = Form(DEFAULT_QUALITY),
):
    """Downscales an image to max_width and re-encodes it as JPEG."""
    if max_width <= 0 or not (0 < quality <= 1):
        raise HTTPException(status_code=400, detail="max_width must be positive and quality in (0, 1]")
    contents = await image.read()
    try:
        compressed = compress_image(contents, max_width=max_width, quality=quality,
                                    name=image.filename or "image.jpg")
    except ExtractionError as e:
        raise HTTPException(status_code=422, detail=e.message)
    return Response(content=compressed.data, media_type=compressed.content_type)


@app.post("/classify", response_model=ClassifyResponse)
async def classify_endpoint(body: ClassifyRequest):
    """Maps a free-text skill focus to a skill category."""
    category = classify(body.skill_focus)
    return ClassifyResponse(category=category.value, skill_area=get_skill(category).label)


@app.post("/assess")
async def assess_endpoint(body: AssessRequest):
    """Synthetic assessment for a category (or a skill focus to classify first)."""
    category = body.category if body.category else classify(body.skill_focus)
    return assess(category, body.self_rating).model_dump()


def _error_status(error: OrchestratorError) -> int:
    if isinstance(error.cause, Unauthenticated):
        return 401
    if error.stage == "validating" and error.reason:
        return 400
    return 502


@app.post("/upload-video")
async def upload_video(
    video: Optional[UploadFile] = File(None),
    skill_focus: Optional[str] = Form(None),
    self_rating: Optional[float] = Form(None),
    config: IntakeConfig = Depends(get_config),
    auth: AuthProvider = Depends(get_auth_provider),
    token: Optional[str] = Depends(get_bearer_token),
    storage: ObjectStorage = Depends(get_object_storage),
    records: SqlRecordStore = Depends(get_record_store),
):
    """
    Accepts a clip via FormData with an optional skill focus and self-rating.
    Validates, uploads, thumbnails, records and assesses it.
    Returns the stored keys and the analysis.
    """
    orchestrator = UploadOrchestrator(
        config=config,
        auth=auth,
        storage=storage,
        records=records,
        assessment_provider=build_assessment_provider(config, records, token),
    )
    try:
        media = await accept_video_file(video) if video else None
        if media:
            logger.info("Video received: %s (%s, %.2f MB)", media.filename, media.content_type,
                        media.size / (1024 * 1024))
        result = await orchestrator.submit(media, skill_focus=skill_focus, self_rating=self_rating)
    except OrchestratorError as e:
        raise HTTPException(status_code=_error_status(e), detail=e.to_dict())
    except SubmissionInProgress as e:
        raise HTTPException(status_code=409, detail=e.message)
    except HTTPException:
        raise
    except Exception as e:
        logger.error("Error processing upload: %s", e, exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error processing upload: {str(e)}")

    return {
        "status": "success",
        "message": "Upload complete and analysis created.",
        "state": orchestrator.state.value,
        **result.to_dict(),
    }


if __name__ == "__main__":
    import uvicorn
    logging.basicConfig(level=os.environ.get("LOG_LEVEL", "INFO"))
    uvicorn.run(app, host="0.0.0.0", port=int(os.environ.get("PORT", 8000)))
