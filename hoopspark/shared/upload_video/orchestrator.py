"""
Upload orchestrator
Sequences validation, upload, best-effort thumbnail, record creation and
assessment for one submission.

States:
    idle -> validating -> uploading -> thumbnailing -> recording
         -> requesting_assessment -> done
Any step except thumbnailing can end in errored. Thumbnail failures are
logged and skipped. Nothing is retried; resubmitting starts again from idle.
Cancellation propagates as-is: completed remote writes are not rolled back
and no partial result is returned.
"""

import asyncio
import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Awaitable, Callable, List, Optional, Tuple

from hoopspark.shared.assessment.assessment import Assessment
from hoopspark.shared.assessment.providers import AssessmentProvider, AssessmentRequest
from hoopspark.shared.auth.auth_provider import AuthProvider
from hoopspark.shared.config import IntakeConfig
from hoopspark.shared.errors import OrchestratorError, SubmissionInProgress, Unauthenticated
from hoopspark.shared.records.record_store import RecordStore
from hoopspark.shared.storage.object_storage import ObjectStorage, sign_or_none
from hoopspark.shared.upload_video.media_file import MediaFile
from hoopspark.shared.upload_video.storage_keys import make_key, strip_owner
from hoopspark.shared.upload_video.thumbnail import ThumbnailArtifact, extract_thumbnail
from hoopspark.shared.upload_video.video_metadata import VideoMeta
from hoopspark.shared.upload_video.video_validation import ValidationResult, validate_video

logger = logging.getLogger(__name__)

Validator = Callable[[Optional[MediaFile], IntakeConfig], Awaitable[ValidationResult]]
Thumbnailer = Callable[..., Awaitable[ThumbnailArtifact]]


class UploadState(str, Enum):
    IDLE = "idle"
    VALIDATING = "validating"
    UPLOADING = "uploading"
    THUMBNAILING = "thumbnailing"
    RECORDING = "recording"
    REQUESTING_ASSESSMENT = "requesting_assessment"
    DONE = "done"
    ERRORED = "errored"


@dataclass
class SubmissionResult:
    video_id: str
    video_key: str
    assessment: Assessment
    meta: VideoMeta
    thumbnail_key: Optional[str] = None
    video_url: Optional[str] = None
    thumbnail_url: Optional[str] = None
    states: List[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        """Convert to dictionary for API responses."""
        return {
            "video_id": self.video_id,
            "video_key": self.video_key,
            "thumbnail_key": self.thumbnail_key,
            "video_url": self.video_url,
            "thumbnail_url": self.thumbnail_url,
            "meta": self.meta.to_dict(),
            "analysis": self.assessment.model_dump(),
            "states": self.states,
        }


def _message_of(error: BaseException) -> str:
    return getattr(error, "message", None) or str(error) or "Upload failed."


class UploadOrchestrator:
    """Runs one submission at a time through the upload state machine."""

    def __init__(self, config: IntakeConfig, auth: AuthProvider, storage: ObjectStorage,
                 records: RecordStore, assessment_provider: AssessmentProvider,
                 validator: Validator = validate_video,
                 thumbnailer: Thumbnailer = extract_thumbnail,
                 key_factory: Callable[[str, str], str] = make_key,
                 id_factory: Callable[[], str] = lambda: str(uuid.uuid4())):
        self.config = config
        self.auth = auth
        self.storage = storage
        self.records = records
        self.assessment_provider = assessment_provider
        self.validator = validator
        self.thumbnailer = thumbnailer
        self.key_factory = key_factory
        self.id_factory = id_factory
        self.state = UploadState.IDLE
        self.history: List[UploadState] = [UploadState.IDLE]
        self.error: Optional[OrchestratorError] = None
        self._active = False

    @property
    def is_active(self) -> bool:
        return self._active

    def _transition(self, state: UploadState) -> None:
        logger.info("Upload state: %s -> %s", self.state.value, state.value)
        self.state = state
        self.history.append(state)

    def _fail(self, stage: str, message: str, cause: Optional[BaseException] = None,
              reason: Optional[str] = None) -> OrchestratorError:
        self.error = OrchestratorError(stage, message, cause=cause, reason=reason)
        self._transition(UploadState.ERRORED)
        logger.warning("Upload failed at %s: %s", stage, message)
        return self.error

    async def submit(self, media: Optional[MediaFile], skill_focus: Optional[str] = None,
                     self_rating: Optional[float] = None) -> SubmissionResult:
        """
        Runs one submission end to end.

        Args:
            media: The selected clip (None if nothing was selected)
            skill_focus: Free-text skill focus for classification
            self_rating: Optional 0-10 self estimate

        Returns:
            SubmissionResult with the assessment

        Raises:
            SubmissionInProgress: another submission is running on this instance
            OrchestratorError: terminal failure, tagged with its stage
        """
        if self._active:
            raise SubmissionInProgress()
        self._active = True
        self.state = UploadState.IDLE
        self.history = [UploadState.IDLE]
        self.error = None
        try:
            return await self._run(media, skill_focus, self_rating)
        finally:
            self._active = False

    async def _run(self, media: Optional[MediaFile], skill_focus: Optional[str],
                   self_rating: Optional[float]) -> SubmissionResult:
        try:
            user_id = await asyncio.to_thread(self.auth.get_current_user)
        except Exception as e:
            raise self._fail("auth", _message_of(e), cause=e)
        if not user_id:
            error = Unauthenticated()
            raise self._fail("auth", error.message, cause=error, reason="unauthenticated")

        self._transition(UploadState.VALIDATING)
        try:
            result = await self.validator(media, self.config)
        except Exception as e:
            raise self._fail("validating", _message_of(e), cause=e)
        if not result.ok:
            raise self._fail("validating", result.message, reason=result.reason.value)

        self._transition(UploadState.UPLOADING)
        video_key = self.key_factory(user_id, media.filename)
        try:
            await asyncio.to_thread(
                self.storage.put, self.config.video_bucket, video_key, media.data,
                media.content_type, self.config.cache_control, False,
            )
        except Exception as e:
            raise self._fail("uploading", _message_of(e), cause=e)
        video_url = await asyncio.to_thread(
            sign_or_none, self.storage, self.config.video_bucket, video_key, self.config.signed_url_ttl_seconds
        )

        self._transition(UploadState.THUMBNAILING)
        thumbnail_key, thumbnail_url = await self._upload_thumbnail(media, user_id)

        self._transition(UploadState.RECORDING)
        video_id = self.id_factory()
        row = {
            "id": video_id,
            "user_id": user_id,
            "file_url": video_key,
            "original_filename": media.filename,
            "filename": strip_owner(video_key),
            "bucket_name": self.config.video_bucket,
            "file_size": media.size,
            "uploaded_at": datetime.now(timezone.utc),
            "skill_focus": skill_focus or None,
            "thumbnail_key": thumbnail_key,
            "status": "uploaded",
        }
        try:
            await asyncio.to_thread(self.records.insert, "videos", row)
        except Exception as e:
            raise self._fail("recording", _message_of(e), cause=e)

        self._transition(UploadState.REQUESTING_ASSESSMENT)
        request = AssessmentRequest(
            video_id=video_id,
            user_id=user_id,
            bucket=self.config.video_bucket,
            key=video_key,
            skill_focus=skill_focus or None,
            questionnaire={"self_rating": self_rating} if self_rating is not None else None,
        )
        try:
            assessment = await self.assessment_provider.request_assessment(request)
        except Exception as e:
            raise self._fail("assessing", _message_of(e), cause=e)

        self._transition(UploadState.DONE)
        logger.info("Upload complete and analysis created for video %s", video_id)
        return SubmissionResult(
            video_id=video_id,
            video_key=video_key,
            assessment=assessment,
            meta=result.meta,
            thumbnail_key=thumbnail_key,
            video_url=video_url,
            thumbnail_url=thumbnail_url,
            states=[s.value for s in self.history],
        )

    async def _upload_thumbnail(self, media: MediaFile, user_id: str) -> Tuple[Optional[str], Optional[str]]:
        """Extracts, uploads and signs a thumbnail. Any failure yields (None, None)."""
        try:
            thumbnail = await self.thumbnailer(
                media,
                at_seconds=self.config.thumbnail_at_seconds,
                target_width=self.config.thumbnail_width,
                quality=self.config.thumbnail_quality,
                timeout=self.config.thumbnail_timeout_seconds,
            )
            thumbnail_key = self.key_factory(user_id, thumbnail.filename)
            await asyncio.to_thread(
                self.storage.put, self.config.thumb_bucket, thumbnail_key, thumbnail.data,
                thumbnail.content_type, self.config.cache_control, False,
            )
        except Exception as e:
            logger.warning("Thumbnail skipped for %s: %s", media.filename, _message_of(e))
            return None, None
        thumbnail_url = await asyncio.to_thread(
            sign_or_none, self.storage, self.config.thumb_bucket, thumbnail_key, self.config.signed_url_ttl_seconds
        )
        return thumbnail_key, thumbnail_url
