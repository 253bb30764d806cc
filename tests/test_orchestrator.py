import asyncio

import pytest

from hoopspark.shared.assessment.providers import LocalAssessmentProvider
from hoopspark.shared.errors import (
    AssessmentInvocationError,
    ExtractionError,
    OrchestratorError,
    SubmissionInProgress,
    Unauthenticated,
)
from hoopspark.shared.upload_video.media_file import MediaFile
from hoopspark.shared.upload_video.orchestrator import UploadOrchestrator, UploadState
from hoopspark.shared.upload_video.thumbnail import ThumbnailArtifact
from hoopspark.shared.upload_video.video_metadata import VideoMeta
from hoopspark.shared.upload_video.video_validation import ValidationResult, validate_video

MB = 1024 * 1024


def clip(size=20 * MB, content_type="video/mp4"):
    return MediaFile(data=b"\x00" * 1024, content_type=content_type, filename="Game Day.mp4", size=size)


def validator_for(duration):
    async def reader(media, timeout):
        return VideoMeta(duration=duration, width=1920, height=1080)

    async def validator(media, config):
        return await validate_video(media, config, metadata_reader=reader)

    return validator


async def good_thumbnailer(media, at_seconds, target_width, quality, timeout):
    return ThumbnailArtifact(data=b"\xff\xd8jpeg", timestamp=at_seconds, width=target_width, height=360)


async def broken_thumbnailer(media, **kwargs):
    raise ExtractionError("Failed to decode video frame.")


class FailingProvider:
    def __init__(self):
        self.calls = 0

    async def request_assessment(self, request):
        self.calls += 1
        raise AssessmentInvocationError("Video not found", status_code=404)


def make_orchestrator(config, auth, storage, records, provider=None, duration=45.0,
                      thumbnailer=good_thumbnailer, validator=None):
    return UploadOrchestrator(
        config=config,
        auth=auth,
        storage=storage,
        records=records,
        assessment_provider=provider or LocalAssessmentProvider(records),
        validator=validator or validator_for(duration),
        thumbnailer=thumbnailer,
        id_factory=lambda: "video-1",
    )


def video_inserts(records):
    return [row for table, row in records.inserts if table == "videos"]


def test_end_to_end_submission(config, auth, storage, records):
    orchestrator = make_orchestrator(config, auth, storage, records)
    result = asyncio.run(orchestrator.submit(clip(), skill_focus="shooting", self_rating=9))

    assert orchestrator.state == UploadState.DONE
    assert result.states == [
        "idle", "validating", "uploading", "thumbnailing", "recording", "requesting_assessment", "done",
    ]

    video_puts = [p for p in storage.puts if p["bucket"] == config.video_bucket]
    assert len(video_puts) == 1
    assert video_puts[0]["key"].startswith("user-123/")
    assert video_puts[0]["key"].endswith("_Game_Day.mp4")
    assert video_puts[0]["upsert"] is False
    assert video_puts[0]["cache_control"] == "3600"

    rows = video_inserts(records)
    assert len(rows) == 1
    assert rows[0]["status"] == "uploaded"
    assert rows[0]["file_size"] == 20 * MB
    assert rows[0]["skill_focus"] == "shooting"
    assert rows[0]["file_url"] == result.video_key
    assert rows[0]["filename"] == result.video_key.split("/", 1)[1]
    assert ("videos", "video-1", {"status": "analyzed"}) in records.updates
    assert records.rows["videos"]["video-1"]["status"] == "analyzed"

    assert result.assessment.score == 9.2
    assert result.assessment.skill_area == "Shooting"
    assert result.thumbnail_key.startswith("user-123/")
    assert result.video_url.startswith("https://storage.test/videos/")
    assert result.thumbnail_url.startswith("https://storage.test/thumbnails/")

    feedback = list(records.rows["feedback"].values())[0]
    assert feedback["video_id"] == "video-1"
    assert feedback["questionnaire_data"] == {"self_rating": 9}


def test_thumbnail_failure_still_completes(config, auth, storage, records):
    orchestrator = make_orchestrator(config, auth, storage, records, thumbnailer=broken_thumbnailer)
    result = asyncio.run(orchestrator.submit(clip(), skill_focus="shooting"))

    assert orchestrator.state == UploadState.DONE
    assert orchestrator.error is None
    assert result.thumbnail_key is None
    assert result.thumbnail_url is None
    assert [p["bucket"] for p in storage.puts] == [config.video_bucket]
    assert video_inserts(records)[0]["thumbnail_key"] is None


def test_thumbnail_upload_failure_still_completes(config, auth, storage, records):
    storage.fail_buckets.add(config.thumb_bucket)
    orchestrator = make_orchestrator(config, auth, storage, records)
    result = asyncio.run(orchestrator.submit(clip()))
    assert orchestrator.state == UploadState.DONE
    assert result.thumbnail_key is None


def test_unsigned_urls_do_not_fail_the_upload(config, auth, storage, records):
    storage.fail_sign = True
    result = asyncio.run(make_orchestrator(config, auth, storage, records).submit(clip()))
    assert result.video_url is None
    assert result.thumbnail_url is None


def test_unauthenticated_is_checked_before_validation(config, storage, records):
    from conftest import FakeAuth

    validated = []

    async def validator(media, config):
        validated.append(media)
        return ValidationResult.accept(VideoMeta(10, 640, 360))

    orchestrator = make_orchestrator(config, FakeAuth(None), storage, records, validator=validator)
    with pytest.raises(OrchestratorError) as exc_info:
        asyncio.run(orchestrator.submit(None))

    assert exc_info.value.stage == "auth"
    assert isinstance(exc_info.value.cause, Unauthenticated)
    assert exc_info.value.message == "Please sign in to upload."
    assert validated == []
    assert storage.puts == []
    assert orchestrator.state == UploadState.ERRORED


def test_validation_rejection_surfaces_message(config, auth, storage, records):
    orchestrator = make_orchestrator(config, auth, storage, records, duration=61.0)
    with pytest.raises(OrchestratorError) as exc_info:
        asyncio.run(orchestrator.submit(clip()))

    assert exc_info.value.stage == "validating"
    assert exc_info.value.reason == "too_long"
    assert exc_info.value.message == "Clip is 61s. Max is 60s."
    assert exc_info.value.to_dict() == {
        "stage": "validating", "message": "Clip is 61s. Max is 60s.", "error": "too_long",
    }
    assert storage.puts == []
    assert records.inserts == []
    assert orchestrator.history == [UploadState.IDLE, UploadState.VALIDATING, UploadState.ERRORED]


def test_missing_file_is_rejected(config, auth, storage, records):
    with pytest.raises(OrchestratorError) as exc_info:
        asyncio.run(make_orchestrator(config, auth, storage, records).submit(None))
    assert exc_info.value.reason == "no_file"
    assert exc_info.value.message == "Choose a video file first."


def test_storage_failure_is_not_retried(config, auth, storage, records):
    storage.fail_buckets.add(config.video_bucket)
    orchestrator = make_orchestrator(config, auth, storage, records)
    with pytest.raises(OrchestratorError) as exc_info:
        asyncio.run(orchestrator.submit(clip()))

    assert exc_info.value.stage == "uploading"
    assert exc_info.value.message == "Bucket not found"
    assert len(storage.puts) == 1
    assert records.inserts == []
    assert orchestrator.state == UploadState.ERRORED


def test_record_failure(config, auth, storage, records):
    records.fail_tables.add("videos")
    orchestrator = make_orchestrator(config, auth, storage, records)
    with pytest.raises(OrchestratorError) as exc_info:
        asyncio.run(orchestrator.submit(clip()))

    assert exc_info.value.stage == "recording"
    assert "row-level security" in exc_info.value.message
    assert len(video_inserts(records)) == 1


def test_assessment_failure(config, auth, storage, records):
    provider = FailingProvider()
    orchestrator = make_orchestrator(config, auth, storage, records, provider=provider)
    with pytest.raises(OrchestratorError) as exc_info:
        asyncio.run(orchestrator.submit(clip(), skill_focus="defense"))

    assert exc_info.value.stage == "assessing"
    assert exc_info.value.message == "Video not found"
    assert provider.calls == 1
    assert video_inserts(records)[0]["status"] == "uploaded"


def test_resubmit_after_error(config, auth, storage, records):
    storage.fail_buckets.add(config.video_bucket)
    orchestrator = make_orchestrator(config, auth, storage, records)
    with pytest.raises(OrchestratorError):
        asyncio.run(orchestrator.submit(clip()))

    storage.fail_buckets.clear()
    result = asyncio.run(orchestrator.submit(clip(), skill_focus="layups"))
    assert orchestrator.state == UploadState.DONE
    assert orchestrator.error is None
    assert result.assessment.skill_area == "Finishing"
    assert result.states[0] == "idle"


def test_concurrent_submit_is_refused(config, auth, storage, records):
    gate = asyncio.Event()

    async def slow_validator(media, config):
        await gate.wait()
        return ValidationResult.accept(VideoMeta(10, 640, 360))

    orchestrator = make_orchestrator(config, auth, storage, records, validator=slow_validator)

    async def scenario():
        first = asyncio.create_task(orchestrator.submit(clip()))
        await asyncio.sleep(0)
        assert orchestrator.is_active
        with pytest.raises(SubmissionInProgress):
            await orchestrator.submit(clip())
        gate.set()
        return await first

    result = asyncio.run(scenario())
    assert result.video_id == "video-1"
    assert len(video_inserts(records)) == 1
    assert not orchestrator.is_active


def test_cancellation_propagates_without_error_state(config, auth, storage, records):
    async def stuck_validator(media, config):
        await asyncio.Event().wait()

    orchestrator = make_orchestrator(config, auth, storage, records, validator=stuck_validator)

    async def scenario():
        task = asyncio.create_task(orchestrator.submit(clip()))
        while orchestrator.state != UploadState.VALIDATING:
            await asyncio.sleep(0.01)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

    asyncio.run(scenario())
    assert orchestrator.state == UploadState.VALIDATING
    assert orchestrator.error is None
    assert not orchestrator.is_active
    assert storage.puts == []


class BrokenAuth:
    def get_current_user(self):
        raise RuntimeError("auth backend unreachable")


def test_auth_exception_is_tagged_with_auth_stage(config, storage, records):
    orchestrator = make_orchestrator(config, BrokenAuth(), storage, records)
    with pytest.raises(OrchestratorError) as exc_info:
        asyncio.run(orchestrator.submit(clip()))

    assert exc_info.value.stage == "auth"
    assert exc_info.value.message == "auth backend unreachable"
    assert isinstance(exc_info.value.cause, RuntimeError)
    assert orchestrator.state == UploadState.ERRORED
    assert orchestrator.history == [UploadState.IDLE, UploadState.ERRORED]
    assert storage.puts == []


def test_non_json_auth_reply_is_unauthenticated(config, storage, records):
    import httpx

    from hoopspark.shared.auth.auth_provider import SupabaseAuthProvider

    client = httpx.Client(transport=httpx.MockTransport(lambda request: httpx.Response(200, text="not json")))
    auth = SupabaseAuthProvider("jwt-token", auth_url="https://project.test/auth/v1", api_key="anon", client=client)
    orchestrator = make_orchestrator(config, auth, storage, records)
    with pytest.raises(OrchestratorError) as exc_info:
        asyncio.run(orchestrator.submit(clip()))

    assert exc_info.value.stage == "auth"
    assert isinstance(exc_info.value.cause, Unauthenticated)
    assert orchestrator.state == UploadState.ERRORED


def test_validator_exception_is_tagged_with_validating_stage(config, auth, storage, records):
    async def full_disk_validator(media, config):
        raise OSError("No space left on device")

    orchestrator = make_orchestrator(config, auth, storage, records, validator=full_disk_validator)
    with pytest.raises(OrchestratorError) as exc_info:
        asyncio.run(orchestrator.submit(clip()))

    assert exc_info.value.stage == "validating"
    assert exc_info.value.message == "No space left on device"
    assert exc_info.value.reason is None
    assert isinstance(exc_info.value.cause, OSError)
    assert orchestrator.history == [UploadState.IDLE, UploadState.VALIDATING, UploadState.ERRORED]
    assert storage.puts == []
    assert records.inserts == []
