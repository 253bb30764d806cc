"""
Assessment providers.

Two interchangeable strategies behind one capability:
- LocalAssessmentProvider computes the assessment in-process and records it
- RemoteAssessmentProvider invokes the analyze-video function over HTTP,
  which computes and records it server-side

The deployment picks one via IntakeConfig.assessment_provider.
"""

import asyncio
import logging
import os
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Protocol

import httpx

from hoopspark.shared.assessment.assessment import Assessment, compute_analysis, resolve_skill_focus
from hoopspark.shared.config import IntakeConfig
from hoopspark.shared.errors import AssessmentInvocationError, ConstraintError
from hoopspark.shared.records.record_store import RecordStore

logger = logging.getLogger(__name__)

REMOTE_TIMEOUT_SECONDS = 30.0


@dataclass(frozen=True)
class AssessmentRequest:
    video_id: str
    user_id: str
    bucket: str
    key: str
    skill_focus: Optional[str] = None
    questionnaire: Optional[Dict[str, Any]] = None

    def to_body(self) -> Dict[str, Any]:
        """Request body for the remote function."""
        return {
            "videoId": self.video_id,
            "bucket": self.bucket,
            "key": self.key,
            "skillFocus": self.skill_focus,
            "questionnaire": self.questionnaire,
        }


class AssessmentProvider(Protocol):
    async def request_assessment(self, request: AssessmentRequest) -> Assessment:
        ...


def record_assessment(store: RecordStore, user_id: str, video_id: str, assessment: Assessment,
                      questionnaire: Optional[Dict[str, Any]] = None) -> str:
    """
    Stores a feedback row and marks the video analyzed.

    A failed feedback insert raises ConstraintError. A failed status update
    is logged and ignored: the feedback row already exists.

    Returns:
        The new feedback row id
    """
    feedback_id = str(uuid.uuid4())
    store.insert("feedback", {
        "id": feedback_id,
        "user_id": user_id,
        "video_id": video_id,
        **assessment.to_feedback_fields(),
        "questionnaire_data": questionnaire or None,
        "created_at": datetime.now(timezone.utc),
    })
    try:
        store.update("videos", video_id, {"status": "analyzed"})
    except ConstraintError as e:
        logger.warning("Could not mark video %s analyzed: %s", video_id, e.message)
    return feedback_id


class LocalAssessmentProvider:
    """Classifies and assesses in-process, then records the feedback row."""

    def __init__(self, record_store: RecordStore):
        self.record_store = record_store

    async def request_assessment(self, request: AssessmentRequest) -> Assessment:
        focus = resolve_skill_focus(request.skill_focus, None, request.questionnaire)
        assessment = compute_analysis(focus, request.questionnaire)
        try:
            await asyncio.to_thread(
                record_assessment, self.record_store, request.user_id, request.video_id,
                assessment, request.questionnaire,
            )
        except ConstraintError as e:
            raise AssessmentInvocationError(e.message)
        return assessment


class RemoteAssessmentProvider:
    """Invokes the remote analyze-video function with the caller's bearer token."""

    def __init__(self, token: Optional[str], functions_url: Optional[str] = None,
                 function_name: str = "analyze-video", api_key: Optional[str] = None,
                 client: Optional[httpx.AsyncClient] = None):
        self.token = token
        self.functions_url = (functions_url or f"{os.getenv('SUPABASE_URL', '').rstrip('/')}/functions/v1").rstrip("/")
        self.function_name = function_name
        self.api_key = api_key if api_key is not None else os.getenv("SUPABASE_ANON_KEY", "")
        self._client = client

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        if self.api_key:
            headers["apikey"] = self.api_key
        return headers

    async def _post(self, url: str, body: Dict[str, Any]) -> httpx.Response:
        if self._client is not None:
            return await self._client.post(url, json=body, headers=self._headers())
        async with httpx.AsyncClient(timeout=REMOTE_TIMEOUT_SECONDS) as client:
            return await client.post(url, json=body, headers=self._headers())

    async def request_assessment(self, request: AssessmentRequest) -> Assessment:
        """
        POSTs {videoId, bucket, key, skillFocus, questionnaire} and parses
        {"analysis": {...}} from the reply.

        Raises:
            AssessmentInvocationError: transport failure, non-2xx reply or
                a reply without an analysis
        """
        url = f"{self.functions_url}/{self.function_name}"
        try:
            response = await self._post(url, request.to_body())
        except httpx.HTTPError as e:
            raise AssessmentInvocationError(f"Assessment request failed: {e}")

        try:
            payload = response.json()
        except ValueError:
            payload = {}
        if not isinstance(payload, dict):
            payload = {}

        if response.status_code >= 400:
            message = payload.get("error") or f"Assessment failed with status {response.status_code}"
            raise AssessmentInvocationError(str(message), status_code=response.status_code)

        analysis = payload.get("analysis")
        if not isinstance(analysis, dict):
            raise AssessmentInvocationError("Assessment reply did not include an analysis.")
        try:
            return Assessment.from_payload(analysis)
        except ValueError as e:
            raise AssessmentInvocationError(f"Malformed assessment reply: {e}")


def build_assessment_provider(config: IntakeConfig, record_store: RecordStore,
                              token: Optional[str] = None) -> AssessmentProvider:
    """Returns the provider selected by config.assessment_provider."""
    if config.assessment_provider == "remote":
        return RemoteAssessmentProvider(token=token, function_name=config.assessment_function)
    return LocalAssessmentProvider(record_store)
