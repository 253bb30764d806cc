"""
Error taxonomy for the media intake pipeline.

Validation rejections are returned as values (see video_validation.py).
Everything here is raised and either swallowed at a best-effort boundary
(ExtractionError) or propagated up through the orchestrator, tagged with
the stage where it happened.
"""

from typing import Optional


class IntakeError(Exception):
    """Base class for all intake pipeline errors."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ExtractionError(IntakeError):
    """Thumbnail or image extraction failed. Always non-fatal for uploads."""
    pass


class MetadataUnreadable(IntakeError):
    """Duration, width or height could not be determined from the clip."""
    pass


class StorageError(IntakeError):
    """Object storage rejected a write or could not sign a URL."""
    pass


class ConstraintError(IntakeError):
    """Record store rejected an insert or update."""
    pass


class Unauthenticated(IntakeError):
    """No caller identity is available."""

    def __init__(self, message: str = "Please sign in to upload."):
        super().__init__(message)


class AssessmentInvocationError(IntakeError):
    """The assessment provider failed to produce an assessment."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class SubmissionInProgress(IntakeError):
    """A submission is already running on this orchestrator."""

    def __init__(self, message: str = "An upload is already in progress."):
        super().__init__(message)


class OrchestratorError(IntakeError):
    """
    Terminal failure of an upload submission.

    Wraps the underlying cause with the stage tag at which it happened.
    The message is the cause's message, surfaced verbatim.
    """

    def __init__(self, stage: str, message: str, cause: Optional[BaseException] = None,
                 reason: Optional[str] = None):
        super().__init__(message)
        self.stage = stage
        self.cause = cause
        self.reason = reason

    def to_dict(self) -> dict:
        """Convert to dictionary for API responses."""
        detail = {"stage": self.stage, "message": self.message}
        if self.reason:
            detail["error"] = self.reason
        return detail
