"""
Compose component - image intake, draft validation and post submission.
"""

from .component import (
    ComposeSession,
    validate_draft,
)
from .models import (
    ComposeValidationError,
    PostDraft,
    PostSubmission,
    PostType,
    SessionClosedError,
    SubmitInProgressError,
    SubmitPostOutput,
)
from .ports import (
    ImageSource,
    MediaUploadPort,
    PostSubmissionPort,
)

__all__ = [
    # Component
    "ComposeSession",
    "validate_draft",
    # Models
    "ComposeValidationError",
    "PostDraft",
    "PostSubmission",
    "PostType",
    "SessionClosedError",
    "SubmitInProgressError",
    "SubmitPostOutput",
    # Ports
    "ImageSource",
    "MediaUploadPort",
    "PostSubmissionPort",
]
