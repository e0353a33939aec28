"""
Compose component input/output models.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

# --- Validation Error ---


@dataclass(frozen=True)
class ComposeValidationError:
    """Validation or submission problem shown to the author."""

    code: str
    message: str
    field: str | None = None


class SessionClosedError(RuntimeError):
    """Raised when a closed compose session is asked to take new content."""


class SubmitInProgressError(RuntimeError):
    """Raised when content is added to a session that is submitting."""


# --- Post Types ---


class PostType(str, Enum):
    THOUGHTS = "Thoughts"
    PROMPT = "Prompt"
    THREAD = "Thread"


# --- Input Models ---


@dataclass(frozen=True)
class PostDraft:
    """Everything about a post besides its body."""

    post_type: PostType
    title: str = ""
    audience: str = "Personal"
    # Thread or prompt the post belongs to
    parent_reference: str | None = None


@dataclass(frozen=True)
class PostSubmission:
    """Payload handed to the post-submission collaborator."""

    owner_id: str
    post_type: PostType
    title: str
    html_body: str
    audience: str
    media_urls: list[str] = field(default_factory=list)
    media_types: list[str] = field(default_factory=list)
    parent_reference: str | None = None


# --- Output Models ---


@dataclass(frozen=True)
class SubmitPostOutput:
    """Output of a submit attempt."""

    errors: list[ComposeValidationError]
    success: bool
    submission: PostSubmission | None = None
