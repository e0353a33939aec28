"""
Dev Post Sink Adapter.

Logs post submissions instead of writing them to a backend.
Used for local development and testing.

Key behaviors:
- Logs submission details at a configurable level
- Stores submissions in memory for test assertions
- Can be told to fail, to exercise the session's error path
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime
from uuid import uuid4

from closeup.components.compose import PostSubmission

logger = logging.getLogger(__name__)


class PostSinkError(Exception):
    """Raised when the dev sink is configured to reject submissions."""


@dataclass
class RecordedPost:
    """Record of a logged submission for test assertions."""

    id: str
    submission: PostSubmission
    logged_at: datetime


@dataclass
class DevPostSink:
    """
    Dev post sink that logs instead of persisting.

    Implements PostSubmissionPort protocol.
    """

    posts: list[RecordedPost] = field(default_factory=list)

    # Configuration
    log_level: int = logging.INFO
    body_preview_length: int = 100
    fail_with: str | None = None

    async def submit(self, submission: PostSubmission) -> None:
        if self.fail_with is not None:
            raise PostSinkError(self.fail_with)

        record = RecordedPost(
            id=f"dev-{uuid4().hex[:12]}",
            submission=submission,
            logged_at=datetime.now(UTC),
        )
        self.posts.append(record)
        self._log_post(record)

    def _log_post(self, record: RecordedPost) -> None:
        sub = record.submission
        preview = sub.html_body[: self.body_preview_length]
        if len(sub.html_body) > self.body_preview_length:
            preview += "..."

        parts = [
            f"POST (dev): Owner={sub.owner_id}",
            f"Type={sub.post_type.value}",
            f"Audience={sub.audience}",
        ]
        if sub.title:
            parts.append(f"Title={sub.title}")
        if sub.parent_reference:
            parts.append(f"Parent={sub.parent_reference}")
        parts.append(f"Media={len(sub.media_urls)}")
        parts.append(f"Body={preview}")
        parts.append(f"ID={record.id}")

        logger.log(self.log_level, ", ".join(parts))

    # --- Test Helper Methods ---

    def get_last_post(self) -> PostSubmission | None:
        return self.posts[-1].submission if self.posts else None

    def get_posts_by(self, owner_id: str) -> list[PostSubmission]:
        return [p.submission for p in self.posts if p.submission.owner_id == owner_id]

    def clear(self) -> None:
        self.posts.clear()

    @property
    def post_count(self) -> int:
        return len(self.posts)
