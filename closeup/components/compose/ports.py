"""
Compose component port definitions.

The backend is reached only through these protocols; concrete clients are
constructed by the host and injected into the session.
"""

from __future__ import annotations

from typing import Protocol

from .models import PostSubmission


class ImageSource(Protocol):
    """A picked image whose bytes load asynchronously."""

    async def load(self) -> bytes | None:
        """Return the image bytes, or None if the item cannot be read."""
        ...


class MediaUploadPort(Protocol):
    """Port for durable media storage."""

    async def upload(self, data: bytes, *, content_type: str, owner_id: str) -> str:
        """
        Store image bytes and return their durable URL.

        Raises:
            Any exception on failure; the session logs it and moves on.
        """
        ...


class PostSubmissionPort(Protocol):
    """Port for the durable post write."""

    async def submit(self, submission: PostSubmission) -> None:
        """Persist the post."""
        ...
