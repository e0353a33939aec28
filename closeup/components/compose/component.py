"""
Compose component - one post being written.

A ComposeSession couples an Editor with the media-upload and
post-submission ports. Picked images load and upload as independent
asyncio tasks that re-enter the editor on completion; submitting
validates the draft, resolves any image still lacking a URL, serializes
the document and hands the post to the submission port.

Invariants:
- Images are inserted in completion order, not selection order
- After close(), no late completion touches the document
- A session submits at most once at a time
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from collections.abc import Sequence

from closeup.components.document import Document, MediaReference
from closeup.components.editor import Editor
from closeup.components.richtext import SerializeConfig, serialize_document
from closeup.rules.models import PostsRules, Rules

from .models import (
    ComposeValidationError,
    PostDraft,
    PostSubmission,
    SessionClosedError,
    SubmitInProgressError,
    SubmitPostOutput,
)
from .ports import ImageSource, MediaUploadPort, PostSubmissionPort

logger = logging.getLogger(__name__)


# --- Validation ---


def _body_is_empty(document: Document, bullet_marker: str) -> bool:
    return not document.text.replace(bullet_marker, "").strip()


def validate_draft(
    draft: PostDraft,
    document: Document,
    rules: PostsRules | None = None,
    bullet_marker: str = "• ",
) -> list[ComposeValidationError]:
    """
    Check a draft and its body before submission.

    Returns:
        List of validation errors (empty if valid)
    """
    rules = rules or PostsRules()
    errors: list[ComposeValidationError] = []
    kind = draft.post_type.value

    missing_title = kind in rules.title_required_for and not draft.title.strip()
    missing_parent = kind in rules.parent_required_for and not draft.parent_reference

    if missing_title and missing_parent:
        errors.append(
            ComposeValidationError(
                code="MISSING_TITLE_AND_PARENT",
                message=f"Please enter a title and select a {kind.lower()} for your post.",
                field="title",
            )
        )
    elif missing_title:
        errors.append(
            ComposeValidationError(
                code="MISSING_TITLE",
                message="Please enter a title for your post.",
                field="title",
            )
        )
    elif missing_parent:
        errors.append(
            ComposeValidationError(
                code="MISSING_PARENT",
                message=f"Please select a {kind.lower()} for your post.",
                field="parent_reference",
            )
        )

    if draft.audience not in rules.audiences:
        errors.append(
            ComposeValidationError(
                code="INVALID_AUDIENCE",
                message=f"Audience must be one of: {', '.join(rules.audiences)}",
                field="audience",
            )
        )

    if _body_is_empty(document, bullet_marker):
        errors.append(
            ComposeValidationError(
                code="EMPTY_BODY",
                message="Please write something before posting.",
                field="body",
            )
        )

    return errors


# --- Session ---


class ComposeSession:
    """Editor plus the collaborators needed to publish one post."""

    def __init__(
        self,
        owner_id: str,
        uploader: MediaUploadPort,
        submitter: PostSubmissionPort,
        rules: Rules | None = None,
        editor: Editor | None = None,
    ) -> None:
        self._owner_id = owner_id
        self._uploader = uploader
        self._submitter = submitter
        self._rules = rules or Rules()
        self._editor = editor or Editor(self._rules.editor)
        self._tasks: set[asyncio.Task[MediaReference | None]] = set()
        # Bytes of inserted images whose upload has not succeeded yet
        self._unuploaded: dict[str, bytes] = {}
        self._closed = False
        self._submitting = False
        self._editor.on_media_removed(self._forget_bytes)

    @property
    def editor(self) -> Editor:
        return self._editor

    @property
    def owner_id(self) -> str:
        return self._owner_id

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def is_submitting(self) -> bool:
        return self._submitting

    @property
    def pending(self) -> int:
        return len(self._tasks)

    @property
    def pending_uploads(self) -> int:
        """Inserted images still waiting for a successful upload."""
        return len(self._unuploaded)

    # --- Images ---

    def add_images(
        self, sources: Sequence[ImageSource]
    ) -> list[asyncio.Task[MediaReference | None]]:
        """
        Start one load-and-upload task per picked image.

        Must be called from a running event loop. Each task inserts its image
        at the caret when it completes.
        """
        if self._closed:
            raise SessionClosedError("Compose session is closed")
        if self._submitting:
            raise SubmitInProgressError("Cannot add images while the post is being submitted")

        limit = self._rules.media.max_selection
        if len(sources) > limit:
            logger.warning("Picked %d images, keeping the first %d", len(sources), limit)
            sources = sources[:limit]

        loop = asyncio.get_running_loop()
        started = []
        for source in sources:
            task = loop.create_task(self._load_and_insert(source))
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)
            started.append(task)
        return started

    async def wait_for_images(self) -> None:
        """Wait until every pending image task has finished."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def _load_and_insert(self, source: ImageSource) -> MediaReference | None:
        try:
            data = await source.load()
        except Exception:
            logger.warning("Failed to load picked image", exc_info=True)
            return None
        if data is None:
            logger.info("Picked image had no data, skipped")
            return None
        if self._closed:
            return None

        url = await self._try_upload(data)
        if self._closed:
            logger.debug("Session closed before image finished, dropped")
            return None

        ref = MediaReference(handle=uuid.uuid4().hex, url=url)
        if url is None:
            self._unuploaded[ref.handle] = data
        self._editor.insert_image(ref)
        return ref

    def _forget_bytes(self, ref: MediaReference) -> None:
        self._unuploaded.pop(ref.handle, None)

    async def _try_upload(self, data: bytes) -> str | None:
        try:
            return await self._uploader.upload(
                data,
                content_type=self._rules.media.content_type,
                owner_id=self._owner_id,
            )
        except Exception:
            logger.warning("Image upload failed", exc_info=True)
            return None

    async def _resolve_unuploaded(self) -> None:
        for ref in self._editor.document.images():
            if ref.is_resolved:
                continue
            data = self._unuploaded.get(ref.handle)
            if data is None:
                continue
            url = await self._try_upload(data)
            if url is not None:
                self._editor.resolve_media(ref.handle, url)
                del self._unuploaded[ref.handle]

    # --- Submission ---

    async def submit(self, draft: PostDraft) -> SubmitPostOutput:
        """
        Validate, serialize and publish the post.

        Images that never received a URL are left out of the body.
        """
        if self._submitting:
            return SubmitPostOutput(
                errors=[
                    ComposeValidationError(
                        code="ALREADY_SUBMITTING",
                        message="This post is already being submitted.",
                    )
                ],
                success=False,
            )
        if self._closed:
            return SubmitPostOutput(
                errors=[
                    ComposeValidationError(
                        code="SESSION_CLOSED",
                        message="This compose session is closed.",
                    )
                ],
                success=False,
            )

        self._submitting = True
        try:
            await self.wait_for_images()

            errors = validate_draft(
                draft,
                self._editor.document,
                self._rules.posts,
                self._editor.marker,
            )
            if errors:
                return SubmitPostOutput(errors=errors, success=False)

            await self._resolve_unuploaded()

            body = serialize_document(
                self._editor.document,
                SerializeConfig.from_rules(self._rules),
                lambda ref: ref.url,
            )
            submission = PostSubmission(
                owner_id=self._owner_id,
                post_type=draft.post_type,
                title=draft.title.strip(),
                html_body=body.html,
                audience=draft.audience,
                media_urls=body.media_urls,
                media_types=[ref.media_type.value for ref in self._resolved_images(body.media_urls)],
                parent_reference=draft.parent_reference,
            )

            try:
                await self._submitter.submit(submission)
            except Exception as e:
                logger.exception("Post submission failed")
                return SubmitPostOutput(
                    errors=[
                        ComposeValidationError(
                            code="SUBMIT_FAILED",
                            message=str(e) or "Post submission failed.",
                        )
                    ],
                    success=False,
                )
        finally:
            self._submitting = False

        logger.info(
            "Submitted %s post with %d image(s)",
            submission.post_type.value,
            len(submission.media_urls),
        )
        self.close()
        return SubmitPostOutput(errors=[], success=True, submission=submission)

    def _resolved_images(self, urls: list[str]) -> list[MediaReference]:
        by_url: dict[str, MediaReference] = {}
        for ref in self._editor.document.images():
            if ref.url is not None:
                by_url.setdefault(ref.url, ref)
        return [by_url[url] for url in urls]

    # --- Lifecycle ---

    def close(self) -> None:
        """Dispose the session and cancel image work still in flight."""
        if self._closed:
            return
        self._closed = True
        for task in list(self._tasks):
            task.cancel()
        self._unuploaded.clear()
        logger.debug("Compose session for %s closed", self._owner_id)
