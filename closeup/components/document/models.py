"""
Document component models.

A post body is an ordered list of runs. Text runs carry characters
(including the "\\n" that terminates a line); image runs carry an opaque
media reference and occupy exactly one character position.

Invariants:
- Block kind is a line-level attribute, stored per run
- QUOTE forces italic text and the muted tint
- BULLET_ITEM and QUOTE never share a line
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum

# Placeholder used for image runs in Document.text
OBJECT_REPLACEMENT_CHAR = "\ufffc"
IMAGE_RUN_LENGTH = 1


class BlockKind(str, Enum):
    """Line-level formatting category."""

    NORMAL = "normal"
    BULLET_ITEM = "bullet_item"
    QUOTE = "quote"


class Tint(str, Enum):
    """Foreground tint of a run."""

    DEFAULT = "default"
    MUTED = "muted"


class RunKind(str, Enum):
    TEXT = "text"
    IMAGE = "image"


class MediaType(str, Enum):
    IMAGE = "image"


# --- Errors ---


class DocumentError(Exception):
    """Base class for document errors."""


class OutOfRangeError(DocumentError, IndexError):
    """Raised when an offset or range falls outside the document."""

    def __init__(self, offset: int, length: int) -> None:
        self.offset = offset
        self.length = length
        super().__init__(f"Offset {offset} out of range for document of length {length}")


# --- Value Objects ---


@dataclass(frozen=True)
class MediaReference:
    """
    Opaque pointer to an image.

    `handle` identifies the image within the compose session; `url` is
    filled in once an upload collaborator has resolved it.
    """

    handle: str
    url: str | None = None
    media_type: MediaType = MediaType.IMAGE

    @property
    def is_resolved(self) -> bool:
        return self.url is not None

    def resolved(self, url: str) -> MediaReference:
        return replace(self, url=url)


@dataclass(frozen=True)
class RunStyle:
    """Concrete attributes of a run."""

    bold: bool = False
    italic: bool = False
    underline: bool = False
    heading_level: int | None = None
    block_kind: BlockKind = BlockKind.NORMAL
    tint: Tint = Tint.DEFAULT
    # Italic the run had before its line became a quote
    pre_quote_italic: bool | None = None

    def enforced(self) -> RunStyle:
        """Apply the block-kind constraints to the inline attributes."""
        if self.block_kind == BlockKind.QUOTE:
            before = self.italic if self.pre_quote_italic is None else self.pre_quote_italic
            if self.italic and self.tint == Tint.MUTED and self.pre_quote_italic == before:
                return self
            return replace(self, italic=True, tint=Tint.MUTED, pre_quote_italic=before)
        if self.tint != Tint.DEFAULT or self.pre_quote_italic is not None:
            # Leaving a quote hands back the italic the run had before it
            return replace(
                self,
                italic=bool(self.pre_quote_italic),
                tint=Tint.DEFAULT,
                pre_quote_italic=None,
            )
        return self

    def with_block(self, block_kind: BlockKind) -> RunStyle:
        return replace(self, block_kind=block_kind).enforced()


DEFAULT_STYLE = RunStyle()


@dataclass(frozen=True)
class Run:
    """Contiguous span of content with one style."""

    kind: RunKind
    style: RunStyle = DEFAULT_STYLE
    text: str = ""
    image: MediaReference | None = None

    @classmethod
    def text_run(cls, text: str, style: RunStyle = DEFAULT_STYLE) -> Run:
        return cls(kind=RunKind.TEXT, style=style.enforced(), text=text)

    @classmethod
    def image_run(cls, ref: MediaReference) -> Run:
        return cls(kind=RunKind.IMAGE, style=DEFAULT_STYLE, image=ref)

    @property
    def is_image(self) -> bool:
        return self.kind == RunKind.IMAGE

    @property
    def length(self) -> int:
        return IMAGE_RUN_LENGTH if self.is_image else len(self.text)

    @property
    def plain(self) -> str:
        return OBJECT_REPLACEMENT_CHAR if self.is_image else self.text
