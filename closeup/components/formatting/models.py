"""
Formatting component models.

FormatState is the "typing attributes" of a compose session: the style the
next inserted character receives. It is an immutable value; transitions
return a new state.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from closeup.components.document.models import BlockKind, RunStyle

DEFAULT_HEADING_LEVEL = 3


class Toggle(str, Enum):
    """Toolbar toggles."""

    BOLD = "bold"
    ITALIC = "italic"
    UNDERLINE = "underline"
    HEADING = "heading"
    BULLET = "bullet"
    QUOTE = "quote"


class NewlineAction(str, Enum):
    """What pressing return does, given the active block and the current line."""

    SPLIT = "split"
    LOCK_QUOTE = "lock_quote"
    EXIT_QUOTE = "exit_quote"
    CONTINUE_BULLET = "continue_bullet"
    EXIT_BULLET = "exit_bullet"


@dataclass(frozen=True)
class FormatState:
    """Active toggles applied to the next inserted content."""

    bold: bool = False
    italic: bool = False
    underline: bool = False
    heading: bool = False
    block_kind: BlockKind = BlockKind.NORMAL
    # Italic value to restore when the quote is switched off
    pre_quote_italic: bool | None = None
    heading_level: int = DEFAULT_HEADING_LEVEL

    @property
    def is_quote(self) -> bool:
        return self.block_kind == BlockKind.QUOTE

    @property
    def is_bullet(self) -> bool:
        return self.block_kind == BlockKind.BULLET_ITEM

    def to_run_style(self) -> RunStyle:
        return RunStyle(
            bold=self.bold,
            italic=self.italic,
            underline=self.underline,
            heading_level=self.heading_level if self.heading else None,
            block_kind=self.block_kind,
            pre_quote_italic=self.pre_quote_italic if self.is_quote else None,
        ).enforced()


@dataclass(frozen=True)
class ParagraphAttributes:
    """Per-line presentation values a renderer needs."""

    font_size: float
    line_spacing: float
    paragraph_spacing: float
    line_height_multiple: float
    head_indent: float = 0
    tint: str | None = None
