"""
Richtext component input/output models.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from closeup.components.document import Document
from closeup.rules.models import Rules

# --- Configuration ---


@dataclass(frozen=True)
class SerializeConfig:
    """Serialization options."""

    # One <ul> per bullet line unless set
    merge_bullet_lists: bool = False
    # A Normal line that is all heading becomes a block <hN> instead of <p><hN>
    heading_blocks: bool = False
    # A blank line closes the pending block instead of adding a line break
    split_on_blank_lines: bool = False
    line_break_tag: str = "<br />"
    # Stripped from bullet lines on output, restored on parse
    bullet_marker: str = "• "

    @classmethod
    def from_rules(cls, rules: Rules) -> SerializeConfig:
        return cls(
            merge_bullet_lists=rules.serializer.merge_bullet_lists,
            heading_blocks=rules.serializer.heading_blocks,
            split_on_blank_lines=rules.serializer.split_on_blank_lines,
            line_break_tag=rules.serializer.line_break_tag,
            bullet_marker=rules.editor.bullet_marker,
        )


DEFAULT_SERIALIZE_CONFIG = SerializeConfig()


# --- Results ---


@dataclass(frozen=True)
class SerializedDocument:
    """Transport form of a post body."""

    html: str
    media_urls: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class OutlineEntry:
    """One non-empty line of a document, reduced to its block structure."""

    kind: str  # paragraph, heading, quote, bullet, image
    text: str


# --- Input Models ---


@dataclass(frozen=True)
class SerializeInput:
    """Input for converting a document to HTML."""

    document: Document


@dataclass(frozen=True)
class ParseInput:
    """Input for rebuilding a document from HTML."""

    html: str


# --- Output Models ---


@dataclass(frozen=True)
class SerializeOutput:
    """Output for serialization."""

    html: str
    media_urls: list[str] = field(default_factory=list)
    success: bool = True


@dataclass(frozen=True)
class ParseOutput:
    """Output for parsing."""

    document: Document
    success: bool = True
