"""
Rich text HTML conversion.

Document -> HTML fragment plus the ordered, distinct list of media URLs,
and the reverse parse used to reload a stored post body.

Key behaviors:
- Consecutive lines of the same block kind share one block element
- A block kind change or an image closes the pending block; blank lines
  and whole-heading lines do too when configured
- Text escaped & first, then < and >
- Inline nesting: heading > strong > em > u; no inline marks inside quotes
- Serialization never raises
"""

from __future__ import annotations

import html
import logging
import re
from collections.abc import Callable

from closeup.components.document import (
    DEFAULT_STYLE,
    BlockKind,
    Document,
    Line,
    MediaReference,
    Run,
    RunStyle,
)

from .models import (
    DEFAULT_SERIALIZE_CONFIG,
    OutlineEntry,
    SerializeConfig,
    SerializedDocument,
)

logger = logging.getLogger(__name__)

UrlResolver = Callable[[MediaReference], str | None]


def default_resolve_url(ref: MediaReference) -> str | None:
    return ref.url or ref.handle


def escape_text(text: str) -> str:
    """Escape &, < and > (in that order)."""
    return html.escape(text, quote=False)


# --- Serialization ---


def render_run(run: Run, block_kind: BlockKind, *, with_heading: bool = True) -> str:
    """Render one text run with its inline marks."""
    content = escape_text(run.text)
    if block_kind == BlockKind.QUOTE:
        return content

    style = run.style
    if style.underline:
        content = f"<u>{content}</u>"
    if style.italic:
        content = f"<em>{content}</em>"
    if style.bold:
        content = f"<strong>{content}</strong>"
    if with_heading and style.heading_level is not None:
        level = style.heading_level
        content = f"<h{level}>{content}</h{level}>"
    return content


def _strip_marker(runs: list[Run], marker: str) -> list[Run]:
    if not runs or runs[0].is_image or not runs[0].text.startswith(marker):
        return runs
    head = runs[0]
    rest = head.text[len(marker) :]
    stripped = [Run.text_run(rest, head.style)] if rest else []
    return stripped + runs[1:]


def _is_heading_line(line: Line) -> bool:
    text_runs = [run for run in line.runs if not run.is_image]
    return bool(text_runs) and all(run.style.heading_level is not None for run in text_runs)


class _BlockWriter:
    """Accumulates lines of one block kind and emits block elements."""

    def __init__(self, config: SerializeConfig) -> None:
        self.config = config
        self.blocks: list[str] = []
        self.pending: list[str] = []
        self.pending_kind: BlockKind | None = None

    def add_line(self, kind: BlockKind, content: str) -> None:
        if kind != self.pending_kind:
            self.flush()
            self.pending_kind = kind
        self.pending.append(content)

    def add_block(self, block: str) -> None:
        self.flush()
        self.blocks.append(block)

    def flush(self) -> None:
        if self.pending_kind != BlockKind.BULLET_ITEM:
            # Blank lines at either edge of a paragraph carry no content
            while self.pending and not self.pending[-1]:
                self.pending.pop()
            while self.pending and not self.pending[0]:
                self.pending.pop(0)
        if not self.pending:
            self.pending_kind = None
            return
        br = self.config.line_break_tag
        if self.pending_kind == BlockKind.QUOTE:
            self.blocks.append(f"<blockquote><em>{br.join(self.pending)}</em></blockquote>")
        elif self.pending_kind == BlockKind.BULLET_ITEM:
            items = [f"<li>{item}</li>" for item in self.pending]
            if self.config.merge_bullet_lists:
                self.blocks.append(f"<ul>{''.join(items)}</ul>")
            else:
                self.blocks.extend(f"<ul>{item}</ul>" for item in items)
        else:
            self.blocks.append(f"<p>{br.join(self.pending)}</p>")
        self.pending = []
        self.pending_kind = None


def serialize_document(
    document: Document,
    config: SerializeConfig = DEFAULT_SERIALIZE_CONFIG,
    resolve_url: UrlResolver | None = None,
) -> SerializedDocument:
    """
    Convert a document to its HTML transport string.

    `resolve_url` maps an image reference to the URL written into the
    body; returning None drops the image from the output.
    """
    resolve = resolve_url or default_resolve_url
    writer = _BlockWriter(config)
    media_urls: list[str] = []

    for line in document.lines():
        if line.has_image:
            writer.flush()
            for run in line.runs:
                if run.image is not None:
                    url = resolve(run.image)
                    if not url:
                        logger.warning("Image %s has no URL, left out of the body", run.image.handle)
                        continue
                    writer.add_block(f'<p><img src="{html.escape(url)}" /></p>')
                    if url not in media_urls:
                        media_urls.append(url)
                else:
                    writer.add_block(f"<p>{render_run(run, BlockKind.NORMAL)}</p>")
            continue

        if line.is_empty and config.split_on_blank_lines:
            writer.flush()
            continue

        kind = line.block_kind
        runs = line.runs
        if kind == BlockKind.BULLET_ITEM:
            runs = _strip_marker(runs, config.bullet_marker)

        if config.heading_blocks and kind == BlockKind.NORMAL and _is_heading_line(line):
            level = runs[0].style.heading_level
            inner = "".join(render_run(run, kind, with_heading=False) for run in runs)
            writer.add_block(f"<h{level}>{inner}</h{level}>")
            continue

        writer.add_line(kind, "".join(render_run(run, kind) for run in runs))

    writer.flush()
    return SerializedDocument(html="".join(writer.blocks), media_urls=media_urls)


# --- Outline ---


def outline(document: Document, bullet_marker: str = "• ") -> list[OutlineEntry]:
    """Block structure of a document: one entry per non-empty line."""
    entries: list[OutlineEntry] = []
    for line in document.lines():
        if line.is_empty:
            continue
        if line.has_image:
            for run in line.runs:
                if run.image is not None:
                    entries.append(OutlineEntry("image", run.image.url or run.image.handle))
            continue
        kind = line.block_kind
        text = line.text
        if kind == BlockKind.BULLET_ITEM:
            entries.append(OutlineEntry("bullet", text.removeprefix(bullet_marker)))
        elif kind == BlockKind.QUOTE:
            entries.append(OutlineEntry("quote", text))
        elif _is_heading_line(line):
            entries.append(OutlineEntry("heading", text))
        else:
            entries.append(OutlineEntry("paragraph", text))
    return entries


# --- Parsing ---

# Regex patterns for HTML parsing
TAG_PATTERN = re.compile(r"<(/?)(\w+)([^>]*)>", re.IGNORECASE)
ATTR_PATTERN = re.compile(r'(\w+)\s*=\s*(?:"([^"]*)"|\'([^\']*)\'|(\S+))', re.IGNORECASE)

HEADING_TAGS = frozenset({"h1", "h2", "h3", "h4", "h5", "h6"})


def parse_attributes(attr_string: str) -> dict[str, str]:
    """Parse HTML attributes from a string."""
    attrs = {}
    for match in ATTR_PATTERN.finditer(attr_string):
        name = match.group(1).lower()
        value = match.group(2) or match.group(3) or match.group(4) or ""
        attrs[name] = html.unescape(value)
    return attrs


class _DocumentBuilder:
    """Collects runs while walking the tags of a post body."""

    def __init__(self, config: SerializeConfig) -> None:
        self.config = config
        self.runs: list[Run] = []
        self.block = BlockKind.NORMAL
        self.block_name: str | None = None
        self.last_block: str | None = None
        self.bold = 0
        self.italic = 0
        self.underline = 0
        self.heading: int | None = None
        self.line_has_content = False
        self.line_has_image = False

    def style(self) -> RunStyle:
        return RunStyle(
            bold=self.bold > 0,
            italic=self.italic > 0,
            underline=self.underline > 0,
            heading_level=self.heading,
            block_kind=self.block,
            # The <em> around a quote belongs to the quote itself
            pre_quote_italic=False if self.block == BlockKind.QUOTE else None,
        )

    def end_line(self) -> None:
        terminator = DEFAULT_STYLE if self.line_has_image else self.style()
        self.runs.append(Run.text_run("\n", terminator))
        self.line_has_content = False
        self.line_has_image = False

    def open_block(self, name: str, kind: BlockKind) -> None:
        if self.line_has_content:
            self.end_line()
        if name in ("paragraph", "quote") and self.last_block == name:
            # Two adjacent blocks of one kind were separated by a blank Normal line
            self.runs.append(Run.text_run("\n", DEFAULT_STYLE))
        self.block = kind
        self.block_name = name

    def close_block(self) -> None:
        if self.block_name is None:
            return
        name = "image" if self.line_has_image else self.block_name
        if self.line_has_content:
            self.end_line()
        self.last_block = name
        self.block = BlockKind.NORMAL
        self.block_name = None
        self.heading = None

    def text(self, raw: str) -> None:
        if self.block_name is None:
            if not raw.strip():
                return
            self.open_block("paragraph", BlockKind.NORMAL)
        if self.line_has_image:
            self.end_line()
        self.runs.append(Run.text_run(html.unescape(raw), self.style()))
        self.line_has_content = True

    def image(self, src: str) -> None:
        if not src:
            return
        if self.line_has_content:
            self.end_line()
        self.runs.append(Run.image_run(MediaReference(handle=src, url=src)))
        self.line_has_content = True
        self.line_has_image = True
        if self.block_name is None:
            self.end_line()
            self.last_block = "image"

    def tag(self, name: str, closing: bool, attrs: str) -> None:
        if name == "p":
            if closing:
                self.close_block()
            else:
                self.open_block("paragraph", BlockKind.NORMAL)
        elif name in HEADING_TAGS:
            level = int(name[1])
            if self.block_name is not None and self.block_name != "heading":
                # Heading inside a paragraph: inline mark only
                self.heading = None if closing else level
            elif closing:
                self.close_block()
            else:
                self.open_block("heading", BlockKind.NORMAL)
                self.heading = level
        elif name == "blockquote":
            if closing:
                self.close_block()
            else:
                self.open_block("quote", BlockKind.QUOTE)
        elif name == "li":
            if closing:
                self.close_block()
            else:
                self.open_block("bullet", BlockKind.BULLET_ITEM)
                self.runs.append(Run.text_run(self.config.bullet_marker, self.style()))
                self.line_has_content = True
        elif name == "br":
            if self.block_name is None:
                return
            self.end_line()
        elif name in ("strong", "b"):
            self.bold += -1 if closing else 1
        elif name in ("em", "i"):
            self.italic += -1 if closing else 1
        elif name == "u":
            self.underline += -1 if closing else 1
        elif name == "img" and not closing:
            self.image(parse_attributes(attrs).get("src", ""))
        # Anything else (ul, ol, span, div...) only contributes its text

        self.bold = max(self.bold, 0)
        self.italic = max(self.italic, 0)
        self.underline = max(self.underline, 0)


def parse_html(
    html_content: str,
    config: SerializeConfig = DEFAULT_SERIALIZE_CONFIG,
) -> Document:
    """
    Rebuild a document from a post body.

    Keeps the block structure (paragraphs, headings, quotes, bullets,
    images); inline marks are kept where the tags map onto run attributes.
    """
    builder = _DocumentBuilder(config)
    position = 0
    for match in TAG_PATTERN.finditer(html_content):
        if match.start() > position:
            builder.text(html_content[position : match.start()])
        builder.tag(match.group(2).lower(), bool(match.group(1)), match.group(3))
        position = match.end()
    if position < len(html_content):
        builder.text(html_content[position:])
    builder.close_block()
    return Document(builder.runs)
