"""
Document - ordered runs of styled text and inline images.

Key behaviors:
- Offsets count characters; an image run occupies one position
- Adjacent text runs with identical style are merged after every mutation
- Out-of-range offsets raise OutOfRangeError, they are never clamped
- Lines are separated by "\\n"; the newline belongs to the line it ends
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass, field

from .models import (
    DEFAULT_STYLE,
    BlockKind,
    MediaReference,
    OutOfRangeError,
    Run,
    RunStyle,
)
from .ports import StyleSource


def _as_run_style(style: RunStyle | StyleSource) -> RunStyle:
    if isinstance(style, RunStyle):
        return style
    return style.to_run_style()


@dataclass
class Line:
    """
    One line of the document.

    `runs` holds the line content without its terminating newline;
    `terminator` is the style of that newline (None for the last line).
    """

    start: int
    end: int
    runs: list[Run] = field(default_factory=list)
    terminator: RunStyle | None = None

    @property
    def is_empty(self) -> bool:
        return self.start == self.end

    @property
    def has_image(self) -> bool:
        return any(run.is_image for run in self.runs)

    @property
    def text(self) -> str:
        return "".join(run.plain for run in self.runs)

    @property
    def block_kind(self) -> BlockKind:
        for run in self.runs:
            if not run.is_image:
                return run.style.block_kind
        if self.terminator is not None:
            return self.terminator.block_kind
        return BlockKind.NORMAL


class Document:
    """A single post body being composed."""

    def __init__(self, runs: Iterable[Run] = ()) -> None:
        self._runs: list[Run] = [
            run if run.is_image else Run.text_run(run.text, run.style) for run in runs
        ]
        self._normalize()

    # --- Queries ---

    @property
    def runs(self) -> tuple[Run, ...]:
        return tuple(self._runs)

    @property
    def length(self) -> int:
        return sum(run.length for run in self._runs)

    def __len__(self) -> int:
        return self.length

    @property
    def text(self) -> str:
        """Plain text with U+FFFC standing in for images."""
        return "".join(run.plain for run in self._runs)

    @property
    def is_empty(self) -> bool:
        return not self._runs

    def char_at(self, offset: int) -> str:
        if offset < 0 or offset >= self.length:
            raise OutOfRangeError(offset, self.length)
        return self.text[offset]

    def run_at(self, offset: int) -> Run:
        """Return the run holding the character at `offset`."""
        if offset < 0 or offset >= self.length:
            raise OutOfRangeError(offset, self.length)
        position = 0
        for run in self._runs:
            if offset < position + run.length:
                return run
            position += run.length
        raise OutOfRangeError(offset, self.length)  # pragma: no cover

    def style_at(self, offset: int) -> RunStyle:
        """
        Style under the caret at `offset`.

        Uses the character before the caret, unless the caret sits at the
        start of a line, in which case the line's own first character (or
        its terminator on an empty line) decides.
        """
        self._check_offset(offset)
        text = self.text
        if offset > 0 and text[offset - 1] != "\n":
            return self.run_at(offset - 1).style
        if offset < len(text):
            return self.run_at(offset).style
        return DEFAULT_STYLE

    def line_range(self, offset: int) -> tuple[int, int]:
        """
        Half-open range of the line containing `offset`, newline excluded.

        An offset directly after a newline belongs to the following line.
        """
        self._check_offset(offset)
        text = self.text
        start = text.rfind("\n", 0, offset) + 1
        end = text.find("\n", offset)
        if end == -1:
            end = len(text)
        return start, end

    def line_ranges(self, start: int, end: int) -> list[tuple[int, int]]:
        """Ranges of every line touched by [start, end]."""
        self._check_range(start, end)
        ranges = [self.line_range(start)]
        while ranges[-1][1] < end:
            ranges.append(self.line_range(ranges[-1][1] + 1))
        return ranges

    def lines(self) -> list[Line]:
        lines: list[Line] = []
        current = Line(start=0, end=0)
        position = 0
        for run in self._runs:
            if run.is_image:
                current.runs.append(run)
                position += 1
                current.end = position
                continue
            parts = run.text.split("\n")
            for index, part in enumerate(parts):
                if part:
                    current.runs.append(Run.text_run(part, run.style))
                    position += len(part)
                    current.end = position
                if index < len(parts) - 1:
                    current.terminator = run.style
                    lines.append(current)
                    position += 1
                    current = Line(start=position, end=position)
        lines.append(current)
        return lines

    def images(self) -> list[MediaReference]:
        return [run.image for run in self._runs if run.image is not None]

    # --- Mutations ---

    def insert_text(self, offset: int, text: str, style: RunStyle | StyleSource) -> None:
        self._check_offset(offset)
        if not text:
            return
        index = self._split_at(offset)
        self._runs.insert(index, Run.text_run(text, _as_run_style(style)))
        self._normalize()

    def insert_image(self, offset: int, ref: MediaReference) -> int:
        """
        Insert an image on a line of its own.

        Returns the offset just past the inserted block, where typing
        continues.
        """
        self._check_offset(offset)
        text = self.text
        position = offset

        if offset > 0 and text[offset - 1] != "\n":
            # The break ends the preceding line, so it takes that line's style
            lead_style = self.run_at(offset - 1).style
            self.insert_text(position, "\n", lead_style)
            position += 1

        index = self._split_at(position)
        self._runs.insert(index, Run.image_run(ref))
        self._normalize()
        position += 1

        if position < self.length and self.char_at(position) == "\n":
            self.restyle(position, position + 1, lambda _: DEFAULT_STYLE)
        else:
            self.insert_text(position, "\n", DEFAULT_STYLE)
        return position + 1

    def delete_range(self, start: int, end: int) -> list[MediaReference]:
        """Remove [start, end) and return the media references removed with it."""
        self._check_range(start, end)
        if start == end:
            return []
        first = self._split_at(start)
        last = self._split_at(end)
        removed = self._runs[first:last]
        del self._runs[first:last]
        self._normalize()
        return [run.image for run in removed if run.image is not None]

    def restyle(self, start: int, end: int, fn: Callable[[RunStyle], RunStyle]) -> None:
        """Apply `fn` to the style of every text run inside [start, end)."""
        self._check_range(start, end)
        if start == end:
            return
        first = self._split_at(start)
        last = self._split_at(end)
        for index in range(first, last):
            run = self._runs[index]
            if not run.is_image:
                self._runs[index] = Run.text_run(run.text, fn(run.style))
        self._normalize()

    def replace_media(self, handle: str, ref: MediaReference) -> bool:
        """Swap the reference of the image identified by `handle`."""
        for index, run in enumerate(self._runs):
            if run.image is not None and run.image.handle == handle:
                self._runs[index] = Run.image_run(ref)
                return True
        return False

    # --- Internals ---

    def _check_offset(self, offset: int) -> None:
        if offset < 0 or offset > self.length:
            raise OutOfRangeError(offset, self.length)

    def _check_range(self, start: int, end: int) -> None:
        self._check_offset(start)
        self._check_offset(end)
        if end < start:
            raise OutOfRangeError(end, self.length)

    def _split_at(self, offset: int) -> int:
        """Ensure a run boundary at `offset`; return the index of the run starting there."""
        position = 0
        for index, run in enumerate(self._runs):
            if offset == position:
                return index
            if offset < position + run.length:
                cut = offset - position
                head = Run.text_run(run.text[:cut], run.style)
                tail = Run.text_run(run.text[cut:], run.style)
                self._runs[index : index + 1] = [head, tail]
                return index + 1
            position += run.length
        return len(self._runs)

    def _normalize(self) -> None:
        merged: list[Run] = []
        for run in self._runs:
            if not run.is_image and not run.text:
                continue
            if (
                merged
                and not run.is_image
                and not merged[-1].is_image
                and merged[-1].style == run.style
            ):
                merged[-1] = Run.text_run(merged[-1].text + run.text, run.style)
            else:
                merged.append(run)
        self._runs = merged

    def __iter__(self) -> Iterator[Run]:
        return iter(self._runs)

    def __repr__(self) -> str:
        return f"Document(length={self.length}, runs={len(self._runs)})"
