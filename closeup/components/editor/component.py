"""
Editor component - edit operations on a compose session's document.

The Editor owns one Document, the caret/selection, the current FormatState
and the session's media-reference list. Every operation goes through the
pure transitions of the formatting component.

Invariants:
- Block kind stays uniform across each line after every operation
- Images always sit on their own Normal line
- `media` holds exactly the images present in the document
"""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Callable
from dataclasses import replace

from closeup.components.document import (
    DEFAULT_STYLE,
    OBJECT_REPLACEMENT_CHAR,
    BlockKind,
    Document,
    MediaReference,
    RunStyle,
)
from closeup.components.formatting import (
    FormatState,
    NewlineAction,
    ParagraphAttributes,
    Toggle,
    derive_state,
    newline_transition,
    paragraph_attributes,
    set_block,
    state_after_newline,
    toggle,
)
from closeup.rules.models import EditorRules

from .models import (
    DeleteBackwardInput,
    EditOutput,
    InsertImageInput,
    NewlineInput,
    SelectInput,
    Selection,
    ToggleInput,
    TypeTextInput,
)

logger = logging.getLogger(__name__)

EditInput = (
    TypeTextInput
    | NewlineInput
    | ToggleInput
    | InsertImageInput
    | SelectInput
    | DeleteBackwardInput
)

INLINE_TOGGLES = frozenset({Toggle.BOLD, Toggle.ITALIC, Toggle.UNDERLINE, Toggle.HEADING})


def _inline_setter(which: Toggle, state: FormatState) -> Callable[[RunStyle], RunStyle]:
    if which == Toggle.BOLD:
        return lambda style: replace(style, bold=state.bold)
    if which == Toggle.ITALIC:
        return lambda style: replace(style, italic=state.italic)
    if which == Toggle.UNDERLINE:
        return lambda style: replace(style, underline=state.underline)
    level = state.heading_level if state.heading else None
    return lambda style: replace(style, heading_level=level)


class Editor:
    """Edit operations for one compose session."""

    def __init__(
        self,
        rules: EditorRules | None = None,
        document: Document | None = None,
    ) -> None:
        self._rules = rules or EditorRules()
        self._document = document if document is not None else Document()
        self._format = FormatState(heading_level=self._rules.typography.heading_level)
        end = self._document.length
        self._selection = Selection(end, end)
        self._media: list[MediaReference] = self._document.images()
        self._removal_listeners: list[Callable[[MediaReference], None]] = []

    # --- State ---

    @property
    def document(self) -> Document:
        return self._document

    @property
    def format(self) -> FormatState:
        return self._format

    @property
    def selection(self) -> Selection:
        return self._selection

    @property
    def cursor(self) -> int:
        return self._selection.start

    @property
    def media(self) -> tuple[MediaReference, ...]:
        return tuple(self._media)

    @property
    def marker(self) -> str:
        return self._rules.bullet_marker

    def on_media_removed(self, callback: Callable[[MediaReference], None]) -> None:
        """Call `callback` with each image deleted from the document."""
        self._removal_listeners.append(callback)

    # --- Operations ---

    def select(self, start: int, end: int | None = None) -> FormatState:
        """Move the caret or change the selection; the toolbar follows the caret."""
        end = start if end is None else end
        if end < start:
            start, end = end, start
        # Both ends are validated; out-of-range raises OutOfRangeError
        self._document.line_range(start)
        self._document.line_range(end)
        self._selection = Selection(start, end)
        self._format = derive_state(self._document.style_at(start), self._format)
        return self._format

    def type_text(self, text: str) -> None:
        if not text:
            return
        if "\n" in text:
            for index, part in enumerate(text.split("\n")):
                if index:
                    self.press_newline()
                self.type_text(part)
            return

        self._delete_selection_if_any()
        cursor = self.cursor
        self._document.insert_text(cursor, text, self._format)
        self._collapse(cursor + len(text))

    def press_newline(self) -> NewlineAction:
        self._delete_selection_if_any()
        doc = self._document
        cursor = self.cursor
        start, end = doc.line_range(cursor)
        line_text = doc.text[start:end]
        has_marker = self._has_marker(start, end)
        line_is_empty = line_text == "" or (self._format.is_bullet and line_text == self.marker)

        action = newline_transition(self._format, line_is_empty)

        if action == NewlineAction.SPLIT:
            doc.insert_text(cursor, "\n", self._format)
            self._collapse(cursor + 1)

        elif action == NewlineAction.LOCK_QUOTE and cursor == start:
            # Caret before the quoted text: open a Normal line above and stay in the quote
            doc.insert_text(cursor, "\n", DEFAULT_STYLE)
            self._collapse(cursor + 1)
            return action

        elif action == NewlineAction.LOCK_QUOTE:
            # The completed line keeps the quote; whatever follows the caret starts Normal
            doc.insert_text(cursor, "\n", self._format)
            tail_start = cursor + 1
            _, tail_end = doc.line_range(tail_start)
            self._set_line_block(tail_start, tail_end, BlockKind.NORMAL)
            self._collapse(tail_start)

        elif action == NewlineAction.EXIT_QUOTE:
            self._set_line_block(start, end, BlockKind.NORMAL)
            logger.debug("Empty quote line at %d, leaving quote", start)

        elif action == NewlineAction.CONTINUE_BULLET:
            split_at = max(cursor, start + len(self.marker)) if has_marker else cursor
            doc.insert_text(split_at, "\n" + self.marker, self._format)
            self._collapse(split_at + 1 + len(self.marker))

        elif action == NewlineAction.EXIT_BULLET:
            if has_marker:
                doc.delete_range(start, start + len(self.marker))
                end -= len(self.marker)
            self._set_line_block(start, end, BlockKind.NORMAL)
            self._collapse(start)
            logger.debug("Empty list item at %d, leaving list", start)

        self._format = state_after_newline(self._format, action)
        return action

    def toggle(self, which: Toggle) -> FormatState:
        """Apply a toolbar toggle to the typing attributes and the selection or line."""
        new_state = toggle(self._format, which)
        if which in INLINE_TOGGLES:
            if not self._selection.is_collapsed:
                sel = self._selection
                self._document.restyle(sel.start, sel.end, _inline_setter(which, new_state))
        else:
            sel = self._selection
            for start, end in reversed(self._document.line_ranges(sel.start, sel.end)):
                self._apply_block_to_line(start, end, new_state.block_kind)
        self._format = new_state
        return new_state

    def insert_image(self, ref: MediaReference) -> int:
        """Insert an image on its own line and record it in the media list."""
        self._delete_selection_if_any()
        doc = self._document
        after = doc.insert_image(self.cursor, ref)
        self._media.append(ref)
        self._collapse(after)

        start, end = doc.line_range(after)
        if end > start and doc.run_at(start).style.block_kind == BlockKind.BULLET_ITEM:
            if not self._has_marker(start, end):
                # Text split off a list item stays in the list
                doc.insert_text(start, self.marker, RunStyle(block_kind=BlockKind.BULLET_ITEM))
                after = start + len(self.marker)
                end += len(self.marker)
                self._collapse(after)
        if end > start:
            self._format = derive_state(doc.style_at(after), self._format)
        else:
            self._format = set_block(self._format, BlockKind.NORMAL)
        logger.debug("Inserted image %s, caret now at %d", ref.handle, after)
        return after

    def delete_backward(self) -> None:
        if not self._selection.is_collapsed:
            self.delete_selection()
            return
        cursor = self.cursor
        if cursor == 0:
            return

        start, end = self._document.line_range(cursor)
        if cursor == start + len(self.marker) and self._has_marker(start, end):
            # Backspace right after a list marker ends the list item
            self._apply_block_to_line(start, end, BlockKind.NORMAL)
            self._format = set_block(self._format, BlockKind.NORMAL)
            return

        if cursor == start and self._step_around_image_line(cursor, start, end):
            return

        self._delete(cursor - 1, cursor)

    def delete_selection(self) -> None:
        sel = self._selection
        if sel.is_collapsed:
            return
        self._delete(sel.start, sel.end)

    def resolve_media(self, handle: str, url: str) -> MediaReference | None:
        """Attach a durable URL to the image identified by `handle`."""
        for index, ref in enumerate(self._media):
            if ref.handle == handle:
                resolved = ref.resolved(url)
                self._media[index] = resolved
                self._document.replace_media(handle, resolved)
                return resolved
        return None

    def check_media_consistency(self) -> bool:
        session = Counter(ref.handle for ref in self._media)
        document = Counter(ref.handle for ref in self._document.images())
        return session == document

    def paragraph_attributes_at(self, offset: int) -> ParagraphAttributes:
        return paragraph_attributes(self._document.style_at(offset), self._rules)

    # --- Internals ---

    def _collapse(self, offset: int) -> None:
        self._selection = Selection(offset, offset)

    def _delete_selection_if_any(self) -> None:
        if not self._selection.is_collapsed:
            self.delete_selection()

    def _delete(self, start: int, end: int) -> None:
        removed = self._document.delete_range(start, end)
        for ref in removed:
            self._forget_media(ref)
        self._collapse(start)
        self._unify_line(start)
        self._format = derive_state(self._document.style_at(start), self._format)

    def _forget_media(self, ref: MediaReference) -> None:
        for index, known in enumerate(self._media):
            if known.handle == ref.handle:
                del self._media[index]
                for callback in self._removal_listeners:
                    callback(known)
                return
        logger.warning("Deleted image %s was not in the session media list", ref.handle)

    def _step_around_image_line(self, cursor: int, start: int, end: int) -> bool:
        """
        Handle backspace at the start of a line that borders an image line.

        Joining would put text on the image's line, so the image is selected
        (line after an image) or the caret steps back (image line after
        text) instead. Returns True when the backspace was handled.
        """
        doc = self._document
        text = doc.text
        if end > start and cursor >= 2 and text[cursor - 2] == OBJECT_REPLACEMENT_CHAR:
            self._selection = Selection(cursor - 2, cursor - 1)
            self._format = derive_state(doc.style_at(cursor - 2), self._format)
            return True
        if text[start:end] == OBJECT_REPLACEMENT_CHAR:
            previous_start, _ = doc.line_range(cursor - 1)
            if previous_start < cursor - 1:
                self._collapse(cursor - 1)
                self._format = derive_state(doc.style_at(cursor - 1), self._format)
                return True
        return False

    def _has_marker(self, start: int, end: int) -> bool:
        doc = self._document
        marker_end = start + len(self.marker)
        if marker_end > end or doc.text[start:marker_end] != self.marker:
            return False
        return doc.run_at(start).style.block_kind == BlockKind.BULLET_ITEM

    def _set_line_block(self, start: int, end: int, block_kind: BlockKind) -> None:
        """Restyle a line and its terminating newline to `block_kind`."""
        stop = end + 1 if end < self._document.length else end
        self._document.restyle(start, stop, lambda style: style.with_block(block_kind))

    def _apply_block_to_line(self, start: int, end: int, block_kind: BlockKind) -> None:
        doc = self._document
        if OBJECT_REPLACEMENT_CHAR in doc.text[start:end]:
            # Image lines never take block formatting
            return

        width = len(self.marker)
        has_marker = self._has_marker(start, end)
        if block_kind == BlockKind.BULLET_ITEM and not has_marker:
            doc.insert_text(start, self.marker, RunStyle(block_kind=BlockKind.BULLET_ITEM))
            self._selection = self._selection.shifted(start, width)
            end += width
        elif block_kind != BlockKind.BULLET_ITEM and has_marker:
            doc.delete_range(start, start + width)
            self._selection = Selection(
                self._after_delete(self._selection.start, start, width),
                self._after_delete(self._selection.end, start, width),
            )
            end -= width

        self._set_line_block(start, end, block_kind)

    @staticmethod
    def _after_delete(position: int, start: int, count: int) -> int:
        if position <= start:
            return position
        if position >= start + count:
            return position - count
        return start

    def _unify_line(self, offset: int) -> None:
        """After a join, give the whole line the block kind of its first character."""
        doc = self._document
        start, end = doc.line_range(offset)
        if start == end or OBJECT_REPLACEMENT_CHAR in doc.text[start:end]:
            return
        self._set_line_block(start, end, doc.run_at(start).style.block_kind)


# --- Component Entry Point ---


def run(editor: Editor, inp: EditInput) -> EditOutput:
    """
    Main entry point for the editor component.

    Dispatches to the editor operation matching the input type.
    """
    if isinstance(inp, TypeTextInput):
        editor.type_text(inp.text)
    elif isinstance(inp, NewlineInput):
        editor.press_newline()
    elif isinstance(inp, ToggleInput):
        editor.toggle(inp.toggle)
    elif isinstance(inp, InsertImageInput):
        editor.insert_image(inp.ref)
    elif isinstance(inp, SelectInput):
        editor.select(inp.start, inp.end)
    elif isinstance(inp, DeleteBackwardInput):
        editor.delete_backward()
    else:
        raise ValueError(f"Unknown input type: {type(inp)}")

    return EditOutput(
        format=editor.format,
        selection=editor.selection,
        length=editor.document.length,
    )
