"""
Tests for the Editor component.

Tests cover:
1. Typing and the caret
2. Quote newline rules
3. Bullet lists
4. Inline toggles on selections
5. Image insertion and the session media list
6. Deletion
7. The run() dispatcher
"""

from __future__ import annotations

import pytest

from closeup.components.document import (
    OBJECT_REPLACEMENT_CHAR,
    BlockKind,
    MediaReference,
    OutOfRangeError,
)
from closeup.components.editor import (
    DeleteBackwardInput,
    EditOutput,
    Editor,
    InsertImageInput,
    NewlineInput,
    SelectInput,
    ToggleInput,
    TypeTextInput,
    run,
)
from closeup.components.formatting import NewlineAction, Toggle
from closeup.components.richtext import serialize_document


def block_kinds(editor: Editor) -> list[BlockKind]:
    return [line.block_kind for line in editor.document.lines() if not line.is_empty]


class TestTyping:
    """Tests for plain typing."""

    def test_type_moves_caret(self, editor: Editor) -> None:
        editor.type_text("Hello")
        assert editor.document.text == "Hello"
        assert editor.cursor == 5

    def test_type_uses_active_format(self, editor: Editor) -> None:
        editor.toggle(Toggle.BOLD)
        editor.type_text("Hi")
        assert editor.document.run_at(0).style.bold

    def test_newline_in_typed_text_splits(self, editor: Editor) -> None:
        editor.type_text("a\nb")
        assert editor.document.text == "a\nb"
        assert editor.cursor == 3

    def test_editor_over_existing_document_starts_at_end(self, editor: Editor) -> None:
        editor.type_text("abc")
        reopened = Editor(document=editor.document)
        assert reopened.cursor == 3

    def test_typing_replaces_selection(self, editor: Editor) -> None:
        editor.type_text("Hello world")
        editor.select(0, 5)
        editor.type_text("Howdy")
        assert editor.document.text == "Howdy world"

    def test_select_out_of_range(self, editor: Editor) -> None:
        editor.type_text("abc")
        with pytest.raises(OutOfRangeError):
            editor.select(0, 4)

    def test_select_reads_format_under_caret(self, editor: Editor) -> None:
        editor.toggle(Toggle.BOLD)
        editor.type_text("bold")
        editor.toggle(Toggle.BOLD)
        editor.type_text(" plain")
        editor.select(2)
        assert editor.format.bold
        editor.select(8)
        assert not editor.format.bold


class TestQuote:
    """Tests for quote newline behavior."""

    def test_newline_locks_quote_and_resets(self, editor: Editor) -> None:
        editor.toggle(Toggle.QUOTE)
        editor.type_text("Wise words")
        action = editor.press_newline()
        editor.type_text("Back to normal")

        assert action == NewlineAction.LOCK_QUOTE
        assert block_kinds(editor) == [BlockKind.QUOTE, BlockKind.NORMAL]
        assert not editor.format.italic
        tail = editor.document.run_at(editor.cursor - 1).style
        assert not tail.italic
        assert editor.paragraph_attributes_at(editor.cursor).head_indent == 0

    def test_newline_on_empty_quote_exits(self, editor: Editor) -> None:
        editor.type_text("Before\n")
        length = editor.document.length
        editor.toggle(Toggle.QUOTE)
        action = editor.press_newline()

        assert action == NewlineAction.EXIT_QUOTE
        assert editor.document.length == length
        assert not editor.format.is_quote

    def test_quote_applies_to_whole_line(self, editor: Editor) -> None:
        editor.type_text("Already typed")
        editor.toggle(Toggle.QUOTE)
        assert block_kinds(editor) == [BlockKind.QUOTE]
        assert editor.document.run_at(0).style.italic

    def test_quote_off_clears_line(self, editor: Editor) -> None:
        editor.type_text("text")
        editor.toggle(Toggle.QUOTE)
        editor.toggle(Toggle.QUOTE)
        assert block_kinds(editor) == [BlockKind.NORMAL]
        assert not editor.document.run_at(0).style.italic

    def test_italic_toggle_ignored_in_quote(self, editor: Editor) -> None:
        editor.toggle(Toggle.QUOTE)
        before = editor.format
        editor.toggle(Toggle.ITALIC)
        assert editor.format == before

    def test_quote_off_gives_back_italic_text(self, editor: Editor) -> None:
        editor.toggle(Toggle.ITALIC)
        editor.type_text("abc")
        editor.toggle(Toggle.QUOTE)
        editor.toggle(Toggle.QUOTE)

        style = editor.document.run_at(0).style
        assert editor.format.italic
        assert style.italic
        assert style.block_kind == BlockKind.NORMAL

    def test_quote_off_keeps_mixed_italic(self, editor: Editor) -> None:
        editor.type_text("plain ")
        editor.toggle(Toggle.ITALIC)
        editor.type_text("slanted")
        editor.toggle(Toggle.QUOTE)
        assert editor.document.run_at(0).style.italic
        editor.toggle(Toggle.QUOTE)

        assert not editor.document.run_at(0).style.italic
        assert editor.document.run_at(8).style.italic

    def test_newline_at_start_of_quote_opens_line_above(self, editor: Editor) -> None:
        editor.toggle(Toggle.QUOTE)
        editor.type_text("quoted")
        editor.select(0)
        action = editor.press_newline()

        assert action == NewlineAction.LOCK_QUOTE
        assert editor.document.text == "\nquoted"
        assert [line.block_kind for line in editor.document.lines()] == [
            BlockKind.NORMAL,
            BlockKind.QUOTE,
        ]
        assert editor.cursor == 1
        assert editor.format.is_quote
        html = serialize_document(editor.document).html
        assert html == "<blockquote><em>quoted</em></blockquote>"


class TestBullets:
    """Tests for bullet lists."""

    def test_toggle_inserts_marker(self, editor: Editor) -> None:
        editor.toggle(Toggle.BULLET)
        assert editor.document.text == editor.marker
        assert editor.cursor == len(editor.marker)

    def test_newline_continues_list(self, editor: Editor) -> None:
        editor.toggle(Toggle.BULLET)
        editor.type_text("one")
        action = editor.press_newline()
        editor.type_text("two")

        assert action == NewlineAction.CONTINUE_BULLET
        assert editor.document.text == "• one\n• two"
        assert block_kinds(editor) == [BlockKind.BULLET_ITEM, BlockKind.BULLET_ITEM]

    def test_newline_on_empty_item_exits(self, editor: Editor) -> None:
        editor.toggle(Toggle.BULLET)
        editor.type_text("one")
        editor.press_newline()
        action = editor.press_newline()

        assert action == NewlineAction.EXIT_BULLET
        assert editor.document.text == "• one\n"
        assert not editor.format.is_bullet
        editor.type_text("after")
        assert block_kinds(editor) == [BlockKind.BULLET_ITEM, BlockKind.NORMAL]

    def test_backspace_after_marker_ends_item(self, editor: Editor) -> None:
        editor.toggle(Toggle.BULLET)
        editor.delete_backward()
        assert editor.document.text == ""
        assert not editor.format.is_bullet

    def test_bullet_off_removes_marker(self, editor: Editor) -> None:
        editor.toggle(Toggle.BULLET)
        editor.type_text("item")
        editor.toggle(Toggle.BULLET)
        assert editor.document.text == "item"
        assert editor.cursor == 4

    def test_bullet_over_selected_lines(self, editor: Editor) -> None:
        editor.type_text("a\nb")
        editor.select(0, 3)
        editor.toggle(Toggle.BULLET)
        assert editor.document.text == "• a\n• b"
        assert editor.selection.end == 7


class TestInlineSelection:
    """Inline toggles restyle a selection."""

    def test_bold_selection(self, editor: Editor) -> None:
        editor.type_text("Hello world")
        editor.select(0, 5)
        editor.toggle(Toggle.BOLD)
        assert editor.document.run_at(0).style.bold
        assert not editor.document.run_at(6).style.bold

    def test_heading_selection_sets_level(self, editor: Editor) -> None:
        editor.type_text("Title")
        editor.select(0, 5)
        editor.toggle(Toggle.HEADING)
        assert editor.document.run_at(0).style.heading_level == 3
        assert editor.paragraph_attributes_at(5).font_size == 24

    def test_heading_off_restores_body_size(self, editor: Editor) -> None:
        editor.type_text("Title")
        editor.select(0, 5)
        editor.toggle(Toggle.HEADING)
        editor.toggle(Toggle.HEADING)
        assert editor.document.run_at(0).style.heading_level is None
        assert editor.paragraph_attributes_at(5).font_size == 18


class TestImages:
    """Tests for image insertion and media tracking."""

    def test_mid_line_image_gets_own_line(self, editor: Editor) -> None:
        editor.type_text("Hello world")
        editor.select(5)
        editor.insert_image(MediaReference(handle="a"))
        texts = [line.text for line in editor.document.lines()]
        assert texts == ["Hello", OBJECT_REPLACEMENT_CHAR, " world"]

    def test_image_in_quote_breaks_out(self, editor: Editor) -> None:
        editor.toggle(Toggle.QUOTE)
        editor.type_text("Quote")
        editor.insert_image(MediaReference(handle="a"))
        lines = editor.document.lines()
        assert lines[0].block_kind == BlockKind.QUOTE
        assert lines[1].has_image
        assert lines[1].block_kind == BlockKind.NORMAL
        assert not editor.format.is_quote

    def test_image_in_bullet_list(self, editor: Editor) -> None:
        editor.toggle(Toggle.BULLET)
        editor.type_text("item")
        editor.insert_image(MediaReference(handle="a"))
        assert not editor.format.is_bullet
        assert editor.document.lines()[1].block_kind == BlockKind.NORMAL

    def test_image_mid_bullet_keeps_tail_in_list(self, editor: Editor) -> None:
        editor.toggle(Toggle.BULLET)
        editor.type_text("abcd")
        editor.select(4)
        editor.insert_image(MediaReference(handle="a"))

        assert editor.document.text == f"• ab\n{OBJECT_REPLACEMENT_CHAR}\n• cd"
        assert [line.block_kind for line in editor.document.lines()] == [
            BlockKind.BULLET_ITEM,
            BlockKind.NORMAL,
            BlockKind.BULLET_ITEM,
        ]
        assert editor.cursor == 9
        assert editor.format.is_bullet

    def test_media_list_tracks_document(self, editor: Editor) -> None:
        editor.insert_image(MediaReference(handle="a"))
        editor.insert_image(MediaReference(handle="b"))
        assert [ref.handle for ref in editor.media] == ["a", "b"]
        assert editor.check_media_consistency()

    def test_deleting_image_forgets_it(self, editor: Editor) -> None:
        editor.insert_image(MediaReference(handle="a"))
        editor.select(0, 1)
        editor.delete_selection()
        assert editor.media == ()
        assert editor.check_media_consistency()

    def test_block_toggle_skips_image_line(self, editor: Editor) -> None:
        editor.insert_image(MediaReference(handle="a"))
        editor.select(0)
        editor.toggle(Toggle.QUOTE)
        assert editor.document.lines()[0].block_kind == BlockKind.NORMAL

    def test_resolve_media(self, editor: Editor) -> None:
        editor.insert_image(MediaReference(handle="a"))
        resolved = editor.resolve_media("a", "https://cdn/a.jpg")
        assert resolved is not None and resolved.url == "https://cdn/a.jpg"
        assert editor.document.images()[0].url == "https://cdn/a.jpg"
        assert editor.media[0].url == "https://cdn/a.jpg"
        assert editor.resolve_media("missing", "x") is None


class TestDelete:
    """Tests for deletion."""

    def test_backspace_removes_previous_char(self, editor: Editor) -> None:
        editor.type_text("abc")
        editor.delete_backward()
        assert editor.document.text == "ab"
        assert editor.cursor == 2

    def test_backspace_at_start_is_noop(self, editor: Editor) -> None:
        editor.type_text("abc")
        editor.select(0)
        editor.delete_backward()
        assert editor.document.text == "abc"

    def test_joined_line_takes_first_block_kind(self, editor: Editor) -> None:
        editor.type_text("plain")
        editor.press_newline()
        editor.toggle(Toggle.QUOTE)
        editor.type_text("quoted")
        editor.select(6)
        editor.delete_backward()
        assert editor.document.text == "plainquoted"
        assert block_kinds(editor) == [BlockKind.NORMAL]
        assert not editor.document.run_at(7).style.italic

    def test_backspace_after_image_selects_it(self, editor: Editor) -> None:
        editor.toggle(Toggle.QUOTE)
        editor.type_text("q")
        editor.insert_image(MediaReference(handle="a", url="u"))
        editor.toggle(Toggle.QUOTE)
        editor.type_text("after")
        text = editor.document.text
        editor.select(4)
        editor.delete_backward()

        assert editor.document.text == text
        assert (editor.selection.start, editor.selection.end) == (2, 3)
        assert editor.document.lines()[1].text == OBJECT_REPLACEMENT_CHAR

        editor.delete_backward()
        assert editor.document.text == "q\n\nafter"
        assert editor.media == ()
        assert block_kinds(editor) == [BlockKind.QUOTE, BlockKind.QUOTE]

    def test_backspace_before_image_moves_caret(self, editor: Editor) -> None:
        editor.type_text("text")
        editor.insert_image(MediaReference(handle="a"))
        text = editor.document.text
        editor.select(5)
        editor.delete_backward()

        assert editor.document.text == text
        assert editor.cursor == 4
        assert editor.document.lines()[1].text == OBJECT_REPLACEMENT_CHAR


class TestRun:
    """Tests for the run() dispatcher."""

    def test_dispatches_inputs(self, editor: Editor) -> None:
        run(editor, TypeTextInput(text="Hi"))
        run(editor, ToggleInput(toggle=Toggle.BOLD))
        run(editor, NewlineInput())
        run(editor, InsertImageInput(ref=MediaReference(handle="a")))
        run(editor, SelectInput(start=0, end=2))
        output = run(editor, DeleteBackwardInput())

        assert isinstance(output, EditOutput)
        assert output.selection.is_collapsed
        assert output.length == editor.document.length
        assert editor.document.text.startswith("\n")

    def test_unknown_input(self, editor: Editor) -> None:
        with pytest.raises(ValueError, match="Unknown input type"):
            run(editor, "type")  # type: ignore[arg-type]
