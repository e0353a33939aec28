"""
Tests for the document model.

Tests cover:
1. Length accounting for text and images
2. Run splitting and merging
3. Line ranges and the newline convention
4. Image insertion layout
5. Out-of-range offsets
"""

from __future__ import annotations

import pytest

from closeup.components.document import (
    DEFAULT_STYLE,
    IMAGE_RUN_LENGTH,
    OBJECT_REPLACEMENT_CHAR,
    BlockKind,
    Document,
    MediaReference,
    OutOfRangeError,
    Run,
    RunStyle,
    Tint,
)

BOLD = RunStyle(bold=True)
QUOTE = RunStyle(block_kind=BlockKind.QUOTE)


@pytest.fixture
def doc() -> Document:
    document = Document()
    document.insert_text(0, "Hello world", DEFAULT_STYLE)
    return document


class TestLength:
    """Tests for length accounting."""

    def test_empty_document(self) -> None:
        assert Document().length == 0
        assert Document().is_empty

    def test_insert_adds_text_length(self, doc: Document) -> None:
        before = doc.length
        doc.insert_text(5, ", big", BOLD)
        assert doc.length == before + 5

    def test_image_counts_as_one(self) -> None:
        """An image occupies a single position."""
        doc = Document()
        doc.insert_image(0, MediaReference(handle="a"))
        assert IMAGE_RUN_LENGTH == 1
        # image plus its trailing line break
        assert doc.length == 2
        assert doc.text == f"{OBJECT_REPLACEMENT_CHAR}\n"

    def test_len_matches_length(self, doc: Document) -> None:
        assert len(doc) == doc.length == 11


class TestRuns:
    """Tests for run splitting and merging."""

    def test_same_style_runs_merge(self) -> None:
        doc = Document()
        doc.insert_text(0, "Hello ", DEFAULT_STYLE)
        doc.insert_text(6, "world", DEFAULT_STYLE)
        assert len(doc.runs) == 1
        assert doc.runs[0].text == "Hello world"

    def test_insert_with_other_style_splits(self, doc: Document) -> None:
        doc.insert_text(5, "!!", BOLD)
        assert [run.text for run in doc.runs] == ["Hello", "!!", " world"]
        assert doc.runs[1].style == BOLD

    def test_delete_rejoins_neighbours(self, doc: Document) -> None:
        doc.insert_text(5, "!!", BOLD)
        doc.delete_range(5, 7)
        assert len(doc.runs) == 1
        assert doc.text == "Hello world"

    def test_constructor_normalizes(self) -> None:
        doc = Document([Run.text_run("a"), Run.text_run(""), Run.text_run("b")])
        assert len(doc.runs) == 1
        assert doc.text == "ab"

    def test_quote_runs_are_italic_and_muted(self) -> None:
        doc = Document()
        doc.insert_text(0, "Wise", QUOTE)
        style = doc.runs[0].style
        assert style.italic
        assert style.tint == Tint.MUTED

    def test_leaving_quote_restores_run_italic(self) -> None:
        italic = RunStyle(italic=True).with_block(BlockKind.QUOTE)
        plain = RunStyle().with_block(BlockKind.QUOTE)
        assert italic.pre_quote_italic is True
        assert plain.italic

        assert italic.with_block(BlockKind.NORMAL) == RunStyle(italic=True)
        assert plain.with_block(BlockKind.NORMAL) == RunStyle()

    def test_restyle_applies_to_range(self, doc: Document) -> None:
        doc.restyle(0, 5, lambda style: RunStyle(bold=True))
        assert doc.run_at(0).style.bold
        assert not doc.run_at(6).style.bold

    def test_style_at_uses_preceding_character(self, doc: Document) -> None:
        doc.insert_text(11, "!", BOLD)
        assert doc.style_at(12) == BOLD
        assert doc.style_at(11) == DEFAULT_STYLE

    def test_style_at_line_start_uses_line(self) -> None:
        doc = Document()
        doc.insert_text(0, "a\n", DEFAULT_STYLE)
        doc.insert_text(2, "b", BOLD)
        assert doc.style_at(2) == BOLD


class TestLines:
    """Tests for line ranges."""

    def test_single_line(self, doc: Document) -> None:
        assert doc.line_range(3) == (0, 11)

    def test_offset_after_newline_is_next_line(self) -> None:
        doc = Document()
        doc.insert_text(0, "ab\ncd", DEFAULT_STYLE)
        assert doc.line_range(2) == (0, 2)
        assert doc.line_range(3) == (3, 5)

    def test_trailing_empty_line(self) -> None:
        doc = Document()
        doc.insert_text(0, "ab\n", DEFAULT_STYLE)
        assert doc.line_range(3) == (3, 3)

    def test_line_ranges_span_selection(self) -> None:
        doc = Document()
        doc.insert_text(0, "ab\ncd\nef", DEFAULT_STYLE)
        assert doc.line_ranges(1, 4) == [(0, 2), (3, 5)]

    def test_lines_carry_terminator_style(self) -> None:
        doc = Document()
        doc.insert_text(0, "q\n", QUOTE)
        doc.insert_text(2, "n", DEFAULT_STYLE)
        lines = doc.lines()
        assert [line.text for line in lines] == ["q", "n"]
        assert lines[0].block_kind == BlockKind.QUOTE
        assert lines[1].terminator is None


class TestInsertImage:
    """Tests for image placement."""

    def test_mid_line_splits_into_three_lines(self, doc: Document) -> None:
        after = doc.insert_image(5, MediaReference(handle="img"))
        assert doc.text == f"Hello\n{OBJECT_REPLACEMENT_CHAR}\n world"
        assert after == 8
        assert [line.text for line in doc.lines()] == ["Hello", OBJECT_REPLACEMENT_CHAR, " world"]

    def test_at_line_start_adds_no_leading_break(self) -> None:
        doc = Document()
        doc.insert_text(0, "a\n", DEFAULT_STYLE)
        doc.insert_image(2, MediaReference(handle="img"))
        assert doc.text == f"a\n{OBJECT_REPLACEMENT_CHAR}\n"

    def test_reuses_following_break(self) -> None:
        doc = Document()
        doc.insert_text(0, "\nb", QUOTE)
        doc.insert_image(0, MediaReference(handle="img"))
        assert doc.text == f"{OBJECT_REPLACEMENT_CHAR}\nb"
        # The break after the image belongs to the image line
        assert doc.run_at(1).style == DEFAULT_STYLE

    def test_image_breaks_out_of_quote(self) -> None:
        doc = Document()
        doc.insert_text(0, "Quote", QUOTE)
        doc.insert_image(5, MediaReference(handle="img"))
        image_line = doc.lines()[1]
        assert image_line.has_image
        assert image_line.block_kind == BlockKind.NORMAL
        assert doc.lines()[0].block_kind == BlockKind.QUOTE

    def test_images_lists_references_in_order(self) -> None:
        doc = Document()
        doc.insert_image(0, MediaReference(handle="a"))
        doc.insert_image(2, MediaReference(handle="b"))
        assert [ref.handle for ref in doc.images()] == ["a", "b"]

    def test_delete_returns_removed_media(self) -> None:
        doc = Document()
        doc.insert_image(0, MediaReference(handle="a"))
        removed = doc.delete_range(0, 1)
        assert [ref.handle for ref in removed] == ["a"]
        assert doc.images() == []

    def test_replace_media(self) -> None:
        doc = Document()
        doc.insert_image(0, MediaReference(handle="a"))
        assert doc.replace_media("a", MediaReference(handle="a", url="https://cdn/a.jpg"))
        assert doc.images()[0].url == "https://cdn/a.jpg"
        assert not doc.replace_media("missing", MediaReference(handle="x"))


class TestOutOfRange:
    """Offsets are never clamped."""

    def test_insert_past_end(self, doc: Document) -> None:
        with pytest.raises(OutOfRangeError) as exc_info:
            doc.insert_text(12, "x", DEFAULT_STYLE)
        assert exc_info.value.offset == 12
        assert exc_info.value.length == 11

    def test_negative_offset(self, doc: Document) -> None:
        with pytest.raises(OutOfRangeError):
            doc.line_range(-1)

    def test_inverted_range(self, doc: Document) -> None:
        with pytest.raises(OutOfRangeError):
            doc.delete_range(5, 2)

    def test_is_index_error(self, doc: Document) -> None:
        with pytest.raises(IndexError):
            doc.char_at(11)

    def test_image_past_end(self, doc: Document) -> None:
        with pytest.raises(OutOfRangeError):
            doc.insert_image(20, MediaReference(handle="a"))
