"""
Formatting component - the style state machine.

Pure functions over FormatState. Nothing here touches a document; the
editor applies the resulting state and actions.

Invariants:
- QUOTE forces italic; switching QUOTE off restores the pre-quote italic
- BULLET and QUOTE are mutually exclusive
- Heading only changes font size; switching it off restores the body size
"""

from __future__ import annotations

from dataclasses import replace

from closeup.components.document.models import BlockKind, RunStyle
from closeup.rules.models import EditorRules, TypographyRules

from .models import FormatState, NewlineAction, ParagraphAttributes, Toggle


def _enter_quote(state: FormatState) -> FormatState:
    if state.is_quote:
        return state
    base = _leave_block(state)
    return replace(
        base,
        block_kind=BlockKind.QUOTE,
        pre_quote_italic=base.italic,
        italic=True,
    )


def _leave_quote(state: FormatState) -> FormatState:
    if not state.is_quote:
        return state
    return replace(
        state,
        block_kind=BlockKind.NORMAL,
        italic=bool(state.pre_quote_italic),
        pre_quote_italic=None,
    )


def _leave_block(state: FormatState) -> FormatState:
    if state.is_quote:
        return _leave_quote(state)
    return replace(state, block_kind=BlockKind.NORMAL)


def toggle(state: FormatState, which: Toggle) -> FormatState:
    """Flip one toolbar toggle."""
    if which == Toggle.BOLD:
        return replace(state, bold=not state.bold)
    if which == Toggle.ITALIC:
        if state.is_quote:
            # Quote owns italic until it is switched off
            return state
        return replace(state, italic=not state.italic)
    if which == Toggle.UNDERLINE:
        return replace(state, underline=not state.underline)
    if which == Toggle.HEADING:
        return replace(state, heading=not state.heading)
    if which == Toggle.BULLET:
        if state.is_bullet:
            return replace(state, block_kind=BlockKind.NORMAL)
        return replace(_leave_block(state), block_kind=BlockKind.BULLET_ITEM)
    if which == Toggle.QUOTE:
        if state.is_quote:
            return _leave_quote(state)
        return _enter_quote(state)
    raise ValueError(f"Unknown toggle: {which}")


def set_block(state: FormatState, block_kind: BlockKind) -> FormatState:
    """Move the state to `block_kind` through the regular transitions."""
    if block_kind == state.block_kind:
        return state
    if block_kind == BlockKind.QUOTE:
        return _enter_quote(state)
    if block_kind == BlockKind.BULLET_ITEM:
        return replace(_leave_block(state), block_kind=BlockKind.BULLET_ITEM)
    return _leave_block(state)


def newline_transition(state: FormatState, line_is_empty: bool) -> NewlineAction:
    """
    Decide what return does.

    `line_is_empty` means the line holds nothing besides a list marker.
    """
    if state.is_quote:
        return NewlineAction.EXIT_QUOTE if line_is_empty else NewlineAction.LOCK_QUOTE
    if state.is_bullet:
        return NewlineAction.EXIT_BULLET if line_is_empty else NewlineAction.CONTINUE_BULLET
    return NewlineAction.SPLIT


def state_after_newline(state: FormatState, action: NewlineAction) -> FormatState:
    """State that seeds the line created (or kept) by `action`."""
    if action in (NewlineAction.LOCK_QUOTE, NewlineAction.EXIT_QUOTE):
        return _leave_quote(state)
    if action == NewlineAction.EXIT_BULLET:
        return replace(state, block_kind=BlockKind.NORMAL)
    return state


def derive_state(style: RunStyle, current: FormatState | None = None) -> FormatState:
    """
    Recompute the toolbar state from the style under the caret.

    Read-only: nothing is mutated. The heading level carries over from
    `current` when the run has no heading.
    """
    heading_level = style.heading_level
    if heading_level is None:
        heading_level = current.heading_level if current else FormatState().heading_level
    return FormatState(
        bold=style.bold,
        italic=style.italic,
        underline=style.underline,
        heading=style.heading_level is not None,
        block_kind=style.block_kind,
        pre_quote_italic=(
            bool(style.pre_quote_italic) if style.block_kind == BlockKind.QUOTE else None
        ),
        heading_level=heading_level,
    )


def font_size(style: RunStyle, typography: TypographyRules) -> float:
    if style.heading_level is not None:
        return typography.heading_font_size
    return typography.body_font_size


def paragraph_attributes(style: RunStyle, rules: EditorRules) -> ParagraphAttributes:
    """Presentation values for a line of the given style."""
    typography = rules.typography
    quoted = style.block_kind == BlockKind.QUOTE
    return ParagraphAttributes(
        font_size=font_size(style, typography),
        line_spacing=typography.line_spacing,
        paragraph_spacing=typography.paragraph_spacing,
        line_height_multiple=typography.line_height_multiple,
        head_indent=rules.quote.indent if quoted else 0,
        tint=rules.quote.tint if quoted else None,
    )


def image_bounds(
    image_width: float,
    image_height: float,
    container_width: float,
    rules: EditorRules,
) -> tuple[float, float]:
    """
    Display size of an inline image.

    The image fills the container width; its height follows the aspect
    ratio but never exceeds `image_max_height`.
    """
    if image_width <= 0 or image_height <= 0:
        raise ValueError("Image dimensions must be positive")
    scaled_height = container_width * image_height / image_width
    return container_width, min(scaled_height, rules.image_max_height)
