"""
Formatting component - toolbar toggles, newline rules and typing attributes.
"""

from .component import (
    derive_state,
    font_size,
    image_bounds,
    newline_transition,
    paragraph_attributes,
    set_block,
    state_after_newline,
    toggle,
)
from .models import (
    DEFAULT_HEADING_LEVEL,
    FormatState,
    NewlineAction,
    ParagraphAttributes,
    Toggle,
)

__all__ = [
    # Pure functions
    "derive_state",
    "font_size",
    "image_bounds",
    "newline_transition",
    "paragraph_attributes",
    "set_block",
    "state_after_newline",
    "toggle",
    # Models
    "FormatState",
    "NewlineAction",
    "ParagraphAttributes",
    "Toggle",
    # Constants
    "DEFAULT_HEADING_LEVEL",
]
