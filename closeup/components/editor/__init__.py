"""
Editor component - text, newline, toggle, image and delete operations.
"""

from .component import (
    INLINE_TOGGLES,
    EditInput,
    Editor,
    run,
)
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

__all__ = [
    # Component
    "Editor",
    "run",
    # Input models
    "DeleteBackwardInput",
    "EditInput",
    "InsertImageInput",
    "NewlineInput",
    "SelectInput",
    "ToggleInput",
    "TypeTextInput",
    # Output models
    "EditOutput",
    "Selection",
    # Constants
    "INLINE_TOGGLES",
]
