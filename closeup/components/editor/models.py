"""
Editor component input/output models.
"""

from __future__ import annotations

from dataclasses import dataclass

from closeup.components.document.models import MediaReference
from closeup.components.formatting.models import FormatState, Toggle

# --- Selection ---


@dataclass(frozen=True)
class Selection:
    """Caret (start == end) or selected range."""

    start: int = 0
    end: int = 0

    @property
    def is_collapsed(self) -> bool:
        return self.start == self.end

    def shifted(self, at: int, delta: int) -> Selection:
        """Move the ends that sit at or after `at` by `delta`."""
        start = self.start + delta if self.start >= at else self.start
        end = self.end + delta if self.end >= at else self.end
        return Selection(max(start, 0), max(end, 0))


# --- Input Models ---


@dataclass(frozen=True)
class TypeTextInput:
    """Text typed or pasted at the caret."""

    text: str


@dataclass(frozen=True)
class NewlineInput:
    """Return key."""


@dataclass(frozen=True)
class ToggleInput:
    """Toolbar toggle."""

    toggle: Toggle


@dataclass(frozen=True)
class InsertImageInput:
    """Image inserted at the caret."""

    ref: MediaReference


@dataclass(frozen=True)
class SelectInput:
    """Caret moved or selection changed."""

    start: int
    end: int | None = None


@dataclass(frozen=True)
class DeleteBackwardInput:
    """Backspace."""


# --- Output Model ---


@dataclass(frozen=True)
class EditOutput:
    """Editor state after an operation."""

    format: FormatState
    selection: Selection
    length: int
