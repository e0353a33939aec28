"""
Document component port definitions.
"""

from __future__ import annotations

from typing import Protocol

from .models import RunStyle


class StyleSource(Protocol):
    """Anything that can seed the style of inserted text (e.g. FormatState)."""

    def to_run_style(self) -> RunStyle:
        """Resolve into concrete run attributes."""
        ...
