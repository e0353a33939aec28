"""
Document component - ordered styled runs and inline images for one post body.
"""

from ._impl import Document, Line
from .models import (
    DEFAULT_STYLE,
    IMAGE_RUN_LENGTH,
    OBJECT_REPLACEMENT_CHAR,
    BlockKind,
    DocumentError,
    MediaReference,
    MediaType,
    OutOfRangeError,
    Run,
    RunKind,
    RunStyle,
    Tint,
)
from .ports import StyleSource

__all__ = [
    "Document",
    "Line",
    # Models
    "BlockKind",
    "MediaReference",
    "MediaType",
    "Run",
    "RunKind",
    "RunStyle",
    "Tint",
    # Errors
    "DocumentError",
    "OutOfRangeError",
    # Constants
    "DEFAULT_STYLE",
    "IMAGE_RUN_LENGTH",
    "OBJECT_REPLACEMENT_CHAR",
    # Ports
    "StyleSource",
]
