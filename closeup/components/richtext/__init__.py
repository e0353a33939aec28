"""
Richtext component - document <-> HTML post body.
"""

from ._impl import (
    ATTR_PATTERN,
    TAG_PATTERN,
    UrlResolver,
    default_resolve_url,
    escape_text,
    outline,
    parse_attributes,
    parse_html,
    render_run,
    serialize_document,
)
from .component import (
    run,
    run_parse,
    run_serialize,
)
from .models import (
    DEFAULT_SERIALIZE_CONFIG,
    OutlineEntry,
    ParseInput,
    ParseOutput,
    SerializeConfig,
    SerializedDocument,
    SerializeInput,
    SerializeOutput,
)

__all__ = [
    # Entry points
    "run",
    "run_parse",
    "run_serialize",
    # Pure functions
    "default_resolve_url",
    "escape_text",
    "outline",
    "parse_attributes",
    "parse_html",
    "render_run",
    "serialize_document",
    # Models
    "OutlineEntry",
    "ParseInput",
    "ParseOutput",
    "SerializeConfig",
    "SerializedDocument",
    "SerializeInput",
    "SerializeOutput",
    "UrlResolver",
    # Constants
    "ATTR_PATTERN",
    "DEFAULT_SERIALIZE_CONFIG",
    "TAG_PATTERN",
]
