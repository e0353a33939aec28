"""
Richtext component - post body serialization.

Converts a compose document to the HTML fragment stored as the post body
and collects the media URLs it references; parses stored bodies back.

Invariants:
- Text content is always escaped
- Media URL list is ordered by first appearance and has no duplicates
- Serialization has no failure mode
"""

from __future__ import annotations

from closeup.rules.models import Rules

from ._impl import (
    UrlResolver,
    parse_html,
    serialize_document,
)
from .models import (
    DEFAULT_SERIALIZE_CONFIG,
    ParseInput,
    ParseOutput,
    SerializeConfig,
    SerializeInput,
    SerializeOutput,
)


def _build_config(rules: Rules | None) -> SerializeConfig:
    if rules is None:
        return DEFAULT_SERIALIZE_CONFIG
    return SerializeConfig.from_rules(rules)


# --- Component Entry Points ---


def run_serialize(
    inp: SerializeInput,
    *,
    rules: Rules | None = None,
    resolve_url: UrlResolver | None = None,
) -> SerializeOutput:
    """
    Serialize a document to its HTML body.

    Args:
        inp: Input containing the document.
        rules: Optional rules for list merging and marker handling.
        resolve_url: Optional image URL resolver.

    Returns:
        SerializeOutput with the HTML and the distinct media URLs.
    """
    result = serialize_document(inp.document, _build_config(rules), resolve_url)
    return SerializeOutput(html=result.html, media_urls=result.media_urls)


def run_parse(
    inp: ParseInput,
    *,
    rules: Rules | None = None,
) -> ParseOutput:
    """Rebuild a document from a stored HTML body."""
    return ParseOutput(document=parse_html(inp.html, _build_config(rules)))


def run(
    inp: SerializeInput | ParseInput,
    *,
    rules: Rules | None = None,
) -> SerializeOutput | ParseOutput:
    """
    Main entry point for the richtext component.

    Dispatches to the handler matching the input type.
    """
    if isinstance(inp, SerializeInput):
        return run_serialize(inp, rules=rules)
    elif isinstance(inp, ParseInput):
        return run_parse(inp, rules=rules)
    else:
        raise ValueError(f"Unknown input type: {type(inp)}")
