"""NIP-99 classified listings: the marketplace event protocol.

Attributes:
    ProductInput: Validated form input for a new listing.
    SearchFilters: Caller constraints merged into marketplace queries.
    encode: ``ProductInput`` to unsigned kind 30402 draft.
    decode: Signed event to ``Product`` (or ``None`` for foreign events).
    clean_image_url: Image URL normalizer.
    is_marketplace_event: Admission predicate for raw relay events.
"""

from .codec import (
    build_identifier,
    build_withdrawal,
    clean_image_url,
    decode,
    encode,
    product_from_input,
    slugify,
)
from .content import (
    CONTACT_PREFIX,
    ParsedContent,
    extract_contact,
    parse_content,
    render_content,
    strip_markdown_links,
)
from .data import ProductInput, SearchFilters
from .validator import (
    filter_marketplace_events,
    is_marketplace_event,
    latest_by_address,
    parse_events,
)


__all__ = [
    "CONTACT_PREFIX",
    "ParsedContent",
    "ProductInput",
    "SearchFilters",
    "build_identifier",
    "build_withdrawal",
    "clean_image_url",
    "decode",
    "encode",
    "extract_contact",
    "filter_marketplace_events",
    "is_marketplace_event",
    "latest_by_address",
    "parse_content",
    "parse_events",
    "product_from_input",
    "render_content",
    "slugify",
    "strip_markdown_links",
]
