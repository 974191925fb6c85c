"""
Immutable product view over a signed marketplace listing.

A [Product][nostrmarket.models.product.Product] is never stored; it is
derived each time from a decoded event (or, right after publishing, from the
structured input that produced the event). Multi-valued fields are tuples
and free of duplicates.

See Also:
    [nostrmarket.nips.nip99.codec][]: Produces products via ``decode()``.
    [nostrmarket.models.event.Event][]: The signed event a product is read from.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from .constants import Currency, DeliveryMethod, EventKind, PaymentMethod
from .event import Event


@dataclass(frozen=True, slots=True)
class Product:
    """Decoded marketplace listing.

    Attributes:
        id: Event id of the listing.
        author_key: Hex public key of the seller.
        identifier: Replaceable-event ``d`` identifier (slug of the title).
        title: Listing title.
        summary: One-line summary, empty when absent.
        description: Description text with markdown link syntax removed.
        notes: Additional notes section, empty when absent.
        price: Price as a decimal number string.
        currency: Price currency.
        location: Free-text location (province), empty when absent.
        payment_methods: De-duplicated payment methods in tag order.
        delivery_methods: De-duplicated delivery methods in tag order.
        images: Image URLs in tag order.
        website: Absolute website URL, or ``None``.
        contact_info: Contact line recovered from the content.
        categories: De-duplicated free-text categories.
        created_at: Publish timestamp (seconds since epoch).
        raw_tags: The original ordered tag list.
    """

    id: str
    author_key: str
    identifier: str
    title: str
    price: str
    currency: Currency
    created_at: int
    summary: str = ""
    description: str = ""
    notes: str = ""
    location: str = ""
    payment_methods: tuple[PaymentMethod, ...] = ()
    delivery_methods: tuple[DeliveryMethod, ...] = ()
    images: tuple[str, ...] = ()
    website: str | None = None
    contact_info: str = ""
    categories: tuple[str, ...] = ()
    raw_tags: tuple[tuple[str, ...], ...] = field(default=(), repr=False)

    @property
    def address(self) -> str:
        """NIP-33 style coordinate ``<kind>:<pubkey>:<identifier>``."""
        return f"{EventKind.CLASSIFIED_LISTING.value}:{self.author_key}:{self.identifier}"


@dataclass(frozen=True, slots=True)
class PublishedProduct:
    """A freshly published listing: the signed event and its product view.

    The product is built from the structured input, not by decoding the
    event, so it can be rendered before any relay echoes the listing back.
    """

    event: Event
    product: Product

    def __post_init__(self) -> None:
        if self.event.id != self.product.id:
            raise ValueError("product id does not match event id")
