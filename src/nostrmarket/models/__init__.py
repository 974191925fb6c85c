"""Pure frozen dataclasses with zero I/O for events, relays, and products.

The models layer is the foundation of the diamond DAG. It has no
dependencies on any other nostrmarket package. Every model uses
``@dataclass(frozen=True, slots=True)`` and validates in ``__post_init__``
so invalid instances never escape the constructor.

Attributes:
    Event: Signed Nostr event in NIP-01 wire shape, strictly validated.
    EventDraft: Unsigned event produced by the tag codec.
    Relay: Normalized ``ws``/``wss`` relay URL.
    Product: Decoded marketplace listing.
    PublishedProduct: Signed listing plus its optimistic product view.
    EventKind: Kinds read or written by the marketplace.
    Currency, PaymentMethod, DeliveryMethod: Listing enumerations.
"""

from .constants import (
    DEFAULT_RELAYS,
    EVENT_KIND_MAX,
    MAX_IMAGES,
    Currency,
    DeliveryMethod,
    EventKind,
    PaymentMethod,
)
from .event import Event, EventDraft
from .product import Product, PublishedProduct
from .relay import Relay


__all__ = [
    "DEFAULT_RELAYS",
    "EVENT_KIND_MAX",
    "MAX_IMAGES",
    "Currency",
    "DeliveryMethod",
    "Event",
    "EventDraft",
    "EventKind",
    "PaymentMethod",
    "Product",
    "PublishedProduct",
    "Relay",
]
