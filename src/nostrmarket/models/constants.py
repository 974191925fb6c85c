"""Shared constants for the models layer.

Defines the reconciled marketplace protocol version: event kinds, the
tag names that make up the listing schema, and the enumerations for
currency, payment, and delivery methods. Placing them here avoids
circular dependencies between the models and nips layers.

See Also:
    [nostrmarket.nips.nip99][]: Tag codec built on these constants.
    [nostrmarket.models.product][]: Product model whose fields use these enums.
"""

from __future__ import annotations

from enum import IntEnum, StrEnum
from typing import Final


class EventKind(IntEnum):
    """Nostr event kinds read or written by the marketplace.

    Attributes:
        CONTACTS: Kind 3 -- contact list (NIP-02), used for following sellers.
        CLASSIFIED_LISTING: Kind 30402 -- classified listing (NIP-99),
            parameterized replaceable. This is the single marketplace kind;
            the legacy kind 30017 is neither read nor written.
    """

    CONTACTS = 3
    CLASSIFIED_LISTING = 30_402


class Currency(StrEnum):
    """Price currency carried in the third field of the ``price`` tag."""

    BTC = "BTC"
    SATS = "SATS"


class PaymentMethod(StrEnum):
    """Accepted payment methods, one ``payment`` tag each."""

    LIGHTNING = "Lightning"
    ONCHAIN = "On-chain Bitcoin"


class DeliveryMethod(StrEnum):
    """Accepted delivery methods, one ``delivery`` tag each."""

    PRESENCIAL = "Presencial"
    DIGITAL = "Digital"
    ENVIO = "Envio"


EVENT_KIND_MAX: Final[int] = 65_535

# Marker tags that scope an event to this application
APP_TAG_NAME: Final[str] = "client"
APP_TAG_VALUE: Final[str] = "nostrmarketplace"
TOPIC_TAG_NAME: Final[str] = "t"
TOPIC_TAG_VALUE: Final[str] = "nostrmarketplace"
DELETED_TAG_NAME: Final[str] = "deleted"

# Listing tag names
TAG_IDENTIFIER: Final[str] = "d"
TAG_TITLE: Final[str] = "title"
TAG_SUMMARY: Final[str] = "summary"
TAG_PUBLISHED_AT: Final[str] = "published_at"
TAG_LOCATION: Final[str] = "location"
TAG_PRICE: Final[str] = "price"
TAG_PAYMENT: Final[str] = "payment"
TAG_DELIVERY: Final[str] = "delivery"
TAG_CATEGORY: Final[str] = "t"
TAG_IMAGE: Final[str] = "image"
TAG_WEBSITE: Final[str] = "website"
TAG_PUBKEY: Final[str] = "p"

MAX_IMAGES: Final[int] = 3

DEFAULT_RELAYS: Final[tuple[str, ...]] = (
    "wss://nos.lol",
    "wss://relay.nostr.band",
    "wss://relay.damus.io",
    "wss://nostr.mom",
    "wss://relay.nostr.bg",
)
