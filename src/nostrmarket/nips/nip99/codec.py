"""
NIP-99 tag codec: products to listing events and back.

Pure functions with no I/O. [encode()][nostrmarket.nips.nip99.codec.encode]
maps a validated [ProductInput][nostrmarket.nips.nip99.data.ProductInput]
to an unsigned [EventDraft][nostrmarket.models.event.EventDraft];
[decode()][nostrmarket.nips.nip99.codec.decode] maps a signed
[Event][nostrmarket.models.event.Event] back to a
[Product][nostrmarket.models.product.Product], or ``None`` when the event is
not a listing of this marketplace.

Scalar fields are read with "exactly one expected, first wins" semantics:
a duplicated ``title`` or ``price`` tag never produces a mixed result.
Multi-valued fields are collected from every matching tag and
de-duplicated in tag order.

See Also:
    [nostrmarket.nips.nip99.content][]: Content layout used by both directions.
    [nostrmarket.nips.nip99.validator][]: Pre-filter applied before decoding.
"""

from __future__ import annotations

import hashlib
import logging
import re
from collections.abc import Iterable
from decimal import Decimal, InvalidOperation
from enum import StrEnum
from time import time
from typing import TypeVar

from rfc3986 import uri_reference
from rfc3986.exceptions import ValidationError
from rfc3986.validators import Validator

from nostrmarket.models.constants import (
    APP_TAG_NAME,
    APP_TAG_VALUE,
    DELETED_TAG_NAME,
    TAG_CATEGORY,
    TAG_DELIVERY,
    TAG_IDENTIFIER,
    TAG_IMAGE,
    TAG_LOCATION,
    TAG_PAYMENT,
    TAG_PRICE,
    TAG_PUBLISHED_AT,
    TAG_SUMMARY,
    TAG_TITLE,
    TAG_WEBSITE,
    TOPIC_TAG_NAME,
    TOPIC_TAG_VALUE,
    Currency,
    DeliveryMethod,
    EventKind,
    PaymentMethod,
)
from nostrmarket.models.event import Event, EventDraft
from nostrmarket.models.product import Product

from .content import parse_content, render_content
from .data import ProductInput


logger = logging.getLogger(__name__)

E = TypeVar("E", bound=StrEnum)

_IMAGE_EXTENSIONS: tuple[str, ...] = (".jpg", ".jpeg", ".png", ".gif", ".webp")
_WHITESPACE_RE = re.compile(r"\s+")
_CURRENCY_ALIASES: dict[str, Currency] = {"SAT": Currency.SATS}
_IDENTIFIER_SUFFIX_LENGTH = 8


# =============================================================================
# Helpers
# =============================================================================


def slugify(title: str) -> str:
    """Derive the ``d`` identifier: lowercase, whitespace runs become one hyphen."""
    return _WHITESPACE_RE.sub("-", title.strip().lower())


def clean_image_url(raw: str) -> str | None:
    """Normalize an image URL or reject it.

    Strips the query string and fragment, requires the remaining path to end
    in a raster image extension (case-insensitive), and requires an absolute
    ``http``/``https`` URL.

    Returns:
        The cleaned URL, or ``None`` if it is not an absolute image URL.
        Callers fall back to the raw string so a plausible but unparsed URL
        is not silently dropped.

    Examples:
        ```python
        clean_image_url("https://x.com/a.jpg?x=1#y")  # 'https://x.com/a.jpg'
        clean_image_url("https://x.com/a.pdf")        # None
        ```
    """
    if not isinstance(raw, str):
        return None
    candidate = raw.strip().split("#", 1)[0].split("?", 1)[0]
    if not candidate.lower().endswith(_IMAGE_EXTENSIONS):
        return None

    validator = (
        Validator()
        .require_presence_of("scheme", "host")
        .allow_schemes("http", "https")
        .check_validity_of("scheme", "host", "port", "path")
    )
    try:
        validator.validate(uri_reference(candidate))
    except ValidationError:
        return None
    return candidate


def _unique(values: Iterable[str]) -> tuple[str, ...]:
    return tuple(dict.fromkeys(values))


def _unique_members(values: Iterable[str], enum_cls: type[E]) -> tuple[E, ...]:
    """Map tag values to enum members, dropping unknown values and duplicates."""
    members: dict[E, None] = {}
    for value in values:
        try:
            members.setdefault(enum_cls(value.strip()), None)
        except ValueError:
            continue
    return tuple(members)


def _parse_currency(raw: str) -> Currency | None:
    code = raw.strip().upper()
    if code in _CURRENCY_ALIASES:
        return _CURRENCY_ALIASES[code]
    try:
        return Currency(code)
    except ValueError:
        return None


def _is_number(raw: str) -> bool:
    try:
        amount = Decimal(raw)
    except InvalidOperation:
        return False
    return amount.is_finite() and amount >= 0


# =============================================================================
# Encode
# =============================================================================


def build_identifier(product: ProductInput, created_at: int, *, unique: bool = False) -> str:
    """Return the ``d`` identifier for *product*.

    With ``unique=True`` a short hash of the title and timestamp is appended
    so same-titled listings by one seller do not replace each other.
    """
    identifier = slugify(product.title)
    if unique:
        digest = hashlib.sha256(f"{product.title}:{created_at}".encode()).hexdigest()
        identifier = f"{identifier}-{digest[:_IDENTIFIER_SUFFIX_LENGTH]}"
    return identifier


def encode(
    product: ProductInput,
    *,
    created_at: int | None = None,
    unique_identifier: bool = False,
) -> EventDraft:
    """Encode a product as an unsigned kind 30402 listing.

    Tag order: ``d``, ``title``, ``summary``, ``published_at``, ``location``,
    ``price``, application discriminator, marketplace topic, then one tag per
    payment method, delivery method, category, and image, and ``website``.
    Empty optional fields are omitted rather than emitted empty.

    Args:
        product: Validated product input.
        created_at: Publish timestamp; defaults to now.
        unique_identifier: Append a hash suffix to the ``d`` identifier.
    """
    if created_at is None:
        created_at = int(time())

    tags: list[list[str]] = [
        [TAG_IDENTIFIER, build_identifier(product, created_at, unique=unique_identifier)],
        [TAG_TITLE, product.title],
    ]
    if product.summary:
        tags.append([TAG_SUMMARY, product.summary])
    tags.append([TAG_PUBLISHED_AT, str(created_at)])
    if product.location:
        tags.append([TAG_LOCATION, product.location])
    tags.append([TAG_PRICE, product.price, product.currency.value])
    tags.append([APP_TAG_NAME, APP_TAG_VALUE])
    tags.append([TOPIC_TAG_NAME, TOPIC_TAG_VALUE])

    tags.extend([TAG_PAYMENT, method.value] for method in product.payment_methods)
    tags.extend([TAG_DELIVERY, method.value] for method in product.delivery_methods)
    tags.extend([TAG_CATEGORY, category] for category in product.categories)
    tags.extend([TAG_IMAGE, clean_image_url(image) or image] for image in product.images)
    if product.website:
        tags.append([TAG_WEBSITE, product.website])

    content = render_content(
        product.title,
        product.description,
        product.contact_info,
        notes=product.notes,
        website=product.website,
    )
    return EventDraft(
        kind=EventKind.CLASSIFIED_LISTING.value,
        tags=tags,
        content=content,
        created_at=created_at,
    )


def build_withdrawal(identifier: str, title: str, *, created_at: int | None = None) -> EventDraft:
    """Build a replacement listing for *identifier* carrying the deleted marker.

    Published under the same ``d`` identifier, it replaces the original on
    relays, and [decode()][nostrmarket.nips.nip99.codec.decode] skips it.
    """
    if not identifier:
        raise ValueError("identifier must not be empty")
    if created_at is None:
        created_at = int(time())
    tags = [
        [TAG_IDENTIFIER, identifier],
        [TAG_TITLE, title or identifier],
        [APP_TAG_NAME, APP_TAG_VALUE],
        [TOPIC_TAG_NAME, TOPIC_TAG_VALUE],
        [DELETED_TAG_NAME, "true"],
    ]
    return EventDraft(
        kind=EventKind.CLASSIFIED_LISTING.value,
        tags=tags,
        content=f"# {title or identifier}\n\nProducto retirado.",
        created_at=created_at,
    )


# =============================================================================
# Decode
# =============================================================================


def decode(event: Event) -> Product | None:
    """Decode a listing event into a product.

    Returns ``None`` when the event is not a listing of this marketplace
    (wrong kind, missing discriminator or topic tag), carries the deleted
    marker, or lacks a usable title or price.
    """
    if event.kind != EventKind.CLASSIFIED_LISTING:
        return None
    if not event.has_tag(APP_TAG_NAME, APP_TAG_VALUE):
        return None
    if not event.has_tag(TOPIC_TAG_NAME, TOPIC_TAG_VALUE):
        return None
    if event.has_tag(DELETED_TAG_NAME):
        logger.debug("listing_deleted id=%s", event.id)
        return None

    title = (event.first_value(TAG_TITLE) or "").strip()
    price_tag = event.first_tag(TAG_PRICE)
    if not title or price_tag is None:
        logger.debug("listing_incomplete id=%s", event.id)
        return None

    price = price_tag[1].strip()
    currency = _parse_currency(price_tag[2]) if len(price_tag) > 2 else Currency.BTC
    if currency is None or not _is_number(price):
        logger.debug("listing_bad_price id=%s price=%s", event.id, list(price_tag))
        return None

    website = (event.first_value(TAG_WEBSITE) or "").strip() or None
    parsed = parse_content(event.content, website=website)
    images = _unique(
        clean_image_url(value) or value.strip()
        for value in event.tag_values(TAG_IMAGE)
        if value.strip()
    )
    categories = _unique(
        value.strip()
        for value in event.tag_values(TAG_CATEGORY)
        if value.strip() and value.strip() != TOPIC_TAG_VALUE
    )

    return Product(
        id=event.id,
        author_key=event.pubkey,
        identifier=event.first_value(TAG_IDENTIFIER) or slugify(title),
        title=title,
        price=price,
        currency=currency,
        created_at=event.created_at,
        summary=(event.first_value(TAG_SUMMARY) or "").strip(),
        description=parsed.description,
        notes=parsed.notes,
        location=(event.first_value(TAG_LOCATION) or "").strip(),
        payment_methods=_unique_members(event.tag_values(TAG_PAYMENT), PaymentMethod),
        delivery_methods=_unique_members(event.tag_values(TAG_DELIVERY), DeliveryMethod),
        images=images,
        website=website,
        contact_info=parsed.contact_info,
        categories=categories,
        raw_tags=event.tags,
    )


def product_from_input(event: Event, product: ProductInput) -> Product:
    """Build a product from a freshly signed event and the input that produced it.

    Used right after publishing so callers can render the listing without
    decoding it again.
    """
    return Product(
        id=event.id,
        author_key=event.pubkey,
        identifier=event.first_value(TAG_IDENTIFIER) or slugify(product.title),
        title=product.title,
        price=product.price,
        currency=product.currency,
        created_at=event.created_at,
        summary=product.summary,
        description=product.description,
        notes=product.notes,
        location=product.location,
        payment_methods=product.payment_methods,
        delivery_methods=product.delivery_methods,
        images=tuple(event.tag_values(TAG_IMAGE)),
        website=product.website,
        contact_info=product.contact_info,
        categories=product.categories,
        raw_tags=event.tags,
    )
