"""
NIP-99 listing input and search filter models.

[ProductInput][nostrmarket.nips.nip99.data.ProductInput] is the validated
form input that the codec turns into a listing event;
[SearchFilters][nostrmarket.nips.nip99.data.SearchFilters] holds the
caller-supplied constraints merged into every marketplace query.

Both accept the camelCase keys sent by browser forms (``contactInfo``,
``paymentMethods``, ``provincia``...) as well as snake_case names.
"""

from __future__ import annotations

import re
from decimal import Decimal, InvalidOperation
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from nostrmarket.models.constants import (
    MAX_IMAGES,
    TOPIC_TAG_VALUE,
    Currency,
    DeliveryMethod,
    EventKind,
    PaymentMethod,
)
from nostrmarket.models.product import Product

from .content import NOTES_HEADING


_SCHEME_RE = re.compile(r"^[a-zA-Z][a-zA-Z0-9+.-]*://")
_LINE_BREAKS_RE = re.compile(r"\s*[\r\n]+\s*")
_HEX_PUBKEY_RE = re.compile(r"^[0-9a-f]{64}$")


def _dedupe_strings(value: Any) -> Any:
    """Strip, drop empties, and de-duplicate a list of strings, keeping order."""
    if value is None:
        return ()
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, (list, tuple, set, frozenset)):
        return value
    seen: dict[Any, None] = {}
    for item in value:
        if isinstance(item, str):
            item = item.strip()
            if not item:
                continue
        seen.setdefault(item, None)
    return tuple(seen)


class ProductInput(BaseModel):
    """Validated product form input.

    Attributes:
        title: Single-line listing title (required).
        description: Description text (required). May not contain the
            notes heading line, which delimits the notes section.
        price: Non-negative decimal number, kept as a string (required).
        currency: ``BTC`` or ``SATS`` (required).
        contact_info: Single-line contact information (required).
        summary: Optional one-line summary.
        notes: Optional "additional notes" section.
        location: Optional free-text location; also accepted as ``provincia``.
        payment_methods: De-duplicated payment methods.
        delivery_methods: De-duplicated delivery methods.
        images: Up to three image URLs.
        website: Optional URL; ``https://`` is prefixed when no scheme is given.
        categories: De-duplicated free-text categories.

    Raises:
        pydantic.ValidationError: If a required field is empty, the price is
            not a non-negative number, or more than three images are given.
    """

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        alias_generator=to_camel,
        str_strip_whitespace=True,
    )

    title: str = Field(min_length=1)
    description: str = Field(min_length=1)
    price: str = Field(min_length=1)
    currency: Currency
    contact_info: str = Field(min_length=1)
    summary: str = ""
    notes: str = ""
    location: str = Field(default="", validation_alias=AliasChoices("location", "provincia"))
    payment_methods: tuple[PaymentMethod, ...] = ()
    delivery_methods: tuple[DeliveryMethod, ...] = ()
    images: tuple[str, ...] = Field(default=(), max_length=MAX_IMAGES)
    website: str | None = None
    categories: tuple[str, ...] = ()

    @field_validator("price", mode="before")
    @classmethod
    def _price_to_str(cls, value: Any) -> Any:
        if isinstance(value, bool):
            raise ValueError("price must be a number")
        if isinstance(value, (int, float, Decimal)):
            return str(value)
        return value

    @field_validator("price")
    @classmethod
    def _price_is_number(cls, value: str) -> str:
        try:
            amount = Decimal(value)
        except InvalidOperation:
            raise ValueError(f"price must be a number, got {value!r}") from None
        if not amount.is_finite() or amount < 0:
            raise ValueError("price must be a non-negative number")
        return value

    @field_validator("currency", mode="before")
    @classmethod
    def _currency_upper(cls, value: Any) -> Any:
        return value.strip().upper() if isinstance(value, str) else value

    @field_validator("title", "contact_info")
    @classmethod
    def _single_line(cls, value: str) -> str:
        return _LINE_BREAKS_RE.sub(" ", value)

    @field_validator("description", "notes")
    @classmethod
    def _no_notes_heading(cls, value: str) -> str:
        if any(line.strip() == NOTES_HEADING for line in value.splitlines()):
            raise ValueError(f"must not contain a {NOTES_HEADING!r} line")
        return value

    @field_validator("payment_methods", "delivery_methods", "images", mode="before")
    @classmethod
    def _dedupe(cls, value: Any) -> Any:
        return _dedupe_strings(value)

    @field_validator("categories", mode="before")
    @classmethod
    def _dedupe_categories(cls, value: Any) -> Any:
        value = _dedupe_strings(value)
        if isinstance(value, tuple):
            return tuple(v for v in value if v != TOPIC_TAG_VALUE)
        return value

    @field_validator("website", mode="before")
    @classmethod
    def _normalize_website(cls, value: Any) -> Any:
        if value is None:
            return None
        if not isinstance(value, str):
            return value
        value = value.strip()
        if not value:
            return None
        if not _SCHEME_RE.match(value):
            value = f"https://{value}"
        return value


class SearchFilters(BaseModel):
    """Caller-supplied constraints for a marketplace search.

    Relay-side constraints (``since``, ``until``, ``authors``, ``limit``,
    ``search``) are merged into the query filter; ``categories`` and
    ``search`` are also matched client-side because most relays ignore
    NIP-50 search.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", str_strip_whitespace=True)

    since: int | None = Field(default=None, ge=0)
    until: int | None = Field(default=None, ge=0)
    authors: tuple[str, ...] = ()
    limit: int | None = Field(default=None, ge=1, le=5000)
    search: str | None = None
    categories: tuple[str, ...] = ()

    @field_validator("authors", "categories", mode="before")
    @classmethod
    def _dedupe(cls, value: Any) -> Any:
        return _dedupe_strings(value)

    @field_validator("authors")
    @classmethod
    def _hex_authors(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        for author in value:
            if not _HEX_PUBKEY_RE.match(author):
                raise ValueError(f"author must be a 64-char lowercase hex public key: {author!r}")
        return value

    @field_validator("search", mode="before")
    @classmethod
    def _empty_search_is_none(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    def to_relay_filter(self, default_limit: int) -> dict[str, Any]:
        """Build the relay filter object: marketplace kind, topic tag, and constraints."""
        relay_filter: dict[str, Any] = {
            "kinds": [EventKind.CLASSIFIED_LISTING.value],
            "#t": [TOPIC_TAG_VALUE],
            "limit": self.limit or default_limit,
        }
        if self.since is not None:
            relay_filter["since"] = self.since
        if self.until is not None:
            relay_filter["until"] = self.until
        if self.authors:
            relay_filter["authors"] = list(self.authors)
        if self.search:
            relay_filter["search"] = self.search
        return relay_filter

    def matches(self, product: Product) -> bool:
        """Apply the client-side category and free-text constraints."""
        if self.categories:
            wanted = {c.lower() for c in self.categories}
            if not wanted.intersection(c.lower() for c in product.categories):
                return False
        if self.search:
            needle = self.search.lower()
            haystack = " ".join(
                (product.title, product.summary, product.description, *product.categories)
            ).lower()
            if needle not in haystack:
                return False
        return True
