"""
Pytest configuration and shared fixtures for nostrmarket tests.

Provides:
- FakeSigner: deterministic in-memory signer (no key material)
- FakeTransport: in-memory relay network with unreachable/rejecting relays
- Raw event builders for listing and contact-list payloads
- Sample product input and client fixtures
"""

from __future__ import annotations

import hashlib
import json
import logging
from collections.abc import Iterable, Sequence
from typing import Any

import pytest

from nostrmarket.core.config import MarketplaceConfig
from nostrmarket.core.exceptions import ConnectivityError
from nostrmarket.models.constants import EventKind
from nostrmarket.models.event import Event, EventDraft
from nostrmarket.nips.nip99 import ProductInput
from nostrmarket.services.marketplace import MarketplaceClient


# ============================================================================
# Constants
# ============================================================================

PUBKEY = "a" * 64
OTHER_PUBKEY = "b" * 64
THIRD_PUBKEY = "c" * 64
SIG = "f" * 128

RELAYS = [
    "wss://relay1.example.com",
    "wss://relay2.example.com",
    "wss://relay3.example.com",
]


# ============================================================================
# Logging Configuration
# ============================================================================


@pytest.fixture(scope="session", autouse=True)
def setup_logging() -> None:
    """Configure logging for tests."""
    logging.basicConfig(level=logging.DEBUG)


# ============================================================================
# Event Builders
# ============================================================================


def event_id(pubkey: str, created_at: int, kind: int, tags: Any, content: str) -> str:
    """NIP-01 style id over the serialized event fields."""
    payload = json.dumps([0, pubkey, created_at, kind, tags, content], ensure_ascii=False)
    return hashlib.sha256(payload.encode()).hexdigest()


def make_raw_event(
    *,
    kind: int = EventKind.CLASSIFIED_LISTING.value,
    tags: list[list[str]] | None = None,
    content: str = "# Bicicleta\n\nPoco uso\n\n📞 Contacto: alice@example.com",
    created_at: int = 1_700_000_000,
    pubkey: str = PUBKEY,
) -> dict[str, Any]:
    """Build a wire-shape event dict with a deterministic id."""
    tags = tags if tags is not None else listing_tags()
    return {
        "id": event_id(pubkey, created_at, kind, tags, content),
        "pubkey": pubkey,
        "created_at": created_at,
        "kind": kind,
        "tags": tags,
        "content": content,
        "sig": SIG,
    }


def listing_tags(
    title: str = "Bicicleta",
    *,
    price: str = "100",
    currency: str = "SATS",
    extra: Iterable[list[str]] = (),
) -> list[list[str]]:
    """Minimal valid listing tags, plus *extra*."""
    return [
        ["d", title.lower().replace(" ", "-")],
        ["title", title],
        ["price", price, currency],
        ["client", "nostrmarketplace"],
        ["t", "nostrmarketplace"],
        *[list(tag) for tag in extra],
    ]


def make_listing(
    title: str = "Bicicleta",
    *,
    created_at: int = 1_700_000_000,
    pubkey: str = PUBKEY,
    extra: Iterable[list[str]] = (),
    content: str | None = None,
) -> dict[str, Any]:
    """Build a raw marketplace listing event."""
    return make_raw_event(
        tags=listing_tags(title, extra=extra),
        content=content if content is not None else f"# {title}\n\nDescripción\n\n📞 Contacto: alice@example.com",
        created_at=created_at,
        pubkey=pubkey,
    )


def make_contact_list(
    follows: Sequence[str], *, pubkey: str = PUBKEY, created_at: int = 1_700_000_000
) -> dict[str, Any]:
    """Build a raw kind 3 contact list event."""
    return make_raw_event(
        kind=EventKind.CONTACTS.value,
        tags=[["p", follow] for follow in follows],
        content="",
        created_at=created_at,
        pubkey=pubkey,
    )


def sign_draft(draft: EventDraft, *, pubkey: str = PUBKEY) -> Event:
    """Turn a draft into a signed-looking event (fixed signature)."""
    tags = [list(tag) for tag in draft.tags]
    return Event(
        id=event_id(pubkey, draft.created_at, draft.kind, tags, draft.content),
        pubkey=pubkey,
        created_at=draft.created_at,
        kind=draft.kind,
        tags=draft.tags,
        content=draft.content,
        sig=SIG,
    )


# ============================================================================
# Fakes
# ============================================================================


class FakeSigner:
    """Signer that signs drafts deterministically and records them."""

    def __init__(self, pubkey: str = PUBKEY) -> None:
        self.pubkey = pubkey
        self.signed: list[EventDraft] = []

    async def get_public_key(self) -> str:
        return self.pubkey

    async def sign_event(self, draft: EventDraft) -> Event:
        self.signed.append(draft)
        return sign_draft(draft, pubkey=self.pubkey)


class FakeTransport:
    """In-memory relay network.

    Args:
        reachable: Relays that accept connections (``None`` means all).
        events: Raw events stored per relay URL.
        rejecting: Relays that refuse published events.
    """

    def __init__(
        self,
        *,
        reachable: Iterable[str] | None = None,
        events: dict[str, list[dict[str, Any]]] | None = None,
        rejecting: Iterable[str] = (),
    ) -> None:
        self.reachable = set(reachable) if reachable is not None else None
        self.events = events if events is not None else {}
        self.rejecting = set(rejecting)
        self.connect_attempts: list[str] = []
        self.published: list[tuple[str, Event]] = []
        self.queries: list[tuple[str, list[dict[str, Any]]]] = []
        self.closed = False

    async def ensure_relay(self, url: str) -> None:
        self.connect_attempts.append(url)
        if self.reachable is not None and url not in self.reachable:
            raise ConnectivityError(f"Connection failed: {url}")

    async def publish(self, relay_urls: Sequence[str], event: Event) -> dict[str, bool]:
        results: dict[str, bool] = {}
        for url in relay_urls:
            self.published.append((url, event))
            accepted = url not in self.rejecting
            if accepted:
                self.events.setdefault(url, []).append(event.to_dict())
            results[url] = accepted
        return results

    async def list(self, relay_urls: Sequence[str], filters: Sequence[dict[str, Any]]) -> list[dict[str, Any]]:
        raw: list[dict[str, Any]] = []
        for url in relay_urls:
            self.queries.append((url, list(filters)))
            raw.extend(self.events.get(url, []))
        return raw

    async def close(self) -> None:
        self.closed = True


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def relays() -> list[str]:
    """Three candidate relay URLs (already normalized)."""
    return list(RELAYS)


@pytest.fixture
def fake_signer() -> FakeSigner:
    return FakeSigner()


@pytest.fixture
def fake_transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def config(relays: list[str]) -> MarketplaceConfig:
    """Client configuration pointing at the fake relays."""
    return MarketplaceConfig.from_dict(
        {"relays": {"urls": relays}, "timeouts": {"connect": 1.0, "request": 1.0}}
    )


@pytest.fixture
def client(
    fake_signer: FakeSigner, fake_transport: FakeTransport, config: MarketplaceConfig
) -> MarketplaceClient:
    return MarketplaceClient(signer=fake_signer, transport=fake_transport, config=config)


@pytest.fixture
def product_input() -> ProductInput:
    """A complete product as submitted by the listing form."""
    return ProductInput.model_validate(
        {
            "title": "Bicicleta de montaña",
            "summary": "Rodado 29, poco uso",
            "description": "Cuadro de aluminio, frenos de disco.",
            "notes": "Incluye casco.",
            "price": "250000",
            "currency": "SATS",
            "provincia": "Córdoba",
            "paymentMethods": ["Lightning", "On-chain Bitcoin"],
            "deliveryMethods": ["Presencial", "Envio"],
            "images": ["https://img.example.com/bici.jpg?w=600"],
            "website": "tienda.example.com",
            "contactInfo": "alice@example.com",
            "categories": ["deportes", "bicicletas"],
        }
    )
