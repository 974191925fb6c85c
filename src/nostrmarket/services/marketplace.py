"""
Marketplace client facade: publish, search, follow.

[MarketplaceClient][nostrmarket.services.marketplace.MarketplaceClient] is
the only entry point UI code needs. Every operation is a short async
pipeline over a [RelayPool][nostrmarket.services.relay_pool.RelayPool]:

* ``publish_product``: connect, encode, sign, broadcast.
* ``search_products``: connect, query, admit, decode, sort (never raises).
* ``follow_seller``: connect, merge into the contact list, sign, broadcast.
* ``get_followed_sellers``: read the caller's newest contact list.
* ``withdraw_product``: replace a listing with a deleted marker.

Signing is delegated to an injected
[Signer][nostrmarket.utils.signer.Signer]; the client never holds private
key material.

Examples:
    ```python
    signer = SdkSigner.from_env()
    async with MarketplaceClient.from_yaml("config.yaml", signer=signer) as client:
        published = await client.publish_product({
            "title": "Bicicleta",
            "description": "Poco uso",
            "price": "250000",
            "currency": "SATS",
            "contactInfo": "alice@example.com",
        })
        products = await client.search_products({"search": "bici"})
    ```
"""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from types import TracebackType
from typing import Any, ClassVar, Self

from nostrmarket.core.config import MarketplaceConfig
from nostrmarket.core.exceptions import ConnectivityError, QuorumNotMetError
from nostrmarket.core.logger import Logger
from nostrmarket.models.constants import EventKind
from nostrmarket.models.event import Event
from nostrmarket.models.product import Product, PublishedProduct
from nostrmarket.nips.nip02 import build_contact_list, followed_pubkeys, latest_contact_list
from nostrmarket.nips.nip99 import (
    ProductInput,
    SearchFilters,
    build_withdrawal,
    decode,
    encode,
    filter_marketplace_events,
    latest_by_address,
    parse_events,
    product_from_input,
)
from nostrmarket.utils.keys import normalize_public_key
from nostrmarket.utils.signer import DisabledSigner, Signer
from nostrmarket.utils.transport import NostrSdkTransport, RelayTransport

from .relay_pool import RelayPool


class MarketplaceClient:
    """Publish and discover marketplace listings over Nostr relays.

    Args:
        signer: Signing capability. Defaults to
            [DisabledSigner][nostrmarket.utils.signer.DisabledSigner], which
            makes the client read-only.
        transport: Relay transport. Defaults to
            [NostrSdkTransport][nostrmarket.utils.transport.NostrSdkTransport].
        config: Client configuration. Defaults to ``MarketplaceConfig()``.

    Error policy:
        Per-relay connectivity problems and malformed events are logged and
        absorbed. Missing or refused signatures, an unmet quorum, and a
        broadcast no relay accepted are raised to the caller. Searches never
        raise; they return an empty list instead.
    """

    SERVICE_NAME: ClassVar[str] = "marketplace"

    def __init__(
        self,
        signer: Signer | None = None,
        transport: RelayTransport | None = None,
        config: MarketplaceConfig | None = None,
    ) -> None:
        self._config = config if config is not None else MarketplaceConfig()
        self._signer: Signer = signer if signer is not None else DisabledSigner()
        json_output = self._config.logging.json_output
        self._logger = Logger(self.SERVICE_NAME, json_output=json_output)

        if transport is None:
            transport = NostrSdkTransport(timeout=self._config.timeouts.connect)
        self._pool = RelayPool(
            self._config.relays.urls,
            transport,
            min_quorum=self._config.relays.min_quorum,
            connect_timeout=self._config.timeouts.connect,
            request_timeout=self._config.timeouts.request,
            refresh_candidates=self._config.relays.refresh_candidates,
            logger=Logger("relay_pool", json_output=json_output),
        )

    # -------------------------------------------------------------------------
    # Factory Methods
    # -------------------------------------------------------------------------

    @classmethod
    def from_yaml(
        cls,
        config_path: str | Path,
        *,
        signer: Signer | None = None,
        transport: RelayTransport | None = None,
    ) -> Self:
        """Create a client from a YAML configuration file."""
        return cls(signer=signer, transport=transport, config=MarketplaceConfig.from_yaml(config_path))

    @classmethod
    def from_dict(
        cls,
        data: dict[str, Any],
        *,
        signer: Signer | None = None,
        transport: RelayTransport | None = None,
    ) -> Self:
        """Create a client from a configuration dictionary."""
        return cls(signer=signer, transport=transport, config=MarketplaceConfig.from_dict(data))

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------

    @property
    def config(self) -> MarketplaceConfig:
        return self._config

    @property
    def signer(self) -> Signer:
        return self._signer

    @property
    def pool(self) -> RelayPool:
        return self._pool

    # -------------------------------------------------------------------------
    # Context Manager
    # -------------------------------------------------------------------------

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.close()

    async def close(self) -> None:
        """Close all relay connections."""
        await self._pool.close()

    # -------------------------------------------------------------------------
    # Operations
    # -------------------------------------------------------------------------

    async def publish_product(self, product: ProductInput | Mapping[str, Any]) -> PublishedProduct:
        """Encode, sign, and broadcast a listing.

        Args:
            product: Validated input, or a mapping (camelCase or snake_case
                keys) validated into one.

        Returns:
            The signed event plus a product view built from *product*.

        Raises:
            pydantic.ValidationError: If *product* is not a valid listing.
            QuorumNotMetError: If too few relays are reachable.
            SigningError: If no signer is configured or it refuses.
            PublishingError: If no relay accepted the event.
        """
        if not isinstance(product, ProductInput):
            product = ProductInput.model_validate(product)

        await self._connect()
        draft = encode(product, unique_identifier=self._config.listing.unique_identifiers)
        event = await self._signer.sign_event(draft)
        accepted = await self._pool.publish(event)

        published = PublishedProduct(event=event, product=product_from_input(event, product))
        self._logger.info(
            "product_published",
            event_id=event.id,
            address=published.product.address,
            relays=len(accepted),
        )
        return published

    async def search_products(
        self, filters: SearchFilters | Mapping[str, Any] | None = None
    ) -> list[Product]:
        """Return marketplace listings, newest first.

        Events are de-duplicated by id, filtered to marketplace listings,
        reduced to the newest version of each listing, decoded, matched
        against the category and text constraints, then stable-sorted by
        ``created_at`` descending.

        Any failure (invalid filters, unmet quorum, relay trouble) is logged
        and yields an empty list.
        """
        try:
            if filters is None:
                filters = SearchFilters()
            elif not isinstance(filters, SearchFilters):
                filters = SearchFilters.model_validate(filters)
            return await self._search(filters)
        except Exception as e:
            self._logger.warning("search_failed", error=str(e), error_type=type(e).__name__)
            return []

    async def _search(self, filters: SearchFilters) -> list[Product]:
        await self._connect()
        raw_events = await self._pool.query([filters.to_relay_filter(self._config.search.limit)])

        events = latest_by_address(filter_marketplace_events(raw_events))
        products = [
            product
            for product in map(decode, events)
            if product is not None and filters.matches(product)
        ]
        products.sort(key=lambda product: product.created_at, reverse=True)

        self._logger.debug(
            "search_completed", received=len(raw_events), admitted=len(events), results=len(products)
        )
        return products

    async def follow_seller(self, pubkey: str) -> Event:
        """Add *pubkey* (hex or npub) to the caller's contact list.

        The caller's newest contact list is read first (best effort) so
        earlier follows are kept.

        Raises:
            ValueError: If *pubkey* is not a valid public key.
            QuorumNotMetError: If too few relays are reachable.
            SigningError: If no signer is configured or it refuses.
            PublishingError: If no relay accepted the event.
        """
        target = normalize_public_key(pubkey)
        await self._connect()

        author = await self._signer.get_public_key()
        current = followed_pubkeys(await self._latest_contact_list(author))
        draft = build_contact_list([*current, target])
        event = await self._signer.sign_event(draft)
        await self._pool.publish(event)

        self._logger.info("seller_followed", seller=target, follows=len(draft.tags))
        return event

    async def get_followed_sellers(self) -> set[str]:
        """Return the public keys in the caller's newest contact list.

        Unreachable relays yield an empty set.

        Raises:
            SigningError: If no signer is configured.
        """
        author = await self._signer.get_public_key()
        try:
            await self._connect()
        except ConnectivityError as e:
            self._logger.warning("followed_sellers_unavailable", error=str(e))
            return set()
        return set(followed_pubkeys(await self._latest_contact_list(author)))

    async def withdraw_product(self, identifier: str, title: str = "") -> Event:
        """Replace the caller's listing *identifier* with a deleted marker.

        Searches skip the listing once relays store the replacement.

        Raises:
            ValueError: If *identifier* is empty.
            QuorumNotMetError: If too few relays are reachable.
            SigningError: If no signer is configured or it refuses.
            PublishingError: If no relay accepted the event.
        """
        draft = build_withdrawal(identifier, title)
        await self._connect()
        event = await self._signer.sign_event(draft)
        await self._pool.publish(event)

        self._logger.info("product_withdrawn", event_id=event.id, identifier=identifier)
        return event

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    async def _connect(self) -> None:
        if not await self._pool.connect():
            raise QuorumNotMetError(len(self._pool.active_relays), self._pool.min_quorum)

    async def _latest_contact_list(self, author: str) -> Event | None:
        raw_events = await self._pool.query(
            [{"kinds": [EventKind.CONTACTS.value], "authors": [author], "limit": 1}]
        )
        return latest_contact_list(parse_events(raw_events), author)
