"""Relay transport: the seam between the marketplace and the network.

[RelayTransport][nostrmarket.utils.transport.RelayTransport] is the
three-operation contract the relay pool depends on: make sure a relay is
connected, publish a signed event, list events matching filter objects.
[NostrSdkTransport][nostrmarket.utils.transport.NostrSdkTransport]
implements it on top of nostr-sdk with one ``Client`` per relay so that a
slow or broken relay never affects the others.

Filter objects are plain dicts in NIP-01 form (``kinds``, ``authors``,
``limit``, ``since``, ``until``, ``#<tag>``, ``search``), combined by AND.
Events cross this seam as wire-shape dicts.
"""

from __future__ import annotations

import contextlib
import json
import logging
from collections.abc import Sequence
from datetime import timedelta
from typing import Any, Final, Protocol, runtime_checkable

from nostr_sdk import Client, ClientBuilder, Filter, RelayUrl
from nostr_sdk import Event as NostrEvent

from nostrmarket.core.exceptions import ConnectivityError
from nostrmarket.models.event import Event


logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT: Final[float] = 10.0


@runtime_checkable
class RelayTransport(Protocol):
    """Network operations the relay pool needs."""

    async def ensure_relay(self, url: str) -> None:
        """Connect to *url* (no-op if already connected).

        Raises:
            ConnectivityError: If the relay cannot be reached.
        """
        ...

    async def publish(self, relay_urls: Sequence[str], event: Event) -> dict[str, bool]:
        """Send *event* to each relay; map every URL to whether it accepted."""
        ...

    async def list(self, relay_urls: Sequence[str], filters: Sequence[dict[str, Any]]) -> list[dict[str, Any]]:
        """Return raw events from *relay_urls* matching any of *filters*."""
        ...

    async def close(self) -> None:
        """Disconnect from every relay."""
        ...


class NostrSdkTransport:
    """[RelayTransport][nostrmarket.utils.transport.RelayTransport] backed by nostr-sdk.

    Clients are read-only: signing happens in the injected signer, and
    already-signed events are forwarded as-is.
    """

    def __init__(self, timeout: float = DEFAULT_TIMEOUT) -> None:
        self._timeout = timeout
        self._clients: dict[str, Client] = {}

    async def ensure_relay(self, url: str) -> None:
        if url in self._clients:
            return

        try:
            relay_url = RelayUrl.parse(url)
            client = ClientBuilder().build()
            await client.add_relay(relay_url)
            output = await client.try_connect(timedelta(seconds=self._timeout))
        except Exception as e:  # nostr-sdk FFI raises its own error type
            raise ConnectivityError(f"Connection failed: {url} ({e})") from e

        if relay_url in output.success:
            logger.debug("relay_connected relay=%s", url)
            self._clients[url] = client
            return

        error_message = output.failed.get(relay_url, "Unknown error")
        # nostr-sdk Rust FFI can raise arbitrary exception types during shutdown.
        with contextlib.suppress(Exception):
            await client.shutdown()
        raise ConnectivityError(f"Connection failed: {url} ({error_message})")

    async def publish(self, relay_urls: Sequence[str], event: Event) -> dict[str, bool]:
        nostr_event = NostrEvent.from_json(event.to_json())
        results: dict[str, bool] = {}
        for url in relay_urls:
            await self.ensure_relay(url)
            try:
                output = await self._clients[url].send_event(nostr_event)
            except Exception as e:  # nostr-sdk FFI raises its own error type
                raise ConnectivityError(f"Publish failed: {url} ({e})") from e
            accepted = RelayUrl.parse(url) in output.success
            if not accepted:
                logger.debug(
                    "publish_rejected relay=%s error=%s",
                    url,
                    output.failed.get(RelayUrl.parse(url), "Unknown error"),
                )
            results[url] = accepted
        return results

    async def list(self, relay_urls: Sequence[str], filters: Sequence[dict[str, Any]]) -> list[dict[str, Any]]:
        raw_events: list[dict[str, Any]] = []
        for url in relay_urls:
            await self.ensure_relay(url)
            client = self._clients[url]
            for relay_filter in filters:
                try:
                    events = await client.fetch_events(
                        Filter.from_json(json.dumps(relay_filter)),
                        timedelta(seconds=self._timeout),
                    )
                except Exception as e:  # nostr-sdk FFI raises its own error type
                    raise ConnectivityError(f"Query failed: {url} ({e})") from e
                for evt in events.to_vec():
                    if evt.verify():
                        raw_events.append(json.loads(evt.as_json()))
                    else:
                        logger.debug("event_bad_signature relay=%s", url)
        return raw_events

    async def close(self) -> None:
        clients, self._clients = self._clients, {}
        for client in clients.values():
            # nostr-sdk Rust FFI can raise arbitrary exception types during shutdown.
            with contextlib.suppress(Exception):
                await client.shutdown()
