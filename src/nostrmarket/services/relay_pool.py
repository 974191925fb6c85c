"""
Relay connection manager with a connection quorum.

[RelayPool][nostrmarket.services.relay_pool.RelayPool] keeps an ordered list
of candidate relays and the subset that answered the last
[connect()][nostrmarket.services.relay_pool.RelayPool.connect]. Per-relay
failures are expected noise in a multi-relay network: they are logged and
skipped. Only falling below the quorum is reported to the caller.

Publishing and querying fan out to every active relay concurrently, each
request under its own timeout, and fan back in once all have answered.

Note:
    The active set is only mutated inside ``connect()``. Concurrent
    ``connect()`` calls on the same pool are not supported.

See Also:
    [RelayTransport][nostrmarket.utils.transport.RelayTransport]: The
        network seam this pool drives.
    [MarketplaceClient][nostrmarket.services.marketplace.MarketplaceClient]:
        Calls ``connect()`` before every relay operation.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Sequence
from typing import Any, TypeVar

from nostrmarket.core.exceptions import ConnectivityError, PublishingError, RelayTimeoutError
from nostrmarket.core.logger import Logger
from nostrmarket.models.event import Event
from nostrmarket.models.relay import Relay
from nostrmarket.utils.transport import DEFAULT_TIMEOUT, RelayTransport


_T = TypeVar("_T")

# Per-relay failures absorbed by the pool. The transport translates
# library-specific errors into ConnectivityError; timeouts surface as
# RelayTimeoutError.
_RELAY_ERRORS = (ConnectivityError, OSError)


async def _bounded(url: str, timeout: float, aw: Awaitable[_T]) -> _T:
    """Await *aw* for relay *url*, raising RelayTimeoutError after *timeout* seconds."""
    try:
        async with asyncio.timeout(timeout):
            return await aw
    except TimeoutError as e:
        raise RelayTimeoutError(url, timeout) from e


class RelayPool:
    """Ordered candidate relays, the active subset, and quorum-gated connect.

    Args:
        candidates: Candidate relay URLs in preference order. Normalized and
            de-duplicated.
        transport: Network implementation.
        min_quorum: Successful connections required by ``connect()``.
        connect_timeout: Seconds allowed per relay connection attempt.
        request_timeout: Seconds allowed per relay publish or query.
        refresh_candidates: If ``True`` (default) every ``connect()`` retries
            the full candidate list. If ``False`` it retries only the relays
            that answered last time, falling back to the full list when none
            did.
        logger: Structured logger; defaults to ``Logger("relay_pool")``.

    Raises:
        ValueError: If there are no candidates, a URL is invalid, or the
            quorum is below 1.

    Examples:
        ```python
        pool = RelayPool(["wss://relay.damus.io", "wss://nos.lol"], transport)
        if await pool.connect():
            accepted = await pool.publish(event)
        ```
    """

    def __init__(
        self,
        candidates: Sequence[str],
        transport: RelayTransport,
        *,
        min_quorum: int = 1,
        connect_timeout: float = DEFAULT_TIMEOUT,
        request_timeout: float = DEFAULT_TIMEOUT,
        refresh_candidates: bool = True,
        logger: Logger | None = None,
    ) -> None:
        urls = list(dict.fromkeys(Relay(url).url for url in candidates))
        if not urls:
            raise ValueError("at least one candidate relay is required")
        if min_quorum < 1:
            raise ValueError(f"min_quorum must be >= 1, got {min_quorum}")

        self._candidates: tuple[str, ...] = tuple(urls)
        self._active: list[str] = []
        self._transport = transport
        self._min_quorum = min_quorum
        self._connect_timeout = connect_timeout
        self._request_timeout = request_timeout
        self._refresh_candidates = refresh_candidates
        self._logger = logger if logger is not None else Logger("relay_pool")

    @property
    def candidates(self) -> tuple[str, ...]:
        """Candidate relay URLs in preference order."""
        return self._candidates

    @property
    def active_relays(self) -> tuple[str, ...]:
        """Relays that connected during the last ``connect()``."""
        return tuple(self._active)

    @property
    def min_quorum(self) -> int:
        return self._min_quorum

    # -------------------------------------------------------------------------
    # Connect
    # -------------------------------------------------------------------------

    async def connect(self) -> bool:
        """Connect to relays in order until the quorum is reached.

        Each relay is tried at most once per call; a failure or timeout is
        logged and the next candidate is tried. The active set is replaced
        with exactly the relays that connected.

        Returns:
            ``True`` if at least ``min_quorum`` relays connected.
        """
        if self._refresh_candidates or not self._active:
            targets = list(self._candidates)
        else:
            targets = list(self._active)

        connected: list[str] = []
        for url in targets:
            try:
                await _bounded(url, self._connect_timeout, self._transport.ensure_relay(url))
            except RelayTimeoutError as e:
                self._logger.warning("connect_timeout", relay=url, timeout_s=e.timeout)
                continue
            except _RELAY_ERRORS as e:
                self._logger.warning("connect_failed", relay=url, error=str(e))
                continue

            connected.append(url)
            if len(connected) >= self._min_quorum:
                break

        self._active = connected
        quorum_met = len(connected) >= self._min_quorum
        if quorum_met:
            self._logger.debug("connect_completed", connected=len(connected), quorum=self._min_quorum)
        else:
            self._logger.warning(
                "quorum_not_met",
                connected=len(connected),
                quorum=self._min_quorum,
                tried=len(targets),
            )
        return quorum_met

    # -------------------------------------------------------------------------
    # Publish
    # -------------------------------------------------------------------------

    async def publish(self, event: Event) -> list[str]:
        """Broadcast *event* to every active relay concurrently.

        Returns:
            URLs of the relays that accepted the event, in active order.

        Raises:
            PublishingError: If there are no active relays or every relay
                rejected the event.
        """
        relays = list(self._active)
        if not relays:
            raise PublishingError("No active relays to publish to; connect() first")

        errors = await asyncio.gather(*(self._publish_one(url, event) for url in relays))
        accepted = [url for url, error in zip(relays, errors, strict=True) if error is None]
        failed = {url: error for url, error in zip(relays, errors, strict=True) if error is not None}

        for url, error in failed.items():
            self._logger.warning("publish_failed", relay=url, event_id=event.id, error=error)

        if not accepted:
            raise PublishingError(
                f"Event {event.id} was rejected by all {len(relays)} relay(s)",
                failed=failed,
            )
        return accepted

    async def _publish_one(self, url: str, event: Event) -> str | None:
        """Publish to a single relay; return ``None`` on success, else the reason."""
        try:
            acks = await _bounded(url, self._request_timeout, self._transport.publish([url], event))
        except _RELAY_ERRORS as e:
            return str(e) or type(e).__name__
        return None if acks.get(url) else "rejected"

    # -------------------------------------------------------------------------
    # Query
    # -------------------------------------------------------------------------

    async def query(self, filters: Sequence[dict[str, Any]]) -> list[dict[str, Any]]:
        """Fetch raw events matching *filters* from every active relay.

        Relays that fail or time out contribute nothing. Results are merged
        in active relay order and may contain the same event more than once.
        """
        relays = list(self._active)
        batches = await asyncio.gather(*(self._query_one(url, filters) for url in relays))
        return [raw for batch in batches for raw in batch]

    async def _query_one(self, url: str, filters: Sequence[dict[str, Any]]) -> list[dict[str, Any]]:
        try:
            raw_events = await _bounded(url, self._request_timeout, self._transport.list([url], filters))
        except RelayTimeoutError as e:
            self._logger.warning("query_timeout", relay=url, timeout_s=e.timeout)
            return []
        except _RELAY_ERRORS as e:
            self._logger.warning("query_failed", relay=url, error=str(e))
            return []
        self._logger.debug("query_completed", relay=url, events=len(raw_events))
        return list(raw_events)

    async def close(self) -> None:
        """Close every relay connection and clear the active set."""
        self._active = []
        await self._transport.close()
