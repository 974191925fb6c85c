"""Relay orchestration and the marketplace client facade.

Attributes:
    RelayPool: Candidate relays, quorum-gated connect, fan-out publish and
        query.
    MarketplaceClient: ``publish_product``, ``search_products``,
        ``follow_seller``, ``get_followed_sellers``, ``withdraw_product``.
"""

from .marketplace import MarketplaceClient
from .relay_pool import RelayPool


__all__ = [
    "MarketplaceClient",
    "RelayPool",
]
