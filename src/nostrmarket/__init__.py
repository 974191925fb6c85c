r"""nostrmarket -- Nostr marketplace protocol layer.

Publish classified listings (NIP-99, kind 30402) to a set of public relays,
search them back, and follow sellers through NIP-02 contact lists. Relays
are treated as a best-effort quorum: none is authoritative and every piece
of state lives on them.

Architecture follows a **diamond DAG** dependency structure where imports
flow strictly downward:

```text
              services         Relay pool and marketplace client facade
             /   |   \
          core  nips  utils    Config/logging, listing codec, signer/transport
             \   |   /
              models           Pure frozen dataclasses (zero I/O)
```

Attributes:
    models: Events, relays, products, protocol constants.
    core: Configuration, exceptions, structured logging, YAML loading.
    nips: NIP-99 listing codec and admission filter, NIP-02 contact lists.
    utils: Key loading, signers, nostr-sdk relay transport.
    services: ``RelayPool`` and ``MarketplaceClient``.

Note:
    Top-level imports (``from nostrmarket import MarketplaceClient``) use
    lazy loading and resolve on first access.
"""

import importlib
from importlib.metadata import version as _get_version


__version__ = _get_version("nostrmarket")

__all__ = [
    "DisabledSigner",
    "Event",
    "EventDraft",
    "Logger",
    "MarketplaceClient",
    "MarketplaceConfig",
    "NostrMarketError",
    "NostrSdkTransport",
    "Product",
    "ProductInput",
    "PublishedProduct",
    "Relay",
    "RelayPool",
    "SdkSigner",
    "SearchFilters",
    "clean_image_url",
    "decode",
    "encode",
    "is_marketplace_event",
]

_LAZY_IMPORTS: dict[str, tuple[str, str]] = {
    "Logger": ("nostrmarket.core", "Logger"),
    "MarketplaceConfig": ("nostrmarket.core", "MarketplaceConfig"),
    "NostrMarketError": ("nostrmarket.core", "NostrMarketError"),
    "Event": ("nostrmarket.models", "Event"),
    "EventDraft": ("nostrmarket.models", "EventDraft"),
    "Product": ("nostrmarket.models", "Product"),
    "PublishedProduct": ("nostrmarket.models", "PublishedProduct"),
    "Relay": ("nostrmarket.models", "Relay"),
    "ProductInput": ("nostrmarket.nips.nip99", "ProductInput"),
    "SearchFilters": ("nostrmarket.nips.nip99", "SearchFilters"),
    "clean_image_url": ("nostrmarket.nips.nip99", "clean_image_url"),
    "decode": ("nostrmarket.nips.nip99", "decode"),
    "encode": ("nostrmarket.nips.nip99", "encode"),
    "is_marketplace_event": ("nostrmarket.nips.nip99", "is_marketplace_event"),
    "DisabledSigner": ("nostrmarket.utils", "DisabledSigner"),
    "NostrSdkTransport": ("nostrmarket.utils", "NostrSdkTransport"),
    "SdkSigner": ("nostrmarket.utils", "SdkSigner"),
    "MarketplaceClient": ("nostrmarket.services", "MarketplaceClient"),
    "RelayPool": ("nostrmarket.services", "RelayPool"),
}


def __getattr__(name: str) -> object:
    if name in _LAZY_IMPORTS:
        module_path, attr_name = _LAZY_IMPORTS[name]
        module = importlib.import_module(module_path)
        value = getattr(module, attr_name)
        globals()[name] = value
        return value
    raise AttributeError(f"module 'nostrmarket' has no attribute {name!r}")


def __dir__() -> list[str]:
    return __all__
