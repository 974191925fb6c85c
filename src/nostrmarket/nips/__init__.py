"""Nostr protocol implementations used by the marketplace.

Attributes:
    nip99: Classified listings (kind 30402) -- tag codec, content layout,
        input models, and the admission filter for relay events.
    nip02: Contact lists (kind 3) -- following sellers.

Note:
    The nips layer depends only on [nostrmarket.models][nostrmarket.models].
    Everything here is pure; relay I/O lives in
    [nostrmarket.services][nostrmarket.services].
"""

from .nip02 import build_contact_list, followed_pubkeys, latest_contact_list
from .nip99 import ProductInput, SearchFilters, clean_image_url, decode, encode


__all__ = [
    "ProductInput",
    "SearchFilters",
    "build_contact_list",
    "clean_image_url",
    "decode",
    "encode",
    "followed_pubkeys",
    "latest_contact_list",
]
