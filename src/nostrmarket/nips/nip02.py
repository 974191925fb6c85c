"""NIP-02 contact lists, used to follow sellers.

A contact list is a replaceable kind 3 event whose ``p`` tags name the
followed public keys. Only the newest list of an author is authoritative.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from time import time

from nostrmarket.models.constants import TAG_PUBKEY, EventKind
from nostrmarket.models.event import Event, EventDraft


_HEX_PUBKEY_RE = re.compile(r"^[0-9a-f]{64}$")


def build_contact_list(pubkeys: Iterable[str], *, created_at: int | None = None) -> EventDraft:
    """Build an unsigned contact list with one ``p`` tag per public key.

    Raises:
        ValueError: If a key is not 64 lowercase hex characters.
    """
    tags: list[list[str]] = []
    for pubkey in dict.fromkeys(pubkeys):
        if not _HEX_PUBKEY_RE.match(pubkey):
            raise ValueError(f"Invalid public key: {pubkey!r}")
        tags.append([TAG_PUBKEY, pubkey])
    return EventDraft(
        kind=EventKind.CONTACTS.value,
        tags=tags,
        content="",
        created_at=int(time()) if created_at is None else created_at,
    )


def latest_contact_list(events: Iterable[Event], author: str) -> Event | None:
    """Return the newest contact list authored by *author*, if any."""
    newest: Event | None = None
    for event in events:
        if event.kind != EventKind.CONTACTS or event.pubkey != author:
            continue
        if newest is None or event.created_at > newest.created_at:
            newest = event
    return newest


def followed_pubkeys(event: Event | None) -> list[str]:
    """Return the de-duplicated, well-formed ``p`` tag values of a contact list."""
    if event is None:
        return []
    return list(
        dict.fromkeys(v for v in event.tag_values(TAG_PUBKEY) if _HEX_PUBKEY_RE.match(v))
    )
