"""
Immutable Nostr event models matching the NIP-01 wire shape.

[Event][nostrmarket.models.event.Event] is a signed event as it travels to
and from relays; [EventDraft][nostrmarket.models.event.EventDraft] is the
unsigned ``{kind, tags, content, created_at}`` produced by the tag codec and
handed to a signer.

Relays carry arbitrary data, so
[Event.from_dict()][nostrmarket.models.event.Event.from_dict] validates the
full shape eagerly and raises on any mismatch. Callers in the search path
treat those errors as "drop this event".

See Also:
    [nostrmarket.nips.nip99.validator][]: Drops malformed events during search.
    [nostrmarket.utils.signer][]: Turns an ``EventDraft`` into an ``Event``.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from time import time
from typing import Any

from ._validation import (
    freeze_tags,
    validate_hex,
    validate_instance,
    validate_tags,
    validate_timestamp,
)
from .constants import EVENT_KIND_MAX


Tags = tuple[tuple[str, ...], ...]

_WIRE_FIELDS = ("id", "pubkey", "created_at", "kind", "tags", "content", "sig")


class _TagAccess:
    """Tag lookup helpers shared by signed and unsigned events."""

    __slots__ = ()

    tags: Tags

    def first_tag(self, name: str) -> tuple[str, ...] | None:
        """Return the first tag named *name* that carries a value, if any."""
        for tag in self.tags:
            if tag[0] == name and len(tag) >= 2:
                return tag
        return None

    def first_value(self, name: str) -> str | None:
        """Return the value of the first tag named *name* (first wins)."""
        tag = self.first_tag(name)
        return tag[1] if tag is not None else None

    def tag_values(self, name: str) -> list[str]:
        """Return the values of every tag named *name*, in tag order."""
        return [tag[1] for tag in self.tags if tag[0] == name and len(tag) >= 2]

    def has_tag(self, name: str, value: str | None = None) -> bool:
        """Whether a tag named *name* (optionally with *value*) is present."""
        if value is None:
            return any(tag[0] == name for tag in self.tags)
        return value in self.tag_values(name)


@dataclass(frozen=True, slots=True)
class EventDraft(_TagAccess):
    """Unsigned event produced by the codec and passed to a signer.

    Attributes:
        kind: Integer event kind.
        tags: Ordered tag list (stored as tuples, exported as lists).
        content: Event content string.
        created_at: Unix timestamp in seconds.
    """

    kind: int
    tags: Tags
    content: str
    created_at: int = field(default_factory=lambda: int(time()))

    def __post_init__(self) -> None:
        validate_timestamp(self.kind, "kind")
        if self.kind > EVENT_KIND_MAX:
            raise ValueError(f"kind must be <= {EVENT_KIND_MAX}")
        validate_instance(self.content, str, "content")
        validate_timestamp(self.created_at, "created_at")
        if not isinstance(self.tags, tuple):
            validate_tags(self.tags, "tags")
            object.__setattr__(self, "tags", freeze_tags(self.tags))

    def to_dict(self) -> dict[str, Any]:
        """Return the unsigned event as a JSON-ready dict."""
        return {
            "kind": self.kind,
            "created_at": self.created_at,
            "tags": [list(tag) for tag in self.tags],
            "content": self.content,
        }


@dataclass(frozen=True, slots=True)
class Event(_TagAccess):
    """Immutable signed Nostr event.

    Signature verification is not performed here; it belongs to the
    transport that received the event.

    Raises:
        TypeError: If a field has the wrong type.
        ValueError: If a field is out of range or not hex-encoded.

    Examples:
        ```python
        event = Event.from_dict(relay_payload)
        event.first_value("title")
        event.to_dict()  # bit-exact wire shape
        ```
    """

    id: str
    pubkey: str
    created_at: int
    kind: int
    tags: Tags
    content: str
    sig: str

    def __post_init__(self) -> None:
        validate_hex(self.id, "id")
        validate_hex(self.pubkey, "pubkey")
        validate_hex(self.sig, "sig", length=128)
        validate_timestamp(self.created_at, "created_at")
        validate_timestamp(self.kind, "kind")
        if self.kind > EVENT_KIND_MAX:
            raise ValueError(f"kind must be <= {EVENT_KIND_MAX}")
        validate_instance(self.content, str, "content")
        if not isinstance(self.tags, tuple):
            validate_tags(self.tags, "tags")
            object.__setattr__(self, "tags", freeze_tags(self.tags))

    @classmethod
    def from_dict(cls, data: Any) -> Event:
        """Build an event from a relay payload, validating its shape.

        Raises:
            TypeError: If *data* is not a mapping or a field has the wrong type.
            ValueError: If a required field is missing or invalid.
        """
        validate_instance(data, dict, "event")
        missing = [k for k in _WIRE_FIELDS if k not in data]
        if missing:
            raise ValueError(f"event is missing fields: {', '.join(missing)}")
        validate_tags(data["tags"], "tags")
        return cls(
            id=data["id"],
            pubkey=data["pubkey"],
            created_at=data["created_at"],
            kind=data["kind"],
            tags=freeze_tags(data["tags"]),
            content=data["content"],
            sig=data["sig"],
        )

    @classmethod
    def from_json(cls, raw: str) -> Event:
        """Build an event from its JSON serialization."""
        return cls.from_dict(json.loads(raw))

    def to_dict(self) -> dict[str, Any]:
        """Return the NIP-01 wire shape."""
        return {
            "id": self.id,
            "pubkey": self.pubkey,
            "created_at": self.created_at,
            "kind": self.kind,
            "tags": [list(tag) for tag in self.tags],
            "content": self.content,
            "sig": self.sig,
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False)

    @property
    def address(self) -> tuple[int, str, str]:
        """Replaceable-event address: ``(kind, pubkey, d-identifier)``."""
        return (self.kind, self.pubkey, self.first_value("d") or "")
