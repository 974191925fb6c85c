"""Admission filter for raw relay events.

Relays carry unrelated data on the same kind (other NIP-99 clients, spam,
malformed payloads). This module decides which raw events are in-scope
marketplace listings. It prefers precision over recall: dropping a real
but malformed listing is acceptable, surfacing garbage as a product is not.
Rejected events are dropped silently (debug logs only).
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

from nostrmarket.models.constants import (
    APP_TAG_NAME,
    APP_TAG_VALUE,
    TOPIC_TAG_NAME,
    TOPIC_TAG_VALUE,
    EventKind,
)
from nostrmarket.models.event import Event


logger = logging.getLogger(__name__)


def is_marketplace_event(event: Event) -> bool:
    """Whether *event* is an in-scope listing candidate.

    All must hold: marketplace kind, non-empty content, the marketplace
    topic tag, and the application discriminator tag.
    """
    return (
        event.kind == EventKind.CLASSIFIED_LISTING
        and bool(event.content.strip())
        and event.has_tag(TOPIC_TAG_NAME, TOPIC_TAG_VALUE)
        and event.has_tag(APP_TAG_NAME, APP_TAG_VALUE)
    )


def parse_events(raw_events: Iterable[Any]) -> list[Event]:
    """Parse raw relay payloads, dropping malformed ones and duplicate ids.

    The first occurrence of each event id wins, so arrival order is kept.
    """
    events: dict[str, Event] = {}
    for raw in raw_events:
        try:
            event = raw if isinstance(raw, Event) else Event.from_dict(raw)
        except (TypeError, ValueError) as e:
            logger.debug("event_malformed error=%s", e)
            continue
        events.setdefault(event.id, event)
    return list(events.values())


def filter_marketplace_events(raw_events: Iterable[Any]) -> list[Event]:
    """Parse raw payloads and keep only in-scope listing candidates."""
    admitted = []
    for event in parse_events(raw_events):
        if is_marketplace_event(event):
            admitted.append(event)
        else:
            logger.debug("event_rejected id=%s kind=%s", event.id, event.kind)
    return admitted


def latest_by_address(events: Iterable[Event]) -> list[Event]:
    """Keep only the newest version of each replaceable address.

    Ties keep the first arrival. Each kept event sits at its own arrival
    position, so a newer version that arrives late is ordered where it
    arrived rather than where the version it replaced did.
    """
    latest: dict[tuple[int, str, str], Event] = {}
    for event in events:
        current = latest.get(event.address)
        if current is None or event.created_at > current.created_at:
            latest.pop(event.address, None)
            latest[event.address] = event
    return list(latest.values())
