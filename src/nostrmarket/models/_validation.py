"""Shared validation helpers for frozen dataclass models.

Private module, not part of the public API. Used by ``__post_init__``
and ``from_dict`` in sibling model modules to enforce the Nostr wire
shape before an instance escapes its constructor.
"""

from __future__ import annotations

import re
from typing import Any


_HEX64 = re.compile(r"^[0-9a-f]{64}$")
_HEX128 = re.compile(r"^[0-9a-f]{128}$")


def validate_instance(value: Any, expected: type, name: str) -> None:
    """Raise ``TypeError`` if *value* is not an instance of *expected*."""
    if not isinstance(value, expected):
        article = "an" if expected.__name__[0] in "AEIOUaeiou" else "a"
        raise TypeError(f"{name} must be {article} {expected.__name__}, got {type(value).__name__}")


def validate_timestamp(value: Any, name: str) -> None:
    """Raise if *value* is not a non-negative ``int`` (``bool`` excluded)."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"{name} must be an int, got {type(value).__name__}")
    if value < 0:
        raise ValueError(f"{name} must be non-negative")


def validate_hex(value: Any, name: str, *, length: int = 64) -> None:
    """Raise if *value* is not a lowercase hex string of *length* characters."""
    validate_instance(value, str, name)
    pattern = _HEX128 if length == 128 else _HEX64
    if not pattern.match(value):
        raise ValueError(f"{name} must be {length} lowercase hex characters")


def validate_tags(value: Any, name: str) -> None:
    """Raise if *value* is not a list of non-empty lists of strings."""
    validate_instance(value, list, name)
    for i, tag in enumerate(value):
        if not isinstance(tag, list) or not tag:
            raise ValueError(f"{name}[{i}] must be a non-empty list")
        for item in tag:
            if not isinstance(item, str):
                raise TypeError(f"{name}[{i}] must contain only strings")


def freeze_tags(tags: list[list[str]]) -> tuple[tuple[str, ...], ...]:
    """Return an immutable copy of a tag list."""
    return tuple(tuple(tag) for tag in tags)
