"""Nostr key loading and public key normalization.

Private keys are only ever read from environment variables and handed
straight to nostr-sdk; the library never stores or derives key material
itself.

Warning:
    Private keys must **never** be stored in configuration files, source
    code, or logged to any output.

Examples:
    ```python
    import os

    os.environ["NOSTR_PRIVATE_KEY"] = "nsec1..."  # pragma: allowlist secret
    keys = load_keys_from_env("NOSTR_PRIVATE_KEY")
    ```
"""

from __future__ import annotations

import os
import re
from typing import Any

from nostr_sdk import Keys, PublicKey
from pydantic import BaseModel, Field, model_validator


ENV_PRIVATE_KEY = "NOSTR_PRIVATE_KEY"  # pragma: allowlist secret  # Default env var name

_HEX_PUBKEY_RE = re.compile(r"^[0-9a-fA-F]{64}$")


def load_keys_from_env(env_var: str = ENV_PRIVATE_KEY) -> Keys:
    """Load Nostr keys from an environment variable (nsec1 bech32 or hex).

    Raises:
        ValueError: If the environment variable is not set or is empty.
    """
    value = os.getenv(env_var)

    if not value:
        raise ValueError(f"{env_var} environment variable is required to sign events")

    return Keys.parse(value)


def normalize_public_key(value: str) -> str:
    """Return *value* (hex or ``npub1...``) as 64 lowercase hex characters.

    Raises:
        ValueError: If *value* is not a valid public key.
    """
    value = value.strip()
    if _HEX_PUBKEY_RE.match(value):
        return value.lower()
    try:
        return PublicKey.parse(value).to_hex()
    except Exception as e:  # nostr-sdk FFI raises its own error type
        raise ValueError(f"Invalid public key: {value!r}") from e


class KeysConfig(BaseModel):
    """Pydantic model that auto-loads Nostr keys from an environment variable.

    Warning:
        The ``keys`` field contains a live private key. Do not serialize this
        model to logs, JSON, or any persistent storage.
    """

    model_config = {"arbitrary_types_allowed": True}

    keys_env: str = Field(
        default=ENV_PRIVATE_KEY,
        min_length=1,
        description="Environment variable name for private key",
    )
    keys: Keys = Field(description="Keys loaded from keys_env (required)")

    @model_validator(mode="before")
    @classmethod
    def _load_keys_from_env(cls, data: Any) -> Any:
        """Auto-populate the ``keys`` field from the environment variable."""
        if isinstance(data, dict) and "keys" not in data:
            env_var = data.get("keys_env", ENV_PRIVATE_KEY)
            data = {**data, "keys": load_keys_from_env(env_var)}
        return data
