"""
Signing capability injected into the marketplace client.

The client never touches private keys. It asks a
[Signer][nostrmarket.utils.signer.Signer] for the user's public key and for
signatures, and treats any refusal as a failure of the user action that
triggered it.

Variants:

* [SdkSigner][nostrmarket.utils.signer.SdkSigner] -- backed by a
  ``nostr_sdk.NostrSigner`` (local keys, or any remote signer nostr-sdk
  supports).
* [DisabledSigner][nostrmarket.utils.signer.DisabledSigner] -- read-only
  clients; every call raises
  [SignerUnavailableError][nostrmarket.core.exceptions.SignerUnavailableError].
"""

from __future__ import annotations

from typing import Protocol, Self, runtime_checkable

from nostr_sdk import EventBuilder, Keys, Kind, NostrSigner, Tag, Timestamp

from nostrmarket.core.exceptions import (
    SignerUnavailableError,
    SigningError,
    SigningRejectedError,
)
from nostrmarket.models.event import Event, EventDraft

from .keys import ENV_PRIVATE_KEY, KeysConfig


@runtime_checkable
class Signer(Protocol):
    """Asynchronous, user-confirmable signing capability."""

    async def get_public_key(self) -> str:
        """Return the user's public key as 64 lowercase hex characters."""
        ...

    async def sign_event(self, draft: EventDraft) -> Event:
        """Sign *draft* and return the complete event (id, pubkey, sig)."""
        ...


class DisabledSigner:
    """Signer for read-only clients: every request fails loudly."""

    _MESSAGE = "No Nostr signer configured; connect a signer or load a private key to continue"

    async def get_public_key(self) -> str:
        raise SignerUnavailableError(self._MESSAGE)

    async def sign_event(self, draft: EventDraft) -> Event:
        raise SignerUnavailableError(self._MESSAGE)


class SdkSigner:
    """Signer backed by a ``nostr_sdk.NostrSigner``.

    Examples:
        ```python
        signer = SdkSigner.from_keys(Keys.generate())
        event = await signer.sign_event(draft)
        ```
    """

    def __init__(self, signer: NostrSigner) -> None:
        self._signer = signer

    @classmethod
    def from_keys(cls, keys: Keys) -> Self:
        """Sign with local keys."""
        return cls(NostrSigner.keys(keys))

    @classmethod
    def from_env(cls, env_var: str = ENV_PRIVATE_KEY) -> Self:
        """Sign with keys loaded from an environment variable."""
        return cls.from_keys(KeysConfig(keys_env=env_var).keys)

    async def get_public_key(self) -> str:
        try:
            public_key = await self._signer.get_public_key()
        except Exception as e:  # nostr-sdk FFI raises its own error type
            raise SigningError(f"Signer did not return a public key: {e}") from e
        return public_key.to_hex()

    async def sign_event(self, draft: EventDraft) -> Event:
        """Sign *draft*, preserving its kind, tags, content, and timestamp.

        Raises:
            SigningError: If the public key cannot be obtained.
            SigningRejectedError: If the signer refuses to sign.
        """
        try:
            public_key = await self._signer.get_public_key()
            unsigned = (
                EventBuilder(Kind(draft.kind), draft.content)
                .tags([Tag.parse(list(tag)) for tag in draft.tags])
                .custom_created_at(Timestamp.from_secs(draft.created_at))
                .build(public_key)
            )
        except Exception as e:  # nostr-sdk FFI raises its own error type
            raise SigningError(f"Could not prepare event for signing: {e}") from e

        try:
            signed = await self._signer.sign_event(unsigned)
        except Exception as e:  # nostr-sdk FFI raises its own error type
            raise SigningRejectedError(f"Signer rejected the event: {e}") from e

        return Event.from_json(signed.as_json())
