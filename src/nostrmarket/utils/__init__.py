"""Key loading, signing capabilities, and relay transport.

The utils layer depends only on [nostrmarket.models][nostrmarket.models]
and [nostrmarket.core][nostrmarket.core] exceptions. It is where nostr-sdk
is touched; the nips layer above it stays pure.

Attributes:
    keys: Private key loading from environment variables, public key
        normalization (hex or npub).
    signer: ``Signer`` protocol with ``SdkSigner`` and ``DisabledSigner``.
    transport: ``RelayTransport`` protocol and the nostr-sdk implementation.
"""

from .keys import KeysConfig, load_keys_from_env, normalize_public_key
from .signer import DisabledSigner, SdkSigner, Signer
from .transport import DEFAULT_TIMEOUT, NostrSdkTransport, RelayTransport


__all__ = [
    "DEFAULT_TIMEOUT",
    "DisabledSigner",
    "KeysConfig",
    "NostrSdkTransport",
    "RelayTransport",
    "SdkSigner",
    "Signer",
    "load_keys_from_env",
    "normalize_public_key",
]
