"""nostrmarket exception hierarchy.

Typed exceptions that separate expected steady-state noise (a relay that
does not answer, a foreign event) from failures the user has to act on
(no signer, a rejected signature, nothing accepted the broadcast).

Exception hierarchy:

```text
NostrMarketError (base -- never raised directly)
├── ConfigurationError       -- config validation, missing keys, bad YAML
├── ConnectivityError        -- relay unreachable, handshake failure
│   ├── RelayTimeoutError    -- connection or response timed out
│   └── QuorumNotMetError    -- fewer relays connected than required
├── SigningError             -- signer missing or refused
│   ├── SignerUnavailableError
│   └── SigningRejectedError
└── PublishingError          -- every relay rejected the broadcast
```

See Also:
    [RelayPool][nostrmarket.services.relay_pool.RelayPool]: Absorbs
        per-relay [ConnectivityError][nostrmarket.core.exceptions.ConnectivityError]
        and raises [QuorumNotMetError][nostrmarket.core.exceptions.QuorumNotMetError].
    [MarketplaceClient][nostrmarket.services.marketplace.MarketplaceClient]:
        Surfaces signing and publishing errors, swallows search errors.
"""

from __future__ import annotations


class NostrMarketError(Exception):
    """Base exception for all nostrmarket errors.

    Never raised directly -- always use a specific subclass.
    """


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------


class ConfigurationError(NostrMarketError):
    """Invalid or missing configuration (YAML, env vars)."""


# ---------------------------------------------------------------------------
# Connectivity
# ---------------------------------------------------------------------------


class ConnectivityError(NostrMarketError):
    """Base for all relay/network connectivity errors.

    Non-fatal per relay; escalates to an operation failure only through
    [QuorumNotMetError][nostrmarket.core.exceptions.QuorumNotMetError].
    """


class RelayTimeoutError(ConnectivityError):
    """A relay did not answer within its per-relay timeout.

    Attributes:
        relay: URL of the relay that timed out.
        timeout: The timeout that elapsed, in seconds.
    """

    def __init__(self, relay: str, timeout: float) -> None:
        super().__init__(f"{relay} timed out after {timeout}s")
        self.relay = relay
        self.timeout = timeout


class QuorumNotMetError(ConnectivityError):
    """Fewer relays connected than the configured minimum quorum.

    Attributes:
        connected: Number of relays that connected.
        quorum: Number of relays that were required.
    """

    def __init__(self, connected: int, quorum: int) -> None:
        super().__init__(f"Connected to {connected} relay(s), quorum is {quorum}")
        self.connected = connected
        self.quorum = quorum


# ---------------------------------------------------------------------------
# Signing
# ---------------------------------------------------------------------------


class SigningError(NostrMarketError):
    """The signing capability failed to produce a public key or signature."""


class SignerUnavailableError(SigningError):
    """No signer is configured (read-only client)."""


class SigningRejectedError(SigningError):
    """The signer refused the request (for example, the user declined)."""


# ---------------------------------------------------------------------------
# Publishing
# ---------------------------------------------------------------------------


class PublishingError(NostrMarketError):
    """A signed event was rejected by every active relay.

    Attributes:
        failed: Mapping of relay URL to the reason it rejected the event.
    """

    def __init__(self, message: str, failed: dict[str, str] | None = None) -> None:
        super().__init__(message)
        self.failed = failed or {}
