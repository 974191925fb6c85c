"""
Unit tests for core.exceptions module.

Tests:
- Hierarchy (every error is a NostrMarketError)
- RelayTimeoutError and QuorumNotMetError attributes and messages
- PublishingError per-relay failure map
"""

import pytest

from nostrmarket.core.exceptions import (
    ConfigurationError,
    ConnectivityError,
    NostrMarketError,
    PublishingError,
    QuorumNotMetError,
    RelayTimeoutError,
    SignerUnavailableError,
    SigningError,
    SigningRejectedError,
)


class TestHierarchy:
    """Exception inheritance."""

    @pytest.mark.parametrize(
        "exc_class",
        [
            ConfigurationError,
            ConnectivityError,
            PublishingError,
            SigningError,
        ],
    )
    def test_direct_subclasses(self, exc_class: type[Exception]) -> None:
        assert issubclass(exc_class, NostrMarketError)

    def test_connectivity_family(self) -> None:
        assert issubclass(RelayTimeoutError, ConnectivityError)
        assert issubclass(QuorumNotMetError, ConnectivityError)

    def test_signing_family(self) -> None:
        assert issubclass(SignerUnavailableError, SigningError)
        assert issubclass(SigningRejectedError, SigningError)

    def test_signing_is_not_connectivity(self) -> None:
        """Signing failures must never be absorbed as relay noise."""
        assert not issubclass(SigningError, ConnectivityError)


class TestRelayTimeoutError:
    def test_attributes(self) -> None:
        err = RelayTimeoutError("wss://relay1.example.com", 2.5)
        assert err.relay == "wss://relay1.example.com"
        assert err.timeout == 2.5
        assert str(err) == "wss://relay1.example.com timed out after 2.5s"


class TestQuorumNotMetError:
    def test_attributes(self) -> None:
        err = QuorumNotMetError(connected=1, quorum=2)
        assert err.connected == 1
        assert err.quorum == 2

    def test_message(self) -> None:
        assert str(QuorumNotMetError(0, 1)) == "Connected to 0 relay(s), quorum is 1"


class TestPublishingError:
    def test_failed_defaults_to_empty(self) -> None:
        assert PublishingError("nope").failed == {}

    def test_failed_map(self) -> None:
        err = PublishingError("nope", failed={"wss://a.example.com": "rejected"})
        assert err.failed == {"wss://a.example.com": "rejected"}
        assert str(err) == "nope"
