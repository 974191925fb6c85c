"""
Unit tests for utils.keys module.

Tests:
- ENV_PRIVATE_KEY constant
- load_keys_from_env() - environment variable loading with various key formats
- normalize_public_key() - hex and npub input
- KeysConfig - Pydantic model for Nostr keys configuration
"""

import pytest
from nostr_sdk import Keys
from pydantic import ValidationError

from nostrmarket.utils.keys import (
    ENV_PRIVATE_KEY,
    KeysConfig,
    load_keys_from_env,
    normalize_public_key,
)


# =============================================================================
# Test Constants
# =============================================================================

# Valid secp256k1 test keys (DO NOT USE IN PRODUCTION)
VALID_HEX_KEY = (
    "67dea2ed018072d675f5415ecfaed7d2597555e202d85b3d65ea4e58d2d92ffa"  # pragma: allowlist secret
)
VALID_NSEC_KEY = (
    "nsec1vl029mgpspedva04g90vltkh6fvh240zqtv9k0t9af8935ke9laqsnlfe5"  # pragma: allowlist secret
)


class TestEnvPrivateKeyConstant:
    def test_constant_value(self):
        assert ENV_PRIVATE_KEY == "NOSTR_PRIVATE_KEY"  # pragma: allowlist secret


# =============================================================================
# load_keys_from_env() Tests
# =============================================================================


class TestLoadKeysFromEnv:
    def test_hex_key(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("TEST_KEY", VALID_HEX_KEY)
        keys = load_keys_from_env("TEST_KEY")
        assert isinstance(keys, Keys)

    def test_nsec_and_hex_are_the_same_key(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("HEX_KEY", VALID_HEX_KEY)
        monkeypatch.setenv("NSEC_KEY", VALID_NSEC_KEY)
        hex_keys = load_keys_from_env("HEX_KEY")
        nsec_keys = load_keys_from_env("NSEC_KEY")
        assert hex_keys.public_key().to_hex() == nsec_keys.public_key().to_hex()

    def test_default_env_var(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv(ENV_PRIVATE_KEY, VALID_HEX_KEY)
        assert isinstance(load_keys_from_env(), Keys)

    def test_unset(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.delenv("MISSING_KEY", raising=False)
        with pytest.raises(ValueError, match="MISSING_KEY"):
            load_keys_from_env("MISSING_KEY")

    def test_empty(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("EMPTY_KEY", "")
        with pytest.raises(ValueError, match="EMPTY_KEY"):
            load_keys_from_env("EMPTY_KEY")


# =============================================================================
# normalize_public_key() Tests
# =============================================================================


class TestNormalizePublicKey:
    def test_hex_lowercased(self):
        assert normalize_public_key("AB" * 32) == "ab" * 32

    def test_hex_whitespace_stripped(self):
        assert normalize_public_key(f"  {'a' * 64}\n") == "a" * 64

    def test_npub(self):
        keys = Keys.generate()
        npub = keys.public_key().to_bech32()
        assert normalize_public_key(npub) == keys.public_key().to_hex()

    @pytest.mark.parametrize("value", ["", "npub1invalid", "a" * 63, "not a key"])
    def test_invalid(self, value: str):
        with pytest.raises(ValueError, match="Invalid public key"):
            normalize_public_key(value)


# =============================================================================
# KeysConfig Tests
# =============================================================================


class TestKeysConfig:
    def test_loads_from_default_env(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv(ENV_PRIVATE_KEY, VALID_HEX_KEY)
        config = KeysConfig()
        assert config.keys_env == ENV_PRIVATE_KEY
        assert isinstance(config.keys, Keys)

    def test_custom_env_var(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("MY_KEY", VALID_NSEC_KEY)
        config = KeysConfig(keys_env="MY_KEY")
        assert config.keys.public_key().to_hex() == Keys.parse(VALID_HEX_KEY).public_key().to_hex()

    def test_missing_env_var(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.delenv(ENV_PRIVATE_KEY, raising=False)
        with pytest.raises(ValidationError):
            KeysConfig()

    def test_explicit_keys_skip_env(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.delenv(ENV_PRIVATE_KEY, raising=False)
        keys = Keys.generate()
        assert KeysConfig(keys=keys).keys is keys
