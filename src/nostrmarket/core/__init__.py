"""Infrastructure: configuration, exceptions, structured logging, YAML loading.

Attributes:
    MarketplaceConfig: Pydantic configuration tree for the client.
    Logger: Structured key=value / JSON logger.
    NostrMarketError: Root of the exception hierarchy.
"""

from .config import (
    ListingConfig,
    LoggingConfig,
    MarketplaceConfig,
    RelaysConfig,
    SearchConfig,
    TimeoutsConfig,
)
from .exceptions import (
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
from .logger import Logger, StructuredFormatter, format_kv_pairs, setup_logging
from .yaml import load_yaml


__all__ = [
    "ConfigurationError",
    "ConnectivityError",
    "ListingConfig",
    "Logger",
    "LoggingConfig",
    "MarketplaceConfig",
    "NostrMarketError",
    "PublishingError",
    "QuorumNotMetError",
    "RelayTimeoutError",
    "RelaysConfig",
    "SearchConfig",
    "SignerUnavailableError",
    "SigningError",
    "SigningRejectedError",
    "StructuredFormatter",
    "TimeoutsConfig",
    "format_kv_pairs",
    "load_yaml",
    "setup_logging",
]
