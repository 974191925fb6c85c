"""Configuration models for the marketplace client.

Pydantic models with sensible defaults so a partial YAML file (for
example, only ``relays.min_quorum: 2``) inherits everything else.

Examples:
    ```yaml
    relays:
      urls:
        - wss://nos.lol
        - wss://relay.damus.io
      min_quorum: 1
      refresh_candidates: true
    timeouts:
      connect: 10.0
      request: 15.0
    search:
      limit: 100
    ```

See Also:
    [RelayPool][nostrmarket.services.relay_pool.RelayPool]: Consumes
        [RelaysConfig][nostrmarket.core.config.RelaysConfig] and
        [TimeoutsConfig][nostrmarket.core.config.TimeoutsConfig].
    [load_yaml()][nostrmarket.core.yaml.load_yaml]: YAML loader used by
        [from_yaml()][nostrmarket.core.config.MarketplaceConfig.from_yaml].
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Self

from pydantic import BaseModel, Field, field_validator, model_validator

from nostrmarket.models.constants import DEFAULT_RELAYS
from nostrmarket.models.relay import Relay

from .yaml import load_yaml


class RelaysConfig(BaseModel):
    """Candidate relays and the connection quorum.

    Attributes:
        urls: Ordered candidate relay URLs, normalized and de-duplicated.
        min_quorum: Connections required before an operation proceeds.
        refresh_candidates: If ``True`` every ``connect()`` retries the full
            candidate list; if ``False`` it retries only the relays that
            answered last time.
    """

    urls: list[str] = Field(default_factory=lambda: list(DEFAULT_RELAYS), min_length=1)
    min_quorum: int = Field(default=1, ge=1)
    refresh_candidates: bool = True

    @field_validator("urls")
    @classmethod
    def _normalize_urls(cls, value: list[str]) -> list[str]:
        seen: dict[str, None] = {}
        for raw in value:
            seen.setdefault(Relay(raw).url, None)
        return list(seen)

    @model_validator(mode="after")
    def _quorum_reachable(self) -> Self:
        if self.min_quorum > len(self.urls):
            raise ValueError(
                f"min_quorum ({self.min_quorum}) exceeds number of relays ({len(self.urls)})"
            )
        return self


class TimeoutsConfig(BaseModel):
    """Per-relay timeouts in seconds. A timeout counts as a relay failure."""

    connect: float = Field(default=10.0, gt=0.0, le=120.0)
    request: float = Field(default=15.0, gt=0.0, le=300.0)


class SearchConfig(BaseModel):
    """Defaults applied to marketplace searches."""

    limit: int = Field(default=100, ge=1, le=5000)


class ListingConfig(BaseModel):
    """Listing encoding options.

    Attributes:
        unique_identifiers: Append a short hash suffix to the title-derived
            ``d`` identifier so two listings with the same title by the same
            seller do not replace each other.
    """

    unique_identifiers: bool = False


class LoggingConfig(BaseModel):
    """Structured logging options."""

    json_output: bool = False


class MarketplaceConfig(BaseModel):
    """Top-level configuration for [MarketplaceClient][nostrmarket.services.marketplace.MarketplaceClient]."""

    relays: RelaysConfig = Field(default_factory=RelaysConfig)
    timeouts: TimeoutsConfig = Field(default_factory=TimeoutsConfig)
    search: SearchConfig = Field(default_factory=SearchConfig)
    listing: ListingConfig = Field(default_factory=ListingConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @classmethod
    def from_yaml(cls, config_path: str | Path) -> Self:
        """Load and validate configuration from a YAML file."""
        return cls.from_dict(load_yaml(config_path))

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        """Validate configuration from a plain dictionary."""
        return cls.model_validate(data)
