"""Pydantic settings for the vault yield engine."""

from functools import lru_cache
from pathlib import Path
from typing import Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

CONFIG_DIR = Path(__file__).resolve().parent


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Ethereum RPC
    eth_rpc_url: Optional[str] = Field(default=None, description="Execution-layer JSON-RPC URL")
    rpc_timeout_seconds: int = Field(default=30, ge=1, le=300, description="RPC request timeout")

    # Price oracle
    coingecko_api_url: str = Field(
        default="https://api.coingecko.com/api/v3",
        description="CoinGecko API base URL",
    )
    coingecko_api_key: Optional[str] = Field(default=None, description="Optional CoinGecko API key")
    price_rate_limit: int = Field(default=30, ge=1, description="Price requests allowed per window")
    price_rate_window: int = Field(default=60, ge=1, description="Price rate limit window in seconds")

    # Cache Configuration
    cache_dir: Path = Field(default=Path(".cache/vault_apy"), description="Cache directory path")
    cache_ttl_seconds: int = Field(default=300, ge=60, le=3600, description="Cache TTL in seconds")

    # Yield computation
    compounding_events: int = Field(default=52, ge=1, description="Harvests per year for farmed yield")
    pool_compounding_periods: int = Field(default=365, ge=1, description="Compounding periods for pool yield")
    average_block_time: float = Field(default=12.0, gt=0, description="Average block time in seconds")
    earliest_block: int = Field(default=0, ge=0, description="Lowest block the estimator may return")

    # Static data
    overrides_path: Path = Field(default=CONFIG_DIR / "overrides.json", description="Override table file")
    aliases_path: Path = Field(default=CONFIG_DIR / "aliases.json", description="Price alias table file")

    # Vault resolution
    special_fees_mode: Literal["legacy", "single_strategy"] = Field(
        default="legacy",
        description="Strategy-count condition used by special fee resolution",
    )

    # Storage
    store_get_batch_size: int = Field(default=50, ge=1, description="Keys per batched get")
    store_put_batch_size: int = Field(default=5, ge=1, description="Items per batched put")

    # Engine
    max_concurrent_vaults: int = Field(default=5, ge=1, le=100, description="Vaults computed in parallel")

    @field_validator("cache_dir", "overrides_path", "aliases_path", mode="before")
    @classmethod
    def parse_path(cls, v):
        """Convert string to Path."""
        if isinstance(v, str):
            return Path(v)
        return v

    def ensure_cache_dir(self) -> Path:
        """Ensure cache directory exists and return it."""
        self.cache_dir.mkdir(parents=True, exist_ok=True)
        return self.cache_dir


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
