"""Application configuration using pydantic-settings.

Every timing constant of the deposit lifecycle is configurable so tests and
local runs can compress the simulated bridge and vault latencies.
"""

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ======================
    # Database (pool metadata)
    # ======================
    database_url: str = Field(
        default="sqlite+aiosqlite:///./data/hifi.db",
        description="Pool metadata database connection URL",
    )

    # ======================
    # API
    # ======================
    api_host: str = Field(default="0.0.0.0", description="API server host")
    api_port: int = Field(default=8000, description="API server port")

    # ======================
    # Environment
    # ======================
    environment: str = Field(default="development", description="Runtime environment")
    debug: bool = Field(default=True, description="Enable debug mode")

    # ======================
    # Chains
    # ======================
    supported_source_chains: str = Field(
        default="ethereum,base",
        description="Comma-separated list of accepted source chains",
    )
    destination_chain: str = Field(
        default="sepolia", description="Chain the vault lives on"
    )
    pool_vault_address: Optional[str] = Field(
        default=None, description="PoolVault contract address on the destination chain"
    )

    # ======================
    # Deposit lifecycle timing (seconds)
    # ======================
    settle_delay_seconds: float = Field(
        default=2.0, description="Delay before the bridge is contacted"
    )
    bridge_latency_seconds: float = Field(
        default=15.0, description="Simulated cross-chain transfer time (dry-run only)"
    )
    vault_latency_seconds: float = Field(
        default=5.0, description="Simulated vault confirmation time (dry-run only)"
    )
    estimated_time: str = Field(
        default="5-10 minutes", description="Settlement estimate returned to clients"
    )

    # ======================
    # Retention
    # ======================
    retention_seconds: float = Field(
        default=3600.0, description="Age after which deposit records are evicted"
    )
    sweep_interval_seconds: float = Field(
        default=300.0, description="Seconds between retention sweeps"
    )
    retention_terminal_only: bool = Field(
        default=False,
        description="Only evict deposits that reached vault_complete or failed",
    )

    # ======================
    # Collaborators
    # ======================
    bridge_provider: str = Field(default="dryrun", description="Bridge client (dryrun, relayer)")
    vault_provider: str = Field(default="dryrun", description="Vault client (dryrun, relayer)")
    relayer_url: str = Field(
        default="http://127.0.0.1:3001", description="Relayer HTTP API base URL"
    )
    relayer_timeout_seconds: float = Field(
        default=120.0, description="Timeout for a single relayer call"
    )
    relayer_api_key: str = Field(default="", description="Relayer API key (optional)")
    dry_run_bridge_failure: Optional[str] = Field(
        default=None, description="Make the dry-run bridge fail with this message"
    )
    dry_run_vault_failure: Optional[str] = Field(
        default=None, description="Make the dry-run vault fail with this message"
    )

    @property
    def source_chains(self) -> frozenset[str]:
        """Parse supported source chains into a lower-cased set."""
        return frozenset(
            chain.strip().lower()
            for chain in self.supported_source_chains.split(",")
            if chain.strip()
        )

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment.lower() == "production"

    def get_safe_dict(self) -> dict:
        """Return settings dict with secrets redacted."""
        return {
            "environment": self.environment,
            "debug": self.debug,
            "api_host": self.api_host,
            "api_port": self.api_port,
            "database_url": self._redact_url(self.database_url),
            "chains": {
                "source": sorted(self.source_chains),
                "destination": self.destination_chain,
                "pool_vault": self.pool_vault_address or "(not set)",
            },
            "lifecycle": {
                "settle_delay_seconds": self.settle_delay_seconds,
                "bridge_latency_seconds": self.bridge_latency_seconds,
                "vault_latency_seconds": self.vault_latency_seconds,
            },
            "retention": {
                "retention_seconds": self.retention_seconds,
                "sweep_interval_seconds": self.sweep_interval_seconds,
                "terminal_only": self.retention_terminal_only,
            },
            "collaborators": {
                "bridge": self.bridge_provider,
                "vault": self.vault_provider,
                "relayer_url": self.relayer_url,
                "relayer_api_key": "***" if self.relayer_api_key else "(not set)",
            },
        }

    @staticmethod
    def _redact_url(url: str) -> str:
        """Redact sensitive parts of database URL."""
        if "://" in url and "@" in url:
            proto, rest = url.split("://", 1)
            if "@" in rest:
                creds, host = rest.rsplit("@", 1)
                if ":" in creds:
                    user, _ = creds.split(":", 1)
                    return f"{proto}://{user}:***@{host}"
        return url


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
