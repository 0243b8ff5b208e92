"""Factory for the configured vault client."""

from hifi.config import get_settings
from hifi.vault.base import VaultClient
from hifi.vault.dryrun import DryRunVaultClient
from hifi.vault.relayer import RelayerVaultClient

# Singleton instance
_vault_instance: VaultClient | None = None


def get_vault_client() -> VaultClient:
    """Get the configured vault client.

    Client is selected based on VAULT_PROVIDER environment variable:
    - dryrun (default): Simulated deposits with configurable latency
    - relayer: Relayer HTTP API at RELAYER_URL
    """
    global _vault_instance

    if _vault_instance is not None:
        return _vault_instance

    settings = get_settings()
    provider_name = settings.vault_provider.lower()

    if provider_name == "relayer":
        _vault_instance = RelayerVaultClient(
            base_url=settings.relayer_url,
            timeout=settings.relayer_timeout_seconds,
            api_key=settings.relayer_api_key,
        )
    else:
        _vault_instance = DryRunVaultClient(
            latency=settings.vault_latency_seconds,
            fail_with=settings.dry_run_vault_failure,
        )

    return _vault_instance


def reset_vault_client() -> None:
    """Reset vault client instance (useful for testing)."""
    global _vault_instance
    _vault_instance = None
