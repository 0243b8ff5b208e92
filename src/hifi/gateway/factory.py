"""Factory for the configured bridge client."""

from hifi.config import get_settings
from hifi.gateway.base import BridgeClient
from hifi.gateway.dryrun import DryRunBridgeClient
from hifi.gateway.relayer import RelayerBridgeClient

# Singleton instance
_bridge_instance: BridgeClient | None = None


def get_bridge_client() -> BridgeClient:
    """Get the configured bridge client.

    Client is selected based on BRIDGE_PROVIDER environment variable:
    - dryrun (default): Simulated transfers with configurable latency
    - relayer: Relayer HTTP API at RELAYER_URL
    """
    global _bridge_instance

    if _bridge_instance is not None:
        return _bridge_instance

    settings = get_settings()
    provider_name = settings.bridge_provider.lower()

    if provider_name == "relayer":
        _bridge_instance = RelayerBridgeClient(
            base_url=settings.relayer_url,
            timeout=settings.relayer_timeout_seconds,
            api_key=settings.relayer_api_key,
        )
    else:
        _bridge_instance = DryRunBridgeClient(
            latency=settings.bridge_latency_seconds,
            fail_with=settings.dry_run_bridge_failure,
        )

    return _bridge_instance


def reset_bridge_client() -> None:
    """Reset bridge client instance (useful for testing)."""
    global _bridge_instance
    _bridge_instance = None
