"""Cross-chain bridge clients."""

from hifi.gateway.base import BridgeClient, BridgeTransfer
from hifi.gateway.factory import get_bridge_client, reset_bridge_client

__all__ = ["BridgeClient", "BridgeTransfer", "get_bridge_client", "reset_bridge_client"]
