"""PoolVault deposit clients."""

from hifi.vault.base import VaultClient, VaultDeposit
from hifi.vault.factory import get_vault_client, reset_vault_client

__all__ = ["VaultClient", "VaultDeposit", "get_vault_client", "reset_vault_client"]
