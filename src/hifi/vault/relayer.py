"""Vault client backed by the relayer HTTP API."""

from typing import Optional

import httpx

from hifi.deposits.errors import VaultFailure
from hifi.relayer import call_relayer
from hifi.vault.base import VaultClient, VaultDeposit


class RelayerVaultClient(VaultClient):
    """Asks the relayer to call PoolVault.depositFor with bridged funds."""

    path = "/api/vault/deposit"

    def __init__(
        self,
        base_url: str,
        timeout: float = 120.0,
        api_key: str = "",
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.base_url = base_url
        self.timeout = timeout
        self.api_key = api_key
        self._client = client

    @property
    def name(self) -> str:
        return "relayer"

    async def deposit(self, request: VaultDeposit) -> str:
        return await call_relayer(
            self.base_url,
            self.path,
            {
                "depositId": request.deposit_id,
                "amount": request.amount,
                "userAddress": request.user_address,
                "bridgeTx": request.bridge_tx,
            },
            error_cls=VaultFailure,
            timeout=self.timeout,
            api_key=self.api_key,
            client=self._client,
        )
