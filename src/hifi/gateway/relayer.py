"""Bridge client backed by the relayer HTTP API."""

from typing import Optional

import httpx

from hifi.deposits.errors import BridgeFailure
from hifi.gateway.base import BridgeClient, BridgeTransfer
from hifi.relayer import call_relayer


class RelayerBridgeClient(BridgeClient):
    """Asks the relayer to run the Gateway burn/attest/mint sequence."""

    path = "/api/bridge/transfer"

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

    async def transfer(self, request: BridgeTransfer) -> str:
        return await call_relayer(
            self.base_url,
            self.path,
            {
                "depositId": request.deposit_id,
                "sourceChain": request.source_chain,
                "destinationChain": request.destination_chain,
                "amount": request.amount,
                "userAddress": request.user_address,
            },
            error_cls=BridgeFailure,
            timeout=self.timeout,
            api_key=self.api_key,
            client=self._client,
        )
