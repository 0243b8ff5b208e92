"""Dry-run vault for testing (no contract calls)."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Optional

from hifi.deposits.errors import VaultFailure
from hifi.gateway.dryrun import simulated_tx_hash
from hifi.vault.base import VaultClient, VaultDeposit

logger = logging.getLogger(__name__)


class DryRunVaultClient(VaultClient):
    """Simulated vault that confirms after a fixed latency."""

    def __init__(
        self,
        latency: float = 5.0,
        fail_with: Optional[str] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.latency = latency
        self.fail_with = fail_with
        self._sleep = sleep
        self.calls: list[VaultDeposit] = []

    @property
    def name(self) -> str:
        return "dryrun"

    async def deposit(self, request: VaultDeposit) -> str:
        self.calls.append(request)
        logger.info(
            f"[PoolVault] Simulating deposit of {request.amount} for {request.user_address}"
        )
        await self._sleep(self.latency)

        if self.fail_with:
            raise VaultFailure(self.fail_with)
        return simulated_tx_hash("vault", request.deposit_id)
