"""Dry-run bridge for testing (no real transfers)."""

import asyncio
import hashlib
import logging
from collections.abc import Awaitable, Callable
from typing import Optional

from hifi.deposits.errors import BridgeFailure
from hifi.gateway.base import BridgeClient, BridgeTransfer

logger = logging.getLogger(__name__)


def simulated_tx_hash(kind: str, deposit_id: str) -> str:
    """Deterministic fake transaction hash for a deposit stage."""
    return "0x" + hashlib.sha256(f"{kind}:{deposit_id}".encode()).hexdigest()


class DryRunBridgeClient(BridgeClient):
    """Simulated bridge that waits a fixed latency and returns a fake hash."""

    def __init__(
        self,
        latency: float = 15.0,
        fail_with: Optional[str] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.latency = latency
        self.fail_with = fail_with
        self._sleep = sleep
        self.calls: list[BridgeTransfer] = []

    @property
    def name(self) -> str:
        return "dryrun"

    async def transfer(self, request: BridgeTransfer) -> str:
        self.calls.append(request)
        logger.info(
            f"[Gateway] Simulating {request.amount} from {request.source_chain} "
            f"to {request.destination_chain} for {request.deposit_id}"
        )
        await self._sleep(self.latency)

        if self.fail_with:
            raise BridgeFailure(self.fail_with)
        return simulated_tx_hash("bridge", request.deposit_id)
