"""Drives deposits through bridge and vault stages in the background.

Each deposit gets one asyncio task:

    pending --bridge ok--> gateway_complete --vault ok--> vault_complete
       |                         |
       +--bridge error--> failed +--vault error--> failed (bridge_tx kept)

Every transition is a single store update, which re-reads the current
record; if the record has been deleted meanwhile the task stops without
recreating it. Deleting a record also cancels its task.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any, Optional

from hifi.deposits.errors import BridgeFailure, NotFound, VaultFailure
from hifi.deposits.models import DepositRecord, DepositStatus
from hifi.deposits.store import DepositStore
from hifi.gateway.base import BridgeClient, BridgeTransfer
from hifi.vault.base import VaultClient, VaultDeposit

logger = logging.getLogger(__name__)

DEFAULT_BRIDGE_ERROR = "Gateway processing failed"
DEFAULT_VAULT_ERROR = "PoolVault deposit failed"


class LifecycleOrchestrator:
    """Schedules and runs the stage sequence for each deposit."""

    def __init__(
        self,
        store: DepositStore,
        bridge: BridgeClient,
        vault: VaultClient,
        settle_delay: float = 2.0,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        """Initialize the orchestrator.

        Args:
            store: Record store (sole owner of deposit state)
            bridge: Cross-chain bridge client
            vault: Vault deposit client
            settle_delay: Seconds to wait before contacting the bridge
            sleep: Awaitable sleep, replaceable in tests
        """
        self.store = store
        self.bridge = bridge
        self.vault = vault
        self.settle_delay = settle_delay
        self._sleep = sleep
        self._tasks: dict[str, asyncio.Task] = {}
        store.add_delete_listener(self._on_deleted)

    @property
    def active_ids(self) -> list[str]:
        """Ids of deposits with an unfinished task."""
        return [deposit_id for deposit_id, task in self._tasks.items() if not task.done()]

    def schedule(self, deposit_id: str) -> asyncio.Task:
        """Start advancing a deposit in the background and return at once."""
        existing = self._tasks.get(deposit_id)
        if existing is not None and not existing.done():
            return existing

        task = asyncio.create_task(self.run(deposit_id), name=f"deposit:{deposit_id}")
        self._tasks[deposit_id] = task
        task.add_done_callback(lambda t: self._forget(deposit_id, t))
        return task

    async def join(self, deposit_id: str) -> Optional[DepositRecord]:
        """Wait for a deposit's task to finish.

        Returns:
            The record the task ended with, or None if it was cancelled,
            aborted, or is no longer running
        """
        task = self._tasks.get(deposit_id)
        if task is None:
            return None
        await asyncio.wait({task})
        if task.cancelled() or task.exception() is not None:
            return None
        return task.result()

    async def shutdown(self) -> None:
        """Cancel all outstanding tasks and wait for them to unwind."""
        tasks = list(self._tasks.values())
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
            logger.info(f"Cancelled {len(tasks)} deposit task(s)")

    async def run(self, deposit_id: str) -> Optional[DepositRecord]:
        """Run all stages for one deposit.

        Returns:
            The final record, or None if the record disappeared
        """
        await self._sleep(self.settle_delay)

        record = self._current(deposit_id)
        if record is None:
            return None
        if record.status != DepositStatus.PENDING:
            logger.warning(f"Deposit {deposit_id} already {record.status.value}, not restarting")
            return record

        record = await self._bridge_stage(record)
        if record is None or record.status != DepositStatus.GATEWAY_COMPLETE:
            return record

        return await self._vault_stage(record)

    async def _bridge_stage(self, record: DepositRecord) -> Optional[DepositRecord]:
        logger.info(
            f"[Gateway] Starting cross-chain transfer for {record.id}: "
            f"{record.amount} {record.source_chain} -> {record.destination_chain}"
        )
        transfer = BridgeTransfer(
            deposit_id=record.id,
            source_chain=record.source_chain,
            destination_chain=record.destination_chain,
            amount=record.amount,
            user_address=record.user_address,
        )

        try:
            bridge_tx = await self.bridge.transfer(transfer)
        except BridgeFailure as e:
            logger.error(f"[Gateway] Transfer failed for {record.id}: {e.message}")
            return self._transition(record.id, status=DepositStatus.FAILED, error=e.message)
        except Exception as e:
            logger.exception(f"[Gateway] Unexpected error for {record.id}")
            return self._transition(
                record.id, status=DepositStatus.FAILED, error=str(e) or DEFAULT_BRIDGE_ERROR
            )

        logger.info(f"[Gateway] Cross-chain transfer complete for {record.id}: {bridge_tx}")
        return self._transition(
            record.id, status=DepositStatus.GATEWAY_COMPLETE, bridge_tx=bridge_tx
        )

    async def _vault_stage(self, record: DepositRecord) -> Optional[DepositRecord]:
        logger.info(f"[PoolVault] Depositing {record.amount} for {record.user_address}")
        deposit = VaultDeposit(
            deposit_id=record.id,
            amount=record.amount,
            user_address=record.user_address,
            bridge_tx=record.bridge_tx,
        )

        try:
            vault_tx = await self.vault.deposit(deposit)
        except VaultFailure as e:
            error = e.message
        except Exception as e:
            logger.exception(f"[PoolVault] Unexpected error for {record.id}")
            error = str(e) or DEFAULT_VAULT_ERROR
        else:
            logger.info(f"[PoolVault] Deposit complete for {record.id}: {vault_tx}")
            return self._transition(
                record.id, status=DepositStatus.VAULT_COMPLETE, vault_tx=vault_tx
            )

        # Funds are on the destination chain but not in the vault
        logger.error(
            f"[PoolVault] Deposit failed for {record.id} after bridge tx "
            f"{record.bridge_tx}: {error}"
        )
        return self._transition(record.id, status=DepositStatus.FAILED, error=error)

    def _current(self, deposit_id: str) -> Optional[DepositRecord]:
        try:
            return self.store.get(deposit_id)
        except NotFound:
            logger.info(f"Deposit {deposit_id} no longer tracked, stopping")
            return None

    def _transition(self, deposit_id: str, **fields: Any) -> Optional[DepositRecord]:
        try:
            updated = self.store.update(deposit_id, **fields)
        except NotFound:
            logger.info(f"Deposit {deposit_id} vanished before {fields.get('status')}, stopping")
            return None
        logger.debug(f"Deposit {deposit_id} -> {updated.status.value}")
        return updated

    def _on_deleted(self, deposit_id: str) -> None:
        task = self._tasks.get(deposit_id)
        if task is None or task.done():
            return
        try:
            current = asyncio.current_task()
        except RuntimeError:
            current = None
        if task is current:
            # Deleted from inside its own task; the next store read aborts it
            return
        task.cancel()
        logger.info(f"Cancelled orchestration of deleted deposit {deposit_id}")

    def _forget(self, deposit_id: str, task: asyncio.Task) -> None:
        if self._tasks.get(deposit_id) is task:
            del self._tasks[deposit_id]
        if not task.cancelled() and task.exception() is not None:
            logger.error(
                f"Orchestration of deposit {deposit_id} crashed: {task.exception()!r}"
            )
