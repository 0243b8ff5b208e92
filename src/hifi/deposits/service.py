"""Deposit intake: validation, record creation and orchestration scheduling."""

import dataclasses
import logging
from collections.abc import Iterable, Mapping
from typing import Any, Optional

from hifi.deposits.errors import DuplicateId, MissingField
from hifi.deposits.models import DepositRecord, DepositRequest, generate_deposit_id
from hifi.deposits.orchestrator import LifecycleOrchestrator
from hifi.deposits.status import DepositStatusView, StatusQueryService
from hifi.deposits.store import DepositStore
from hifi.deposits.validator import validate_deposit_request

logger = logging.getLogger(__name__)

# Id collisions need the same millisecond and the same 9-char suffix
MAX_ID_ATTEMPTS = 5


class DepositService:
    """Entry point for deposit requests coming from the API."""

    def __init__(
        self,
        store: DepositStore,
        orchestrator: LifecycleOrchestrator,
        supported_chains: Iterable[str],
        destination_chain: str,
    ):
        self.store = store
        self.orchestrator = orchestrator
        self.supported_chains = frozenset(chain.lower() for chain in supported_chains)
        self.destination_chain = destination_chain
        self.status = StatusQueryService(store)

    def submit(self, raw: Mapping[str, Any]) -> DepositRecord:
        """Accept a deposit request.

        Validates the request, stores a pending record and schedules the
        bridge/vault stages. Returns without waiting for any of them.

        Raises:
            DepositValidationError: If the request is invalid (nothing stored)
        """
        return self._accept(validate_deposit_request(raw, self.supported_chains))

    def _accept(self, request: DepositRequest) -> DepositRecord:
        for attempt in range(MAX_ID_ATTEMPTS):
            created_at = self.store.clock()
            record = DepositRecord.pending(
                deposit_id=generate_deposit_id(created_at),
                request=request,
                destination_chain=self.destination_chain,
                created_at=created_at,
            )
            try:
                self.store.create(record)
                break
            except DuplicateId:
                logger.warning(f"Deposit id collision on {record.id} (attempt {attempt + 1})")
        else:
            raise DuplicateId(record.id)

        logger.info(
            f"Initiating deposit {record.id}: {record.amount} from {record.source_chain} "
            f"to {record.destination_chain} for {record.user_address}"
        )
        self.orchestrator.schedule(record.id)
        return record

    def get_status(self, deposit_id: str) -> DepositStatusView:
        """Status projection for polling clients.

        Raises:
            NotFound: If the id is unknown or was evicted
        """
        return self.status.get_status(deposit_id)

    # ======================
    # Deprecated address-keyed API
    # ======================

    def initiate_legacy(self, raw: Mapping[str, Any]) -> DepositRecord:
        """Handle the deprecated initiate request.

        Old clients sent ``userAddress`` plus optional ``amount``,
        ``sourceChain``, ``txHash`` and ``poolAddress``. Requests carrying
        the full deposit fields are tracked like any other deposit; the
        rest are rejected, since there is nothing to bridge. Only this path
        records ``txHash``, as the deposit's source_tx.
        """
        logger.warning("Deprecated /deposit/initiate called; use POST /deposits")

        if not isinstance(raw, Mapping) or not raw.get("userAddress"):
            raise MissingField("Missing userAddress")

        body = dict(raw)
        if body.get("poolAddress") and not body.get("poolId"):
            body["poolId"] = body["poolAddress"]
        request = validate_deposit_request(body, self.supported_chains)

        tx_hash = body.get("txHash")
        if isinstance(tx_hash, str) and tx_hash.strip():
            request = dataclasses.replace(request, source_tx=tx_hash.strip())
        return self._accept(request)

    def lookup_by_tx(self, tx_hash: str) -> Optional[DepositRecord]:
        """Find a deposit by client tx hash or bridge tx hash."""
        needle = tx_hash.strip().lower()
        if not needle:
            return None
        return self.store.find(
            lambda record: needle in (
                (record.source_tx or "").lower(),
                (record.bridge_tx or "").lower(),
            )
        )
