"""Read-only projection of deposit records for polling clients."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from hifi.deposits.models import DepositRecord, DepositStatus
from hifi.deposits.store import DepositStore


class DepositStatusView(BaseModel):
    """Public view of a deposit's progress."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str = Field(..., description="Deposit id")
    status: DepositStatus = Field(..., description="Lifecycle status")
    source_chain: str = Field(..., alias="sourceChain")
    amount: str = Field(..., description="Amount in the asset's smallest unit")
    bridge_tx: Optional[str] = Field(None, alias="bridgeTx")
    vault_tx: Optional[str] = Field(None, alias="vaultTx")
    error: Optional[str] = Field(None, description="Failure reason")

    @classmethod
    def from_record(cls, record: DepositRecord) -> "DepositStatusView":
        return cls(
            id=record.id,
            status=record.status,
            source_chain=record.source_chain,
            amount=record.amount,
            bridge_tx=record.bridge_tx,
            vault_tx=record.vault_tx,
            error=record.error,
        )


class StatusQueryService:
    """Answers status polls. Never mutates the store."""

    def __init__(self, store: DepositStore):
        self.store = store

    def get_status(self, deposit_id: str) -> DepositStatusView:
        """Get the public status of a deposit.

        Raises:
            NotFound: If the id is unknown or was evicted
        """
        return DepositStatusView.from_record(self.store.get(deposit_id))
