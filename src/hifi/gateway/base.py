"""Bridge client base interface."""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class BridgeTransfer:
    """A cross-chain transfer to perform for a deposit."""

    deposit_id: str
    source_chain: str
    destination_chain: str
    amount: str  # smallest unit, integer string
    user_address: str


class BridgeClient(ABC):
    """Abstract base class for cross-chain bridge clients."""

    @abstractmethod
    async def transfer(self, request: BridgeTransfer) -> str:
        """Burn on the source chain and mint on the destination chain.

        Args:
            request: Transfer parameters

        Returns:
            Transaction hash of the destination-chain mint

        Raises:
            BridgeFailure: If the transfer did not complete
        """
        raise NotImplementedError()

    @property
    @abstractmethod
    def name(self) -> str:
        """Client name."""
        raise NotImplementedError()
