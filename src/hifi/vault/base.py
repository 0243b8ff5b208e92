"""Vault client base interface."""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class VaultDeposit:
    """A PoolVault deposit of bridged funds on behalf of a user."""

    deposit_id: str
    amount: str  # smallest unit, integer string
    user_address: str
    bridge_tx: str


class VaultClient(ABC):
    """Abstract base class for vault deposit clients."""

    @abstractmethod
    async def deposit(self, request: VaultDeposit) -> str:
        """Deposit bridged funds into the vault, crediting shares to the user.

        Returns:
            Transaction hash of the vault deposit

        Raises:
            VaultFailure: If the deposit did not confirm
        """
        raise NotImplementedError()

    @property
    @abstractmethod
    def name(self) -> str:
        """Client name."""
        raise NotImplementedError()
