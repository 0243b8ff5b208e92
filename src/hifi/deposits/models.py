"""Deposit record and lifecycle state machine."""

import secrets
import string
import time
from dataclasses import asdict, dataclass
from enum import Enum
from typing import Optional

ID_PREFIX = "hifi"
ID_SUFFIX_LENGTH = 9
_ID_ALPHABET = string.digits + string.ascii_lowercase


class DepositStatus(str, Enum):
    """Status of a cross-chain deposit."""

    PENDING = "pending"                    # Accepted, bridge not finished
    GATEWAY_COMPLETE = "gateway_complete"  # Bridged to destination chain
    VAULT_COMPLETE = "vault_complete"      # Deposited into the vault
    FAILED = "failed"                      # Failed at any stage

    @property
    def is_terminal(self) -> bool:
        """No automatic transition leaves a terminal status."""
        return self in (DepositStatus.VAULT_COMPLETE, DepositStatus.FAILED)


ALLOWED_TRANSITIONS: dict[DepositStatus, frozenset[DepositStatus]] = {
    DepositStatus.PENDING: frozenset(
        {DepositStatus.GATEWAY_COMPLETE, DepositStatus.FAILED}
    ),
    DepositStatus.GATEWAY_COMPLETE: frozenset(
        {DepositStatus.VAULT_COMPLETE, DepositStatus.FAILED}
    ),
    DepositStatus.VAULT_COMPLETE: frozenset(),
    DepositStatus.FAILED: frozenset(),
}

# Fields fixed at creation time
IMMUTABLE_FIELDS = frozenset(
    {"id", "amount", "source_chain", "destination_chain", "user_address", "created_at"}
)


def can_transition(current: DepositStatus, new: DepositStatus) -> bool:
    """Check whether the state machine allows moving from current to new."""
    return new in ALLOWED_TRANSITIONS[current]


def now_ms() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return int(time.time() * 1000)


def generate_deposit_id(timestamp_ms: Optional[int] = None) -> str:
    """Generate a deposit id like ``hifi_1718000000000_k3j9x0a1b``.

    The random suffix keeps ids distinct when several deposits arrive in
    the same millisecond; the store still rejects duplicates.
    """
    if timestamp_ms is None:
        timestamp_ms = now_ms()
    suffix = "".join(secrets.choice(_ID_ALPHABET) for _ in range(ID_SUFFIX_LENGTH))
    return f"{ID_PREFIX}_{timestamp_ms}_{suffix}"


@dataclass(frozen=True)
class DepositRequest:
    """Validated, normalized deposit request."""

    amount: str
    source_chain: str
    user_address: str
    pool_id: Optional[str] = None
    source_tx: Optional[str] = None


@dataclass(frozen=True)
class DepositRecord:
    """A tracked deposit. Replaced wholesale on every update."""

    id: str
    status: DepositStatus
    source_chain: str
    destination_chain: str
    amount: str
    user_address: str
    created_at: int
    bridge_tx: Optional[str] = None
    vault_tx: Optional[str] = None
    error: Optional[str] = None
    pool_id: Optional[str] = None
    source_tx: Optional[str] = None

    @classmethod
    def pending(
        cls,
        deposit_id: str,
        request: DepositRequest,
        destination_chain: str,
        created_at: int,
    ) -> "DepositRecord":
        """Build the initial record for a validated request."""
        return cls(
            id=deposit_id,
            status=DepositStatus.PENDING,
            source_chain=request.source_chain,
            destination_chain=destination_chain,
            amount=request.amount,
            user_address=request.user_address,
            created_at=created_at,
            pool_id=request.pool_id,
            source_tx=request.source_tx,
        )

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal

    def age_ms(self, now: int) -> int:
        """Milliseconds since creation."""
        return now - self.created_at

    def to_dict(self) -> dict:
        """Convert to dictionary (snake_case keys)."""
        data = asdict(self)
        data["status"] = self.status.value
        return data
