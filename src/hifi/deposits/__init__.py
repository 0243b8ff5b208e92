"""Cross-chain deposit lifecycle tracking."""

from hifi.deposits.errors import (
    BridgeFailure,
    DepositError,
    DepositValidationError,
    DuplicateId,
    InvalidAddress,
    InvalidAmount,
    InvalidTransition,
    MissingField,
    NotFound,
    UnsupportedChain,
    VaultFailure,
)
from hifi.deposits.models import DepositRecord, DepositRequest, DepositStatus
from hifi.deposits.store import DepositStore, InMemoryDepositStore

__all__ = [
    # Models
    "DepositRecord",
    "DepositRequest",
    "DepositStatus",
    # Store
    "DepositStore",
    "InMemoryDepositStore",
    # Errors
    "DepositError",
    "DepositValidationError",
    "MissingField",
    "InvalidAmount",
    "UnsupportedChain",
    "InvalidAddress",
    "NotFound",
    "DuplicateId",
    "InvalidTransition",
    "BridgeFailure",
    "VaultFailure",
]
