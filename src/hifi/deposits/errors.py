"""Exceptions raised by the deposit lifecycle.

Every exception carries the HTTP status the API layer should answer with, so
route handlers never have to map error types by hand.
"""


class DepositError(Exception):
    """Base class for deposit lifecycle errors."""

    status_code: int = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


# ======================
# Client input errors
# ======================


class DepositValidationError(DepositError):
    """Inbound deposit request was rejected."""

    status_code = 400


class MissingField(DepositValidationError):
    """A required request field is absent or empty."""


class InvalidAmount(DepositValidationError):
    """Amount is not a positive integer in the asset's smallest unit."""


class UnsupportedChain(DepositValidationError):
    """Source chain is not in the configured supported set."""


class InvalidAddress(DepositValidationError):
    """User address is not a valid EVM address."""


# ======================
# Store errors
# ======================


class NotFound(DepositError):
    """No deposit with the given id (never created, or evicted)."""

    status_code = 404

    def __init__(self, deposit_id: str):
        super().__init__("Deposit not found")
        self.deposit_id = deposit_id


class DuplicateId(DepositError):
    """A deposit with the same id already exists."""

    status_code = 409

    def __init__(self, deposit_id: str):
        super().__init__(f"Deposit {deposit_id} already exists")
        self.deposit_id = deposit_id


class InvalidTransition(DepositError):
    """Attempted status change or field update the state machine forbids."""


# ======================
# Collaborator errors
# ======================


class CollaboratorError(DepositError):
    """An external service failed while advancing a deposit.

    These happen in background tasks and are recorded on the deposit
    record; they never reach an HTTP caller.
    """

    status_code = 502


class BridgeFailure(CollaboratorError):
    """Cross-chain transfer failed."""


class VaultFailure(CollaboratorError):
    """Vault deposit failed after the funds were bridged."""
