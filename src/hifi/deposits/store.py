"""Deposit record store.

All operations are synchronous and never await, so on a single event loop
each one is indivisible: a reader never observes a half-applied update.
"""

import dataclasses
import logging
from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Any, Optional

from hifi.deposits.errors import DuplicateId, InvalidTransition, NotFound
from hifi.deposits.models import (
    IMMUTABLE_FIELDS,
    DepositRecord,
    DepositStatus,
    can_transition,
    now_ms,
)

logger = logging.getLogger(__name__)

DeleteListener = Callable[[str], None]


class DepositStore(ABC):
    """Abstract keyed store of deposit records."""

    def __init__(self, clock: Callable[[], int] = now_ms) -> None:
        self._delete_listeners: list[DeleteListener] = []
        self.clock = clock

    @abstractmethod
    def create(self, record: DepositRecord) -> DepositRecord:
        """Insert a new record.

        Raises:
            DuplicateId: If a record with the same id exists
        """
        raise NotImplementedError()

    @abstractmethod
    def get(self, deposit_id: str) -> DepositRecord:
        """Fetch a record.

        Raises:
            NotFound: If no record has this id
        """
        raise NotImplementedError()

    @abstractmethod
    def update(self, deposit_id: str, **fields: Any) -> DepositRecord:
        """Replace a record with a copy carrying the given field values.

        Raises:
            NotFound: If no record has this id
            InvalidTransition: If the change violates the state machine
        """
        raise NotImplementedError()

    @abstractmethod
    def delete(self, deposit_id: str) -> bool:
        """Remove a record. Returns True if something was removed."""
        raise NotImplementedError()

    @abstractmethod
    def values(self) -> list[DepositRecord]:
        """Snapshot of all stored records."""
        raise NotImplementedError()

    def find(
        self, predicate: Callable[[DepositRecord], bool]
    ) -> Optional[DepositRecord]:
        """Return the first live record matching predicate, if any.

        Matches are re-read through get(), so expired records are dropped
        exactly as they are for direct lookups.
        """
        for record in self.values():
            if not predicate(record):
                continue
            try:
                return self.get(record.id)
            except NotFound:
                continue
        return None

    def evict_older_than(
        self, cutoff_ms: int, terminal_only: bool = False
    ) -> list[DepositRecord]:
        """Delete records created before cutoff_ms.

        Args:
            cutoff_ms: Records with created_at strictly before this are evicted
            terminal_only: Keep records that have not reached a terminal status

        Returns:
            The evicted records
        """
        evicted = []
        for record in self.values():
            if record.created_at >= cutoff_ms:
                continue
            if terminal_only and not record.is_terminal:
                continue
            if self.delete(record.id):
                evicted.append(record)
        return evicted

    def add_delete_listener(self, listener: DeleteListener) -> None:
        """Register a callback invoked with the id of every deleted record."""
        self._delete_listeners.append(listener)

    def _notify_deleted(self, deposit_id: str) -> None:
        for listener in self._delete_listeners:
            try:
                listener(deposit_id)
            except Exception:
                logger.exception(f"Delete listener failed for deposit {deposit_id}")


def check_update(current: DepositRecord, fields: dict[str, Any]) -> DepositRecord:
    """Apply fields to current and verify the result is a legal successor.

    Raises:
        InvalidTransition: On updates to terminal records, immutable field
            changes, illegal status moves, or tx hashes inconsistent with
            the resulting status
    """
    if current.is_terminal:
        raise InvalidTransition(
            f"Deposit {current.id} is {current.status.value} and can no longer change"
        )

    changed_immutable = sorted(
        name for name in IMMUTABLE_FIELDS & fields.keys()
        if fields[name] != getattr(current, name)
    )
    if changed_immutable:
        raise InvalidTransition(
            f"Deposit {current.id}: immutable fields {', '.join(changed_immutable)}"
        )

    if "status" in fields:
        fields = {**fields, "status": DepositStatus(fields["status"])}
        new_status = fields["status"]
        if new_status != current.status and not can_transition(current.status, new_status):
            raise InvalidTransition(
                f"Deposit {current.id}: {current.status.value} -> {new_status.value}"
            )

    updated = dataclasses.replace(current, **fields)

    # bridge_tx is written exactly once, by the bridge stage
    if updated.bridge_tx != current.bridge_tx and not (
        current.status == DepositStatus.PENDING
        and updated.status == DepositStatus.GATEWAY_COMPLETE
    ):
        raise InvalidTransition(
            f"Deposit {current.id}: bridge_tx is only set on gateway_complete"
        )
    if updated.status in (DepositStatus.GATEWAY_COMPLETE, DepositStatus.VAULT_COMPLETE):
        if not updated.bridge_tx:
            raise InvalidTransition(
                f"Deposit {current.id}: {updated.status.value} requires bridge_tx"
            )
    if (updated.status == DepositStatus.VAULT_COMPLETE) != bool(updated.vault_tx):
        raise InvalidTransition(
            f"Deposit {current.id}: vault_tx is only set on vault_complete"
        )
    return updated


class InMemoryDepositStore(DepositStore):
    """Process-local dict-backed store.

    When retention_seconds is set, a record whose age reaches the window is
    treated as absent on read (and deleted), even before the sweeper runs.
    With terminal_only, records still in flight never expire on read.
    """

    def __init__(
        self,
        retention_seconds: Optional[float] = None,
        clock: Callable[[], int] = now_ms,
        terminal_only: bool = False,
    ):
        super().__init__(clock)
        self._records: dict[str, DepositRecord] = {}
        self.retention_ms = (
            int(retention_seconds * 1000) if retention_seconds is not None else None
        )
        self.terminal_only = terminal_only

    def _is_expired(self, record: DepositRecord) -> bool:
        if self.retention_ms is None:
            return False
        if self.terminal_only and not record.is_terminal:
            return False
        return record.age_ms(self.clock()) >= self.retention_ms

    def create(self, record: DepositRecord) -> DepositRecord:
        if record.id in self._records:
            raise DuplicateId(record.id)
        self._records[record.id] = record
        logger.debug(f"Deposit {record.id} created ({record.status.value})")
        return record

    def get(self, deposit_id: str) -> DepositRecord:
        record = self._records.get(deposit_id)
        if record is None:
            raise NotFound(deposit_id)
        if self._is_expired(record):
            logger.info(f"Deposit {deposit_id} expired on read")
            self.delete(deposit_id)
            raise NotFound(deposit_id)
        return record

    def update(self, deposit_id: str, **fields: Any) -> DepositRecord:
        current = self.get(deposit_id)
        updated = check_update(current, fields)
        self._records[deposit_id] = updated
        return updated

    def delete(self, deposit_id: str) -> bool:
        if self._records.pop(deposit_id, None) is None:
            return False
        self._notify_deleted(deposit_id)
        return True

    def values(self) -> list[DepositRecord]:
        return list(self._records.values())

    def clear(self) -> None:
        """Drop every record (useful for testing)."""
        for deposit_id in list(self._records):
            self.delete(deposit_id)

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, deposit_id: object) -> bool:
        return deposit_id in self._records
