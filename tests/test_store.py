"""Tests for the deposit record store and state machine."""

import re

import pytest

from hifi.deposits.errors import DuplicateId, InvalidTransition, NotFound
from hifi.deposits.models import (
    DepositRecord,
    DepositRequest,
    DepositStatus,
    can_transition,
    generate_deposit_id,
)
from hifi.deposits.store import InMemoryDepositStore

from tests.conftest import START_MS, VALID_ADDRESS

BRIDGE_TX = "0x" + "b" * 64
VAULT_TX = "0x" + "c" * 64


def make_record(deposit_id: str = "hifi_1_abc", created_at: int = START_MS) -> DepositRecord:
    request = DepositRequest(
        amount="1000000", source_chain="ethereum", user_address=VALID_ADDRESS
    )
    return DepositRecord.pending(deposit_id, request, "sepolia", created_at)


class TestStateMachine:
    """Tests for the status transition table."""

    @pytest.mark.parametrize(
        "current,new",
        [
            (DepositStatus.PENDING, DepositStatus.GATEWAY_COMPLETE),
            (DepositStatus.PENDING, DepositStatus.FAILED),
            (DepositStatus.GATEWAY_COMPLETE, DepositStatus.VAULT_COMPLETE),
            (DepositStatus.GATEWAY_COMPLETE, DepositStatus.FAILED),
        ],
    )
    def test_allowed(self, current, new):
        assert can_transition(current, new)

    @pytest.mark.parametrize(
        "current,new",
        [
            (DepositStatus.PENDING, DepositStatus.VAULT_COMPLETE),
            (DepositStatus.GATEWAY_COMPLETE, DepositStatus.PENDING),
            (DepositStatus.VAULT_COMPLETE, DepositStatus.FAILED),
            (DepositStatus.FAILED, DepositStatus.PENDING),
            (DepositStatus.FAILED, DepositStatus.GATEWAY_COMPLETE),
        ],
    )
    def test_forbidden(self, current, new):
        assert not can_transition(current, new)

    def test_terminal_statuses(self):
        assert DepositStatus.VAULT_COMPLETE.is_terminal
        assert DepositStatus.FAILED.is_terminal
        assert not DepositStatus.PENDING.is_terminal
        assert not DepositStatus.GATEWAY_COMPLETE.is_terminal


class TestDepositId:
    """Tests for deposit id generation."""

    def test_format(self):
        deposit_id = generate_deposit_id(1718000000000)
        assert re.fullmatch(r"hifi_1718000000000_[0-9a-z]{9}", deposit_id)

    def test_same_millisecond_ids_differ(self):
        ids = {generate_deposit_id(START_MS) for _ in range(200)}
        assert len(ids) == 200


class TestInMemoryDepositStore:
    """Tests for store operations."""

    def test_create_and_get(self, store):
        record = store.create(make_record())

        assert store.get(record.id) == record
        assert record.status == DepositStatus.PENDING
        assert record.bridge_tx is None
        assert record.vault_tx is None
        assert record.error is None

    def test_duplicate_id(self, store):
        store.create(make_record())
        with pytest.raises(DuplicateId):
            store.create(make_record())

    def test_get_unknown(self, store):
        with pytest.raises(NotFound) as exc_info:
            store.get("hifi_0_missing")
        assert exc_info.value.message == "Deposit not found"
        assert exc_info.value.status_code == 404

    def test_update_unknown(self, store):
        with pytest.raises(NotFound):
            store.update("hifi_0_missing", status=DepositStatus.FAILED, error="x")

    def test_full_lifecycle(self, store):
        """Test the success path sets each tx at its stage."""
        record = store.create(make_record())

        bridged = store.update(
            record.id, status=DepositStatus.GATEWAY_COMPLETE, bridge_tx=BRIDGE_TX
        )
        assert bridged.status == DepositStatus.GATEWAY_COMPLETE
        assert bridged.vault_tx is None

        done = store.update(record.id, status=DepositStatus.VAULT_COMPLETE, vault_tx=VAULT_TX)
        assert done.status == DepositStatus.VAULT_COMPLETE
        assert done.bridge_tx == BRIDGE_TX
        assert done.vault_tx == VAULT_TX
        assert done.is_terminal

    def test_update_replaces_record(self, store):
        """Readers holding the old record never see it change."""
        original = store.create(make_record())
        store.update(original.id, status=DepositStatus.FAILED, error="boom")

        assert original.status == DepositStatus.PENDING
        assert store.get(original.id).status == DepositStatus.FAILED

    def test_status_accepts_string_value(self, store):
        record = store.create(make_record())
        updated = store.update(record.id, status="failed", error="boom")
        assert updated.status is DepositStatus.FAILED

    def test_skip_gateway_rejected(self, store):
        record = store.create(make_record())
        with pytest.raises(InvalidTransition):
            store.update(
                record.id,
                status=DepositStatus.VAULT_COMPLETE,
                bridge_tx=BRIDGE_TX,
                vault_tx=VAULT_TX,
            )
        assert store.get(record.id).status == DepositStatus.PENDING

    def test_gateway_complete_requires_bridge_tx(self, store):
        record = store.create(make_record())
        with pytest.raises(InvalidTransition):
            store.update(record.id, status=DepositStatus.GATEWAY_COMPLETE)

    def test_vault_tx_only_on_vault_complete(self, store):
        record = store.create(make_record())
        with pytest.raises(InvalidTransition):
            store.update(
                record.id,
                status=DepositStatus.GATEWAY_COMPLETE,
                bridge_tx=BRIDGE_TX,
                vault_tx=VAULT_TX,
            )

    def test_vault_complete_requires_vault_tx(self, store):
        record = store.create(make_record())
        store.update(record.id, status=DepositStatus.GATEWAY_COMPLETE, bridge_tx=BRIDGE_TX)
        with pytest.raises(InvalidTransition):
            store.update(record.id, status=DepositStatus.VAULT_COMPLETE)

    def test_terminal_is_final(self, store):
        record = store.create(make_record())
        store.update(record.id, status=DepositStatus.FAILED, error="boom")

        with pytest.raises(InvalidTransition):
            store.update(record.id, status=DepositStatus.PENDING)
        with pytest.raises(InvalidTransition):
            store.update(
                record.id, status=DepositStatus.GATEWAY_COMPLETE, bridge_tx=BRIDGE_TX
            )

    def test_failed_record_cannot_be_rewritten(self, store):
        """A failed record keeps its error and gains no tx hashes."""
        record = store.create(make_record())
        failed = store.update(record.id, status=DepositStatus.FAILED, error="boom")

        with pytest.raises(InvalidTransition):
            store.update(
                record.id, status=DepositStatus.FAILED, error="rewritten", bridge_tx=BRIDGE_TX
            )
        with pytest.raises(InvalidTransition):
            store.update(record.id, error="rewritten")
        assert store.get(record.id) == failed

    def test_completed_record_rejects_updates(self, store):
        record = store.create(make_record())
        store.update(record.id, status=DepositStatus.GATEWAY_COMPLETE, bridge_tx=BRIDGE_TX)
        done = store.update(record.id, status=DepositStatus.VAULT_COMPLETE, vault_tx=VAULT_TX)

        with pytest.raises(InvalidTransition):
            store.update(record.id, vault_tx="0x" + "d" * 64)
        with pytest.raises(InvalidTransition):
            store.update(record.id, status=DepositStatus.VAULT_COMPLETE)
        assert store.get(record.id) == done

    def test_bridge_tx_not_set_while_pending(self, store):
        record = store.create(make_record())

        with pytest.raises(InvalidTransition):
            store.update(record.id, bridge_tx=BRIDGE_TX)
        with pytest.raises(InvalidTransition):
            store.update(
                record.id, status=DepositStatus.FAILED, error="x", bridge_tx=BRIDGE_TX
            )
        assert store.get(record.id) == record

    def test_bridge_tx_not_replaced_after_gateway(self, store):
        record = store.create(make_record())
        store.update(record.id, status=DepositStatus.GATEWAY_COMPLETE, bridge_tx=BRIDGE_TX)

        with pytest.raises(InvalidTransition):
            store.update(record.id, bridge_tx="0x" + "d" * 64)
        failed = store.update(record.id, status=DepositStatus.FAILED, error="vault down")
        assert failed.bridge_tx == BRIDGE_TX

    @pytest.mark.parametrize(
        "field,value",
        [
            ("id", "hifi_2_other"),
            ("amount", "1"),
            ("source_chain", "base"),
            ("destination_chain", "mainnet"),
            ("user_address", "0x" + "0" * 40),
            ("created_at", 0),
        ],
    )
    def test_immutable_fields(self, store, field, value):
        record = store.create(make_record())
        with pytest.raises(InvalidTransition):
            store.update(record.id, **{field: value})
        assert store.get(record.id) == record

    def test_unchanged_immutable_value_allowed(self, store):
        record = store.create(make_record())
        updated = store.update(
            record.id, amount=record.amount, status=DepositStatus.FAILED, error="x"
        )
        assert updated.status == DepositStatus.FAILED

    def test_delete(self, store):
        record = store.create(make_record())

        assert store.delete(record.id) is True
        assert store.delete(record.id) is False
        with pytest.raises(NotFound):
            store.get(record.id)

    def test_find(self, store):
        store.create(make_record("hifi_1_a"))
        target = store.create(make_record("hifi_1_b"))

        assert store.find(lambda r: r.id == "hifi_1_b") == target
        assert store.find(lambda r: r.id == "hifi_1_z") is None

    def test_delete_listener(self, store):
        deleted = []
        store.add_delete_listener(deleted.append)
        record = store.create(make_record())

        store.delete(record.id)
        store.delete(record.id)

        assert deleted == [record.id]

    def test_failing_listener_does_not_block_delete(self, store):
        def broken(deposit_id):
            raise RuntimeError("listener bug")

        deleted = []
        store.add_delete_listener(broken)
        store.add_delete_listener(deleted.append)
        record = store.create(make_record())

        assert store.delete(record.id) is True
        assert deleted == [record.id]
        assert record.id not in store


class TestRetention:
    """Tests for age-based expiry."""

    def test_visible_just_before_window(self, store, clock):
        record = store.create(make_record(created_at=clock()))
        clock.now += 3600 * 1000 - 1

        assert store.get(record.id) == record

    def test_expires_on_read_at_window(self, store, clock):
        """A record is gone once its age reaches the window, sweep or not."""
        record = store.create(make_record(created_at=clock()))
        clock.advance(3600)

        with pytest.raises(NotFound):
            store.get(record.id)
        assert record.id not in store

    def test_update_after_expiry_is_not_found(self, store, clock):
        record = store.create(make_record(created_at=clock()))
        clock.advance(3601)

        with pytest.raises(NotFound):
            store.update(record.id, status=DepositStatus.FAILED, error="late")
        assert len(store) == 0

    def test_find_skips_expired(self, store, clock):
        """find() applies the same read-time expiry as get()."""
        old = store.create(make_record("hifi_1_old", created_at=clock()))
        clock.advance(1800)
        new = store.create(make_record("hifi_1_new", created_at=clock()))
        clock.advance(1800)

        assert store.find(lambda r: r.id == old.id) is None
        assert old.id not in store
        assert store.find(lambda r: r.amount == "1000000") == new

    def test_no_retention_never_expires(self, clock):
        store = InMemoryDepositStore(clock=clock)
        record = store.create(make_record(created_at=clock()))
        clock.advance(10 * 24 * 3600)

        assert store.get(record.id) == record

    def test_terminal_only_keeps_in_flight(self, clock):
        store = InMemoryDepositStore(retention_seconds=60, clock=clock, terminal_only=True)
        pending = store.create(make_record("hifi_1_p", created_at=clock()))
        failed = store.create(make_record("hifi_1_f", created_at=clock()))
        store.update(failed.id, status=DepositStatus.FAILED, error="x")
        clock.advance(120)

        assert store.get(pending.id) == pending
        with pytest.raises(NotFound):
            store.get(failed.id)

    def test_evict_older_than(self, store):
        old = store.create(make_record("hifi_1_old", created_at=START_MS))
        new = store.create(make_record("hifi_1_new", created_at=START_MS + 10))

        evicted = store.evict_older_than(START_MS + 10)

        assert evicted == [old]
        assert old.id not in store
        assert new.id in store

    def test_evict_terminal_only(self, store):
        pending = store.create(make_record("hifi_1_p"))
        done = store.create(make_record("hifi_1_d"))
        store.update(done.id, status=DepositStatus.FAILED, error="x")

        evicted = store.evict_older_than(START_MS + 1, terminal_only=True)

        assert [r.id for r in evicted] == [done.id]
        assert pending.id in store
