"""Tests for JSON persistence of a sale."""

import json

import pytest

from scm_ico.core.exceptions import StateNotFoundError, ValidationError
from scm_ico.core.types import WEI_PER_ETHER as ETHER, IcoState
from scm_ico.storage.json_store import SaleSnapshot, SaleStore
from scm_ico.sale.escrow import CrowdsaleEscrow


@pytest.fixture
def store(tmp_path) -> SaleStore:
    return SaleStore(tmp_path / "state" / "sale.json")


class _OtherAsset:
    address = "0x7777777777777777777777777777777777777777"


class TestRoundTrip:
    """Tests for saving and rebuilding a sale."""

    def test_mid_sale(self, ico, store, clock, addr1, addr2):
        ico.fund(addr1, 4 * ETHER)
        store.save_escrow(ico)

        restored = store.load_escrow(clock)

        assert restored.address == ico.address
        assert restored.receiver == ico.receiver
        assert restored.raised == 4 * ETHER
        assert restored.contributions() == {addr1: 4 * ETHER}
        assert restored.state() == IcoState.ONGOING
        assert restored.token.holders() == ico.token.holders()
        assert restored.payment_asset.holders() == ico.payment_asset.holders()
        assert restored.payment_asset.allowance(addr2, ico.address) == 100 * ETHER

    def test_restored_sale_keeps_working(self, ico, store, clock, addr1, addr2):
        ico.fund(addr1, 4 * ETHER)
        store.save_escrow(ico)
        restored = store.load_escrow(clock)

        restored.fund(addr2, 6 * ETHER)

        assert restored.state() == IcoState.CLOSED
        assert restored.close_time == clock.now()

    def test_closed_sale(self, ico, store, clock, addr1):
        ico.fund(addr1, 10 * ETHER)
        store.save_escrow(ico)

        restored = store.load_escrow(clock)

        assert restored.close_time == ico.close_time
        assert restored.state() == IcoState.CLOSED
        clock.advance(ico.hold_duration)
        assert restored.claim(addr1) == 100 * ETHER

    def test_restore_does_not_replay_events(self, ico, store, clock, addr1):
        ico.fund(addr1, 4 * ETHER)
        store.save_escrow(ico)

        restored = store.load_escrow(clock)

        assert restored.events() == []
        assert restored.token.events() == []
        assert restored.payment_asset.events() == []


class TestStoreErrors:
    """Tests for invalid or missing state."""

    def test_missing_file(self, store):
        assert not store.exists()
        with pytest.raises(StateNotFoundError):
            store.load()

    def test_delete(self, ico, store):
        store.save_escrow(ico)
        assert store.exists()

        assert store.delete()
        assert not store.exists()
        assert not store.delete()

    def test_rejects_raised_above_target(self, ico, store):
        store.save_escrow(ico)
        data = json.loads(store.path.read_text())
        data["raised"] = 11 * ETHER
        store.path.write_text(json.dumps(data))

        with pytest.raises(ValidationError):
            store.load_escrow()

    def test_rejects_close_time_without_target(self, ico, store):
        store.save_escrow(ico)
        data = json.loads(store.path.read_text())
        data["close_time"] = 1
        store.path.write_text(json.dumps(data))

        with pytest.raises(ValidationError):
            store.load_escrow()

    def test_rejects_unknown_version(self, ico, store):
        store.save_escrow(ico)
        data = json.loads(store.path.read_text())
        data["version"] = 99
        store.path.write_text(json.dumps(data))

        with pytest.raises(ValidationError):
            store.load()

    def test_capture_requires_wrapped_ether(self, clock, eth_receiver):
        escrow = CrowdsaleEscrow(_OtherAsset(), eth_receiver, clock=clock)

        with pytest.raises(ValidationError):
            SaleSnapshot.capture(escrow)
