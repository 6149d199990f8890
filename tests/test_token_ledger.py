"""Tests for the SCM token ledger."""

import random
import threading

import pytest

from scm_ico.core.exceptions import (
    AllowanceExhausted,
    InsufficientFunds,
    InvalidAmount,
    InvalidRecipient,
    InvalidSender,
    InvalidSpender,
    ScmError,
)
from scm_ico.core.models import ApprovalEvent, TransferEvent
from scm_ico.core.types import NULL_ADDRESS
from scm_ico.ledger.token import TokenLedger


class TestDeploy:
    """Tests for ledger construction."""

    def test_basic_information(self, scm):
        """Test token metadata."""
        assert scm.name == "Scam"
        assert scm.symbol == "SCM"
        assert scm.decimals == 18

    def test_total_supply(self, scm):
        """Test the fixed total supply."""
        assert scm.total_supply == 100

    def test_supply_assigned_to_deployer(self, scm, owner, addr1, addr2):
        """Test that the whole supply goes to the deploying account."""
        assert scm.balance_of(owner) == 100
        assert scm.balance_of(addr1) == 0
        assert scm.balance_of(addr2) == 0

    def test_mint_notification(self, scm, owner):
        """Test that construction records a transfer from the null address."""
        assert scm.events() == [TransferEvent(sender=NULL_ADDRESS, recipient=owner, amount=100)]

    def test_unknown_allowance_is_zero(self, scm, owner, addr1):
        assert scm.allowance(owner, addr1) == 0


class TestTransfer:
    """Tests for direct transfers."""

    def test_moves_balance(self, scm, owner, addr1):
        scm.transfer(owner, addr1, 40)

        assert scm.balance_of(owner) == 60
        assert scm.balance_of(addr1) == 40

    def test_emits_transfer(self, scm, owner, addr1):
        scm.transfer(owner, addr1, 40)

        assert scm.event_log.last() == TransferEvent(sender=owner, recipient=addr1, amount=40)

    def test_rejects_null_recipient(self, scm, owner):
        with pytest.raises(InvalidRecipient):
            scm.transfer(owner, NULL_ADDRESS, 1)

    def test_rejects_bare_hex_prefix_recipient(self, scm, owner):
        """Test that "0x" with no digits counts as the null address."""
        with pytest.raises(InvalidRecipient):
            scm.transfer(owner, "0x", 1)

        assert scm.balance_of(owner) == 100

    def test_rejects_overdraft(self, scm, owner, addr1):
        with pytest.raises(InsufficientFunds) as exc_info:
            scm.transfer(addr1, owner, 1)

        assert exc_info.value.balance == 0
        assert exc_info.value.requested == 1

    def test_self_transfer_succeeds_and_emits(self, scm, owner):
        """Test that sending to yourself is zero-sum but still notified."""
        scm.transfer(owner, owner, 100)

        assert scm.balance_of(owner) == 100
        assert scm.event_log.last() == TransferEvent(sender=owner, recipient=owner, amount=100)

    def test_self_transfer_still_checks_balance(self, scm, owner):
        with pytest.raises(InsufficientFunds):
            scm.transfer(owner, owner, 101)

    def test_rejects_negative_amount(self, scm, owner, addr1):
        with pytest.raises(InvalidAmount):
            scm.transfer(owner, addr1, -1)

    def test_rejects_non_integer_amount(self, scm, owner, addr1):
        with pytest.raises(InvalidAmount):
            scm.transfer(owner, addr1, 1.5)

    def test_failure_has_no_side_effects(self, scm, owner, addr1):
        before = scm.events()

        with pytest.raises(InsufficientFunds):
            scm.transfer(owner, addr1, 1000)

        assert scm.balance_of(owner) == 100
        assert scm.balance_of(addr1) == 0
        assert scm.events() == before


class TestApprove:
    """Tests for allowance management."""

    def test_sets_allowance(self, scm, owner, addr1):
        scm.approve(owner, addr1, 50)

        assert scm.allowance(owner, addr1) == 50
        assert scm.event_log.last() == ApprovalEvent(owner=owner, spender=addr1, amount=50)

    def test_overwrites_instead_of_adding(self, scm, owner, addr1):
        """Test that approvals replace the previous allowance."""
        scm.approve(owner, addr1, 10)
        scm.approve(owner, addr1, 50)
        scm.approve(owner, addr1, 10)

        assert scm.allowance(owner, addr1) == 10
        assert scm.event_log.of_type(ApprovalEvent) == [
            ApprovalEvent(owner=owner, spender=addr1, amount=10),
            ApprovalEvent(owner=owner, spender=addr1, amount=50),
            ApprovalEvent(owner=owner, spender=addr1, amount=10),
        ]

    def test_may_exceed_balance(self, scm, owner, addr1):
        scm.approve(owner, addr1, 1_000)

        assert scm.allowance(owner, addr1) == 1_000

    def test_rejects_null_spender(self, scm, owner):
        with pytest.raises(InvalidSpender):
            scm.approve(owner, NULL_ADDRESS, 10)

    def test_rejects_bare_hex_prefix_spender(self, scm, owner):
        with pytest.raises(InvalidSpender):
            scm.approve(owner, "0x", 10)

    def test_self_approval_is_inert(self, scm, owner):
        """Test that approving yourself grants nothing but is still notified."""
        scm.approve(owner, owner, 50)

        assert scm.allowance(owner, owner) == 0
        assert scm.event_log.last() == ApprovalEvent(owner=owner, spender=owner, amount=0)

    def test_approve_zero_clears(self, scm, owner, addr1):
        scm.approve(owner, addr1, 50)
        scm.approve(owner, addr1, 0)

        assert scm.allowance(owner, addr1) == 0
        assert scm.allowance_table() == {}


class TestTransferFrom:
    """Tests for delegated transfers."""

    def test_allowance_checked_before_balance(self, scm, owner, addr1, addr2):
        """Test that an over-allowance withdrawal fails even with enough balance."""
        scm.approve(owner, addr1, 50)

        with pytest.raises(AllowanceExhausted):
            scm.transfer_from(addr1, owner, addr2, 75)

    def test_allowance_error_wins_when_both_short(self, scm, owner, addr1, addr2):
        scm.transfer(owner, addr2, 90)
        scm.approve(owner, addr1, 5)

        with pytest.raises(AllowanceExhausted):
            scm.transfer_from(addr1, owner, addr2, 20)

    def test_balance_checked_after_allowance(self, scm, owner, addr1, addr2):
        scm.approve(owner, addr1, 500)

        with pytest.raises(InsufficientFunds):
            scm.transfer_from(addr1, owner, addr2, 200)

    def test_allowance_tracks_running_decrements(self, scm, owner, addr1, addr2):
        """Test withdrawals that spend allowances exactly down to zero."""
        scm.approve(owner, addr1, 50)
        scm.transfer_from(addr1, owner, addr2, 50)

        assert scm.allowance(owner, addr1) == 0
        assert scm.balance_of(addr2) == 50

        scm.approve(owner, addr1, 30)
        scm.transfer_from(addr1, owner, addr2, 20)
        assert scm.allowance(owner, addr1) == 10

        scm.transfer_from(addr1, owner, addr2, 10)
        assert scm.allowance(owner, addr1) == 0
        assert scm.balance_of(owner) == 20
        assert scm.balance_of(addr2) == 80

        with pytest.raises(AllowanceExhausted):
            scm.transfer_from(addr1, owner, addr2, 1)

    def test_emits_transfer_from_owner(self, scm, owner, addr1, addr2):
        scm.approve(owner, addr1, 50)
        scm.transfer_from(addr1, owner, addr2, 30)

        assert scm.event_log.last() == TransferEvent(sender=owner, recipient=addr2, amount=30)

    def test_rejects_null_recipient_first(self, scm, addr1):
        """Test that the recipient check precedes the sender check."""
        with pytest.raises(InvalidRecipient):
            scm.transfer_from(addr1, NULL_ADDRESS, NULL_ADDRESS, 1)

    def test_rejects_null_sender(self, scm, addr1, addr2):
        with pytest.raises(InvalidSender):
            scm.transfer_from(addr1, NULL_ADDRESS, addr2, 1)

    def test_failure_has_no_side_effects(self, scm, owner, addr1, addr2):
        scm.approve(owner, addr1, 500)
        before = scm.events()

        with pytest.raises(InsufficientFunds):
            scm.transfer_from(addr1, owner, addr2, 200)

        assert scm.allowance(owner, addr1) == 500
        assert scm.balance_of(owner) == 100
        assert scm.events() == before


class TestConservation:
    """Tests for supply invariants under arbitrary operation sequences."""

    def test_random_operations_conserve_supply(self):
        rng = random.Random(1234)
        accounts = [f"0x{i:040x}" for i in range(1, 6)]
        ledger = TokenLedger(deployer=accounts[0], total_supply=1_000)

        for _ in range(2_000):
            caller, other, third = rng.sample(accounts, 3)
            amount = rng.randint(0, 400)
            operation = rng.choice(["transfer", "approve", "transfer_from"])
            try:
                if operation == "transfer":
                    ledger.transfer(caller, other, amount)
                elif operation == "approve":
                    ledger.approve(caller, other, amount)
                else:
                    ledger.transfer_from(caller, other, third, amount)
            except ScmError:
                pass

            balances = [ledger.balance_of(a) for a in accounts]
            assert sum(balances) == ledger.total_supply
            assert all(b >= 0 for b in balances)
            assert all(v >= 0 for v in ledger.allowance_table().values())

    def test_concurrent_transfers_conserve_supply(self):
        accounts = [f"0x{i:040x}" for i in range(1, 9)]
        ledger = TokenLedger(deployer=accounts[0], total_supply=800)
        for account in accounts[1:]:
            ledger.transfer(accounts[0], account, 100)

        def worker(index: int) -> None:
            rng = random.Random(index)
            me = accounts[index]
            for _ in range(500):
                try:
                    ledger.transfer(me, rng.choice(accounts), rng.randint(1, 30))
                except InsufficientFunds:
                    pass

        threads = [threading.Thread(target=worker, args=(i,)) for i in range(len(accounts))]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert sum(ledger.holders().values()) == 800
        assert all(v > 0 for v in ledger.holders().values())
