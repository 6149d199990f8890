"""Base classes for fungible-token ledgers.

A ledger tracks one balance per account and an allowance table for
delegated transfers. Every mutating call runs under the ledger's lock and
validates everything before touching state, so a call either applies fully
or raises with no effect.
"""

import logging
import threading
from abc import ABC, abstractmethod
from typing import Protocol

from ..core.arithmetic import checked_add, checked_sub, require_amount
from ..core.exceptions import (
    AllowanceExhausted,
    InsufficientFunds,
    InvalidRecipient,
    InvalidSender,
    InvalidSpender,
)
from ..core.models import ApprovalEvent, Notification, TokenMetadata, TransferEvent
from ..core.types import NULL_ADDRESS, Address, Amount, is_null_address
from .events import EventLog

logger = logging.getLogger(__name__)


class PaymentAsset(Protocol):
    """What the crowdsale needs from the asset it is paid in."""

    address: Address

    def balance_of(self, account: Address) -> Amount: ...

    def allowance(self, owner: Address, spender: Address) -> Amount: ...

    def transfer_from(self, caller: Address, owner: Address, to: Address, amount: Amount) -> None: ...


class BaseLedger(ABC):
    """Abstract base class for all ledgers."""

    def __init__(self, address: Address, metadata: TokenMetadata):
        """
        Initialize an empty ledger.

        Args:
            address: The ledger's own account identifier
            metadata: Name, symbol and decimals
        """
        self.address = address
        self.metadata = metadata
        self._balances: dict[Address, Amount] = {}
        self._allowances: dict[tuple[Address, Address], Amount] = {}
        self._lock = threading.RLock()
        self.event_log = EventLog(address)

    @property
    def name(self) -> str:
        return self.metadata.name

    @property
    def symbol(self) -> str:
        return self.metadata.symbol

    @property
    def decimals(self) -> int:
        return self.metadata.decimals

    @property
    @abstractmethod
    def total_supply(self) -> Amount:
        """Total amount in circulation."""
        pass

    # Reads

    def balance_of(self, account: Address) -> Amount:
        return self._balances.get(account, 0)

    def allowance(self, owner: Address, spender: Address) -> Amount:
        return self._allowances.get((owner, spender), 0)

    def holders(self) -> dict[Address, Amount]:
        """Return a copy of every non-zero balance."""
        with self._lock:
            return dict(self._balances)

    def allowance_table(self) -> dict[tuple[Address, Address], Amount]:
        """Return a copy of every non-zero allowance."""
        with self._lock:
            return dict(self._allowances)

    def events(self) -> list[Notification]:
        return self.event_log.events()

    # Mutations

    def transfer(self, caller: Address, to: Address, amount: Amount) -> None:
        """
        Move amount from the caller's balance to another account.

        Raises:
            InvalidRecipient: If to is the null address
            InsufficientFunds: If the caller holds less than amount
        """
        require_amount(amount)
        with self._lock:
            if is_null_address(to):
                raise InvalidRecipient(to)

            balance = self.balance_of(caller)
            if balance < amount:
                raise InsufficientFunds(caller, balance, amount)

            self._move(caller, to, amount)

    def approve(self, caller: Address, spender: Address, amount: Amount) -> None:
        """
        Set (overwrite) how much spender may move out of the caller's balance.

        Approving yourself is accepted but inert: the allowance stays zero and
        the approval notification reports zero.

        Raises:
            InvalidSpender: If spender is the null address
        """
        require_amount(amount)
        with self._lock:
            if is_null_address(spender):
                raise InvalidSpender(spender)

            if spender == caller:
                logger.debug(f"[{self.symbol}] Ignoring self-approval by {caller}")
                self.event_log.emit(ApprovalEvent(owner=caller, spender=caller, amount=0))
                return

            self._set_allowance(caller, spender, amount)
            self.event_log.emit(ApprovalEvent(owner=caller, spender=spender, amount=amount))

    def transfer_from(self, caller: Address, owner: Address, to: Address, amount: Amount) -> None:
        """
        Move amount out of owner's balance using the caller's allowance.

        Checks run in a fixed order: recipient, sender, allowance, balance.
        A spender who is short on both allowance and funds gets
        AllowanceExhausted.

        Raises:
            InvalidRecipient: If to is the null address
            InvalidSender: If owner is the null address
            AllowanceExhausted: If the caller's allowance is below amount
            InsufficientFunds: If owner holds less than amount
        """
        require_amount(amount)
        with self._lock:
            if is_null_address(to):
                raise InvalidRecipient(to)
            if is_null_address(owner):
                raise InvalidSender(owner)

            remaining = self._remaining_allowance(owner, caller, amount)

            balance = self.balance_of(owner)
            if balance < amount:
                raise InsufficientFunds(owner, balance, amount)

            if remaining is not None:
                self._set_allowance(owner, caller, remaining)
            self._move(owner, to, amount)

    # Internals (callers must hold the lock)

    def _remaining_allowance(self, owner: Address, spender: Address, amount: Amount) -> Amount | None:
        """
        Return the allowance left after spending amount.

        Returns None when the spend does not consume any allowance.
        """
        current = self.allowance(owner, spender)
        if current < amount:
            raise AllowanceExhausted(owner, spender, current, amount)
        return current - amount

    def _set_allowance(self, owner: Address, spender: Address, amount: Amount) -> None:
        if amount:
            self._allowances[(owner, spender)] = amount
        else:
            self._allowances.pop((owner, spender), None)

    def _move(self, sender: Address, recipient: Address, amount: Amount) -> None:
        self._debit(sender, amount)
        self._credit(recipient, amount)
        self.event_log.emit(TransferEvent(sender=sender, recipient=recipient, amount=amount))

    def _credit(self, account: Address, amount: Amount) -> None:
        self._balances[account] = checked_add(self.balance_of(account), amount)
        if not self._balances[account]:
            del self._balances[account]

    def _debit(self, account: Address, amount: Amount) -> None:
        remaining = checked_sub(self.balance_of(account), amount)
        if remaining:
            self._balances[account] = remaining
        else:
            self._balances.pop(account, None)

    def _mint(self, account: Address, amount: Amount) -> None:
        self._credit(account, amount)
        self.event_log.emit(TransferEvent(sender=NULL_ADDRESS, recipient=account, amount=amount))

    def _burn(self, account: Address, amount: Amount) -> None:
        self._debit(account, amount)
        self.event_log.emit(TransferEvent(sender=account, recipient=NULL_ADDRESS, amount=amount))

    def _load(
        self,
        balances: dict[Address, Amount],
        allowances: dict[tuple[Address, Address], Amount],
    ) -> None:
        """Replace both tables wholesale (used when restoring a snapshot)."""
        with self._lock:
            self._balances = {a: require_amount(v) for a, v in balances.items() if v}
            self._allowances = {k: require_amount(v) for k, v in allowances.items() if v}
