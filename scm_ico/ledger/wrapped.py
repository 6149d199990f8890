"""Wrapped ether: the asset the crowdsale is paid in.

Supply is elastic. Depositing ether mints the same amount of WETH to the
depositor and withdrawing burns it.
"""

import logging

from ..core.arithmetic import UINT256_MAX, require_amount
from ..core.exceptions import InsufficientFunds
from ..core.models import TokenMetadata
from ..core.types import Address, Amount, derive_address
from .base import BaseLedger

logger = logging.getLogger(__name__)

WETH_METADATA = TokenMetadata(name="Wrapped Ether", symbol="WETH", decimals=18)


class WrappedEther(BaseLedger):
    """
    WETH-style ledger.

    Follows the canonical WETH contract for delegated transfers: an owner
    moving their own funds through transfer_from needs no allowance, and an
    allowance of 2**256 - 1 is never decremented.
    """

    def __init__(self, address: Address | None = None):
        super().__init__(address or derive_address("weth"), WETH_METADATA)

    @property
    def total_supply(self) -> Amount:
        with self._lock:
            return sum(self._balances.values())

    def deposit(self, caller: Address, amount: Amount) -> None:
        """Wrap ether: credit amount WETH to the caller."""
        require_amount(amount)
        with self._lock:
            self._mint(caller, amount)
        logger.debug(f"[WETH] {caller} wrapped {amount}")

    def withdraw(self, caller: Address, amount: Amount) -> None:
        """
        Unwrap ether: burn amount WETH from the caller.

        Raises:
            InsufficientFunds: If the caller holds less than amount
        """
        require_amount(amount)
        with self._lock:
            balance = self.balance_of(caller)
            if balance < amount:
                raise InsufficientFunds(caller, balance, amount)
            self._burn(caller, amount)
        logger.debug(f"[WETH] {caller} unwrapped {amount}")

    def _remaining_allowance(self, owner: Address, spender: Address, amount: Amount) -> Amount | None:
        if owner == spender or self.allowance(owner, spender) == UINT256_MAX:
            return None
        return super()._remaining_allowance(owner, spender, amount)

    @classmethod
    def restore(
        cls,
        address: Address,
        balances: dict[Address, Amount],
        allowances: dict[tuple[Address, Address], Amount],
    ) -> "WrappedEther":
        """Rebuild a ledger from saved tables without minting again."""
        ledger = cls(address)
        ledger._load(balances, allowances)
        return ledger
