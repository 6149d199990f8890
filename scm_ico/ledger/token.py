"""Fixed-supply SCM token ledger."""

import logging

from ..core.arithmetic import require_amount
from ..core.exceptions import InvalidRecipient, ValidationError
from ..core.models import TokenMetadata
from ..core.types import Address, Amount, derive_address, is_null_address
from .base import BaseLedger

logger = logging.getLogger(__name__)

DEFAULT_METADATA = TokenMetadata(name="Scam", symbol="SCM", decimals=18)


class TokenLedger(BaseLedger):
    """
    Fungible token whose total supply is fixed at construction.

    The whole supply is credited to the deployer. Afterwards only transfer
    and transfer_from move balances, so the sum of all balances always
    equals total_supply.

    Usage:
        scm = TokenLedger(deployer="0xabc...", total_supply=1000)
        scm.transfer("0xabc...", "0xdef...", 10)
        scm.balance_of("0xdef...")  # 10
    """

    def __init__(
        self,
        deployer: Address,
        total_supply: Amount,
        metadata: TokenMetadata = DEFAULT_METADATA,
        address: Address | None = None,
    ):
        """
        Create the ledger and mint the whole supply to the deployer.

        Args:
            deployer: Account credited with the entire supply
            total_supply: Fixed number of base units in existence
            metadata: Token name, symbol and decimals
            address: The ledger's own address (derived from deployer if omitted)
        """
        if is_null_address(deployer):
            raise InvalidRecipient(deployer)
        require_amount(total_supply)

        super().__init__(address or derive_address("token", metadata.symbol, deployer), metadata)
        self._total_supply = total_supply
        self.deployer = deployer

        if total_supply:
            self._mint(deployer, total_supply)

        logger.info(f"[{self.symbol}] Deployed at {self.address}: {total_supply} units to {deployer}")

    @property
    def total_supply(self) -> Amount:
        return self._total_supply

    @classmethod
    def restore(
        cls,
        address: Address,
        deployer: Address,
        total_supply: Amount,
        metadata: TokenMetadata,
        balances: dict[Address, Amount],
        allowances: dict[tuple[Address, Address], Amount],
    ) -> "TokenLedger":
        """
        Rebuild a ledger from saved tables without minting again.

        Raises:
            ValidationError: If the balances do not add up to total_supply
        """
        if sum(balances.values()) != total_supply:
            raise ValidationError(
                "balances",
                str(sum(balances.values())),
                f"balances must add up to total supply {total_supply}",
            )

        ledger = cls.__new__(cls)
        BaseLedger.__init__(ledger, address, metadata)
        ledger._total_supply = total_supply
        ledger.deployer = deployer
        ledger._load(balances, allowances)
        return ledger
