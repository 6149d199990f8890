#!/usr/bin/env python3
"""
JSON-based storage for a deployed sale.

Stands in for the chain between CLI invocations: the escrow, its SCM ledger
and the WETH ledger are captured into one JSON file and rebuilt from it.
"""

import json
import logging
from dataclasses import dataclass, field, asdict
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, List, Dict, Any

from ..core.clock import Clock
from ..core.config import IcoSettings
from ..core.exceptions import StateNotFoundError, ValidationError
from ..core.models import TokenMetadata
from ..ledger.token import TokenLedger
from ..ledger.wrapped import WrappedEther
from ..sale.escrow import CrowdsaleEscrow

logger = logging.getLogger(__name__)

SNAPSHOT_VERSION = 1


@dataclass
class LedgerState:
    """Balances and allowances of one ledger."""
    address: str
    balances: Dict[str, int] = field(default_factory=dict)
    allowances: List[Dict[str, Any]] = field(default_factory=list)  # [{owner, spender, amount}]

    @classmethod
    def capture(cls, ledger: TokenLedger | WrappedEther) -> "LedgerState":
        return cls(
            address=ledger.address,
            balances=ledger.holders(),
            allowances=[
                {"owner": owner, "spender": spender, "amount": amount}
                for (owner, spender), amount in ledger.allowance_table().items()
            ],
        )

    def allowance_table(self) -> Dict[tuple, int]:
        return {(a["owner"], a["spender"]): int(a["amount"]) for a in self.allowances}


@dataclass
class SaleSnapshot:
    """Everything needed to rebuild a sale."""
    settings: Dict[str, Any]
    ico_address: str
    receiver: str
    scm: LedgerState
    weth: LedgerState
    raised: int = 0
    contributions: Dict[str, int] = field(default_factory=dict)
    close_time: Optional[int] = None
    version: int = SNAPSHOT_VERSION
    saved_at: str = ""

    @classmethod
    def capture(cls, escrow: CrowdsaleEscrow) -> "SaleSnapshot":
        """Capture a live sale. The payment asset must be WrappedEther."""
        if not isinstance(escrow.payment_asset, WrappedEther):
            raise ValidationError(
                "payment_asset",
                type(escrow.payment_asset).__name__,
                "only WrappedEther payment assets can be saved",
            )

        return cls(
            settings=escrow.settings.model_dump(),
            ico_address=escrow.address,
            receiver=escrow.receiver,
            scm=LedgerState.capture(escrow.token),
            weth=LedgerState.capture(escrow.payment_asset),
            raised=escrow.raised,
            contributions=escrow.contributions(),
            close_time=escrow.close_time,
        )

    def restore(self, clock: Optional[Clock] = None) -> CrowdsaleEscrow:
        """Rebuild the live escrow (with its SCM and WETH ledgers)."""
        settings = IcoSettings(**self.settings)
        weth = WrappedEther.restore(
            self.weth.address,
            balances=self.weth.balances,
            allowances=self.weth.allowance_table(),
        )
        scm = TokenLedger.restore(
            address=self.scm.address,
            deployer=self.ico_address,
            total_supply=settings.total_supply,
            metadata=TokenMetadata(
                name=settings.token_name,
                symbol=settings.token_symbol,
                decimals=settings.decimals,
            ),
            balances=self.scm.balances,
            allowances=self.scm.allowance_table(),
        )
        return CrowdsaleEscrow.restore(
            payment_asset=weth,
            receiver=self.receiver,
            settings=settings,
            address=self.ico_address,
            token=scm,
            raised=self.raised,
            contributions=self.contributions,
            close_time=self.close_time,
            clock=clock,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        data = asdict(self)
        data["saved_at"] = datetime.now(timezone.utc).isoformat()
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SaleSnapshot":
        """Create from dictionary."""
        data = dict(data)
        version = data.get("version", SNAPSHOT_VERSION)
        if version != SNAPSHOT_VERSION:
            raise ValidationError("version", str(version), f"expected {SNAPSHOT_VERSION}")

        for key in ("scm", "weth"):
            if isinstance(data.get(key), dict):
                data[key] = LedgerState(**data[key])

        return cls(**data)


class SaleStore:
    """
    JSON file holding one deployed sale.

    Usage:
        store = SaleStore(Path("scm_ico_state.json"))

        # Save after every mutating command
        store.save_escrow(escrow)

        # Rebuild in the next process
        escrow = store.load_escrow()
    """

    def __init__(self, path: Path):
        """Initialize store for the given file."""
        self.path = Path(path)

    def exists(self) -> bool:
        """Check if a sale has been saved."""
        return self.path.exists()

    def save(self, snapshot: SaleSnapshot) -> Path:
        """
        Save a snapshot to the JSON file.

        Returns the path to the saved file.
        """
        self.path.parent.mkdir(parents=True, exist_ok=True)

        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(snapshot.to_dict(), f, indent=2, ensure_ascii=False)

        logger.debug(f"Saved sale state to {self.path}")
        return self.path

    def load(self) -> SaleSnapshot:
        """
        Load the snapshot from the JSON file.

        Raises StateNotFoundError if the file doesn't exist.
        """
        if not self.path.exists():
            raise StateNotFoundError(str(self.path))

        with open(self.path, "r", encoding="utf-8") as f:
            data = json.load(f)

        return SaleSnapshot.from_dict(data)

    def save_escrow(self, escrow: CrowdsaleEscrow) -> Path:
        return self.save(SaleSnapshot.capture(escrow))

    def load_escrow(self, clock: Optional[Clock] = None) -> CrowdsaleEscrow:
        return self.load().restore(clock)

    def delete(self) -> bool:
        """Delete the state file. Returns True if deleted."""
        if self.path.exists():
            self.path.unlink()
            return True
        return False
