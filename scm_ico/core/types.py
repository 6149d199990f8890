"""Type definitions and enums for the SCM ICO."""

import hashlib
from enum import Enum

# Type aliases for common patterns
Address = str    # Account identifier (hex string by convention)
Amount = int     # Non-negative integer amount in base units (wei)
Timestamp = int  # Unix timestamp in seconds

NULL_ADDRESS: Address = "0x" + "0" * 40

WEI_PER_ETHER = 10**18


def is_null_address(address: Address | None) -> bool:
    """Check whether an address is missing or the all-zero address."""
    if not address:
        return True
    value = address.lower()
    if value.startswith("0x"):
        value = value[2:]
    return value == "" or set(value) == {"0"}


class IcoState(str, Enum):
    """Crowdsale lifecycle states."""

    ONGOING = "ongoing"     # Accepting funds
    CLOSED = "closed"       # Target reached, hold period running
    FINISHED = "finished"   # Hold period over, claims open

    @property
    def code(self) -> int:
        """Numeric state code as exposed by the on-chain ABI."""
        codes = {
            IcoState.ONGOING: 0,
            IcoState.CLOSED: 1,
            IcoState.FINISHED: 2,
        }
        return codes[self]

    @property
    def display_name(self) -> str:
        """Human-readable display name."""
        return self.value.capitalize()


def derive_address(*parts: str) -> Address:
    """Derive a deterministic contract-style address from seed parts."""
    digest = hashlib.sha256(":".join(parts).encode("utf-8")).hexdigest()
    return "0x" + digest[-40:]
