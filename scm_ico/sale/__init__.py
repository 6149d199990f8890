"""Sale module - crowdsale escrow and its lifecycle."""

from .escrow import CrowdsaleEscrow
from .state import derive_state

__all__ = ["CrowdsaleEscrow", "derive_state"]
