"""Storage module for persisted sale state."""

from .json_store import SaleSnapshot, SaleStore

__all__ = ["SaleSnapshot", "SaleStore"]
