"""Ledger module - the SCM token and the wrapped-ether payment asset."""

from .base import BaseLedger, PaymentAsset
from .events import EventLog
from .token import TokenLedger
from .wrapped import WrappedEther

__all__ = ["BaseLedger", "PaymentAsset", "EventLog", "TokenLedger", "WrappedEther"]
