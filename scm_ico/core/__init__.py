"""Core module - data models, types, settings and exceptions."""

from .models import (
    TransferEvent,
    ApprovalEvent,
    FundEvent,
    IcoClosedEvent,
    Notification,
    TokenMetadata,
    IcoInfo,
)
from .types import (
    Address,
    Amount,
    Timestamp,
    IcoState,
    NULL_ADDRESS,
    WEI_PER_ETHER,
    is_null_address,
    derive_address,
)
from .exceptions import (
    ScmError,
    InvalidRecipient,
    InvalidSender,
    InvalidSpender,
    InvalidAmount,
    InsufficientFunds,
    InsufficientPaymentFunds,
    AllowanceExhausted,
    TargetExceeded,
    IcoClosed,
    NotFinished,
    NothingToClaim,
    ArithmeticOverflow,
    ValidationError,
    ConfigurationError,
    StateNotFoundError,
)
from .clock import Clock, SystemClock, ManualClock
from .config import IcoSettings, get_settings, reload_settings

__all__ = [
    # Models
    "TransferEvent",
    "ApprovalEvent",
    "FundEvent",
    "IcoClosedEvent",
    "Notification",
    "TokenMetadata",
    "IcoInfo",
    # Types
    "Address",
    "Amount",
    "Timestamp",
    "IcoState",
    "NULL_ADDRESS",
    "WEI_PER_ETHER",
    "is_null_address",
    "derive_address",
    # Exceptions
    "ScmError",
    "InvalidRecipient",
    "InvalidSender",
    "InvalidSpender",
    "InvalidAmount",
    "InsufficientFunds",
    "InsufficientPaymentFunds",
    "AllowanceExhausted",
    "TargetExceeded",
    "IcoClosed",
    "NotFinished",
    "NothingToClaim",
    "ArithmeticOverflow",
    "ValidationError",
    "ConfigurationError",
    "StateNotFoundError",
    # Time and settings
    "Clock",
    "SystemClock",
    "ManualClock",
    "IcoSettings",
    "get_settings",
    "reload_settings",
]
