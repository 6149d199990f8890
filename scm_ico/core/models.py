"""Pydantic data models for the SCM ICO.

Notifications and snapshots are immutable (frozen) after creation so that a
recorded event can never be altered after the fact.
"""

from typing import Literal, Union

from pydantic import BaseModel, Field

from .types import Address, Amount, IcoState, Timestamp


class TransferEvent(BaseModel):
    """Tokens moved between two accounts (null address on mint/burn)."""

    kind: Literal["transfer"] = "transfer"
    sender: Address
    recipient: Address
    amount: Amount = Field(ge=0)

    model_config = {"frozen": True}


class ApprovalEvent(BaseModel):
    """An owner set a spender's allowance."""

    kind: Literal["approval"] = "approval"
    owner: Address
    spender: Address
    amount: Amount = Field(ge=0)

    model_config = {"frozen": True}


class FundEvent(BaseModel):
    """A contributor paid into the sale."""

    kind: Literal["fund"] = "fund"
    contributor: Address
    payment_amount: Amount = Field(ge=0)
    token_amount: Amount = Field(ge=0)

    model_config = {"frozen": True}


class IcoClosedEvent(BaseModel):
    """The sale reached its target; claims open at finish_time."""

    kind: Literal["ico_closed"] = "ico_closed"
    close_time: Timestamp
    finish_time: Timestamp

    model_config = {"frozen": True}


Notification = Union[TransferEvent, ApprovalEvent, FundEvent, IcoClosedEvent]


class TokenMetadata(BaseModel):
    """Descriptive token fields."""

    name: str
    symbol: str
    decimals: int = Field(default=18, ge=0, le=77)

    model_config = {"frozen": True}


class IcoInfo(BaseModel):
    """Point-in-time view of a sale, computed from a single timestamp."""

    state: IcoState
    timestamp: Timestamp
    target: Amount
    rate: int
    hold_duration: int
    raised: Amount
    left_eth: Amount
    left_scm: Amount
    close_time: Timestamp | None = None
    finish_time: Timestamp | None = None
    ico_address: Address
    scm_address: Address
    weth_address: Address
    receiver: Address

    model_config = {"frozen": True}

    @property
    def is_claimable(self) -> bool:
        """Check if claims are open."""
        return self.state == IcoState.FINISHED
