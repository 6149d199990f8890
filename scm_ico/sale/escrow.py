"""Crowdsale escrow.

Sells SCM for a payment asset at a fixed rate until a target is raised,
then holds the purchased tokens until a hold period has passed.

Lifecycle:
- ONGOING: contributors call fund / fund_any; payment goes to the receiver
  and each contribution is recorded.
- CLOSED: the funding call that reaches the target fixes close_time.
  Nothing can be funded or claimed until finish_time.
- FINISHED: every contributor may claim contribution * rate SCM once.
"""

import logging
import threading

from ..core.arithmetic import checked_add, checked_mul, require_amount
from ..core.clock import Clock, SystemClock
from ..core.config import IcoSettings
from ..core.exceptions import (
    AllowanceExhausted,
    IcoClosed,
    InsufficientFunds,
    InsufficientPaymentFunds,
    InvalidRecipient,
    NotFinished,
    NothingToClaim,
    TargetExceeded,
    ValidationError,
)
from ..core.models import FundEvent, IcoClosedEvent, IcoInfo, Notification, TokenMetadata
from ..core.types import Address, Amount, IcoState, Timestamp, derive_address, is_null_address
from ..ledger.base import PaymentAsset
from ..ledger.events import EventLog
from ..ledger.token import TokenLedger
from .state import derive_state

logger = logging.getLogger(__name__)


class CrowdsaleEscrow:
    """
    Fixed-rate, fixed-target token sale with a post-close hold period.

    The escrow owns its TokenLedger and holds the whole supply in its own
    account there until contributors claim. Caller identity is passed
    explicitly to every mutating operation.

    Usage:
        weth = WrappedEther()
        ico = CrowdsaleEscrow(weth, receiver="0xfeed...")
        weth.deposit(alice, 5 * WEI_PER_ETHER)
        weth.approve(alice, ico.address, 5 * WEI_PER_ETHER)
        ico.fund(alice, 5 * WEI_PER_ETHER)
        ...
        ico.claim(alice)  # once state() is FINISHED
    """

    def __init__(
        self,
        payment_asset: PaymentAsset,
        receiver: Address,
        settings: IcoSettings | None = None,
        clock: Clock | None = None,
        address: Address | None = None,
    ):
        """
        Deploy the sale and mint target * rate SCM to it.

        Args:
            payment_asset: Ledger contributors pay with (WETH)
            receiver: Account credited with every payment
            settings: Target, rate, hold duration and token metadata
            clock: Time source (wall clock by default)
            address: The escrow's own address (derived if omitted)
        """
        settings = settings or IcoSettings()
        address = address or derive_address("ico", payment_asset.address, receiver)
        token = TokenLedger(
            deployer=address,
            total_supply=checked_mul(settings.target, settings.rate),
            metadata=TokenMetadata(
                name=settings.token_name,
                symbol=settings.token_symbol,
                decimals=settings.decimals,
            ),
        )
        self._setup(payment_asset, receiver, settings, clock, address, token)

        logger.info(
            f"[ICO] Deployed at {self.address}: target {self.target}, rate {self.rate}, "
            f"hold {self.hold_duration}s, receiver {self.receiver}"
        )

    def _setup(
        self,
        payment_asset: PaymentAsset,
        receiver: Address,
        settings: IcoSettings,
        clock: Clock | None,
        address: Address,
        token: TokenLedger,
    ) -> None:
        if is_null_address(receiver):
            raise InvalidRecipient(receiver)

        self.settings = settings
        self.payment_asset = payment_asset
        self.receiver = receiver
        self.clock = clock or SystemClock()
        self.address = address
        self.token = token

        self._raised: Amount = 0
        self._contributions: dict[Address, Amount] = {}
        self._close_time: Timestamp | None = None
        self._lock = threading.RLock()
        self.event_log = EventLog(address)

    @classmethod
    def restore(
        cls,
        payment_asset: PaymentAsset,
        receiver: Address,
        settings: IcoSettings,
        address: Address,
        token: TokenLedger,
        raised: Amount,
        contributions: dict[Address, Amount],
        close_time: Timestamp | None,
        clock: Clock | None = None,
    ) -> "CrowdsaleEscrow":
        """
        Rebuild a sale from saved state.

        Raises:
            ValidationError: If the saved numbers are inconsistent
        """
        if token.total_supply != settings.total_supply:
            raise ValidationError(
                "token.total_supply", str(token.total_supply), "does not match target * rate"
            )
        if not 0 <= raised <= settings.target:
            raise ValidationError("raised", str(raised), "must be between 0 and target")
        if sum(contributions.values()) > raised:
            raise ValidationError("contributions", str(sum(contributions.values())), "exceed raised")
        if (raised == settings.target) != (close_time is not None):
            raise ValidationError("close_time", str(close_time), "must be set exactly when target is raised")

        escrow = cls.__new__(cls)
        escrow._setup(payment_asset, receiver, settings, clock, address, token)
        escrow._raised = raised
        escrow._contributions = {a: require_amount(v) for a, v in contributions.items() if v}
        escrow._close_time = close_time
        return escrow

    # Fixed parameters

    @property
    def target(self) -> Amount:
        return self.settings.target

    @property
    def rate(self) -> int:
        return self.settings.rate

    @property
    def hold_duration(self) -> int:
        return self.settings.hold_duration

    # Derived reads

    @property
    def raised(self) -> Amount:
        return self._raised

    @property
    def close_time(self) -> Timestamp | None:
        """When the target was reached (None while ongoing)."""
        return self._close_time

    @property
    def finish_time(self) -> Timestamp | None:
        """When claims open (None while ongoing)."""
        if self._close_time is None:
            return None
        return checked_add(self._close_time, self.hold_duration)

    def state(self, now: Timestamp | None = None) -> IcoState:
        """Current lifecycle state, recomputed on every call."""
        if now is None:
            now = self.clock.now()
        return derive_state(self._close_time, now, self.hold_duration)

    def left_eth(self) -> Amount:
        """Payment asset still accepted before the target is reached."""
        return self.target - self._raised

    def left_scm(self) -> Amount:
        """SCM still for sale."""
        return checked_mul(self.left_eth(), self.rate)

    def balance_eth(self, account: Address) -> Amount:
        """Unclaimed payment amount contributed by account."""
        return self._contributions.get(account, 0)

    def balance_scm(self, account: Address) -> Amount:
        """SCM account can claim once the sale finishes."""
        return checked_mul(self.balance_eth(account), self.rate)

    def contributions(self) -> dict[Address, Amount]:
        """Return a copy of every unclaimed contribution."""
        with self._lock:
            return dict(self._contributions)

    def events(self) -> list[Notification]:
        return self.event_log.events()

    def info(self) -> IcoInfo:
        """Snapshot of the sale taken at a single timestamp."""
        with self._lock:
            now = self.clock.now()
            return IcoInfo(
                state=self.state(now),
                timestamp=now,
                target=self.target,
                rate=self.rate,
                hold_duration=self.hold_duration,
                raised=self._raised,
                left_eth=self.left_eth(),
                left_scm=self.left_scm(),
                close_time=self.close_time,
                finish_time=self.finish_time,
                ico_address=self.address,
                scm_address=self.token.address,
                weth_address=self.payment_asset.address,
                receiver=self.receiver,
            )

    # Operations

    def fund(self, caller: Address, amount: Amount) -> Amount:
        """
        Buy exactly amount worth of SCM.

        Pulls amount of the payment asset from the caller to the receiver.
        If this brings raised up to target, the sale closes in the same call.
        Funding zero is accepted and changes nothing.

        Returns:
            The amount funded

        Raises:
            IcoClosed: If the sale is not ongoing
            InsufficientPaymentFunds: If the caller holds less than amount
            AllowanceExhausted: If the escrow may not spend amount for the caller
            TargetExceeded: If amount is more than what is left
        """
        require_amount(amount)
        with self._lock:
            now = self.clock.now()
            self._require_ongoing(now)

            balance = self.payment_asset.balance_of(caller)
            if balance < amount:
                raise InsufficientPaymentFunds(caller, balance, amount)
            self._require_allowance(caller, amount)

            left = self.left_eth()
            if amount > left:
                raise TargetExceeded(amount, left)

            return self._accept(caller, amount, now)

    def fund_any(self, caller: Address, max_amount: Amount) -> Amount:
        """
        Buy as much SCM as possible, up to max_amount worth.

        The amount is clamped to the caller's payment balance and to what is
        left of the target. If that comes to zero nothing happens and no
        notification is emitted.

        Returns:
            The amount actually funded

        Raises:
            IcoClosed: If the sale is not ongoing
            AllowanceExhausted: If the escrow may not spend the clamped amount
        """
        require_amount(max_amount)
        with self._lock:
            now = self.clock.now()
            self._require_ongoing(now)

            amount = min(max_amount, self.payment_asset.balance_of(caller), self.left_eth())
            if amount:
                self._require_allowance(caller, amount)

            return self._accept(caller, amount, now)

    def claim(self, caller: Address) -> Amount:
        """
        Transfer the caller's purchased SCM to them.

        Each contributor can claim once; the contribution is zeroed on success.

        Returns:
            The SCM amount transferred

        Raises:
            NotFinished: If the hold period has not passed
            NothingToClaim: If the caller has no unclaimed contribution
        """
        with self._lock:
            now = self.clock.now()
            state = self.state(now)
            if state != IcoState.FINISHED:
                raise NotFinished(state.value)

            contribution = self.balance_eth(caller)
            if not contribution:
                raise NothingToClaim(caller)

            entitlement = checked_mul(contribution, self.rate)
            self.token.transfer(self.address, caller, entitlement)
            del self._contributions[caller]

        logger.info(f"[ICO] {caller} claimed {entitlement} {self.token.symbol}")
        return entitlement

    # Internals (callers must hold the lock)

    def _require_ongoing(self, now: Timestamp) -> None:
        state = self.state(now)
        if state != IcoState.ONGOING:
            raise IcoClosed(state.value)

    def _require_allowance(self, caller: Address, amount: Amount) -> None:
        allowance = self.payment_asset.allowance(caller, self.address)
        if allowance < amount:
            raise AllowanceExhausted(
                caller, self.address, allowance, amount, message="not allowed to spend WETH"
            )

    def _accept(self, caller: Address, amount: Amount, now: Timestamp) -> Amount:
        if not amount:
            logger.debug(f"[ICO] Nothing to fund for {caller}")
            return 0

        # Compute everything that can fail before moving any funds
        token_amount = checked_mul(amount, self.rate)
        raised = checked_add(self._raised, amount)
        contribution = checked_add(self.balance_eth(caller), amount)
        closes = raised == self.target
        if closes:
            finish_time = checked_add(now, self.hold_duration)

        try:
            self.payment_asset.transfer_from(self.address, caller, self.receiver, amount)
        except InsufficientPaymentFunds:
            raise
        except InsufficientFunds as e:
            raise InsufficientPaymentFunds(caller, e.balance, amount) from e

        self._raised = raised
        self._contributions[caller] = contribution
        self.event_log.emit(FundEvent(contributor=caller, payment_amount=amount, token_amount=token_amount))

        if closes:
            self._close_time = now
            self.event_log.emit(IcoClosedEvent(close_time=now, finish_time=finish_time))
            logger.info(f"[ICO] Target reached at {now}; claims open at {finish_time}")

        return amount
