"""Custom exceptions for the SCM ICO.

Every failure is a synchronous rejection of the operation that raised it.
Nothing is mutated before an exception is raised, so callers never have to
roll anything back.
"""


class ScmError(Exception):
    """Base exception for all SCM ICO errors."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


# Null-address misuse


class InvalidRecipient(ScmError):
    """Raised when tokens would be sent to the null address."""

    def __init__(self, recipient: str | None):
        super().__init__("invalid recipient", {"recipient": recipient})
        self.recipient = recipient


class InvalidSender(ScmError):
    """Raised when a delegated transfer names the null address as owner."""

    def __init__(self, sender: str | None):
        super().__init__("invalid sender", {"sender": sender})
        self.sender = sender


class InvalidSpender(ScmError):
    """Raised when approving the null address."""

    def __init__(self, spender: str | None):
        super().__init__("invalid spender", {"spender": spender})
        self.spender = spender


class InvalidAmount(ScmError):
    """Raised when an amount is negative or not an integer."""

    def __init__(self, amount: object):
        super().__init__(f"invalid amount: {amount!r}", {"amount": amount})
        self.amount = amount


# Balances and allowances


class InsufficientFunds(ScmError):
    """Raised when an account balance is below the requested amount."""

    def __init__(self, account: str, balance: int, requested: int, message: str = "insufficient funds"):
        super().__init__(
            message,
            {"account": account, "balance": balance, "requested": requested},
        )
        self.account = account
        self.balance = balance
        self.requested = requested


class InsufficientPaymentFunds(InsufficientFunds):
    """Raised when a contributor holds less of the payment asset than they fund."""

    def __init__(self, account: str, balance: int, requested: int):
        super().__init__(account, balance, requested, message="not enough WETH")


class AllowanceExhausted(ScmError):
    """Raised when a spender's remaining budget is below the requested amount."""

    def __init__(
        self,
        owner: str,
        spender: str,
        allowance: int,
        requested: int,
        message: str = "allowance exhausted",
    ):
        super().__init__(
            message,
            {
                "owner": owner,
                "spender": spender,
                "allowance": allowance,
                "requested": requested,
            },
        )
        self.owner = owner
        self.spender = spender
        self.allowance = allowance
        self.requested = requested


# Sale lifecycle


class TargetExceeded(ScmError):
    """Raised when funding would push the raised total past the sale target."""

    def __init__(self, requested: int, left: int):
        super().__init__("not enough tokens left", {"requested": requested, "left": left})
        self.requested = requested
        self.left = left


class IcoClosed(ScmError):
    """Raised when funding a sale that is no longer ongoing."""

    def __init__(self, state: str):
        super().__init__("ICO is closed", {"state": state})
        self.state = state


class NotFinished(ScmError):
    """Raised when claiming before the hold period is over."""

    def __init__(self, state: str):
        super().__init__("ICO is not finished yet", {"state": state})
        self.state = state


class NothingToClaim(ScmError):
    """Raised when a contributor has no unclaimed entitlement."""

    def __init__(self, account: str):
        super().__init__("no SCM tokens to claim", {"account": account})
        self.account = account


class ArithmeticOverflow(ScmError):
    """Raised when an amount would leave the unsigned 256-bit range."""

    def __init__(self, operation: str, left: int, right: int):
        super().__init__(
            f"arithmetic overflow in {operation}",
            {"operation": operation, "left": left, "right": right},
        )
        self.operation = operation


# Driver layer


class ValidationError(ScmError):
    """Raised when user input fails validation."""

    def __init__(self, field: str, value: str, reason: str):
        message = f"Validation failed for {field}={value}: {reason}"
        super().__init__(message, {"field": field, "value": value, "reason": reason})
        self.field = field
        self.value = value
        self.reason = reason


class ConfigurationError(ScmError):
    """Raised when configuration is invalid or missing."""

    def __init__(self, config_key: str, message: str):
        full_message = f"Configuration error [{config_key}]: {message}"
        super().__init__(full_message, {"config_key": config_key})
        self.config_key = config_key


class StateNotFoundError(ScmError):
    """Raised when no persisted sale exists at the given path."""

    def __init__(self, path: str):
        super().__init__(f"No deployed sale found at {path}", {"path": path})
        self.path = path
