"""Output formatters for sale information.

Provides two output formats:
- JSON: Machine-readable, complete data
- Table: Human-readable CLI output
"""

import io
import json
import logging
from abc import ABC, abstractmethod
from datetime import datetime

from rich.console import Console
from rich.table import Table

from ..core.models import IcoInfo
from ..core.types import IcoState, Timestamp
from ..core.units import format_amount

logger = logging.getLogger(__name__)

STATE_STYLES = {
    IcoState.ONGOING: "green",
    IcoState.CLOSED: "yellow",
    IcoState.FINISHED: "cyan",
}


def format_timestamp(timestamp: Timestamp | None) -> str:
    """Render a Unix timestamp in local time."""
    if timestamp is None:
        return "-"
    return datetime.fromtimestamp(timestamp).astimezone().strftime("%Y-%m-%d %H:%M:%S %Z")


class OutputFormatter(ABC):
    """Abstract base class for output formatters."""

    @abstractmethod
    def format(self, info: IcoInfo) -> str:
        """Format the sale info as a string."""
        pass

    def format_to_file(self, info: IcoInfo, filepath: str) -> None:
        """Write formatted info to a file."""
        with open(filepath, "w", encoding="utf-8") as f:
            f.write(self.format(info))


class JSONFormatter(OutputFormatter):
    """Formats sale info as JSON."""

    def __init__(self, indent: int = 2):
        self.indent = indent

    def format(self, info: IcoInfo) -> str:
        """Format info as JSON string."""
        data = info.model_dump(mode="json")
        data["state_code"] = info.state.code
        return json.dumps(data, indent=self.indent)


class TableFormatter(OutputFormatter):
    """Formats sale info as a rich table for CLI output."""

    def __init__(self, width: int = 100, payment_symbol: str = "ETH", token_symbol: str = "SCM"):
        """
        Initialize table formatter.

        Args:
            width: Maximum table width
            payment_symbol: Unit label for payment amounts
            token_symbol: Unit label for token amounts
        """
        self.width = width
        self.payment_symbol = payment_symbol
        self.token_symbol = token_symbol

    def build(self, info: IcoInfo) -> Table:
        """Build the rich table for direct printing."""
        table = Table(title="ICO", show_header=False, width=self.width)
        table.add_column("Field", style="bold")
        table.add_column("Value")

        style = STATE_STYLES.get(info.state, "white")
        table.add_row("State", f"[{style}]{info.state.display_name}[/]")
        table.add_row("Raised", format_amount(info.raised, symbol=self.payment_symbol))
        table.add_row("Target", format_amount(info.target, symbol=self.payment_symbol))
        table.add_row("Left ETH", format_amount(info.left_eth, symbol=self.payment_symbol))
        table.add_row("Left SCM", format_amount(info.left_scm, symbol=self.token_symbol))
        table.add_row("Rate", f"{info.rate} {self.token_symbol} per {self.payment_symbol}")
        table.add_row("Hold duration", f"{info.hold_duration}s")
        table.add_row("ICO", info.ico_address)
        table.add_row("SCM", info.scm_address)
        table.add_row("WETH", info.weth_address)
        table.add_row("Receiver", info.receiver)

        if info.state != IcoState.ONGOING:
            table.add_row("Close time", format_timestamp(info.close_time))
            table.add_row("Finish time", format_timestamp(info.finish_time))

        return table

    def format(self, info: IcoInfo) -> str:
        """Render the table to plain text."""
        buffer = io.StringIO()
        console = Console(file=buffer, width=self.width, color_system=None)
        console.print(self.build(info))
        return buffer.getvalue()
