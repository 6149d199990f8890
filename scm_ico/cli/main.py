"""CLI entry point for the SCM ICO.

Usage:
    scm-ico deploy --receiver 0xfeed...
    scm-ico --account 0xabc... weth deposit 10eth
    scm-ico --account 0xabc... fund 5eth --approve-weth
    scm-ico info
    scm-ico --account 0xabc... claim --wait
"""

import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, NoReturn, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from ..core.config import IcoSettings, state_file_path
from ..core.exceptions import ScmError
from ..core.types import IcoState
from ..core.units import format_amount, parse_amount
from ..ledger.base import BaseLedger
from ..ledger.wrapped import WrappedEther
from ..output.formatters import JSONFormatter, TableFormatter, format_timestamp
from ..sale.escrow import CrowdsaleEscrow
from ..storage.json_store import SaleStore

logger = logging.getLogger(__name__)

# Initialize app
app = typer.Typer(
    name="scm-ico",
    help="Use CLI to spend your precious ETH and get some SCM!",
    add_completion=False,
    no_args_is_help=True,
)
scm_app = typer.Typer(help="Manage SCM tokens", no_args_is_help=True)
weth_app = typer.Typer(help="Manage wrapped ethereum tokens", no_args_is_help=True)
app.add_typer(scm_app, name="scm")
app.add_typer(weth_app, name="weth")

console = Console()


def setup_logging(verbose: bool = False) -> None:
    """Configure logging."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_time=False, show_path=False)],
    )


@dataclass
class CliState:
    """Options shared by every command."""

    store: SaleStore
    account: Optional[str]

    def require_account(self) -> str:
        if not self.account:
            console.print("[red]No account given: use --account or set ETH_ACCOUNT[/]")
            raise typer.Exit(1)
        return self.account

    def load(self) -> CrowdsaleEscrow:
        return self.store.load_escrow()


def _state(ctx: typer.Context) -> CliState:
    return ctx.obj


def _amount(text: str) -> int:
    try:
        return parse_amount(text)
    except ScmError as e:
        console.print(f"[red]{escape(e.message)}[/]")
        raise typer.Exit(1)


def _fail(error: ScmError) -> NoReturn:
    console.print(f"[red]Error: {escape(error.message)}[/]")
    raise typer.Exit(1)


def _refuse_escrow_account(account: str, escrow: CrowdsaleEscrow) -> None:
    if account.lower() == escrow.address.lower():
        console.print("[red]Error: cannot act as the ICO account[/]")
        raise typer.Exit(1)


@app.callback()
def main_callback(
    ctx: typer.Context,
    state: Optional[Path] = typer.Option(
        None,
        "--state",
        help="Sale state file (default: $SCM_STATE_FILE or ./scm_ico_state.json)",
    ),
    account: Optional[str] = typer.Option(
        None,
        "--account",
        envvar="ETH_ACCOUNT",
        help="Account that performs the operation",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose", "-v",
        help="Enable verbose logging",
    ),
) -> None:
    """Participate in the SCM ICO."""
    setup_logging(verbose)
    ctx.obj = CliState(store=SaleStore(state_file_path(state)), account=account)


@app.command()
def deploy(
    ctx: typer.Context,
    receiver: Optional[str] = typer.Option(
        None,
        "--receiver", "-r",
        help="Where the ICO sends ether (uses your account by default)",
    ),
    config: Optional[Path] = typer.Option(
        None,
        "--config",
        help="YAML file with target, rate and hold_duration",
    ),
    force: bool = typer.Option(
        False,
        "--force",
        help="Overwrite an existing deployment",
    ),
) -> None:
    """Deploy a new ICO with a fresh WETH ledger."""
    cli = _state(ctx)
    receiver = receiver or cli.require_account()

    if cli.store.exists() and not force:
        console.print(f"[red]A sale is already deployed at {cli.store.path} (use --force)[/]")
        raise typer.Exit(1)

    try:
        settings = IcoSettings.from_yaml(config) if config else IcoSettings.load()
        weth = WrappedEther()
        console.print(f"Using WETH implementation at {weth.address}")
        console.print(f"ICO will send ether to {receiver}")
        escrow = CrowdsaleEscrow(weth, receiver, settings=settings)
        cli.store.save_escrow(escrow)
    except ScmError as e:
        _fail(e)

    console.print(f"[green]ICO deployed at {escrow.address}[/]")


@app.command()
def info(
    ctx: typer.Context,
    output: str = typer.Option(
        "table",
        "--output", "-o",
        help="Output format: table, json",
    ),
) -> None:
    """Get status of the ICO."""
    try:
        escrow = _state(ctx).load()
    except ScmError as e:
        _fail(e)

    snapshot = escrow.info()
    if output.lower() == "json":
        print(JSONFormatter().format(snapshot))
    else:
        console.print(TableFormatter().build(snapshot))


@app.command()
def balance(
    ctx: typer.Context,
    address: Optional[str] = typer.Argument(
        None, help="Account we're fetching balance for (uses your account by default)"
    ),
    eth: bool = typer.Option(False, "--eth", help="Display balance in ETH"),
) -> None:
    """Get number of SCM tokens available to the given user."""
    cli = _state(ctx)
    address = address or cli.require_account()
    try:
        escrow = cli.load()
    except ScmError as e:
        _fail(e)

    if eth:
        console.print(f"ICO balance: {format_amount(escrow.balance_eth(address), symbol='ETH')}")
    else:
        console.print(f"ICO balance: {format_amount(escrow.balance_scm(address), symbol='SCM')}")


@app.command()
def fund(
    ctx: typer.Context,
    funds: str = typer.Argument(..., help="Number of ETH tokens to contribute to the ICO"),
    wrap_weth: bool = typer.Option(
        False, "--wrap-weth", help="Wrap and approve eth if you don't have enough of it"
    ),
    approve_weth: bool = typer.Option(
        False, "--approve-weth", help="Ensure that ICO is authorized to spend WETH"
    ),
) -> None:
    """Buy SCM."""
    cli = _state(ctx)
    account = cli.require_account()
    amount = _amount(funds)

    try:
        escrow = cli.load()
    except ScmError as e:
        _fail(e)
    weth = escrow.payment_asset

    try:
        if wrap_weth:
            if weth.balance_of(account) < amount:
                console.print("Wrapping WETH")
                weth.deposit(account, amount)
            else:
                console.print("WETH balance is sufficient, no need to wrap more")

        if approve_weth or wrap_weth:
            if weth.allowance(account, escrow.address) < amount:
                console.print("Approving WETH")
                weth.approve(account, escrow.address, amount)
            else:
                console.print("WETH allowance is sufficient, no need to approve more")

        escrow.fund(account, amount)
    except ScmError as e:
        # Wrapping and approving stick even if funding fails
        cli.store.save_escrow(escrow)
        _fail(e)
    cli.store.save_escrow(escrow)

    console.print("Done")
    console.print(f"ICO balance: {format_amount(escrow.balance_scm(account), symbol='SCM')}")


@app.command("fund-any")
def fund_any(
    ctx: typer.Context,
    funds: str = typer.Argument(..., help="Most ETH to contribute; clamped to what is left"),
) -> None:
    """Buy as much SCM as possible, up to the given amount."""
    cli = _state(ctx)
    account = cli.require_account()
    amount = _amount(funds)

    try:
        escrow = cli.load()
        funded = escrow.fund_any(account, amount)
        cli.store.save_escrow(escrow)
    except ScmError as e:
        _fail(e)

    console.print(f"Funded {format_amount(funded, symbol='ETH')}")
    console.print(f"ICO balance: {format_amount(escrow.balance_scm(account), symbol='SCM')}")


def wait_finish(store: SaleStore, poll_interval: float = 5.0) -> None:
    """Block until the saved sale reaches FINISHED."""
    announced = False
    while True:
        escrow = store.load_escrow()
        state = escrow.state()

        if state == IcoState.ONGOING:
            if not announced:
                console.print("Waiting for ICO to close")
                announced = True
            time.sleep(poll_interval)
            continue

        if state == IcoState.CLOSED:
            console.print(f"ICO will finish on {format_timestamp(escrow.finish_time)}")
            console.print("Waiting for ICO to finish")
            time.sleep(max(escrow.finish_time - escrow.clock.now(), 0))
            continue

        console.print("ICO finished")
        return


@app.command()
def claim(
    ctx: typer.Context,
    wait: bool = typer.Option(False, "--wait", help="If ICO is not finished, wait for it"),
) -> None:
    """Claim purchased SCM."""
    cli = _state(ctx)
    account = cli.require_account()

    try:
        if wait:
            wait_finish(cli.store)
        escrow = cli.load()
        escrow.claim(account)
        cli.store.save_escrow(escrow)
    except ScmError as e:
        _fail(e)

    console.print("Done")
    console.print(f"SCM balance: {format_amount(escrow.token.balance_of(account), symbol='SCM')}")


@app.command()
def wait(ctx: typer.Context) -> None:
    """Wait for ICO to finish."""
    try:
        wait_finish(_state(ctx).store)
    except ScmError as e:
        _fail(e)


# Token commands shared by the scm and weth groups


def _register_token_commands(
    group: typer.Typer,
    pick: Callable[[CrowdsaleEscrow], BaseLedger],
) -> None:
    @group.command("balance")
    def token_balance(
        ctx: typer.Context,
        address: Optional[str] = typer.Argument(
            None, help="Account we're fetching balance for (uses your account by default)"
        ),
    ) -> None:
        """Get balance of the given wallet."""
        cli = _state(ctx)
        address = address or cli.require_account()
        try:
            ledger = pick(cli.load())
        except ScmError as e:
            _fail(e)
        console.print(format_amount(ledger.balance_of(address), ledger.decimals, ledger.symbol))

    @group.command("transfer")
    def token_transfer(
        ctx: typer.Context,
        recipient: str = typer.Argument(..., help="Where are we transferring funds to"),
        funds: str = typer.Argument(..., help="Amount of funds we are transferring"),
        owner: Optional[str] = typer.Option(
            None,
            "--owner",
            help="Where are we transferring funds from (uses your account by default)",
        ),
    ) -> None:
        """Transfer funds between accounts."""
        cli = _state(ctx)
        account = cli.require_account()
        amount = _amount(funds)
        try:
            escrow = cli.load()
            _refuse_escrow_account(account, escrow)
            ledger = pick(escrow)
            if owner is None or owner == account:
                ledger.transfer(account, recipient, amount)
            else:
                ledger.transfer_from(account, owner, recipient, amount)
            cli.store.save_escrow(escrow)
        except ScmError as e:
            _fail(e)
        console.print("Done")

    @group.command("allowance")
    def token_allowance(
        ctx: typer.Context,
        owner: str = typer.Argument(..., help="Who owns tokens"),
        spender: str = typer.Argument(..., help="Who will be allowed to spend tokens"),
    ) -> None:
        """Check allowance for the given owner-spender pair."""
        try:
            ledger = pick(_state(ctx).load())
        except ScmError as e:
            _fail(e)
        console.print(format_amount(ledger.allowance(owner, spender), ledger.decimals, ledger.symbol))

    @group.command("approve")
    def token_approve(
        ctx: typer.Context,
        spender: str = typer.Argument(..., help="Who is allowed to withdraw funds"),
        funds: str = typer.Argument(
            ..., help="Amount of funds they are allowed to withdraw (overrides previous allowance)"
        ),
    ) -> None:
        """Allow some other user to withdraw funds from your account."""
        cli = _state(ctx)
        account = cli.require_account()
        amount = _amount(funds)
        try:
            escrow = cli.load()
            _refuse_escrow_account(account, escrow)
            pick(escrow).approve(account, spender, amount)
            cli.store.save_escrow(escrow)
        except ScmError as e:
            _fail(e)
        console.print("Done")


_register_token_commands(scm_app, lambda escrow: escrow.token)
_register_token_commands(weth_app, lambda escrow: escrow.payment_asset)


@weth_app.command("deposit")
def weth_deposit(
    ctx: typer.Context,
    funds: str = typer.Argument(..., help="Amount of ether to wrap"),
) -> None:
    """Wrap ether."""
    cli = _state(ctx)
    account = cli.require_account()
    amount = _amount(funds)
    try:
        escrow = cli.load()
        escrow.payment_asset.deposit(account, amount)
        cli.store.save_escrow(escrow)
    except ScmError as e:
        _fail(e)
    console.print("Done")


@weth_app.command("withdraw")
def weth_withdraw(
    ctx: typer.Context,
    funds: str = typer.Argument(..., help="Amount of ether to unwrap"),
) -> None:
    """Unwrap ether."""
    cli = _state(ctx)
    account = cli.require_account()
    amount = _amount(funds)
    try:
        escrow = cli.load()
        escrow.payment_asset.withdraw(account, amount)
        cli.store.save_escrow(escrow)
    except ScmError as e:
        _fail(e)
    console.print("Done")


@app.command()
def version() -> None:
    """Show version information."""
    from .. import __version__
    console.print(f"SCM ICO v{__version__}")


def main() -> None:
    """Main entry point."""
    app()


if __name__ == "__main__":
    main()
