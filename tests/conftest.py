"""Pytest configuration and fixtures for SCM ICO tests."""

import pytest

from scm_ico.core.clock import ManualClock
from scm_ico.core.config import IcoSettings
from scm_ico.ledger.token import TokenLedger
from scm_ico.ledger.wrapped import WrappedEther
from scm_ico.sale.escrow import CrowdsaleEscrow

ETHER = 10**18
START_TIME = 1_700_000_000


@pytest.fixture
def owner() -> str:
    return "0x1111111111111111111111111111111111111111"


@pytest.fixture
def eth_receiver() -> str:
    return "0x2222222222222222222222222222222222222222"


@pytest.fixture
def addr1() -> str:
    return "0x3333333333333333333333333333333333333333"


@pytest.fixture
def addr2() -> str:
    return "0x4444444444444444444444444444444444444444"


@pytest.fixture
def addr3() -> str:
    """Account that starts without any WETH or approvals."""
    return "0x5555555555555555555555555555555555555555"


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock(START_TIME)


@pytest.fixture
def scm(owner: str) -> TokenLedger:
    """Standalone SCM ledger with 100 units minted to owner."""
    return TokenLedger(deployer=owner, total_supply=100)


@pytest.fixture
def weth() -> WrappedEther:
    return WrappedEther()


@pytest.fixture
def ico(
    weth: WrappedEther,
    clock: ManualClock,
    owner: str,
    eth_receiver: str,
    addr1: str,
    addr2: str,
) -> CrowdsaleEscrow:
    """Sale with default settings; owner, addr1 and addr2 hold and approved 100 WETH."""
    sale = CrowdsaleEscrow(weth, eth_receiver, settings=IcoSettings(), clock=clock)
    for account in (owner, addr1, addr2):
        weth.deposit(account, 100 * ETHER)
        weth.approve(account, sale.address, 100 * ETHER)
    return sale


@pytest.fixture
def small_ico(
    weth: WrappedEther,
    clock: ManualClock,
    eth_receiver: str,
    addr1: str,
    addr2: str,
) -> CrowdsaleEscrow:
    """Sale with target=10 and rate=10 in base units; addr1 and addr2 hold 100 WETH."""
    settings = IcoSettings(target=10, rate=10, hold_duration=120)
    sale = CrowdsaleEscrow(weth, eth_receiver, settings=settings, clock=clock)
    for account in (addr1, addr2):
        weth.deposit(account, 100)
        weth.approve(account, sale.address, 100)
    return sale
