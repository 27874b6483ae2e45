import pytest
from eth_account import Account

from core.constants import MAX_UINT256
from services.permit_token import PermitToken
from services.share_vault import ShareVault
from services.twab_ledger import TwabLedger
from services.yield_sub_vault import YieldSubVault

ASSET_UNIT = 10**18
START_TIME = 1_700_000_000


class FakeClock:
    def __init__(self, now: int = START_TIME):
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, seconds: int) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def alice_signer():
    return Account.from_key("0xac0974bec39a17e36ba4a6b4d238ff944bacb478cbed5efcae784d7bf4f2ff80")


@pytest.fixture
def bob_signer():
    return Account.from_key("0x59c6995e998f97a5a0044966f0945389dc9e86dae88c7a8412f4603b6b78690d")


@pytest.fixture
def alice(alice_signer):
    return alice_signer.address


@pytest.fixture
def bob(bob_signer):
    return bob_signer.address


@pytest.fixture
def owner():
    return Account.create().address


@pytest.fixture
def fee_recipient():
    return Account.create().address


@pytest.fixture
def asset(clock):
    return PermitToken("Test USD", "tUSD", decimals=18, clock=clock)


@pytest.fixture
def sub_vault(asset):
    return YieldSubVault(asset)


@pytest.fixture
def ledger(clock):
    return TwabLedger(clock=clock)


@pytest.fixture
def vault(asset, sub_vault, ledger, owner, fee_recipient):
    return ShareVault(
        asset,
        sub_vault,
        ledger,
        owner,
        name="Test Share Vault",
        yield_fee_recipient=fee_recipient,
    )


@pytest.fixture
def fund(asset):
    def fund(holder: str, amount: int, spender: str = None):
        asset.mint(holder, amount)
        if spender is not None:
            asset.approve(spender, MAX_UINT256, sender=holder)

    return fund
