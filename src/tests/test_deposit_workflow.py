from unittest.mock import patch

import pytest
from eth_account import Account

from core.constants import SPONSORSHIP_ADDRESS, UINT96_MAX, ZERO_ADDRESS
from core.exceptions import (
    AmountExceedsUint96,
    CapacityExceeded,
    DepositExceedsMax,
    InsufficientAllowance,
    InsufficientBalance,
    MintExceedsMax,
    ZeroAddressConfig,
)
from schemas import Deposit, RecordedExchangeRate, Sponsor, Transfer
from services.deposit_workflow import to_uint96
from services.interfaces import BalanceLedger, PermitAsset, YieldVault
from services.share_vault import ShareVault

ASSET_UNIT = 10**18


def test_first_deposit_mints_at_par(vault, asset, sub_vault, ledger, alice, fund):
    amount = 1000 * ASSET_UNIT
    fund(alice, amount, spender=vault.address)

    shares = vault.deposit(amount, alice, sender=alice)

    assert shares == amount
    assert vault.balance_of(alice) == amount
    assert ledger.total_supply(vault.address) == amount
    assert vault.total_supply() == amount
    assert vault.total_assets() == amount
    assert asset.balance_of(alice) == 0
    assert asset.balance_of(vault.address) == 0
    assert sub_vault.max_withdraw(vault.address) == amount
    assert vault.last_recorded_exchange_rate == ASSET_UNIT


def test_deposit_for_another_receiver(vault, alice, bob, fund):
    fund(alice, 10 * ASSET_UNIT, spender=vault.address)

    vault.deposit(10 * ASSET_UNIT, bob, sender=alice)

    assert vault.balance_of(bob) == 10 * ASSET_UNIT
    assert vault.balance_of(alice) == 0


def test_deposit_emits_events_in_order(vault, alice, fund):
    received = []
    vault.subscribe(received.append)
    fund(alice, 5 * ASSET_UNIT, spender=vault.address)

    vault.deposit(5 * ASSET_UNIT, alice, sender=alice)

    assert [type(event) for event in received] == [Transfer, RecordedExchangeRate, Deposit]
    deposit_event = received[-1]
    assert deposit_event.sender == alice
    assert deposit_event.owner == alice
    assert deposit_event.assets == 5 * ASSET_UNIT
    assert deposit_event.shares == 5 * ASSET_UNIT
    assert vault.events == received


def test_second_deposit_keeps_par(vault, alice, bob, fund):
    fund(alice, 1000 * ASSET_UNIT, spender=vault.address)
    fund(bob, 250 * ASSET_UNIT, spender=vault.address)

    vault.deposit(1000 * ASSET_UNIT, alice, sender=alice)
    shares = vault.deposit(250 * ASSET_UNIT, bob, sender=bob)

    assert shares == 250 * ASSET_UNIT
    assert vault.total_supply() == 1250 * ASSET_UNIT
    assert vault.exchange_rate() == ASSET_UNIT


def test_deposit_after_yield_still_mints_at_par(vault, sub_vault, alice, bob, fund):
    fund(alice, 1000 * ASSET_UNIT, spender=vault.address)
    fund(bob, 100 * ASSET_UNIT, spender=vault.address)
    vault.deposit(1000 * ASSET_UNIT, alice, sender=alice)
    sub_vault.report_gain(50 * ASSET_UNIT)

    shares = vault.deposit(100 * ASSET_UNIT, bob, sender=bob)

    assert shares == 100 * ASSET_UNIT
    assert vault.exchange_rate() == ASSET_UNIT
    assert vault.available_yield_balance() == 50 * ASSET_UNIT


def test_mint_pulls_assets_at_par(vault, asset, alice, fund):
    fund(alice, 100 * ASSET_UNIT, spender=vault.address)

    assets = vault.mint(40 * ASSET_UNIT, alice, sender=alice)

    assert assets == 40 * ASSET_UNIT
    assert vault.balance_of(alice) == 40 * ASSET_UNIT
    assert asset.balance_of(alice) == 60 * ASSET_UNIT


def test_mint_rounds_asset_cost_up(asset, sub_vault, ledger, owner, alice, bob, fund):
    vault_address = Account.create().address
    vault = ShareVault(
        asset,
        sub_vault,
        ledger,
        owner,
        address=vault_address,
        last_recorded_exchange_rate=ASSET_UNIT * 3 // 2,
    )
    # 100 shares backed by 150 assets
    ledger.mint(alice, 100 * ASSET_UNIT, sender=vault_address)
    asset.mint(vault_address, 150 * ASSET_UNIT)
    sub_vault.deposit(150 * ASSET_UNIT, vault_address, sender=vault_address)
    assert vault.exchange_rate() == ASSET_UNIT * 3 // 2

    fund(bob, 10, spender=vault.address)
    assert vault.preview_mint(3) == 5
    assets = vault.mint(3, bob, sender=bob)

    assert assets == 5
    assert vault.balance_of(bob) == 3
    assert asset.balance_of(bob) == 5
    assert vault.preview_deposit(5) == 3


def test_idle_buffer_covers_deposit(vault, asset, alice):
    asset.mint(vault.address, 100 * ASSET_UNIT)

    with patch.object(asset, "transfer_from", wraps=asset.transfer_from) as transfer_from:
        shares = vault.deposit(60 * ASSET_UNIT, alice, sender=alice)

    # only the sub-vault pulled from the vault
    assert transfer_from.call_count == 1
    assert transfer_from.call_args.args[0] == vault.address
    assert shares == 60 * ASSET_UNIT
    assert asset.balance_of(vault.address) == 40 * ASSET_UNIT


def test_deposit_pulls_only_shortfall(vault, asset, alice, bob, fund):
    asset.mint(vault.address, 40 * ASSET_UNIT)
    fund(bob, 1000 * ASSET_UNIT, spender=vault.address)

    with patch.object(asset, "transfer_from", wraps=asset.transfer_from) as transfer_from:
        vault.deposit(100 * ASSET_UNIT, bob, sender=bob)

    pulled = transfer_from.call_args_list[0]
    assert pulled.args == (bob, vault.address, 60 * ASSET_UNIT)
    assert asset.balance_of(bob) == 940 * ASSET_UNIT
    assert asset.balance_of(vault.address) == 0


def test_deposit_without_allowance_fails_before_minting(vault, ledger, alice, asset):
    asset.mint(alice, 10 * ASSET_UNIT)

    with pytest.raises(InsufficientAllowance):
        vault.deposit(10 * ASSET_UNIT, alice, sender=alice)

    assert ledger.total_supply(vault.address) == 0
    assert vault.events == []


def test_deposit_beyond_balance_fails_before_pulling(vault, asset, ledger, alice):
    asset.mint(alice, 3 * ASSET_UNIT)
    asset.approve(vault.address, 10 * ASSET_UNIT, sender=alice)

    with pytest.raises(InsufficientBalance):
        vault.deposit(10 * ASSET_UNIT, alice, sender=alice)

    assert asset.balance_of(alice) == 3 * ASSET_UNIT
    assert asset.allowance(alice, vault.address) == 10 * ASSET_UNIT
    assert ledger.total_supply(vault.address) == 0


@pytest.fixture
def seeded_vault(vault, asset, bob, alice, fund):
    fund(bob, 100 * ASSET_UNIT, spender=vault.address)
    vault.deposit(100 * ASSET_UNIT, bob, sender=bob)
    asset.mint(vault.address, 5 * ASSET_UNIT)
    fund(alice, 50 * ASSET_UNIT, spender=vault.address)
    return vault


def assert_deposit_rolled_back(vault, asset, sub_vault, ledger, alice, before):
    assert asset.balance_of(alice) == 50 * ASSET_UNIT
    assert asset.balance_of(vault.address) == 5 * ASSET_UNIT
    assert sub_vault.balance_of(vault.address) == before["sub_vault_shares"]
    assert sub_vault.max_withdraw(vault.address) == before["sub_vault_assets"]
    assert ledger.total_supply(vault.address) == before["supply"]
    assert vault.balance_of(alice) == 0
    assert vault.last_recorded_exchange_rate == before["rate"]
    assert len(vault.events) == before["events"]


def vault_position(vault, sub_vault, ledger):
    return {
        "sub_vault_shares": sub_vault.balance_of(vault.address),
        "sub_vault_assets": sub_vault.max_withdraw(vault.address),
        "supply": ledger.total_supply(vault.address),
        "rate": vault.last_recorded_exchange_rate,
        "events": len(vault.events),
    }


def test_sub_vault_failure_refunds_pulled_assets(seeded_vault, asset, sub_vault, ledger, alice):
    before = vault_position(seeded_vault, sub_vault, ledger)

    with patch.object(sub_vault, "deposit", side_effect=RuntimeError("sub-vault paused")):
        with pytest.raises(RuntimeError):
            seeded_vault.deposit(50 * ASSET_UNIT, alice, sender=alice)

    assert_deposit_rolled_back(seeded_vault, asset, sub_vault, ledger, alice, before)


def test_ledger_failure_redeems_sub_vault_position(seeded_vault, asset, sub_vault, ledger, alice):
    before = vault_position(seeded_vault, sub_vault, ledger)

    with patch.object(ledger, "mint", side_effect=RuntimeError("ledger halted")):
        with pytest.raises(RuntimeError):
            seeded_vault.mint(50 * ASSET_UNIT, alice, sender=alice)

    assert_deposit_rolled_back(seeded_vault, asset, sub_vault, ledger, alice, before)

    # a later deposit goes through normally
    assert seeded_vault.deposit(50 * ASSET_UNIT, alice, sender=alice) == 50 * ASSET_UNIT


def test_deposit_above_max_is_rejected(vault, alice):
    with pytest.raises(DepositExceedsMax) as exc_info:
        vault.deposit(UINT96_MAX + 1, alice, sender=alice)

    assert isinstance(exc_info.value, CapacityExceeded)
    assert exc_info.value.requested == UINT96_MAX + 1
    assert exc_info.value.receiver == alice
    assert exc_info.value.maximum == UINT96_MAX


def test_mint_above_max_is_rejected(vault, alice):
    with pytest.raises(MintExceedsMax) as exc_info:
        vault.mint(UINT96_MAX + 1, alice, sender=alice)

    assert exc_info.value.maximum == UINT96_MAX


def test_uint96_bound():
    assert to_uint96(UINT96_MAX) == UINT96_MAX
    with pytest.raises(AmountExceedsUint96) as exc_info:
        to_uint96(UINT96_MAX + 1)
    assert exc_info.value.amount == UINT96_MAX + 1


def test_sponsor_delegates_receiver_to_sponsorship(vault, ledger, alice, fund):
    fund(alice, 200 * ASSET_UNIT, spender=vault.address)

    shares = vault.sponsor(100 * ASSET_UNIT, alice, sender=alice)

    assert shares == 100 * ASSET_UNIT
    assert ledger.delegate_of(vault.address, alice) == SPONSORSHIP_ADDRESS
    assert ledger.total_supply(vault.address) == 100 * ASSET_UNIT
    assert ledger.total_delegate_supply(vault.address) == 0
    sponsor_event = vault.events[-1]
    assert isinstance(sponsor_event, Sponsor)
    assert sponsor_event.caller == alice
    assert sponsor_event.receiver == alice
    assert sponsor_event.assets == 100 * ASSET_UNIT

    with patch.object(ledger, "sponsor", wraps=ledger.sponsor) as sponsor:
        vault.sponsor(100 * ASSET_UNIT, alice, sender=alice)
    sponsor.assert_not_called()


def test_plain_deposit_keeps_self_delegation(vault, ledger, alice, fund):
    fund(alice, 10 * ASSET_UNIT, spender=vault.address)

    vault.deposit(10 * ASSET_UNIT, alice, sender=alice)

    assert ledger.delegate_of(vault.address, alice) == alice
    assert ledger.total_delegate_supply(vault.address) == 10 * ASSET_UNIT


def test_zero_deposit_mints_nothing(vault, alice):
    assert vault.deposit(0, alice, sender=alice) == 0
    assert vault.total_supply() == 0


@pytest.mark.parametrize("missing", ["asset", "yield_vault", "ledger", "owner"])
def test_constructor_rejects_missing_config(asset, sub_vault, ledger, owner, missing):
    args = {"asset": asset, "yield_vault": sub_vault, "ledger": ledger, "owner": owner}
    args[missing] = ZERO_ADDRESS if missing == "owner" else None

    with pytest.raises(ZeroAddressConfig) as exc_info:
        ShareVault(**args)
    assert exc_info.value.field == missing


def test_constructor_approves_sub_vault(vault, asset, sub_vault):
    assert asset.allowance(vault.address, sub_vault.address) > 0
    assert vault.asset() == asset.address
    assert vault.decimals() == 18
    assert vault.asset_unit == ASSET_UNIT


def test_collaborators_satisfy_interfaces(asset, sub_vault, ledger):
    assert isinstance(asset, PermitAsset)
    assert isinstance(sub_vault, YieldVault)
    assert isinstance(ledger, BalanceLedger)
