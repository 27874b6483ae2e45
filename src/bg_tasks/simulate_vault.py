"""
Run a deposit scenario against in-memory collaborators and record the vault
state after each step.

1. create the base asset, the yield sub-vault, the balance ledger and the vault
2. fund the depositors and let each of them deposit
3. apply a gain or loss to the sub-vault
4. accrue the yield fee when the vault is collateralized

A state snapshot and an exchange rate history point are stored after every
step.
"""

import logging
from typing import List

import click
from eth_account import Account
from sqlmodel import Session

from core.config import settings
from core.constants import FEE_PRECISION, MAX_UINT256
from core.db import engine, init_db
from log import setup_logging_to_console, setup_logging_to_file, setup_logging_to_seq
from services.permit_token import PermitToken
from services.share_vault import ShareVault
from services.twab_ledger import TwabLedger
from services.vault_state_store import record_vault_state
from services.yield_sub_vault import YieldSubVault

# # Initialize logger
logger = logging.getLogger("simulate_vault")
logger.setLevel(logging.INFO)


def build_vault(decimals: int, yield_fee_percentage: int) -> ShareVault:
    asset = PermitToken("Simulated USD", "sUSD", decimals=decimals)
    yield_vault = YieldSubVault(asset)
    ledger = TwabLedger()
    owner = Account.create().address
    return ShareVault(
        asset,
        yield_vault,
        ledger,
        owner,
        name="Simulated Share Vault",
        yield_fee_recipient=settings.DEFAULT_YIELD_FEE_RECIPIENT or owner,
        yield_fee_percentage=yield_fee_percentage,
    )


def run_scenario(
    session: Session,
    vault: ShareVault,
    deposits: List[int],
    yield_delta: int,
) -> ShareVault:
    asset: PermitToken = vault.asset_token
    sub_vault: YieldSubVault = vault.yield_vault

    for amount in deposits:
        depositor = Account.create().address
        asset.mint(depositor, amount)
        asset.approve(vault.address, MAX_UINT256, sender=depositor)
        shares = vault.deposit(amount, depositor, sender=depositor)
        logger.info("Depositor %s deposited %s for %s shares", depositor, amount, shares)
        record_vault_state(session, vault.snapshot())

    if yield_delta > 0:
        sub_vault.report_gain(yield_delta)
    elif yield_delta < 0:
        sub_vault.report_loss(-yield_delta)
    record_vault_state(session, vault.snapshot())

    if vault.is_vault_collateralized():
        fee = vault.available_yield_fee_balance()
        if fee > 0:
            vault.accrue_yield_fee(fee)
            record_vault_state(session, vault.snapshot())
    else:
        logger.warning(
            "Vault %s is under-collateralized at rate %s", vault.address, vault.exchange_rate()
        )

    return vault


@click.command()
@click.option("--deposit", "deposits", multiple=True, type=int, default=[1000], help="Deposit amount in whole asset units, repeatable")
@click.option("--yield-pct", default=5.0, help="Sub-vault gain (positive) or loss (negative) in percent")
@click.option("--fee-pct", type=float, default=None, help="Yield fee percentage, defaults to DEFAULT_YIELD_FEE_PERCENTAGE")
@click.option("--decimals", default=18, help="Base asset decimals")
def main(deposits, yield_pct: float, fee_pct: float, decimals: int):
    setup_logging_to_console(level=logging.INFO, logger=logger)
    setup_logging_to_seq()

    init_db()
    unit = 10**decimals
    if fee_pct is None:
        yield_fee_percentage = settings.DEFAULT_YIELD_FEE_PERCENTAGE
    else:
        yield_fee_percentage = int(fee_pct / 100 * FEE_PRECISION)
    vault = build_vault(decimals, yield_fee_percentage)
    amounts = [amount * unit for amount in deposits]
    yield_delta = int(sum(amounts) * yield_pct / 100)

    with Session(engine) as session:
        run_scenario(session, vault, amounts, yield_delta)

    state = vault.snapshot()
    logger.info(
        "Vault %s: total assets %s, total supply %s, exchange rate %s, yield fee supply %s",
        state.vault_address,
        state.total_assets,
        state.total_supply,
        state.exchange_rate,
        state.yield_fee_total_supply,
    )


if __name__ == "__main__":
    setup_logging_to_file(app="simulate_vault", level=logging.INFO, logger=logger)
    main()
