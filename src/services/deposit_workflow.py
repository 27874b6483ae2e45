"""
Deposit side of the share vault: deposit, mint and sponsor, with and without
a base asset permit.

Each call runs admission, sizing and a funds check first, then moves assets,
and mutates the ledger last. If the sub-vault or the ledger fails after the
assets were pulled, the sub-vault position is redeemed and the pulled assets
are returned to the caller before the error propagates.

Asset movements can call back into the vault. By the time they do, assets
have arrived but no shares have been minted, and every read the vault serves
is recomputed from live balances.
"""

import logging
from typing import Callable

from core.constants import UINT96_MAX, ZERO_ADDRESS
from core.exceptions import (
    AmountExceedsUint96,
    DepositExceedsMax,
    InsufficientBalance,
    MintExceedsMax,
)
from schemas import Deposit, RecordedExchangeRate, Sponsor, Transfer, VaultEvent
from services.collateralization import CollateralizationGuard
from services.exchange_rate import ExchangeRateOracle
from services.interfaces import BalanceLedger, PermitAsset, YieldVault
from services.share_conversion import ConversionEngine, Rounding

logger = logging.getLogger(__name__)


def to_uint96(amount: int) -> int:
    if amount < 0 or amount > UINT96_MAX:
        raise AmountExceedsUint96(amount)
    return amount


class DepositWorkflow:
    def __init__(
        self,
        vault_address: str,
        asset: PermitAsset,
        yield_vault: YieldVault,
        ledger: BalanceLedger,
        converter: ConversionEngine,
        oracle: ExchangeRateOracle,
        guard: CollateralizationGuard,
        emit: Callable[[VaultEvent], None],
    ):
        self.vault_address = vault_address
        self.asset = asset
        self.yield_vault = yield_vault
        self.ledger = ledger
        self.converter = converter
        self.oracle = oracle
        self.guard = guard
        self.emit = emit

    def deposit(self, assets: int, receiver: str, *, sender: str) -> int:
        shares = self._size_deposit(assets, receiver)
        self._deposit(sender, receiver, assets, shares)
        return shares

    def mint(self, shares: int, receiver: str, *, sender: str) -> int:
        assets = self._size_mint(shares, receiver)
        self._deposit(sender, receiver, assets, shares)
        return assets

    def sponsor(self, assets: int, receiver: str, *, sender: str) -> int:
        shares = self._size_deposit(assets, receiver)
        self._deposit(sender, receiver, assets, shares)
        self._sponsor(sender, receiver, assets, shares)
        return shares

    def deposit_with_permit(
        self, assets: int, receiver: str, deadline: int, signature: bytes, *, sender: str
    ) -> int:
        shares = self._size_deposit(assets, receiver)
        self._require_funds(sender, assets)
        self.asset.permit(sender, self.vault_address, assets, deadline, signature)
        self._deposit(sender, receiver, assets, shares)
        return shares

    def mint_with_permit(
        self, shares: int, receiver: str, deadline: int, signature: bytes, *, sender: str
    ) -> int:
        assets = self._size_mint(shares, receiver)
        self._require_funds(sender, assets)
        self.asset.permit(sender, self.vault_address, assets, deadline, signature)
        self._deposit(sender, receiver, assets, shares)
        return assets

    def sponsor_with_permit(
        self, assets: int, receiver: str, deadline: int, signature: bytes, *, sender: str
    ) -> int:
        shares = self._size_deposit(assets, receiver)
        self._require_funds(sender, assets)
        self.asset.permit(sender, self.vault_address, assets, deadline, signature)
        self._deposit(sender, receiver, assets, shares)
        self._sponsor(sender, receiver, assets, shares)
        return shares

    def _size_deposit(self, assets: int, receiver: str) -> int:
        max_deposit = self.guard.max_deposit()
        if assets > max_deposit:
            raise DepositExceedsMax(receiver, assets, max_deposit)

        shares = self.converter.assets_to_shares(
            assets, self.oracle.current_exchange_rate(), Rounding.FLOOR
        )
        return to_uint96(shares)

    def _size_mint(self, shares: int, receiver: str) -> int:
        max_mint = self.guard.max_mint()
        if shares > max_mint:
            raise MintExceedsMax(receiver, shares, max_mint)

        to_uint96(shares)
        return self.converter.shares_to_assets(
            shares, self.oracle.current_exchange_rate(), Rounding.CEIL
        )

    def _require_funds(self, caller: str, assets: int) -> None:
        shortfall = assets - self.asset.balance_of(self.vault_address)
        if shortfall > 0:
            balance = self.asset.balance_of(caller)
            if balance < shortfall:
                raise InsufficientBalance(caller, balance, shortfall)

    def _deposit(self, caller: str, receiver: str, assets: int, shares: int) -> None:
        self._require_funds(caller, assets)
        vault_assets = self.asset.balance_of(self.vault_address)

        if assets > vault_assets:
            logger.debug(
                "Pulling %s assets from %s, vault holds %s", assets - vault_assets, caller, vault_assets
            )
            self.asset.transfer_from(
                caller, self.vault_address, assets - vault_assets, sender=self.vault_address
            )

        sub_vault_shares = None
        try:
            sub_vault_shares = self.yield_vault.deposit(
                assets, self.vault_address, sender=self.vault_address
            )
            self.ledger.mint(receiver, shares, sender=self.vault_address)
        except Exception:
            self._unwind(caller, vault_assets, sub_vault_shares)
            raise

        self._record_mint(receiver, shares)
        self.emit(
            Deposit(
                vault=self.vault_address,
                sender=caller,
                owner=receiver,
                assets=assets,
                shares=shares,
            )
        )

    def _unwind(self, caller: str, vault_assets_before: int, sub_vault_shares) -> None:
        """Return the vault and the caller to where they were before the intake."""
        if sub_vault_shares:
            self.yield_vault.redeem(
                sub_vault_shares, self.vault_address, self.vault_address, sender=self.vault_address
            )
        refund = self.asset.balance_of(self.vault_address) - vault_assets_before
        if refund > 0:
            self.asset.transfer(caller, refund, sender=self.vault_address)
        logger.warning(
            "Deposit by %s rolled back, %s assets refunded", caller, max(refund, 0)
        )

    def _record_mint(self, receiver: str, shares: int) -> None:
        rate = self.oracle.record_exchange_rate()

        self.emit(
            Transfer(
                vault=self.vault_address,
                from_address=ZERO_ADDRESS,
                to_address=receiver,
                value=shares,
            )
        )
        self.emit(RecordedExchangeRate(vault=self.vault_address, exchange_rate=rate))

    def _sponsor(self, caller: str, receiver: str, assets: int, shares: int) -> None:
        sponsorship_address = self.ledger.SPONSORSHIP_ADDRESS
        if self.ledger.delegate_of(self.vault_address, receiver) != sponsorship_address:
            self.ledger.sponsor(receiver, sender=self.vault_address)

        self.emit(
            Sponsor(
                vault=self.vault_address,
                caller=caller,
                receiver=receiver,
                assets=assets,
                shares=shares,
            )
        )
