import logging
from typing import Callable

from services.interfaces import YieldVault
from services.share_conversion import ConversionEngine, Rounding

logger = logging.getLogger(__name__)


class ExchangeRateOracle:
    """
    Derives the vault's assets-per-unit exchange rate from live balances.

    The rate only reflects principal: whatever the sub-vault holds above what
    the last recorded rate says the outstanding claims are worth is left out
    until fees have been processed on it.
    """

    def __init__(
        self,
        converter: ConversionEngine,
        yield_vault: YieldVault,
        vault_address: str,
        total_claims: Callable[[], int],
        last_recorded_exchange_rate: int | None = None,
    ):
        self.converter = converter
        self.yield_vault = yield_vault
        self.vault_address = vault_address
        self.total_claims = total_claims
        if last_recorded_exchange_rate is None:
            last_recorded_exchange_rate = converter.asset_unit
        self.last_recorded_exchange_rate = last_recorded_exchange_rate

    @property
    def asset_unit(self) -> int:
        return self.converter.asset_unit

    def current_exchange_rate(self) -> int:
        total_claims = self.total_claims()
        claims_as_assets = self.converter.shares_to_assets(
            total_claims, self.last_recorded_exchange_rate, Rounding.FLOOR
        )
        redeemable = self.yield_vault.max_withdraw(self.vault_address)

        if redeemable > claims_as_assets:
            # unrealized yield is excluded from the rate
            redeemable = redeemable - (redeemable - claims_as_assets)

        if total_claims != 0 and redeemable != 0:
            return redeemable * self.asset_unit // total_claims

        return self.asset_unit

    def record_exchange_rate(self) -> int:
        rate = self.current_exchange_rate()
        if rate != self.last_recorded_exchange_rate:
            logger.debug(
                "Exchange rate for vault %s moved from %s to %s",
                self.vault_address,
                self.last_recorded_exchange_rate,
                rate,
            )
        self.last_recorded_exchange_rate = rate
        return rate
