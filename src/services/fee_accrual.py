import logging
from typing import Callable

from core.constants import FEE_PRECISION, ZERO_ADDRESS
from core.exceptions import FeePercentageOutOfRange, YieldFeeExceedsAvailable
from services.collateralization import CollateralizationGuard
from services.exchange_rate import ExchangeRateOracle
from services.share_conversion import Rounding

logger = logging.getLogger(__name__)


def validate_fee_percentage(percentage: int) -> int:
    if percentage < 0 or percentage > FEE_PRECISION:
        raise FeePercentageOutOfRange(percentage, FEE_PRECISION)
    return percentage


class FeeAccrual:
    """
    Projects the yield available above principal and the fee share of it.

    The fee recipient's claim is kept here, outside the holder ledger, as
    ``yield_fee_total_supply``.
    """

    def __init__(
        self,
        oracle: ExchangeRateOracle,
        guard: CollateralizationGuard,
        total_assets: Callable[[], int],
        total_claims: Callable[[], int],
        yield_fee_percentage: int = 0,
        yield_fee_recipient: str = ZERO_ADDRESS,
        yield_fee_total_supply: int = 0,
    ):
        self.oracle = oracle
        self.guard = guard
        self.total_assets = total_assets
        self.total_claims = total_claims
        self.yield_fee_percentage = validate_fee_percentage(yield_fee_percentage)
        self.yield_fee_recipient = yield_fee_recipient
        self.yield_fee_total_supply = yield_fee_total_supply

    def available_yield_balance(self) -> int:
        if not self.guard.is_collateralized():
            return 0

        total_assets = self.total_assets()
        deposited_assets = self.oracle.converter.shares_to_assets(
            self.total_claims(), self.oracle.current_exchange_rate(), Rounding.FLOOR
        )
        if total_assets > deposited_assets:
            return total_assets - deposited_assets
        return 0

    def available_yield_fee_balance(self) -> int:
        available_yield = self.available_yield_balance()
        if available_yield == 0 or self.yield_fee_percentage == 0:
            return 0
        return available_yield * self.yield_fee_percentage // FEE_PRECISION

    def set_yield_fee_percentage(self, percentage: int) -> int:
        previous = self.yield_fee_percentage
        self.yield_fee_percentage = validate_fee_percentage(percentage)
        return previous

    def accrue(self, amount: int) -> int:
        available = self.available_yield_fee_balance()
        if amount > available:
            raise YieldFeeExceedsAvailable(amount, available)

        self.yield_fee_total_supply += amount
        logger.info(
            "Accrued yield fee %s for %s, total %s",
            amount,
            self.yield_fee_recipient,
            self.yield_fee_total_supply,
        )
        return self.yield_fee_total_supply
