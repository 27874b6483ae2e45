from core.constants import UINT96_MAX
from core.exceptions import VaultUnderCollateralized
from services.exchange_rate import ExchangeRateOracle


class CollateralizationGuard:
    """Hard gate on new claims: full capacity at or above par, nothing below it."""

    def __init__(self, oracle: ExchangeRateOracle, max_capacity: int = UINT96_MAX):
        self.oracle = oracle
        self.max_capacity = max_capacity

    def is_collateralized(self) -> bool:
        return self.oracle.current_exchange_rate() >= self.oracle.asset_unit

    def require_collateralized(self) -> None:
        rate = self.oracle.current_exchange_rate()
        if rate < self.oracle.asset_unit:
            raise VaultUnderCollateralized(rate, self.oracle.asset_unit)

    def max_deposit(self) -> int:
        return self.max_capacity if self.is_collateralized() else 0

    def max_mint(self) -> int:
        return self.max_capacity if self.is_collateralized() else 0
