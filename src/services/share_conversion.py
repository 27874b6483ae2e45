import enum

from utils.calculate_price import mul_div


class Rounding(str, enum.Enum):
    FLOOR = "floor"
    CEIL = "ceil"


class ConversionEngine:
    """Converts between asset and share amounts at an explicit exchange rate.

    The rate is expressed as assets per ``asset_unit`` shares. A zero amount
    or a zero rate returns the amount unchanged.
    """

    def __init__(self, asset_unit: int):
        if asset_unit <= 0:
            raise ValueError(f"asset_unit must be positive, got {asset_unit}")
        self.asset_unit = asset_unit

    def assets_to_shares(self, assets: int, rate: int, rounding: Rounding) -> int:
        if assets == 0 or rate == 0:
            return assets
        return mul_div(assets, self.asset_unit, rate, round_up=rounding == Rounding.CEIL)

    def shares_to_assets(self, shares: int, rate: int, rounding: Rounding) -> int:
        if shares == 0 or rate == 0:
            return shares
        return mul_div(shares, rate, self.asset_unit, round_up=rounding == Rounding.CEIL)
