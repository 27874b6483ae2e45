import logging
from collections import defaultdict
from typing import Dict, Optional

from eth_account import Account

from core.exceptions import InsufficientAllowance, InsufficientBalance
from services.permit_token import PermitToken
from utils.calculate_price import mul_div
from utils.web3_utils import to_checksum

logger = logging.getLogger(__name__)


class YieldSubVault:
    """In-memory ERC-4626 style vault; its assets are whatever it holds of ``asset``."""

    def __init__(self, asset: PermitToken, address: Optional[str] = None):
        self.asset = asset
        self.address = to_checksum(address) if address else Account.create().address
        self._shares: Dict[str, int] = defaultdict(int)
        self._total_shares = 0

    def total_assets(self) -> int:
        return self.asset.balance_of(self.address)

    def total_shares(self) -> int:
        return self._total_shares

    def balance_of(self, holder: str) -> int:
        return self._shares[to_checksum(holder)]

    def convert_to_shares(self, assets: int) -> int:
        total_assets = self.total_assets()
        if self._total_shares == 0 or total_assets == 0:
            return assets
        return mul_div(assets, self._total_shares, total_assets)

    def convert_to_assets(self, shares: int) -> int:
        if self._total_shares == 0:
            return shares
        return mul_div(shares, self.total_assets(), self._total_shares)

    def deposit(self, assets: int, receiver: str, *, sender: str) -> int:
        shares = self.convert_to_shares(assets)
        self.asset.transfer_from(sender, self.address, assets, sender=self.address)
        self._shares[to_checksum(receiver)] += shares
        self._total_shares += shares
        return shares

    def max_withdraw(self, holder: str) -> int:
        return self.convert_to_assets(self.balance_of(holder))

    def redeem(self, shares: int, receiver: str, owner: str, *, sender: str) -> int:
        owner, sender = to_checksum(owner), to_checksum(sender)
        if sender != owner:
            raise InsufficientAllowance(owner, sender, 0, shares)
        if self._shares[owner] < shares:
            raise InsufficientBalance(owner, self._shares[owner], shares)

        assets = self.convert_to_assets(shares)
        self._shares[owner] -= shares
        self._total_shares -= shares
        self.asset.transfer(receiver, assets, sender=self.address)
        return assets

    def report_gain(self, assets: int) -> None:
        self.asset.mint(self.address, assets)
        logger.info("Sub-vault %s gained %s assets", self.address, assets)

    def report_loss(self, assets: int) -> None:
        if assets > self.total_assets():
            raise InsufficientBalance(self.address, self.total_assets(), assets)
        self.asset.burn(self.address, assets)
        logger.info("Sub-vault %s lost %s assets", self.address, assets)
