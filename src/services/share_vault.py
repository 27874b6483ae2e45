"""
Share vault: issues shares against a base asset that is forwarded into a
yield sub-vault.

The vault composes a conversion engine, an exchange rate oracle, a
collateralization guard, the deposit workflow and fee accrual. Holder
balances live in the balance ledger; the vault only keeps its scalar
configuration, the lagged exchange rate and the accrued yield fee supply.
"""

import logging
from typing import Callable, List, Optional

import pendulum
from eth_account import Account

from core.constants import FEE_PRECISION, MAX_UINT256, ZERO_ADDRESS
from core.exceptions import CallerNotOwner, ZeroAddressConfig
from schemas import (
    ClaimerSet,
    RecordedExchangeRate,
    VaultEvent,
    VaultState,
    YieldFeeAccrued,
    YieldFeeInfo,
    YieldFeePercentageSet,
    YieldFeeRecipientSet,
)
from services.collateralization import CollateralizationGuard
from services.deposit_workflow import DepositWorkflow
from services.exchange_rate import ExchangeRateOracle
from services.fee_accrual import FeeAccrual
from services.interfaces import BalanceLedger, PermitAsset, YieldVault
from services.share_conversion import ConversionEngine, Rounding
from utils.web3_utils import is_zero_address, to_checksum

logger = logging.getLogger(__name__)


class ShareVault:
    def __init__(
        self,
        asset: PermitAsset,
        yield_vault: YieldVault,
        ledger: BalanceLedger,
        owner: str,
        *,
        name: str = "Share Vault",
        symbol: str = "svTKN",
        address: Optional[str] = None,
        claimer: str = ZERO_ADDRESS,
        yield_fee_recipient: str = ZERO_ADDRESS,
        yield_fee_percentage: int = 0,
        last_recorded_exchange_rate: Optional[int] = None,
        yield_fee_total_supply: int = 0,
    ):
        if asset is None or is_zero_address(asset.address):
            raise ZeroAddressConfig("asset")
        if yield_vault is None or is_zero_address(yield_vault.address):
            raise ZeroAddressConfig("yield_vault")
        if ledger is None:
            raise ZeroAddressConfig("ledger")
        if is_zero_address(owner):
            raise ZeroAddressConfig("owner")

        self.name = name
        self.symbol = symbol
        self.address = to_checksum(address) if address else Account.create().address
        self.owner = to_checksum(owner)
        self.claimer = to_checksum(claimer)

        self.asset_token = asset
        self.yield_vault = yield_vault
        self.ledger = ledger

        self.events: List[VaultEvent] = []
        self._subscribers: List[Callable[[VaultEvent], None]] = []

        self.converter = ConversionEngine(10 ** asset.decimals())
        self.oracle = ExchangeRateOracle(
            self.converter,
            yield_vault,
            self.address,
            self._total_claims,
            last_recorded_exchange_rate,
        )
        self.guard = CollateralizationGuard(self.oracle)
        self.fees = FeeAccrual(
            self.oracle,
            self.guard,
            self.total_assets,
            self._total_claims,
            yield_fee_percentage=yield_fee_percentage,
            yield_fee_recipient=to_checksum(yield_fee_recipient),
            yield_fee_total_supply=yield_fee_total_supply,
        )
        self.workflow = DepositWorkflow(
            self.address,
            asset,
            yield_vault,
            ledger,
            self.converter,
            self.oracle,
            self.guard,
            self._emit,
        )

        asset.increase_allowance(yield_vault.address, MAX_UINT256, sender=self.address)
        logger.info(
            "Vault %s (%s) created over asset %s and yield vault %s",
            self.name,
            self.address,
            asset.address,
            yield_vault.address,
        )

    @classmethod
    def restore(
        cls,
        state: VaultState,
        asset: PermitAsset,
        yield_vault: YieldVault,
        ledger: BalanceLedger,
        owner: str,
        **kwargs,
    ) -> "ShareVault":
        vault = cls(
            asset,
            yield_vault,
            ledger,
            owner,
            address=state.vault_address,
            claimer=state.claimer,
            yield_fee_recipient=state.yield_fee_recipient,
            yield_fee_percentage=state.yield_fee_percentage,
            last_recorded_exchange_rate=state.last_recorded_exchange_rate,
            yield_fee_total_supply=state.yield_fee_total_supply,
            **kwargs,
        )
        if vault.asset_unit != state.asset_unit:
            raise ValueError(
                f"Stored asset unit {state.asset_unit} does not match asset unit {vault.asset_unit}"
            )
        return vault

    # events

    def subscribe(self, callback: Callable[[VaultEvent], None]) -> None:
        self._subscribers.append(callback)

    def _emit(self, event: VaultEvent) -> None:
        self.events.append(event)
        logger.info("%s %s", event.name, event.model_dump(exclude={"vault"}))
        for callback in self._subscribers:
            callback(event)

    # state

    @property
    def asset_unit(self) -> int:
        return self.converter.asset_unit

    @property
    def last_recorded_exchange_rate(self) -> int:
        return self.oracle.last_recorded_exchange_rate

    @property
    def yield_fee_percentage(self) -> int:
        return self.fees.yield_fee_percentage

    @property
    def yield_fee_recipient(self) -> str:
        return self.fees.yield_fee_recipient

    @property
    def yield_fee_total_supply(self) -> int:
        return self.fees.yield_fee_total_supply

    def asset(self) -> str:
        return self.asset_token.address

    def decimals(self) -> int:
        return self.asset_token.decimals()

    def total_assets(self) -> int:
        return self.asset_token.balance_of(self.address) + self.yield_vault.max_withdraw(self.address)

    def total_supply(self) -> int:
        return self.ledger.total_supply(self.address)

    def _total_claims(self) -> int:
        # holder shares plus the fee recipient's accrued claim
        return self.total_supply() + self.fees.yield_fee_total_supply

    def balance_of(self, holder: str) -> int:
        return self.ledger.balance_of(self.address, holder)

    # conversions

    def exchange_rate(self) -> int:
        return self.oracle.current_exchange_rate()

    def convert_to_shares(self, assets: int) -> int:
        return self.converter.assets_to_shares(assets, self.exchange_rate(), Rounding.FLOOR)

    def convert_to_assets(self, shares: int) -> int:
        return self.converter.shares_to_assets(shares, self.exchange_rate(), Rounding.FLOOR)

    def preview_deposit(self, assets: int) -> int:
        return self.converter.assets_to_shares(assets, self.exchange_rate(), Rounding.FLOOR)

    def preview_mint(self, shares: int) -> int:
        return self.converter.shares_to_assets(shares, self.exchange_rate(), Rounding.CEIL)

    # collateralization

    def is_vault_collateralized(self) -> bool:
        return self.guard.is_collateralized()

    def max_deposit(self, receiver: str) -> int:
        return self.guard.max_deposit()

    def max_mint(self, receiver: str) -> int:
        return self.guard.max_mint()

    # deposits

    def deposit(self, assets: int, receiver: str, *, sender: str) -> int:
        return self.workflow.deposit(assets, to_checksum(receiver), sender=to_checksum(sender))

    def mint(self, shares: int, receiver: str, *, sender: str) -> int:
        return self.workflow.mint(shares, to_checksum(receiver), sender=to_checksum(sender))

    def sponsor(self, assets: int, receiver: str, *, sender: str) -> int:
        return self.workflow.sponsor(assets, to_checksum(receiver), sender=to_checksum(sender))

    def deposit_with_permit(
        self, assets: int, receiver: str, deadline: int, signature: bytes, *, sender: str
    ) -> int:
        return self.workflow.deposit_with_permit(
            assets, to_checksum(receiver), deadline, signature, sender=to_checksum(sender)
        )

    def mint_with_permit(
        self, shares: int, receiver: str, deadline: int, signature: bytes, *, sender: str
    ) -> int:
        return self.workflow.mint_with_permit(
            shares, to_checksum(receiver), deadline, signature, sender=to_checksum(sender)
        )

    def sponsor_with_permit(
        self, assets: int, receiver: str, deadline: int, signature: bytes, *, sender: str
    ) -> int:
        return self.workflow.sponsor_with_permit(
            assets, to_checksum(receiver), deadline, signature, sender=to_checksum(sender)
        )

    # yield fee

    def available_yield_balance(self) -> int:
        return self.fees.available_yield_balance()

    def available_yield_fee_balance(self) -> int:
        return self.fees.available_yield_fee_balance()

    def accrue_yield_fee(self, amount: int) -> int:
        """Credit ``amount`` to the yield fee recipient's claim.

        This is the accrual hook of the liquidation flow; the vault must be
        collateralized and the amount covered by the available yield fee
        balance. The exchange rate cache is refreshed since total claims
        changed.
        """
        self.guard.require_collateralized()
        total = self.fees.accrue(amount)
        rate = self.oracle.record_exchange_rate()

        self._emit(
            YieldFeeAccrued(
                vault=self.address,
                recipient=self.fees.yield_fee_recipient,
                amount=amount,
                yield_fee_total_supply=total,
            )
        )
        self._emit(RecordedExchangeRate(vault=self.address, exchange_rate=rate))
        return total

    def yield_fee_info(self) -> YieldFeeInfo:
        return YieldFeeInfo(
            yield_fee_percentage=self.yield_fee_percentage,
            yield_fee_recipient=self.yield_fee_recipient,
            yield_fee_total_supply=self.yield_fee_total_supply,
            available_yield_balance=self.available_yield_balance(),
            available_yield_fee_balance=self.available_yield_fee_balance(),
        )

    # owner

    def _only_owner(self, sender: str) -> None:
        if to_checksum(sender) != self.owner:
            raise CallerNotOwner(sender, self.owner)

    def set_claimer(self, claimer: str, *, sender: str) -> str:
        self._only_owner(sender)
        previous = self.claimer
        self.claimer = to_checksum(claimer)
        self._emit(ClaimerSet(vault=self.address, previous_claimer=previous, new_claimer=self.claimer))
        return self.claimer

    def set_yield_fee_percentage(self, percentage: int, *, sender: str) -> int:
        self._only_owner(sender)
        previous = self.fees.set_yield_fee_percentage(percentage)
        self._emit(
            YieldFeePercentageSet(
                vault=self.address,
                previous_percentage=previous,
                new_percentage=percentage,
            )
        )
        return percentage

    def set_yield_fee_recipient(self, recipient: str, *, sender: str) -> str:
        self._only_owner(sender)
        previous = self.fees.yield_fee_recipient
        self.fees.yield_fee_recipient = to_checksum(recipient)
        self._emit(
            YieldFeeRecipientSet(
                vault=self.address,
                previous_recipient=previous,
                new_recipient=self.fees.yield_fee_recipient,
            )
        )
        return self.fees.yield_fee_recipient

    def snapshot(self) -> VaultState:
        return VaultState(
            vault_address=self.address,
            asset_unit=self.asset_unit,
            last_recorded_exchange_rate=self.last_recorded_exchange_rate,
            yield_fee_percentage=self.yield_fee_percentage,
            yield_fee_recipient=self.yield_fee_recipient,
            claimer=self.claimer,
            yield_fee_total_supply=self.yield_fee_total_supply,
            total_assets=self.total_assets(),
            total_supply=self.total_supply(),
            exchange_rate=self.exchange_rate(),
            is_collateralized=self.is_vault_collateralized(),
            available_yield_balance=self.available_yield_balance(),
            available_yield_fee_balance=self.available_yield_fee_balance(),
            recorded_at=pendulum.now(tz=pendulum.UTC),
        )

    def __repr__(self) -> str:
        return (
            f"ShareVault({self.name!r}, address={self.address}, "
            f"fee={self.yield_fee_percentage}/{FEE_PRECISION})"
        )
