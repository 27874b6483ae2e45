"""
In-memory balance ledger keyed by vault.

Tracks, for every vault that uses it, holder balances, delegate balances and
their totals, and records an observation each time a value changes so that
balances can be read as of a past timestamp. Holders delegate to themselves
until told otherwise; balances delegated to ``SPONSORSHIP_ADDRESS`` are left
out of the total delegate supply.
"""

import bisect
import logging
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Tuple

from core.constants import SPONSORSHIP_ADDRESS, UINT96_MAX, ZERO_ADDRESS
from core.exceptions import AmountExceedsUint96, InsufficientBalance
from services.permit_token import utc_timestamp
from utils.web3_utils import to_checksum

logger = logging.getLogger(__name__)


@dataclass
class Account:
    balance: int = 0
    delegate_balance: int = 0
    # (timestamp, balance, delegate_balance)
    observations: List[Tuple[int, int, int]] = field(default_factory=list)


def _observe(account: Account, timestamp: int) -> None:
    if account.observations and account.observations[-1][0] == timestamp:
        account.observations[-1] = (timestamp, account.balance, account.delegate_balance)
    else:
        account.observations.append((timestamp, account.balance, account.delegate_balance))


def _value_at(account: Account, timestamp: int, index: int) -> int:
    timestamps = [obs[0] for obs in account.observations]
    position = bisect.bisect_right(timestamps, timestamp)
    if position == 0:
        return 0
    return account.observations[position - 1][index]


class TwabLedger:
    SPONSORSHIP_ADDRESS = SPONSORSHIP_ADDRESS

    def __init__(self, clock: Callable[[], int] = utc_timestamp):
        self.clock = clock
        self._accounts: Dict[str, Dict[str, Account]] = defaultdict(lambda: defaultdict(Account))
        self._totals: Dict[str, Account] = defaultdict(Account)
        self._delegates: Dict[str, Dict[str, str]] = defaultdict(dict)

    def total_supply(self, vault: str) -> int:
        return self._totals[to_checksum(vault)].balance

    def total_delegate_supply(self, vault: str) -> int:
        return self._totals[to_checksum(vault)].delegate_balance

    def balance_of(self, vault: str, holder: str) -> int:
        return self._accounts[to_checksum(vault)][to_checksum(holder)].balance

    def delegate_balance_of(self, vault: str, holder: str) -> int:
        return self._accounts[to_checksum(vault)][to_checksum(holder)].delegate_balance

    def delegate_of(self, vault: str, holder: str) -> str:
        holder = to_checksum(holder)
        return self._delegates[to_checksum(vault)].get(holder, holder)

    def get_balance_at(self, vault: str, holder: str, timestamp: int) -> int:
        return _value_at(self._accounts[to_checksum(vault)][to_checksum(holder)], timestamp, 1)

    def get_total_supply_at(self, vault: str, timestamp: int) -> int:
        return _value_at(self._totals[to_checksum(vault)], timestamp, 1)

    def mint(self, holder: str, amount: int, *, sender: str) -> None:
        self._transfer_balance(to_checksum(sender), ZERO_ADDRESS, to_checksum(holder), amount)

    def burn(self, holder: str, amount: int, *, sender: str) -> None:
        self._transfer_balance(to_checksum(sender), to_checksum(holder), ZERO_ADDRESS, amount)

    def transfer(self, from_: str, to: str, amount: int, *, sender: str) -> None:
        self._transfer_balance(to_checksum(sender), to_checksum(from_), to_checksum(to), amount)

    def delegate(self, vault: str, to: str, *, sender: str) -> None:
        self._delegate(to_checksum(vault), to_checksum(sender), to_checksum(to))

    def sponsor(self, holder: str, *, sender: str) -> None:
        self._delegate(to_checksum(sender), to_checksum(holder), SPONSORSHIP_ADDRESS)

    def _transfer_balance(self, vault: str, from_: str, to: str, amount: int) -> None:
        if amount > UINT96_MAX:
            raise AmountExceedsUint96(amount)

        accounts = self._accounts[vault]
        total = self._totals[vault]
        now = self.clock()

        if from_ != ZERO_ADDRESS:
            account = accounts[from_]
            if account.balance < amount:
                raise InsufficientBalance(from_, account.balance, amount)
            account.balance -= amount
            _observe(account, now)
            self._shift_delegate_balance(vault, self.delegate_of(vault, from_), -amount, now)
        else:
            total.balance += amount

        if to != ZERO_ADDRESS:
            account = accounts[to]
            account.balance += amount
            _observe(account, now)
            self._shift_delegate_balance(vault, self.delegate_of(vault, to), amount, now)
        else:
            total.balance -= amount

        _observe(total, now)

    def _shift_delegate_balance(self, vault: str, delegate: str, amount: int, now: int) -> None:
        delegate_account = self._accounts[vault][delegate]
        delegate_account.delegate_balance += amount
        _observe(delegate_account, now)
        if delegate != SPONSORSHIP_ADDRESS:
            self._totals[vault].delegate_balance += amount

    def _delegate(self, vault: str, holder: str, to: str) -> None:
        current = self.delegate_of(vault, holder)
        if current == to:
            return

        balance = self._accounts[vault][holder].balance
        now = self.clock()
        if balance:
            self._shift_delegate_balance(vault, current, -balance, now)
            self._shift_delegate_balance(vault, to, balance, now)
            _observe(self._totals[vault], now)
        self._delegates[vault][holder] = to
        logger.debug("Vault %s: %s delegated from %s to %s", vault, holder, current, to)
