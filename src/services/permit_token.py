"""
In-memory base asset with an EIP-2612 style permit.

Balances and allowances are plain dicts keyed by checksummed address. Permits
are EIP-712 ``Permit`` messages signed with eth-account and checked against a
per-owner nonce and a deadline evaluated with ``clock``.
"""

import logging
from collections import defaultdict
from typing import Callable, Dict, Optional

import pendulum
from eth_account import Account

from core.config import settings
from core.constants import DEFAULT_ASSET_DECIMALS, MAX_UINT256
from core.exceptions import (
    InsufficientAllowance,
    InsufficientBalance,
    InvalidPermitSignature,
    PermitExpired,
)
from utils.web3_utils import build_permit_message, recover_permit_signer, to_checksum

logger = logging.getLogger(__name__)

TransferHook = Callable[[str, str, int], None]


def utc_timestamp() -> int:
    return pendulum.now(tz=pendulum.UTC).int_timestamp


class PermitToken:
    def __init__(
        self,
        name: str,
        symbol: str,
        decimals: int = DEFAULT_ASSET_DECIMALS,
        address: Optional[str] = None,
        chain_id: int = settings.CHAIN_ID,
        version: str = settings.PERMIT_DOMAIN_VERSION,
        clock: Callable[[], int] = utc_timestamp,
    ):
        self.name = name
        self.symbol = symbol
        self._decimals = decimals
        self.address = to_checksum(address) if address else Account.create().address
        self.chain_id = chain_id
        self.version = version
        self.clock = clock
        self._balances: Dict[str, int] = defaultdict(int)
        self._allowances: Dict[tuple, int] = defaultdict(int)
        self._nonces: Dict[str, int] = defaultdict(int)
        self._total_supply = 0
        # called after every transfer_from settles, before it returns
        self.on_transfer: Optional[TransferHook] = None

    def decimals(self) -> int:
        return self._decimals

    def total_supply(self) -> int:
        return self._total_supply

    def balance_of(self, holder: str) -> int:
        return self._balances[to_checksum(holder)]

    def allowance(self, owner: str, spender: str) -> int:
        return self._allowances[(to_checksum(owner), to_checksum(spender))]

    def nonces(self, owner: str) -> int:
        return self._nonces[to_checksum(owner)]

    def mint(self, to: str, amount: int) -> None:
        self._balances[to_checksum(to)] += amount
        self._total_supply += amount

    def burn(self, holder: str, amount: int) -> None:
        holder = to_checksum(holder)
        if self._balances[holder] < amount:
            raise InsufficientBalance(holder, self._balances[holder], amount)
        self._balances[holder] -= amount
        self._total_supply -= amount

    def approve(self, spender: str, amount: int, *, sender: str) -> bool:
        self._allowances[(to_checksum(sender), to_checksum(spender))] = amount
        return True

    def increase_allowance(self, spender: str, amount: int, *, sender: str) -> bool:
        key = (to_checksum(sender), to_checksum(spender))
        self._allowances[key] = min(self._allowances[key] + amount, MAX_UINT256)
        return True

    def transfer(self, to: str, amount: int, *, sender: str) -> bool:
        self._move(to_checksum(sender), to_checksum(to), amount)
        return True

    def transfer_from(self, from_: str, to: str, amount: int, *, sender: str) -> bool:
        from_, to, sender = to_checksum(from_), to_checksum(to), to_checksum(sender)
        key = (from_, sender)
        allowance = self._allowances[key]
        if allowance < amount:
            raise InsufficientAllowance(from_, sender, allowance, amount)
        if self._balances[from_] < amount:
            raise InsufficientBalance(from_, self._balances[from_], amount)

        if allowance != MAX_UINT256:
            self._allowances[key] = allowance - amount
        self._move(from_, to, amount)

        if self.on_transfer is not None:
            self.on_transfer(from_, to, amount)
        return True

    def _move(self, from_: str, to: str, amount: int) -> None:
        if self._balances[from_] < amount:
            raise InsufficientBalance(from_, self._balances[from_], amount)
        self._balances[from_] -= amount
        self._balances[to] += amount

    def permit_message(
        self, owner: str, spender: str, value: int, deadline: int, nonce: Optional[int] = None
    ) -> dict:
        owner = to_checksum(owner)
        return build_permit_message(
            token_name=self.name,
            version=self.version,
            chain_id=self.chain_id,
            token_address=self.address,
            owner=owner,
            spender=to_checksum(spender),
            value=value,
            nonce=self._nonces[owner] if nonce is None else nonce,
            deadline=deadline,
        )

    def permit(
        self, owner: str, spender: str, value: int, deadline: int, signature: bytes
    ) -> None:
        owner, spender = to_checksum(owner), to_checksum(spender)
        now = self.clock()
        if now > deadline:
            raise PermitExpired(deadline, now)

        message = self.permit_message(owner, spender, value, deadline)
        try:
            signer = recover_permit_signer(message, signature)
        except Exception as e:
            raise InvalidPermitSignature(owner, None) from e
        if signer != owner:
            raise InvalidPermitSignature(owner, signer)

        self._nonces[owner] += 1
        self._allowances[(owner, spender)] = value
        logger.debug("Permit %s -> %s for %s", owner, spender, value)
