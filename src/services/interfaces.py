"""
Interfaces the share vault consumes from its collaborators.

Calls that act on behalf of an account take that account as the keyword-only
``sender`` argument.
"""

from typing import Protocol, runtime_checkable


@runtime_checkable
class BalanceLedger(Protocol):
    SPONSORSHIP_ADDRESS: str

    def total_supply(self, vault: str) -> int: ...

    def balance_of(self, vault: str, holder: str) -> int: ...

    def mint(self, holder: str, amount: int, *, sender: str) -> None: ...

    def burn(self, holder: str, amount: int, *, sender: str) -> None: ...

    def transfer(self, from_: str, to: str, amount: int, *, sender: str) -> None: ...

    def delegate_of(self, vault: str, holder: str) -> str: ...

    def sponsor(self, holder: str, *, sender: str) -> None: ...


@runtime_checkable
class YieldVault(Protocol):
    address: str

    def deposit(self, assets: int, receiver: str, *, sender: str) -> int: ...

    def max_withdraw(self, holder: str) -> int: ...

    def redeem(self, shares: int, receiver: str, owner: str, *, sender: str) -> int: ...


@runtime_checkable
class PermitAsset(Protocol):
    address: str

    def decimals(self) -> int: ...

    def balance_of(self, holder: str) -> int: ...

    def transfer(self, to: str, amount: int, *, sender: str) -> bool: ...

    def transfer_from(self, from_: str, to: str, amount: int, *, sender: str) -> bool: ...

    def increase_allowance(self, spender: str, amount: int, *, sender: str) -> bool: ...

    def permit(
        self, owner: str, spender: str, value: int, deadline: int, signature: bytes
    ) -> None: ...

