from pydantic import BaseModel


class VaultEvent(BaseModel):
    vault: str

    @property
    def name(self) -> str:
        return type(self).__name__


class Deposit(VaultEvent):
    sender: str
    owner: str
    assets: int
    shares: int


class Sponsor(VaultEvent):
    caller: str
    receiver: str
    assets: int
    shares: int


class Transfer(VaultEvent):
    from_address: str
    to_address: str
    value: int


class RecordedExchangeRate(VaultEvent):
    exchange_rate: int


class ClaimerSet(VaultEvent):
    previous_claimer: str
    new_claimer: str


class YieldFeeRecipientSet(VaultEvent):
    previous_recipient: str
    new_recipient: str


class YieldFeePercentageSet(VaultEvent):
    previous_percentage: int
    new_percentage: int


class YieldFeeAccrued(VaultEvent):
    recipient: str
    amount: int
    yield_fee_total_supply: int
