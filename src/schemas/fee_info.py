from pydantic import BaseModel


class YieldFeeInfo(BaseModel):
    yield_fee_percentage: int
    yield_fee_recipient: str
    yield_fee_total_supply: int
    available_yield_balance: int
    available_yield_fee_balance: int
