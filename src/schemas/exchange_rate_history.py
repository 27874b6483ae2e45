from typing import List

from pydantic import BaseModel


class ExchangeRateHistoryResponse(BaseModel):
    date: List[str] = []
    exchange_rate: List[str] = []
    price_per_share: List[float] = []
