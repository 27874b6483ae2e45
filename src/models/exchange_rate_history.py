from datetime import datetime
from sqlmodel import SQLModel, Field
import uuid


class ExchangeRateHistoryBase(SQLModel):
    datetime: datetime
    exchange_rate: str
    price_per_share: float


class ExchangeRateHistory(ExchangeRateHistoryBase, table=True):
    __tablename__ = "exchange_rate_history"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    vault_address: str = Field(index=True)
