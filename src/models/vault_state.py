from datetime import datetime
import uuid

import sqlmodel


# Amounts are decimal strings: they overflow 64-bit integer columns
class VaultStateRecordBase(sqlmodel.SQLModel):
    vault_address: str = sqlmodel.Field(index=True)
    asset_unit: str
    last_recorded_exchange_rate: str
    yield_fee_percentage: int = 0
    yield_fee_recipient: str
    claimer: str
    yield_fee_total_supply: str = "0"
    total_assets: str = "0"
    total_supply: str = "0"
    exchange_rate: str = "0"
    is_collateralized: bool = True
    available_yield_balance: str = "0"
    available_yield_fee_balance: str = "0"
    recorded_at: datetime


# Database model, database table inferred from class name
class VaultStateRecord(VaultStateRecordBase, table=True):
    __tablename__ = "vault_states"

    id: uuid.UUID = sqlmodel.Field(default_factory=uuid.uuid4, primary_key=True)
