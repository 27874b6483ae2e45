from datetime import datetime

from pydantic import BaseModel, ConfigDict


class VaultStateBase(BaseModel):
    vault_address: str
    asset_unit: int
    last_recorded_exchange_rate: int
    yield_fee_percentage: int = 0
    yield_fee_recipient: str
    claimer: str
    yield_fee_total_supply: int = 0


# Point-in-time view with the derived figures
class VaultState(VaultStateBase):
    model_config = ConfigDict(from_attributes=True)

    total_assets: int = 0
    total_supply: int = 0
    exchange_rate: int = 0
    is_collateralized: bool = True
    available_yield_balance: int = 0
    available_yield_fee_balance: int = 0
    recorded_at: datetime | None = None
