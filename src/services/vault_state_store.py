import logging
from typing import List, Optional

import pendulum
from sqlmodel import Session, select

from models import ExchangeRateHistory, VaultStateRecord
from schemas import VaultState
from utils.calculate_price import rate_to_price_per_share
from utils.web3_utils import to_checksum

logger = logging.getLogger(__name__)

_AMOUNT_FIELDS = (
    "asset_unit",
    "last_recorded_exchange_rate",
    "yield_fee_total_supply",
    "total_assets",
    "total_supply",
    "exchange_rate",
    "available_yield_balance",
    "available_yield_fee_balance",
)


def to_record(state: VaultState) -> VaultStateRecord:
    data = state.model_dump()
    for name in _AMOUNT_FIELDS:
        data[name] = str(data[name])
    return VaultStateRecord(**data)


def from_record(record: VaultStateRecord) -> VaultState:
    data = record.model_dump(exclude={"id"})
    for name in _AMOUNT_FIELDS:
        data[name] = int(data[name])
    return VaultState(**data)


def record_vault_state(session: Session, state: VaultState) -> VaultStateRecord:
    if state.recorded_at is None:
        state = state.model_copy(update={"recorded_at": pendulum.now(tz=pendulum.UTC)})

    record = to_record(state)
    session.add(record)
    session.add(
        ExchangeRateHistory(
            vault_address=state.vault_address,
            datetime=state.recorded_at,
            exchange_rate=str(state.exchange_rate),
            price_per_share=rate_to_price_per_share(state.exchange_rate, state.asset_unit),
        )
    )
    session.commit()
    logger.info(
        "Recorded state for vault %s, exchange rate %s", state.vault_address, state.exchange_rate
    )
    return record


def get_latest_vault_state(session: Session, vault_address: str) -> Optional[VaultState]:
    record = session.exec(
        select(VaultStateRecord)
        .where(VaultStateRecord.vault_address == to_checksum(vault_address))
        .order_by(VaultStateRecord.recorded_at.desc())
    ).first()
    if record is None:
        return None
    return from_record(record)


def get_exchange_rate_history(session: Session, vault_address: str) -> List[ExchangeRateHistory]:
    return session.exec(
        select(ExchangeRateHistory)
        .where(ExchangeRateHistory.vault_address == to_checksum(vault_address))
        .order_by(ExchangeRateHistory.datetime.asc())
    ).all()
