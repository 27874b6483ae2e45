import pandas as pd
from fastapi import APIRouter, HTTPException
from web3 import Web3

import schemas
from api.api_v1.deps import SessionDep
from services import vault_state_store

router = APIRouter()


def _validate_address(vault_address: str) -> str:
    if not Web3.is_address(vault_address):
        raise HTTPException(
            status_code=400,
            detail=f"Invalid vault address {vault_address}",
        )
    return Web3.to_checksum_address(vault_address)


def _get_latest_state(session: SessionDep, vault_address: str) -> schemas.VaultState:
    state = vault_state_store.get_latest_vault_state(
        session, _validate_address(vault_address)
    )
    if state is None:
        raise HTTPException(
            status_code=400,
            detail="The data not found in the database.",
        )
    return state


@router.get("/{vault_address}/state", response_model=schemas.VaultState)
async def get_vault_state(session: SessionDep, vault_address: str):
    return _get_latest_state(session, vault_address)


@router.get("/{vault_address}/yield-fee", response_model=schemas.YieldFeeInfo)
async def get_vault_yield_fee(session: SessionDep, vault_address: str):
    state = _get_latest_state(session, vault_address)
    return schemas.YieldFeeInfo(
        yield_fee_percentage=state.yield_fee_percentage,
        yield_fee_recipient=state.yield_fee_recipient,
        yield_fee_total_supply=state.yield_fee_total_supply,
        available_yield_balance=state.available_yield_balance,
        available_yield_fee_balance=state.available_yield_fee_balance,
    )


@router.get(
    "/{vault_address}/exchange-rate-history",
    response_model=schemas.ExchangeRateHistoryResponse,
)
async def get_exchange_rate_history(session: SessionDep, vault_address: str):
    history = vault_state_store.get_exchange_rate_history(
        session, _validate_address(vault_address)
    )
    if len(history) == 0:
        return schemas.ExchangeRateHistoryResponse()

    history_df = pd.DataFrame([rec.model_dump() for rec in history])

    # Rename the datetime column to date
    history_df.rename(columns={"datetime": "date"}, inplace=True)
    history_df["date"] = pd.to_datetime(history_df["date"]).dt.strftime("%Y-%m-%dT%H:%M:%S")

    return history_df[["date", "exchange_rate", "price_per_share"]].to_dict(orient="list")
