from .events import (
    ClaimerSet,
    Deposit,
    RecordedExchangeRate,
    Sponsor,
    Transfer,
    VaultEvent,
    YieldFeeAccrued,
    YieldFeePercentageSet,
    YieldFeeRecipientSet,
)
from .exchange_rate_history import ExchangeRateHistoryResponse
from .fee_info import YieldFeeInfo
from .vault_state import VaultState, VaultStateBase
