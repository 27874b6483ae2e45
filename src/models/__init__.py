from .vault_state import VaultStateRecord, VaultStateRecordBase
from .exchange_rate_history import ExchangeRateHistory, ExchangeRateHistoryBase
