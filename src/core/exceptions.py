class VaultError(Exception):
    """Base class for share vault errors.

    Every error carries an ``error_code`` plus the structured fields that
    describe the failure, so callers can match on kind and fields instead
    of parsing the message.
    """

    error_code = "vault_error"

    def __init__(self, error_message: str):
        super().__init__(error_message)
        self.error_message = error_message

    def to_dict(self) -> dict:
        return {"error_code": self.error_code, "error_message": self.error_message}


class ZeroAddressConfig(VaultError):
    error_code = "zero_address_config"

    def __init__(self, field: str):
        super().__init__(f"{field} cannot be the zero address")
        self.field = field


class FeePercentageOutOfRange(VaultError):
    error_code = "fee_percentage_out_of_range"

    def __init__(self, percentage: int, max_percentage: int):
        super().__init__(
            f"Yield fee percentage {percentage} exceeds precision {max_percentage}"
        )
        self.percentage = percentage
        self.max_percentage = max_percentage


class CapacityExceeded(VaultError):
    error_code = "capacity_exceeded"

    def __init__(self, receiver: str, requested: int, maximum: int):
        super().__init__(
            f"Requested {requested} for {receiver} exceeds max capacity {maximum}"
        )
        self.receiver = receiver
        self.requested = requested
        self.maximum = maximum


class DepositExceedsMax(CapacityExceeded):
    error_code = "deposit_exceeds_max"


class MintExceedsMax(CapacityExceeded):
    error_code = "mint_exceeds_max"


class VaultUnderCollateralized(VaultError):
    error_code = "vault_under_collateralized"

    def __init__(self, exchange_rate: int, asset_unit: int):
        super().__init__(
            f"Vault exchange rate {exchange_rate} is below par {asset_unit}"
        )
        self.exchange_rate = exchange_rate
        self.asset_unit = asset_unit


class AmountExceedsUint96(VaultError):
    error_code = "amount_exceeds_uint96"

    def __init__(self, amount: int):
        super().__init__(f"Amount {amount} does not fit in 96 bits")
        self.amount = amount


class CallerNotOwner(VaultError):
    error_code = "caller_not_owner"

    def __init__(self, sender: str, owner: str):
        super().__init__(f"{sender} is not the vault owner {owner}")
        self.sender = sender
        self.owner = owner


class YieldFeeExceedsAvailable(VaultError):
    error_code = "yield_fee_exceeds_available"

    def __init__(self, requested: int, available: int):
        super().__init__(
            f"Yield fee {requested} exceeds available yield fee balance {available}"
        )
        self.requested = requested
        self.available = available


class PermitAuthorizationFailed(VaultError):
    error_code = "permit_authorization_failed"


class PermitExpired(PermitAuthorizationFailed):
    error_code = "permit_expired"

    def __init__(self, deadline: int, now: int):
        super().__init__(f"Permit deadline {deadline} has passed (now {now})")
        self.deadline = deadline
        self.now = now


class InvalidPermitSignature(PermitAuthorizationFailed):
    error_code = "invalid_permit_signature"

    def __init__(self, owner: str, signer: str | None):
        super().__init__(f"Permit signed by {signer}, expected {owner}")
        self.owner = owner
        self.signer = signer


class InsufficientBalance(VaultError):
    error_code = "insufficient_balance"

    def __init__(self, holder: str, balance: int, needed: int):
        super().__init__(f"{holder} balance {balance} is less than {needed}")
        self.holder = holder
        self.balance = balance
        self.needed = needed


class InsufficientAllowance(VaultError):
    error_code = "insufficient_allowance"

    def __init__(self, owner: str, spender: str, allowance: int, needed: int):
        super().__init__(
            f"Allowance of {spender} over {owner} is {allowance}, needed {needed}"
        )
        self.owner = owner
        self.spender = spender
        self.allowance = allowance
        self.needed = needed
