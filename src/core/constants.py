ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"

# Delegate sentinel used by the balance ledger for sponsored balances
SPONSORSHIP_ADDRESS = "0x0000000000000000000000000000000000000001"

# Yield fee percentages are fixed point with 9 decimals
FEE_PRECISION = 1_000_000_000

# Holder balances in the ledger are 96-bit
UINT96_MAX = 2**96 - 1
MAX_UINT256 = 2**256 - 1

DEFAULT_ASSET_DECIMALS = 18
