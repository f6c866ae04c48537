"""Protocol constants for the constant-product pool core.

Centralizes integer widths, fee bounds and launch parameters.
"""

# Token amounts, reserves and LP supply are unsigned 64-bit
U64_MAX = 2**64 - 1

# 10000 bp = 100%
FEE_MAX_BASIS_POINTS = 10_000

# LP mint decimals; the locked seed liquidity is 10**LP_MINT_DECIMALS
LP_MINT_DECIMALS = 5

# Total LP supply minted at launch must be at least this multiple of the
# locked seed liquidity
MIN_LAUNCH_SUPPLY_MULTIPLE = 4

# Relative invariant tolerance is 1 / INVARIANT_TOLERANCE_DENOMINATOR (1e-5)
INVARIANT_TOLERANCE_DENOMINATOR = 100_000

# Mints, vaults, configs and pools are identified by 32-byte ids
IDENTITY_SIZE = 32
EMPTY_IDENTITY = bytes(IDENTITY_SIZE)
