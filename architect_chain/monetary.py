"""Monetary units, limits and conversions.

Amounts are counted in satoshis; one coin is 100,000,000 satoshis.
"""

SATOSHIS_PER_COIN = 100_000_000

INITIAL_BLOCK_REWARD = 50 * SATOSHIS_PER_COIN
"""Reward for mining a block, before fees (50 coins)."""

MIN_TRANSACTION_FEE = 1_000
DEFAULT_TRANSACTION_FEE = 10_000
MAX_TRANSACTION_FEE = 1_000_000

DUST_THRESHOLD = 546
"""Outputs below this many satoshis are considered dust."""

SMALL_AMOUNT = SATOSHIS_PER_COIN // 1_000
MEDIUM_AMOUNT = SATOSHIS_PER_COIN // 10
LARGE_AMOUNT = 10 * SATOSHIS_PER_COIN

_U64_MAX = 2**64 - 1


def coins_to_satoshis(coins: float) -> int:
    """Convert coins to whole satoshis, truncating and clamping to the u64 range."""
    value = coins * SATOSHIS_PER_COIN
    if value != value or value <= 0:  # NaN or non-positive
        return 0
    if value >= _U64_MAX:
        return _U64_MAX
    return int(value)


def satoshis_to_coins(satoshis: int) -> float:
    """Convert satoshis to coins."""
    return satoshis / SATOSHIS_PER_COIN


def format_satoshis(satoshis: int) -> str:
    """Render an amount as coins with eight decimals, e.g. ``1.00000000 coins``."""
    return f"{satoshis_to_coins(satoshis):.8f} coins"


def is_above_dust_threshold(amount: int) -> bool:
    """True if the amount is at least the dust threshold."""
    return amount >= DUST_THRESHOLD


def is_valid_fee(fee: int) -> bool:
    """True if the fee lies within the allowed bounds, inclusive."""
    return MIN_TRANSACTION_FEE <= fee <= MAX_TRANSACTION_FEE