"""Process-wide fee calculator and fee helper functions."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterable
from typing import Protocol

from architect_chain.dynamic_fee import DynamicFeeConfig, FeePriority, FeeStatistics
from architect_chain.errors import TransactionError
from architect_chain.fee_calculator import (
    FeeMode,
    FixedFeeMode,
    UnifiedFeeCalculator,
    legacy_fee,
    validate_fee_rate,
)
from architect_chain.monetary import DEFAULT_TRANSACTION_FEE, INITIAL_BLOCK_REWARD

logger = logging.getLogger(__name__)

COINBASE_REWARD = INITIAL_BLOCK_REWARD
EDUCATIONAL_FEE = DEFAULT_TRANSACTION_FEE
DEFAULT_FEE_RATE = 1
MIN_FEE_RATE = 1
MAX_FEE_RATE = 1000

__all__ = [
    "COINBASE_REWARD",
    "EDUCATIONAL_FEE",
    "DEFAULT_FEE_RATE",
    "MIN_FEE_RATE",
    "MAX_FEE_RATE",
    "set_mempool_size_provider",
    "initialize",
    "calculate_fee",
    "estimate_fee",
    "validate_fee",
    "calculate_coinbase_reward",
    "get_fee_mode",
    "switch_fee_mode",
    "is_dynamic_enabled",
    "get_fee_statistics",
    "get_config_summary",
    "update_dynamic_config",
    "update_fixed_fee",
    "calculate_legacy_fee",
    "validate_fee_rate",
    "validate_fee_amount",
    "calculate_fee_rate",
    "estimate_transaction_size",
    "calculate_total_fees",
]


class _FeePaying(Protocol):
    """A transaction as far as fee totals are concerned."""

    @property
    def fee(self) -> int: ...

    def is_coinbase(self) -> bool: ...


_lock = threading.RLock()
_mempool_provider: Callable[[], int] = lambda: 0


def _current_mempool_size() -> int:
    return _mempool_provider()


_calculator = UnifiedFeeCalculator(FixedFeeMode(), _current_mempool_size)


def set_mempool_size_provider(provider: Callable[[], int]) -> None:
    """Set the callable that reports how many transactions are pending."""
    global _mempool_provider
    with _lock:
        _mempool_provider = provider


def initialize(mode: FeeMode) -> None:
    """Replace the global calculator with a fresh one in ``mode``."""
    global _calculator
    calculator = UnifiedFeeCalculator(mode, _current_mempool_size)
    with _lock:
        _calculator = calculator
    logger.info("Initialized global fee calculator")


def calculate_fee(transaction_size: int, priority: FeePriority | None = None) -> int:
    """Fee for a transaction using the global calculator."""
    with _lock:
        return _calculator.calculate_fee(transaction_size, priority)


def estimate_fee(priority: FeePriority) -> int:
    """Expected fee for a priority using the global calculator."""
    with _lock:
        return _calculator.estimate_fee(priority)


def validate_fee(fee: int, priority: FeePriority | None = None) -> None:
    """Raise TransactionError if the global calculator rejects ``fee``."""
    with _lock:
        _calculator.validate_fee(fee, priority)


def calculate_coinbase_reward(collected_fees: int) -> int:
    """Block reward plus collected fees, per the global calculator."""
    with _lock:
        return _calculator.calculate_coinbase_reward(collected_fees)


def get_fee_mode() -> FeeMode:
    """The global calculator's current mode."""
    with _lock:
        return _calculator.mode


def switch_fee_mode(new_mode: FeeMode) -> None:
    """Switch the global calculator to ``new_mode``."""
    with _lock:
        _calculator.switch_mode(new_mode)


def is_dynamic_enabled() -> bool:
    """True when the global calculator is in dynamic mode."""
    with _lock:
        return _calculator.is_dynamic_enabled()


def get_fee_statistics() -> FeeStatistics | None:
    """Fee market figures; None unless dynamic fees are enabled."""
    with _lock:
        return _calculator.fee_statistics()


def get_config_summary() -> str:
    """One-line description of the global fee configuration."""
    with _lock:
        return _calculator.config_summary()


def update_dynamic_config(config: DynamicFeeConfig) -> None:
    """Replace the dynamic configuration; raises ConfigError in fixed mode."""
    with _lock:
        _calculator.update_dynamic_config(config)


def update_fixed_fee(amount: int) -> None:
    """Change the fixed fee; raises ConfigError in dynamic mode."""
    with _lock:
        _calculator.update_fixed_fee(amount)


def calculate_legacy_fee(transaction_size: int, fee_rate: int) -> int:
    """Size-proportional fee: ``transaction_size * fee_rate``."""
    return legacy_fee(transaction_size, fee_rate)


def validate_fee_amount(fee: int, transaction_size: int) -> None:
    """Raise TransactionError unless the fee's per-byte rate is acceptable."""
    if transaction_size == 0:
        raise TransactionError("Cannot validate fee for zero-size transaction")
    validate_fee_rate(fee // transaction_size)


def calculate_fee_rate(fee: int, transaction_size: int) -> int:
    """Fee per byte, rounded down."""
    if transaction_size == 0:
        raise TransactionError(
            "Transaction size cannot be zero for fee rate calculation"
        )
    return fee // transaction_size


def estimate_transaction_size(input_count: int, output_count: int) -> int:
    """Rough transaction size in bytes from its input and output counts."""
    base_size = 10
    fee_size = 8
    return base_size + input_count * 50 + output_count * 20 + fee_size


def calculate_total_fees(transactions: Iterable[_FeePaying]) -> int:
    """Sum of the fees of all non-coinbase transactions."""
    return sum(tx.fee for tx in transactions if not tx.is_coinbase())