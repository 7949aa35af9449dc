"""Fee calculation that switches between fixed and dynamic fee modes."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field

from architect_chain.dynamic_fee import (
    DynamicFeeCalculator,
    DynamicFeeConfig,
    FeePriority,
    FeeStatistics,
)
from architect_chain.errors import ConfigError, TransactionError
from architect_chain.fixed_fee import FixedFeeCalculator
from architect_chain.monetary import INITIAL_BLOCK_REWARD

logger = logging.getLogger(__name__)

MIN_FEE_RATE = 1
MAX_FEE_RATE = 1000


@dataclass(frozen=True)
class FixedFeeMode:
    """Every transaction pays the same ``amount``."""

    amount: int = 1


@dataclass(frozen=True)
class DynamicFeeMode:
    """Fees follow priority and mempool congestion as set by ``config``."""

    config: DynamicFeeConfig = field(default_factory=DynamicFeeConfig)


FeeMode = FixedFeeMode | DynamicFeeMode


class UnifiedFeeCalculator:
    """Calculates fees in whichever mode is currently selected.

    ``mempool_size`` is a callable returning the number of pending
    transactions; it drives congestion pricing in dynamic mode.
    """

    def __init__(
        self,
        mode: FeeMode | None = None,
        mempool_size: Callable[[], int] | None = None,
    ) -> None:
        self._mempool_size = mempool_size if mempool_size is not None else (lambda: 0)
        self._mode: FeeMode = FixedFeeMode() if mode is None else mode
        self._fixed: FixedFeeCalculator | None = None
        self._dynamic: DynamicFeeCalculator | None = None
        self._initialize_calculators()

    def _initialize_calculators(self) -> None:
        mode = self._mode
        if isinstance(mode, FixedFeeMode):
            self._fixed = FixedFeeCalculator(mode.amount)
            self._dynamic = None
            logger.info("Initialized fixed fee calculator with %d coins", mode.amount)
        elif isinstance(mode, DynamicFeeMode):
            self._dynamic = DynamicFeeCalculator(mode.config, self._mempool_size)
            self._fixed = None
            logger.info("Initialized dynamic fee calculator")
        else:
            raise TypeError(f"Unknown fee mode: {mode!r}")

    @property
    def mode(self) -> FeeMode:
        """The current fee mode."""
        return self._mode

    def calculate_fee(
        self, transaction_size: int, priority: FeePriority | None = None
    ) -> int:
        """Fee for a transaction at the current mempool size."""
        return self.calculate_fee_with_mempool_size(
            transaction_size, priority, self._mempool_size()
        )

    def calculate_fee_with_mempool_size(
        self,
        transaction_size: int,
        priority: FeePriority | None,
        mempool_size: int,
    ) -> int:
        """Fee for a transaction at an explicitly given mempool size."""
        if self._fixed is not None:
            return self._fixed.calculate_fee(transaction_size, priority)
        if self._dynamic is not None:
            return self._dynamic.calculate_fee(
                priority or FeePriority.NORMAL, mempool_size
            )
        return 1

    def estimate_fee(self, priority: FeePriority) -> int:
        """Expected fee for the given priority."""
        if isinstance(self._mode, FixedFeeMode):
            return self._mode.amount
        if self._dynamic is not None:
            return self._dynamic.estimate_fee(priority)
        return 1

    def validate_fee(self, fee: int, priority: FeePriority | None = None) -> None:
        """Raise TransactionError if ``fee`` is not acceptable in the current mode."""
        if self._fixed is not None:
            self._fixed.validate_fee(fee)
        elif self._dynamic is not None:
            self._dynamic.validate_fee(
                fee, priority or FeePriority.NORMAL, self._mempool_size()
            )

    def calculate_coinbase_reward(self, collected_fees: int) -> int:
        """Block reward plus the collected fees."""
        if self._fixed is not None:
            return self._fixed.calculate_coinbase_reward(collected_fees)
        if self._dynamic is not None:
            return self._dynamic.calculate_coinbase_reward(collected_fees)
        return INITIAL_BLOCK_REWARD + collected_fees

    def switch_mode(self, new_mode: FeeMode) -> None:
        """Replace the fee mode and rebuild the underlying calculator."""
        logger.info("Switching fee mode from %r to %r", self._mode, new_mode)
        previous = self._mode
        self._mode = new_mode
        try:
            self._initialize_calculators()
        except Exception:
            self._mode = previous
            self._initialize_calculators()
            raise

    def is_dynamic_enabled(self) -> bool:
        """True when fees are calculated dynamically."""
        return isinstance(self._mode, DynamicFeeMode)

    def is_fixed_enabled(self) -> bool:
        """True when a fixed fee is charged."""
        return isinstance(self._mode, FixedFeeMode)

    def fee_statistics(self) -> FeeStatistics | None:
        """Fee market figures, available only in dynamic mode."""
        if self._dynamic is None:
            return None
        return self._dynamic.fee_statistics(self._mempool_size())

    def config_summary(self) -> str:
        """A one-line description of the current configuration."""
        mode = self._mode
        if isinstance(mode, FixedFeeMode):
            return f"Fixed fee: {mode.amount} coins"
        config = mode.config
        return (
            f"Dynamic fees: base {config.base_fee} coins, max {config.max_fee} coins, "
            f"threshold {config.congestion_threshold} transactions"
        )

    def update_dynamic_config(self, new_config: DynamicFeeConfig) -> None:
        """Replace the dynamic configuration; only allowed in dynamic mode."""
        if not isinstance(self._mode, DynamicFeeMode):
            raise ConfigError("Cannot update dynamic config in fixed fee mode")
        if self._dynamic is not None:
            self._dynamic.update_config(new_config)
        self._mode = DynamicFeeMode(new_config)
        logger.info("Updated dynamic fee configuration")

    def update_fixed_fee(self, new_amount: int) -> None:
        """Change the fixed fee; only allowed in fixed mode."""
        if not isinstance(self._mode, FixedFeeMode):
            raise ConfigError("Cannot update fixed fee in dynamic fee mode")
        self._mode = FixedFeeMode(new_amount)
        if self._fixed is not None:
            self._fixed.fee_amount = new_amount
        logger.info("Updated fixed fee to %d coins", new_amount)


def legacy_fee(transaction_size: int, fee_rate: int) -> int:
    """Size-proportional fee: ``transaction_size * fee_rate``."""
    if transaction_size == 0:
        raise TransactionError("Transaction size cannot be zero")
    return transaction_size * fee_rate


def validate_fee_rate(fee_rate: int) -> None:
    """Raise TransactionError unless the rate lies in 1..1000 sat/byte."""
    if fee_rate < MIN_FEE_RATE:
        raise TransactionError(
            f"Fee rate {fee_rate} below minimum {MIN_FEE_RATE} sat/byte"
        )
    if fee_rate > MAX_FEE_RATE:
        raise TransactionError(
            f"Fee rate {fee_rate} above maximum {MAX_FEE_RATE} sat/byte"
        )


def legacy_coinbase_reward(collected_fees: int) -> int:
    """Initial block reward plus the collected fees."""
    return INITIAL_BLOCK_REWARD + collected_fees