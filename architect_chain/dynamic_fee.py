"""Fees that scale with transaction priority and mempool congestion."""

from __future__ import annotations

import logging
import math
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum

from architect_chain.errors import ConfigError, TransactionError
from architect_chain.monetary import INITIAL_BLOCK_REWARD

logger = logging.getLogger(__name__)

_MAX_CONGESTION_MULTIPLIER = 3.0
_FEE_TOLERANCE = 0.1


class FeePriority(Enum):
    """How urgently a transaction should be mined."""

    LOW = "low"
    NORMAL = "normal"
    HIGH = "high"
    URGENT = "urgent"

    @classmethod
    def parse(cls, text: str) -> FeePriority:
        """Parse a priority name, ignoring case."""
        try:
            return cls(text.lower())
        except ValueError:
            raise ConfigError(f"Invalid priority: {text}") from None

    def __str__(self) -> str:
        return self.value


def default_priority_multipliers() -> dict[FeePriority, float]:
    """The standard fee multiplier for each priority."""
    return {
        FeePriority.LOW: 0.5,
        FeePriority.NORMAL: 1.0,
        FeePriority.HIGH: 2.0,
        FeePriority.URGENT: 3.0,
    }


@dataclass
class DynamicFeeConfig:
    """Parameters of the dynamic fee market."""

    base_fee: int = 1
    max_fee: int = 10
    congestion_threshold: int = 20
    priority_multipliers: dict[FeePriority, float] = field(
        default_factory=default_priority_multipliers
    )
    coinbase_reward: int = INITIAL_BLOCK_REWARD

    @classmethod
    def with_base_fee(cls, base_fee: int) -> DynamicFeeConfig:
        """A config with the given base fee and a cap of ten times it."""
        return cls(base_fee=base_fee, max_fee=base_fee * 10)

    def validate(self) -> None:
        """Raise ConfigError if any parameter is out of range."""
        if self.base_fee == 0:
            raise ConfigError("Base fee cannot be zero")
        if self.max_fee < self.base_fee:
            raise ConfigError("Maximum fee cannot be less than base fee")
        if self.congestion_threshold == 0:
            raise ConfigError("Congestion threshold cannot be zero")
        for priority in FeePriority:
            if priority not in self.priority_multipliers:
                raise ConfigError(
                    f"Missing priority multiplier for {priority.value.capitalize()}"
                )


@dataclass
class FeeStatistics:
    """A snapshot of the fee market for display."""

    base_fee: int
    max_fee: int
    current_congestion_multiplier: float
    mempool_size: int
    congestion_threshold: int
    estimated_fees: dict[FeePriority, int]

    def __str__(self) -> str:
        lines = [
            "Fee Statistics:",
            f"  Base Fee: {self.base_fee} coins",
            f"  Max Fee: {self.max_fee} coins",
            f"  Mempool Size: {self.mempool_size} transactions",
            f"  Congestion Threshold: {self.congestion_threshold} transactions",
            f"  Congestion Multiplier: {self.current_congestion_multiplier:.2f}x",
            "  Estimated Fees:",
        ]
        lines.extend(
            f"    {priority}: {fee} coins" for priority, fee in self.estimated_fees.items()
        )
        return "\n".join(lines) + "\n"


class DynamicFeeCalculator:
    """Computes fees from a validated DynamicFeeConfig.

    ``mempool_size`` is a callable returning the current number of pending
    transactions; it is consulted by :meth:`estimate_fee`.
    """

    def __init__(
        self,
        config: DynamicFeeConfig,
        mempool_size: Callable[[], int] | None = None,
    ) -> None:
        config.validate()
        self.config = config
        self._mempool_size = mempool_size if mempool_size is not None else (lambda: 0)

    def _priority_multiplier(self, priority: FeePriority) -> float:
        return self.config.priority_multipliers.get(priority, 1.0)

    def congestion_multiplier(self, mempool_size: int) -> float:
        """1.0 up to the threshold, then rising linearly to a cap of 3.0."""
        threshold = self.config.congestion_threshold
        if mempool_size <= threshold:
            return 1.0
        ratio = mempool_size / threshold
        return min(1.0 + (ratio - 1.0) * 2.0, _MAX_CONGESTION_MULTIPLIER)

    def calculate_fee(self, priority: FeePriority, mempool_size: int) -> int:
        """Fee for a priority at a given mempool size, kept within base and max."""
        priority_mult = self._priority_multiplier(priority)
        congestion_mult = self.congestion_multiplier(mempool_size)
        raw = self.config.base_fee * priority_mult * congestion_mult
        if math.isnan(raw) or raw <= 0:
            fee = 0
        elif math.isinf(raw):
            fee = self.config.max_fee
        else:
            fee = int(raw)
        capped = min(max(fee, self.config.base_fee), self.config.max_fee)
        logger.info(
            "Calculated fee: %d coins (priority: %s, mempool: %d, base: %d, "
            "priority_mult: %.2f, congestion_mult: %.2f)",
            capped,
            priority,
            mempool_size,
            self.config.base_fee,
            priority_mult,
            congestion_mult,
        )
        return capped

    def estimate_fee(self, priority: FeePriority) -> int:
        """Fee for a priority at the current mempool size."""
        return self.calculate_fee(priority, self._mempool_size())

    def validate_fee(self, fee: int, priority: FeePriority, mempool_size: int) -> None:
        """Raise TransactionError unless ``fee`` is within 10% of the expected fee."""
        expected = self.calculate_fee(priority, mempool_size)
        tolerance = int(max(expected * _FEE_TOLERANCE, 0.0))
        low = max(expected - tolerance, 0)
        high = expected + tolerance
        if not low <= fee <= high:
            logger.warning(
                "Fee validation failed: provided %d, expected %d (±%d)",
                fee,
                expected,
                tolerance,
            )
            raise TransactionError(
                f"Invalid fee: provided {fee}, expected {expected} (±{tolerance})"
            )

    def calculate_coinbase_reward(self, collected_fees: int) -> int:
        """Base coinbase reward plus the collected fees."""
        return self.config.coinbase_reward + collected_fees

    def update_config(self, new_config: DynamicFeeConfig) -> None:
        """Replace the configuration after validating it."""
        new_config.validate()
        self.config = new_config
        logger.info("Updated dynamic fee configuration")

    def fee_statistics(self, mempool_size: int) -> FeeStatistics:
        """Current fee market figures, with an estimate for every priority."""
        return FeeStatistics(
            base_fee=self.config.base_fee,
            max_fee=self.config.max_fee,
            current_congestion_multiplier=self.congestion_multiplier(mempool_size),
            mempool_size=mempool_size,
            congestion_threshold=self.config.congestion_threshold,
            estimated_fees={
                priority: self.calculate_fee(priority, mempool_size)
                for priority in FeePriority
            },
        )