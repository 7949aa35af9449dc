"""Fee calculator that charges the same amount for every transaction."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from architect_chain.errors import TransactionError
from architect_chain.monetary import INITIAL_BLOCK_REWARD

logger = logging.getLogger(__name__)


@dataclass
class FixedFeeCalculator:
    """Charges ``fee_amount`` per transaction regardless of size or priority."""

    fee_amount: int = 1
    coinbase_reward: int = INITIAL_BLOCK_REWARD

    def calculate_fee(self, transaction_size: int = 0, priority: Any = None) -> int:
        """Return the fixed fee; size and priority are ignored."""
        logger.info("Using fixed fee: %d coins", self.fee_amount)
        return self.fee_amount

    def validate_fee(self, fee: int) -> None:
        """Raise TransactionError unless ``fee`` equals the fixed amount."""
        if fee != self.fee_amount:
            raise TransactionError(f"Invalid fee: expected {self.fee_amount}, got {fee}")

    def calculate_coinbase_reward(self, collected_fees: int) -> int:
        """Base block reward plus the fees collected in the block."""
        return self.coinbase_reward + collected_fees