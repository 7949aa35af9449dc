"""Difficulty adjustment that keeps block times near the target."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Protocol

from architect_chain.errors import InvalidBlockError

logger = logging.getLogger(__name__)

TARGET_BLOCK_TIME = 120_000
"""Target time between blocks, in milliseconds."""
DIFFICULTY_ADJUSTMENT_PERIOD = 10
INITIAL_DIFFICULTY = 4
MIN_DIFFICULTY = 1
MAX_DIFFICULTY = 12


class _TimedBlock(Protocol):
    timestamp: int
    difficulty: int


def calculate_next_difficulty(
    recent_blocks: Sequence[_TimedBlock], current_height: int
) -> int:
    """Difficulty for the block at ``current_height``.

    ``recent_blocks`` are the latest blocks, oldest first.
    """
    if current_height < DIFFICULTY_ADJUSTMENT_PERIOD:
        return INITIAL_DIFFICULTY

    if current_height % DIFFICULTY_ADJUSTMENT_PERIOD != 0:
        return recent_blocks[-1].difficulty if recent_blocks else INITIAL_DIFFICULTY

    if len(recent_blocks) != DIFFICULTY_ADJUSTMENT_PERIOD:
        raise InvalidBlockError(
            f"Need {DIFFICULTY_ADJUSTMENT_PERIOD} blocks for difficulty adjustment, "
            f"got {len(recent_blocks)}"
        )

    actual = calculate_time_span(recent_blocks)
    target = TARGET_BLOCK_TIME * DIFFICULTY_ADJUSTMENT_PERIOD
    current = recent_blocks[-1].difficulty
    new = adjust_difficulty(current, actual, target)
    logger.info(
        "Difficulty adjustment at height %d: %d -> %d (actual: %dms, target: %dms)",
        current_height,
        current,
        new,
        actual,
        target,
    )
    return new


def calculate_time_span(blocks: Sequence[_TimedBlock]) -> int:
    """Milliseconds between the first and last block."""
    if len(blocks) < 2:
        raise InvalidBlockError("Need at least 2 blocks to calculate time span")
    first, last = blocks[0].timestamp, blocks[-1].timestamp
    if last <= first:
        raise InvalidBlockError(
            "Invalid block timestamps: last block is not newer than first"
        )
    return last - first


def adjust_difficulty(current_difficulty: int, actual_time: int, target_time: int) -> int:
    """Raise or lower difficulty by the ratio of actual to target time."""
    ratio = actual_time / target_time
    if ratio < 0.5:
        new = current_difficulty + 2
    elif ratio < 0.75:
        new = current_difficulty + 1
    elif ratio > 2.0:
        new = max(current_difficulty - 2, 0)
    elif ratio > 1.5:
        new = max(current_difficulty - 1, 0)
    else:
        new = current_difficulty
    return min(max(new, MIN_DIFFICULTY), MAX_DIFFICULTY)


def validate_difficulty(difficulty: int) -> None:
    """Raise InvalidBlockError if ``difficulty`` is outside the allowed range."""
    if not MIN_DIFFICULTY <= difficulty <= MAX_DIFFICULTY:
        raise InvalidBlockError(
            f"Difficulty {difficulty} is outside valid range "
            f"[{MIN_DIFFICULTY}, {MAX_DIFFICULTY}]"
        )