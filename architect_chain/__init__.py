"""Proof-of-work blockchain core: blocks, Merkle trees, difficulty, fees and node settings."""

__version__ = "0.1.0"