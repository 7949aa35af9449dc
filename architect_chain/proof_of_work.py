"""Proof-of-work mining and validation for blocks."""

from __future__ import annotations

import struct
from typing import Protocol

from architect_chain.merkle import sha256_digest

MAX_NONCE = 2**63 - 1


class _Minable(Protocol):
    """The block fields that proof-of-work hashes over."""

    pre_block_hash: str
    merkle_root: bytes
    timestamp: int
    height: int
    difficulty: int
    nonce: int


class ProofOfWork:
    """Searches for a nonce whose block hash falls below ``2**(256 - difficulty)``."""

    def __init__(self, block: _Minable) -> None:
        self.block = block
        self.difficulty = block.difficulty
        self.target = 1 << (256 - self.difficulty)

    def prepare_data(self, nonce: int) -> bytes:
        """The bytes that are hashed for a given nonce."""
        block = self.block
        return (
            block.pre_block_hash.encode()
            + bytes(block.merkle_root)
            + struct.pack(">qQIq", block.timestamp, block.height, self.difficulty, nonce)
        )

    def _meets_target(self, digest: bytes) -> bool:
        return int.from_bytes(digest, "big") < self.target

    def run(self) -> tuple[int, str]:
        """Mine the block; return the winning nonce and its hash in hex."""
        print("Mining the block")
        nonce = 0
        digest = b""
        while nonce < MAX_NONCE:
            digest = sha256_digest(self.prepare_data(nonce))
            if self._meets_target(digest):
                print(digest.hex())
                break
            nonce += 1
        print()
        return nonce, digest.hex()

    @staticmethod
    def validate(block: _Minable) -> bool:
        """True if the block's stored nonce satisfies its difficulty target."""
        pow_ = ProofOfWork(block)
        return pow_._meets_target(sha256_digest(pow_.prepare_data(block.nonce)))