"""Merkle trees over transaction ids, using double SHA-256 as in Bitcoin."""

from __future__ import annotations

import hashlib
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from functools import reduce
from typing import Protocol

from architect_chain.errors import InvalidBlockError


class _Identified(Protocol):
    """Anything with a transaction id, such as a transaction."""

    @property
    def id(self) -> bytes: ...


def sha256_digest(data: bytes) -> bytes:
    """Single SHA-256 digest of ``data``."""
    return hashlib.sha256(data).digest()


def hash_pair(left: bytes, right: bytes) -> bytes:
    """Double SHA-256 of the concatenation of two hashes."""
    return sha256_digest(sha256_digest(bytes(left) + bytes(right)))


def _next_level(level: Sequence[bytes]) -> list[bytes]:
    """Hash neighbours together; an odd last hash is paired with itself."""
    padded = list(level)
    if len(padded) % 2:
        padded.append(padded[-1])
    pairs = iter(padded)
    return [hash_pair(left, right) for left, right in zip(pairs, pairs)]


def _build_levels(leaves: Sequence[bytes]) -> list[list[bytes]]:
    """Every level of the tree, leaves first and the root level last."""
    levels = [list(leaves)]
    if len(leaves) == 1:
        levels.append(_next_level(leaves))
    while len(levels[-1]) > 1:
        levels.append(_next_level(levels[-1]))
    return levels


@dataclass(frozen=True)
class ProofElement:
    """A sibling hash on the path to the root."""

    hash: bytes
    is_right: bool
    """True when the sibling sits to the right of the running hash."""


@dataclass(frozen=True)
class MerkleProof:
    """Evidence that a transaction hash is included under a Merkle root."""

    transaction_hash: bytes
    merkle_root: bytes
    proof_path: tuple[ProofElement, ...]
    transaction_index: int


class MerkleTree:
    """A complete Merkle tree built from a non-empty list of leaf hashes."""

    def __init__(self, hashes: Iterable[bytes]) -> None:
        leaves = [bytes(h) for h in hashes]
        if not leaves:
            raise InvalidBlockError("Cannot create Merkle tree from empty hash list")
        self._levels = _build_levels(leaves)

    @classmethod
    def from_hashes(cls, hashes: Iterable[bytes]) -> MerkleTree:
        """Build a tree from transaction hashes."""
        return cls(hashes)

    @classmethod
    def from_transactions(cls, transactions: Iterable[_Identified]) -> MerkleTree:
        """Build a tree from the ids of the given transactions."""
        ids = [tx.id for tx in transactions]
        if not ids:
            raise InvalidBlockError(
                "Cannot create Merkle tree from empty transaction list"
            )
        return cls(ids)

    @property
    def root_hash(self) -> bytes:
        """The Merkle root."""
        return self._levels[-1][0]

    @property
    def leaf_count(self) -> int:
        """Number of leaves the tree was built from."""
        return len(self._levels[0])

    @property
    def is_empty(self) -> bool:
        """True if the tree has no root."""
        return not self._levels[-1]

    def generate_proof(self, transaction_index: int) -> MerkleProof:
        """Build the inclusion proof for the leaf at ``transaction_index``."""
        if not 0 <= transaction_index < self.leaf_count:
            raise InvalidBlockError(
                f"Transaction index {transaction_index} out of bounds "
                f"(max: {self.leaf_count - 1})"
            )
        path: list[ProofElement] = []
        index = transaction_index
        for level in self._levels[:-1]:
            if index % 2 == 0:
                sibling = level[index + 1] if index + 1 < len(level) else level[index]
                path.append(ProofElement(sibling, is_right=True))
            else:
                path.append(ProofElement(level[index - 1], is_right=False))
            index //= 2
        return MerkleProof(
            transaction_hash=self._levels[0][transaction_index],
            merkle_root=self.root_hash,
            proof_path=tuple(path),
            transaction_index=transaction_index,
        )


def calculate_merkle_root(transaction_hashes: Iterable[bytes]) -> bytes:
    """Merkle root of the hashes; a single hash is paired with itself."""
    leaves = [bytes(h) for h in transaction_hashes]
    if not leaves:
        raise InvalidBlockError(
            "Cannot calculate Merkle root from empty transaction list"
        )
    return _build_levels(leaves)[-1][0]


def verify_proof(proof: MerkleProof) -> bool:
    """True if folding the proof path over the leaf hash yields the root."""

    def step(current: bytes, element: ProofElement) -> bytes:
        if element.is_right:
            return hash_pair(current, element.hash)
        return hash_pair(element.hash, current)

    return reduce(step, proof.proof_path, bytes(proof.transaction_hash)) == bytes(
        proof.merkle_root
    )


def verify_transactions(
    transactions: Iterable[_Identified], expected_root: bytes
) -> bool:
    """True if the transactions' ids produce ``expected_root``."""
    return calculate_merkle_root(tx.id for tx in transactions) == bytes(expected_root)