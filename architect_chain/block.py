"""Blocks: mining, serialization and consensus-rule validation."""

from __future__ import annotations

import dataclasses
import json
import logging
import time
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from typing import Protocol

from architect_chain.difficulty import INITIAL_DIFFICULTY
from architect_chain.errors import InvalidBlockError
from architect_chain.merkle import (
    MerkleProof,
    MerkleTree,
    calculate_merkle_root,
    sha256_digest,
    verify_proof,
)
from architect_chain.proof_of_work import ProofOfWork

logger = logging.getLogger(__name__)

MAX_BLOCK_SIZE = 1_000_000
MAX_TRANSACTIONS_PER_BLOCK = 4000
MAX_TRANSACTION_SIZE = 100_000
MAX_FUTURE_TIME = 2 * 60 * 60

GENESIS_PREVIOUS_HASH = "None"


class Transaction(Protocol):
    """What a block needs to know about the transactions it carries."""

    @property
    def id(self) -> bytes: ...

    @property
    def fee(self) -> int: ...

    @property
    def output_value(self) -> int: ...

    def is_coinbase(self) -> bool: ...

    def serialize(self) -> bytes: ...


def current_timestamp() -> int:
    """Current time in milliseconds since the Unix epoch."""
    return time.time_ns() // 1_000_000


def validate_block_constraints(transactions: Sequence[Transaction]) -> None:
    """Raise InvalidBlockError if the transactions exceed count or size limits."""
    if len(transactions) > MAX_TRANSACTIONS_PER_BLOCK:
        raise InvalidBlockError(
            f"Too many transactions in block: {len(transactions)} "
            f"(max: {MAX_TRANSACTIONS_PER_BLOCK})"
        )
    total_size = 0
    for index, transaction in enumerate(transactions):
        tx_size = len(transaction.serialize())
        if tx_size > MAX_TRANSACTION_SIZE:
            raise InvalidBlockError(
                f"Transaction {index} too large: {tx_size} bytes "
                f"(max: {MAX_TRANSACTION_SIZE} bytes)"
            )
        total_size += tx_size
    if total_size > MAX_BLOCK_SIZE:
        raise InvalidBlockError(
            f"Block too large: {total_size} bytes (max: {MAX_BLOCK_SIZE} bytes)"
        )


def _merkle_root_of(transactions: Iterable[Transaction]) -> bytes:
    return calculate_merkle_root(tx.id for tx in transactions)


@dataclass(frozen=True)
class Block:
    """A mined block of transactions linked to its predecessor by hash."""

    timestamp: int
    pre_block_hash: str
    hash: str
    transactions: tuple[Transaction, ...]
    nonce: int
    height: int
    difficulty: int
    merkle_root: bytes

    @classmethod
    def mine(
        cls,
        pre_block_hash: str,
        transactions: Iterable[Transaction],
        height: int,
        difficulty: int,
    ) -> Block:
        """Build a block over ``transactions`` and run proof-of-work on it."""
        txs = tuple(transactions)
        if not txs:
            raise InvalidBlockError("Block must contain at least one transaction")
        try:
            validate_block_constraints(txs)
        except InvalidBlockError as exc:
            logger.warning(
                "Block constraint validation warning during creation: %s", exc
            )

        unmined = cls(
            timestamp=current_timestamp(),
            pre_block_hash=pre_block_hash,
            hash="",
            transactions=txs,
            nonce=0,
            height=height,
            difficulty=difficulty,
            merkle_root=_merkle_root_of(txs),
        )
        logger.info(
            "Starting proof-of-work for block at height %d with difficulty %d",
            height,
            difficulty,
        )
        nonce, block_hash = ProofOfWork(unmined).run()
        logger.info(
            "Proof-of-work completed for block: %s (difficulty: %d)",
            block_hash,
            difficulty,
        )
        return dataclasses.replace(unmined, nonce=nonce, hash=block_hash)

    @classmethod
    def genesis(cls, transaction: Transaction) -> Block:
        """The first block of a chain, holding a single coinbase transaction."""
        return cls.mine(GENESIS_PREVIOUS_HASH, [transaction], 0, INITIAL_DIFFICULTY)

    def serialize(self) -> bytes:
        """Encode the block as bytes."""
        document = {
            "timestamp": self.timestamp,
            "pre_block_hash": self.pre_block_hash,
            "hash": self.hash,
            "transactions": [tx.serialize().hex() for tx in self.transactions],
            "nonce": self.nonce,
            "height": self.height,
            "difficulty": self.difficulty,
            "merkle_root": bytes(self.merkle_root).hex(),
        }
        return json.dumps(document, separators=(",", ":"), sort_keys=True).encode()

    @classmethod
    def deserialize(
        cls, data: bytes, decode_transaction: Callable[[bytes], Transaction]
    ) -> Block:
        """Decode a block; ``decode_transaction`` rebuilds each transaction."""
        try:
            document = json.loads(bytes(data).decode())
            return cls(
                timestamp=int(document["timestamp"]),
                pre_block_hash=str(document["pre_block_hash"]),
                hash=str(document["hash"]),
                transactions=tuple(
                    decode_transaction(bytes.fromhex(raw))
                    for raw in document["transactions"]
                ),
                nonce=int(document["nonce"]),
                height=int(document["height"]),
                difficulty=int(document["difficulty"]),
                merkle_root=bytes.fromhex(document["merkle_root"]),
            )
        except (ValueError, KeyError, TypeError, UnicodeDecodeError) as exc:
            raise InvalidBlockError(f"Failed to deserialize block: {exc}") from exc

    @property
    def hash_bytes(self) -> bytes:
        """The block hash as encoded text bytes."""
        return self.hash.encode()

    def hash_transactions(self) -> bytes:
        """SHA-256 of all transaction ids concatenated in order."""
        return sha256_digest(b"".join(tx.id for tx in self.transactions))

    def verify_merkle_root(self) -> bool:
        """True if the stored Merkle root matches the transactions."""
        return _merkle_root_of(self.transactions) == bytes(self.merkle_root)

    def generate_merkle_proof(self, transaction_index: int) -> MerkleProof:
        """Inclusion proof for the transaction at ``transaction_index``."""
        if not 0 <= transaction_index < len(self.transactions):
            raise InvalidBlockError(
                f"Transaction index {transaction_index} out of bounds "
                f"(max: {len(self.transactions) - 1})"
            )
        return MerkleTree.from_transactions(self.transactions).generate_proof(
            transaction_index
        )

    def verify_merkle_proof(self, proof: MerkleProof) -> bool:
        """True if ``proof`` is valid and rooted at this block's Merkle root."""
        if bytes(proof.merkle_root) != bytes(self.merkle_root):
            return False
        return verify_proof(proof)

    def _validate_timestamp(self, prev_block_timestamp: int | None) -> bool:
        now = current_timestamp()
        if self.timestamp > now + MAX_FUTURE_TIME:
            logger.error(
                "Block timestamp too far in future: %d (current: %d, max future: %d)",
                self.timestamp,
                now,
                now + MAX_FUTURE_TIME,
            )
            return False
        if prev_block_timestamp is not None and self.timestamp < prev_block_timestamp:
            logger.error(
                "Block timestamp must not be before previous block: %d < %d",
                self.timestamp,
                prev_block_timestamp,
            )
            return False
        return True

    def validate_block(self, prev_block_timestamp: int | None = None) -> bool:
        """Check timestamp, limits, Merkle root, proof-of-work and coinbase placement.

        Size and count limit violations raise InvalidBlockError; other
        failures return False.
        """
        if not self._validate_timestamp(prev_block_timestamp):
            return False
        validate_block_constraints(self.transactions)
        if not self.verify_merkle_root():
            logger.error("Block merkle root validation failed")
            return False
        if not ProofOfWork.validate(self):
            logger.error("Block proof of work validation failed")
            return False
        if self.transactions and not self.transactions[0].is_coinbase():
            logger.error("First transaction in block must be coinbase")
            return False
        if any(tx.is_coinbase() for tx in self.transactions[1:]):
            logger.error("Only first transaction can be coinbase")
            return False
        return True

    @property
    def block_size(self) -> int:
        """Size of the serialized block in bytes."""
        return len(self.serialize())

    @property
    def total_fees(self) -> int:
        """Sum of fees of every transaction after the coinbase."""
        return sum(tx.fee for tx in self.transactions[1:])

    def validate_coinbase_reward(self, expected_reward: int) -> bool:
        """True if the coinbase pays exactly ``expected_reward``."""
        if not self.transactions:
            raise InvalidBlockError("Block has no transactions")
        coinbase = self.transactions[0]
        if not coinbase.is_coinbase():
            raise InvalidBlockError("First transaction is not coinbase")
        value = coinbase.output_value
        if value != expected_reward:
            logger.error(
                "Invalid coinbase reward: %d (expected: %d)", value, expected_reward
            )
            return False
        return True