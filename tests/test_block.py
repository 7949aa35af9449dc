import dataclasses
import json
import logging

import pytest

from architect_chain.block import (
    MAX_TRANSACTION_SIZE,
    MAX_TRANSACTIONS_PER_BLOCK,
    Block,
    current_timestamp,
    validate_block_constraints,
)
from architect_chain.difficulty import INITIAL_DIFFICULTY
from architect_chain.errors import InvalidBlockError
from architect_chain.merkle import calculate_merkle_root, sha256_digest
from architect_chain.monetary import INITIAL_BLOCK_REWARD
from architect_chain.proof_of_work import ProofOfWork


@dataclasses.dataclass(frozen=True)
class FakeTx:
    id: bytes
    coinbase: bool = False
    fee: int = 0
    output_value: int = 0
    padding: int = 0

    def is_coinbase(self) -> bool:
        return self.coinbase

    def serialize(self) -> bytes:
        return json.dumps(
            {
                "id": self.id.hex(),
                "coinbase": self.coinbase,
                "fee": self.fee,
                "output_value": self.output_value,
                "padding": "x" * self.padding,
            }
        ).encode()


def decode_fake(data: bytes) -> FakeTx:
    doc = json.loads(data)
    return FakeTx(
        id=bytes.fromhex(doc["id"]),
        coinbase=doc["coinbase"],
        fee=doc["fee"],
        output_value=doc["output_value"],
        padding=len(doc["padding"]),
    )


def coinbase(tag: bytes = b"cb", reward: int = INITIAL_BLOCK_REWARD) -> FakeTx:
    return FakeTx(id=sha256_digest(tag), coinbase=True, output_value=reward)


def spend(tag: bytes, fee: int = 0) -> FakeTx:
    return FakeTx(id=sha256_digest(tag), fee=fee)


def test_proof_of_work_validation():
    block = Block.mine("prev_hash", [coinbase()], 1, 1)
    assert ProofOfWork.validate(block)
    assert block.verify_merkle_root()
    assert block.height == 1
    assert block.difficulty == 1


def test_mined_hash_matches_nonce():
    block = Block.mine("prev_hash", [coinbase()], 3, 2)
    digest = sha256_digest(ProofOfWork(block).prepare_data(block.nonce))
    assert block.hash == digest.hex()
    assert len(block.hash) == 64
    assert block.hash_bytes == block.hash.encode()


def test_mine_requires_transactions():
    with pytest.raises(InvalidBlockError):
        Block.mine("prev", [], 1, 1)


def test_mine_warns_but_succeeds_on_oversized_transaction(caplog):
    big = FakeTx(id=sha256_digest(b"big"), coinbase=True, padding=MAX_TRANSACTION_SIZE)
    with caplog.at_level(logging.WARNING, logger="architect_chain.block"):
        block = Block.mine("prev", [big], 1, 1)
    assert ProofOfWork.validate(block)
    assert any("constraint" in record.message for record in caplog.records)


def test_genesis_block():
    block = Block.genesis(coinbase())
    assert block.pre_block_hash == "None"
    assert block.height == 0
    assert block.difficulty == INITIAL_DIFFICULTY
    assert ProofOfWork.validate(block)


def test_merkle_root_matches_transactions():
    txs = [coinbase(), spend(b"a"), spend(b"b")]
    block = Block.mine("prev", txs, 1, 1)
    assert block.merkle_root == calculate_merkle_root(tx.id for tx in txs)


def test_verify_merkle_root_detects_tampering():
    block = Block.mine("prev", [coinbase(), spend(b"a")], 1, 1)
    tampered = dataclasses.replace(block, transactions=(coinbase(), spend(b"z")))
    assert tampered.verify_merkle_root() is False


def test_serialize_round_trip():
    block = Block.mine("prev", [coinbase(), spend(b"a", fee=5)], 2, 1)
    restored = Block.deserialize(block.serialize(), decode_fake)
    assert restored == block


def test_deserialize_rejects_garbage():
    with pytest.raises(InvalidBlockError):
        Block.deserialize(b"not a block", decode_fake)


def test_block_size_is_serialized_length():
    block = Block.mine("prev", [coinbase()], 1, 1)
    assert block.block_size == len(block.serialize())


def test_hash_transactions_depends_on_order():
    a = Block.mine("prev", [coinbase(), spend(b"a"), spend(b"b")], 1, 1)
    b = dataclasses.replace(a, transactions=(coinbase(), spend(b"b"), spend(b"a")))
    assert len(a.hash_transactions()) == 32
    assert a.hash_transactions() != b.hash_transactions()
    assert a.hash_transactions() == a.hash_transactions()


def test_merkle_proof_round_trip():
    block = Block.mine("prev", [coinbase(), spend(b"a"), spend(b"b")], 1, 1)
    for index in range(3):
        proof = block.generate_merkle_proof(index)
        assert proof.transaction_hash == block.transactions[index].id
        assert block.verify_merkle_proof(proof) is True


def test_merkle_proof_out_of_bounds():
    block = Block.mine("prev", [coinbase()], 1, 1)
    with pytest.raises(InvalidBlockError):
        block.generate_merkle_proof(1)


def test_merkle_proof_from_other_block_rejected():
    block = Block.mine("prev", [coinbase(), spend(b"a")], 1, 1)
    other = Block.mine("prev", [coinbase(b"x"), spend(b"y")], 1, 1)
    assert block.verify_merkle_proof(other.generate_merkle_proof(0)) is False


def test_validate_block_accepts_mined_block():
    block = Block.mine("prev", [coinbase(), spend(b"a")], 1, 1)
    assert block.validate_block(None) is True
    assert block.validate_block(block.timestamp) is True


def test_validate_block_rejects_earlier_than_previous():
    block = Block.mine("prev", [coinbase()], 1, 1)
    assert block.validate_block(block.timestamp + 1) is False


def test_validate_block_rejects_future_timestamp():
    block = Block.mine("prev", [coinbase()], 1, 1)
    future = dataclasses.replace(block, timestamp=current_timestamp() + 10**9)
    assert future.validate_block(None) is False


def test_validate_block_requires_leading_coinbase():
    block = Block.mine("prev", [spend(b"a")], 1, 1)
    assert block.validate_block(None) is False


def test_validate_block_rejects_second_coinbase():
    block = Block.mine("prev", [coinbase(), coinbase(b"other")], 1, 1)
    assert block.validate_block(None) is False


def test_validate_block_rejects_bad_merkle_root():
    block = Block.mine("prev", [coinbase()], 1, 1)
    broken = dataclasses.replace(block, merkle_root=b"\x00" * 32)
    assert broken.validate_block(None) is False


def test_validate_block_constraints_limits():
    validate_block_constraints([coinbase()])
    with pytest.raises(InvalidBlockError, match="Too many transactions"):
        validate_block_constraints(
            [spend(b"t")] * (MAX_TRANSACTIONS_PER_BLOCK + 1)
        )
    with pytest.raises(InvalidBlockError, match="too large"):
        validate_block_constraints([FakeTx(id=b"x", padding=MAX_TRANSACTION_SIZE)])
    with pytest.raises(InvalidBlockError, match="Block too large"):
        validate_block_constraints(
            [FakeTx(id=b"x", padding=MAX_TRANSACTION_SIZE - 200)] * 11
        )


def test_total_fees_skip_coinbase():
    cb = FakeTx(id=sha256_digest(b"cb"), coinbase=True, fee=1000)
    block = Block.mine("prev", [cb, spend(b"a", 3), spend(b"b", 4)], 1, 1)
    assert block.total_fees == 7


def test_validate_coinbase_reward():
    block = Block.mine("prev", [coinbase(reward=INITIAL_BLOCK_REWARD + 7)], 1, 1)
    assert block.validate_coinbase_reward(INITIAL_BLOCK_REWARD + 7) is True
    assert block.validate_coinbase_reward(INITIAL_BLOCK_REWARD) is False


def test_validate_coinbase_reward_requires_coinbase():
    block = Block.mine("prev", [spend(b"a")], 1, 1)
    with pytest.raises(InvalidBlockError, match="not coinbase"):
        block.validate_coinbase_reward(INITIAL_BLOCK_REWARD)


def test_validate_coinbase_reward_requires_transactions():
    block = Block.mine("prev", [coinbase()], 1, 1)
    empty = dataclasses.replace(block, transactions=())
    with pytest.raises(InvalidBlockError, match="no transactions"):
        empty.validate_coinbase_reward(INITIAL_BLOCK_REWARD)


def test_current_timestamp_is_milliseconds():
    first = current_timestamp()
    second = current_timestamp()
    assert second >= first
    assert first > 1_000_000_000_000