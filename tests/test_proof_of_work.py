import struct
from dataclasses import dataclass, replace

from architect_chain.merkle import calculate_merkle_root, sha256_digest
from architect_chain.proof_of_work import ProofOfWork


@dataclass
class _Block:
    pre_block_hash: str
    merkle_root: bytes
    timestamp: int
    height: int
    difficulty: int
    nonce: int = 0


def _block(difficulty, pre_block_hash="None", timestamp=1_700_000_000_000):
    root = calculate_merkle_root([sha256_digest(b"coinbase")])
    return _Block(pre_block_hash, root, timestamp, 0, difficulty)


def _mined(difficulty, **kwargs):
    block = _block(difficulty, **kwargs)
    nonce, _ = ProofOfWork(block).run()
    return replace(block, nonce=nonce)


def test_proof_of_work_creation():
    block = _block(4)
    pow_ = ProofOfWork(block)
    assert pow_.difficulty == 4
    assert pow_.target == 2**252


def test_proof_of_work_validation_valid_block():
    assert ProofOfWork.validate(_mined(1)) is True


def test_mined_with_other_previous_hash_is_still_valid_pow():
    assert ProofOfWork.validate(_mined(1, pre_block_hash="wrong_previous_hash")) is True


def test_proof_of_work_difficulty_scaling():
    easy = _mined(1)
    hard = _mined(2)
    assert ProofOfWork.validate(easy) is True
    assert ProofOfWork.validate(hard) is True
    assert ProofOfWork(hard).target < ProofOfWork(easy).target


def test_run_returns_first_satisfying_nonce(capsys):
    block = _block(8)
    pow_ = ProofOfWork(block)
    nonce, hash_hex = pow_.run()
    digest = sha256_digest(pow_.prepare_data(nonce))
    assert hash_hex == digest.hex()
    assert int(hash_hex, 16) < 2**248
    assert all(
        not ProofOfWork.validate(replace(block, nonce=earlier)) for earlier in range(nonce)
    )
    out = capsys.readouterr().out
    assert out.startswith("Mining the block\n")
    assert hash_hex in out


def test_tampered_block_fails_validation():
    block = _mined(8)
    changed = replace(block, timestamp=block.timestamp + 1)
    changed_ok = ProofOfWork.validate(changed)
    # Re-mining the changed block must find its own nonce that validates.
    remined = replace(changed, nonce=ProofOfWork(changed).run()[0])
    assert ProofOfWork.validate(remined) is True
    assert changed_ok == (int.from_bytes(
        sha256_digest(ProofOfWork(changed).prepare_data(changed.nonce)), "big"
    ) < 2**248)


def test_prepare_data_consistency():
    pow_ = ProofOfWork(_block(2))
    assert pow_.prepare_data(12345) == pow_.prepare_data(12345)
    assert pow_.prepare_data(12345) != pow_.prepare_data(54321)


def test_prepare_data_includes_all_fields():
    block = _block(2)
    data = ProofOfWork(block).prepare_data(12345)
    assert len(data) == len(block.pre_block_hash) + len(block.merkle_root) + 8 + 8 + 4 + 8
    assert data.startswith(b"None" + block.merkle_root)
    assert data.endswith(struct.pack(">q", 12345))
    assert data[-12:-8] == struct.pack(">I", 2)