# architect_chain

The core of a small proof-of-work blockchain: blocks, Merkle trees, proof of
work, difficulty adjustment, and a fee system that runs in either fixed or
dynamic mode. It needs nothing outside the Python standard library.

Amounts are counted in satoshis. One coin is 100,000,000 satoshis.

## Modules

- `architect_chain.monetary` provides the units, limits and conversions:
  - `coins_to_satoshis`, `satoshis_to_coins` and `format_satoshis`
  - `is_above_dust_threshold` and `is_valid_fee`
  - constants such as `INITIAL_BLOCK_REWARD` (50 coins) and `DUST_THRESHOLD`
- `architect_chain.merkle` provides Merkle trees built with double SHA-256:
  - `MerkleTree`, with `from_hashes`, `from_transactions`, `root_hash`,
    `leaf_count`, `is_empty` and `generate_proof`
  - `calculate_merkle_root`, `verify_proof`, `verify_transactions`,
    `hash_pair` and `sha256_digest`

  When a level has an odd number of nodes, the last one is paired with
  itself. A single leaf is also paired with itself.
- `architect_chain.proof_of_work` provides `ProofOfWork`. It searches for a
  nonce whose SHA-256 hash is below `2 ** (256 - difficulty)`, and
  `ProofOfWork.validate(block)` checks the nonce a block stores. `run()`
  prints its progress to standard output.
- `architect_chain.difficulty` decides the difficulty of each block:
  - `calculate_next_difficulty` retargets every 10 blocks against a block
    time of 2 minutes, and keeps the result within 1 to 12.
  - Helpers: `calculate_time_span`, `adjust_difficulty` and
    `validate_difficulty`.
- `architect_chain.block` provides `Block`:
  - `Block.mine` and `Block.genesis` build blocks.
  - `serialize` and `deserialize` convert a block to and from bytes.
  - The Merkle root and Merkle proofs can be checked against the block.
  - `validate_block` checks the timestamp, the size and count limits, the
    Merkle root, the proof of work and where the coinbase sits.
  - `validate_coinbase_reward` checks the coinbase reward, and `total_fees`
    and `block_size` report the fees and the size of the block.
- Fees are spread over four modules:
  - `architect_chain.fixed_fee` has `FixedFeeCalculator`, which charges one
    fixed amount per transaction.
  - `architect_chain.dynamic_fee` has `FeePriority`, `DynamicFeeConfig`,
    `DynamicFeeCalculator` and `FeeStatistics`. Here the fee depends on the
    priority and on mempool congestion, and stays between the base fee and
    the maximum fee.
  - `architect_chain.fee_calculator` has `UnifiedFeeCalculator`, which
    switches between `FixedFeeMode` and `DynamicFeeMode`. It also has the
    size-proportional helpers `legacy_fee`, `validate_fee_rate` and
    `legacy_coinbase_reward`.
  - `architect_chain.fees` holds one fee calculator for the whole process,
    reached through `initialize`, `calculate_fee`, `estimate_fee`,
    `switch_fee_mode`, `get_fee_statistics` and similar functions. Call
    `set_mempool_size_provider` to give it a callable that reports how many
    transactions are pending; until you do, it treats the mempool as empty.
- `architect_chain.settings` provides `Config`, which holds the node
  address, the mining address and the node id. `NODE_ADDRESS` and `NODE_ID`
  are read from the environment, and the node address defaults to
  `127.0.0.1:2001`. `GLOBAL_CONFIG` is a shared instance.
- `architect_chain.cli` provides `build_parser` and `parse_args`, which
  parse the node's subcommands (`createblockchain`, `send`, `estimatefee`,
  `setfeemode` and the rest), together with `FeePriorityArg` and
  `FeeModeArg`.

Errors are raised as subclasses of `architect_chain.errors.BlockchainError`:

- `InvalidBlockError`
- `TransactionError`
- `ConfigError`

## Examples

Monetary helpers:

```python
from architect_chain.monetary import coins_to_satoshis, format_satoshis, is_valid_fee

coins_to_satoshis(0.5)        # 50_000_000
format_satoshis(1_000)        # "0.00001000 coins"
is_valid_fee(10_000)          # True
```

Merkle roots and proofs:

```python
from architect_chain.merkle import MerkleTree, calculate_merkle_root, hash_pair, verify_proof

leaf = bytes([1, 2, 3, 4])
assert calculate_merkle_root([leaf]) == hash_pair(leaf, leaf)

tree = MerkleTree.from_hashes([b"a", b"b", b"c"])
proof = tree.generate_proof(2)
assert verify_proof(proof)
```

Mining a block. A block accepts any transaction object that has these
members:

- `id` (bytes)
- `fee` (int)
- `output_value` (int)
- `is_coinbase()`
- `serialize()`

```python
from dataclasses import dataclass

from architect_chain.block import Block
from architect_chain.monetary import INITIAL_BLOCK_REWARD


@dataclass(frozen=True)
class Coinbase:
    id: bytes
    output_value: int
    fee: int = 0

    def is_coinbase(self) -> bool:
        return True

    def serialize(self) -> bytes:
        return self.id


block = Block.mine("None", [Coinbase(b"\x01" * 32, INITIAL_BLOCK_REWARD)], height=0, difficulty=1)
assert block.validate_block()
assert block.validate_coinbase_reward(INITIAL_BLOCK_REWARD)
```

Fees:

```python
from architect_chain.dynamic_fee import DynamicFeeCalculator, DynamicFeeConfig, FeePriority
from architect_chain.fee_calculator import FixedFeeMode, UnifiedFeeCalculator

UnifiedFeeCalculator(FixedFeeMode(2)).calculate_fee(100)             # 2

dynamic = DynamicFeeCalculator(DynamicFeeConfig())
dynamic.calculate_fee(FeePriority.HIGH, mempool_size=5)              # 2
print(dynamic.fee_statistics(mempool_size=30))
```

Command-line parsing:

```python
from architect_chain.cli import parse_args

args = parse_args(["estimatefee", "urgent"])
args.command, str(args.priority)     # ("estimatefee", "urgent")
```

## What this package does not do

This package has no chain storage, wallets, concrete transaction type, UTXO
set or peer-to-peer networking. It does not install a command either:

- `architect_chain.cli` only parses arguments and does not carry out the
  subcommands.
- Blocks take their transactions from the caller.
- The fee system learns the mempool size only through
  `set_mempool_size_provider`.

## Running the tests

Install the `test` extra, then run pytest from the project root.