"""Command-line arguments for the blockchain node."""

from __future__ import annotations

import argparse
import re
from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum

_U64_MAX = 2**64 - 1
_UNSIGNED = re.compile(r"\+?[0-9]+")


def _parse_unsigned(text: str, limit: int = _U64_MAX) -> int:
    """Parse a non-negative integer strictly, as an unsigned machine integer."""
    if not _UNSIGNED.fullmatch(text):
        raise ValueError(f"invalid unsigned integer: {text!r}")
    value = int(text)
    if value > limit:
        raise ValueError(f"number too large: {text}")
    return value


class FeePriorityArg(Enum):
    """Transaction priority as given on the command line."""

    LOW = "low"
    NORMAL = "normal"
    HIGH = "high"
    URGENT = "urgent"

    @classmethod
    def parse(cls, text: str) -> FeePriorityArg:
        """Parse a priority name, ignoring case."""
        try:
            return cls(text.lower())
        except ValueError:
            raise ValueError(
                f"Invalid priority: {text}. Valid options: low, normal, high, urgent"
            ) from None

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class FeeModeArg:
    """Fee mode: a fixed amount, or dynamic when ``amount`` is None."""

    amount: int | None = None

    @classmethod
    def parse(cls, text: str) -> FeeModeArg:
        """Parse ``dynamic`` (any case) or a fixed non-negative amount."""
        if text.lower() == "dynamic":
            return cls()
        try:
            return cls(_parse_unsigned(text))
        except ValueError:
            raise ValueError(
                f"Invalid fee mode: {text}. Use 'dynamic' or a fixed amount (e.g., '1')"
            ) from None

    def is_dynamic(self) -> bool:
        return self.amount is None


def _argparse_type(parser_func, name: str):
    def convert(text: str):
        try:
            return parser_func(text)
        except ValueError as exc:
            raise argparse.ArgumentTypeError(str(exc)) from None

    convert.__name__ = name
    return convert


_priority_type = _argparse_type(FeePriorityArg.parse, "priority")
_fee_mode_type = _argparse_type(FeeModeArg.parse, "fee_mode")
_u64_type = _argparse_type(_parse_unsigned, "u64")


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with all subcommands."""
    parser = argparse.ArgumentParser(prog="architect-chain")
    commands = parser.add_subparsers(dest="command", required=True, metavar="COMMAND")

    create = commands.add_parser("createblockchain", help="Create a new blockchain")
    create.add_argument("address", help="The address to send genesis block reward to")

    commands.add_parser("createwallet", help="Create a new wallet")

    balance = commands.add_parser(
        "getbalance", help="Get the wallet balance of the target address"
    )
    balance.add_argument("address", help="The wallet address")

    commands.add_parser("listaddresses", help="Print local wallet addresses")

    send = commands.add_parser("send", help="Send transaction between addresses")
    send.add_argument("from_address", metavar="FROM", help="Source wallet address")
    send.add_argument("to_address", metavar="TO", help="Destination wallet address")
    send.add_argument("amount", type=_u64_type, help="Amount to send (in satoshis)")
    send.add_argument("mine", type=_u64_type, help="Mine immediately on the same node")
    send.add_argument(
        "--priority",
        type=_priority_type,
        default=None,
        help="Transaction priority (low, normal, high, urgent)",
    )

    commands.add_parser("printchain", help="Print all blocks in the blockchain")
    commands.add_parser("reindexutxo", help="Rebuild UTXO index set")

    start = commands.add_parser("startnode", help="Start a blockchain node")
    start.add_argument(
        "miner", nargs="?", default=None, help="Enable mining mode and send reward to ADDRESS"
    )

    estimate = commands.add_parser(
        "estimatefee", help="Estimate transaction fee for given priority"
    )
    estimate.add_argument(
        "priority",
        type=_priority_type,
        help="Transaction priority (low, normal, high, urgent)",
    )

    commands.add_parser("feestatus", help="Show current fee system status")

    fee_mode = commands.add_parser("setfeemode", help="Set fee calculation mode")
    fee_mode.add_argument(
        "mode",
        type=_fee_mode_type,
        help="Fee mode: 'dynamic' or fixed amount (e.g., '1')",
    )

    return parser


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments; exits with a usage error on bad input."""
    return build_parser().parse_args(argv)