import pytest

from architect_chain.cli import FeeModeArg, FeePriorityArg, build_parser, parse_args


@pytest.mark.parametrize(
    "text, expected",
    [
        ("low", FeePriorityArg.LOW),
        ("NORMAL", FeePriorityArg.NORMAL),
        ("High", FeePriorityArg.HIGH),
        ("urgent", FeePriorityArg.URGENT),
    ],
)
def test_priority_parse_ignores_case(text, expected):
    assert FeePriorityArg.parse(text) is expected


@pytest.mark.parametrize("priority", list(FeePriorityArg))
def test_priority_display_round_trip(priority):
    assert FeePriorityArg.parse(str(priority)) is priority


@pytest.mark.parametrize(
    "text, expected",
    [("LOW", "low"), ("Normal", "normal"), ("HIGH", "high"), ("Urgent", "urgent")],
)
def test_priority_display_values(text, expected):
    assert str(FeePriorityArg.parse(text)) == expected


def test_priority_parse_rejects_unknown():
    with pytest.raises(ValueError, match="Invalid priority: bogus"):
        FeePriorityArg.parse("bogus")


def test_fee_mode_dynamic():
    mode = FeeModeArg.parse("DYNAMIC")
    assert mode.is_dynamic()
    assert mode.amount is None


def test_fee_mode_fixed_amount():
    mode = FeeModeArg.parse("5")
    assert not mode.is_dynamic()
    assert mode.amount == 5


@pytest.mark.parametrize("text", ["-1", "abc", "1.5", "", " 3"])
def test_fee_mode_rejects_invalid(text):
    with pytest.raises(ValueError, match="Invalid fee mode"):
        FeeModeArg.parse(text)


def test_fee_mode_rejects_amount_beyond_u64():
    with pytest.raises(ValueError):
        FeeModeArg.parse(str(2**64))


def test_send_command():
    args = parse_args(["send", "alice", "bob", "500000000", "1", "--priority", "high"])
    assert args.command == "send"
    assert args.from_address == "alice"
    assert args.to_address == "bob"
    assert args.amount == 500000000
    assert args.mine == 1
    assert args.priority is FeePriorityArg.HIGH


def test_send_without_priority():
    args = parse_args(["send", "alice", "bob", "10", "0"])
    assert args.priority is None


def test_send_rejects_negative_amount():
    with pytest.raises(SystemExit):
        parse_args(["send", "alice", "bob", "-10", "0"])


def test_createblockchain_takes_address():
    args = parse_args(["createblockchain", "genesis-addr"])
    assert args.command == "createblockchain"
    assert args.address == "genesis-addr"


def test_startnode_miner_optional():
    assert parse_args(["startnode"]).miner is None
    assert parse_args(["startnode", "miner-addr"]).miner == "miner-addr"


def test_estimatefee_parses_priority():
    args = parse_args(["estimatefee", "Low"])
    assert args.priority is FeePriorityArg.LOW


def test_estimatefee_rejects_bad_priority():
    with pytest.raises(SystemExit):
        parse_args(["estimatefee", "sometimes"])


def test_setfeemode_values():
    assert parse_args(["setfeemode", "dynamic"]).mode.is_dynamic()
    assert parse_args(["setfeemode", "5"]).mode == FeeModeArg(5)


@pytest.mark.parametrize(
    "command",
    ["createwallet", "listaddresses", "printchain", "reindexutxo", "feestatus"],
)
def test_commands_without_arguments(command):
    assert build_parser().parse_args([command]).command == command


def test_command_is_required():
    with pytest.raises(SystemExit):
        parse_args([])


def test_unknown_command_rejected():
    with pytest.raises(SystemExit):
        parse_args(["mineforever"])