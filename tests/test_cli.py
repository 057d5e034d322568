import pytest
from conftest import FakeContract, FakeFunctions, FakeWeb3, pack

from hex_stakes import cli
from hex_stakes.constants import GRACE_PERIOD
from hex_stakes.models import Account, Chain, HexState, Totals
from hex_stakes.state import get_account_data, register_account

ADDRESS = "0x00000000000000000000000000000000000000aa"
BROKEN = "0x00000000000000000000000000000000000000bb"
MALFORMED = "0x00000000000000000000000000000000000000cc"
INVALID = "0xnot-an-address"


def _fake_web3(account_sample, *, extra_stakes=None) -> FakeWeb3:
    stakes = {ADDRESS: account_sample["stakes"]}
    stakes.update(extra_stakes or {})
    functions = FakeFunctions(
        current_day=account_sample["current_day"],
        stakes=stakes,
        daily_words=[pack(*row) for row in account_sample["daily_data"]],
        balances={ADDRESS: 7 * 10**8},
    )
    return FakeWeb3(FakeContract(functions))


def test_parse_args_defaults():
    args = cli.parse_args(["--address", ADDRESS])
    assert args.address == [ADDRESS]
    assert args.favorite == []
    assert args.chain is None
    assert args.rpc_url is None
    assert args.grace_period == GRACE_PERIOD
    assert args.price is False
    assert args.no_cache is False


def test_parse_args_repeatable():
    args = cli.parse_args(
        ["--address", ADDRESS, "--address", BROKEN, "--chain", "pulsechain", "--favorite", ADDRESS, "--no-cache"]
    )
    assert args.address == [ADDRESS, BROKEN]
    assert args.chain == ["pulsechain"]
    assert args.favorite == [ADDRESS]
    assert args.no_cache is True


def test_address_is_required():
    with pytest.raises(SystemExit):
        cli.parse_args([])


@pytest.mark.parametrize(
    "argv",
    [
        ["--address", ADDRESS, "--chain", "solana"],
        ["--address", ADDRESS, "--rpc-url", "http://localhost:8545"],
        ["--address", ADDRESS, "--chain", "ethereum", "--grace-period", "-1"],
    ],
)
def test_main_rejects_bad_configuration(argv, capsys):
    assert cli.main(argv) == 2
    assert "Error:" in capsys.readouterr().err


def test_refresh_chain_end_to_end(account_sample):
    w3 = _fake_web3(account_sample, extra_stakes={BROKEN: [RuntimeError("execution reverted")]})
    state = HexState()
    for address in (ADDRESS, BROKEN):
        state = register_account(state, Account(address=address, chain=Chain.ETHEREUM))

    state, refreshed = cli.refresh_chain(state, w3, Chain.ETHEREUM, grace_period=14, use_cache=False)

    assert refreshed == 1
    assert state.current_day == {Chain.ETHEREUM: 40}
    good = get_account_data(state, (ADDRESS, Chain.ETHEREUM))
    assert [s.stake_id for s in good.stakes] == account_sample["expected_order"]
    assert good.total == Totals(**account_sample["expected_totals"])
    assert good.liquid_balance_hearts == 7 * 10**8
    assert good.is_loading is False

    broken = get_account_data(state, (BROKEN, Chain.ETHEREUM))
    assert broken.stakes == ()
    assert broken.is_loading is False


def test_refresh_chain_reports_bad_accounts_and_keeps_going(account_sample, capsys):
    w3 = _fake_web3(account_sample, extra_stakes={MALFORMED: [(1, 2, 3)]})
    state = HexState()
    for address in (INVALID, ADDRESS, MALFORMED):
        state = register_account(state, Account(address=address, chain=Chain.ETHEREUM))

    state, refreshed = cli.refresh_chain(state, w3, Chain.ETHEREUM, grace_period=14, use_cache=False)

    assert refreshed == 1
    good = get_account_data(state, (ADDRESS, Chain.ETHEREUM))
    assert good.total == Totals(**account_sample["expected_totals"])
    for address in (INVALID, MALFORMED):
        bad = get_account_data(state, (address, Chain.ETHEREUM))
        assert bad.stakes == ()
        assert bad.is_loading is False

    err = capsys.readouterr().err
    assert "Invalid address '0xnot-an-address'" in err
    assert "expected 7 fields" in err


def test_main_reports_invalid_address_and_prints_the_rest(account_sample, monkeypatch, capsys):
    w3 = _fake_web3(account_sample)
    monkeypatch.setattr(cli, "connect", lambda web3_cls, chain, rpc_url: w3)

    code = cli.main(["--address", INVALID, "--address", ADDRESS, "--chain", "ethereum", "--no-cache"])

    assert code == 0
    captured = capsys.readouterr()
    assert "Invalid address" in captured.err
    assert "Stake #7" in captured.out


def test_main_prints_reports(account_sample, monkeypatch, capsys):
    w3 = _fake_web3(account_sample)
    monkeypatch.setattr(cli, "connect", lambda web3_cls, chain, rpc_url: w3)

    code = cli.main(["--address", ADDRESS, "--chain", "ethereum", "--favorite", ADDRESS, "--no-cache"])

    assert code == 0
    out = capsys.readouterr().out
    assert out.index("Stake #5") < out.index("Stake #7") < out.index("Stake #3")
    assert "Account totals" in out
    assert "Favourites (1 accounts)" in out
    assert "7 HEX" in out


def test_main_fails_without_any_endpoint(monkeypatch, capsys):
    monkeypatch.setattr(cli, "connect", lambda web3_cls, chain, rpc_url: None)
    assert cli.main(["--address", ADDRESS]) == 1
    assert "No stake data could be fetched." in capsys.readouterr().err


def test_fetch_price_without_api_key(monkeypatch, capsys):
    monkeypatch.delenv("BITQUERY_API_KEY", raising=False)
    assert cli.fetch_price() is None
    assert "BITQUERY_API_KEY" in capsys.readouterr().err
