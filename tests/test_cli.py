"""
CLI tests. The network connection is replaced by the mocked chain client.
"""

from unittest.mock import patch

import pytest
from typer.testing import CliRunner

import constants
import main
from conftest import OTHER, PAIR, TOKEN, returning

runner = CliRunner()

NETWORK = "base-sepolia"
SETTINGS = constants.NETWORKS[NETWORK]
WETH = SETTINGS["wrapped_native"]
FACTORY = SETTINGS["dexes"][0]["factory"]


@pytest.fixture
def connected(client):
    with patch.object(main, "connect", return_value=client) as connect:
        yield connect


@pytest.fixture
def market(client, add_token, add_pair, add_factory):
    add_token(TOKEN, "T", 6, total_supply=10**12)
    add_token(WETH, "WETH", 18)
    add_token(OTHER, "OTH", 18)
    add_pair(PAIR, WETH, TOKEN, 2_500_000_000_000_000_000, 5_000_000)
    return add_factory(FACTORY, pairs={PAIR: (TOKEN, WETH)}, events=[(50, TOKEN, WETH, PAIR)])


def invoke(*args):
    return runner.invoke(main.app, ["--network", NETWORK, *args])


def test_token_command_prints_price(connected, market):
    result = invoke("token", TOKEN)

    assert result.exit_code == 0, result.output
    assert "Total Supply" in result.output
    assert "0.500000000000000000" in result.output


def test_token_address_from_environment(connected, market):
    result = runner.invoke(
        main.app, ["--network", NETWORK, "token"], env={"TOKEN_ADDRESS": TOKEN}
    )

    assert result.exit_code == 0, result.output
    assert "Decimals: 6" in result.output


def test_pair_without_liquidity(connected, market):
    result = invoke("pair", OTHER, WETH)

    assert result.exit_code == 0, result.output
    assert "No liquidity pair found" in result.output


def test_check_reports_tokens_without_liquidity(connected, market):
    result = invoke("check", TOKEN, OTHER)

    assert result.exit_code == 0, result.output
    assert "No liquidity found for" in result.output


def test_scan_lists_pairs(connected, market, client):
    client.w3.eth.block_number = 1_000

    result = invoke("scan", TOKEN, "--blocks", "1000", "--chunk-size", "100")

    assert result.exit_code == 0, result.output
    assert "1 liquidity pairs" in result.output


def test_scan_strict_fails_on_missed_ranges(connected, market, client):
    client.w3.eth.block_number = 1_000
    market.events.PairCreated.get_logs.side_effect = ConnectionError("connection refused")

    result = invoke("scan", TOKEN, "--blocks", "100", "--chunk-size", "100", "--strict")

    assert result.exit_code == 1


def test_scan_rejects_non_positive_max_liquid(connected, market):
    result = invoke("scan", TOKEN, "--max-liquid", "0")

    assert result.exit_code == 2


def test_pairs_lists_tokens_with_liquidity(connected, market, client):
    client.w3.eth.block_number = 1_000

    result = invoke("pairs", "--blocks", "1000", "--chunk-size", "100")

    assert result.exit_code == 0, result.output
    assert "Tokens with liquidity (2)" in result.output
    assert TOKEN in result.output


def test_token_holder_balance(connected, market, contracts):
    contracts[TOKEN].functions.balanceOf.return_value = returning(2_500_000)

    result = invoke("token", TOKEN, "--holder", OTHER)

    assert result.exit_code == 0, result.output
    assert "Balance of" in result.output
    assert "2.500000 T" in result.output


def test_check_separates_rpc_errors_from_missing_liquidity(connected, market):
    market.functions.getPair.side_effect = ConnectionError("connection refused")

    result = invoke("check", TOKEN)

    assert result.exit_code == 0, result.output
    assert "Could not check" in result.output
    assert "No liquidity found for" not in result.output


def test_unknown_dex_exits_with_error(connected, market):
    result = invoke("token", TOKEN, "--dex", "NoSuchSwap")

    assert result.exit_code == 1


def test_connection_failure_exits_with_error():
    with patch.object(main, "connect", side_effect=ConnectionError("no endpoint")):
        result = invoke("token", TOKEN)

    assert result.exit_code == 1


def test_network_dexes_keeps_priority_order():
    dexes = main.network_dexes("base")
    assert [dex.name for dex in dexes] == ["Aerodrome", "BaseSwap"]
    assert main.network_dexes("base", "baseswap")[0].kind == constants.DEX_KIND_V2
