"""
Shared fixtures: a ChainClient backed by a mocked Web3 instance.

Contracts are MagicMock objects keyed by lowercase address, so tests can
configure return values and later inspect which contracts were touched.
"""

import os
from unittest.mock import MagicMock

import pytest

# Wide console so report tables are not squeezed in captured output;
# must be set before rich creates its global console.
os.environ.setdefault("COLUMNS", "240")

import constants
import utils
from chain import ChainClient

TOKEN = "0x" + "1" * 40
WETH = "0x" + "2" * 40
OTHER = "0x" + "3" * 40
PAIR = "0x" + "a" * 40
PAIR_2 = "0x" + "b" * 40
FACTORY = "0x" + "f" * 40

ABIS = {name: [] for name in constants.DEPENDENCY_CONTRACT_NAMES}


def returning(value):
    """A contract function object whose call() returns value."""
    function = MagicMock()
    function.call.return_value = value
    return function


def reverting(error):
    function = MagicMock()
    function.call.side_effect = error
    return function


@pytest.fixture(autouse=True)
def isolated_cache(tmp_path, monkeypatch):
    monkeypatch.setattr(utils, "DATA_PATH", str(tmp_path / "data"))
    return tmp_path / "data"


@pytest.fixture
def contracts():
    return {}


@pytest.fixture
def w3(contracts):
    w3 = MagicMock()
    w3.eth.chain_id = 84532

    def contract(address, abi):
        return contracts.setdefault(address.lower(), MagicMock(name=address))

    w3.eth.contract.side_effect = contract
    return w3


@pytest.fixture
def client(w3):
    return ChainClient(w3, ABIS)


@pytest.fixture
def add_token(contracts):
    def _add(address, symbol, decimals, name=None, total_supply=0):
        token = contracts.setdefault(address.lower(), MagicMock(name=symbol))
        token.functions.name.return_value = returning(name or f"{symbol} Token")
        token.functions.symbol.return_value = returning(symbol)
        token.functions.decimals.return_value = returning(decimals)
        token.functions.totalSupply.return_value = returning(total_supply)
        return token

    return _add


@pytest.fixture
def add_pair(contracts):
    def _add(address, token0, token1, reserve0, reserve1, timestamp=1_700_000_000):
        pair = contracts.setdefault(address.lower(), MagicMock(name="pair"))
        pair.functions.token0.return_value = returning(token0)
        pair.functions.token1.return_value = returning(token1)
        pair.functions.getReserves.return_value = returning([reserve0, reserve1, timestamp])
        return pair

    return _add


@pytest.fixture
def add_factory(contracts):
    """
    Register a V2 factory.

    pairs maps a pair address to its (tokenA, tokenB); getPair answers in
    either argument order and returns the zero address for unknown tokens.
    events is a list of (block_number, token0, token1, pair) creation logs.
    """

    def _add(address=FACTORY, pairs=None, events=None):
        pairs = pairs or {}
        events = events or []
        factory = contracts.setdefault(address.lower(), MagicMock(name="factory"))
        index = {
            frozenset((a.lower(), b.lower())): pair for pair, (a, b) in pairs.items()
        }

        def get_pair(token_a, token_b):
            key = frozenset((token_a.lower(), token_b.lower()))
            return returning(index.get(key, constants.ZERO_ADDRESS))

        def get_logs(from_block, to_block):
            return [
                {
                    "args": {"token0": token0, "token1": token1, "pair": pair},
                    "blockNumber": block,
                    "logIndex": 0,
                }
                for block, token0, token1, pair in events
                if from_block <= block <= to_block
            ]

        factory.functions.getPair.side_effect = get_pair
        factory.events.PairCreated.get_logs.side_effect = get_logs
        return factory

    return _add
