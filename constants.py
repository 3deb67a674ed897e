# --- Constants ---

# Path manipulation utilities for resolving the bundled ABI directory
from pathlib import Path

# List of contract names whose ABIs are needed to talk to factories,
# pairs/pools and tokens. Each name matches a JSON file in the ABI directory.
DEPENDENCY_CONTRACT_NAMES = [
    "ERC20",
    "UniswapV2Factory",
    "UniswapV2Pair",
    "AerodromeFactory",
    "AerodromePool",
]

# Directory path indicating where the contract ABIs
# (Application Binary Interfaces) can be found.
# ABIs define how to call functions in a smart contract.
DEPENDENCY_CONTRACTS_PATH = Path(__file__).resolve().parent / "abi"

# Directory path for storing persistent data.
# Only immutable on-chain history (pair creation logs) is cached here.
DATA_PATH = "data"

# EVM addresses are 20 bytes; a factory answers with this address
# when no pair/pool exists for the requested tokens.
ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"

# Values substituted when a token does not answer the standard
# ERC20 metadata calls (symbol, name, decimals).
UNKNOWN_SYMBOL = "UNKNOWN"
UNKNOWN_NAME = "Unknown Token"
DEFAULT_DECIMALS = 18

# Factory flavours. "v2" factories expose getPair(tokenA, tokenB),
# "aerodrome" factories expose getPool(tokenA, tokenB, stable).
DEX_KIND_V2 = "v2"
DEX_KIND_AERODROME = "aerodrome"

# Pool variants queried on Aerodrome-style factories, in query order.
AERODROME_VARIANTS = {"volatile": False, "stable": True}

# Network registry.
# - chain_id: EIP-155 chain id
# - rpc_env: environment variable holding the preferred RPC URL
# - public_rpcs: fallback endpoints tried in order when rpc_env is unset or down
# - native_symbol / wrapped_native: the counter-asset prices are quoted in
# - dexes: factories to query, in priority order
# - watchlist: tokens checked by `check` when no token is given
NETWORKS = {
    "ethereum": {
        "chain_id": 1,
        "rpc_env": "ETH_MAINNET_RPC_URL",
        "public_rpcs": ["https://eth.llamarpc.com"],
        "native_symbol": "ETH",
        "wrapped_native": "0xC02aaA39b223FE8D0A0e5C4F27eAD9083C756Cc2",
        "dexes": [
            {
                "name": "Uniswap V2",
                "kind": DEX_KIND_V2,
                "factory": "0x5C69bEe701ef814a2B6a3EDD4B1652CB9cc5aA6f",
            },
        ],
        "watchlist": {
            "APES": "0x09675e24CA1EB06023451AC8088EcA1040F47585",
            "ALVA": "0x8e729198d1C59B82bd6bBa579310C40d740A11C2",
            "BERRY": "0xCb76314C2540199f4B844D4ebbC7998C604880cA",
            "SEN": "0x421b05cf5ce28Cb7347E73e2278E84472F0E4a88",
            "CTRL": "0xb28a3778e1A78a8c327693516ed4F5B11db41306",
            "GURU": "0xaA7D24c3E14491aBaC746a98751A4883E9b70843",
            "CHAT": "0xBb3D7F42C58Abd83616Ad7C8C72473Ee46df2678",
            "GPU": "0x1258D60B224c0C5cD888D37bbF31aa5FCFb7e870",
            "RAI": "0xc575BD129848Ce06A460A19466c30E1D0328F52C",
            "OCEAN": "0x967da4048cd07ab37855c090aaf366e4ce1b9f48",
            "PALM": "0xf1df7305E4BAB3885caB5B1e4dFC338452a67891",
            "M87": "0x80122c6a83C8202Ea365233363d3f4837D13e888",
        },
    },
    "sepolia": {
        "chain_id": 11155111,
        "rpc_env": "SEPOLIA_RPC_URL",
        "public_rpcs": ["https://ethereum-sepolia-rpc.publicnode.com"],
        "native_symbol": "ETH",
        "wrapped_native": "0xfFf9976782d46CC05630D1f6eBAb18b2324d6B14",
        "dexes": [
            {
                "name": "Uniswap V2",
                "kind": DEX_KIND_V2,
                "factory": "0xF62c03E08ada871A0bEb309762E260a7a6a880E6",
            },
        ],
        "watchlist": {
            "RDX": "0x8F4E4345a81B02303cA7ccC8400c4cB8f2969fB5",
        },
    },
    "base": {
        "chain_id": 8453,
        "rpc_env": "BASE_MAINNET_RPC_URL",
        "public_rpcs": ["https://mainnet.base.org"],
        "native_symbol": "ETH",
        "wrapped_native": "0x4200000000000000000000000000000000000006",
        "dexes": [
            {
                "name": "Aerodrome",
                "kind": DEX_KIND_AERODROME,
                "factory": "0x420DD381b31aEf6683db6B902084cB0FFECe40Da",
            },
            {
                "name": "BaseSwap",
                "kind": DEX_KIND_V2,
                "factory": "0xFDa619b6d20975be80A10332cD39b9a4b0FAa8BB",
            },
        ],
        "watchlist": {
            "VIRTUAL": "0x0b3e328455c4059EEb9e3f84b5543F74E24e7E1b",
            "BRETT": "0x532f27101965dd16442E59d40670FaF5eBB142E4",
            "TOSHI": "0xac1bd2486aaf3b5c0fc3fd868558b082a531b2b4",
            "AERO": "0x940181a94A35A4569E4529A3CDfB74e38FD98631",
            "WELL": "0xA88594D404727625A9437C3f886C7643872296AE",
            "MIGGLES": "0xB1a03EdA10342529bBF8EB700a06C60441fEf25d",
            "KAITO": "0x98d0baa52b2d063e780de12f615f963fe8537553",
        },
    },
    "base-sepolia": {
        "chain_id": 84532,
        "rpc_env": "BASE_SEPOLIA_RPC_URL",
        "public_rpcs": [
            "https://sepolia.base.org",
            "https://base-sepolia-rpc.publicnode.com",
            "https://base-sepolia.blockpi.network/v1/rpc/public",
        ],
        "native_symbol": "ETH",
        "wrapped_native": "0x4200000000000000000000000000000000000006",
        "dexes": [
            {
                "name": "Uniswap V2",
                "kind": DEX_KIND_V2,
                "factory": "0x7Ae58f10f7849cA6F5fB71b7f45CB416c9204b1e",
            },
        ],
        "watchlist": {
            "MAK": "0xFccCb96dD3E2A7349EF824D4431568dBf52015D7",
            "tDai": "0x8fd15157bc69c4a6d7994aa8876b046167e24c96",
            "Doge": "0x1968F94F0477dd12E49012688F6602DF71907c1A",
            "ACT": "0x412048443c4E4C0D98b8728Ef613aF955cD77e11",
        },
    },
}

# Network used when --network is not given.
DEFAULT_NETWORK = "base-sepolia"

# Token inspected by `token` and `scan` when neither an argument
# nor the TOKEN_ADDRESS environment variable is provided.
DEFAULT_TOKEN_ADDRESS = "0xFccCb96dD3E2A7349EF824D4431568dBf52015D7"

# Number of historical blocks searched for PairCreated events.
DEFAULT_SCAN_BLOCKS = 100_000

# Block span of each eth_getLogs request made by the scan command.
DEFAULT_SCAN_CHUNK_SIZE = 10_000

# Block span used by the paginator when a caller does not pick one.
DEFAULT_CHUNK_SIZE = 500

# A pair counts as liquid when either formatted reserve exceeds this amount.
DEFAULT_MIN_LIQUIDITY = "0.1"

# Event scans stop after collecting this many liquid pairs.
DEFAULT_MAX_LIQUID_PAIRS = 20

# Timeout in seconds for each HTTP JSON-RPC request.
DEFAULT_RPC_TIMEOUT = 30

# Default color for the print messages in the terminal.
# This helps to provide a consistent visual feedback.
DEFAULT_PRINT_COLOR = "green"
