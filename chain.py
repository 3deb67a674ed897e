# --- Imports ---

# Standard library imports

# For logging application processes and errors
import logging

# Third-party libraries

# web3: Python library for Ethereum blockchain interaction
import web3
from web3 import Web3

# Internal or project-specific imports

import constants
from models import DexSpec, PairCreatedEvent, PairRecord, TokenInfo, TokenLookup
from utils import get_abi_from_json, to_checksum

log = logging.getLogger("rich")


def load_abis() -> dict:
    """Load every ABI listed in constants.DEPENDENCY_CONTRACT_NAMES."""
    return {
        contract_name: get_abi_from_json(contract_name)
        for contract_name in constants.DEPENDENCY_CONTRACT_NAMES
    }


class ChainClient:
    """
    Read-only access to one EVM network.

    Wraps a Web3 instance together with the contract ABIs and offers typed
    reads for factories, pairs/pools and ERC20 tokens. Token metadata is cached
    per address for the lifetime of the client, which is one CLI run.
    """

    def __init__(self, w3: Web3, ABIs: dict):
        self.w3 = w3
        self.ABIs = ABIs
        self._token_cache: dict[str, TokenLookup] = {}

    def block_number(self) -> int:
        return self.w3.eth.block_number

    def chain_id(self) -> int:
        return self.w3.eth.chain_id

    def get_transaction_receipt(self, tx_hash) -> web3.types.TxReceipt:
        return self.w3.eth.get_transaction_receipt(tx_hash)

    def contract(self, abi_name: str, address: str):
        return self.w3.eth.contract(address=to_checksum(address), abi=self.ABIs[abi_name])

    def get_pair_address(
        self, dex: DexSpec, token_a: str, token_b: str, stable: bool = False
    ) -> str:
        """
        Ask the factory for the pair/pool of two tokens.

        Returns the zero address when the factory knows no such pair.
        Argument order does not matter: factories sort the tokens themselves.
        """

        factory = self.contract(dex.factory_abi, dex.factory)
        token_a, token_b = to_checksum(token_a), to_checksum(token_b)

        if dex.kind == constants.DEX_KIND_AERODROME:
            return factory.functions.getPool(token_a, token_b, stable).call()
        return factory.functions.getPair(token_a, token_b).call()

    def get_pair_info(self, pair: str, abi_name: str = "UniswapV2Pair") -> PairRecord:
        """
        Retrieve token ordering and reserves of a pair/pool contract.

        Raises:
        - Exception: Any errors encountered while calling the pair contract.
        """

        try:
            pair_contract = self.contract(abi_name, pair)

            token0 = pair_contract.functions.token0().call()
            token1 = pair_contract.functions.token1().call()
            reserves = pair_contract.functions.getReserves().call()

            return PairRecord(
                pair_address=to_checksum(pair),
                token0=token0,
                token1=token1,
                reserve0=int(reserves[0]),
                reserve1=int(reserves[1]),
                block_timestamp_last=int(reserves[2]) if len(reserves) > 2 else 0,
            )

        except Exception:
            log.error(f"Error retrieving pair info for pair address: {pair}")
            raise

    def get_token_info(self, token: str) -> TokenLookup:
        """
        Retrieve ERC20 metadata (name, symbol, decimals) of a token.

        Note:
        - When the token does not answer any of the three calls, all values are
          replaced by UNKNOWN_SYMBOL, UNKNOWN_NAME and DEFAULT_DECIMALS and the
          returned lookup is flagged with fallback_used.
        """

        address = to_checksum(token)
        cached = self._token_cache.get(address.lower())
        if cached is not None:
            return cached

        token_contract = self.contract("ERC20", address)

        try:
            name = token_contract.functions.name().call()
            symbol = token_contract.functions.symbol().call()
            decimals = int(token_contract.functions.decimals().call())
            lookup = TokenLookup(TokenInfo(address, symbol, name, decimals))
        except Exception as e:
            log.warning(
                f"Error retrieving metadata for token address: {address}. "
                f"Defaulting to '{constants.UNKNOWN_SYMBOL}' with {constants.DEFAULT_DECIMALS} decimals"
            )
            lookup = TokenLookup(
                TokenInfo(
                    address,
                    constants.UNKNOWN_SYMBOL,
                    constants.UNKNOWN_NAME,
                    constants.DEFAULT_DECIMALS,
                ),
                fallback_used=True,
                error=str(e),
            )

        self._token_cache[address.lower()] = lookup
        return lookup

    def get_total_supply(self, token: str) -> int:
        return self.contract("ERC20", token).functions.totalSupply().call()

    def get_balance(self, token: str, holder: str) -> int:
        return (
            self.contract("ERC20", token)
            .functions.balanceOf(to_checksum(holder))
            .call()
        )

    def get_pair_created_events(
        self, dex: DexSpec, from_block: int, to_block: int
    ) -> list[PairCreatedEvent]:
        """
        Fetch and decode the factory's pair creation logs in [from_block, to_block].

        No pagination happens here; see pagination.get_events_in_chunks.
        """

        factory = self.contract(dex.factory_abi, dex.factory)
        event = getattr(factory.events, dex.creation_event)
        logs = event.get_logs(from_block=from_block, to_block=to_block)

        return [
            PairCreatedEvent(
                token0=entry["args"]["token0"],
                token1=entry["args"]["token1"],
                pair=entry["args"][dex.pair_arg],
                block_number=entry["blockNumber"],
                log_index=entry.get("logIndex", 0),
            )
            for entry in logs
        ]
