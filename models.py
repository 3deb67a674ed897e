"""
Data types shared by the chain client, the discovery engine and the CLI.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Optional

from constants import AERODROME_VARIANTS, DEX_KIND_AERODROME, DEX_KIND_V2


@dataclass(frozen=True)
class DexSpec:
    """
    A DEX factory and the way it is queried.

    "v2" factories answer getPair(tokenA, tokenB) and emit PairCreated,
    "aerodrome" factories answer getPool(tokenA, tokenB, stable) and emit PoolCreated.
    """

    name: str
    kind: str
    factory: str

    def __post_init__(self):
        if self.kind not in (DEX_KIND_V2, DEX_KIND_AERODROME):
            raise ValueError(f"Unsupported DEX kind: {self.kind}")

    @property
    def factory_abi(self) -> str:
        return "AerodromeFactory" if self.kind == DEX_KIND_AERODROME else "UniswapV2Factory"

    @property
    def pool_abi(self) -> str:
        return "AerodromePool" if self.kind == DEX_KIND_AERODROME else "UniswapV2Pair"

    @property
    def creation_event(self) -> str:
        return "PoolCreated" if self.kind == DEX_KIND_AERODROME else "PairCreated"

    @property
    def pair_arg(self) -> str:
        return "pool" if self.kind == DEX_KIND_AERODROME else "pair"

    @property
    def variants(self) -> dict[Optional[str], Optional[bool]]:
        if self.kind == DEX_KIND_AERODROME:
            return dict(AERODROME_VARIANTS)
        return {None: None}

    @classmethod
    def from_dict(cls, data: dict) -> "DexSpec":
        return cls(name=data["name"], kind=data["kind"], factory=data["factory"])


@dataclass(frozen=True)
class TokenInfo:
    """
    ERC20 metadata of a token.

    Attributes:
        address: Checksum address of the token contract
        symbol: Ticker returned by symbol()
        name: Name returned by name()
        decimals: Number of decimals returned by decimals()
    """

    address: str
    symbol: str
    name: str
    decimals: int


@dataclass(frozen=True)
class TokenLookup:
    """
    Result of a metadata read.

    fallback_used is True when the token did not answer the standard calls
    and `info` holds substituted defaults instead of on-chain values.
    """

    info: TokenInfo
    fallback_used: bool = False
    error: Optional[str] = None


@dataclass(frozen=True)
class PairRecord:
    """
    Raw state of a pair/pool contract.

    token0/token1 ordering is the one reported by the contract itself,
    reserves are integers in each token's smallest unit.
    """

    pair_address: str
    token0: str
    token1: str
    reserve0: int
    reserve1: int
    block_timestamp_last: int = 0


@dataclass(frozen=True)
class PairCreatedEvent:
    """Decoded factory log announcing a new pair/pool."""

    token0: str
    token1: str
    pair: str
    block_number: int
    log_index: int = 0


@dataclass
class EventScan:
    """
    Events collected over a block range.

    failed_ranges lists the inclusive (from_block, to_block) chunks that
    could not be fetched, so an incomplete scan is never mistaken for a full one.
    """

    events: list = field(default_factory=list)
    failed_ranges: list[tuple[int, int]] = field(default_factory=list)

    @property
    def complete(self) -> bool:
        return not self.failed_ranges


@dataclass(frozen=True)
class LiquidityEntry:
    """
    A pair seen from the point of view of the target token.

    Attributes:
        pair: Raw pair state
        target: Metadata lookup of the token being investigated
        counter: Metadata lookup of the other token in the pair
        target_reserve: Target reserve formatted with the target's decimals
        counter_reserve: Counter reserve formatted with the counter's decimals
        price: Counter units per one target unit, None when unavailable
        dex: Name of the DEX whose factory returned the pair
        variant: Pool variant ("volatile"/"stable") on Aerodrome-style factories
    """

    pair: PairRecord
    target: TokenLookup
    counter: TokenLookup
    target_reserve: Decimal
    counter_reserve: Decimal
    price: Optional[Decimal]
    dex: str = ""
    variant: Optional[str] = None

    def is_liquid(self, min_liquidity: Decimal) -> bool:
        return self.target_reserve > min_liquidity or self.counter_reserve > min_liquidity


@dataclass
class DiscoveryReport:
    """
    Everything one discovery run found for a target token.

    Attributes:
        target: Metadata lookup of the target token
        entries: Pairs found, sorted for display
        missing: (dex, counter address, variant) combinations with no pair
        failed_lookups: (dex, counter address, variant) combinations whose factory
            call failed, so whether a pair exists is unknown
        failed_pairs: Pair addresses whose state could not be read
        failed_ranges: Block ranges the event scan could not fetch
    """

    target: TokenLookup
    entries: list[LiquidityEntry] = field(default_factory=list)
    missing: list[tuple[str, str, Optional[str]]] = field(default_factory=list)
    failed_lookups: list[tuple[str, str, Optional[str]]] = field(default_factory=list)
    failed_pairs: list[str] = field(default_factory=list)
    failed_ranges: list[tuple[int, int]] = field(default_factory=list)

    @property
    def has_pairs(self) -> bool:
        return bool(self.entries)

    @property
    def inconclusive(self) -> bool:
        """No pair found, but some lookups or reads failed along the way."""
        return not self.entries and bool(
            self.failed_lookups or self.failed_pairs or self.failed_ranges
        )


@dataclass
class MarketReport:
    """
    Liquid pairs of one factory, independent of any target token.

    Attributes:
        entries: Pairs found, sorted for display
        failed_pairs: Pair addresses whose state could not be read
        failed_ranges: Block ranges the event scan could not fetch
    """

    entries: list[LiquidityEntry] = field(default_factory=list)
    failed_pairs: list[str] = field(default_factory=list)
    failed_ranges: list[tuple[int, int]] = field(default_factory=list)

    def liquid_tokens(self, min_liquidity: Decimal) -> list[TokenInfo]:
        """Unique tokens of the liquid pairs, in listing order."""
        tokens, seen = [], set()
        for entry in self.entries:
            if not entry.is_liquid(min_liquidity):
                continue
            for lookup in (entry.target, entry.counter):
                key = lookup.info.address.lower()
                if key not in seen:
                    seen.add(key)
                    tokens.append(lookup.info)
        return tokens
