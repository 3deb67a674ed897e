"""
Reserve normalization and price derivation.

Every function here is pure: raw integer reserves and decimals go in,
Decimal quantities come out.
"""

# --- Imports ---

from decimal import Decimal, localcontext
from typing import Optional

from models import LiquidityEntry, PairRecord
from utils import same_address

# Precision wide enough for uint256 values expressed with up to 78 digits.
PRECISION = 100


def format_units(raw: int, decimals: int) -> Decimal:
    """
    Convert an integer amount in a token's smallest unit to a Decimal.

    >>> format_units(5_000_000, 6)
    Decimal('5.000000')
    """

    if decimals < 0:
        raise ValueError("decimals must be non-negative")
    with localcontext() as ctx:
        ctx.prec = PRECISION
        return Decimal(int(raw)).scaleb(-decimals)


def attribute_reserves(pair: PairRecord, target: str) -> tuple[int, int]:
    """
    Return (target reserve, counter reserve) of a pair.

    The pair's own token0/token1 ordering decides which raw reserve belongs
    to the target; addresses are compared case-insensitively.

    Raises:
        ValueError: If the target is neither token0 nor token1.
    """

    if same_address(pair.token0, target):
        return pair.reserve0, pair.reserve1
    if same_address(pair.token1, target):
        return pair.reserve1, pair.reserve0
    raise ValueError(f"Token {target} is not part of pair {pair.pair_address}")


def counter_token(pair: PairRecord, target: str) -> str:
    return pair.token1 if same_address(pair.token0, target) else pair.token0


def compute_price(target_reserve: Decimal, counter_reserve: Decimal) -> Optional[Decimal]:
    """
    Price of one target unit in counter units.

    Returns None when the target reserve is zero, the price being undefined.
    """

    if target_reserve <= 0:
        return None
    with localcontext() as ctx:
        ctx.prec = PRECISION
        return counter_reserve / target_reserve


def format_price(price: Optional[Decimal], places: int = 18) -> str:
    if price is None:
        return "N/A"
    return f"{price:.{places}f}"


def liquidity_value_in_native(entry: LiquidityEntry, wrapped_native: str) -> Optional[Decimal]:
    """
    Estimated total value locked in a pair, in native units.

    Only defined when the counter token is the wrapped native token: both sides
    of a constant-product pair hold equal value, so the total is twice the
    native reserve.
    """

    if not same_address(entry.counter.info.address, wrapped_native):
        return None
    return entry.counter_reserve * 2


def liquidity_sort_key(entry: LiquidityEntry, primary: Optional[str] = None):
    """
    Ordering used for every pair listing.

    Pairs against the primary counter-asset come first when one is given,
    then deeper target reserves, then pair address to keep ties stable.
    Use with sorted(), ascending.
    """

    is_primary = primary is not None and same_address(entry.counter.info.address, primary)
    return (not is_primary, -entry.target_reserve, entry.pair.pair_address.lower())


def sort_entries(entries: list[LiquidityEntry], primary: Optional[str] = None) -> list[LiquidityEntry]:
    return sorted(entries, key=lambda entry: liquidity_sort_key(entry, primary))
