# --- Imports ---

# Standard library imports

# For logging application processes and errors
import logging

# Exact decimal arithmetic for reserve thresholds
from decimal import Decimal
from typing import Callable, Optional

# Third-party libraries

# rich: progress tracking while walking candidate pairs
from rich.progress import track

# Internal or project-specific imports

import constants
from chain import ChainClient
from models import (
    DexSpec,
    DiscoveryReport,
    EventScan,
    LiquidityEntry,
    MarketReport,
    PairCreatedEvent,
)
from pagination import get_events_in_chunks
from pricing import (
    attribute_reserves,
    compute_price,
    counter_token,
    format_units,
    sort_entries,
)
from utils import is_zero_address, same_address, using_cache

log = logging.getLogger("rich")


def build_entry(
    client: ChainClient,
    dex: DexSpec,
    pair_address: str,
    target: str,
    variant: Optional[str] = None,
) -> LiquidityEntry:
    """
    Read a pair's state and express it from the target token's point of view.

    Parameters:
    - client (ChainClient): Chain access for the network the pair lives on.
    - dex (DexSpec): DEX that created the pair; decides which pool ABI is used.
    - pair_address (str): Address of the pair/pool contract.
    - target (str): Token whose liquidity is investigated.
    - variant (str, optional): Pool variant on Aerodrome-style factories.

    Returns:
    - LiquidityEntry: Reserves formatted with each token's own decimals and the
      target price in counter units.

    Raises:
    - Exception: If the pair's ordering or reserves cannot be read.
    """

    pair = client.get_pair_info(pair_address, dex.pool_abi)
    target_raw, counter_raw = attribute_reserves(pair, target)

    target_lookup = client.get_token_info(target)
    counter_lookup = client.get_token_info(counter_token(pair, target))

    target_reserve = format_units(target_raw, target_lookup.info.decimals)
    counter_reserve = format_units(counter_raw, counter_lookup.info.decimals)

    return LiquidityEntry(
        pair=pair,
        target=target_lookup,
        counter=counter_lookup,
        target_reserve=target_reserve,
        counter_reserve=counter_reserve,
        price=compute_price(target_reserve, counter_reserve),
        dex=dex.name,
        variant=variant,
    )


def lookup_pairs(
    client: ChainClient,
    dex: DexSpec,
    target: str,
    counter_assets: list[str],
    report: Optional[DiscoveryReport] = None,
) -> DiscoveryReport:
    """
    Find pairs by asking the factory directly for (target, counter[, variant]).

    A zero address answer means no pair exists for that combination; it is
    recorded in report.missing and no reserves are fetched for it.
    A factory call that raises is recorded in report.failed_lookups instead,
    since it says nothing about whether the pair exists.

    Returns:
    - DiscoveryReport: The given report (or a new one) with found entries appended.
    """

    if report is None:
        report = DiscoveryReport(target=client.get_token_info(target))

    for counter in counter_assets:
        for variant, stable in dex.variants.items():
            label = f"{dex.name} {variant} pool" if variant else f"{dex.name} pair"
            try:
                pair_address = client.get_pair_address(dex, target, counter, stable=bool(stable))
            except Exception as e:
                log.warning(f"Error looking up {label} for {target} / {counter}: {e}")
                report.failed_lookups.append((dex.name, counter, variant))
                continue

            if is_zero_address(pair_address):
                log.info(f"No {label} exists for {target} / {counter}")
                report.missing.append((dex.name, counter, variant))
                continue

            try:
                entry = build_entry(client, dex, pair_address, target, variant)
            except Exception as e:
                log.warning(f"Skipping {label} {pair_address}: {e}")
                report.failed_pairs.append(pair_address)
                continue

            log.info(f"Found {label} at {pair_address}")
            report.entries.append(entry)

    return report


@using_cache("pair_created_events", skip=lambda scan: not scan.complete)
def scan_pair_created_events(
    client: ChainClient,
    dex: DexSpec,
    from_block: int,
    to_block: int,
    chunk_size: int = constants.DEFAULT_SCAN_CHUNK_SIZE,
) -> EventScan:
    """
    Collect every pair creation event of a factory over a block window.

    Complete scans are cached on disk; the history of a finalized block range
    does not change between runs.
    """

    scan = get_events_in_chunks(
        lambda start, end: client.get_pair_created_events(dex, start, end),
        from_block,
        to_block,
        chunk_size,
    )
    log.info(
        f"Found {len(scan.events)} {dex.creation_event} events on {dex.name} "
        f"between blocks {from_block} and {to_block}"
    )
    return scan


def scan_window(latest_block: int, blocks: int) -> tuple[int, int]:
    """Inclusive window of the last `blocks` blocks, clipped at block 0."""
    return max(0, latest_block - blocks), latest_block


def fetch_creation_events(
    client: ChainClient,
    dex: DexSpec,
    from_block: int,
    to_block: int,
    chunk_size: int = constants.DEFAULT_SCAN_CHUNK_SIZE,
    cache: bool = False,
    refresh: bool = False,
) -> EventScan:
    """
    Creation events of a factory over a window, from the disk cache when asked.

    Cache files are keyed by chain id, factory and window, so the same
    factory address deployed on two chains never shares events.
    """

    if not cache:
        return scan_pair_created_events.__wrapped__(
            client, dex, from_block, to_block, chunk_size
        )

    return scan_pair_created_events(
        client,
        dex,
        from_block,
        to_block,
        chunk_size,
        refresh=refresh,
        cache_tag=f"{client.chain_id()}_{dex.factory.lower()}_{from_block}_{to_block}",
    )


def check_candidates(
    client: ChainClient,
    dex: DexSpec,
    candidates: list[PairCreatedEvent],
    target_of: Callable[[PairCreatedEvent], str],
    min_liquidity: Decimal,
    max_liquid: int,
    include_illiquid: bool,
) -> tuple[list[LiquidityEntry], list[str]]:
    """
    Read the reserves of candidate pairs until max_liquid liquid ones are found.

    Parameters:
    - target_of (Callable): Picks the token each pair is seen from.

    Returns:
    - tuple: Entries kept (unsorted) and addresses of pairs that could not be read.
    """

    if max_liquid < 1:
        raise ValueError("max_liquid must be at least 1")

    entries, failed_pairs = [], []
    liquid_count = 0

    for event in track(candidates, description="Checking liquidity of pairs"):
        try:
            entry = build_entry(client, dex, event.pair, target_of(event))
        except Exception as e:
            log.warning(f"Error checking liquidity for pair {event.pair}: {e}")
            failed_pairs.append(event.pair)
            continue

        liquid = entry.is_liquid(min_liquidity)
        if liquid:
            liquid_count += 1
        if liquid or include_illiquid:
            entries.append(entry)

        if liquid_count >= max_liquid:
            log.info(f"Reached {max_liquid} pairs with liquidity, stopping search.")
            break

    return entries, failed_pairs


def discover_by_scan(
    client: ChainClient,
    dex: DexSpec,
    target: str,
    from_block: int,
    to_block: int,
    chunk_size: int = constants.DEFAULT_SCAN_CHUNK_SIZE,
    min_liquidity: Decimal = Decimal(constants.DEFAULT_MIN_LIQUIDITY),
    max_liquid: int = constants.DEFAULT_MAX_LIQUID_PAIRS,
    include_illiquid: bool = False,
    primary: Optional[str] = None,
    cache: bool = False,
    refresh: bool = False,
) -> DiscoveryReport:
    """
    Find every pair involving the target by scanning the factory's creation events.

    Used for "any pair with token X" questions that a getPair lookup cannot
    answer. The walk over candidates stops once max_liquid liquid pairs are
    collected.

    Parameters:
    - client (ChainClient): Chain access for the network.
    - dex (DexSpec): Factory to scan.
    - target (str): Token whose pairs are searched.
    - from_block, to_block (int): Inclusive block window.
    - chunk_size (int): Blocks per eth_getLogs request.
    - min_liquidity (Decimal): A pair is liquid when either formatted reserve exceeds it.
    - max_liquid (int): Stop after this many liquid pairs.
    - include_illiquid (bool): Keep pairs under the threshold in the report.
    - primary (str, optional): Counter-asset listed first in the sorted result.
    - cache (bool): Read/write creation events from the on-disk cache. Only
      worth it for a pinned window, since the latest block moves every run.
    - refresh (bool): Ignore cached creation events and fetch them again.

    Returns:
    - DiscoveryReport: Entries sorted for display, with skipped pairs and
      unfetched block ranges.
    """

    report = DiscoveryReport(target=client.get_token_info(target))

    scan = fetch_creation_events(
        client, dex, from_block, to_block, chunk_size, cache=cache, refresh=refresh
    )
    report.failed_ranges.extend(scan.failed_ranges)
    if not scan.complete:
        log.warning(
            f"{len(scan.failed_ranges)} block ranges could not be scanned; results may be incomplete"
        )

    candidates = [
        event
        for event in scan.events
        if same_address(event.token0, target) or same_address(event.token1, target)
    ]
    log.info(f"Found {len(candidates)} pairs containing {target}")

    entries, failed_pairs = check_candidates(
        client,
        dex,
        candidates,
        lambda event: target,
        min_liquidity,
        max_liquid,
        include_illiquid,
    )
    report.failed_pairs.extend(failed_pairs)
    report.entries = sort_entries(entries, primary)
    return report


def discover_market(
    client: ChainClient,
    dex: DexSpec,
    from_block: int,
    to_block: int,
    chunk_size: int = constants.DEFAULT_SCAN_CHUNK_SIZE,
    min_liquidity: Decimal = Decimal(constants.DEFAULT_MIN_LIQUIDITY),
    max_liquid: int = constants.DEFAULT_MAX_LIQUID_PAIRS,
    include_illiquid: bool = False,
    primary: Optional[str] = None,
    cache: bool = False,
    refresh: bool = False,
) -> MarketReport:
    """
    List the liquid pairs a factory created in a window, for any token.

    Each pair is seen from the token that is not the primary counter-asset
    (token0 when neither side is), so pairs against the primary are listed
    first and priced in it.

    Returns:
    - MarketReport: Sorted entries, skipped pairs and unfetched block ranges.
    """

    scan = fetch_creation_events(
        client, dex, from_block, to_block, chunk_size, cache=cache, refresh=refresh
    )
    if not scan.complete:
        log.warning(
            f"{len(scan.failed_ranges)} block ranges could not be scanned; results may be incomplete"
        )

    def target_of(event: PairCreatedEvent) -> str:
        if primary is not None and same_address(event.token0, primary):
            return event.token1
        return event.token0

    entries, failed_pairs = check_candidates(
        client,
        dex,
        scan.events,
        target_of,
        min_liquidity,
        max_liquid,
        include_illiquid,
    )

    report = MarketReport(
        entries=sort_entries(entries, primary),
        failed_pairs=failed_pairs,
        failed_ranges=list(scan.failed_ranges),
    )
    log.info(
        f"Found {len(report.liquid_tokens(min_liquidity))} tokens with liquidity on {dex.name}"
    )
    return report


def discover_direct(
    client: ChainClient,
    dexes: list[DexSpec],
    target: str,
    counter_assets: list[str],
    min_liquidity: Decimal = Decimal(constants.DEFAULT_MIN_LIQUIDITY),
    include_illiquid: bool = True,
    first_match_only: bool = False,
    primary: Optional[str] = None,
) -> DiscoveryReport:
    """
    Look the target up against each counter-asset on several DEXes.

    Parameters:
    - client (ChainClient): Chain access for the network.
    - dexes (list[DexSpec]): Factories to ask, in priority order.
    - target (str): Token whose liquidity is investigated.
    - counter_assets (list[str]): Tokens the target is paired against.
    - min_liquidity (Decimal): Threshold used when illiquid pairs are dropped.
    - include_illiquid (bool): Keep pairs under the threshold in the report.
    - first_match_only (bool): Stop at the first DEX that has a pair, treating
      later DEXes as fallbacks.
    - primary (str, optional): Counter-asset listed first in the sorted result.

    Returns:
    - DiscoveryReport: Entries sorted for display.
    """

    report = DiscoveryReport(target=client.get_token_info(target))

    for dex in dexes:
        found_before = len(report.entries)
        lookup_pairs(client, dex, target, counter_assets, report)
        if first_match_only and len(report.entries) > found_before:
            break

    if not include_illiquid:
        report.entries = [entry for entry in report.entries if entry.is_liquid(min_liquidity)]

    report.entries = sort_entries(report.entries, primary)
    return report
