# --- Imports ---

# Standard library imports

# For logging application processes and errors
import logging

# Environment variables holding RPC URLs
import os

# System-specific parameters and functions for script exits and more
import sys

# Exact decimal arithmetic for thresholds and formatting
from decimal import Decimal

# Enumerations used as CLI choices
from enum import Enum
from typing import Optional

# Third-party libraries

# python-dotenv: loads RPC URLs and token overrides from a local .env file
from dotenv import load_dotenv

# rich: Library for enhanced command-line printing, progress tracking, and logging
from rich import print
from rich.table import Table

# typer: Library for building command-line interface (CLI) applications
import typer

# Internal or project-specific imports

# Constants for application settings and parameters
import constants

from chain import ChainClient, load_abis
from discovery import discover_by_scan, discover_direct, discover_market, scan_window
from models import DexSpec, DiscoveryReport, LiquidityEntry, MarketReport, TokenLookup
from pagination import IncompleteScanError
from pricing import format_price, format_units, liquidity_value_in_native
from utils import connect_with_fallback, log, print_colored, to_checksum

load_dotenv()

Network = Enum(
    "Network", {name.replace("-", "_"): name for name in constants.NETWORKS}, type=str
)

app = typer.Typer(
    add_completion=False,
    help="Check DEX liquidity, pairs and prices of ERC20 tokens on EVM networks.",
)


def connect(network: str, rpc: Optional[str] = None) -> ChainClient:
    """
    Connect to a network and load the contract ABIs.

    An explicit RPC URL wins; otherwise the network's environment variable is
    tried first, then the public endpoints listed in constants.NETWORKS.
    """

    settings = constants.NETWORKS[network]
    rpcs = [rpc] if rpc else [os.getenv(settings["rpc_env"]), *settings["public_rpcs"]]
    w3 = connect_with_fallback(rpcs)

    chain_id = w3.eth.chain_id
    if chain_id != settings["chain_id"]:
        log.warning(
            f"RPC reports chain id {chain_id}, expected {settings['chain_id']} for {network}"
        )

    return ChainClient(w3, load_abis())


def network_dexes(network: str, dex_name: Optional[str] = None) -> list[DexSpec]:
    """DEXes configured for a network, optionally narrowed to one by name."""
    dexes = [DexSpec.from_dict(dex) for dex in constants.NETWORKS[network]["dexes"]]
    if dex_name is None:
        return dexes
    selected = [dex for dex in dexes if dex.name.lower() == dex_name.lower()]
    if not selected:
        names = ", ".join(dex.name for dex in dexes)
        raise ValueError(f"Unknown DEX '{dex_name}' for {network}. Available: {names}")
    return selected


def describe_token(lookup: TokenLookup) -> str:
    info = lookup.info
    suffix = " (metadata unavailable, defaults assumed)" if lookup.fallback_used else ""
    return f"{info.name} ({info.symbol}), {info.decimals} decimals{suffix}"


def liquidity_table(
    entries: list[LiquidityEntry],
    network: str,
    min_liquidity: Optional[Decimal] = None,
    target_symbol: Optional[str] = None,
) -> Table:
    """
    Build the results table for a list of entries.

    With target_symbol the reserve column is named after the one target token;
    without it every row carries its own token symbol.
    """

    settings = constants.NETWORKS[network]
    token_label = target_symbol or "token"

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Rank", style="dim", width=5)
    table.add_column("DEX", style="bold")
    table.add_column("Pair", style="bold")
    table.add_column(f"{target_symbol or 'Token'} Reserve", justify="right")
    table.add_column("Counter Reserve", justify="right")
    table.add_column(f"Price (counter per {token_label})", justify="right")
    table.add_column(f"TVL ({settings['native_symbol']})", justify="right")
    table.add_column("Liquid", justify="center")
    table.add_column("Address", style="dim", width=42)

    for i, entry in enumerate(entries, 1):
        target = entry.target.info
        counter = entry.counter.info
        dex = f"{entry.dex} ({entry.variant})" if entry.variant else entry.dex
        tvl = liquidity_value_in_native(entry, settings["wrapped_native"])
        liquid = (
            entry.is_liquid(min_liquidity)
            if min_liquidity is not None
            else entry.target_reserve > 0
        )
        reserve = f"{entry.target_reserve:,f}"
        if target_symbol is None:
            reserve = f"{reserve} {target.symbol}"
        table.add_row(
            str(i),
            dex,
            f"{target.symbol}-{counter.symbol}",
            reserve,
            f"{entry.counter_reserve:,f} {counter.symbol}",
            format_price(entry.price),
            "N/A" if tvl is None else f"{tvl:,.4f}",
            "[green]yes[/green]" if liquid else "[red]no[/red]",
            entry.pair.pair_address,
        )

    return table


def print_failures(report):
    for pair in report.failed_pairs:
        print_colored(f"Could not read pair {pair}", "red")
    for start, end in report.failed_ranges:
        print_colored(f"Blocks {start}-{end} could not be scanned", "red")


def print_report(
    report: DiscoveryReport,
    network: str,
    min_liquidity: Optional[Decimal] = None,
    show_missing: bool = True,
):
    """Print a discovery report as a table, followed by what was not found."""

    target = report.target.info

    if report.inconclusive:
        print_colored(
            f"No liquidity pair confirmed for {target.symbol} ({target.address}), "
            "some lookups failed",
            "red",
        )
    elif not report.entries:
        print_colored(
            f"No liquidity pair found for {target.symbol} ({target.address})", "red"
        )
    else:
        print(liquidity_table(report.entries, network, min_liquidity, target.symbol))

    if show_missing:
        for dex_name, counter, variant in report.missing:
            kind = f"{variant} pool" if variant else "pair"
            print_colored(f"No {dex_name} {kind} with {counter}", "yellow")
    for dex_name, counter, variant in report.failed_lookups:
        kind = f"{variant} pool" if variant else "pair"
        print_colored(f"Could not query {dex_name} for the {kind} with {counter}", "red")
    print_failures(report)


def print_market(report: MarketReport, network: str, min_liquidity: Decimal):
    """Print every listed pair, then the tokens that have liquidity."""

    if not report.entries:
        print_colored("No pairs with liquidity found", "red")
    else:
        print(liquidity_table(report.entries, network, min_liquidity))

    tokens = report.liquid_tokens(min_liquidity)
    print_colored(f"\nTokens with liquidity ({len(tokens)}):")
    for info in tokens:
        print(f"{info.address}  {info.symbol}")
    print_failures(report)


@app.callback()
def common(
    ctx: typer.Context,
    network: Network = typer.Option(
        Network(constants.DEFAULT_NETWORK), "--network", "-N", help="Network to query."
    ),
    rpc: Optional[str] = typer.Option(
        None, "--rpc", help="RPC URL overriding the network's environment variable."
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
):
    if verbose:
        log.setLevel(logging.DEBUG)
    ctx.obj = {"network": network.value, "rpc": rpc}


@app.command()
def check(
    ctx: typer.Context,
    tokens: Optional[list[str]] = typer.Argument(
        None, help="Token addresses. Defaults to the network's watchlist."
    ),
    dex: Optional[str] = typer.Option(None, "--dex", help="Only query this DEX."),
    all_dexes: bool = typer.Option(
        False, "--all-dexes", help="Query every DEX instead of stopping at the first match."
    ),
):
    """Look up each token's pairs against the wrapped native token."""

    network = ctx.obj["network"]
    settings = constants.NETWORKS[network]

    try:
        client = connect(network, ctx.obj["rpc"])
        dexes = network_dexes(network, dex)
        wrapped_native = settings["wrapped_native"]

        if tokens:
            watchlist = {token: token for token in tokens}
        else:
            watchlist = settings["watchlist"]

        print_colored(f"Checking {len(watchlist)} tokens on {network}...")
        without_liquidity = []
        unchecked = []

        for label, address in watchlist.items():
            print_colored(f"\nChecking {label} ({address})...")
            try:
                report = discover_direct(
                    client,
                    dexes,
                    to_checksum(address),
                    [wrapped_native],
                    first_match_only=not all_dexes,
                    primary=wrapped_native,
                )
            except Exception as e:
                log.error(f"Error checking {label}: {e}")
                unchecked.append(label)
                continue

            print(f"Token Info: {describe_token(report.target)}")
            print_report(report, network, show_missing=False)
            if report.inconclusive:
                unchecked.append(label)
            elif not report.has_pairs:
                without_liquidity.append(label)

        if without_liquidity:
            print_colored(
                f"\nNo liquidity found for: {', '.join(without_liquidity)}", "yellow"
            )
        if unchecked:
            print_colored(
                f"\nCould not check (RPC errors): {', '.join(unchecked)}", "red"
            )
        print_colored(f"\nChecked {len(watchlist)} tokens.")
    except Exception as e:
        log.error(f"An error occurred: {str(e)[:1024]}")
        print_colored(
            "An unexpected error occurred. Please check the logs for more details.",
            "red",
        )
        sys.exit(1)


@app.command()
def token(
    ctx: typer.Context,
    address: str = typer.Argument(
        constants.DEFAULT_TOKEN_ADDRESS, envvar="TOKEN_ADDRESS", help="Token address."
    ),
    counter: Optional[list[str]] = typer.Option(
        None, "--counter", "-c", help="Extra counter-asset addresses besides the wrapped native token."
    ),
    dex: Optional[str] = typer.Option(None, "--dex", help="Only query this DEX."),
    holder: Optional[str] = typer.Option(
        None, "--holder", help="Also show the token balance of this address."
    ),
):
    """Show a token's metadata, supply and every pair against its counter-assets."""

    network = ctx.obj["network"]
    settings = constants.NETWORKS[network]

    try:
        client = connect(network, ctx.obj["rpc"])
        target = to_checksum(address)
        counters = [settings["wrapped_native"], *(to_checksum(c) for c in counter or [])]

        lookup = client.get_token_info(target)
        info = lookup.info
        print_colored("\nToken Information:")
        print(f"- Name: {info.name}")
        print(f"- Symbol: {info.symbol}")
        print(f"- Decimals: {info.decimals}")
        print(f"- Address: {info.address}")
        if lookup.fallback_used:
            print_colored(f"- Metadata unavailable: {lookup.error}", "yellow")
        else:
            try:
                supply = format_units(client.get_total_supply(target), info.decimals)
                print(f"- Total Supply: {supply:,f} {info.symbol}")
            except Exception as e:
                log.warning(f"Could not read total supply of {target}: {e}")

        if holder:
            balance = format_units(client.get_balance(target, holder), info.decimals)
            print(f"- Balance of {to_checksum(holder)}: {balance:,f} {info.symbol}")

        report = discover_direct(
            client,
            network_dexes(network, dex),
            target,
            counters,
            primary=settings["wrapped_native"],
        )

        print_colored("\nLiquidity Information:")
        print_report(report, network)
    except Exception as e:
        log.error(f"An error occurred: {str(e)[:1024]}")
        print_colored(
            "An unexpected error occurred. Please check the logs for more details.",
            "red",
        )
        sys.exit(1)


@app.command()
def pair(
    ctx: typer.Context,
    token0: str = typer.Argument(..., envvar="TOKEN0", help="Token priced by the pair."),
    token1: str = typer.Argument(..., envvar="TOKEN1", help="Token the price is quoted in."),
    dex: Optional[str] = typer.Option(None, "--dex", help="Only query this DEX."),
):
    """Inspect the pair of two explicit tokens."""

    network = ctx.obj["network"]

    try:
        client = connect(network, ctx.obj["rpc"])
        target, quote = to_checksum(token0), to_checksum(token1)

        print(f"Token0: {describe_token(client.get_token_info(target))}")
        print(f"Token1: {describe_token(client.get_token_info(quote))}")

        report = discover_direct(
            client, network_dexes(network, dex), target, [quote], primary=quote
        )
        print_report(report, network)
    except Exception as e:
        log.error(f"An error occurred: {str(e)[:1024]}")
        print_colored(
            "An unexpected error occurred. Please check the logs for more details.",
            "red",
        )
        sys.exit(1)


@app.command()
def scan(
    ctx: typer.Context,
    address: str = typer.Argument(
        constants.DEFAULT_TOKEN_ADDRESS, envvar="TOKEN_ADDRESS", help="Token address."
    ),
    dex: Optional[str] = typer.Option(None, "--dex", help="DEX to scan. Defaults to the first one."),
    blocks: int = typer.Option(
        constants.DEFAULT_SCAN_BLOCKS, "--blocks", "-b", help="Number of recent blocks to scan."
    ),
    to_block: Optional[int] = typer.Option(
        None, "--to-block", help="Last block of the window. Pinning it enables the event cache."
    ),
    chunk_size: int = typer.Option(
        constants.DEFAULT_SCAN_CHUNK_SIZE, "--chunk-size", help="Blocks per log request."
    ),
    min_liquidity: float = typer.Option(
        float(constants.DEFAULT_MIN_LIQUIDITY), "--min-liquidity", help="Minimum reserve of a liquid pair."
    ),
    max_liquid: int = typer.Option(
        constants.DEFAULT_MAX_LIQUID_PAIRS,
        "--max-liquid",
        "-n",
        min=1,
        help="Stop after this many liquid pairs.",
    ),
    include_all: bool = typer.Option(
        False, "--all", "-a", help="Also list pairs below the liquidity threshold."
    ),
    refresh: bool = typer.Option(False, "--refresh", "-r", help="Ignore cached events."),
    strict: bool = typer.Option(
        False, "--strict", help="Fail when some block ranges could not be scanned."
    ),
):
    """Find every pair of a token by scanning the factory's creation events."""

    network = ctx.obj["network"]
    settings = constants.NETWORKS[network]

    try:
        client = connect(network, ctx.obj["rpc"])
        target = to_checksum(address)
        factory = network_dexes(network, dex)[0]
        threshold = Decimal(str(min_liquidity))

        latest = to_block if to_block is not None else client.block_number()
        from_block, last_block = scan_window(latest, blocks)
        print_colored(
            f"Scanning {factory.name} {factory.creation_event} events from block {from_block} to {last_block}..."
        )

        report = discover_by_scan(
            client,
            factory,
            target,
            from_block,
            last_block,
            chunk_size=chunk_size,
            min_liquidity=threshold,
            max_liquid=max_liquid,
            include_illiquid=include_all,
            primary=settings["wrapped_native"],
            cache=to_block is not None,
            refresh=refresh,
        )

        print_colored(
            f"\n{len(report.entries)} liquidity pairs for {report.target.info.symbol}:"
        )
        print_report(report, network, min_liquidity=threshold)

        if strict and report.failed_ranges:
            raise IncompleteScanError(report.failed_ranges)
    except Exception as e:
        log.error(f"An error occurred: {str(e)[:1024]}")
        print_colored(
            "An unexpected error occurred. Please check the logs for more details.",
            "red",
        )
        sys.exit(1)


@app.command()
def pairs(
    ctx: typer.Context,
    dex: Optional[str] = typer.Option(None, "--dex", help="DEX to scan. Defaults to the first one."),
    blocks: int = typer.Option(
        constants.DEFAULT_SCAN_BLOCKS, "--blocks", "-b", help="Number of recent blocks to scan."
    ),
    to_block: Optional[int] = typer.Option(
        None, "--to-block", help="Last block of the window. Pinning it enables the event cache."
    ),
    chunk_size: int = typer.Option(
        constants.DEFAULT_SCAN_CHUNK_SIZE, "--chunk-size", help="Blocks per log request."
    ),
    min_liquidity: float = typer.Option(
        float(constants.DEFAULT_MIN_LIQUIDITY), "--min-liquidity", help="Minimum reserve of a liquid pair."
    ),
    max_liquid: int = typer.Option(
        constants.DEFAULT_MAX_LIQUID_PAIRS,
        "--max-liquid",
        "-n",
        min=1,
        help="Stop after this many liquid pairs.",
    ),
    include_all: bool = typer.Option(
        False, "--all", "-a", help="Also list pairs below the liquidity threshold."
    ),
    refresh: bool = typer.Option(False, "--refresh", "-r", help="Ignore cached events."),
    strict: bool = typer.Option(
        False, "--strict", help="Fail when some block ranges could not be scanned."
    ),
):
    """List liquid pairs of any token created on a factory, wrapped native pairs first."""

    network = ctx.obj["network"]
    settings = constants.NETWORKS[network]

    try:
        client = connect(network, ctx.obj["rpc"])
        factory = network_dexes(network, dex)[0]
        threshold = Decimal(str(min_liquidity))

        latest = to_block if to_block is not None else client.block_number()
        from_block, last_block = scan_window(latest, blocks)
        print_colored(
            f"Scanning {factory.name} {factory.creation_event} events from block {from_block} to {last_block}..."
        )

        report = discover_market(
            client,
            factory,
            from_block,
            last_block,
            chunk_size=chunk_size,
            min_liquidity=threshold,
            max_liquid=max_liquid,
            include_illiquid=include_all,
            primary=settings["wrapped_native"],
            cache=to_block is not None,
            refresh=refresh,
        )

        print_colored(f"\n{len(report.entries)} pairs on {factory.name}:")
        print_market(report, network, threshold)

        if strict and report.failed_ranges:
            raise IncompleteScanError(report.failed_ranges)
    except Exception as e:
        log.error(f"An error occurred: {str(e)[:1024]}")
        print_colored(
            "An unexpected error occurred. Please check the logs for more details.",
            "red",
        )
        sys.exit(1)


if __name__ == "__main__":
    app()
