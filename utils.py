# --- Imports ---

# Standard library imports

# For reading and writing JSON files
import json

# For logging application processes and errors
import logging

# Python's built-in serialization module for storing python objects on disk
import pickle

# Decorator helper that keeps the wrapped function's name and docstring
from functools import wraps

# Path manipulation utilities for file and directory operations
from pathlib import Path

# Third-party libraries

# web3: Python library for Ethereum blockchain interaction
from web3 import LegacyWebSocketProvider, Web3

# rich: Library for enhanced command-line printing and logging
from rich import print
from rich.logging import RichHandler

# Internal or project-specific imports

# Constants for paths and default settings
from constants import (
    DATA_PATH,
    DEFAULT_PRINT_COLOR,
    DEFAULT_RPC_TIMEOUT,
    DEPENDENCY_CONTRACTS_PATH,
    ZERO_ADDRESS,
)

# --- Logging Configuration ---

# Configuring rich logger for enhanced visual feedback in the command-line interface
logging.basicConfig(
    level="INFO", format="%(message)s", datefmt="[%X]", handlers=[RichHandler()]
)
log = logging.getLogger("rich")


def connect_to_rpc_provider(rpc: str, timeout: int = DEFAULT_RPC_TIMEOUT) -> Web3:
    """
    Establishes a connection to an RPC provider and returns a Web3 instance.

    This function selects the appropriate provider (HTTP, WebSocket, or IPC)
    based on the structure of the given RPC URL:
    - HTTP: For URLs starting with 'http://' or 'https://'
    - WebSocket: For URLs starting with 'ws://' or 'wss://'
    - IPC: For URLs ending with '.ipc'

    Args:
        rpc (str): The RPC provider URL to connect to.
        timeout (int): Per-request timeout in seconds.

    Returns:
        Web3: An instance of Web3 connected to the RPC provider.

    Raises:
        ValueError: If the RPC URL format is unrecognized.
        ConnectionError: If unable to connect to the given RPC provider.
    """

    if rpc.startswith(("http://", "https://")):
        w3 = Web3(Web3.HTTPProvider(rpc, request_kwargs={"timeout": timeout}))
    elif rpc.startswith(("ws://", "wss://")):
        w3 = Web3(LegacyWebSocketProvider(rpc, websocket_timeout=timeout))
    elif rpc.endswith(".ipc"):
        w3 = Web3(Web3.IPCProvider(rpc, timeout=timeout))
    else:
        log.error(f"Invalid RPC URL format: {rpc}")
        raise ValueError("Invalid RPC URL format.")

    if not w3.is_connected():
        log.error(f"Unable to connect to RPC provider: {rpc}")
        raise ConnectionError("Unable to connect to RPC provider.")

    return w3


def connect_with_fallback(rpcs: list[str], timeout: int = DEFAULT_RPC_TIMEOUT) -> Web3:
    """
    Try each RPC URL in order and return the first Web3 instance that answers.

    Empty entries (unset environment variables) are skipped.

    Raises:
        ConnectionError: If none of the endpoints could be reached.
    """

    for rpc in rpcs:
        if not rpc:
            continue
        try:
            w3 = connect_to_rpc_provider(rpc, timeout)
        except (ValueError, ConnectionError) as e:
            log.warning(f"Failed to connect using {rpc}: {e}")
            continue
        log.info(f"Connected using {rpc}")
        return w3

    raise ConnectionError("Failed to connect to any RPC endpoint.")


def using_cache(data_filename: str, skip=None):
    """
    Decorator to manage caching and retrieval of data.

    This function checks if cached data exists and is still valid (not needing a refresh).
    If the cached data is not present or outdated, it fetches fresh data, caches it,
    and then returns it.

    The wrapped function accepts two extra keyword arguments:
    - refresh: ignore any cached copy and fetch again
    - cache_tag: suffix appended to the file name, so one function can keep
      separate caches for different networks, factories or block windows

    Args:
        data_filename (str): The filename of the data to check for in the cache.
        skip (callable, optional): Predicate on fresh data; when it returns True
            the data is returned but not written to the cache.

    Returns:
        function: A wrapped function that manages the caching behavior.
    """

    def using_cache_with_path(get_data):
        @wraps(get_data)
        def get_data_with_cache(*args, refresh=False, cache_tag=None, **kwargs):
            name = data_filename if cache_tag is None else f"{data_filename}_{cache_tag}"
            # Create the full path to the cache file with a .pkl suffix
            path = (Path(DATA_PATH) / name).with_suffix(".pkl")

            # Check if cache file exists and if refresh is not requested
            if path.is_file() and not refresh:
                try:
                    # Try to load data from the cache
                    with path.open("rb") as f:
                        data = pickle.load(f)
                    log.info(f"Loaded data from cache: {path}")
                    return data
                except Exception as e:
                    log.error(f"Error loading data from cache: {e}")

            data = get_data(*args, **kwargs)

            if skip is not None and skip(data):
                log.info(f"Not caching incomplete data for: {path}")
                return data

            try:
                # Cache the fresh data for future use
                path.parent.mkdir(parents=True, exist_ok=True)
                with path.open("wb") as f:
                    pickle.dump(data, f, pickle.HIGHEST_PROTOCOL)
                log.info(f"Saved data to cache: {path}")
            except Exception as e:
                log.error(f"Error saving data to cache: {e}")

            return data

        return get_data_with_cache

    return using_cache_with_path


def get_abi_from_json(contract_name: str) -> list:
    """
    Retrieve the ABI (Application Binary Interface) for a given contract
    from a JSON file.

    Parameters:
    - contract_name (str): The name of the contract whose ABI is to be loaded.

    Returns:
    - list: The ABI for the given contract.

    Raises:
    - FileNotFoundError: If the ABI JSON file for the contract is not found.
    - json.JSONDecodeError: If there's an error decoding the JSON file.
    """

    # Construct the path to the ABI JSON file for the specified contract
    abi_path = (Path(DEPENDENCY_CONTRACTS_PATH) / contract_name).with_suffix(".json")

    try:
        # Load the ABI from the JSON file
        with abi_path.open("r") as f:
            abi = json.load(f)
            log.debug(f"Successfully loaded ABI for contract: {contract_name}")
            return abi

    # Handle exceptions related to missing files and JSON decoding errors
    except FileNotFoundError:
        log.error(
            f"Could not find ABI file for contract: {contract_name} at path: {abi_path}"
        )
        raise
    except json.JSONDecodeError:
        log.error(f"Error decoding JSON for contract: {contract_name}")
        raise


def same_address(a: str, b: str) -> bool:
    """Compare two addresses ignoring checksum casing."""
    return a.lower() == b.lower()


def is_zero_address(address: str) -> bool:
    return same_address(address, ZERO_ADDRESS)


def to_checksum(address: str) -> str:
    """
    Normalize an address to its checksum form.

    Raises:
        ValueError: If the value is not a 20-byte hex address.
    """

    if not Web3.is_address(address):
        raise ValueError(f"Invalid address: {address}")
    return Web3.to_checksum_address(address)


def print_colored(text: str, color: str = DEFAULT_PRINT_COLOR):
    """
    Print a given text with a specified color using the rich library.

    Parameters:
    - text (str): The text to be printed.
    - color (str, optional): The color in which the text should be printed. Defaults to DEFAULT_PRINT_COLOR.

    Example:
    >>> print_colored("Hello, World!", "red")
    [red]Hello, World![/red]
    """

    print(f"[{color}]{text}[/{color}]")
