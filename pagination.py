# --- Imports ---

# For logging application processes and errors
import logging

# Type hints for the fetch callback
from typing import Callable

# Internal or project-specific imports
from constants import DEFAULT_CHUNK_SIZE
from models import EventScan

log = logging.getLogger("rich")

# Fragments of provider error messages that mean "ask for fewer blocks".
RANGE_ERROR_MARKERS = (
    "range",
    "too many blocks",
    "query returned more than",
    "response size",
)

# Throttling errors are not about the block span; never split on them.
THROTTLING_MARKERS = (
    "rate limit",
    "too many requests",
    "compute units",
    "429",
)


class IncompleteScanError(Exception):
    """Raised when a scan that must be complete skipped some block ranges."""

    def __init__(self, failed_ranges: list[tuple[int, int]]):
        self.failed_ranges = failed_ranges
        spans = ", ".join(f"{start}-{end}" for start, end in failed_ranges)
        super().__init__(f"Could not fetch events for block ranges: {spans}")


def is_range_error(error: Exception) -> bool:
    """Check whether a provider error complains about the requested block range."""
    message = str(error).lower()
    if any(marker in message for marker in THROTTLING_MARKERS):
        return False
    return any(marker in message for marker in RANGE_ERROR_MARKERS)


def get_events_in_chunks(
    fetch: Callable[[int, int], list],
    from_block: int,
    to_block: int,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> EventScan:
    """
    Fetch events over an inclusive block range in consecutive chunks.

    Chunks are requested one after another in block order. When the provider
    rejects a chunk because the range is too wide, that same chunk is fetched
    again with half the chunk size. Other errors are logged and the chunk is
    recorded in EventScan.failed_ranges before moving on.

    Parameters:
    - fetch (Callable[[int, int], list]): Returns the events of one inclusive block range.
    - from_block (int): First block of the range.
    - to_block (int): Last block of the range.
    - chunk_size (int): Number of blocks requested at once.

    Returns:
    - EventScan: Events in block order, plus any ranges that could not be fetched.
    """

    if chunk_size < 1:
        raise ValueError("chunk_size must be at least 1")

    scan = EventScan()
    current_from_block = from_block

    while current_from_block <= to_block:
        current_to_block = min(current_from_block + chunk_size - 1, to_block)
        log.debug(f"Querying blocks {current_from_block} to {current_to_block}...")

        try:
            events = fetch(current_from_block, current_to_block)
            scan.events.extend(events)
            log.debug(
                f"Found {len(events)} events in this chunk. Total so far: {len(scan.events)}"
            )
        except Exception as e:
            if is_range_error(e) and current_to_block > current_from_block:
                width = current_to_block - current_from_block + 1
                smaller = max(1, width // 2)
                log.warning(
                    f"Block range {current_from_block}-{current_to_block} rejected, "
                    f"retrying with chunk size {smaller}"
                )
                retry = get_events_in_chunks(
                    fetch, current_from_block, current_to_block, smaller
                )
                scan.events.extend(retry.events)
                scan.failed_ranges.extend(retry.failed_ranges)
            else:
                log.warning(
                    f"Error querying blocks {current_from_block} to {current_to_block}: {e}"
                )
                scan.failed_ranges.append((current_from_block, current_to_block))

        current_from_block = current_to_block + 1

    return scan
