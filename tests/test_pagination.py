"""
Unit tests for chunked event fetching.
"""

import pytest

from pagination import IncompleteScanError, get_events_in_chunks, is_range_error


class RangeLimitedProvider:
    """Serves one event per listed block and rejects requests wider than max_width."""

    def __init__(self, event_blocks, max_width):
        self.event_blocks = sorted(event_blocks)
        self.max_width = max_width
        self.requests = []

    def __call__(self, from_block, to_block):
        self.requests.append((from_block, to_block))
        if to_block - from_block + 1 > self.max_width:
            raise ValueError(
                f"eth_getLogs is limited to a {self.max_width} block range"
            )
        return [block for block in self.event_blocks if from_block <= block <= to_block]


class TestGetEventsInChunks:
    def test_single_chunk(self):
        provider = RangeLimitedProvider([3, 5], max_width=100)
        scan = get_events_in_chunks(provider, 0, 9, chunk_size=10)
        assert scan.events == [3, 5]
        assert scan.complete
        assert provider.requests == [(0, 9)]

    def test_chunks_cover_range_exactly(self):
        provider = RangeLimitedProvider([], max_width=100)
        get_events_in_chunks(provider, 10, 34, chunk_size=10)
        assert provider.requests == [(10, 19), (20, 29), (30, 34)]

    def test_halves_chunk_on_range_error(self):
        blocks = [0, 1, 99, 250, 251, 499, 500, 777, 1000]
        provider = RangeLimitedProvider(blocks, max_width=120)

        scan = get_events_in_chunks(provider, 0, 1000, chunk_size=500)

        assert scan.events == blocks
        assert scan.complete
        assert all(end - start + 1 <= 500 for start, end in provider.requests)

    def test_no_duplicates_or_omissions_with_tiny_limit(self):
        blocks = list(range(0, 64, 3))
        provider = RangeLimitedProvider(blocks, max_width=1)

        scan = get_events_in_chunks(provider, 0, 63, chunk_size=16)

        assert scan.events == blocks
        assert len(scan.events) == len(set(scan.events))

    def test_other_errors_are_recorded_and_skipped(self):
        def fetch(from_block, to_block):
            if from_block == 10:
                raise ConnectionError("connection reset by peer")
            return [from_block]

        scan = get_events_in_chunks(fetch, 0, 29, chunk_size=10)

        assert scan.events == [0, 20]
        assert scan.failed_ranges == [(10, 19)]
        assert not scan.complete

    def test_throttled_chunk_is_not_split(self):
        requests = []

        def fetch(from_block, to_block):
            requests.append((from_block, to_block))
            raise ValueError("429 Too Many Requests: rate limit exceeded")

        scan = get_events_in_chunks(fetch, 0, 999, chunk_size=1000)

        assert requests == [(0, 999)]
        assert scan.failed_ranges == [(0, 999)]

    def test_range_error_on_single_block_is_recorded(self):
        def fetch(from_block, to_block):
            raise ValueError("block range too large")

        scan = get_events_in_chunks(fetch, 5, 6, chunk_size=2)

        assert scan.events == []
        assert scan.failed_ranges == [(5, 5), (6, 6)]

    def test_empty_when_range_is_inverted(self):
        provider = RangeLimitedProvider([1], max_width=10)
        scan = get_events_in_chunks(provider, 10, 5)
        assert scan.events == []
        assert provider.requests == []

    def test_rejects_non_positive_chunk_size(self):
        with pytest.raises(ValueError):
            get_events_in_chunks(lambda a, b: [], 0, 10, chunk_size=0)


class TestRangeErrors:
    @pytest.mark.parametrize(
        "message",
        [
            "eth_getLogs block range too large",
            "query exceeds max block RANGE",
            "Log response size limit exceeded",
            "too many blocks requested",
            "query returned more than 10000 results",
        ],
    )
    def test_recognized(self, message):
        assert is_range_error(ValueError(message))

    @pytest.mark.parametrize(
        "message",
        [
            "timed out",
            "429 Too Many Requests: rate limit exceeded",
            "Your app has exceeded its compute units per second capacity",
            "rate limit exceeded for eth_getLogs range queries",
        ],
    )
    def test_unrelated(self, message):
        assert not is_range_error(ConnectionError(message))

    def test_incomplete_scan_error_lists_ranges(self):
        error = IncompleteScanError([(1, 10), (21, 30)])
        assert error.failed_ranges == [(1, 10), (21, 30)]
        assert "1-10" in str(error)
        assert "21-30" in str(error)
