"""
Tests for the opt-in snapshot cache.

Run: cd backend && uv run python tests/test_cache.py
"""

import asyncio
import os
import sys
import tempfile

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from chain_stub import PAIR, NeverCalledTransport, usdt_weth_chain
from pairlens.cache import CachedPairResolver, SnapshotCache
from pairlens.errors import InvalidAddressError
from pairlens.multicall import MulticallAggregator
from pairlens.pair_resolver import PairResolver


def test_hit_within_same_block() -> None:
    chain = usdt_weth_chain()
    with tempfile.TemporaryDirectory() as tmp:
        cached = CachedPairResolver(
            PairResolver(MulticallAggregator(chain), PAIR), chain, SnapshotCache(tmp)
        )
        first = asyncio.run(cached.resolve(PAIR))
        assert len(chain.eth_calls) == 2

        second = asyncio.run(cached.resolve(None))
        assert second == first
        assert len(chain.eth_calls) == 2, "Expected a cache hit"
        assert chain.block_number_calls == 2

        chain.block += 1
        third = asyncio.run(cached.resolve(PAIR))
        assert len(chain.eth_calls) == 4
        assert third.block_number == chain.block
    print("  [PASS] hit_within_same_block")


def test_load_miss_and_key_check() -> None:
    chain = usdt_weth_chain()
    with tempfile.TemporaryDirectory() as tmp:
        cache = SnapshotCache(tmp)
        assert cache.load(PAIR, chain.block) is None

        snapshot = asyncio.run(PairResolver(MulticallAggregator(chain)).resolve(PAIR))
        cache.save(snapshot)
        assert cache.load(PAIR.upper().replace("0X", "0x"), chain.block) == snapshot
        assert cache.load(PAIR, chain.block + 1) is None
    print("  [PASS] load_miss_and_key_check")


def test_corrupt_file_is_a_miss() -> None:
    """A truncated cache file is ignored and overwritten by a fresh lookup."""
    chain = usdt_weth_chain()
    with tempfile.TemporaryDirectory() as tmp:
        cache = SnapshotCache(tmp)
        resolver = PairResolver(MulticallAggregator(chain), PAIR)
        cache.save(asyncio.run(resolver.resolve(PAIR)))
        (name,) = os.listdir(tmp)
        with open(os.path.join(tmp, name), "w") as f:
            f.write('{"_params": {"pair"')

        assert cache.load(PAIR, chain.block) is None
        snapshot = asyncio.run(CachedPairResolver(resolver, chain, cache).resolve(PAIR))
        assert snapshot.token0.symbol == "USDT"
        assert len(chain.eth_calls) == 4
        assert cache.load(PAIR, chain.block) == snapshot
    print("  [PASS] corrupt_file_is_a_miss")


def test_invalid_address_skips_cache() -> None:
    with tempfile.TemporaryDirectory() as tmp:
        cached = CachedPairResolver(
            PairResolver(MulticallAggregator(NeverCalledTransport())),
            NeverCalledTransport(),
            SnapshotCache(tmp),
        )
        try:
            asyncio.run(cached.resolve("0x123"))
        except InvalidAddressError:
            pass
        else:
            raise AssertionError("Expected InvalidAddressError")
        assert os.listdir(tmp) == []
    print("  [PASS] invalid_address_skips_cache")


if __name__ == "__main__":
    print("=== test_cache.py ===")
    test_hit_within_same_block()
    test_load_miss_and_key_check()
    test_corrupt_file_is_a_miss()
    test_invalid_address_skips_cache()
