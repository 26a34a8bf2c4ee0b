"""
Opt-in disk cache of pair snapshots, keyed by pair address + block number.

The core resolver never caches; wrap it in CachedPairResolver to reuse a
snapshot while the chain has not advanced.
"""

import hashlib
import json
import logging
from pathlib import Path

from web3 import Web3

from .encoder import is_valid_address
from .models import PairSnapshot
from .pair_resolver import PairResolver
from .transport import ChainTransport

logger = logging.getLogger(__name__)

CACHE_DIR = Path("data")


def _cache_key(params: dict) -> str:
    """Generate a deterministic filename from the key params."""
    param_str = json.dumps(params, sort_keys=True, default=str)
    h = hashlib.md5(param_str.encode()).hexdigest()[:8]
    return f"pair_snapshot_{h}.json"


def _params(pair_address: str, block_number: int) -> dict:
    return {"pair": Web3.to_checksum_address(pair_address), "block": block_number}


class SnapshotCache:
    def __init__(self, cache_dir: Path | str = CACHE_DIR):
        self.cache_dir = Path(cache_dir)

    def load(self, pair_address: str, block_number: int) -> PairSnapshot | None:
        """Load a cached snapshot if it exists and its key matches. None on miss."""
        params = _params(pair_address, block_number)
        path = self.cache_dir / _cache_key(params)
        if not path.exists():
            return None
        try:
            with open(path) as f:
                cached = json.load(f)
            # Verify params match
            if cached.get("_params") != params:
                return None
            snapshot = PairSnapshot.from_dict(cached["data"])
        except (ValueError, KeyError, TypeError, AttributeError):
            logger.warning("Unreadable cache file %s, treating as miss", path.name, exc_info=True)
            return None
        logger.info("Cache hit: %s", path.name)
        return snapshot

    def save(self, snapshot: PairSnapshot) -> None:
        if snapshot.block_number is None:
            raise ValueError("cannot cache a snapshot without a block number")
        params = _params(snapshot.pair_address, snapshot.block_number)
        self.cache_dir.mkdir(parents=True, exist_ok=True)
        path = self.cache_dir / _cache_key(params)
        with open(path, "w") as f:
            json.dump({"_params": params, "data": snapshot.to_dict()}, f)
        logger.info("Cached: %s", path.name)


class CachedPairResolver:
    """
    Resolver wrapper that checks the cache for (pair, latest block) first.

    On a miss the snapshot is stored under the block the aggregate call
    actually executed at, which may be newer than the block checked.
    """

    def __init__(self, resolver: PairResolver, transport: ChainTransport, cache: SnapshotCache):
        self.resolver = resolver
        self.transport = transport
        self.cache = cache

    async def resolve(self, pair_address: str | None = None) -> PairSnapshot:
        resolution = self.resolver.resolution(pair_address)
        if is_valid_address(resolution.pair_address):
            block_number = await self.transport.block_number()
            cached = self.cache.load(resolution.pair_address, block_number)
            if cached is not None:
                return cached

        snapshot = await resolution.run()
        self.cache.save(snapshot)
        return snapshot
