"""Print a UniswapV2 pair snapshot: python scripts/show_pair.py [PAIR_ADDRESS]"""
import asyncio
import logging
import os
import sys
sys.path.append(os.path.join(os.path.dirname(__file__), ".."))

from pairlens.config import load_settings
from pairlens.display import describe_snapshot
from pairlens.errors import FailureReason, PairLookupError
from pairlens.pair_resolver import create_resolver


async def main(pair_address: str | None) -> int:
    settings = load_settings()
    resolver, transport = create_resolver(settings)
    async with transport:
        try:
            snapshot = await resolver.resolve(pair_address)
        except PairLookupError as exc:
            print(f"Error fetching data: {FailureReason.from_error(exc).describe()}")
            return 1
    print(describe_snapshot(snapshot))
    return 0


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    sys.exit(asyncio.run(main(sys.argv[1] if len(sys.argv) > 1 else None)))
