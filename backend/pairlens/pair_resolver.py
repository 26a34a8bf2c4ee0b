"""
Two-phase UniswapV2 pair resolution.

Phase 1 batches token0/token1/getReserves/totalSupply against the pair.
Phase 2 batches name/symbol/decimals against the two tokens discovered in
phase 1, so it can only start once phase 1 has been decoded. Each lookup
runs in its own PairResolution; nothing is shared or cached between them.
"""

import asyncio
import logging
from enum import Enum
from typing import NamedTuple, Protocol, Sequence

import aiohttp

from .config import DEFAULT_PAIR, LP_TOKEN_DECIMALS, Settings
from .decoder import decode
from .encoder import checksum_address, encode
from .errors import AggregationFailedError, FailureReason, InvalidAddressError, PairLookupError
from .models import BatchResult, CallDescriptor, PairSnapshot, TokenInfo
from .multicall import MulticallAggregator
from .signatures import ContractKind, PairFunction, TokenFunction
from .transport import JsonRpcTransport
from .units import to_decimal_string

logger = logging.getLogger(__name__)

# Result positions are relied upon, not looked up by name
PAIR_CALLS = (
    PairFunction.TOKEN0,
    PairFunction.TOKEN1,
    PairFunction.GET_RESERVES,
    PairFunction.TOTAL_SUPPLY,
)
TOKEN_CALLS = (TokenFunction.NAME, TokenFunction.SYMBOL, TokenFunction.DECIMALS)


class Aggregator(Protocol):
    async def execute(self, requests: Sequence[CallDescriptor]) -> BatchResult:
        ...


class ResolutionState(Enum):
    IDLE = "idle"
    FETCHING_PAIR_BATCH = "fetching_pair_batch"
    DECODING_PAIR_BATCH = "decoding_pair_batch"
    FETCHING_TOKEN_BATCH = "fetching_token_batch"
    DECODING_TOKEN_BATCH = "decoding_token_batch"
    NORMALIZING = "normalizing"
    DONE = "done"
    FAILED = "failed"


class PairState(NamedTuple):
    """Decoded phase 1 output (raw integer amounts)."""

    token0: str
    token1: str
    reserve0: int
    reserve1: int
    total_supply: int
    block_number: int | None


class TokenMetadata(NamedTuple):
    name: str
    symbol: str
    decimals: int


# ─── Phase functions ───


def build_pair_batch(pair_address: str) -> list[CallDescriptor]:
    """Phase 1 request: token0, token1, getReserves, totalSupply (in that order)."""
    return [encode(pair_address, ContractKind.PAIR, fn) for fn in PAIR_CALLS]


def _check_alignment(result: BatchResult, expected: int) -> None:
    if len(result) != expected:
        raise AggregationFailedError(f"expected {expected} results, got {len(result)}")


def decode_pair_batch(result: BatchResult) -> PairState:
    _check_alignment(result, len(PAIR_CALLS))
    (token0,) = decode(result[0], ContractKind.PAIR, PairFunction.TOKEN0)
    (token1,) = decode(result[1], ContractKind.PAIR, PairFunction.TOKEN1)
    # blockTimestampLast is not propagated
    reserve0, reserve1, _ = decode(result[2], ContractKind.PAIR, PairFunction.GET_RESERVES)
    (total_supply,) = decode(result[3], ContractKind.PAIR, PairFunction.TOTAL_SUPPLY)
    return PairState(token0, token1, reserve0, reserve1, total_supply, result.block_number)


def build_token_batch(token0: str, token1: str) -> list[CallDescriptor]:
    """Phase 2 request: name, symbol, decimals for token0, then for token1."""
    return [
        encode(token, ContractKind.TOKEN, fn)
        for token in (token0, token1)
        for fn in TOKEN_CALLS
    ]


def _decode_token(result: BatchResult, offset: int) -> TokenMetadata:
    (name,) = decode(result[offset], ContractKind.TOKEN, TokenFunction.NAME)
    (symbol,) = decode(result[offset + 1], ContractKind.TOKEN, TokenFunction.SYMBOL)
    (decimals,) = decode(result[offset + 2], ContractKind.TOKEN, TokenFunction.DECIMALS)
    return TokenMetadata(name, symbol, decimals)


def decode_token_batch(result: BatchResult) -> tuple[TokenMetadata, TokenMetadata]:
    _check_alignment(result, 2 * len(TOKEN_CALLS))
    return _decode_token(result, 0), _decode_token(result, len(TOKEN_CALLS))


def assemble_snapshot(
    pair_address: str,
    pair: PairState,
    meta0: TokenMetadata,
    meta1: TokenMetadata,
) -> PairSnapshot:
    """
    Normalize raw amounts and build the snapshot.

    totalSupply always uses LP_TOKEN_DECIMALS (18); the LP token's own
    decimals are never queried.
    """
    token0 = TokenInfo(pair.token0, meta0.name, meta0.symbol, meta0.decimals)
    token1 = TokenInfo(pair.token1, meta1.name, meta1.symbol, meta1.decimals)
    return PairSnapshot(
        pair_address=pair_address,
        token0=token0,
        token1=token1,
        reserve0=to_decimal_string(pair.reserve0, token0.decimals),
        reserve1=to_decimal_string(pair.reserve1, token1.decimals),
        total_supply=to_decimal_string(pair.total_supply, LP_TOKEN_DECIMALS),
        block_number=pair.block_number,
    )


# ─── State machine ───


class PairResolution:
    """
    State machine for a single pair lookup.

    Instances are one-shot: run() may be awaited once. `history` records
    every state entered, `failure` is set when the lookup ends in FAILED.
    """

    def __init__(self, aggregator: Aggregator, pair_address: str):
        self.aggregator = aggregator
        self.pair_address = pair_address
        self.state = ResolutionState.IDLE
        self.history = [ResolutionState.IDLE]
        self.failure: FailureReason | None = None
        self.snapshot: PairSnapshot | None = None

    def _enter(self, state: ResolutionState) -> None:
        logger.debug("Pair %s: %s -> %s", self.pair_address, self.state.value, state.value)
        self.state = state
        self.history.append(state)

    async def run(self) -> PairSnapshot:
        if self.state is not ResolutionState.IDLE:
            raise RuntimeError(f"resolution already {self.state.value}")
        try:
            self.snapshot = await self._run()
        except PairLookupError as exc:
            self.failure = FailureReason.from_error(exc)
            self._enter(ResolutionState.FAILED)
            logger.warning("Pair lookup %s failed: %s", self.pair_address, self.failure.describe())
            raise
        except asyncio.CancelledError:
            self.failure = FailureReason("cancelled")
            self._enter(ResolutionState.FAILED)
            raise
        return self.snapshot

    async def _run(self) -> PairSnapshot:
        pair_address = checksum_address(self.pair_address)

        self._enter(ResolutionState.FETCHING_PAIR_BATCH)
        pair_result = await self.aggregator.execute(build_pair_batch(pair_address))

        self._enter(ResolutionState.DECODING_PAIR_BATCH)
        pair = decode_pair_batch(pair_result)

        self._enter(ResolutionState.FETCHING_TOKEN_BATCH)
        token_result = await self.aggregator.execute(build_token_batch(pair.token0, pair.token1))

        self._enter(ResolutionState.DECODING_TOKEN_BATCH)
        meta0, meta1 = decode_token_batch(token_result)

        self._enter(ResolutionState.NORMALIZING)
        snapshot = assemble_snapshot(pair_address, pair, meta0, meta1)

        self._enter(ResolutionState.DONE)
        return snapshot


class PairResolver:
    """
    Entry point for pair lookups.

    Holds only configuration (aggregator, fallback pair); every resolve()
    runs a fresh PairResolution.
    """

    def __init__(self, aggregator: Aggregator, default_pair: str = DEFAULT_PAIR):
        self.aggregator = aggregator
        self.default_pair = default_pair

    def target_for(self, pair_address: str | None) -> str:
        """Input address, or the configured default when empty."""
        if pair_address is None:
            return self.default_pair
        if not isinstance(pair_address, str):
            raise InvalidAddressError(pair_address, "address must be a string")
        if not pair_address.strip():
            return self.default_pair
        return pair_address.strip()

    def resolution(self, pair_address: str | None = None) -> PairResolution:
        return PairResolution(self.aggregator, self.target_for(pair_address))

    async def resolve(self, pair_address: str | None = None) -> PairSnapshot:
        return await self.resolution(pair_address).run()


class LatestPairLookup:
    """
    Keeps only the most recent lookup alive.

    Starting a new lookup cancels the previous one if it is still in flight;
    its awaiter receives asyncio.CancelledError.
    """

    def __init__(self, resolver: PairResolver):
        self.resolver = resolver
        self._task: asyncio.Task | None = None

    async def lookup(self, pair_address: str | None = None) -> PairSnapshot:
        if self._task is not None and not self._task.done():
            self._task.cancel()
        task = asyncio.ensure_future(self.resolver.resolve(pair_address))
        self._task = task
        return await task


def create_resolver(
    settings: Settings,
    session: aiohttp.ClientSession | None = None,
) -> tuple[PairResolver, JsonRpcTransport]:
    """
    Wire settings into a resolver.

    Returns the transport too so the caller can close it.
    """
    transport = JsonRpcTransport(settings.rpc_url, settings.request_timeout, session=session)
    aggregator = MulticallAggregator(transport, settings.multicall_address)
    return PairResolver(aggregator, settings.default_pair), transport
