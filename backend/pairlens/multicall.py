"""
Multicall2 batching.

Collapses an ordered list of view calls into a single eth_call against the
aggregation contract's `aggregate` entry point.
"""

import logging
from typing import Sequence

from .config import MULTICALL_ADDRESS
from .decoder import decode
from .encoder import checksum_address, encode
from .errors import AggregationFailedError, DecodeError, TransportError
from .models import BatchResult, CallDescriptor
from .signatures import AggregatorFunction, ContractKind
from .transport import ChainTransport

logger = logging.getLogger(__name__)


def encode_aggregate(multicall_address: str, requests: Sequence[CallDescriptor]) -> CallDescriptor:
    """Wrap call descriptors into one aggregate((address,bytes)[]) call."""
    calls = [(request.target, request.encoded_input) for request in requests]
    return encode(
        multicall_address, ContractKind.AGGREGATOR, AggregatorFunction.AGGREGATE, [calls]
    )


def decode_aggregate(raw: bytes) -> BatchResult:
    """Decode aggregate return data into a BatchResult."""
    block_number, return_data = decode(raw, ContractKind.AGGREGATOR, AggregatorFunction.AGGREGATE)
    return BatchResult(block_number=block_number, return_data=tuple(return_data))


class MulticallAggregator:
    """
    Executes batches of CallDescriptors through Multicall2.

    One execute() is exactly one eth_call; nothing is retried.
    """

    def __init__(self, transport: ChainTransport, address: str = MULTICALL_ADDRESS):
        self.transport = transport
        self.address = checksum_address(address)

    async def execute(self, requests: Sequence[CallDescriptor]) -> BatchResult:
        """
        Execute calls in one aggregate request.

        Args:
            requests: Ordered call descriptors

        Returns:
            BatchResult aligned positionally with requests

        Raises:
            AggregationFailedError: transport failure, revert, malformed
                response, or a result count different from the request count
        """
        if not requests:
            return BatchResult(block_number=None, return_data=())

        payload = encode_aggregate(self.address, requests)
        logger.debug("Multicall of %d calls via %s", len(requests), self.address)

        try:
            raw = await self.transport.call(payload.target, payload.encoded_input)
        except TransportError as exc:
            raise AggregationFailedError(exc) from exc

        try:
            result = decode_aggregate(raw)
        except DecodeError as exc:
            raise AggregationFailedError(exc) from exc

        if len(result) != len(requests):
            raise AggregationFailedError(
                f"expected {len(requests)} results, got {len(result)}"
            )

        logger.debug("Multicall returned %d results at block %s", len(result), result.block_number)
        return result
