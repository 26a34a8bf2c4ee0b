"""
Return-data decoding against the signature registry.

The output types come from the registry for (kind, function name); nothing
is inferred from the blob itself.
"""

from enum import Enum
from typing import Any

from eth_abi.abi import decode as abi_decode
from eth_abi.abi import encode as abi_encode
from eth_abi.exceptions import DecodingError
from web3 import Web3

from .errors import DecodeError
from .signatures import ContractKind, PairFunction, lookup

WORD = 32


def _is_dynamic(abi_type: str) -> bool:
    if abi_type.endswith("[]") or abi_type in ("string", "bytes"):
        return True
    if abi_type.startswith("("):
        return any(_is_dynamic(t) for t in abi_type[1:-1].split(","))
    return False


def _normalize(abi_type: str, value: Any) -> Any:
    if abi_type == "address":
        return Web3.to_checksum_address(value)
    if abi_type.endswith("[]"):
        return tuple(_normalize(abi_type[:-2], v) for v in value)
    return value


def decode(raw: bytes, kind: ContractKind, function_name: str | Enum) -> tuple:
    """
    Decode a raw return blob into Python values.

    Args:
        raw: Return data of one call
        kind: Contract kind the call was made against
        function_name: Function whose output types apply

    Returns:
        Tuple of decoded values, one per output type (addresses checksummed)

    Raises:
        DecodeError: blob is empty, too short, the wrong size, malformed,
            or not in canonical ABI layout
    """
    signature = lookup(kind, function_name)
    output_types = list(signature.output_types)
    raw = bytes(raw)

    head_size = WORD * len(output_types)
    if not raw:
        raise DecodeError(signature.name, "empty return data")
    if len(raw) < head_size:
        raise DecodeError(
            signature.name, f"expected at least {head_size} bytes, got {len(raw)}"
        )
    if not any(_is_dynamic(t) for t in output_types) and len(raw) != head_size:
        raise DecodeError(signature.name, f"expected {head_size} bytes, got {len(raw)}")

    try:
        values = abi_decode(output_types, raw, strict=True)
    except (DecodingError, OverflowError, ValueError) as exc:
        raise DecodeError(signature.name, str(exc) or type(exc).__name__) from exc

    # Reject trailing bytes and gapped offsets
    if abi_encode(output_types, list(values)) != raw:
        raise DecodeError(signature.name, "non-canonical encoding")

    return tuple(_normalize(t, v) for t, v in zip(output_types, values))


def decode_reserves(raw: bytes) -> tuple[int, int, int]:
    """Decode UniV2 getReserves return data: (reserve0, reserve1, blockTimestampLast)."""
    reserve0, reserve1, block_timestamp_last = decode(
        raw, ContractKind.PAIR, PairFunction.GET_RESERVES
    )
    return reserve0, reserve1, block_timestamp_last
