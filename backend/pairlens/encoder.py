"""
Call encoding for multicall batches.

Turns (target, contract kind, function name, args) into a CallDescriptor
holding the 4-byte selector followed by the ABI-encoded arguments.
"""

from enum import Enum
from typing import Any, Sequence

from eth_abi.abi import encode as abi_encode
from eth_abi.exceptions import EncodingError
from web3 import Web3

from .errors import ArgumentMismatchError, InvalidAddressError
from .models import CallDescriptor
from .signatures import ContractKind, lookup


def is_valid_address(value: Any) -> bool:
    """
    True for a 20-byte hex address string. Mixed-case input must also carry
    a valid EIP-55 checksum; all-lower and all-upper input is accepted as is.
    """
    if not isinstance(value, str) or not Web3.is_address(value):
        return False
    digits = value[2:] if value[:2].lower() == "0x" else value
    if digits != digits.lower() and digits != digits.upper():
        return Web3.is_checksum_address(value)
    return True


def checksum_address(address: Any) -> str:
    """Validate an address string and return its checksum form."""
    if not is_valid_address(address):
        raise InvalidAddressError(address)
    return Web3.to_checksum_address(address)


def _split_components(inner: str) -> list[str]:
    """Split 'address,(uint8,bool)[]' on top-level commas only."""
    parts, depth, start = [], 0, 0
    for i, ch in enumerate(inner):
        if ch == "(":
            depth += 1
        elif ch == ")":
            depth -= 1
        elif ch == "," and depth == 0:
            parts.append(inner[start:i])
            start = i + 1
    if inner:
        parts.append(inner[start:])
    return parts


def _coerce(abi_type: str, value: Any, path: str) -> Any:
    """
    Check a value against an ABI type string and normalize it for eth_abi.

    Only coarse compatibility is checked (python type, uint range, address
    format); eth_abi does the byte-level encoding.
    """
    if abi_type.endswith("[]"):
        if isinstance(value, (str, bytes)) or not isinstance(value, (list, tuple)):
            raise ArgumentMismatchError(path, f"expected a list for {abi_type}")
        item_type = abi_type[:-2]
        return [_coerce(item_type, item, f"{path}[{i}]") for i, item in enumerate(value)]

    if abi_type.startswith("("):
        components = _split_components(abi_type[1:-1])
        if not isinstance(value, (list, tuple)) or len(value) != len(components):
            raise ArgumentMismatchError(path, f"expected a {len(components)}-tuple for {abi_type}")
        return tuple(
            _coerce(t, v, f"{path}.{i}") for i, (t, v) in enumerate(zip(components, value))
        )

    if abi_type == "address":
        if not is_valid_address(value):
            raise ArgumentMismatchError(path, f"{value!r} is not an address")
        return Web3.to_checksum_address(value)

    if abi_type.startswith("uint"):
        bits = int(abi_type[4:] or 256)
        if isinstance(value, bool) or not isinstance(value, int):
            raise ArgumentMismatchError(path, f"expected int for {abi_type}")
        if not 0 <= value < 2 ** bits:
            raise ArgumentMismatchError(path, f"{value} out of range for {abi_type}")
        return value

    if abi_type == "bool":
        if not isinstance(value, bool):
            raise ArgumentMismatchError(path, "expected bool")
        return value

    if abi_type == "string":
        if not isinstance(value, str):
            raise ArgumentMismatchError(path, "expected str")
        return value

    if abi_type == "bytes":
        if not isinstance(value, (bytes, bytearray)):
            raise ArgumentMismatchError(path, "expected bytes")
        return bytes(value)

    raise ArgumentMismatchError(path, f"unsupported ABI type {abi_type}")


def encode(
    target: str,
    kind: ContractKind,
    function_name: str | Enum,
    args: Sequence[Any] = (),
) -> CallDescriptor:
    """
    Build a CallDescriptor for one contract call.

    Args:
        target: Contract address to call
        kind: Contract kind used to look up the signature
        function_name: Function name (or per-kind function enum)
        args: Positional arguments matching the signature's input types

    Returns:
        CallDescriptor with selector + ABI-encoded arguments

    Raises:
        InvalidAddressError, UnknownFunctionError, ArgumentMismatchError
    """
    address = checksum_address(target)
    signature = lookup(kind, function_name)

    args = list(args)
    if len(args) != len(signature.input_types):
        raise ArgumentMismatchError(
            signature.name,
            f"expected {len(signature.input_types)} arguments, got {len(args)}",
        )

    values = [
        _coerce(abi_type, value, f"{signature.name}.arg{i}")
        for i, (abi_type, value) in enumerate(zip(signature.input_types, args))
    ]

    try:
        encoded_args = abi_encode(list(signature.input_types), values) if values else b""
    except EncodingError as exc:
        raise ArgumentMismatchError(signature.name, str(exc)) from exc

    return CallDescriptor(
        target=address,
        kind=kind,
        function_name=signature.name,
        encoded_input=signature.selector + encoded_args,
    )
