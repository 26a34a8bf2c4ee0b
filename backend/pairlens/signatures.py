"""
Signature registry for the three contract kinds a pair lookup touches.

Signatures are derived once from the minimal ABIs in `abis` and exposed as
read-only mappings keyed by an enumerated function name per contract kind.
"""

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Mapping

from web3 import Web3

from .abis import ERC20_ABI, MULTICALL_ABI, UNIV2_PAIR_ABI
from .errors import UnknownFunctionError


class ContractKind(Enum):
    PAIR = "pair"
    TOKEN = "token"
    AGGREGATOR = "aggregator"


class PairFunction(str, Enum):
    TOKEN0 = "token0"
    TOKEN1 = "token1"
    GET_RESERVES = "getReserves"
    TOTAL_SUPPLY = "totalSupply"


class TokenFunction(str, Enum):
    NAME = "name"
    SYMBOL = "symbol"
    DECIMALS = "decimals"


class AggregatorFunction(str, Enum):
    AGGREGATE = "aggregate"


@dataclass(frozen=True)
class FunctionSignature:
    name: str
    input_types: tuple[str, ...]
    output_types: tuple[str, ...]

    @property
    def canonical(self) -> str:
        """Canonical form hashed for the selector, e.g. getReserves()."""
        return f"{self.name}({','.join(self.input_types)})"

    @property
    def selector(self) -> bytes:
        return bytes(Web3.keccak(text=self.canonical)[:4])


def _abi_type(param: dict) -> str:
    """Flatten an ABI param into its canonical type string (tuples inlined)."""
    abi_type = param["type"]
    if not abi_type.startswith("tuple"):
        return abi_type
    inner = ",".join(_abi_type(c) for c in param["components"])
    return f"({inner}){abi_type[len('tuple'):]}"


def _signature_set(abi: list[dict], names: type[Enum]) -> Mapping[str, FunctionSignature]:
    entries = {entry["name"]: entry for entry in abi if entry["type"] == "function"}
    signatures = {}
    for member in names:
        entry = entries[member.value]
        signatures[member.value] = FunctionSignature(
            name=member.value,
            input_types=tuple(_abi_type(p) for p in entry["inputs"]),
            output_types=tuple(_abi_type(p) for p in entry["outputs"]),
        )
    return MappingProxyType(signatures)


SIGNATURES: Mapping[ContractKind, Mapping[str, FunctionSignature]] = MappingProxyType({
    ContractKind.PAIR: _signature_set(UNIV2_PAIR_ABI, PairFunction),
    ContractKind.TOKEN: _signature_set(ERC20_ABI, TokenFunction),
    ContractKind.AGGREGATOR: _signature_set(MULTICALL_ABI, AggregatorFunction),
})


def lookup(kind: ContractKind, function_name: str | Enum) -> FunctionSignature:
    """
    Look up a function signature.

    Args:
        kind: Contract kind whose signature set is searched
        function_name: Function name or one of the per-kind function enums

    Returns:
        FunctionSignature for the function

    Raises:
        UnknownFunctionError: if the kind has no such function
    """
    name = function_name.value if isinstance(function_name, Enum) else function_name
    try:
        return SIGNATURES[kind][name]
    except KeyError:
        raise UnknownFunctionError(kind.value, str(name)) from None
