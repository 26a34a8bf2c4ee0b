"""
Tests for the signature registry.

Run: cd backend && uv run python tests/test_signatures.py
"""

import os
import sys

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from pairlens.errors import UnknownFunctionError
from pairlens.signatures import (
    SIGNATURES,
    ContractKind,
    PairFunction,
    TokenFunction,
    lookup,
)


def test_known_selectors() -> None:
    """Selectors match the well-known 4-byte ids."""
    expected = {
        (ContractKind.PAIR, "token0"): "0dfe1681",
        (ContractKind.PAIR, "token1"): "d21220a7",
        (ContractKind.PAIR, "getReserves"): "0902f1ac",
        (ContractKind.PAIR, "totalSupply"): "18160ddd",
        (ContractKind.TOKEN, "name"): "06fdde03",
        (ContractKind.TOKEN, "symbol"): "95d89b41",
        (ContractKind.TOKEN, "decimals"): "313ce567",
        (ContractKind.AGGREGATOR, "aggregate"): "252dba42",
    }
    for (kind, name), selector in expected.items():
        assert lookup(kind, name).selector.hex() == selector, name
    print("  [PASS] known_selectors")


def test_signature_shapes() -> None:
    reserves = lookup(ContractKind.PAIR, PairFunction.GET_RESERVES)
    assert reserves.input_types == ()
    assert reserves.output_types == ("uint112", "uint112", "uint32")
    assert reserves.canonical == "getReserves()"

    aggregate = lookup(ContractKind.AGGREGATOR, "aggregate")
    assert aggregate.input_types == ("(address,bytes)[]",)
    assert aggregate.output_types == ("uint256", "bytes[]")
    assert aggregate.canonical == "aggregate((address,bytes)[])"

    assert lookup(ContractKind.TOKEN, TokenFunction.DECIMALS).output_types == ("uint8",)
    print("  [PASS] signature_shapes")


def test_signature_sets_are_fixed() -> None:
    assert set(SIGNATURES[ContractKind.PAIR]) == {"token0", "token1", "getReserves", "totalSupply"}
    assert set(SIGNATURES[ContractKind.TOKEN]) == {"name", "symbol", "decimals"}
    assert set(SIGNATURES[ContractKind.AGGREGATOR]) == {"aggregate"}
    try:
        SIGNATURES[ContractKind.PAIR]["balanceOf"] = None
    except TypeError:
        pass
    else:
        raise AssertionError("signature sets must be read-only")
    print("  [PASS] signature_sets_are_fixed")


def test_unknown_function() -> None:
    """A pair function is unknown to the token set."""
    try:
        lookup(ContractKind.TOKEN, PairFunction.TOKEN0)
    except UnknownFunctionError as exc:
        assert exc.function_name == "token0"
        assert exc.classification == "unknown_function"
    else:
        raise AssertionError("Expected UnknownFunctionError")
    print("  [PASS] unknown_function")


if __name__ == "__main__":
    print("=== test_signatures.py ===")
    test_known_selectors()
    test_signature_shapes()
    test_signature_sets_are_fixed()
    test_unknown_function()
