"""
Failure taxonomy for pair lookups.

Every error carries a short, stable `classification` so callers can tell
bad input from network problems from unexpected response shapes.
"""

from dataclasses import dataclass


class PairLookupError(Exception):
    """Base class for all lookup failures."""

    classification = "lookup_error"

    def __init__(self, message: str, cause: str | None = None):
        super().__init__(message)
        self.cause = cause


class InvalidAddressError(PairLookupError):
    classification = "invalid_address"

    def __init__(self, address: object, reason: str = "not a 20-byte hex address"):
        super().__init__(f"Invalid address {address!r}: {reason}", cause=reason)
        self.address = address


class UnknownFunctionError(PairLookupError):
    classification = "unknown_function"

    def __init__(self, kind: str, function_name: str):
        super().__init__(f"{kind} has no function {function_name!r}")
        self.kind = kind
        self.function_name = function_name


class ArgumentMismatchError(PairLookupError):
    classification = "argument_mismatch"

    def __init__(self, function_name: str, reason: str):
        super().__init__(f"Bad arguments for {function_name}: {reason}", cause=reason)
        self.function_name = function_name


class TransportError(PairLookupError):
    """Network, timeout, or node-side rejection of an RPC request."""

    classification = "transport_error"


class AggregationFailedError(PairLookupError):
    classification = "aggregation_failed"

    def __init__(self, cause: object):
        super().__init__(f"Multicall aggregate failed: {cause}", cause=str(cause))


class DecodeError(PairLookupError):
    classification = "decode_error"

    def __init__(self, function_name: str, reason: str):
        super().__init__(f"Cannot decode {function_name} result: {reason}", cause=reason)
        self.function_name = function_name
        self.reason = reason


@dataclass(frozen=True)
class FailureReason:
    """User-facing failure: stable classification plus optional cause."""

    classification: str
    cause: str | None = None

    @classmethod
    def from_error(cls, exc: PairLookupError) -> "FailureReason":
        return cls(exc.classification, exc.cause)

    def describe(self) -> str:
        if self.cause:
            return f"{self.classification}: {self.cause}"
        return self.classification
