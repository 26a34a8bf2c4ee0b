"""
Fixed-point amount formatting.

Token balances are integers scaled by 10**decimals. Conversion is done with
integer arithmetic so amounts above 2**64 (or any float's precision) stay exact.
"""

from decimal import Decimal

MAX_DECIMALS = 255  # uint8


def to_decimal_string(raw: int, decimals: int) -> str:
    """
    Convert a raw token amount to its exact decimal representation.

    The result is minimal: no trailing fractional zeros and no trailing dot.

    Args:
        raw: Non-negative raw integer amount
        decimals: Token decimals (0-255)

    Returns:
        Decimal string of raw / 10**decimals, e.g. (1500000, 6) -> "1.5"
    """
    if isinstance(raw, bool) or not isinstance(raw, int):
        raise ValueError(f"raw amount must be an int, got {type(raw).__name__}")
    if isinstance(decimals, bool) or not isinstance(decimals, int):
        raise ValueError(f"decimals must be an int, got {type(decimals).__name__}")
    if raw < 0:
        raise ValueError(f"raw amount must be non-negative, got {raw}")
    if not 0 <= decimals <= MAX_DECIMALS:
        raise ValueError(f"decimals must be in 0..{MAX_DECIMALS}, got {decimals}")

    if decimals == 0:
        return str(raw)

    whole, fraction = divmod(raw, 10 ** decimals)
    fraction_digits = str(fraction).rjust(decimals, "0").rstrip("0")
    if not fraction_digits:
        return str(whole)
    return f"{whole}.{fraction_digits}"


def to_decimal(raw: int, decimals: int) -> Decimal:
    """Same as to_decimal_string, as a Decimal (constructed from the exact string)."""
    return Decimal(to_decimal_string(raw, decimals))
