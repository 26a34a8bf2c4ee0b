"""Presentation helpers for pair snapshots (not used by the resolver)."""

from decimal import Decimal

import pandas as pd

from .models import PairSnapshot


def truncate_address(address: str) -> str:
    """0x0d4a11d5EEaaC28EC3F61d100daF4d40471f1852 -> 0x0d4a...1852"""
    if len(address) <= 10:
        return address
    return f"{address[:6]}...{address[-4:]}"


def format_amount(amount: str) -> str:
    """Add thousands separators to an exact decimal string."""
    return f"{Decimal(amount):,f}"


def snapshot_frame(snapshot: PairSnapshot) -> pd.DataFrame:
    """One row per token with its metadata and formatted reserve."""
    rows = []
    for label, token, reserve in (
        ("token0", snapshot.token0, snapshot.reserve0),
        ("token1", snapshot.token1, snapshot.reserve1),
    ):
        rows.append({
            "token": label,
            "symbol": token.symbol,
            "name": token.name,
            "address": truncate_address(token.address),
            "decimals": token.decimals,
            "reserve": format_amount(reserve),
        })
    return pd.DataFrame(rows).set_index("token")


def describe_snapshot(snapshot: PairSnapshot) -> str:
    lines = [
        f"Pair {truncate_address(snapshot.pair_address)} "
        f"({snapshot.token0.symbol}/{snapshot.token1.symbol})",
    ]
    if snapshot.block_number is not None:
        lines.append(f"Block: {snapshot.block_number}")
    lines.append(snapshot_frame(snapshot).to_string())
    lines.append(f"Total Supply: {format_amount(snapshot.total_supply)} LP Tokens")
    return "\n".join(lines)
