"""
Configuration for UniswapV2 pair lookups.

Centralizes the aggregation contract address, the fallback pair, and the
environment variables read by `load_settings`.
"""

import os
from dataclasses import dataclass

from dotenv import load_dotenv
from web3 import Web3

from .encoder import is_valid_address
from .errors import InvalidAddressError

# ─── Contract Addresses (Ethereum Mainnet) ───

# Multicall2 (aggregate returns blockNumber + bytes[])
MULTICALL_ADDRESS = "0x5BA1e12693Dc8F9c48aAD8770482f4739bEeD696"

# UniswapV2 WETH/USDT, used when no pair address is given
DEFAULT_PAIR = "0x0d4a11d5EEaaC28EC3F61d100daF4d40471f1852"

# LP tokens are always displayed with 18 decimals (never queried)
LP_TOKEN_DECIMALS = 18

# ─── RPC ───
RPC_URL_ENV = "rpc_url_mainnet"
MULTICALL_ADDRESS_ENV = "PAIRLENS_MULTICALL_ADDRESS"
DEFAULT_PAIR_ENV = "PAIRLENS_DEFAULT_PAIR"
TIMEOUT_ENV = "PAIRLENS_TIMEOUT"

DEFAULT_TIMEOUT = 30.0  # seconds, whole request


@dataclass(frozen=True)
class Settings:
    rpc_url: str
    multicall_address: str = MULTICALL_ADDRESS
    default_pair: str = DEFAULT_PAIR
    request_timeout: float = DEFAULT_TIMEOUT


def _checked_address(value: str, env_name: str) -> str:
    if not is_valid_address(value):
        raise InvalidAddressError(value, f"{env_name} is not a valid address")
    return Web3.to_checksum_address(value)


def load_settings(env_file: str | None = None) -> Settings:
    """
    Build Settings from a .env file and the process environment.

    Args:
        env_file: Optional path to a .env file (defaults to dotenv's lookup)

    Returns:
        Settings with checksummed addresses
    """
    load_dotenv(env_file)

    rpc_url = os.getenv(RPC_URL_ENV, "").strip()
    if not rpc_url:
        raise ValueError(f"{RPC_URL_ENV} is not set")

    multicall = os.getenv(MULTICALL_ADDRESS_ENV) or MULTICALL_ADDRESS
    default_pair = os.getenv(DEFAULT_PAIR_ENV) or DEFAULT_PAIR

    timeout_raw = os.getenv(TIMEOUT_ENV)
    try:
        timeout = float(timeout_raw) if timeout_raw else DEFAULT_TIMEOUT
    except ValueError as exc:
        raise ValueError(f"{TIMEOUT_ENV} must be a number, got {timeout_raw!r}") from exc
    if timeout <= 0:
        raise ValueError(f"{TIMEOUT_ENV} must be positive, got {timeout}")

    return Settings(
        rpc_url=rpc_url,
        multicall_address=_checked_address(multicall, MULTICALL_ADDRESS_ENV),
        default_pair=_checked_address(default_pair, DEFAULT_PAIR_ENV),
        request_timeout=timeout,
    )
