"""
Tests for settings loading.

Run: cd backend && uv run python tests/test_config.py
"""

import os
import sys
import tempfile

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from pairlens.config import (
    DEFAULT_PAIR,
    DEFAULT_PAIR_ENV,
    MULTICALL_ADDRESS,
    MULTICALL_ADDRESS_ENV,
    RPC_URL_ENV,
    TIMEOUT_ENV,
    load_settings,
)
from pairlens.errors import InvalidAddressError

ENV_NAMES = [RPC_URL_ENV, MULTICALL_ADDRESS_ENV, DEFAULT_PAIR_ENV, TIMEOUT_ENV]


def _load_with(env_text: str):
    """Load settings from a temp .env with the relevant variables cleared."""
    saved = {name: os.environ.pop(name, None) for name in ENV_NAMES}
    try:
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, ".env")
            with open(path, "w") as f:
                f.write(env_text)
            return load_settings(path)
    finally:
        for name in ENV_NAMES:
            os.environ.pop(name, None)
            if saved[name] is not None:
                os.environ[name] = saved[name]


def test_defaults() -> None:
    settings = _load_with(f"{RPC_URL_ENV}=http://localhost:8545\n")
    assert settings.rpc_url == "http://localhost:8545"
    assert settings.multicall_address == MULTICALL_ADDRESS
    assert settings.default_pair == DEFAULT_PAIR
    assert settings.request_timeout == 30.0
    print("  [PASS] defaults")


def test_overrides() -> None:
    pair = "0xb4e16d0168e52d35cacd2c6185b44281ec28c9dc"
    settings = _load_with(
        f"{RPC_URL_ENV}=http://node\n{DEFAULT_PAIR_ENV}={pair}\n{TIMEOUT_ENV}=5\n"
    )
    assert settings.default_pair.lower() == pair
    assert settings.default_pair != pair  # checksummed
    assert settings.request_timeout == 5.0
    print("  [PASS] overrides")


def test_invalid_settings() -> None:
    cases = [
        ("", ValueError),
        (f"{RPC_URL_ENV}=http://node\n{TIMEOUT_ENV}=soon\n", ValueError),
        (f"{RPC_URL_ENV}=http://node\n{TIMEOUT_ENV}=0\n", ValueError),
        (f"{RPC_URL_ENV}=http://node\n{DEFAULT_PAIR_ENV}=0x123\n", InvalidAddressError),
        (
            f"{RPC_URL_ENV}=http://node\n"
            f"{DEFAULT_PAIR_ENV}=0x0d4a11d5eEaaC28EC3F61d100daF4d40471f1852\n",
            InvalidAddressError,
        ),
    ]
    for env_text, error in cases:
        try:
            _load_with(env_text)
        except error:
            pass
        else:
            raise AssertionError(f"Expected {error.__name__} for {env_text!r}")
    print("  [PASS] invalid_settings")


if __name__ == "__main__":
    print("=== test_config.py ===")
    test_defaults()
    test_overrides()
    test_invalid_settings()
