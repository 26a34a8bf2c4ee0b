"""
Async JSON-RPC transport for eth_call.

Uses aiohttp with one pooled session per transport. This is the only
component that talks to the network; timeouts are applied here.
"""

import asyncio
import itertools
import logging
from typing import Any, Protocol

import aiohttp

from .config import DEFAULT_TIMEOUT
from .errors import TransportError

logger = logging.getLogger(__name__)


class ChainTransport(Protocol):
    async def call(self, to: str, data: bytes) -> bytes:
        ...

    async def block_number(self) -> int:
        ...


def _parse_hex(value: Any, method: str) -> bytes:
    if not isinstance(value, str) or not value.startswith("0x"):
        raise TransportError(f"{method} returned a non-hex result: {value!r}")
    try:
        return bytes.fromhex(value[2:])
    except ValueError as exc:
        raise TransportError(f"{method} returned malformed hex", cause=str(exc)) from exc


class JsonRpcTransport:
    """
    Minimal eth_call / eth_blockNumber client.

    Args:
        rpc_url: RPC endpoint URL
        timeout: Total request timeout in seconds
        session: Optional shared aiohttp session (not closed by this object)
    """

    def __init__(
        self,
        rpc_url: str,
        timeout: float = DEFAULT_TIMEOUT,
        session: aiohttp.ClientSession | None = None,
    ):
        self.rpc_url = rpc_url
        self.timeout = aiohttp.ClientTimeout(total=timeout)
        self._session = session
        self._owns_session = session is None
        self._ids = itertools.count(1)

    async def __aenter__(self) -> "JsonRpcTransport":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    async def close(self) -> None:
        if self._owns_session and self._session is not None:
            await self._session.close()
            self._session = None

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None:
            self._session = aiohttp.ClientSession(timeout=self.timeout)
        return self._session

    async def _request(self, method: str, params: list[Any]) -> Any:
        payload = {
            "jsonrpc": "2.0",
            "method": method,
            "params": params,
            "id": next(self._ids),
        }
        session = self._get_session()
        try:
            async with session.post(self.rpc_url, json=payload, timeout=self.timeout) as response:
                response.raise_for_status()
                body = await response.json(content_type=None)
        except asyncio.TimeoutError as exc:
            raise TransportError(f"{method} timed out", cause="timeout") from exc
        except (aiohttp.ClientError, ValueError) as exc:
            raise TransportError(f"{method} request failed: {exc}", cause=str(exc)) from exc

        if not isinstance(body, dict):
            raise TransportError(f"{method} returned an unexpected body: {body!r}")
        if body.get("error"):
            error = body["error"]
            message = error.get("message", "") if isinstance(error, dict) else str(error)
            logger.debug("RPC %s rejected: %s", method, error)
            raise TransportError(f"{method} rejected by node: {message}", cause=message)
        if "result" not in body:
            raise TransportError(f"{method} response has no result")
        return body["result"]

    async def call(self, to: str, data: bytes) -> bytes:
        """Execute eth_call against the latest block and return raw bytes."""
        result = await self._request(
            "eth_call", [{"to": to, "data": "0x" + bytes(data).hex()}, "latest"]
        )
        return _parse_hex(result, "eth_call")

    async def block_number(self) -> int:
        result = await self._request("eth_blockNumber", [])
        if not isinstance(result, str):
            raise TransportError(f"eth_blockNumber returned {result!r}")
        try:
            return int(result, 16)
        except ValueError as exc:
            raise TransportError("eth_blockNumber returned malformed hex", cause=str(exc)) from exc
