"""Value objects passed between the encoder, aggregator, and resolver."""

from dataclasses import asdict, dataclass
from typing import Iterator

from .signatures import ContractKind


@dataclass(frozen=True)
class CallDescriptor:
    """One contract call ready for batching: target + encoded calldata."""

    target: str
    kind: ContractKind
    function_name: str
    encoded_input: bytes


@dataclass(frozen=True)
class BatchResult:
    """
    Raw return blobs of one aggregate call, positionally aligned with the
    request list. `block_number` is None only for the empty batch.
    """

    block_number: int | None
    return_data: tuple[bytes, ...]

    def __len__(self) -> int:
        return len(self.return_data)

    def __getitem__(self, index: int) -> bytes:
        return self.return_data[index]

    def __iter__(self) -> Iterator[bytes]:
        return iter(self.return_data)


@dataclass(frozen=True)
class TokenInfo:
    address: str
    name: str
    symbol: str
    decimals: int


@dataclass(frozen=True)
class PairSnapshot:
    """Decoded, display-ready state of one UniswapV2 pair."""

    pair_address: str
    token0: TokenInfo
    token1: TokenInfo
    reserve0: str
    reserve1: str
    total_supply: str
    block_number: int | None = None

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "PairSnapshot":
        return cls(
            pair_address=data["pair_address"],
            token0=TokenInfo(**data["token0"]),
            token1=TokenInfo(**data["token1"]),
            reserve0=data["reserve0"],
            reserve1=data["reserve1"],
            total_supply=data["total_supply"],
            block_number=data.get("block_number"),
        )
