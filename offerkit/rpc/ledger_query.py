from __future__ import annotations

import logging
from collections.abc import Awaitable
from dataclasses import dataclass
from typing import Optional, Protocol, TypeVar

import aiohttp
import anyio
from chia_rs.sized_bytes import bytes32
from chia_rs.sized_ints import uint32, uint64

from offerkit.rpc.full_node_rpc_client import FullNodeRpcClient
from offerkit.rpc.rpc_client import ResponseFailureError
from offerkit.types.blockchain_format.coin import Coin
from offerkit.types.coin_record import CoinRecord
from offerkit.types.coin_spend import CoinSpend
from offerkit.util.errors import UpstreamQueryFailure

log = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_QUERY_TIMEOUT = 30.0


class LedgerQuery(Protocol):
    async def get_balance(self, puzzle_hash: bytes32) -> uint64: ...

    async def get_coin_list(self, puzzle_hash: bytes32) -> list[Coin]: ...

    async def get_coin_record_by_name(self, coin_id: bytes32) -> Optional[CoinRecord]: ...

    async def get_puzzle_and_solution(self, coin_id: bytes32, height: uint32) -> Optional[CoinSpend]: ...


@dataclass
class FullNodeLedgerQuery:
    client: FullNodeRpcClient

    async def get_unspent_records(self, puzzle_hash: bytes32) -> list[CoinRecord]:
        return await self.client.get_coin_records_by_puzzle_hash(puzzle_hash, include_spent_coins=False)

    async def get_balance(self, puzzle_hash: bytes32) -> uint64:
        records = await self.get_unspent_records(puzzle_hash)
        return uint64(sum(record.coin.amount for record in records if not record.spent))

    async def get_coin_list(self, puzzle_hash: bytes32) -> list[Coin]:
        records = await self.get_unspent_records(puzzle_hash)
        return [record.coin for record in records if not record.spent]

    async def get_coin_record_by_name(self, coin_id: bytes32) -> Optional[CoinRecord]:
        return await self.client.get_coin_record_by_name(coin_id)

    async def get_puzzle_and_solution(self, coin_id: bytes32, height: uint32) -> Optional[CoinSpend]:
        return await self.client.get_puzzle_and_solution(coin_id, height)


@dataclass
class TimeoutLedgerQuery:
    """
    Puts a deadline on every query of the wrapped ledger. Timeouts and transport failures
    surface as `UpstreamQueryFailure`.
    """

    inner: LedgerQuery
    timeout: float = DEFAULT_QUERY_TIMEOUT

    async def _query(self, name: str, awaitable: Awaitable[T]) -> T:
        try:
            with anyio.fail_after(self.timeout):
                return await awaitable
        except TimeoutError as e:
            log.warning(f"Ledger query {name} timed out after {self.timeout}s")
            raise UpstreamQueryFailure(f"{name} timed out after {self.timeout}s") from e
        except (aiohttp.ClientError, ResponseFailureError, OSError) as e:
            log.warning(f"Ledger query {name} failed: {e}")
            raise UpstreamQueryFailure(f"{name} failed: {e}") from e

    async def get_balance(self, puzzle_hash: bytes32) -> uint64:
        return await self._query("get_balance", self.inner.get_balance(puzzle_hash))

    async def get_coin_list(self, puzzle_hash: bytes32) -> list[Coin]:
        return await self._query("get_coin_list", self.inner.get_coin_list(puzzle_hash))

    async def get_coin_record_by_name(self, coin_id: bytes32) -> Optional[CoinRecord]:
        return await self._query("get_coin_record_by_name", self.inner.get_coin_record_by_name(coin_id))

    async def get_puzzle_and_solution(self, coin_id: bytes32, height: uint32) -> Optional[CoinSpend]:
        return await self._query("get_puzzle_and_solution", self.inner.get_puzzle_and_solution(coin_id, height))
