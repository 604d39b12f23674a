from __future__ import annotations

from typing import Any, Optional

from chia_rs.sized_bytes import bytes32
from chia_rs.sized_ints import uint32

from offerkit.rpc.rpc_client import ResponseFailureError, RpcClient
from offerkit.types.coin_record import CoinRecord
from offerkit.types.coin_spend import CoinSpend


def coin_record_dict_backwards_compat(coin_record: dict[str, Any]) -> dict[str, Any]:
    coin_record.pop("spent", None)
    return coin_record


class FullNodeRpcClient(RpcClient):
    """
    Client to the full node RPC. Only the coin-set queries needed to build offers are exposed.
    """

    async def get_blockchain_state(self) -> dict[str, Any]:
        response = await self.fetch("get_blockchain_state", {})
        state: dict[str, Any] = response["blockchain_state"]
        return state

    async def get_coin_record_by_name(self, coin_id: bytes32) -> Optional[CoinRecord]:
        try:
            response = await self.fetch("get_coin_record_by_name", {"name": coin_id.hex()})
        except ResponseFailureError:
            return None

        return CoinRecord.from_json_dict(coin_record_dict_backwards_compat(response["coin_record"]))

    async def get_coin_records_by_puzzle_hash(
        self,
        puzzle_hash: bytes32,
        include_spent_coins: bool = True,
        start_height: Optional[int] = None,
        end_height: Optional[int] = None,
    ) -> list[CoinRecord]:
        d: dict[str, Any] = {"puzzle_hash": puzzle_hash.hex(), "include_spent_coins": include_spent_coins}
        if start_height is not None:
            d["start_height"] = start_height
        if end_height is not None:
            d["end_height"] = end_height

        response = await self.fetch("get_coin_records_by_puzzle_hash", d)
        return [CoinRecord.from_json_dict(coin_record_dict_backwards_compat(coin)) for coin in response["coin_records"]]

    async def get_puzzle_and_solution(self, coin_id: bytes32, height: uint32) -> Optional[CoinSpend]:
        try:
            response = await self.fetch("get_puzzle_and_solution", {"coin_id": coin_id.hex(), "height": height})
        except ResponseFailureError:
            return None
        return CoinSpend.from_json_dict(response["coin_solution"])
