from __future__ import annotations

import dataclasses
from typing import Any

from chia_rs.sized_bytes import bytes32
from chia_rs.sized_ints import uint64

from offerkit.types.blockchain_format.coin import Coin


@dataclasses.dataclass(frozen=True)
class CoinSelectionConfig:
    min_coin_amount: uint64
    max_coin_amount: uint64
    excluded_coin_amounts: list[uint64]
    excluded_coin_ids: list[bytes32]

    def override(self, **kwargs: Any) -> CoinSelectionConfig:
        return dataclasses.replace(self, **kwargs)

    def excluding(self, coins: list[Coin]) -> CoinSelectionConfig:
        return self.override(excluded_coin_ids=[*self.excluded_coin_ids, *(coin.name() for coin in coins)])


DEFAULT_COIN_SELECTION_CONFIG = CoinSelectionConfig(uint64(0), uint64(2**64 - 1), [], [])
