from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from chia_rs.sized_bytes import bytes32
from chia_rs.sized_ints import uint64
from clvm.casts import int_to_bytes

from offerkit.util.hash import std_hash
from offerkit.util.streamable import Streamable, streamable


@streamable
@dataclass(frozen=True)
class Coin(Streamable):
    """
    An unspent value held by a puzzle hash. Its id commits to the parent coin, the puzzle hash and the amount.
    """

    parent_coin_info: bytes32
    puzzle_hash: bytes32
    amount: uint64

    def get_hash(self) -> bytes32:
        # the amount is hashed in its minimal clvm encoding, not the streamed uint64
        return std_hash(self.parent_coin_info + self.puzzle_hash + int_to_bytes(self.amount))

    def name(self) -> bytes32:
        return self.get_hash()

    def __hash__(self) -> int:
        return hash(self.name())


def coin_as_list(c: Coin) -> list[Union[bytes32, uint64]]:
    return [c.parent_coin_info, c.puzzle_hash, uint64(c.amount)]
