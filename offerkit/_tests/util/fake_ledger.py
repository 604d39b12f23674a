from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from chia_rs.sized_bytes import bytes32
from chia_rs.sized_ints import uint32, uint64

from offerkit.types.blockchain_format.coin import Coin
from offerkit.types.blockchain_format.program import Program
from offerkit.types.coin_record import CoinRecord
from offerkit.types.coin_spend import CoinSpend, make_spend
from offerkit.util.hash import std_hash
from offerkit.wallet.cat_wallet.cat_utils import construct_cat_puzzle
from offerkit.wallet.puzzles.template_set import CAT_MOD

TEST_SEED = bytes([7] * 32)
ASSET_A = bytes32(std_hash(b"asset a"))
ASSET_B = bytes32(std_hash(b"asset b"))


@dataclass
class FakeLedger:
    """An in-memory coin set answering the ledger queries the offer engine makes."""

    records: dict[bytes32, CoinRecord] = field(default_factory=dict)
    spends: dict[bytes32, CoinSpend] = field(default_factory=dict)
    queries: list[str] = field(default_factory=list)

    def add_coin(self, coin: Coin, confirmed_height: int = 1) -> Coin:
        self.records[coin.name()] = CoinRecord(coin, uint32(confirmed_height), uint32(0), False, uint64(0))
        return coin

    def add_spent_coin(self, coin_spend: CoinSpend, spent_height: int) -> None:
        coin = coin_spend.coin
        self.records[coin.name()] = CoinRecord(coin, uint32(1), uint32(spent_height), False, uint64(0))
        self.spends[coin.name()] = coin_spend

    def add_plain_coin(self, puzzle_hash: bytes32, amount: int) -> Coin:
        parent = std_hash(b"plain parent" + len(self.records).to_bytes(4, "big"))
        return self.add_coin(Coin(parent, puzzle_hash, uint64(amount)))

    def add_cat_coin(self, asset_id: bytes32, inner_puzzle: Program, amount: int) -> Coin:
        """Adds a CAT coin together with its spent CAT parent so a lineage proof can be found."""
        cat_puzzle = construct_cat_puzzle(CAT_MOD, asset_id, inner_puzzle)
        cat_ph = cat_puzzle.get_tree_hash()
        grandparent = std_hash(b"cat grandparent" + len(self.records).to_bytes(4, "big"))
        parent = Coin(grandparent, cat_ph, uint64(amount))
        self.add_spent_coin(make_spend(parent, cat_puzzle, Program.to([])), spent_height=5)
        return self.add_coin(Coin(parent.name(), cat_ph, uint64(amount)), confirmed_height=5)

    def unspent(self, puzzle_hash: bytes32) -> list[CoinRecord]:
        return [r for r in self.records.values() if r.coin.puzzle_hash == puzzle_hash and not r.spent]

    async def get_balance(self, puzzle_hash: bytes32) -> uint64:
        self.queries.append("get_balance")
        return uint64(sum(r.coin.amount for r in self.unspent(puzzle_hash)))

    async def get_coin_list(self, puzzle_hash: bytes32) -> list[Coin]:
        self.queries.append("get_coin_list")
        return [r.coin for r in self.unspent(puzzle_hash)]

    async def get_coin_record_by_name(self, coin_id: bytes32) -> Optional[CoinRecord]:
        self.queries.append("get_coin_record_by_name")
        return self.records.get(coin_id)

    async def get_puzzle_and_solution(self, coin_id: bytes32, height: uint32) -> Optional[CoinSpend]:
        self.queries.append("get_puzzle_and_solution")
        record = self.records.get(coin_id)
        if record is None or record.spent_block_index != height:
            return None
        return self.spends.get(coin_id)
