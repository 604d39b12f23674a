from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from chia_rs.sized_bytes import bytes32
from chia_rs.sized_ints import uint64

from offerkit.types.blockchain_format.program import Program
from offerkit.types.condition_opcodes import ConditionOpcode
from offerkit.wallet.puzzles.puzzle_utils import make_create_coin_condition


# This class is supposed to correspond to a CREATE_COIN condition
@dataclass(frozen=True)
class Payment:
    puzzle_hash: bytes32
    amount: uint64
    memos: list[bytes] = field(default_factory=list)

    def as_condition_args(self) -> list[Any]:
        return [self.puzzle_hash, self.amount, self.memos]

    def as_condition(self) -> Program:
        return Program.to(make_create_coin_condition(self.puzzle_hash, self.amount, self.memos))

    def name(self) -> bytes32:
        return self.as_condition().get_tree_hash()

    @classmethod
    def from_condition(cls, condition: Program) -> Payment:
        if condition.first().atom != ConditionOpcode.CREATE_COIN:
            raise ValueError("not a CREATE_COIN condition")
        puzzle_hash = bytes32(condition.at("rf").as_atom())
        amount = uint64(condition.at("rrf").as_int())
        memos: list[bytes] = []
        if condition.at("rrr").listp():
            memos = [memo.as_atom() for memo in condition.at("rrrf").as_iter()]
        return cls(puzzle_hash, amount, memos)
