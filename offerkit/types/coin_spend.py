from __future__ import annotations

from dataclasses import dataclass

from offerkit.types.blockchain_format.coin import Coin
from offerkit.types.blockchain_format.program import INFINITE_COST, Program
from offerkit.types.condition_opcodes import ConditionOpcode
from offerkit.util.condition_tools import conditions_dict_for_solution, created_outputs_for_conditions_dict
from offerkit.util.streamable import Streamable, streamable


@streamable
@dataclass(frozen=True)
class CoinSpend(Streamable):
    """
    A coin together with the puzzle that locks it and the solution that unlocks it.
    """

    coin: Coin
    puzzle_reveal: Program
    solution: Program

    def additions(self, max_cost: int = INFINITE_COST) -> list[Coin]:
        conditions_dict = conditions_dict_for_solution(self.puzzle_reveal, self.solution, max_cost)
        return created_outputs_for_conditions_dict(conditions_dict, self.coin.name())

    def reserved_fee(self, max_cost: int = INFINITE_COST) -> int:
        conditions_dict = conditions_dict_for_solution(self.puzzle_reveal, self.solution, max_cost)
        return sum(int.from_bytes(cwa.vars[0], "big") for cwa in conditions_dict.get(ConditionOpcode.RESERVE_FEE, []))

    def puzzle_hash_matches(self) -> bool:
        return self.puzzle_reveal.get_tree_hash() == self.coin.puzzle_hash


def make_spend(coin: Coin, puzzle_reveal: Program, solution: Program) -> CoinSpend:
    return CoinSpend(coin, puzzle_reveal, solution)
