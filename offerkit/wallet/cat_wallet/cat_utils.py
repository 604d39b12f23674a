from __future__ import annotations

import dataclasses
import itertools
from typing import Iterator, Optional

from chia_rs import G2Element
from chia_rs.sized_bytes import bytes32

from offerkit.types.blockchain_format.coin import Coin, coin_as_list
from offerkit.types.blockchain_format.program import INFINITE_COST, Program
from offerkit.types.coin_spend import CoinSpend
from offerkit.types.condition_opcodes import ConditionOpcode
from offerkit.types.spend_bundle import SpendBundle
from offerkit.util.condition_tools import conditions_dict_for_solution
from offerkit.wallet.lineage_proof import LineageProof
from offerkit.wallet.puzzles.template_set import CAT_MOD, CAT_MOD_HASH
from offerkit.wallet.util.curry_and_treehash import calculate_hash_of_quoted_mod_hash, curry_and_treehash, shatree_atom

NULL_SIGNATURE = G2Element()

CAT_MOD_HASH_HASH = shatree_atom(CAT_MOD_HASH)
QUOTED_CAT_MOD_HASH = calculate_hash_of_quoted_mod_hash(CAT_MOD_HASH)


# a CAT coin together with the inner spend that moves it
@dataclasses.dataclass(frozen=True)
class SpendableCAT:
    coin: Coin
    limitations_program_hash: bytes32
    inner_puzzle: Program
    inner_solution: Program
    lineage_proof: LineageProof = LineageProof()
    extra_delta: int = 0

    def created_amount(self) -> int:
        conditions = conditions_dict_for_solution(self.inner_puzzle, self.inner_solution, INFINITE_COST)
        # the -113 "melt" magic amount creates nothing
        created = conditions.get(ConditionOpcode.CREATE_COIN, [])
        return sum(Program.to(cwa.vars[1]).as_int() for cwa in created if cwa.vars[1] != b"\x8f")

    def next_info(self) -> Program:
        return Program.to([self.coin.parent_coin_info, self.inner_puzzle.get_tree_hash(), self.coin.amount])


def match_cat_puzzle(puzzle: Program) -> Optional[Iterator[Program]]:
    """
    Given a puzzle, test if it's a CAT and, if it is, return the curried arguments
    """
    mod, args = puzzle.uncurry()
    if mod.get_tree_hash() == CAT_MOD_HASH:
        ret: Iterator[Program] = args.as_iter()
        return ret
    else:
        return None


def get_innerpuzzle_from_puzzle(puzzle: Program) -> Program:
    mod, curried_args = puzzle.uncurry()
    if mod.get_tree_hash() == CAT_MOD_HASH:
        return curried_args.at("rrf")
    else:
        raise ValueError("Not a CAT puzzle")


def construct_cat_puzzle(
    mod_code: Program, limitations_program_hash: bytes32, inner_puzzle: Program, mod_code_hash: Optional[bytes32] = None
) -> Program:
    """
    Given an inner puzzle hash and tail hash calculate a puzzle program for a specific cc.
    """
    if mod_code_hash is None:
        mod_code_hash = mod_code.get_tree_hash()
    return mod_code.curry(mod_code_hash, limitations_program_hash, inner_puzzle)


def cat_puzzle_hash(asset_id: bytes32, inner_puzzle_hash: bytes32) -> bytes32:
    """
    The puzzle hash of `construct_cat_puzzle(CAT_MOD, asset_id, inner)` computed from the
    inner puzzle hash alone.
    """
    return curry_and_treehash(QUOTED_CAT_MOD_HASH, CAT_MOD_HASH_HASH, shatree_atom(asset_id), inner_puzzle_hash)


def subtotals_for_deltas(deltas: list[int]) -> list[int]:
    """
    Running totals of the deltas before each coin, shifted so the smallest is 0. CAT solutions
    carry these so the ring of coins can check that value is conserved.
    """
    subtotals = list(itertools.accumulate(deltas[:-1], initial=0))
    offset = min(subtotals)
    return [subtotal - offset for subtotal in subtotals]


def unsigned_spend_bundle_for_spendable_cats(mod_code: Program, spendable_cat_list: list[SpendableCAT]) -> SpendBundle:
    """
    Spends every coin in `spendable_cat_list` as one ring: each coin names the previous coin's id
    and the next coin's info in its solution. Nothing is signed.
    """
    deltas = [cat.coin.amount - cat.created_amount() + cat.extra_delta for cat in spendable_cat_list]
    if sum(deltas) != 0:
        raise ValueError("input and output amounts don't match")
    subtotals = subtotals_for_deltas(deltas)

    coin_spends = []
    count = len(spendable_cat_list)
    for index, cat in enumerate(spendable_cat_list):
        previous_cat = spendable_cat_list[index - 1]
        next_cat = spendable_cat_list[(index + 1) % count]
        solution = Program.to(
            [
                cat.inner_solution,
                cat.lineage_proof.to_program(),
                previous_cat.coin.name(),
                coin_as_list(cat.coin),
                next_cat.next_info(),
                subtotals[index],
                cat.extra_delta,
            ]
        )
        puzzle_reveal = construct_cat_puzzle(mod_code, cat.limitations_program_hash, cat.inner_puzzle)
        coin_spends.append(CoinSpend(cat.coin, puzzle_reveal, solution))

    return SpendBundle(coin_spends, NULL_SIGNATURE)
