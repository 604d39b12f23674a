from __future__ import annotations

import pytest

from offerkit._tests.util.fake_ledger import ASSET_A
from offerkit.types.blockchain_format.program import Program
from offerkit.wallet.cat_wallet.cat_utils import (
    cat_puzzle_hash,
    construct_cat_puzzle,
    get_innerpuzzle_from_puzzle,
    match_cat_puzzle,
    subtotals_for_deltas,
)
from offerkit.wallet.puzzles.template_set import CAT_MOD, CAT_MOD_HASH
from offerkit.wallet.wallet import WalletKeys


def test_cat_puzzle_hash(wallet_keys: WalletKeys) -> None:
    puzzle = construct_cat_puzzle(CAT_MOD, ASSET_A, wallet_keys.puzzle)
    assert cat_puzzle_hash(ASSET_A, wallet_keys.puzzle_hash) == puzzle.get_tree_hash()


def test_match_cat_puzzle(wallet_keys: WalletKeys) -> None:
    puzzle = construct_cat_puzzle(CAT_MOD, ASSET_A, wallet_keys.puzzle)
    args = match_cat_puzzle(puzzle)
    assert args is not None
    mod_hash, asset_id, inner_puzzle = args
    assert mod_hash.as_atom() == CAT_MOD_HASH
    assert asset_id.as_atom() == ASSET_A
    assert inner_puzzle == wallet_keys.puzzle
    assert get_innerpuzzle_from_puzzle(puzzle) == wallet_keys.puzzle

    assert match_cat_puzzle(wallet_keys.puzzle) is None
    assert match_cat_puzzle(Program.to(1)) is None
    with pytest.raises(ValueError, match="Not a CAT"):
        get_innerpuzzle_from_puzzle(wallet_keys.puzzle)


def test_subtotals_for_deltas() -> None:
    assert subtotals_for_deltas([5, -3, -2]) == [0, 5, 2]
    assert subtotals_for_deltas([-5, 3, 2]) == [5, 0, 3]
    assert subtotals_for_deltas([0]) == [0]
