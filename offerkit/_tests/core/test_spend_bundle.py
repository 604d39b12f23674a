from __future__ import annotations

import pytest
from chia_rs import AugSchemeMPL, G2Element, PrivateKey
from chia_rs.sized_bytes import bytes32
from chia_rs.sized_ints import uint64

from offerkit.types.blockchain_format.coin import Coin
from offerkit.types.blockchain_format.program import Program
from offerkit.types.coin_spend import CoinSpend, make_spend
from offerkit.types.condition_opcodes import ConditionOpcode
from offerkit.types.spend_bundle import SpendBundle
from offerkit.util.streamable import TrailingBytesError
from offerkit.wallet.puzzles.p2_conditions import puzzle_for_conditions

TARGET = bytes32(b"\x09" * 32)


def make_test_spend(parent_byte: int, amount: int, send: int, fee: int) -> CoinSpend:
    puzzle = puzzle_for_conditions(
        [
            [ConditionOpcode.CREATE_COIN, TARGET, send],
            [ConditionOpcode.RESERVE_FEE, fee],
        ]
    )
    coin = Coin(bytes32(bytes([parent_byte]) * 32), puzzle.get_tree_hash(), uint64(amount))
    return make_spend(coin, puzzle, Program.to([]))


def test_coin_spend() -> None:
    spend = make_test_spend(1, 1000, 900, 100)
    assert spend.puzzle_hash_matches()
    assert spend.additions() == [Coin(spend.coin.name(), TARGET, uint64(900))]
    assert spend.reserved_fee() == 100
    assert CoinSpend.from_bytes(bytes(spend)) == spend
    assert CoinSpend.from_json_dict(spend.to_json_dict()) == spend


def test_spend_bundle() -> None:
    spends = [make_test_spend(1, 1000, 900, 100), make_test_spend(2, 50, 50, 0)]
    bundle = SpendBundle(spends, G2Element())
    assert bundle.removals() == [s.coin for s in spends]
    assert [c.amount for c in bundle.additions()] == [900, 50]
    assert bundle.fees() == 100
    assert SpendBundle.from_bytes(bytes(bundle)) == bundle
    assert SpendBundle.from_json_dict(bundle.to_json_dict()) == bundle
    with pytest.raises(TrailingBytesError):
        SpendBundle.from_bytes(bytes(bundle) + b"\x00")


def test_spend_bundle_layout() -> None:
    spend = make_test_spend(1, 1000, 900, 100)
    bundle = SpendBundle([spend], G2Element())
    expected = (
        (1).to_bytes(4, "big")
        + bytes(spend.coin)
        + bytes(spend.puzzle_reveal)
        + bytes(spend.solution)
        + bytes(G2Element())
    )
    assert bytes(bundle) == expected
    assert len(bytes(G2Element())) == 96


def test_aggregate() -> None:
    sk = AugSchemeMPL.key_gen(bytes([3] * 32))
    assert isinstance(sk, PrivateKey)
    sig_1 = AugSchemeMPL.sign(sk, b"one")
    sig_2 = AugSchemeMPL.sign(sk, b"two")
    bundle_1 = SpendBundle([make_test_spend(1, 10, 10, 0)], sig_1)
    bundle_2 = SpendBundle([make_test_spend(2, 20, 20, 0)], sig_2)
    aggregated = SpendBundle.aggregate([bundle_1, bundle_2])
    assert aggregated.coin_spends == bundle_1.coin_spends + bundle_2.coin_spends
    assert aggregated.aggregated_signature == AugSchemeMPL.aggregate([sig_1, sig_2])
    assert aggregated.name() != bundle_1.name()
    assert SpendBundle.aggregate([]).aggregated_signature == G2Element()
