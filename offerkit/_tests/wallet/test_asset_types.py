from __future__ import annotations

from typing import Any

import pytest
from chia_rs.sized_ints import uint64

from offerkit._tests.util.fake_ledger import ASSET_A
from offerkit.types.blockchain_format.program import Program
from offerkit.util.errors import InvalidParams
from offerkit.wallet.asset_types import (
    OfferAsset,
    PlainAsset,
    TokenAsset,
    asset_for_id,
    puzzle_for_asset,
    puzzle_hash_for_asset,
)
from offerkit.wallet.cat_wallet.cat_utils import cat_puzzle_hash
from offerkit.wallet.wallet import WalletKeys


def test_asset_for_id() -> None:
    assert asset_for_id(None) == PlainAsset()
    assert asset_for_id(None).asset_id is None
    assert asset_for_id(ASSET_A) == TokenAsset(ASSET_A)


def test_puzzles_for_assets(wallet_keys: WalletKeys) -> None:
    assert puzzle_hash_for_asset(PlainAsset(), wallet_keys.puzzle_hash) == wallet_keys.puzzle_hash
    assert puzzle_for_asset(PlainAsset(), wallet_keys.puzzle) == wallet_keys.puzzle
    token = TokenAsset(ASSET_A)
    assert puzzle_hash_for_asset(token, wallet_keys.puzzle_hash) == cat_puzzle_hash(ASSET_A, wallet_keys.puzzle_hash)
    assert puzzle_for_asset(token, wallet_keys.puzzle).get_tree_hash() == puzzle_hash_for_asset(
        token, wallet_keys.puzzle_hash
    )


def test_offer_asset_from_json() -> None:
    plain = OfferAsset.from_json_dict({"amount": 1000})
    assert plain == OfferAsset(None, uint64(1000))
    assert plain.asset == PlainAsset()

    token = OfferAsset.from_json_dict({"assetId": "0x" + ASSET_A.hex(), "amount": "25", "memo": "for you"})
    assert token == OfferAsset(ASSET_A, uint64(25), b"for you")
    assert token.asset == TokenAsset(ASSET_A)
    assert token.to_json_dict() == {"assetId": ASSET_A.hex(), "amount": 25, "memo": "for you"}
    assert OfferAsset.from_json_dict(token.to_json_dict()) == token

    assert OfferAsset.from_json_dict({"assetId": "", "amount": 1, "memo": ""}) == OfferAsset(None, uint64(1))


def test_memos_are_text_atoms() -> None:
    numeric = OfferAsset.from_json_dict({"amount": 1, "memo": "123"})
    assert numeric.memo == b"123"
    assert Program.to(numeric.memo).as_atom() == b"123"
    assert Program.to(numeric.memo) != Program.to(123)
    assert OfferAsset.from_json_dict({"amount": 1, "memo": 123}).memo == b"123"
    assert OfferAsset.from_json_dict({"amount": 1, "memo": "(a b)"}).memo == b"(a b)"


@pytest.mark.parametrize(
    "json_dict",
    [
        "not an object",
        {},
        {"amount": 0},
        {"amount": -5},
        {"amount": 2**64},
        {"amount": "lots"},
        {"assetId": "abcd", "amount": 1},
        {"assetId": "zz" * 32, "amount": 1},
    ],
)
def test_offer_asset_invalid(json_dict: Any) -> None:
    with pytest.raises(InvalidParams):
        OfferAsset.from_json_dict(json_dict)
