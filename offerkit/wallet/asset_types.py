from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Union

from chia_rs.sized_bytes import bytes32
from chia_rs.sized_ints import uint64

from offerkit.types.blockchain_format.program import Program
from offerkit.util.byte_types import hexstr_to_bytes
from offerkit.util.errors import InvalidParams
from offerkit.wallet.cat_wallet.cat_utils import cat_puzzle_hash, construct_cat_puzzle
from offerkit.wallet.puzzles.template_set import CAT_MOD


@dataclass(frozen=True)
class PlainAsset:
    """The chain's native currency."""

    @property
    def asset_id(self) -> None:
        return None


@dataclass(frozen=True)
class TokenAsset:
    """A CAT identified by its TAIL hash."""

    asset_id: bytes32


Asset = Union[PlainAsset, TokenAsset]


def asset_for_id(asset_id: Optional[bytes32]) -> Asset:
    if asset_id is None:
        return PlainAsset()
    return TokenAsset(asset_id)


def puzzle_hash_for_asset(asset: Asset, inner_puzzle_hash: bytes32) -> bytes32:
    if isinstance(asset, TokenAsset):
        return cat_puzzle_hash(asset.asset_id, inner_puzzle_hash)
    return inner_puzzle_hash


def puzzle_for_asset(asset: Asset, inner_puzzle: Program) -> Program:
    if isinstance(asset, TokenAsset):
        return construct_cat_puzzle(CAT_MOD, asset.asset_id, inner_puzzle)
    return inner_puzzle


@dataclass(frozen=True)
class OfferAsset:
    """
    One entry of an offer request: an amount of the plain asset (`asset_id` None) or of a token.

    `memo` always travels as a single UTF-8 atom. A memo such as "123" or "(a b)" is kept as that
    text and never read as a CLVM int or list, so the declared payment and its announcement
    differ from those of a wallet that parses memos as CLVM source.
    """

    asset_id: Optional[bytes32]
    amount: uint64
    memo: Optional[bytes] = None

    @property
    def asset(self) -> Asset:
        return asset_for_id(self.asset_id)

    @classmethod
    def from_json_dict(cls, json_dict: dict[str, Any]) -> OfferAsset:
        if not isinstance(json_dict, dict):
            raise InvalidParams(f"asset must be an object, got {json_dict!r}")
        try:
            asset_id_str = json_dict.get("assetId")
            asset_id = None if asset_id_str in (None, "") else bytes32(hexstr_to_bytes(asset_id_str))
            amount = int(json_dict["amount"])
            memo_value = json_dict.get("memo")
            memo = None if memo_value in (None, "") else str(memo_value).encode("utf-8")
        except KeyError as e:
            raise InvalidParams(f"asset is missing {e}") from e
        except (TypeError, ValueError) as e:
            raise InvalidParams(f"invalid asset {json_dict!r}: {e}") from e
        if amount <= 0 or amount >= 2**64:
            raise InvalidParams(f"invalid amount {amount}")
        return cls(asset_id, uint64(amount), memo)

    def to_json_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {"amount": self.amount}
        if self.asset_id is not None:
            d["assetId"] = self.asset_id.hex()
        if self.memo is not None:
            d["memo"] = self.memo.decode("utf-8", errors="replace")
        return d
