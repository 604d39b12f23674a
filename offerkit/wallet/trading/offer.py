from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional

from chia_rs.sized_bytes import bytes32
from chia_rs.sized_ints import uint64

from offerkit.types.announcement import Announcement
from offerkit.types.blockchain_format.coin import Coin
from offerkit.types.blockchain_format.program import Program
from offerkit.types.coin_spend import CoinSpend
from offerkit.types.spend_bundle import SpendBundle
from offerkit.util.bech32m import bech32_decode, bech32_encode, convertbits
from offerkit.util.errors import DecodeFormatError
from offerkit.util.streamable import StreamableError
from offerkit.wallet.asset_types import Asset, PlainAsset, TokenAsset, puzzle_for_asset, puzzle_hash_for_asset
from offerkit.wallet.cat_wallet.cat_utils import match_cat_puzzle
from offerkit.wallet.payment import Payment
from offerkit.wallet.puzzles.template_set import OFFER_MOD, OFFER_MOD_HASH, OFFER_MOD_OLD_HASH
from offerkit.wallet.util.puzzle_compression import (
    LATEST_VERSION,
    CompressedDataError,
    CompressionVersionError,
    compress_object_with_puzzles,
    decompress_object_with_puzzles,
    lowest_best_version,
)

log = logging.getLogger(__name__)

ZERO_32 = bytes32([0] * 32)
OFFER_PREFIX = "offer"
SETTLEMENT_MOD_HASHES = (OFFER_MOD_HASH, OFFER_MOD_OLD_HASH)


def settlement_puzzle(asset: Asset) -> Program:
    """
    The puzzle that holds offered coins of `asset` until a taker claims them: the current
    settlement payments puzzle, wrapped in CAT v2 for tokens.

    Offers built on it only settle with takers that pay through this puzzle. A wallet limited to
    the older settlement puzzle announces its payments under another puzzle hash, so the
    announcements these offers assert never appear and such a wallet cannot take them.
    """
    return puzzle_for_asset(asset, OFFER_MOD)


def settlement_puzzle_hash(asset: Asset, settlement_mod_hash: bytes32 = OFFER_MOD_HASH) -> bytes32:
    return puzzle_hash_for_asset(asset, settlement_mod_hash)


def asset_for_puzzle(puzzle: Program) -> Asset:
    args = match_cat_puzzle(puzzle)
    if args is None:
        return PlainAsset()
    _, asset_id, _ = args
    return TokenAsset(bytes32(asset_id.as_atom()))


def is_settlement_puzzle(puzzle: Program) -> bool:
    asset = asset_for_puzzle(puzzle)
    puzzle_hash = puzzle.get_tree_hash()
    return any(puzzle_hash == settlement_puzzle_hash(asset, mod_hash) for mod_hash in SETTLEMENT_MOD_HASHES)


@dataclass(frozen=True)
class NotarizedPayment(Payment):
    nonce: bytes32 = ZERO_32

    @classmethod
    def from_condition_and_nonce(cls, condition: Program, nonce: bytes32) -> NotarizedPayment:
        with_opcode: Program = Program.to((51, condition))  # Gotta do this because the super class is expecting it
        p = Payment.from_condition(with_opcode)
        puzzle_hash, amount, memos = tuple(p.as_condition_args())
        return cls(puzzle_hash, amount, memos, nonce)

    def to_program(self) -> Program:
        return Program.to((self.nonce, [self.as_condition_args()]))

    def announcement(self, settlement_ph: bytes32) -> Announcement:
        return Announcement.for_program(settlement_ph, self.to_program())


def is_declaration_spend(coin_spend: CoinSpend) -> bool:
    coin = coin_spend.coin
    return coin.parent_coin_info == ZERO_32 and coin.amount == 0 and is_settlement_puzzle(coin_spend.puzzle_reveal)


@dataclass(frozen=True)
class Offer:
    """
    One side of a trade: the coins a maker gives up plus zero-value declaration spends that
    state what the maker wants in return. The settlement puzzle announces each requested
    payment and the maker's spends assert those announcements, so the bundle is only valid
    once a taker adds spends that make the payments.
    """

    bundle: SpendBundle

    @staticmethod
    def ph() -> bytes32:
        # offered coins are paid to the current settlement puzzle, see settlement_puzzle
        return OFFER_MOD_HASH

    def declaration_spends(self) -> list[CoinSpend]:
        return [cs for cs in self.bundle.coin_spends if is_declaration_spend(cs)]

    def offered_spends(self) -> list[CoinSpend]:
        return [cs for cs in self.bundle.coin_spends if not is_declaration_spend(cs)]

    def additions(self) -> list[Coin]:
        return [c for cs in self.offered_spends() for c in cs.additions()]

    def removals(self) -> list[Coin]:
        return [cs.coin for cs in self.offered_spends()]

    def fees(self) -> int:
        """Unsafe to use for fees validation!!!"""
        amount_in = sum(c.amount for c in self.removals())
        amount_out = sum(c.amount for c in self.additions())
        return int(amount_in - amount_out)

    def get_offered_coins(self) -> dict[Optional[bytes32], list[Coin]]:
        offered_coins: dict[Optional[bytes32], list[Coin]] = {}
        for coin_spend in self.offered_spends():
            asset = asset_for_puzzle(coin_spend.puzzle_reveal)
            settlement_hashes = {settlement_puzzle_hash(asset, mod_hash) for mod_hash in SETTLEMENT_MOD_HASHES}
            for addition in coin_spend.additions():
                if addition.puzzle_hash in settlement_hashes:
                    offered_coins.setdefault(asset.asset_id, []).append(addition)
        return offered_coins

    def get_offered_amounts(self) -> dict[Optional[bytes32], int]:
        offered_coins: dict[Optional[bytes32], list[Coin]] = self.get_offered_coins()
        offered_amounts: dict[Optional[bytes32], int] = {}
        for asset_id, coins in offered_coins.items():
            offered_amounts[asset_id] = uint64(sum([c.amount for c in coins]))
        return offered_amounts

    def get_requested_payments(self) -> dict[Optional[bytes32], list[NotarizedPayment]]:
        requested_payments: dict[Optional[bytes32], list[NotarizedPayment]] = {}
        for coin_spend in self.declaration_spends():
            asset_id = asset_for_puzzle(coin_spend.puzzle_reveal).asset_id
            for payment_program in coin_spend.solution.as_iter():
                nonce = bytes32(payment_program.first().as_atom())
                for condition in payment_program.rest().as_iter():
                    payment = NotarizedPayment.from_condition_and_nonce(condition, nonce)
                    requested_payments.setdefault(asset_id, []).append(payment)
        return requested_payments

    def get_requested_amounts(self) -> dict[Optional[bytes32], int]:
        requested_amounts: dict[Optional[bytes32], int] = {}
        for asset_id, coins in self.get_requested_payments().items():
            requested_amounts[asset_id] = uint64(sum([c.amount for c in coins]))
        return requested_amounts

    # This is a method mostly for the UI that creates a JSON summary of the offer
    def summary(self) -> dict[str, Any]:
        def keys_to_strings(dic: dict[Optional[bytes32], Any]) -> dict[str, Any]:
            new_dic: dict[str, Any] = {}
            for key in dic:
                if key is None:
                    new_dic["xch"] = dic[key]
                else:
                    new_dic[key.hex()] = dic[key]
            return new_dic

        return {
            "id": self.name().hex(),
            "offered": keys_to_strings(self.get_offered_amounts()),
            "requested": keys_to_strings(self.get_requested_amounts()),
            "fees": self.fees(),
        }

    def name(self) -> bytes32:
        return self.bundle.name()

    def lowest_version(self) -> int:
        mods: list[bytes] = [bytes(s.puzzle_reveal.uncurry()[0]) for s in self.bundle.coin_spends]
        return lowest_best_version(mods)

    def compress(self, version: int = LATEST_VERSION) -> bytes:
        return compress_object_with_puzzles(bytes(self.bundle), version)

    @classmethod
    def from_compressed(cls, compressed_bytes: bytes) -> Offer:
        return cls(SpendBundle.from_bytes(decompress_object_with_puzzles(compressed_bytes)))

    def encode(self, version: int = LATEST_VERSION, prefix: str = OFFER_PREFIX) -> str:
        offer_bytes = self.compress(version=version)
        encoded = bech32_encode(prefix, convertbits(list(offer_bytes), 8, 5))
        return encoded

    @classmethod
    def decode(cls, offer_string: str) -> Offer:
        hrpgot, data = bech32_decode(offer_string, max_length=len(offer_string))
        if data is None:
            raise DecodeFormatError("Invalid offer string: bad bech32m encoding or checksum")
        try:
            decoded_bytes = bytes(convertbits(list(data), 5, 8, False))
            offer = cls.from_compressed(decoded_bytes)
        except CompressionVersionError as e:
            raise DecodeFormatError(f"Unsupported offer version {e.version_number}") from e
        except CompressedDataError as e:
            raise DecodeFormatError(f"Invalid offer compression: {e}") from e
        except (StreamableError, ValueError, EOFError) as e:
            raise DecodeFormatError(f"Invalid offer data: {e}") from e
        log.debug(f"Decoded offer {offer.name().hex()} with prefix {hrpgot}")
        return offer

    def to_json_dict(self) -> dict[str, Any]:
        return self.bundle.to_json_dict()

    def __bytes__(self) -> bytes:
        return bytes(self.bundle)

    @classmethod
    def from_bytes(cls, as_bytes: bytes) -> Offer:
        return cls(SpendBundle.from_bytes(as_bytes))
