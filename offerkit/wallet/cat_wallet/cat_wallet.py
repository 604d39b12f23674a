from __future__ import annotations

import logging
from typing import Any, Optional

from chia_rs.sized_bytes import bytes32
from chia_rs.sized_ints import uint64

from offerkit.rpc.ledger_query import LedgerQuery
from offerkit.types.announcement import Announcement
from offerkit.types.blockchain_format.coin import Coin
from offerkit.types.blockchain_format.program import Program
from offerkit.types.coin_spend import CoinSpend
from offerkit.util.errors import UpstreamQueryFailure
from offerkit.util.hash import std_hash
from offerkit.wallet.asset_types import TokenAsset, puzzle_for_asset, puzzle_hash_for_asset
from offerkit.wallet.cat_wallet.cat_utils import (
    SpendableCAT,
    get_innerpuzzle_from_puzzle,
    match_cat_puzzle,
    unsigned_spend_bundle_for_spendable_cats,
)
from offerkit.wallet.lineage_proof import LineageProof
from offerkit.wallet.payment import Payment
from offerkit.wallet.puzzles.puzzle_utils import make_assert_coin_announcement, make_create_coin_announcement
from offerkit.wallet.puzzles.template_set import CAT_MOD
from offerkit.wallet.util.tx_config import DEFAULT_COIN_SELECTION_CONFIG, CoinSelectionConfig
from offerkit.wallet.wallet import Wallet, sorted_coins


class CATWallet:
    """
    Spends CAT coins of one asset whose inner puzzle is the standard wallet puzzle.
    Lineage proofs are looked up on the ledger for every spend.
    """

    standard_wallet: Wallet
    asset_id: bytes32
    asset: TokenAsset
    ledger: LedgerQuery
    log: logging.Logger

    def __init__(
        self,
        standard_wallet: Wallet,
        asset_id: bytes32,
        ledger: LedgerQuery,
        log: Optional[logging.Logger] = None,
    ) -> None:
        self.standard_wallet = standard_wallet
        self.asset_id = asset_id
        self.asset = TokenAsset(asset_id)
        self.ledger = ledger
        self.log = log if log is not None else logging.getLogger(__name__)

    @property
    def cat_puzzle(self) -> Program:
        return puzzle_for_asset(self.asset, self.standard_wallet.puzzle)

    @property
    def cat_puzzle_hash(self) -> bytes32:
        return puzzle_hash_for_asset(self.asset, self.standard_wallet.puzzle_hash)

    async def get_lineage_proof_for_coin(self, coin: Coin) -> LineageProof:
        parent_record = await self.ledger.get_coin_record_by_name(coin.parent_coin_info)
        if parent_record is None:
            raise UpstreamQueryFailure(f"parent coin {coin.parent_coin_info.hex()} not found")
        parent_spend = await self.ledger.get_puzzle_and_solution(
            coin.parent_coin_info, parent_record.spent_block_index
        )
        if parent_spend is None:
            raise UpstreamQueryFailure(f"spend of parent coin {coin.parent_coin_info.hex()} not found")

        args = match_cat_puzzle(parent_spend.puzzle_reveal)
        if args is None:
            raise ValueError(f"parent of {coin.name().hex()} is not a CAT, eve spends are not supported")
        _, asset_id, _ = args
        if bytes32(asset_id.as_atom()) != self.asset_id:
            raise ValueError(f"parent of {coin.name().hex()} is a CAT of another asset")

        parent_inner_puzzle = get_innerpuzzle_from_puzzle(parent_spend.puzzle_reveal)
        parent_coin = parent_record.coin
        return LineageProof(
            parent_coin.parent_coin_info, parent_inner_puzzle.get_tree_hash(), uint64(parent_coin.amount)
        )

    async def generate_spend_list(
        self,
        amount: uint64,
        target_puzzle_hash: bytes32,
        spendable_coins: list[Coin],
        extra_conditions: Optional[list[Any]] = None,
        memos: Optional[list[bytes]] = None,
        coin_selection_config: CoinSelectionConfig = DEFAULT_COIN_SELECTION_CONFIG,
    ) -> list[CoinSpend]:
        if extra_conditions is None:
            extra_conditions = []
        if memos is None:
            memos = []
        cat_coins = sorted_coins(
            await self.standard_wallet.select_coins(amount, spendable_coins, coin_selection_config)
        )
        selected_cat_amount = sum(c.amount for c in cat_coins)
        change = selected_cat_amount - amount
        self.log.debug(f"Spending {len(cat_coins)} CAT coins of {self.asset_id.hex()} for {amount}, change {change}")

        primaries = [Payment(target_puzzle_hash, amount, [target_puzzle_hash, *memos])]
        if change > 0:
            change_puzhash = self.standard_wallet.puzzle_hash
            primaries.append(Payment(change_puzhash, uint64(change), [change_puzhash]))

        message = std_hash(b"".join([c.name() for c in cat_coins]))
        announcement = Announcement(cat_coins[0].name(), message)

        spendable_cat_list = []
        for index, coin in enumerate(cat_coins):
            if index == 0:
                innersol = self.standard_wallet.make_solution(
                    primaries=primaries,
                    conditions=[*extra_conditions, make_create_coin_announcement(message)],
                )
            else:
                innersol = self.standard_wallet.make_solution(
                    primaries=[], conditions=[make_assert_coin_announcement(announcement.name())]
                )
            lineage_proof = await self.get_lineage_proof_for_coin(coin)
            spendable_cat_list.append(
                SpendableCAT(
                    coin,
                    self.asset_id,
                    self.standard_wallet.puzzle,
                    innersol,
                    lineage_proof=lineage_proof,
                )
            )

        cat_spend_bundle = unsigned_spend_bundle_for_spendable_cats(CAT_MOD, spendable_cat_list)
        return cat_spend_bundle.coin_spends
