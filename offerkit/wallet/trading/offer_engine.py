from __future__ import annotations

import logging
from typing import Any, Optional

from chia_rs.sized_bytes import bytes32
from chia_rs.sized_ints import uint64

from offerkit.consensus.chains import ChainConfigProvider
from offerkit.rpc.ledger_query import DEFAULT_QUERY_TIMEOUT, LedgerQuery, TimeoutLedgerQuery
from offerkit.types.blockchain_format.coin import Coin
from offerkit.types.blockchain_format.program import Program
from offerkit.types.coin_spend import CoinSpend, make_spend
from offerkit.types.spend_bundle import SpendBundle
from offerkit.util.errors import InsufficientBalance
from offerkit.wallet.asset_types import OfferAsset, TokenAsset
from offerkit.wallet.cat_wallet.cat_wallet import CATWallet
from offerkit.wallet.puzzles.puzzle_utils import make_assert_puzzle_announcement
from offerkit.wallet.sign_coin_spends import sign_coin_spends
from offerkit.wallet.trading.offer import (
    OFFER_PREFIX,
    ZERO_32,
    NotarizedPayment,
    Offer,
    settlement_puzzle,
)
from offerkit.wallet.util.puzzle_compression import LATEST_VERSION
from offerkit.wallet.util.tx_config import DEFAULT_COIN_SELECTION_CONFIG, CoinSelectionConfig
from offerkit.wallet.wallet import Wallet, WalletKeys


class OfferEngine:
    """
    Builds signed offers for one wallet key. Keys, ledger and chain selection are handed in;
    coins are fetched from the ledger on every call and nothing is kept between calls.
    """

    keys: WalletKeys
    ledger: LedgerQuery
    chain_provider: ChainConfigProvider
    coin_selection_config: CoinSelectionConfig
    log: logging.Logger

    def __init__(
        self,
        keys: WalletKeys,
        ledger: LedgerQuery,
        chain_provider: ChainConfigProvider,
        query_timeout: float = DEFAULT_QUERY_TIMEOUT,
        coin_selection_config: CoinSelectionConfig = DEFAULT_COIN_SELECTION_CONFIG,
        log: Optional[logging.Logger] = None,
    ) -> None:
        self.keys = keys
        if isinstance(ledger, TimeoutLedgerQuery):
            self.ledger = ledger
        else:
            self.ledger = TimeoutLedgerQuery(ledger, query_timeout)
        self.chain_provider = chain_provider
        self.coin_selection_config = coin_selection_config
        self.log = log if log is not None else logging.getLogger(__name__)

    async def generate_secure_bundle(
        self,
        request_assets: list[OfferAsset],
        offer_assets: list[OfferAsset],
        fee: uint64 = uint64(0),
    ) -> SpendBundle:
        wallet = Wallet(self.keys, self.log)
        own_puzzle_hash = wallet.puzzle_hash

        # what we want: one declaration spend and one announcement assertion per requested asset
        declaration_spends: list[CoinSpend] = []
        announcement_assertions: list[Any] = []
        for requested in request_assets:
            memos: list[bytes] = []
            if isinstance(requested.asset, TokenAsset):
                memos.append(own_puzzle_hash)
            if requested.memo is not None:
                memos.append(requested.memo)
            payment = NotarizedPayment(own_puzzle_hash, requested.amount, memos, ZERO_32)
            settlement = settlement_puzzle(requested.asset)
            settlement_ph = settlement.get_tree_hash()
            declaration_spends.append(
                make_spend(Coin(ZERO_32, settlement_ph, uint64(0)), settlement, Program.to([payment.to_program()]))
            )
            announcement_assertions.append(make_assert_puzzle_announcement(payment.announcement(settlement_ph).name()))

        # what we give
        plain_coins: Optional[list[Coin]] = None
        used_plain_coins: list[Coin] = []
        cat_coins: dict[bytes32, list[Coin]] = {}
        used_cat_coins: dict[bytes32, list[Coin]] = {}
        offered_cat_totals: dict[bytes32, int] = {}
        fee_paid = fee == 0
        offered_spends: list[CoinSpend] = []

        async def plain_spend_list(amount: uint64, **kwargs: Any) -> list[CoinSpend]:
            nonlocal plain_coins
            if plain_coins is None:
                plain_coins = await self.ledger.get_coin_list(own_puzzle_hash)
            spends = await wallet.generate_spend_list(
                amount,
                spendable_coins=plain_coins,
                coin_selection_config=self.coin_selection_config.excluding(used_plain_coins),
                **kwargs,
            )
            used_plain_coins.extend(spend.coin for spend in spends)
            return spends

        for offered in offer_assets:
            memos = [] if offered.memo is None else [offered.memo]
            asset = offered.asset
            if isinstance(asset, TokenAsset):
                cat_wallet = CATWallet(wallet, asset.asset_id, self.ledger, self.log)
                cat_ph = cat_wallet.cat_puzzle_hash
                # the balance has to cover every entry offered for this asset so far
                offered_total = offered_cat_totals.get(asset.asset_id, 0) + offered.amount
                balance = await self.ledger.get_balance(cat_ph)
                if balance < offered_total:
                    raise InsufficientBalance(asset.asset_id.hex(), balance, offered_total)
                offered_cat_totals[asset.asset_id] = offered_total
                if asset.asset_id not in cat_coins:
                    cat_coins[asset.asset_id] = await self.ledger.get_coin_list(cat_ph)
                used = used_cat_coins.setdefault(asset.asset_id, [])
                cat_spends = await cat_wallet.generate_spend_list(
                    offered.amount,
                    Offer.ph(),
                    cat_coins[asset.asset_id],
                    extra_conditions=announcement_assertions,
                    memos=memos,
                    coin_selection_config=self.coin_selection_config.excluding(used),
                )
                used.extend(spend.coin for spend in cat_spends)
                offered_spends.extend(cat_spends)
                if not fee_paid:
                    offered_spends.extend(await plain_spend_list(uint64(0), target_puzzle_hash=None, fee=fee))
                    fee_paid = True
            else:
                offered_spends.extend(
                    await plain_spend_list(
                        offered.amount,
                        target_puzzle_hash=Offer.ph(),
                        fee=uint64(0) if fee_paid else fee,
                        extra_conditions=announcement_assertions,
                        memos=memos,
                    )
                )
                fee_paid = True

        if not fee_paid:
            offered_spends.extend(await plain_spend_list(uint64(0), target_puzzle_hash=None, fee=fee))

        coin_spends = [*declaration_spends, *offered_spends]
        chain = self.chain_provider.get_chain()
        bundle = await sign_coin_spends(
            coin_spends,
            self.keys.secret_key_for_public_key,
            chain.agg_sig_me_additional_data,
        )
        self.log.info(
            f"Built offer bundle {bundle.name().hex()} on {chain.network_name}: "
            f"{len(declaration_spends)} requested, {len(offered_spends)} offered spends, fee {fee}"
        )
        return bundle

    async def create_offer(
        self,
        request_assets: list[OfferAsset],
        offer_assets: list[OfferAsset],
        fee: uint64 = uint64(0),
    ) -> Offer:
        return Offer(await self.generate_secure_bundle(request_assets, offer_assets, fee))

    async def create_offer_string(
        self,
        request_assets: list[OfferAsset],
        offer_assets: list[OfferAsset],
        fee: uint64 = uint64(0),
        version: int = LATEST_VERSION,
        prefix: str = OFFER_PREFIX,
    ) -> str:
        offer = await self.create_offer(request_assets, offer_assets, fee)
        return offer.encode(version=version, prefix=prefix)
