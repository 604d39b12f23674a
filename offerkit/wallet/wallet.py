from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import cached_property
from typing import Any, Optional

from chia_rs import G1Element, PrivateKey
from chia_rs.sized_bytes import bytes32
from chia_rs.sized_ints import uint32, uint64, uint128

from offerkit.types.announcement import Announcement
from offerkit.types.blockchain_format.coin import Coin
from offerkit.types.blockchain_format.program import Program
from offerkit.types.coin_spend import CoinSpend, make_spend
from offerkit.util.hash import std_hash
from offerkit.util.keychain import mnemonic_to_seed
from offerkit.wallet.coin_selection import select_coins
from offerkit.wallet.derive_keys import master_sk_from_seed, master_sk_to_wallet_sk, master_sk_to_wallet_sk_unhardened
from offerkit.wallet.payment import Payment
from offerkit.wallet.puzzles.p2_delegated_puzzle_or_hidden_puzzle import (
    DEFAULT_HIDDEN_PUZZLE_HASH,
    calculate_synthetic_secret_key,
    puzzle_for_synthetic_public_key,
    puzzle_hash_for_synthetic_public_key,
    solution_for_conditions,
)
from offerkit.wallet.puzzles.puzzle_utils import (
    make_assert_coin_announcement,
    make_create_coin_announcement,
    make_reserve_fee_condition,
)
from offerkit.wallet.util.tx_config import DEFAULT_COIN_SELECTION_CONFIG, CoinSelectionConfig


@dataclass(frozen=True)
class WalletKeys:
    """
    The key context of a single standard wallet: one derivation index, hardened or not,
    below a master key. Everything else is derived on first access.
    """

    master_sk: PrivateKey
    index: uint32 = uint32(0)
    hardened: bool = True

    @classmethod
    def from_seed(cls, seed: bytes, index: int = 0, hardened: bool = True) -> WalletKeys:
        return cls(master_sk_from_seed(seed), uint32(index), hardened)

    @classmethod
    def from_mnemonic(cls, mnemonic: str, passphrase: str = "", index: int = 0, hardened: bool = True) -> WalletKeys:
        return cls.from_seed(mnemonic_to_seed(mnemonic, passphrase), index, hardened)

    @cached_property
    def wallet_sk(self) -> PrivateKey:
        if self.hardened:
            return master_sk_to_wallet_sk(self.master_sk, self.index)
        return master_sk_to_wallet_sk_unhardened(self.master_sk, self.index)

    @cached_property
    def synthetic_sk(self) -> PrivateKey:
        return calculate_synthetic_secret_key(self.wallet_sk, DEFAULT_HIDDEN_PUZZLE_HASH)

    @property
    def synthetic_pk(self) -> G1Element:
        return self.synthetic_sk.get_g1()

    @cached_property
    def puzzle(self) -> Program:
        return puzzle_for_synthetic_public_key(self.synthetic_pk)

    @cached_property
    def puzzle_hash(self) -> bytes32:
        return puzzle_hash_for_synthetic_public_key(self.synthetic_pk)

    def secret_key_for_public_key(self, public_key: G1Element) -> Optional[PrivateKey]:
        for sk in (self.synthetic_sk, self.wallet_sk):
            if sk.get_g1() == public_key:
                return sk
        return None


class Wallet:
    """
    The standard (plain asset) wallet. It owns no state beyond its keys: coins are handed
    in by the caller, freshly fetched from the ledger for every offer.
    """

    keys: WalletKeys
    log: logging.Logger

    def __init__(self, keys: WalletKeys, log: Optional[logging.Logger] = None) -> None:
        self.keys = keys
        self.log = log if log is not None else logging.getLogger(__name__)

    @property
    def puzzle(self) -> Program:
        return self.keys.puzzle

    @property
    def puzzle_hash(self) -> bytes32:
        return self.keys.puzzle_hash

    def make_solution(
        self,
        primaries: list[Payment],
        conditions: Optional[list[Any]] = None,
        fee: uint64 = uint64(0),
    ) -> Program:
        if fee < 0:
            raise ValueError(f"negative fee {fee}")
        condition_list: list[Any] = [] if conditions is None else list(conditions)
        for primary in primaries:
            condition_list.append(primary.as_condition())
        if fee:
            condition_list.append(make_reserve_fee_condition(fee))
        return solution_for_conditions(condition_list)

    async def select_coins(
        self,
        amount: uint64,
        spendable_coins: list[Coin],
        coin_selection_config: CoinSelectionConfig = DEFAULT_COIN_SELECTION_CONFIG,
    ) -> set[Coin]:
        spendable_amount = uint128(sum(coin.amount for coin in spendable_coins))
        return await select_coins(
            spendable_amount,
            coin_selection_config,
            spendable_coins,
            {},
            self.log,
            uint128(amount),
        )

    async def generate_spend_list(
        self,
        amount: uint64,
        target_puzzle_hash: Optional[bytes32],
        spendable_coins: list[Coin],
        fee: uint64 = uint64(0),
        extra_conditions: Optional[list[Any]] = None,
        memos: Optional[list[bytes]] = None,
        coin_selection_config: CoinSelectionConfig = DEFAULT_COIN_SELECTION_CONFIG,
    ) -> list[CoinSpend]:
        """
        Spends enough of `spendable_coins` to pay `amount` to `target_puzzle_hash` plus `fee`.
        The first selected coin carries every condition; the others only assert its coin
        announcement so that none of them can be spent on its own.
        """
        if target_puzzle_hash is None and amount != 0:
            raise ValueError("a payment needs a target puzzle hash")
        if extra_conditions is None:
            extra_conditions = []
        if memos is None:
            memos = []
        total_amount = amount + fee
        coins = sorted_coins(await self.select_coins(uint64(total_amount), spendable_coins, coin_selection_config))
        spend_value = sum(coin.amount for coin in coins)
        change = spend_value - total_amount
        self.log.debug(f"Spending {len(coins)} coins worth {spend_value} for {amount} + fee {fee}, change {change}")

        primaries: list[Payment] = []
        if target_puzzle_hash is not None:
            primaries.append(Payment(target_puzzle_hash, amount, memos))
        if change > 0:
            primaries.append(Payment(self.puzzle_hash, uint64(change)))

        origin = coins[0]
        message_list: list[bytes32] = [c.name() for c in coins]
        for primary in primaries:
            message_list.append(Coin(origin.name(), primary.puzzle_hash, primary.amount).name())
        message: bytes32 = std_hash(b"".join(message_list))
        primary_announcement = Announcement(origin.name(), message)

        spends: list[CoinSpend] = [
            make_spend(
                origin,
                self.puzzle,
                self.make_solution(
                    primaries=primaries,
                    conditions=[*extra_conditions, make_create_coin_announcement(message)],
                    fee=fee,
                ),
            )
        ]
        for coin in coins[1:]:
            solution = self.make_solution(
                primaries=[], conditions=[make_assert_coin_announcement(primary_announcement.name())]
            )
            spends.append(make_spend(coin, self.puzzle, solution))
        return spends


def sorted_coins(coins: set[Coin]) -> list[Coin]:
    # largest first, so the origin coin is stable across runs
    return sorted(coins, key=lambda c: (-c.amount, c.name()))
