from __future__ import annotations

import logging
import random
from typing import Optional

from chia_rs.sized_bytes import bytes32
from chia_rs.sized_ints import uint64, uint128

from offerkit.types.blockchain_format.coin import Coin
from offerkit.util.errors import InsufficientFunds
from offerkit.wallet.util.tx_config import CoinSelectionConfig

MAX_NUM_COINS = 500


def filter_spendable_coins(
    coins: list[Coin], config: CoinSelectionConfig, unconfirmed_removals: dict[bytes32, Coin]
) -> list[Coin]:
    """
    Drops coins already being spent, excluded coins and coins outside the configured amount range.
    The result is sorted by amount, largest first.
    """
    candidates = [
        coin
        for coin in coins
        if coin.name() not in unconfirmed_removals
        and coin.name() not in config.excluded_coin_ids
        and config.min_coin_amount <= coin.amount <= config.max_coin_amount
        and coin.amount not in config.excluded_coin_amounts
    ]
    candidates.sort(reverse=True, key=lambda coin: coin.amount)
    return candidates


async def select_coins(
    spendable_amount: uint128,
    coin_selection_config: CoinSelectionConfig,
    spendable_coins: list[Coin],
    unconfirmed_removals: dict[bytes32, Coin],
    log: logging.Logger,
    amount: uint128,
) -> set[Coin]:
    """
    Picks the coins that fund `amount`, trying in order:

    1. a single coin of exactly `amount`
    2. every coin smaller than `amount`, when together they make exactly `amount`
    3. the smallest single coin larger than `amount`, when the smaller coins can't cover it
    4. a randomized knapsack over the smaller coins, falling back to the largest of them
    """
    if amount > spendable_amount:
        message = (
            f"Can't select amount higher than our spendable balance. Amount: {amount}, spendable: {spendable_amount}"
        )
        log.warning(message)
        raise InsufficientFunds(message)

    log.debug(f"About to select coins for amount {amount}")
    candidates = filter_spendable_coins(spendable_coins, coin_selection_config, unconfirmed_removals)
    candidates_sum = sum(coin.amount for coin in candidates)

    # excluded or already-used coins can leave less than the balance suggested
    if candidates_sum < amount:
        raise InsufficientFunds(
            f"Transaction for {amount} is greater than max spendable balance in a block of {candidates_sum}. "
            "There may be other transactions pending or our minimum coin amount is too high."
        )
    if amount == 0 and candidates_sum == 0:
        raise InsufficientFunds(
            "No coins available to spend, you can not create a coin with an amount of 0, without already having coins."
        )

    exact_match = check_for_exact_match(candidates, uint64(amount))
    if exact_match is not None:
        log.debug(f"selected coin with an exact match: {exact_match.name()}")
        return {exact_match}

    smaller_coins = [coin for coin in candidates if coin.amount < amount]
    smaller_sum = sum(coin.amount for coin in smaller_coins)

    if smaller_sum == amount and amount != 0 and len(smaller_coins) < MAX_NUM_COINS:
        log.debug(f"Selected all {len(smaller_coins)} smaller coins because they sum to the target exactly")
        return set(smaller_coins)

    if smaller_sum > amount:
        coin_set = knapsack_coin_algorithm(smaller_coins, amount, coin_selection_config.max_coin_amount, MAX_NUM_COINS)
        if coin_set is not None:
            log.debug(f"Selected {len(coin_set)} coins from knapsack algorithm")
            return coin_set
        coin_set = sum_largest_coins(amount, smaller_coins)
        if coin_set is not None and len(coin_set) <= MAX_NUM_COINS:
            return coin_set

    # the smaller coins fall short, or covering the amount with them takes too many coins
    larger_coin = select_smallest_coin_over_target(amount, candidates)
    if larger_coin is None:
        raise InsufficientFunds(
            f"Transaction of {amount} mojo would use more than {MAX_NUM_COINS} coins. Try sending a smaller amount"
        )
    log.debug(f"Selected closest greater coin: {larger_coin.name()}")
    return {larger_coin}


# The algorithms below follow https://murch.one/wp-content/uploads/2016/11/erhardt2016coinselection.pdf
# and expect coins sorted by amount, largest first.


def check_for_exact_match(coin_list: list[Coin], target: uint64) -> Optional[Coin]:
    return next((coin for coin in coin_list if coin.amount == target), None)


def select_smallest_coin_over_target(target: uint128, sorted_coin_list: list[Coin]) -> Optional[Coin]:
    return next((coin for coin in reversed(sorted_coin_list) if coin.amount >= target), None)


def knapsack_coin_algorithm(
    smaller_coins: list[Coin], target: uint128, max_coin_amount: int, max_num_coins: int, seed: bytes = b"knapsack seed"
) -> Optional[set[Coin]]:
    """
    Randomized search for the set of coins whose total is closest to, but at least, `target`. Each
    round takes every coin with even odds, then tops up with the rest in order until the target is
    passed. An exact hit returns immediately.
    """
    rng = random.Random(seed)
    best_sum = max_coin_amount
    best_set: Optional[set[Coin]] = None
    for _ in range(1000):
        selected: set[Coin] = set()
        selected_sum = 0
        target_reached = False
        for n_pass in range(2):
            for coin in smaller_coins:
                take = bool(rng.getrandbits(1)) if n_pass == 0 else coin not in selected
                if not take:
                    continue
                if len(selected) > max_num_coins:
                    break
                selected_sum += coin.amount
                selected.add(coin)
                if selected_sum == target:
                    return selected
                if selected_sum > target:
                    target_reached = True
                    if selected_sum < best_sum:
                        best_set = selected.copy()
                        best_sum = selected_sum
                        # keep searching from just below the target
                        selected_sum -= coin.amount
                        selected.remove(coin)
            if target_reached:
                break
    return best_set


def sum_largest_coins(target: uint128, sorted_coins: list[Coin]) -> Optional[set[Coin]]:
    total = 0
    for count, coin in enumerate(sorted_coins, start=1):
        total += coin.amount
        if total >= target:
            return set(sorted_coins[:count])
    return None
