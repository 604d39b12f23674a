from __future__ import annotations

import inspect
from typing import Any

from chia_rs import AugSchemeMPL, G1Element, G2Element

from offerkit.types.blockchain_format.program import INFINITE_COST
from offerkit.types.coin_spend import CoinSpend
from offerkit.types.spend_bundle import SpendBundle
from offerkit.util.condition_tools import conditions_dict_for_solution, pkm_pairs_for_conditions_dict


async def sign_coin_spends(
    coin_spends: list[CoinSpend],
    secret_key_for_public_key_f: Any,  # sync or async G1Element -> Optional[PrivateKey]
    additional_data: bytes,
    max_cost: int = INFINITE_COST,
) -> SpendBundle:
    """
    Runs every spend, collects the (public key, message) pairs its AGG_SIG conditions demand and
    signs each one with the key `secret_key_for_public_key_f` returns for that public key.

    Zero-amount spends (offer settlement declarations) only carry announcements and are skipped,
    so a bundle of nothing but declarations gets the identity signature.
    """
    pairs: list[tuple[G1Element, bytes]] = []
    for coin_spend in coin_spends:
        if coin_spend.coin.amount == 0:
            continue
        conditions_dict = conditions_dict_for_solution(coin_spend.puzzle_reveal, coin_spend.solution, max_cost)
        pairs.extend(pkm_pairs_for_conditions_dict(conditions_dict, coin_spend.coin, additional_data))

    signatures: list[G2Element] = []
    for pk, msg in pairs:
        secret_key = secret_key_for_public_key_f(pk)
        if inspect.isawaitable(secret_key):
            secret_key = await secret_key
        if secret_key is None or secret_key.get_g1() != pk:
            raise ValueError(f"no secret key for {pk}")
        signatures.append(AugSchemeMPL.sign(secret_key, msg))

    aggsig = AugSchemeMPL.aggregate(signatures)
    if pairs and not AugSchemeMPL.aggregate_verify([pk for pk, _ in pairs], [msg for _, msg in pairs], aggsig):
        raise ValueError("aggregate signature failed to verify")
    return SpendBundle(coin_spends, aggsig)
