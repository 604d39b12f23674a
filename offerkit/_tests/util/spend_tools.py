from __future__ import annotations

from chia_rs import AugSchemeMPL, G1Element

from offerkit.types.blockchain_format.program import INFINITE_COST
from offerkit.types.coin_spend import CoinSpend
from offerkit.types.condition_opcodes import ConditionOpcode
from offerkit.types.condition_with_args import ConditionWithArgs
from offerkit.types.spend_bundle import SpendBundle
from offerkit.util.condition_tools import conditions_dict_for_solution, pkm_pairs_for_conditions_dict


def conditions(coin_spend: CoinSpend) -> dict[ConditionOpcode, list[ConditionWithArgs]]:
    return conditions_dict_for_solution(coin_spend.puzzle_reveal, coin_spend.solution, INFINITE_COST)


def verify_bundle(bundle: SpendBundle, additional_data: bytes) -> bool:
    """Checks the aggregate signature against every AGG_SIG condition of the non-zero spends."""
    pks: list[G1Element] = []
    msgs: list[bytes] = []
    for coin_spend in bundle.coin_spends:
        if coin_spend.coin.amount == 0:
            continue
        for pk, msg in pkm_pairs_for_conditions_dict(conditions(coin_spend), coin_spend.coin, additional_data):
            pks.append(pk)
            msgs.append(msg)
    return AugSchemeMPL.aggregate_verify(pks, msgs, bundle.aggregated_signature)
