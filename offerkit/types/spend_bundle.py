from __future__ import annotations

from dataclasses import dataclass

from chia_rs import AugSchemeMPL, G2Element
from chia_rs.sized_bytes import bytes32

from offerkit.types.blockchain_format.coin import Coin
from offerkit.types.coin_spend import CoinSpend
from offerkit.util.streamable import Streamable, streamable


@streamable
@dataclass(frozen=True)
class SpendBundle(Streamable):
    """
    This is a list of coins being spent along with their solution programs, and a single
    aggregated signature. This is the object that most closely corresponds to a bitcoin
    transaction (although because of non-interactive signature aggregation, the boundaries
    between transactions are more flexible than in bitcoin).
    """

    coin_spends: list[CoinSpend]
    aggregated_signature: G2Element

    @classmethod
    def aggregate(cls, spend_bundles: list[SpendBundle]) -> SpendBundle:
        coin_spends: list[CoinSpend] = []
        sigs: list[G2Element] = []
        for bundle in spend_bundles:
            coin_spends += bundle.coin_spends
            sigs.append(bundle.aggregated_signature)
        aggregated_signature = AugSchemeMPL.aggregate(sigs)
        return cls(coin_spends, aggregated_signature)

    def additions(self) -> list[Coin]:
        items: list[Coin] = []
        for cs in self.coin_spends:
            items.extend(cs.additions())
        return items

    def removals(self) -> list[Coin]:
        return [cs.coin for cs in self.coin_spends]

    def fees(self) -> int:
        """Unsafe to use for fees validation!!!"""
        amount_in = sum(c.amount for c in self.removals())
        amount_out = sum(c.amount for c in self.additions())
        return amount_in - amount_out

    def name(self) -> bytes32:
        return self.get_hash()
