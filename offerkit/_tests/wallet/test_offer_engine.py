from __future__ import annotations

import pytest
from chia_rs import G2Element
from chia_rs.sized_ints import uint64

from offerkit._tests.util.fake_ledger import ASSET_A, ASSET_B, FakeLedger
from offerkit._tests.util.spend_tools import conditions, verify_bundle
from offerkit.consensus.chains import MAINNET, NETWORKS, TESTNET11, StaticChainProvider
from offerkit.rpc.ledger_query import TimeoutLedgerQuery
from offerkit.types.condition_opcodes import ConditionOpcode
from offerkit.util.errors import ErrorCode, InsufficientBalance, InsufficientFunds
from offerkit.wallet.asset_types import OfferAsset, TokenAsset
from offerkit.wallet.cat_wallet.cat_utils import cat_puzzle_hash
from offerkit.wallet.puzzles.template_set import OFFER_MOD_HASH
from offerkit.wallet.trading.offer import ZERO_32, NotarizedPayment, Offer, settlement_puzzle_hash
from offerkit.wallet.trading.offer_engine import OfferEngine
from offerkit.wallet.wallet import WalletKeys

MAINNET_DATA = NETWORKS[MAINNET].agg_sig_me_additional_data


def asserted_announcements(offer: Offer, index: int) -> list[bytes]:
    cwas = conditions(offer.offered_spends()[index]).get(ConditionOpcode.ASSERT_PUZZLE_ANNOUNCEMENT, [])
    return [cwa.vars[0] for cwa in cwas]


def test_engine_bounds_ledger_queries(offer_engine: OfferEngine) -> None:
    assert isinstance(offer_engine.ledger, TimeoutLedgerQuery)


@pytest.mark.anyio
async def test_xch_for_token(offer_engine: OfferEngine, wallet_keys: WalletKeys, ledger: FakeLedger) -> None:
    own_ph = wallet_keys.puzzle_hash
    coin = ledger.add_plain_coin(own_ph, 1000)
    offer = await offer_engine.create_offer(
        [OfferAsset(ASSET_A, uint64(500))], [OfferAsset(None, uint64(600))], fee=uint64(10)
    )

    declaration, funding = offer.bundle.coin_spends
    assert declaration.coin.parent_coin_info == ZERO_32
    assert declaration.coin.amount == 0
    assert declaration.coin.puzzle_hash == settlement_puzzle_hash(TokenAsset(ASSET_A))
    assert funding.coin == coin

    funding_conditions = conditions(funding)
    outputs = {(c.puzzle_hash, c.amount) for c in funding.additions()}
    assert outputs == {(OFFER_MOD_HASH, 600), (own_ph, 390)}
    assert funding.reserved_fee() == 10
    payment = NotarizedPayment(own_ph, uint64(500), [own_ph], ZERO_32)
    expected = payment.announcement(settlement_puzzle_hash(TokenAsset(ASSET_A))).name()
    assert [cwa.vars[0] for cwa in funding_conditions[ConditionOpcode.ASSERT_PUZZLE_ANNOUNCEMENT]] == [expected]

    assert verify_bundle(offer.bundle, MAINNET_DATA)
    assert ledger.queries == ["get_coin_list"]


@pytest.mark.anyio
async def test_every_requested_asset_is_asserted(
    offer_engine: OfferEngine, wallet_keys: WalletKeys, ledger: FakeLedger
) -> None:
    ledger.add_plain_coin(wallet_keys.puzzle_hash, 1000)
    requested = [OfferAsset(ASSET_A, uint64(5)), OfferAsset(ASSET_B, uint64(7)), OfferAsset(None, uint64(9), b"hi")]
    offer = await offer_engine.create_offer(requested, [OfferAsset(None, uint64(100))])

    assert len(offer.declaration_spends()) == 3
    assert offer.get_requested_amounts() == {ASSET_A: 5, ASSET_B: 7, None: 9}
    own_ph = wallet_keys.puzzle_hash
    assert offer.get_requested_payments()[None] == [NotarizedPayment(own_ph, uint64(9), [b"hi"], ZERO_32)]
    settlement_a = settlement_puzzle_hash(TokenAsset(ASSET_A))
    settlement_b = settlement_puzzle_hash(TokenAsset(ASSET_B))
    expected = [
        NotarizedPayment(own_ph, uint64(5), [own_ph], ZERO_32).announcement(settlement_a).name(),
        NotarizedPayment(own_ph, uint64(7), [own_ph], ZERO_32).announcement(settlement_b).name(),
        NotarizedPayment(own_ph, uint64(9), [b"hi"], ZERO_32).announcement(OFFER_MOD_HASH).name(),
    ]
    assert asserted_announcements(offer, 0) == expected
    assert offer.fees() == 0


@pytest.mark.anyio
async def test_request_only_offer(offer_engine: OfferEngine, ledger: FakeLedger) -> None:
    offer = await offer_engine.create_offer([OfferAsset(ASSET_A, uint64(1))], [])
    assert offer.bundle.coin_spends == offer.declaration_spends()
    assert offer.bundle.aggregated_signature == G2Element()
    assert ledger.queries == []


@pytest.mark.anyio
async def test_token_for_xch_with_fee(offer_engine: OfferEngine, wallet_keys: WalletKeys, ledger: FakeLedger) -> None:
    own_ph = wallet_keys.puzzle_hash
    cat_coin = ledger.add_cat_coin(ASSET_A, wallet_keys.puzzle, 300)
    plain_coin = ledger.add_plain_coin(own_ph, 50)
    offer = await offer_engine.create_offer(
        [OfferAsset(None, uint64(1000))], [OfferAsset(ASSET_A, uint64(200), b"thanks")], fee=uint64(5)
    )

    cat_spend, fee_spend = offer.offered_spends()
    assert cat_spend.coin == cat_coin
    assert fee_spend.coin == plain_coin
    cat_outputs = {(c.puzzle_hash, c.amount) for c in cat_spend.additions()}
    assert cat_outputs == {(settlement_puzzle_hash(TokenAsset(ASSET_A)), 200), (cat_puzzle_hash(ASSET_A, own_ph), 100)}
    expected = NotarizedPayment(own_ph, uint64(1000), [], ZERO_32).announcement(OFFER_MOD_HASH).name()
    assert asserted_announcements(offer, 0) == [expected]

    # the fee rides on a plain spend of its own that asserts nothing
    assert asserted_announcements(offer, 1) == []
    assert fee_spend.reserved_fee() == 5
    assert [(c.puzzle_hash, c.amount) for c in fee_spend.additions()] == [(own_ph, 45)]

    assert offer.get_offered_amounts() == {ASSET_A: 200}
    assert offer.fees() == 5
    assert verify_bundle(offer.bundle, MAINNET_DATA)


@pytest.mark.anyio
async def test_fee_is_paid_once(offer_engine: OfferEngine, wallet_keys: WalletKeys, ledger: FakeLedger) -> None:
    own_ph = wallet_keys.puzzle_hash
    ledger.add_cat_coin(ASSET_A, wallet_keys.puzzle, 100)
    small = ledger.add_plain_coin(own_ph, 50)
    large = ledger.add_plain_coin(own_ph, 500)
    offer = await offer_engine.create_offer(
        [OfferAsset(ASSET_B, uint64(1))],
        [OfferAsset(ASSET_A, uint64(100)), OfferAsset(None, uint64(300))],
        fee=uint64(5),
    )
    _, fee_spend, xch_spend = offer.offered_spends()
    # coins used for the fee are not selected again
    assert fee_spend.coin == small
    assert xch_spend.coin == large
    assert sum(cs.reserved_fee() for cs in offer.bundle.coin_spends if cs.coin.amount > 0) == 5
    assert offer.get_offered_amounts() == {ASSET_A: 100, None: 300}


@pytest.mark.anyio
async def test_same_asset_twice_uses_distinct_coins(
    offer_engine: OfferEngine, wallet_keys: WalletKeys, ledger: FakeLedger
) -> None:
    ledger.add_plain_coin(wallet_keys.puzzle_hash, 100)
    ledger.add_plain_coin(wallet_keys.puzzle_hash, 40)
    offer = await offer_engine.create_offer(
        [OfferAsset(ASSET_A, uint64(1))], [OfferAsset(None, uint64(30)), OfferAsset(None, uint64(30))]
    )
    removals = offer.removals()
    assert len(removals) == len(set(removals)) == 2
    assert offer.get_offered_amounts() == {None: 60}


@pytest.mark.anyio
async def test_same_token_twice_uses_distinct_coins(
    offer_engine: OfferEngine, wallet_keys: WalletKeys, ledger: FakeLedger
) -> None:
    first = ledger.add_cat_coin(ASSET_A, wallet_keys.puzzle, 150)
    second = ledger.add_cat_coin(ASSET_A, wallet_keys.puzzle, 150)
    offer = await offer_engine.create_offer(
        [OfferAsset(None, uint64(1))], [OfferAsset(ASSET_A, uint64(100)), OfferAsset(ASSET_A, uint64(100))]
    )
    removals = offer.removals()
    assert len(removals) == len(set(removals)) == 2
    assert set(removals) == {first, second}
    assert offer.get_offered_amounts() == {ASSET_A: 200}


@pytest.mark.anyio
async def test_same_token_twice_never_reuses_a_coin(
    offer_engine: OfferEngine, wallet_keys: WalletKeys, ledger: FakeLedger
) -> None:
    ledger.add_cat_coin(ASSET_A, wallet_keys.puzzle, 300)
    with pytest.raises(InsufficientFunds):
        await offer_engine.create_offer(
            [OfferAsset(None, uint64(1))], [OfferAsset(ASSET_A, uint64(100)), OfferAsset(ASSET_A, uint64(100))]
        )


@pytest.mark.anyio
async def test_insufficient_balance(offer_engine: OfferEngine, wallet_keys: WalletKeys, ledger: FakeLedger) -> None:
    ledger.add_cat_coin(ASSET_A, wallet_keys.puzzle, 300)
    with pytest.raises(InsufficientBalance) as e:
        await offer_engine.create_offer([OfferAsset(None, uint64(1))], [OfferAsset(ASSET_A, uint64(500))])
    assert e.value.code == ErrorCode.INSUFFICIENT_BALANCE
    assert (e.value.asset_id, e.value.balance, e.value.amount) == (ASSET_A.hex(), 300, 500)


@pytest.mark.anyio
async def test_balance_covers_every_entry_of_a_token(
    offer_engine: OfferEngine, wallet_keys: WalletKeys, ledger: FakeLedger
) -> None:
    ledger.add_cat_coin(ASSET_A, wallet_keys.puzzle, 300)
    ledger.add_cat_coin(ASSET_A, wallet_keys.puzzle, 50)
    with pytest.raises(InsufficientBalance) as e:
        await offer_engine.create_offer(
            [OfferAsset(None, uint64(1))], [OfferAsset(ASSET_A, uint64(200)), OfferAsset(ASSET_A, uint64(200))]
        )
    assert (e.value.balance, e.value.amount) == (350, 400)


@pytest.mark.anyio
async def test_insufficient_plain_funds(offer_engine: OfferEngine, wallet_keys: WalletKeys, ledger: FakeLedger) -> None:
    ledger.add_plain_coin(wallet_keys.puzzle_hash, 100)
    with pytest.raises(InsufficientFunds):
        await offer_engine.create_offer([OfferAsset(ASSET_A, uint64(1))], [OfferAsset(None, uint64(100))], uint64(1))


@pytest.mark.anyio
async def test_signature_follows_selected_chain(wallet_keys: WalletKeys, ledger: FakeLedger) -> None:
    provider = StaticChainProvider(MAINNET)
    engine = OfferEngine(wallet_keys, ledger, provider)
    ledger.add_plain_coin(wallet_keys.puzzle_hash, 1000)
    provider.switch_chain(TESTNET11)
    offer_string = await engine.create_offer_string([OfferAsset(ASSET_A, uint64(1))], [OfferAsset(None, uint64(10))])
    offer = Offer.decode(offer_string)
    assert verify_bundle(offer.bundle, NETWORKS[TESTNET11].agg_sig_me_additional_data)
    assert not verify_bundle(offer.bundle, MAINNET_DATA)
