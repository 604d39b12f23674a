from __future__ import annotations

import pytest
from chia_rs import AugSchemeMPL
from chia_rs.sized_bytes import bytes32
from chia_rs.sized_ints import uint64

from offerkit._tests.util.fake_ledger import TEST_SEED
from offerkit._tests.util.spend_tools import conditions
from offerkit.types.announcement import Announcement
from offerkit.types.blockchain_format.coin import Coin
from offerkit.types.condition_opcodes import ConditionOpcode
from offerkit.util.condition_tools import created_outputs_for_conditions_dict
from offerkit.util.errors import InsufficientFunds
from offerkit.util.hash import std_hash
from offerkit.wallet.derive_keys import master_sk_to_wallet_sk, master_sk_to_wallet_sk_unhardened
from offerkit.wallet.wallet import Wallet, WalletKeys, sorted_coins

TARGET_PH = bytes32(std_hash(b"target"))


def make_coin(puzzle_hash: bytes32, amount: int, parent: bytes = b"parent") -> Coin:
    return Coin(std_hash(parent + amount.to_bytes(8, "big")), puzzle_hash, uint64(amount))


def test_key_derivation(wallet_keys: WalletKeys) -> None:
    assert wallet_keys.wallet_sk == master_sk_to_wallet_sk(wallet_keys.master_sk, wallet_keys.index)
    unhardened = WalletKeys.from_seed(TEST_SEED, hardened=False)
    assert unhardened.wallet_sk == master_sk_to_wallet_sk_unhardened(unhardened.master_sk, unhardened.index)
    assert unhardened.puzzle_hash != wallet_keys.puzzle_hash
    assert WalletKeys.from_seed(TEST_SEED, index=1).puzzle_hash != wallet_keys.puzzle_hash
    assert wallet_keys.puzzle.get_tree_hash() == wallet_keys.puzzle_hash


def test_secret_key_for_public_key(wallet_keys: WalletKeys) -> None:
    assert wallet_keys.secret_key_for_public_key(wallet_keys.synthetic_pk) == wallet_keys.synthetic_sk
    assert wallet_keys.secret_key_for_public_key(wallet_keys.wallet_sk.get_g1()) == wallet_keys.wallet_sk
    other = AugSchemeMPL.key_gen(bytes([9] * 32)).get_g1()
    assert wallet_keys.secret_key_for_public_key(other) is None


def test_sorted_coins() -> None:
    coins = {make_coin(TARGET_PH, a) for a in (5, 50, 20)}
    assert [c.amount for c in sorted_coins(coins)] == [50, 20, 5]


@pytest.mark.anyio
async def test_generate_spend_list(wallet_keys: WalletKeys) -> None:
    wallet = Wallet(wallet_keys)
    coins = [make_coin(wallet.puzzle_hash, 100), make_coin(wallet.puzzle_hash, 50)]
    spends = await wallet.generate_spend_list(uint64(120), TARGET_PH, coins, fee=uint64(10), memos=[b"hello"])

    assert [cs.coin for cs in spends] == coins
    origin = coins[0]
    primary = conditions(spends[0])
    outputs = created_outputs_for_conditions_dict(primary, origin.name())
    assert {(c.puzzle_hash, c.amount) for c in outputs} == {(TARGET_PH, 120), (wallet.puzzle_hash, 20)}
    assert primary[ConditionOpcode.RESERVE_FEE][0].vars == [bytes([10])]

    message = std_hash(b"".join([c.name() for c in coins] + [c.name() for c in outputs]))
    assert primary[ConditionOpcode.CREATE_COIN_ANNOUNCEMENT][0].vars == [message]

    peer = conditions(spends[1])
    assert ConditionOpcode.CREATE_COIN not in peer
    assert peer[ConditionOpcode.ASSERT_COIN_ANNOUNCEMENT][0].vars == [Announcement(origin.name(), message).name()]

    for coin_spend in spends:
        assert coin_spend.puzzle_hash_matches()
        assert ConditionOpcode.AGG_SIG_ME in conditions(coin_spend)


@pytest.mark.anyio
async def test_fee_only_spend(wallet_keys: WalletKeys) -> None:
    wallet = Wallet(wallet_keys)
    coins = [make_coin(wallet.puzzle_hash, 100)]
    spends = await wallet.generate_spend_list(uint64(0), None, coins, fee=uint64(10))
    assert len(spends) == 1
    primary = conditions(spends[0])
    outputs = created_outputs_for_conditions_dict(primary, coins[0].name())
    assert [(c.puzzle_hash, c.amount) for c in outputs] == [(wallet.puzzle_hash, 90)]
    assert spends[0].reserved_fee() == 10


@pytest.mark.anyio
async def test_exact_amount_has_no_change(wallet_keys: WalletKeys) -> None:
    wallet = Wallet(wallet_keys)
    coins = [make_coin(wallet.puzzle_hash, 100), make_coin(wallet.puzzle_hash, 30)]
    spends = await wallet.generate_spend_list(uint64(30), TARGET_PH, coins)
    assert [cs.coin for cs in spends] == [coins[1]]
    assert [(c.puzzle_hash, c.amount) for c in spends[0].additions()] == [(TARGET_PH, 30)]


@pytest.mark.anyio
async def test_generate_spend_list_errors(wallet_keys: WalletKeys) -> None:
    wallet = Wallet(wallet_keys)
    coins = [make_coin(wallet.puzzle_hash, 100)]
    with pytest.raises(ValueError, match="target puzzle hash"):
        await wallet.generate_spend_list(uint64(10), None, coins)
    with pytest.raises(InsufficientFunds):
        await wallet.generate_spend_list(uint64(95), TARGET_PH, coins, fee=uint64(10))


def test_make_solution_without_conditions(wallet_keys: WalletKeys) -> None:
    wallet = Wallet(wallet_keys)
    bare = wallet.make_solution([])
    assert bare == wallet.make_solution([], conditions=[])
    assert wallet.make_solution([], fee=uint64(5)) != bare
    # a call with conditions leaves the default untouched
    wallet.make_solution([], conditions=[[1, b"\x00"]])
    assert wallet.make_solution([]) == bare
