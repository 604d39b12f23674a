from __future__ import annotations

from typing import Callable

from chia_rs import AugSchemeMPL, PrivateKey
from chia_rs.sized_ints import uint32

# EIP 2334 bls key derivation
# https://eips.ethereum.org/EIPS/eip-2334
# 12381 = bls spec number
# 8444 = Chia blockchain number and port number
# 2 = wallet key


def _derive_path_with(
    sk: PrivateKey, path: list[int], derivation_function: Callable[[PrivateKey, int], PrivateKey]
) -> PrivateKey:
    for index in path:
        sk = derivation_function(sk, index)
    return sk


def _derive_path(sk: PrivateKey, path: list[int]) -> PrivateKey:
    return _derive_path_with(sk, path, AugSchemeMPL.derive_child_sk)


def _derive_path_unhardened(sk: PrivateKey, path: list[int]) -> PrivateKey:
    return _derive_path_with(sk, path, AugSchemeMPL.derive_child_sk_unhardened)


def master_sk_from_seed(seed: bytes) -> PrivateKey:
    return AugSchemeMPL.key_gen(seed)


def master_sk_to_wallet_sk_intermediate(master: PrivateKey) -> PrivateKey:
    return _derive_path(master, [12381, 8444, 2])


def master_sk_to_wallet_sk(master: PrivateKey, index: uint32) -> PrivateKey:
    intermediate = master_sk_to_wallet_sk_intermediate(master)
    return _derive_path(intermediate, [index])


def master_sk_to_wallet_sk_unhardened_intermediate(master: PrivateKey) -> PrivateKey:
    return _derive_path_unhardened(master, [12381, 8444, 2])


def master_sk_to_wallet_sk_unhardened(master: PrivateKey, index: uint32) -> PrivateKey:
    intermediate = master_sk_to_wallet_sk_unhardened_intermediate(master)
    return _derive_path_unhardened(intermediate, [index])
