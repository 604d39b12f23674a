"""
Pay to delegated puzzle or hidden puzzle

This is the "standard coin" puzzle. The solution either reveals a hidden
puzzle committed to inside the public key, or supplies a delegated puzzle
(and its solution) signed by the curried-in key.

The curried key is "synthetic": the wallet public key plus an offset derived
from hashing it together with the hidden puzzle hash. Coins signed by this
library are always locked to the synthetic key for DEFAULT_HIDDEN_PUZZLE_HASH,
so the secret key used for AGG_SIG_ME is calculate_synthetic_secret_key of the
wallet secret key.

A spend carrying a plain list of conditions is solved as

    delegated_puzzle = puzzle_for_conditions(conditions)
    solution = Program.to([[], delegated_puzzle, []])
"""

from __future__ import annotations

import hashlib
from typing import Any

from chia_puzzles_py.programs import P2_DELEGATED_PUZZLE_OR_HIDDEN_PUZZLE
from chia_rs import G1Element, PrivateKey
from chia_rs.sized_bytes import bytes32
from clvm.casts import int_from_bytes

from offerkit.types.blockchain_format.program import Program
from offerkit.wallet.puzzles.p2_conditions import puzzle_for_conditions
from offerkit.wallet.util.curry_and_treehash import calculate_hash_of_quoted_mod_hash, curry_and_treehash

DEFAULT_HIDDEN_PUZZLE = Program.from_bytes(bytes.fromhex("ff0980"))

DEFAULT_HIDDEN_PUZZLE_HASH = DEFAULT_HIDDEN_PUZZLE.get_tree_hash()  # this puzzle `(x)` always fails

MOD = Program.from_bytes(P2_DELEGATED_PUZZLE_OR_HIDDEN_PUZZLE)

QUOTED_MOD_HASH = calculate_hash_of_quoted_mod_hash(MOD.get_tree_hash())

GROUP_ORDER = 0x73EDA753299D7D483339D80809A1D80553BDA402FFFE5BFEFFFFFFFF00000001


def calculate_synthetic_offset(public_key: G1Element, hidden_puzzle_hash: bytes32) -> int:
    blob = hashlib.sha256(bytes(public_key) + hidden_puzzle_hash).digest()
    return int_from_bytes(blob) % GROUP_ORDER


def calculate_synthetic_secret_key(secret_key: PrivateKey, hidden_puzzle_hash: bytes32) -> PrivateKey:
    secret_exponent = int.from_bytes(bytes(secret_key), "big")
    synthetic_offset = calculate_synthetic_offset(secret_key.get_g1(), hidden_puzzle_hash)
    return PrivateKey.from_bytes(((secret_exponent + synthetic_offset) % GROUP_ORDER).to_bytes(32, "big"))


def puzzle_for_synthetic_public_key(synthetic_public_key: G1Element) -> Program:
    return MOD.curry(bytes(synthetic_public_key))


def puzzle_hash_for_synthetic_public_key(synthetic_public_key: G1Element) -> bytes32:
    public_key_hash = Program.to(bytes(synthetic_public_key)).get_tree_hash()
    return curry_and_treehash(QUOTED_MOD_HASH, public_key_hash)


def solution_for_conditions(conditions: Any) -> Program:
    return Program.to([[], puzzle_for_conditions(conditions), []])
