from __future__ import annotations

from hashlib import sha256

from chia_rs.sized_bytes import bytes32

Q_KW = b"\x01"
A_KW = b"\x02"
C_KW = b"\x04"


def shatree_atom(atom: bytes) -> bytes32:
    return bytes32(sha256(b"\x01" + atom).digest())


def shatree_pair(left_hash: bytes32, right_hash: bytes32) -> bytes32:
    return bytes32(sha256(b"\x02" + left_hash + right_hash).digest())


Q_KW_TREEHASH = shatree_atom(Q_KW)
A_KW_TREEHASH = shatree_atom(A_KW)
C_KW_TREEHASH = shatree_atom(C_KW)
ONE_TREEHASH = shatree_atom(b"\x01")
NIL_TREEHASH = shatree_atom(b"")


def calculate_hash_of_quoted_mod_hash(mod_hash: bytes32) -> bytes32:
    return shatree_pair(Q_KW_TREEHASH, mod_hash)


def curry_and_treehash(hash_of_quoted_mod_hash: bytes32, *hashed_arguments: bytes32) -> bytes32:
    """
    Tree hash of `(a (q . MOD) (c (q . ARG1) (c (q . ARG2) ... 1)))` computed from the hash of
    `(q . MOD)` and the tree hashes of the arguments, without building the program.
    """
    environment = ONE_TREEHASH
    for argument in reversed(hashed_arguments):
        quoted = shatree_pair(Q_KW_TREEHASH, argument)
        environment = shatree_pair(C_KW_TREEHASH, shatree_pair(quoted, shatree_pair(environment, NIL_TREEHASH)))
    return shatree_pair(
        A_KW_TREEHASH,
        shatree_pair(hash_of_quoted_mod_hash, shatree_pair(environment, NIL_TREEHASH)),
    )
