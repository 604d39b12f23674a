from __future__ import annotations

from chia_rs import G1Element
from chia_rs.sized_bytes import bytes32
from chia_rs.sized_ints import uint64
from clvm.casts import int_from_bytes

from offerkit.types.blockchain_format.coin import Coin
from offerkit.types.blockchain_format.program import Program
from offerkit.types.condition_opcodes import ConditionOpcode
from offerkit.types.condition_with_args import ConditionWithArgs

ConditionsDict = dict[ConditionOpcode, list[ConditionWithArgs]]


class InvalidConditionError(ValueError):
    pass


def parse_sexp_to_condition(sexp: Program) -> ConditionWithArgs:
    """
    Takes a condition `(opcode arg1 arg2 ...)` and returns a ConditionWithArgs.
    Raises an InvalidConditionError if it fails.
    """
    if sexp.pair is None:
        raise InvalidConditionError("condition is an atom")
    op = sexp.pair[0].atom
    if op is None or len(op) != 1:
        raise InvalidConditionError("invalid op")

    # only atoms are kept, so memos (a list) end the scan
    args: list[bytes] = []
    for arg in Program.to(sexp.pair[1]).as_iter():
        if arg.atom is None or len(args) == 4:
            break
        args.append(arg.atom)

    return ConditionWithArgs(ConditionOpcode(op), args)


def conditions_dict_for_solution(puzzle_reveal: Program, solution: Program, max_cost: int) -> ConditionsDict:
    try:
        _cost, result = puzzle_reveal.run_with_cost(max_cost, solution)
    except Program.EvalError as e:
        raise InvalidConditionError(f"puzzle failed to run: {e}") from e

    conditions_dict: ConditionsDict = {}
    for sexp in result.as_iter():
        cwa = parse_sexp_to_condition(sexp)
        conditions_dict.setdefault(cwa.opcode, []).append(cwa)
    return conditions_dict


def pkm_pairs_for_conditions_dict(
    conditions_dict: ConditionsDict,
    coin: Coin,
    additional_data: bytes,
) -> list[tuple[G1Element, bytes]]:
    """
    The (public key, message) pairs a spend must be signed for. AGG_SIG_ME messages are bound to
    the coin id and the network's additional data, AGG_SIG_UNSAFE messages are signed as is.
    """
    ret: list[tuple[G1Element, bytes]] = []
    for opcode in (ConditionOpcode.AGG_SIG_UNSAFE, ConditionOpcode.AGG_SIG_ME):
        for cwa in conditions_dict.get(opcode, []):
            if len(cwa.vars) != 2 or len(cwa.vars[0]) != 48 or len(cwa.vars[1]) > 1024:
                raise InvalidConditionError(f"malformed {opcode.name} condition")
            pk, msg = G1Element.from_bytes(cwa.vars[0]), cwa.vars[1]
            if opcode == ConditionOpcode.AGG_SIG_UNSAFE:
                if msg.endswith(additional_data):
                    raise InvalidConditionError("AGG_SIG_UNSAFE message ends with the network's additional data")
                ret.append((pk, msg))
            else:
                ret.append((pk, msg + coin.name() + additional_data))
    return ret


def created_outputs_for_conditions_dict(conditions_dict: ConditionsDict, input_coin_name: bytes32) -> list[Coin]:
    return [
        Coin(input_coin_name, bytes32(cwa.vars[0]), uint64(int_from_bytes(cwa.vars[1])))
        for cwa in conditions_dict.get(ConditionOpcode.CREATE_COIN, [])
    ]
