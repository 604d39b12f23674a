"""
Pay to conditions

In this puzzle program, the solution is ignored. The reveal of the puzzle
returns a fixed list of conditions. The standard wallet uses it as the
delegated puzzle that carries a spend's conditions.
"""

from __future__ import annotations

from typing import Any

from chia_puzzles_py.programs import P2_CONDITIONS

from offerkit.types.blockchain_format.program import Program

MOD = Program.from_bytes(P2_CONDITIONS)


def puzzle_for_conditions(conditions: Any) -> Program:
    return MOD.run([conditions])


def solution_for_conditions(conditions: Any) -> Program:
    return Program.to([puzzle_for_conditions(conditions), 0])
