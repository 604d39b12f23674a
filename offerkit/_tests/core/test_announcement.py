from __future__ import annotations

from chia_rs.sized_bytes import bytes32

from offerkit.types.announcement import Announcement
from offerkit.types.blockchain_format.program import Program
from offerkit.util.hash import std_hash

ORIGIN = bytes32(b"\x11" * 32)


def test_announcement_name() -> None:
    announcement = Announcement(ORIGIN, b"hello")
    assert announcement.name() == std_hash(ORIGIN + b"hello")
    assert announcement.name() == Announcement(ORIGIN, b"hello").name()
    assert announcement.name() != Announcement(ORIGIN, b"hello!").name()
    assert str(announcement) == announcement.name().hex()


def test_morphed_announcement() -> None:
    announcement = Announcement(ORIGIN, b"hello", b"\xca")
    assert announcement.name() == std_hash(ORIGIN + std_hash(b"\xca" + b"hello"))


def test_program_announcement() -> None:
    program = Program.to([bytes32(b"\x00" * 32), [ORIGIN, 1000, []]])
    announcement = Announcement.for_program(ORIGIN, program)
    assert announcement.message == program.get_tree_hash()
    assert announcement.name() == std_hash(ORIGIN + program.get_tree_hash())
