from __future__ import annotations

from hashlib import sha256
from typing import SupportsBytes, Union

from chia_rs.sized_bytes import bytes32


def std_hash(b: Union[bytes, SupportsBytes], skip_bytes_conversion: bool = False) -> bytes32:
    """
    sha256 of `b`, which may be anything with a `__bytes__`. Pass `skip_bytes_conversion` when `b`
    is already a bytes-like object.
    """
    blob = b if skip_bytes_conversion else bytes(b)
    return bytes32(sha256(blob).digest())  # type: ignore[arg-type]
