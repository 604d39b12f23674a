from __future__ import annotations

import unicodedata
from hashlib import pbkdf2_hmac
from pathlib import Path


def mnemonic_to_seed(mnemonic: str, passphrase: str = "") -> bytes:
    """
    Uses BIP39 standard to derive a seed from entropy bytes.
    """
    salt_str: str = "mnemonic" + passphrase
    salt = unicodedata.normalize("NFKD", salt_str).encode("utf-8")
    mnemonic_normalized = unicodedata.normalize("NFKD", " ".join(mnemonic.split())).encode("utf-8")
    seed = pbkdf2_hmac("sha512", mnemonic_normalized, salt, 2048)

    if len(seed) != 64:
        raise ValueError(f"unexpected seed length {len(seed)}")
    return seed


def mnemonic_from_file(path: Path) -> str:
    mnemonic = path.read_text(encoding="utf-8").strip()
    if len(mnemonic.split()) not in [12, 15, 18, 21, 24]:
        raise ValueError("Invalid mnemonic length")
    return mnemonic
