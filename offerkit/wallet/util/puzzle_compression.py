from __future__ import annotations

import zlib

from offerkit.wallet.puzzles.template_set import ZDICT

LATEST_VERSION = len(ZDICT)

MAX_DECOMPRESSED_SIZE = 6 * 1024 * 1024


class CompressionVersionError(Exception):
    def __init__(self, version_number: int):
        self.version_number = version_number
        self.message = f"The data is compressed with version {version_number} and cannot be parsed. "
        self.message += "Update software and try again."
        super().__init__(self.message)


class CompressedDataError(Exception):
    pass


def zdict_for_version(version: int) -> bytes:
    # each version extends the dictionary of the one before it
    return b"".join(ZDICT[:version])


def compress_with_zdict(blob: bytes, zdict: bytes) -> bytes:
    compressor = zlib.compressobj(zdict=zdict)
    return compressor.compress(blob) + compressor.flush()


def decompress_with_zdict(blob: bytes, zdict: bytes) -> bytes:
    do = zlib.decompressobj(zdict=zdict)
    try:
        object_bytes = do.decompress(blob, max_length=MAX_DECOMPRESSED_SIZE)  # Limit output size
    except zlib.error as e:
        raise CompressedDataError(f"invalid compressed data: {e}") from e
    if do.unconsumed_tail != b"":
        raise CompressedDataError(f"decompressed data exceeds {MAX_DECOMPRESSED_SIZE} bytes")
    if not do.eof or do.unused_data != b"":
        raise CompressedDataError("compressed stream is truncated or has trailing data")
    return object_bytes


def decompress_object_with_puzzles(compressed_object_blob: bytes) -> bytes:
    if len(compressed_object_blob) < 2:
        raise CompressedDataError("missing version prefix")
    version = int.from_bytes(compressed_object_blob[0:2], "big")
    if version < 1 or version > LATEST_VERSION:
        raise CompressionVersionError(version)
    zdict = zdict_for_version(version)
    object_bytes = decompress_with_zdict(compressed_object_blob[2:], zdict)
    return object_bytes


def compress_object_with_puzzles(object_bytes: bytes, version: int) -> bytes:
    if version < 1 or version > LATEST_VERSION:
        raise CompressionVersionError(version)
    version_blob = version.to_bytes(length=2, byteorder="big")
    zdict = zdict_for_version(version)
    compressed_object_blob = compress_with_zdict(object_bytes, zdict)
    return version_blob + compressed_object_blob


def lowest_best_version(puzzle_list: list[bytes], max_version: int = LATEST_VERSION) -> int:
    """
    The oldest dictionary version that already contains every puzzle in `puzzle_list` that any
    version up to `max_version` contains.
    """
    highest_version = 1
    for mod in puzzle_list:
        for version, version_dict in enumerate(ZDICT[:max_version], start=1):
            if bytes(mod) in version_dict:
                highest_version = max(highest_version, version)
    return highest_version
