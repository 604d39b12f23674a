"""
The fixed catalog of puzzle templates this library knows about.

Templates are never interpreted here beyond running them for their output
conditions; their serialized bytes double as the preset dictionaries used to
compress offers (see offerkit.wallet.util.puzzle_compression).
"""

from __future__ import annotations

from typing import Optional

from chia_puzzles_py.programs import (
    CAT_PUZZLE,
    NFT_METADATA_UPDATER_DEFAULT,
    NFT_OWNERSHIP_LAYER,
    NFT_OWNERSHIP_TRANSFER_PROGRAM_ONE_WAY_CLAIM_WITH_ROYALTIES,
    NFT_STATE_LAYER,
    SETTLEMENT_PAYMENT,
    SINGLETON_TOP_LAYER_V1_1,
)
from chia_rs.sized_bytes import bytes32

from offerkit.types.blockchain_format.program import Program
from offerkit.wallet.puzzles import p2_delegated_puzzle_or_hidden_puzzle as standard_puzzle

STANDARD_MOD = standard_puzzle.MOD

# CAT v1, only kept so that version 1 dictionaries stay byte-identical
LEGACY_CAT_MOD = Program.fromhex(
    "ff02ffff01ff02ff5effff04ff02ffff04ffff04ff05ffff04ffff0bff2cff0580ffff04ff0bff80808080ffff04ffff02ff17ff2f80ffff04ff5fffff04ffff02ff2effff04ff02ffff04ff17ff80808080ffff04ffff0bff82027fff82057fff820b7f80ffff04ff81bfffff04ff82017fffff04ff8202ffffff04ff8205ffffff04ff820bffff80808080808080808080808080ffff04ffff01ffffffff81ca3dff46ff0233ffff3c04ff01ff0181cbffffff02ff02ffff03ff05ffff01ff02ff32ffff04ff02ffff04ff0dffff04ffff0bff22ffff0bff2cff3480ffff0bff22ffff0bff22ffff0bff2cff5c80ff0980ffff0bff22ff0bffff0bff2cff8080808080ff8080808080ffff010b80ff0180ffff02ffff03ff0bffff01ff02ffff03ffff09ffff02ff2effff04ff02ffff04ff13ff80808080ff820b9f80ffff01ff02ff26ffff04ff02ffff04ffff02ff13ffff04ff5fffff04ff17ffff04ff2fffff04ff81bfffff04ff82017fffff04ff1bff8080808080808080ffff04ff82017fff8080808080ffff01ff088080ff0180ffff01ff02ffff03ff17ffff01ff02ffff03ffff20ff81bf80ffff0182017fffff01ff088080ff0180ffff01ff088080ff018080ff0180ffff04ffff04ff05ff2780ffff04ffff10ff0bff5780ff778080ff02ffff03ff05ffff01ff02ffff03ffff09ffff02ffff03ffff09ff11ff7880ffff0159ff8080ff0180ffff01818f80ffff01ff02ff7affff04ff02ffff04ff0dffff04ff0bffff04ffff04ff81b9ff82017980ff808080808080ffff01ff02ff5affff04ff02ffff04ffff02ffff03ffff09ff11ff7880ffff01ff04ff78ffff04ffff02ff36ffff04ff02ffff04ff13ffff04ff29ffff04ffff0bff2cff5b80ffff04ff2bff80808080808080ff398080ffff01ff02ffff03ffff09ff11ff2480ffff01ff04ff24ffff04ffff0bff20ff2980ff398080ffff010980ff018080ff0180ffff04ffff02ffff03ffff09ff11ff7880ffff0159ff8080ff0180ffff04ffff02ff7affff04ff02ffff04ff0dffff04ff0bffff04ff17ff808080808080ff80808080808080ff0180ffff01ff04ff80ffff04ff80ff17808080ff0180ffffff02ffff03ff05ffff01ff04ff09ffff02ff26ffff04ff02ffff04ff0dffff04ff0bff808080808080ffff010b80ff0180ff0bff22ffff0bff2cff5880ffff0bff22ffff0bff22ffff0bff2cff5c80ff0580ffff0bff22ffff02ff32ffff04ff02ffff04ff07ffff04ffff0bff2cff2c80ff8080808080ffff0bff2cff8080808080ffff02ffff03ffff07ff0580ffff01ff0bffff0102ffff02ff2effff04ff02ffff04ff09ff80808080ffff02ff2effff04ff02ffff04ff0dff8080808080ffff01ff0bff2cff058080ff0180ffff04ffff04ff28ffff04ff5fff808080ffff02ff7effff04ff02ffff04ffff04ffff04ff2fff0580ffff04ff5fff82017f8080ffff04ffff02ff7affff04ff02ffff04ff0bffff04ff05ffff01ff808080808080ffff04ff17ffff04ff81bfffff04ff82017fffff04ffff0bff8204ffffff02ff36ffff04ff02ffff04ff09ffff04ff820affffff04ffff0bff2cff2d80ffff04ff15ff80808080808080ff8216ff80ffff04ff8205ffffff04ff820bffff808080808080808080808080ff02ff2affff04ff02ffff04ff5fffff04ff3bffff04ffff02ffff03ff17ffff01ff09ff2dffff0bff27ffff02ff36ffff04ff02ffff04ff29ffff04ff57ffff04ffff0bff2cff81b980ffff04ff59ff80808080808080ff81b78080ff8080ff0180ffff04ff17ffff04ff05ffff04ff8202ffffff04ffff04ffff04ff24ffff04ffff0bff7cff2fff82017f80ff808080ffff04ffff04ff30ffff04ffff0bff81bfffff0bff7cff15ffff10ff82017fffff11ff8202dfff2b80ff8202ff808080ff808080ff138080ff80808080808080808080ff018080"  # noqa
)

# settlement payments before the memo-carrying rewrite
OFFER_MOD_OLD = Program.fromhex(
    "ff02ffff01ff02ff0affff04ff02ffff04ff03ff80808080ffff04ffff01ffff333effff02ffff03ff05ffff01ff04ffff04ff0cffff04ffff02ff1effff04ff02ffff04ff09ff80808080ff808080ffff02ff16ffff04ff02ffff04ff19ffff04ffff02ff0affff04ff02ffff04ff0dff80808080ff808080808080ff8080ff0180ffff02ffff03ff05ffff01ff04ffff04ff08ff0980ffff02ff16ffff04ff02ffff04ff0dffff04ff0bff808080808080ffff010b80ff0180ff02ffff03ffff07ff0580ffff01ff0bffff0102ffff02ff1effff04ff02ffff04ff09ff80808080ffff02ff1effff04ff02ffff04ff0dff8080808080ffff01ff0bffff0101ff058080ff0180ff018080"  # noqa
)

SINGLETON_TOP_LAYER_MOD = Program.from_bytes(SINGLETON_TOP_LAYER_V1_1)
NFT_STATE_LAYER_MOD = Program.from_bytes(NFT_STATE_LAYER)
NFT_OWNERSHIP_LAYER_MOD = Program.from_bytes(NFT_OWNERSHIP_LAYER)
NFT_METADATA_UPDATER = Program.from_bytes(NFT_METADATA_UPDATER_DEFAULT)
NFT_TRANSFER_PROGRAM_DEFAULT = Program.from_bytes(NFT_OWNERSHIP_TRANSFER_PROGRAM_ONE_WAY_CLAIM_WITH_ROYALTIES)

CAT_MOD = Program.from_bytes(CAT_PUZZLE)
CAT_MOD_HASH = CAT_MOD.get_tree_hash()

OFFER_MOD = Program.from_bytes(SETTLEMENT_PAYMENT)
OFFER_MOD_HASH = OFFER_MOD.get_tree_hash()
OFFER_MOD_OLD_HASH = OFFER_MOD_OLD.get_tree_hash()

TEMPLATES: dict[str, Program] = {
    "standard": STANDARD_MOD,
    "cat_v1": LEGACY_CAT_MOD,
    "settlement_payments_v1": OFFER_MOD_OLD,
    "singleton_top_layer_v1_1": SINGLETON_TOP_LAYER_MOD,
    "nft_state_layer": NFT_STATE_LAYER_MOD,
    "nft_ownership_layer": NFT_OWNERSHIP_LAYER_MOD,
    "nft_metadata_updater": NFT_METADATA_UPDATER,
    "nft_ownership_transfer_program": NFT_TRANSFER_PROGRAM_DEFAULT,
    "cat_v2": CAT_MOD,
    "settlement_payments": OFFER_MOD,
}

# Deployed templates never change, so each entry is frozen once released.
# Version N compresses with the concatenation of entries 1..N.
ZDICT = [
    bytes(STANDARD_MOD) + bytes(LEGACY_CAT_MOD),
    bytes(OFFER_MOD_OLD),
    bytes(SINGLETON_TOP_LAYER_MOD)
    + bytes(NFT_STATE_LAYER_MOD)
    + bytes(NFT_OWNERSHIP_LAYER_MOD)
    + bytes(NFT_METADATA_UPDATER)
    + bytes(NFT_TRANSFER_PROGRAM_DEFAULT),
    bytes(CAT_MOD),
    bytes(OFFER_MOD),
    b"",  # purposefully break compatibility with older versions
]


TEMPLATE_NAMES_BY_HASH: dict[bytes32, str] = {template.get_tree_hash(): name for name, template in TEMPLATES.items()}


def template_name(puzzle: Program) -> Optional[str]:
    mod, _ = puzzle.uncurry()
    return TEMPLATE_NAMES_BY_HASH.get(mod.get_tree_hash())
