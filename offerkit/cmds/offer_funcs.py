from __future__ import annotations

import json
import logging
import os
from collections.abc import Sequence
from pathlib import Path
from typing import Any, Optional

import click
from chia_rs.sized_bytes import bytes32
from chia_rs.sized_ints import uint16, uint64

from offerkit.consensus.chains import ChainInfo, ConfigChainProvider
from offerkit.rpc.full_node_rpc_client import FullNodeRpcClient
from offerkit.rpc.ledger_query import DEFAULT_QUERY_TIMEOUT, FullNodeLedgerQuery
from offerkit.util.bech32m import encode_puzzle_hash
from offerkit.util.byte_types import hexstr_to_bytes
from offerkit.util.config import CONFIG_FILENAME, ConfigNotFound, load_config
from offerkit.util.errors import InvalidParams
from offerkit.util.keychain import mnemonic_from_file
from offerkit.util.offerkit_logging import initialize_logging
from offerkit.wallet.asset_types import OfferAsset
from offerkit.wallet.trading.offer import OFFER_PREFIX, Offer
from offerkit.wallet.trading.offer_engine import OfferEngine
from offerkit.wallet.util.puzzle_compression import LATEST_VERSION
from offerkit.wallet.wallet import WalletKeys

log = logging.getLogger(__name__)


def load_offerkit_config(root_path: Path) -> dict[str, Any]:
    try:
        return load_config(root_path, CONFIG_FILENAME)
    except ConfigNotFound as e:
        raise click.ClickException(str(e)) from e


def wallet_keys_from_file(
    config: dict[str, Any], mnemonic_file: Path, index: Optional[int] = None, hardened: Optional[bool] = None
) -> WalletKeys:
    offer_config = config.get("offer", {})
    if index is None:
        index = int(offer_config.get("derivation_index", 0))
    if hardened is None:
        hardened = bool(offer_config.get("hardened", True))
    try:
        mnemonic = mnemonic_from_file(mnemonic_file)
    except ValueError as e:
        raise click.ClickException(f"{mnemonic_file}: {e}") from e
    return WalletKeys.from_mnemonic(mnemonic, index=index, hardened=hardened)


def parse_asset_amount(value: str, chain: ChainInfo) -> OfferAsset:
    """
    Parses ASSET:AMOUNT. ASSET is the native currency symbol (or xch), a CAT symbol of the
    selected chain, or a hex asset id.
    """
    asset, sep, amount_str = value.rpartition(":")
    if sep == "" or asset == "":
        raise InvalidParams(f"expected ASSET:AMOUNT, got {value!r}")
    try:
        amount = int(amount_str)
    except ValueError as e:
        raise InvalidParams(f"invalid amount in {value!r}") from e
    if amount <= 0 or amount >= 2**64:
        raise InvalidParams(f"invalid amount in {value!r}")

    asset_id: Optional[bytes32]
    if asset.lower() in ("xch", chain.address_prefix):
        asset_id = None
    else:
        asset_id = chain.asset_id_for_symbol(asset)
        if asset_id is None:
            try:
                asset_id = bytes32(hexstr_to_bytes(asset))
            except ValueError as e:
                raise InvalidParams(f"unknown asset {asset!r}") from e
    return OfferAsset(asset_id, uint64(amount))


def show_keys(
    root_path: Path, mnemonic_file: Path, index: Optional[int], hardened: Optional[bool], json_output: bool
) -> None:
    config = load_offerkit_config(root_path)
    chain = ConfigChainProvider(root_path).get_chain()
    keys = wallet_keys_from_file(config, mnemonic_file, index, hardened)
    key_dict = {
        "fingerprint": keys.master_sk.get_g1().get_fingerprint(),
        "index": keys.index,
        "hardened": keys.hardened,
        "synthetic_public_key": bytes(keys.synthetic_pk).hex(),
        "puzzle_hash": keys.puzzle_hash.hex(),
        "address": encode_puzzle_hash(keys.puzzle_hash, chain.address_prefix),
    }
    if json_output:
        print(json.dumps(key_dict, indent=4))
        return
    print(f"Fingerprint: {key_dict['fingerprint']}")
    print(f"Derivation: index {keys.index}, {'hardened' if keys.hardened else 'unhardened'}")
    print(f"Synthetic public key: {key_dict['synthetic_public_key']}")
    print(f"Puzzle hash: 0x{key_dict['puzzle_hash']}")
    print(f"Address ({chain.network_name}): {key_dict['address']}")


async def make_offer(
    root_path: Path,
    mnemonic_file: Path,
    offers: Sequence[str],
    requests: Sequence[str],
    fee: int,
    filepath: Optional[Path] = None,
    rpc_port: Optional[int] = None,
) -> str:
    config = load_offerkit_config(root_path)
    initialize_logging("offerkit", config["logging"], root_path)
    chain_provider = ConfigChainProvider(root_path)
    chain = chain_provider.get_chain()

    offer_assets = [parse_asset_amount(value, chain) for value in offers]
    request_assets = [parse_asset_amount(value, chain) for value in requests]
    if fee < 0:
        raise InvalidParams(f"invalid fee {fee}")
    keys = wallet_keys_from_file(config, mnemonic_file)

    full_node_config = config["full_node"]
    offer_config = config.get("offer", {})
    if rpc_port is None:
        rpc_port = full_node_config["rpc_port"]
    async with FullNodeRpcClient.create_as_context(
        full_node_config["rpc_host"], uint16(rpc_port), root_path=root_path, net_config=full_node_config
    ) as client:
        engine = OfferEngine(
            keys,
            FullNodeLedgerQuery(client),
            chain_provider,
            query_timeout=float(full_node_config.get("query_timeout", DEFAULT_QUERY_TIMEOUT)),
        )
        offer_string = await engine.create_offer_string(
            request_assets,
            offer_assets,
            uint64(fee),
            version=int(offer_config.get("compression_version", LATEST_VERSION)),
            prefix=offer_config.get("prefix", OFFER_PREFIX),
        )

    if filepath is not None:
        filepath.write_text(offer_string, encoding="utf-8")
        print(f"Wrote offer to {filepath}")
    print(offer_string)
    return offer_string


def print_offer_summary(summary: dict[str, Any]) -> None:
    print(f"Offer ID: {summary['id']}")
    print("  OFFERED:")
    for asset, amount in summary["offered"].items():
        print(f"    - {asset}: {amount}")
    print("  REQUESTED:")
    for asset, amount in summary["requested"].items():
        print(f"    - {asset}: {amount}")
    print(f"  Fees: {summary['fees']}")


def show_offer(offer_or_file: str, json_output: bool) -> Offer:
    if not offer_or_file.startswith(f"{OFFER_PREFIX}1") and os.path.isfile(offer_or_file):
        offer_string = Path(offer_or_file).read_text(encoding="utf-8").strip()
    else:
        offer_string = offer_or_file.strip()
    offer = Offer.decode(offer_string)
    summary = offer.summary()
    if json_output:
        print(json.dumps({"summary": summary, "bundle": offer.to_json_dict()}, indent=4))
    else:
        print_offer_summary(summary)
    return offer
