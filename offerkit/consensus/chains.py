from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional, Protocol

from chia_rs.sized_bytes import bytes32

from offerkit.util.byte_types import hexstr_to_bytes
from offerkit.util.config import CONFIG_FILENAME, load_config, lock_and_load_config, save_config

log = logging.getLogger(__name__)

MAINNET = "mainnet"
TESTNET11 = "testnet11"


@dataclass(frozen=True)
class ChainInfo:
    network_name: str
    agg_sig_me_additional_data: bytes32
    address_prefix: str
    cats: dict[str, bytes32] = field(default_factory=dict)

    def asset_id_for_symbol(self, symbol: str) -> Optional[bytes32]:
        asset_id = self.cats.get(symbol)
        if asset_id is None:
            # symbols are matched case-insensitively as a fallback
            for known_symbol, known_id in self.cats.items():
                if known_symbol.lower() == symbol.lower():
                    return known_id
        return asset_id

    @classmethod
    def from_config(cls, network_name: str, network_config: dict[str, Any]) -> ChainInfo:
        return cls(
            network_name=network_name,
            agg_sig_me_additional_data=bytes32(hexstr_to_bytes(network_config["agg_sig_me_additional_data"])),
            address_prefix=network_config["address_prefix"],
            cats={
                symbol: bytes32(hexstr_to_bytes(asset_id))
                for symbol, asset_id in (network_config.get("cats") or {}).items()
            },
        )


NETWORKS: dict[str, ChainInfo] = {
    MAINNET: ChainInfo(
        network_name=MAINNET,
        agg_sig_me_additional_data=bytes32.fromhex("ccd5bb71183532bff220ba46c268991a3ff07eb358e8255a65c30a2dce0e5fbb"),
        address_prefix="xch",
        cats={"USDS": bytes32.fromhex("6d95dae356e32a71db5ddcb42224754a02524c615c5fc35f568c2af04774e589")},
    ),
    TESTNET11: ChainInfo(
        network_name=TESTNET11,
        agg_sig_me_additional_data=bytes32.fromhex("37a90eb5185a9c4439a91ddc98bbadce7b4feba060d50116a067de66bf236615"),
        address_prefix="txch",
    ),
}


class UnknownChainError(ValueError):
    def __init__(self, network_name: str) -> None:
        super().__init__(f"unknown chain {network_name!r}")
        self.network_name = network_name


class ChainConfigProvider(Protocol):
    def get_chain(self) -> ChainInfo: ...

    def known_chains(self) -> list[str]: ...

    def switch_chain(self, network_name: str) -> ChainInfo: ...


class StaticChainProvider:
    """In-memory chain selection for embedding and tests."""

    def __init__(self, network_name: str = MAINNET, networks: Optional[dict[str, ChainInfo]] = None) -> None:
        self.networks = dict(NETWORKS if networks is None else networks)
        if network_name not in self.networks:
            raise UnknownChainError(network_name)
        self.network_name = network_name

    def get_chain(self) -> ChainInfo:
        return self.networks[self.network_name]

    def known_chains(self) -> list[str]:
        return list(self.networks)

    def switch_chain(self, network_name: str) -> ChainInfo:
        if network_name not in self.networks:
            raise UnknownChainError(network_name)
        self.network_name = network_name
        return self.networks[network_name]


class ConfigChainProvider:
    """
    Reads the selected network from the config file on every call, so a switch made by
    another process is picked up. Networks missing from the config fall back to the
    built-in table.
    """

    def __init__(self, root_path: Path, filename: str = CONFIG_FILENAME) -> None:
        self.root_path = root_path
        self.filename = filename

    def _networks(self, config: dict[str, Any]) -> dict[str, ChainInfo]:
        networks = dict(NETWORKS)
        for name, network_config in (config.get("networks") or {}).items():
            networks[name] = ChainInfo.from_config(name, network_config)
        return networks

    def get_chain(self) -> ChainInfo:
        config = load_config(self.root_path, self.filename)
        network_name = config.get("selected_network", MAINNET)
        networks = self._networks(config)
        if network_name not in networks:
            raise UnknownChainError(network_name)
        return networks[network_name]

    def known_chains(self) -> list[str]:
        return list(self._networks(load_config(self.root_path, self.filename)))

    def switch_chain(self, network_name: str) -> ChainInfo:
        with lock_and_load_config(self.root_path, self.filename) as config:
            networks = self._networks(config)
            if network_name not in networks:
                raise UnknownChainError(network_name)
            config["selected_network"] = network_name
            save_config(self.root_path, self.filename, config)
        log.info(f"Switched to chain {network_name}")
        return networks[network_name]
