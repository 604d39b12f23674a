from __future__ import annotations

import json
import ssl
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

import aiohttp
from chia_rs.sized_ints import uint16
from typing_extensions import Self

from offerkit.util.path import path_from_root


class ResponseFailureError(ValueError):
    def __init__(self, response: dict[str, Any]):
        self.response = response
        super().__init__(f"RPC response failure: {json.dumps(response)}")


def ssl_context_for_client(root_path: Path, ssl_config: dict[str, Any]) -> Optional[ssl.SSLContext]:
    if not ssl_config.get("enabled", False):
        return None
    ca_crt = ssl_config.get("ca_crt")
    ssl_context = ssl.create_default_context(
        purpose=ssl.Purpose.SERVER_AUTH,
        cafile=None if ca_crt is None else str(path_from_root(root_path, ca_crt)),
    )
    # full nodes serve a certificate signed by their own private CA
    ssl_context.check_hostname = False
    if ca_crt is None:
        ssl_context.verify_mode = ssl.CERT_NONE
    ssl_context.load_cert_chain(
        certfile=str(path_from_root(root_path, ssl_config["private_crt"])),
        keyfile=str(path_from_root(root_path, ssl_config["private_key"])),
    )
    return ssl_context


@dataclass
class RpcClient:
    """
    Client to a Chia RPC service. Uses HTTP/JSON, and converts back from JSON into native
    python objects before returning. All api calls use POST requests.
    """

    url: str
    session: aiohttp.ClientSession
    ssl_context: Optional[ssl.SSLContext]
    hostname: str
    port: uint16

    @classmethod
    async def create(
        cls,
        self_hostname: str,
        port: uint16,
        root_path: Optional[Path] = None,
        net_config: Optional[dict[str, Any]] = None,
    ) -> Self:
        ssl_context: Optional[ssl.SSLContext] = None
        if root_path is not None and net_config is not None:
            ssl_context = ssl_context_for_client(root_path, net_config.get("ssl", {}))
        scheme = "http" if ssl_context is None else "https"

        timeout = 300
        if net_config is not None:
            timeout = net_config.get("rpc_timeout", timeout)

        return cls(
            hostname=self_hostname,
            port=port,
            url=f"{scheme}://{self_hostname}:{port!s}/",
            session=aiohttp.ClientSession(timeout=aiohttp.ClientTimeout(total=timeout)),
            ssl_context=ssl_context,
        )

    @classmethod
    @asynccontextmanager
    async def create_as_context(
        cls,
        self_hostname: str,
        port: uint16,
        root_path: Optional[Path] = None,
        net_config: Optional[dict[str, Any]] = None,
    ) -> AsyncIterator[Self]:
        self = await cls.create(
            self_hostname=self_hostname,
            port=port,
            root_path=root_path,
            net_config=net_config,
        )
        try:
            yield self
        finally:
            await self.close()

    async def fetch(self, path: str, request_json: dict[str, Any]) -> dict[str, Any]:
        async with self.session.post(
            self.url + path, json=request_json, ssl=self.ssl_context if self.ssl_context is not None else True
        ) as response:
            response.raise_for_status()
            res_json: dict[str, Any] = await response.json()
            if not res_json["success"]:
                raise ResponseFailureError(res_json)
            return res_json

    async def close(self) -> None:
        await self.session.close()
