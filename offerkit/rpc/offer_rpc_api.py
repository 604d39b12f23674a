from __future__ import annotations

import logging
import traceback
from collections.abc import Awaitable
from typing import Any, Callable, Optional

from chia_rs.sized_ints import uint64

from offerkit.consensus.chains import UnknownChainError
from offerkit.util.errors import ErrorCode, InvalidParams, MethodNotFound, OfferError
from offerkit.wallet.asset_types import OfferAsset
from offerkit.wallet.trading.offer import OFFER_PREFIX, Offer
from offerkit.wallet.trading.offer_engine import OfferEngine
from offerkit.wallet.util.puzzle_compression import LATEST_VERSION

log = logging.getLogger(__name__)

Endpoint = Callable[[dict[str, Any]], Awaitable[Any]]
# Asked before anything is signed; returning False rejects the request
ApprovalCallback = Callable[[str, dict[str, Any]], Awaitable[bool]]

METHODS_NEEDING_APPROVAL = {"createOffer", "createOfferBundle"}


def parse_assets(params: dict[str, Any], key: str) -> list[OfferAsset]:
    assets = params.get(key, [])
    if not isinstance(assets, list):
        raise InvalidParams(f"{key} must be a list")
    return [OfferAsset.from_json_dict(asset) for asset in assets]


def parse_fee(params: dict[str, Any]) -> uint64:
    try:
        fee = int(params.get("fee") or 0)
    except (TypeError, ValueError) as e:
        raise InvalidParams(f"invalid fee {params.get('fee')!r}") from e
    if fee < 0 or fee >= 2**64:
        raise InvalidParams(f"invalid fee {fee}")
    return uint64(fee)


class OfferRpcApi:
    """
    The request layer in front of the offer engine. Every failure leaves here as a
    `{"error": True, "code": ..., "message": ...}` dict.
    """

    def __init__(
        self,
        engine: OfferEngine,
        approve: Optional[ApprovalCallback] = None,
        compression_version: int = LATEST_VERSION,
        prefix: str = OFFER_PREFIX,
    ) -> None:
        self.engine = engine
        self.approve = approve
        self.compression_version = compression_version
        self.prefix = prefix

    def get_routes(self) -> dict[str, Endpoint]:
        return {
            "chainId": self.chain_id,
            "walletSwitchChain": self.wallet_switch_chain,
            "createOffer": self.create_offer,
            "createOfferBundle": self.create_offer_bundle,
            "decodeOffer": self.decode_offer,
        }

    async def handle_request(self, method: str, params: Optional[dict[str, Any]] = None) -> Any:
        if params is None:
            params = {}
        try:
            endpoint = self.get_routes().get(method)
            if endpoint is None:
                raise MethodNotFound(method)
            if not isinstance(params, dict):
                raise InvalidParams("params must be an object")
            if method in METHODS_NEEDING_APPROVAL and self.approve is not None:
                if not await self.approve(method, params):
                    raise OfferError("user rejected request", ErrorCode.USER_REJECTED)
            return await endpoint(params)
        except OfferError as e:
            log.info(f"Request {method} failed: {e.code.name} {e.message}")
            return e.to_json_dict()
        except Exception as e:
            tb = traceback.format_exc()
            log.warning(f"Error while handling request {method}: {tb}")
            return OfferError(f"{e}" or type(e).__name__).to_json_dict()

    async def chain_id(self, request: dict[str, Any]) -> str:
        return self.engine.chain_provider.get_chain().network_name

    async def wallet_switch_chain(self, request: dict[str, Any]) -> bool:
        network_name = request.get("chainId")
        if not isinstance(network_name, str):
            raise InvalidParams("chainId is required")
        try:
            self.engine.chain_provider.switch_chain(network_name)
        except UnknownChainError as e:
            raise OfferError(f"{e}", ErrorCode.METHOD_NOT_FOUND) from e
        return True

    async def create_offer(self, request: dict[str, Any]) -> str:
        return await self.engine.create_offer_string(
            parse_assets(request, "requestAssets"),
            parse_assets(request, "offerAssets"),
            parse_fee(request),
            version=self.compression_version,
            prefix=self.prefix,
        )

    async def create_offer_bundle(self, request: dict[str, Any]) -> dict[str, Any]:
        bundle = await self.engine.generate_secure_bundle(
            parse_assets(request, "requestAssets"),
            parse_assets(request, "offerAssets"),
            parse_fee(request),
        )
        return bundle.to_json_dict()

    async def decode_offer(self, request: dict[str, Any]) -> dict[str, Any]:
        offer_string = request.get("offer")
        if not isinstance(offer_string, str):
            raise InvalidParams("offer is required")
        offer = Offer.decode(offer_string)
        return {"summary": offer.summary(), "bundle": offer.to_json_dict()}
