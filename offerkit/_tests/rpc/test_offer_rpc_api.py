from __future__ import annotations

from typing import Any

import pytest
from chia_rs.sized_ints import uint64
from pytest_mock import MockerFixture

from offerkit._tests.util.fake_ledger import ASSET_A, FakeLedger
from offerkit.consensus.chains import MAINNET, TESTNET11, StaticChainProvider
from offerkit.rpc.offer_rpc_api import OfferRpcApi, parse_fee
from offerkit.types.spend_bundle import SpendBundle
from offerkit.util.errors import ErrorCode, InvalidParams
from offerkit.wallet.trading.offer import Offer
from offerkit.wallet.trading.offer_engine import OfferEngine
from offerkit.wallet.wallet import WalletKeys

REQUEST = {
    "requestAssets": [{"assetId": ASSET_A.hex(), "amount": 500}],
    "offerAssets": [{"amount": 600}],
    "fee": 10,
}


@pytest.fixture(name="api")
def api_fixture(offer_engine: OfferEngine, wallet_keys: WalletKeys, ledger: FakeLedger) -> OfferRpcApi:
    ledger.add_plain_coin(wallet_keys.puzzle_hash, 1000)
    return OfferRpcApi(offer_engine)


def assert_error(response: Any, code: ErrorCode) -> None:
    assert isinstance(response, dict)
    assert response["error"] is True
    assert response["code"] == code.value
    assert isinstance(response["message"], str)


@pytest.mark.anyio
async def test_chain_selection(api: OfferRpcApi, chain_provider: StaticChainProvider) -> None:
    assert await api.handle_request("chainId") == MAINNET
    assert await api.handle_request("walletSwitchChain", {"chainId": TESTNET11}) is True
    assert await api.handle_request("chainId") == TESTNET11
    assert chain_provider.get_chain().network_name == TESTNET11

    assert_error(await api.handle_request("walletSwitchChain", {"chainId": "moonnet"}), ErrorCode.METHOD_NOT_FOUND)
    assert await api.handle_request("chainId") == TESTNET11
    assert_error(await api.handle_request("walletSwitchChain", {}), ErrorCode.INVALID_PARAMS)


@pytest.mark.anyio
async def test_unknown_method(api: OfferRpcApi) -> None:
    response = await api.handle_request("signMessage", {"message": "hi"})
    assert_error(response, ErrorCode.METHOD_NOT_FOUND)
    assert "signMessage" in response["message"]


@pytest.mark.anyio
async def test_create_and_decode_offer(api: OfferRpcApi) -> None:
    offer_string = await api.handle_request("createOffer", REQUEST)
    assert isinstance(offer_string, str)
    assert offer_string.startswith("offer1")

    decoded = await api.handle_request("decodeOffer", {"offer": offer_string})
    offer = Offer.decode(offer_string)
    assert decoded["summary"] == offer.summary()
    assert decoded["summary"]["offered"] == {"xch": 600}
    assert decoded["summary"]["requested"] == {ASSET_A.hex(): 500}
    assert decoded["summary"]["fees"] == 10
    assert SpendBundle.from_json_dict(decoded["bundle"]) == offer.bundle


@pytest.mark.anyio
async def test_create_offer_bundle(api: OfferRpcApi) -> None:
    bundle_json = await api.handle_request("createOfferBundle", REQUEST)
    bundle = SpendBundle.from_json_dict(bundle_json)
    assert Offer(bundle).get_requested_amounts() == {ASSET_A: 500}


@pytest.mark.anyio
@pytest.mark.parametrize(
    "params",
    [
        {"requestAssets": "nope", "offerAssets": []},
        {"requestAssets": [{"amount": 0}], "offerAssets": []},
        {"requestAssets": [], "offerAssets": [{"assetId": "xyz", "amount": 1}]},
        {"requestAssets": [], "offerAssets": [], "fee": -1},
        {"requestAssets": [], "offerAssets": [], "fee": "free"},
    ],
)
async def test_invalid_params(api: OfferRpcApi, params: dict[str, Any]) -> None:
    assert_error(await api.handle_request("createOffer", params), ErrorCode.INVALID_PARAMS)


@pytest.mark.anyio
async def test_params_must_be_an_object(api: OfferRpcApi) -> None:
    params: Any = ["not", "a", "dict"]
    assert_error(await api.handle_request("createOffer", params), ErrorCode.INVALID_PARAMS)


def test_parse_fee() -> None:
    assert parse_fee({}) == 0
    assert parse_fee({"fee": None}) == 0
    assert parse_fee({"fee": "25"}) == uint64(25)
    with pytest.raises(InvalidParams):
        parse_fee({"fee": 2**64})


@pytest.mark.anyio
async def test_insufficient_balance(api: OfferRpcApi) -> None:
    params = {"requestAssets": [{"amount": 1}], "offerAssets": [{"assetId": ASSET_A.hex(), "amount": 5}]}
    response = await api.handle_request("createOffer", params)
    assert_error(response, ErrorCode.INSUFFICIENT_BALANCE)


@pytest.mark.anyio
async def test_decode_failures(api: OfferRpcApi) -> None:
    assert_error(await api.handle_request("decodeOffer", {}), ErrorCode.INVALID_PARAMS)
    assert_error(await api.handle_request("decodeOffer", {"offer": "offer1garbage"}), ErrorCode.DECODE_FORMAT)


@pytest.mark.anyio
async def test_approval(offer_engine: OfferEngine, wallet_keys: WalletKeys, ledger: FakeLedger) -> None:
    ledger.add_plain_coin(wallet_keys.puzzle_hash, 1000)
    asked: list[str] = []

    async def reject(method: str, params: dict[str, Any]) -> bool:
        asked.append(method)
        return False

    api = OfferRpcApi(offer_engine, approve=reject)
    assert_error(await api.handle_request("createOffer", REQUEST), ErrorCode.USER_REJECTED)
    assert_error(await api.handle_request("createOfferBundle", REQUEST), ErrorCode.USER_REJECTED)
    # read-only methods are never put to the user
    assert await api.handle_request("chainId") == MAINNET
    assert asked == ["createOffer", "createOfferBundle"]
    assert ledger.queries == []

    async def accept(method: str, params: dict[str, Any]) -> bool:
        return True

    api = OfferRpcApi(offer_engine, approve=accept)
    assert (await api.handle_request("createOffer", REQUEST)).startswith("offer1")


@pytest.mark.anyio
async def test_unexpected_errors_are_reported(api: OfferRpcApi, ledger: FakeLedger, mocker: MockerFixture) -> None:
    mocker.patch.object(ledger, "get_coin_list", side_effect=RuntimeError("ledger exploded"))
    response = await api.handle_request("createOffer", REQUEST)
    assert_error(response, ErrorCode.UNKNOWN)
    assert response["message"] == "ledger exploded"
