from __future__ import annotations

import pytest

from offerkit._tests.util.fake_ledger import TEST_SEED, FakeLedger
from offerkit.consensus.chains import MAINNET, StaticChainProvider
from offerkit.wallet.trading.offer_engine import OfferEngine
from offerkit.wallet.wallet import WalletKeys


@pytest.fixture(scope="session")
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture(name="wallet_keys")
def wallet_keys_fixture() -> WalletKeys:
    return WalletKeys.from_seed(TEST_SEED)


@pytest.fixture(name="ledger")
def ledger_fixture() -> FakeLedger:
    return FakeLedger()


@pytest.fixture(name="chain_provider")
def chain_provider_fixture() -> StaticChainProvider:
    return StaticChainProvider(MAINNET)


@pytest.fixture(name="offer_engine")
def offer_engine_fixture(
    wallet_keys: WalletKeys, ledger: FakeLedger, chain_provider: StaticChainProvider
) -> OfferEngine:
    return OfferEngine(wallet_keys, ledger, chain_provider)
