import pytest
from fastapi.testclient import TestClient

from fuse.core.base import Amount, Network, Unit
from fuse.core.settings import settings
from fuse.lightning.fake import FakeLnd
from fuse.lightning.lnd import LndClient

settings.debug = True
settings.log_level = "TRACE"
settings.fuse_url = "http://localhost:3339"
settings.fuse_lightning_backend = "FakeLnd"
settings.lnd_network = "regtest"
settings.lnd_max_fee_sat = 10
settings.lnd_connect_delay = 0


@pytest.fixture
def fake_lnd() -> FakeLnd:
    return FakeLnd(network=Network.regtest)


@pytest.fixture
def provider(fake_lnd: FakeLnd) -> LndClient:
    return LndClient(
        lnd=fake_lnd,
        network=Network.regtest,
        max_fee=Amount(Unit.sat, settings.lnd_max_fee_sat),
    )


@pytest.fixture
def client(provider: LndClient):
    from fuse.server.app import app
    from fuse.server.paylinks import PayLinkStore
    from fuse.server.startup import get_paylinks, get_provider

    paylinks = PayLinkStore()
    app.dependency_overrides[get_provider] = lambda: provider
    app.dependency_overrides[get_paylinks] = lambda: paylinks
    # no context manager: the lifespan would connect to a real backend
    yield TestClient(app)
    app.dependency_overrides.clear()
