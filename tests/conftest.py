import pytest

from helpers.config_utils import build_config
from helpers.reconcile_utils import ReconciliationEngine
from helpers.sync_utils import StalenessGate
from fakes import FakeClock, FakeGoogle


@pytest.fixture
def config():
    return build_config()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def fake(clock):
    return FakeGoogle(clock)


@pytest.fixture
def make_engine(config, fake, clock):
    """Engine over the fake backend, with optional config overrides."""
    def factory(engine_config=None, **kwargs):
        engine_config = engine_config or config
        gate = StalenessGate(fake, engine_config.watermark_property, engine_config.watermark_skew_seconds, clock)
        return ReconciliationEngine(engine_config, fake, fake, gate, **kwargs)
    return factory


@pytest.fixture
def engine(make_engine):
    return make_engine()
