import pytest

from collapse_engine.config_loader import build_collapse_params
from collapse_engine.core.damage import FireState

from .helpers import BASE_CONFIG


@pytest.fixture
def base_config():
    return dict(BASE_CONFIG)


@pytest.fixture
def params(base_config):
    return build_collapse_params(base_config)


@pytest.fixture
def burning():
    return int(FireState.BURNING)
