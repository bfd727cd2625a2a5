import pytest

from timers_manager import Settings, TimersManager, VirtualBackend


@pytest.fixture
def test_settings():
    """Settings pinned to the default limits regardless of the environment."""
    return Settings(min_delay_ms=0, max_delay_ms=5000, min_interval_ms=1)


@pytest.fixture
def backend():
    return VirtualBackend()


@pytest.fixture
def manager(backend, test_settings):
    """TimersManager driven by a virtual clock."""
    yield TimersManager(backend=backend, settings=test_settings)
