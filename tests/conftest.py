import pytest

from launcher.config import load_config, reset_config
from launcher.dispatch import DispatchFacade
from launcher.host import FakeRegistry, MemoryClipboard, RecordingChannel


@pytest.fixture(autouse=True)
def _fresh_config():
    yield
    reset_config()


@pytest.fixture
def config(tmp_path):
    return load_config(str(tmp_path / "missing.json"))


@pytest.fixture
def registry():
    return FakeRegistry(
        installed={"com.bank.x", "com.browser.a", "com.browser.b", "com.notes"},
        resolvable={
            "com.bank.x": ["napas://"],
            "com.browser.a": ["https://", "http://"],
            "com.browser.b": ["https://"],
        },
    )


@pytest.fixture
def channel():
    return RecordingChannel()


@pytest.fixture
def clipboard():
    return MemoryClipboard()


@pytest.fixture
def facade(registry, channel, clipboard, config):
    return DispatchFacade(registry, channel, clipboard, config=config)
