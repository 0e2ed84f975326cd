import pytest

from scenerag.providers.custom_providers import MemoryDocumentStore
from scenerag.utils.logging_config import log_manager
from .helpers import FakeStorage, make_services


@pytest.fixture(autouse=True, scope="session")
def quiet_logs():
    log_manager.enable_console(level="WARNING")
    yield
    log_manager.disable_console()


@pytest.fixture
def store():
    return MemoryDocumentStore()


@pytest.fixture
def storage():
    return FakeStorage()


@pytest.fixture
def services(store, storage):
    return make_services(store=store, storage=storage)
