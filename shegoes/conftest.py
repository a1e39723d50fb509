# shegoes/conftest.py
import pytest
from fastapi.testclient import TestClient

from shegoes.api import deps
from shegoes.core.ids import SequenceIdSource
from shegoes.features.ai.service import TextGenerationService
from shegoes.features.users.repository import UserStateRepository
from shegoes.features.users.service import UserService
from shegoes.features.users.store import InMemoryUserStateStore


@pytest.fixture
def id_source():
    return SequenceIdSource("id")


@pytest.fixture
def store():
    return InMemoryUserStateStore()


@pytest.fixture
def offline_text_service():
    """Text service with no API key: every call returns its static fallback."""
    return TextGenerationService(client=None, api_key="")


@pytest.fixture
def repository(store):
    return UserStateRepository(store)


@pytest.fixture
def user_service(repository, offline_text_service, id_source):
    return UserService(repository, offline_text_service, id_source=id_source)


@pytest.fixture(autouse=True)
def isolated_services():
    """
    Give every test a fresh in-memory service graph.

    Routes resolve services through shegoes.api.deps, so resetting here keeps
    state from leaking between API tests.
    """
    deps.configure_services(
        store=InMemoryUserStateStore(),
        text_service=TextGenerationService(client=None, api_key=""),
        id_source=SequenceIdSource("api"),
    )
    yield


@pytest.fixture
def client():
    from shegoes.main import app

    return TestClient(app)
