"""Fixtures for Web API tests."""

import pytest
from fastapi.testclient import TestClient

from learnplan.config import AppConfig
from learnplan.store.memory import InMemoryProfileStore
from learnplan.web.api import create_app


@pytest.fixture
def store():
    return InMemoryProfileStore()


@pytest.fixture
def client(store, offline_search):
    """Test client in mock mode: template plans, fallback resources, memory store."""
    app = create_app(config=AppConfig(mock_mode=True), store=store, search_client=offline_search)
    return TestClient(app)


@pytest.fixture
def llm_app_client(store, offline_search, llm_client):
    """Test client whose plans come from the stubbed LLM."""
    app = create_app(
        config=AppConfig(),
        store=store,
        llm_client=llm_client,
        search_client=offline_search,
    )
    return TestClient(app)


@pytest.fixture
def student_id(client, alex_data):
    """Id of a stored student with a generated plan."""
    response = client.post("/plan/generate", json=alex_data)
    return response.json()["data"]["studentId"]
