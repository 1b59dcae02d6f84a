import pytest
from typing import Generator
from fastapi.testclient import TestClient
from sqlmodel import SQLModel, create_engine
from sqlmodel.pool import StaticPool
from sqlalchemy.engine import Engine
import sys
import os

# Append sys.path to ensure the below imports work from tests folder
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

# Set environment variables for testing before importing the app
os.environ.pop("DATABASE_URL", None)
os.environ["HISTORY_MODE"] = "global"

from app.main import app
from app.api.dependencies import get_history_service
from app.crud.history_store import MemoryHistoryStore, SqlHistoryStore
from app.services.history_service import HistoryService

# Create in-memory SQLite database for testing
TEST_DATABASE_URL = "sqlite:///:memory:"


@pytest.fixture(name="engine")
def engine_fixture() -> Generator[Engine, None, None]:
    """Creates a fresh in-memory SQLite engine for each test.

    Yields:
        Engine: The engine connected to the test database.
    """
    engine = create_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    yield engine

    # Tear down (drop tables) after test is done
    SQLModel.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture(name="memory_store")
def memory_store_fixture() -> MemoryHistoryStore:
    return MemoryHistoryStore()


@pytest.fixture(name="sql_store")
def sql_store_fixture(engine: Engine) -> SqlHistoryStore:
    return SqlHistoryStore(engine)


@pytest.fixture(name="service")
def service_fixture(memory_store: MemoryHistoryStore) -> HistoryService:
    """A global-mode history service backed by memory."""
    return HistoryService(memory_store, mode="global")


@pytest.fixture(name="client")
def client_fixture(service: HistoryService) -> Generator[TestClient, None, None]:
    """Creates a TestClient with the history service dependency overridden.

    Args:
        service (HistoryService): The test history service.

    Yields:
        TestClient: The FastAPI test client.
    """

    # Override the dependency so every test starts with an empty history
    def get_history_service_override():
        return service

    app.dependency_overrides[get_history_service] = get_history_service_override

    client = TestClient(app)
    yield client

    # Clean up overrides
    app.dependency_overrides.clear()


@pytest.fixture(name="document_client")
def document_client_fixture(
    memory_store: MemoryHistoryStore,
) -> Generator[TestClient, None, None]:
    """Creates a TestClient whose history is keyed per document name."""
    per_document = HistoryService(memory_store, mode="per_document")
    app.dependency_overrides[get_history_service] = lambda: per_document

    client = TestClient(app)
    yield client

    app.dependency_overrides.clear()
