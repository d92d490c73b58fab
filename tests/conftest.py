"""Shared pytest fixtures for all tests."""

import tempfile
from pathlib import Path
from typing import Generator

import pytest

from cli.config import Config
from pagevault import service_locator
from pagevault.database import init_database
from pagevault.repositories.user_repository import ROLE_ADMIN, User
from tests.fakes import FakeEmbeddingClient, FakeVectorIndex, InMemoryObjectStore, make_user


@pytest.fixture(autouse=True)
def reset_service_locator():
    service_locator.reset()
    yield
    service_locator.reset()


@pytest.fixture
def test_db(monkeypatch) -> Generator[Path, None, None]:
    """
    Create a temporary test database for each test.
    """
    with tempfile.TemporaryDirectory() as tmpdir:
        db_path = Path(tmpdir) / "test.db"
        monkeypatch.setattr("pagevault.config.DATABASE_PATH", str(db_path))
        init_database()
        yield db_path


@pytest.fixture
def object_store() -> InMemoryObjectStore:
    store = InMemoryObjectStore()
    service_locator.set_object_store(store)
    return store


@pytest.fixture
def embedding_client() -> FakeEmbeddingClient:
    return FakeEmbeddingClient(
        vocabulary=["kubernetes", "cluster", "recipe", "pasta", "tomato", "deploy", "garden"]
    )


@pytest.fixture
def vector_index() -> FakeVectorIndex:
    return FakeVectorIndex()


@pytest.fixture
def admin(test_db) -> User:
    return make_user("admin", role=ROLE_ADMIN)


@pytest.fixture
def owner(test_db, admin) -> User:
    return make_user("alice")


@pytest.fixture
def temp_config_dir(tmp_path, monkeypatch):
    """
    Create temporary config directory with environment overrides cleared.

    Args:
        tmp_path: pytest tmp_path fixture

    Returns:
        Path to temporary .pagevault directory
    """
    monkeypatch.delenv('PAGEVAULT_URL', raising=False)
    monkeypatch.delenv('PAGEVAULT_API_KEY', raising=False)
    config_dir = tmp_path / '.pagevault'
    config_dir.mkdir()
    return config_dir


@pytest.fixture
def temp_config(temp_config_dir):
    """
    Create temporary config instance.

    Args:
        temp_config_dir: Temporary config directory fixture

    Returns:
        Config instance with temp config file
    """
    return Config(temp_config_dir / 'config.json')


@pytest.fixture
def sample_markdown(tmp_path):
    """
    Create a sample Markdown document for upload tests.
    """
    file_path = tmp_path / 'notes.md'
    file_path.write_text('# Deploy Notes\n\nRolling out the **cluster** upgrade.\n')
    return file_path
