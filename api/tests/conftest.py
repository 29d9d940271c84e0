"""
Pytest configuration and fixtures for the immigration assistant API.

This module provides:
- Test settings with isolated test environment
- A FastAPI test client with a mocked chat service
- Sample Hacker News thread documents
- A fake OpenAI client
"""

import shutil
import tempfile
from typing import Generator
from unittest.mock import AsyncMock, MagicMock

import pytest
from app.core.config import Settings
from fastapi.testclient import TestClient


@pytest.fixture(scope="session")
def test_data_dir() -> Generator[str, None, None]:
    """Create a temporary directory for test data.

    Yields:
        str: Path to the temporary test data directory
    """
    temp_dir = tempfile.mkdtemp(prefix="ama_test_")
    yield temp_dir
    shutil.rmtree(temp_dir, ignore_errors=True)


@pytest.fixture
def test_settings(test_data_dir: str) -> Settings:
    """Create test settings with isolated test environment.

    Retries are immediate so failure paths run fast.
    """
    return Settings(
        DEBUG=True,
        DATA_DIR=test_data_dir,
        OPENAI_API_KEY="test-api-key",
        ENVIRONMENT="testing",
        TARGET_AUTHOR_ALIASES="peter roberts,proberts",
        MAX_CHAT_HISTORY_LENGTH=5,
        HN_RETRY_DELAY=0,
    )


@pytest.fixture
def make_completion():
    """Factory for objects shaped like an OpenAI chat completion."""

    def _make(content):
        completion = MagicMock()
        choice = MagicMock()
        choice.message.content = content
        completion.choices = [choice]
        return completion

    return _make


@pytest.fixture
def openai_client() -> MagicMock:
    """Mock AsyncOpenAI client with awaitable endpoints."""
    client = MagicMock()
    client.chat.completions.create = AsyncMock()
    client.files.create = AsyncMock()
    client.fine_tuning.jobs.create = AsyncMock()
    client.fine_tuning.jobs.retrieve = AsyncMock()
    client.close = AsyncMock()
    return client


@pytest.fixture
def mock_chat_service() -> MagicMock:
    service = MagicMock()
    service.respond = AsyncMock()
    return service


@pytest.fixture
def test_client(test_settings: Settings, mock_chat_service: MagicMock) -> TestClient:
    """Create a FastAPI test client.

    The lifespan is not run, so services are placed on app.state directly.
    """
    from app.core.config import get_settings
    from app.main import app

    app.dependency_overrides[get_settings] = lambda: test_settings
    app.state.settings = test_settings
    app.state.chat_service = mock_chat_service
    client = TestClient(app)
    yield client
    app.dependency_overrides.clear()
    app.state.chat_service = None


@pytest.fixture
def sample_thread_data() -> dict:
    """An AMA story in the Algolia ``items`` shape.

    Layout (depth-first):
        story (proberts)
        ├── 101 alice: EB-2 question
        │   └── 102 proberts: answer to 101
        │       └── 103 alice: thanks
        ├── 104 bob: H-1B question
        │   ├── 105 proberts: answer to 104
        │   └── 106 proberts: self-reply to 105 (parent is proberts)
        └── 107 carol: deleted question
            └── 108 proberts: answer to deleted 107
    """
    return {
        "id": 1,
        "title": "Ask Me Anything: Peter Roberts, immigration attorney",
        "author": "proberts",
        "text": "I&#x27;m an immigration attorney. Ask me anything.",
        "created_at": "2023-05-01T15:00:00.000Z",
        "parent_id": None,
        "children": [
            {
                "id": 101,
                "author": "alice",
                "text": "How long does EB-2 take?",
                "created_at": "2023-05-01T15:05:00.000Z",
                "parent_id": 1,
                "children": [
                    {
                        "id": 102,
                        "author": "proberts",
                        "text": "About 1-2 years for most nationalities.",
                        "created_at": "2023-05-01T15:10:00.000Z",
                        "parent_id": 101,
                        "children": [
                            {
                                "id": 103,
                                "author": "alice",
                                "text": "Thanks!",
                                "created_at": "2023-05-01T15:12:00.000Z",
                                "parent_id": 102,
                                "children": [],
                            }
                        ],
                    }
                ],
            },
            {
                "id": 104,
                "author": "bob",
                "text": "Can I change employers on an H-1B &amp; keep my status?",
                "created_at": "2023-05-01T15:20:00.000Z",
                "parent_id": 1,
                "children": [
                    {
                        "id": 105,
                        "author": "proberts",
                        "text": "Yes, via H-1B portability.",
                        "created_at": "2023-05-01T15:25:00.000Z",
                        "parent_id": 104,
                        "children": [
                            {
                                "id": 106,
                                "author": "proberts",
                                "text": "To add to my answer: file before you quit.",
                                "created_at": "2023-05-01T15:26:00.000Z",
                                "parent_id": 105,
                                "children": [],
                            }
                        ],
                    }
                ],
            },
            {
                "id": 107,
                "author": None,
                "text": None,
                "deleted": True,
                "created_at": "2023-05-01T15:30:00.000Z",
                "parent_id": 1,
                "children": [
                    {
                        "id": 108,
                        "author": "proberts",
                        "text": "Depends on the consulate.",
                        "created_at": "2023-05-01T15:35:00.000Z",
                        "parent_id": 107,
                        "children": [],
                    }
                ],
            },
        ],
    }
