"""
Pytest configuration and fixtures.
"""

import os
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

# Set test environment
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("STORAGE_BACKEND", "memory")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from core.config import Settings  # noqa: E402
from core.storage.memory import InMemoryDocumentStore  # noqa: E402
from manager.orchestrator import WikiOrchestrator  # noqa: E402


class TickingClock:
    """Deterministic clock; every reading is one second after the last."""
    
    def __init__(self, start: datetime = datetime(2024, 1, 15, 10, 0, tzinfo=timezone.utc)):
        self.current = start
    
    def __call__(self) -> datetime:
        self.current = self.current + timedelta(seconds=1)
        return self.current


@pytest.fixture
def clock():
    return TickingClock()


@pytest.fixture
def settings(tmp_path):
    """Settings isolated from the developer's environment and .env file."""
    return Settings(
        _env_file=None,
        storage_backend="memory",
        db_file=tmp_path / "data" / "db.json",
        log_level="WARNING",
    )


@pytest.fixture
def store():
    return InMemoryDocumentStore()


@pytest.fixture
async def orchestrator(store, settings, clock):
    """Initialized orchestrator over an in-memory store."""
    instance = WikiOrchestrator(store=store, settings=settings, clock=clock)
    await instance.initialize()
    yield instance
    await instance.shutdown()


@pytest.fixture
def admin(orchestrator):
    return orchestrator.state.find_user_by_username("admin")


@pytest.fixture
async def editor(orchestrator):
    _, user = await orchestrator.accounts.login("editor", "secret")
    return user
