import pytest

from studysync.models import AppState
from studysync.seed import seed_resources
from studysync.store import StudyStore


class ScriptedRandom:
    """Stand-in random source: replays fixed floats and choice indexes."""

    def __init__(self, floats=(), picks=()):
        self.floats = list(floats)
        self.picks = list(picks)

    def random(self):
        return self.floats.pop(0)

    def choice(self, seq):
        return seq[self.picks.pop(0) if self.picks else 0]


@pytest.fixture
def tmp_db(tmp_path):
    """Provide a temporary SQLite database path for tests."""
    db_path = str(tmp_path / "test_studysync.db")
    return db_path


@pytest.fixture
def state():
    """A fresh in-memory state holding the seeded resources."""
    return AppState(resources=seed_resources())


@pytest.fixture
def store(tmp_db):
    return StudyStore(tmp_db)


@pytest.fixture
def scripted_random():
    return ScriptedRandom
