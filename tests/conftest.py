"""
Shared pytest fixtures for pool tournament tests.

Running tests:
    pytest tests/                  - full suite
    pytest tests/ -m "not slow"   - skip the exhaustive scheduling sweeps
"""
import pytest
import random
import sys
import os

# Add src directory to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from core.models import Team, Match
from storage import TournamentStore
import tournament as service


class ScriptedRandom:
    """Random source returning preset randint() results, for exact-order assertions."""

    def __init__(self, values):
        self.values = list(values)
        self.calls = []

    def randint(self, a, b):
        self.calls.append((a, b))
        value = self.values.pop(0)
        assert a <= value <= b, f"scripted value {value} outside [{a}, {b}]"
        return value


@pytest.fixture
def rng():
    """Deterministic random source."""
    return random.Random(1234)


@pytest.fixture
def scripted_random():
    return ScriptedRandom


@pytest.fixture
def store(tmp_path):
    """Tournament store rooted in a temporary data directory."""
    return TournamentStore(str(tmp_path / "data"))


@pytest.fixture
def eight_players():
    return ["Alice", "Bob", "Carol", "Dave", "Erin", "Frank", "Grace", "Heidi"]


@pytest.fixture
def sixteen_players():
    return [f"Player {i + 1}" for i in range(16)]


@pytest.fixture
def two_teams():
    """Two fresh teams and one unplayed match between them."""
    teams = [
        Team(id="t1", tournament_id="x", player1_name="Alice", player2_name="Bob"),
        Team(id="t2", tournament_id="x", player1_name="Carol", player2_name="Dave"),
    ]
    matches = [
        Match(id="m1", tournament_id="x", round_number=1, table_number=1,
              team1_id="t1", team2_id="t2"),
    ]
    return teams, matches


@pytest.fixture
def client(tmp_path, monkeypatch):
    """Flask test client writing to a temporary data directory."""
    import app as app_module
    monkeypatch.setattr(app_module, 'DATA_DIR', str(tmp_path / "data"))
    app_module.app.config['TESTING'] = True
    with app_module.app.test_client() as client:
        yield client


@pytest.fixture
def events():
    """Collect listener notifications for the duration of a test."""
    received = []

    def listener(event, tournament_id, payload):
        received.append((event, tournament_id, payload))

    service.subscribe(listener)
    yield received
    service.unsubscribe(listener)
