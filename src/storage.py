"""
YAML file store for tournaments.

Layout under the data directory:

    tournaments.yaml              registry of known tournaments
    tournaments/<id>/tournament.yaml
    tournaments/<id>/teams.yaml
    tournaments/<id>/matches.yaml
    tournaments/<id>/.lock        per-tournament write lock
"""
import os
import re
import shutil
import logging
from datetime import datetime

import yaml
from filelock import FileLock

from core.errors import InvalidInput, NotFound, TournamentError
from core.models import Team, Match, Tournament

logger = logging.getLogger(__name__)

LOCK_TIMEOUT_SECONDS = 10

_ID_RE = re.compile(r'^[A-Za-z0-9_-]+$')


class TournamentStore:
    def __init__(self, data_dir):
        self.data_dir = data_dir
        self.registry_file = os.path.join(data_dir, 'tournaments.yaml')
        self.tournaments_dir = os.path.join(data_dir, 'tournaments')
        self._registry_lock = FileLock(os.path.join(data_dir, '.lock'), timeout=LOCK_TIMEOUT_SECONDS)

    def __repr__(self):
        return f"TournamentStore(data_dir={self.data_dir})"

    # -- paths -----------------------------------------------------------

    def _tournament_dir(self, tournament_id) -> str:
        """Return data directory for a tournament, rejecting path traversal."""
        if not tournament_id or not _ID_RE.match(str(tournament_id)):
            raise InvalidInput('Invalid tournament identifier.')
        return os.path.join(self.tournaments_dir, tournament_id)

    def _file_path(self, tournament_id, filename) -> str:
        return os.path.join(self._tournament_dir(tournament_id), filename)

    def exists(self, tournament_id) -> bool:
        return os.path.exists(self._file_path(tournament_id, 'tournament.yaml'))

    def _require(self, tournament_id):
        if not self.exists(tournament_id):
            raise NotFound(f'Tournament {tournament_id} not found')

    def _lock(self, tournament_id) -> FileLock:
        path = self._tournament_dir(tournament_id)
        os.makedirs(path, exist_ok=True)
        return FileLock(os.path.join(path, '.lock'), timeout=LOCK_TIMEOUT_SECONDS)

    def lock(self, tournament_id) -> FileLock:
        """Per-tournament lock serializing read-modify-write cycles."""
        self._require(tournament_id)
        return self._lock(tournament_id)

    # -- yaml helpers ----------------------------------------------------

    def _read_yaml(self, path, default, tolerate_errors=False):
        """Load a YAML file; only the registry may fall back to default on a parse error."""
        if not os.path.exists(path):
            return default
        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            if not tolerate_errors:
                logger.error(f'Failed to parse {path}: {e}')
                raise TournamentError(f'Data file {os.path.basename(path)} is corrupt') from e
            logger.warning(f'Failed to parse {path}: {e}')
            return default
        return data if data else default

    def _write_yaml(self, path, data):
        os.makedirs(os.path.dirname(path), exist_ok=True)
        with open(path, 'w', encoding='utf-8') as f:
            yaml.dump(data, f, default_flow_style=False, sort_keys=False)

    # -- registry --------------------------------------------------------

    def list_tournaments(self) -> list:
        """Registry entries: [{'id', 'venue_name', 'created'}, ...]."""
        data = self._read_yaml(self.registry_file, {'tournaments': []}, tolerate_errors=True)
        return data.get('tournaments', [])

    def _register(self, tournament):
        os.makedirs(self.data_dir, exist_ok=True)
        with self._registry_lock:
            entries = [t for t in self.list_tournaments() if t['id'] != tournament.id]
            entries.append({
                'id': tournament.id,
                'venue_name': tournament.venue_name,
                'created': tournament.created_at or datetime.now().isoformat(),
            })
            self._write_yaml(self.registry_file, {'tournaments': entries})

    # -- records ---------------------------------------------------------

    def create(self, tournament, teams, matches):
        """Write a new tournament in full; a failed write leaves nothing behind."""
        path = self._tournament_dir(tournament.id)
        try:
            with self._lock(tournament.id):
                self.save_tournament(tournament)
                self.save_teams(tournament.id, teams)
                self.save_matches(tournament.id, matches)
            self._register(tournament)
        except Exception:
            logger.error(f'Failed to write tournament {tournament.id}, removing {path}')
            shutil.rmtree(path, ignore_errors=True)
            raise

    def load_tournament(self, tournament_id) -> Tournament:
        self._require(tournament_id)
        data = self._read_yaml(self._file_path(tournament_id, 'tournament.yaml'), None)
        if data is None:
            raise NotFound(f'Tournament {tournament_id} not found')
        return Tournament.from_dict(data)

    def save_tournament(self, tournament):
        self._write_yaml(self._file_path(tournament.id, 'tournament.yaml'), tournament.to_dict())

    def load_teams(self, tournament_id) -> list:
        self._require(tournament_id)
        data = self._read_yaml(self._file_path(tournament_id, 'teams.yaml'), {'teams': []})
        return [Team.from_dict(t) for t in data.get('teams', [])]

    def save_teams(self, tournament_id, teams):
        self._write_yaml(self._file_path(tournament_id, 'teams.yaml'),
                         {'teams': [team.to_dict() for team in teams]})

    def load_matches(self, tournament_id) -> list:
        self._require(tournament_id)
        data = self._read_yaml(self._file_path(tournament_id, 'matches.yaml'), {'matches': []})
        return [Match.from_dict(m) for m in data.get('matches', [])]

    def save_matches(self, tournament_id, matches):
        self._write_yaml(self._file_path(tournament_id, 'matches.yaml'),
                         {'matches': [match.to_dict() for match in matches]})

    def delete(self, tournament_id):
        self._require(tournament_id)
        shutil.rmtree(self._tournament_dir(tournament_id))
        with self._registry_lock:
            entries = [t for t in self.list_tournaments() if t['id'] != tournament_id]
            self._write_yaml(self.registry_file, {'tournaments': entries})
