"""
Standings maintenance.

Team counters (wins, losses, points) are stored on Team records for
readers, but they are always re-derived from the match history whenever a
result is set or revised. A revision therefore never needs to undo the
previous outcome by hand and the counters cannot drift.
"""
from datetime import datetime
from typing import Dict, Iterable, List, Optional

from core.errors import InvalidInput, NotFound
from core.models import POOL, POINTS_PER_WIN


class StandingsUpdate:
    """Outcome of apply_result: the updated match and teams plus per-team deltas."""

    def __init__(self, match, teams, deltas, previous_winner_id):
        self.match = match
        self.teams = teams
        self.deltas = deltas
        self.previous_winner_id = previous_winner_id

    @property
    def revised(self):
        """True when an existing result was replaced by a different winner."""
        return (self.previous_winner_id is not None
                and self.previous_winner_id != self.match.winner_id)

    @property
    def changed(self):
        return any(any(delta.values()) for delta in self.deltas.values())

    def to_dict(self):
        return {
            'match': self.match.to_dict(),
            'teams': [team.to_dict() for team in self.teams],
            'deltas': self.deltas,
            'previous_winner_id': self.previous_winner_id,
            'revised': self.revised,
        }

    def __repr__(self):
        return (f"StandingsUpdate(match={self.match.id}, winner={self.match.winner_id}, "
                f"previous={self.previous_winner_id}, deltas={self.deltas})")


def find_match(matches: Iterable, match_id):
    for match in matches:
        if match.id == match_id:
            return match
    raise NotFound(f'Match {match_id} not found')


def derive_team_stats(team_id, matches: Iterable, stages: Optional[Iterable[str]] = None) -> Dict[str, int]:
    """
    Recompute a team's record from match history.

    Only completed matches count. stages optionally restricts which match
    stages contribute (pool standings use pool matches only).
    """
    stages = set(stages) if stages is not None else None
    played = 0
    wins = 0
    for match in matches:
        if not match.is_completed or not match.involves(team_id):
            continue
        if stages is not None and match.stage not in stages:
            continue
        played += 1
        if match.winner_id == team_id:
            wins += 1
    return {
        'played': played,
        'wins': wins,
        'losses': played - wins,
        'points': wins * POINTS_PER_WIN,
    }


def apply_result(match_id, winner_id, matches: List, teams: Iterable, now: Optional[str] = None) -> StandingsUpdate:
    """
    Record winner_id as the winner of a match and refresh both teams' stats.

    Handles the three transitions of a match result:
    - no result -> result: winner gains a win and 2 points, loser a loss
    - result -> different winner: the previous outcome is replaced
    - result -> same winner: standings unchanged, completed_at refreshed

    matches is the tournament's full match list (the match is updated in
    place). teams may be any iterable of Team records; the two teams of the
    match must be among them.
    """
    match = find_match(matches, match_id)

    if not match.is_resolved:
        raise InvalidInput(f'Match {match_id} has no teams assigned yet')
    if winner_id not in (match.team1_id, match.team2_id):
        raise InvalidInput(f'Team {winner_id} is not playing in match {match_id}')

    teams_by_id = {team.id: team for team in teams}
    affected = []
    for team_id in (match.team1_id, match.team2_id):
        if team_id not in teams_by_id:
            raise NotFound(f'Team {team_id} not found')
        affected.append(teams_by_id[team_id])

    before = {team.id: (team.wins, team.losses, team.points) for team in affected}
    previous_winner_id = match.winner_id

    match.winner_id = winner_id
    match.completed_at = now or datetime.now().isoformat()

    deltas = {}
    for team in affected:
        stats = derive_team_stats(team.id, matches)
        team.wins = stats['wins']
        team.losses = stats['losses']
        team.points = stats['points']
        old_wins, old_losses, old_points = before[team.id]
        deltas[team.id] = {
            'wins': team.wins - old_wins,
            'losses': team.losses - old_losses,
            'points': team.points - old_points,
        }

    return StandingsUpdate(match, affected, deltas, previous_winner_id)


def recalculate_all(teams: Iterable, matches: List) -> None:
    """Re-derive every team's counters from the match history."""
    for team in teams:
        stats = derive_team_stats(team.id, matches)
        team.wins = stats['wins']
        team.losses = stats['losses']
        team.points = stats['points']


def rank_teams(teams: Iterable) -> List:
    """Order teams by points, then wins, both descending."""
    return sorted(teams, key=lambda t: (-t.points, -t.wins))


def calculate_pool_standings(teams: Iterable, matches: List) -> Dict[Optional[str], List[Dict]]:
    """
    Calculate ranked standings for each pool from pool-stage matches.

    Returns: {pool_name: [{'team_id', 'team', 'played', 'wins', 'losses',
    'points'}, ...]} with pools in name order. Teams without a pool are
    grouped under None.
    """
    pools = {}
    for team in teams:
        pools.setdefault(team.pool_group, []).append(team)

    standings = {}
    for pool_name in sorted(pools, key=lambda p: (p is None, p or '')):
        rows = []
        for team in pools[pool_name]:
            stats = derive_team_stats(team.id, matches, stages=[POOL])
            rows.append({
                'team_id': team.id,
                'team': team.name,
                'played': stats['played'],
                'wins': stats['wins'],
                'losses': stats['losses'],
                'points': stats['points'],
            })
        rows.sort(key=lambda r: (-r['points'], -r['wins']))
        standings[pool_name] = rows
    return standings


def pool_rankings(standings: Dict[Optional[str], List[Dict]]) -> Dict[Optional[str], List]:
    """Reduce pool standings to ranked team ids per pool, as resolve_seed expects."""
    return {pool: [row['team_id'] for row in rows] for pool, rows in standings.items()}


def find_tied_top_teams(teams: Iterable) -> List:
    """Teams sharing the highest point total; empty when there is no tie."""
    ranked = sorted(teams, key=lambda t: -t.points)
    if len(ranked) < 2:
        return []

    top_score = ranked[0].points
    tied = [team for team in ranked if team.points == top_score]
    return tied if len(tied) > 1 else []
