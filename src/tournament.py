"""
Tournament operations used by the web app and the CLI.

Every write runs under the tournament's file lock so result revisions are
applied strictly one after another. Listeners registered with subscribe()
are told about each change after it has been saved.
"""
import logging
import random
from datetime import datetime
from typing import Callable, Dict, List, Optional

from core.allocation import recommend_rounds
from core.elimination import find_dependent_matches, get_stage_display_name, resolve_seed
from core.errors import InvalidInput, NotFound
from core.models import (
    Tournament, Match, FORMATS, STATUSES, ROUND_ROBIN, POOL_PLAYOFF, POOL,
    PLAYOFF_STAGES, TIEBREAKER,
)
from core.standings import (
    apply_result, calculate_pool_standings, find_match, pool_rankings, rank_teams, find_tied_top_teams,
)
from core.teams import form_teams
from generate_matches import (
    new_id, build_teams, generate_round_robin_matches, generate_pool_playoff,
)

logger = logging.getLogger(__name__)

_listeners: List[Callable] = []


def subscribe(listener: Callable) -> None:
    """Register listener(event, tournament_id, payload) for change notifications."""
    if listener not in _listeners:
        _listeners.append(listener)


def unsubscribe(listener: Callable) -> None:
    if listener in _listeners:
        _listeners.remove(listener)


def _notify(event: str, tournament_id, payload: Dict) -> None:
    for listener in list(_listeners):
        try:
            listener(event, tournament_id, payload)
        except Exception:
            logger.exception(f'Listener {listener!r} failed on {event} for tournament {tournament_id}')


def create_tournament(store, venue_name, tournament_date, num_tables, player_names,
                      tournament_format=ROUND_ROBIN, num_rounds=None,
                      venue_location=None, start_time=None, rng=None) -> Tournament:
    """
    Form teams, schedule matches and persist a new tournament.

    Round robin keeps the first num_rounds rounds of the full schedule
    (all of it when num_rounds is None). Pool + playoff schedules each pool
    separately and appends placeholder playoff matches.
    """
    if not venue_name or not str(venue_name).strip():
        raise InvalidInput('Venue name is required')
    if tournament_format not in FORMATS:
        raise InvalidInput(f'Unknown tournament format: {tournament_format}')
    if num_tables is None or num_tables < 1:
        raise InvalidInput('At least 1 table is required')
    if num_rounds is not None and num_rounds < 1:
        raise InvalidInput('Number of rounds must be at least 1')

    if rng is None:
        rng = random.Random()

    tournament_id = new_id()
    team_pairs = form_teams(player_names, rng)

    if tournament_format == POOL_PLAYOFF:
        generated = generate_pool_playoff(tournament_id, team_pairs, num_tables, rng)
        teams = generated['teams']
        matches = generated['matches']
        stored_rounds = generated['num_rounds']
    else:
        teams = build_teams(tournament_id, team_pairs)
        matches = generate_round_robin_matches(tournament_id, teams, num_tables, num_rounds, rng)
        stored_rounds = num_rounds if num_rounds is not None else max(m.round_number for m in matches)

    tournament = Tournament(
        id=tournament_id,
        venue_name=str(venue_name).strip(),
        venue_location=venue_location,
        tournament_date=tournament_date,
        start_time=start_time,
        num_tables=num_tables,
        num_rounds=stored_rounds,
        num_players=len(player_names),
        status='setup',
        format=tournament_format,
        created_at=datetime.now().isoformat(),
    )

    store.create(tournament, teams, matches)
    logger.info(f'Created {tournament_format} tournament {tournament_id} at {tournament.venue_name}: '
                f'{len(teams)} teams, {len(matches)} matches, {stored_rounds} rounds')
    return tournament


def submit_result(store, tournament_id, match_id, winner_id, now=None):
    """Set or revise a match winner and re-derive both teams' standings."""
    with store.lock(tournament_id):
        tournament = store.load_tournament(tournament_id)
        teams = store.load_teams(tournament_id)
        matches = store.load_matches(tournament_id)

        match = find_match(matches, match_id)
        if match.stage in PLAYOFF_STAGES and match.winner_id not in (None, winner_id):
            decided = [m for m in find_dependent_matches(match, matches) if m.is_completed]
            if decided:
                raise InvalidInput(f'Match {match_id} feeds {get_stage_display_name(decided[0].stage)}, '
                                   f'which already has a result')

        update = apply_result(match_id, winner_id, matches, teams, now)

        store.save_matches(tournament_id, matches)
        store.save_teams(tournament_id, teams)
        if tournament.status == 'setup':
            tournament.status = 'in_progress'
            store.save_tournament(tournament)

    if update.revised:
        logger.info(f'Match {match_id} in tournament {tournament_id} revised: '
                    f'winner {update.previous_winner_id} -> {winner_id}')
    else:
        logger.info(f'Match {match_id} in tournament {tournament_id} won by {winner_id}')

    _notify('result_submitted', tournament_id, update.to_dict())
    return update


def recommend(num_players: int, num_tables: int) -> Dict:
    """Advisory round count for the admin form; no state change."""
    return recommend_rounds(num_players, num_tables)


def find_tiebreaker_candidates(store, tournament_id) -> List:
    """
    Teams tied for first place that need a tiebreaker.

    Empty until every match has a result, and while a tiebreaker is still
    waiting to be played.
    """
    teams = store.load_teams(tournament_id)
    matches = store.load_matches(tournament_id)

    if not matches or not all(m.is_completed for m in matches):
        return []
    if any(m.stage == TIEBREAKER and not m.is_completed for m in matches):
        return []
    return find_tied_top_teams(teams)


def add_tiebreaker(store, tournament_id, team1_id, team2_id, table_number=1) -> Match:
    """Append a tiebreaker match after the last scheduled round."""
    if team1_id == team2_id:
        raise InvalidInput('A tiebreaker needs two different teams')

    with store.lock(tournament_id):
        tournament = store.load_tournament(tournament_id)
        teams = store.load_teams(tournament_id)
        matches = store.load_matches(tournament_id)

        team_ids = {team.id for team in teams}
        for team_id in (team1_id, team2_id):
            if team_id not in team_ids:
                raise NotFound(f'Team {team_id} not found')

        next_round = max((m.round_number for m in matches), default=0) + 1
        match = Match(
            id=new_id(),
            tournament_id=tournament_id,
            round_number=next_round,
            table_number=table_number,
            team1_id=team1_id,
            team2_id=team2_id,
            stage=TIEBREAKER,
        )
        matches.append(match)
        store.save_matches(tournament_id, matches)

        if next_round > tournament.num_rounds:
            tournament.num_rounds = next_round
            store.save_tournament(tournament)

    logger.info(f'Added tiebreaker {match.id} in round {next_round} of tournament {tournament_id}')
    _notify('tiebreaker_added', tournament_id, match.to_dict())
    return match


def update_status(store, tournament_id, status) -> Tournament:
    if status not in STATUSES:
        raise InvalidInput(f'Unknown tournament status: {status}')

    with store.lock(tournament_id):
        tournament = store.load_tournament(tournament_id)
        tournament.status = status
        store.save_tournament(tournament)

    logger.info(f'Tournament {tournament_id} status set to {status}')
    _notify('status_changed', tournament_id, {'status': status})
    return tournament


def advance_playoffs(store, tournament_id) -> List[Match]:
    """
    Fill in playoff matches whose seeds can now be determined.

    Pool placements are only used once every pool match has a result;
    "QFn/SFn Winner/Loser" seeds need the feeding match to be completed.
    Matches without a result are re-seeded when a revised earlier result
    changes who qualifies. Returns the matches whose teams changed in this
    call.
    """
    with store.lock(tournament_id):
        tournament = store.load_tournament(tournament_id)
        if tournament.format != POOL_PLAYOFF:
            raise InvalidInput('Only pool + playoff tournaments have playoffs')

        teams = store.load_teams(tournament_id)
        matches = store.load_matches(tournament_id)

        pool_matches = [m for m in matches if m.stage == POOL]
        playoff_matches = [m for m in matches if m.stage in PLAYOFF_STAGES]
        pool_stage_done = all(m.is_completed for m in pool_matches)
        rankings = pool_rankings(calculate_pool_standings(teams, matches)) if pool_stage_done else {}

        advanced = []
        for match in playoff_matches:
            if match.is_completed:
                continue
            team1_id = _try_resolve(match.team1_seed, rankings, playoff_matches, pool_stage_done)
            team2_id = _try_resolve(match.team2_seed, rankings, playoff_matches, pool_stage_done)
            if team1_id is None or team2_id is None:
                continue
            if (team1_id, team2_id) == (match.team1_id, match.team2_id):
                continue
            if match.is_resolved:
                logger.info(f'Re-seeding {match.stage} {match.bracket_position} in tournament {tournament_id}: '
                            f'{match.team1_id} v {match.team2_id} -> {team1_id} v {team2_id}')
            match.team1_id = team1_id
            match.team2_id = team2_id
            advanced.append(match)

        if advanced:
            store.save_matches(tournament_id, matches)

    if advanced:
        logger.info(f'Resolved {len(advanced)} playoff matches in tournament {tournament_id}')
        _notify('playoffs_advanced', tournament_id, {'matches': [m.to_dict() for m in advanced]})
    return advanced


def _try_resolve(label, rankings, playoff_matches, pool_stage_done) -> Optional[str]:
    if label is None:
        return None
    if label.startswith('Pool ') and not pool_stage_done:
        return None
    try:
        return resolve_seed(label, rankings, playoff_matches)
    except NotFound as e:
        logger.debug(f'Seed {label!r} not resolvable yet: {e}')
        return None


def load_snapshot(store, tournament_id) -> Dict:
    """Everything a read view needs: tournament, ranked teams, matches, pool standings."""
    tournament = store.load_tournament(tournament_id)
    teams = store.load_teams(tournament_id)
    matches = store.load_matches(tournament_id)
    matches.sort(key=lambda m: (m.round_number, m.table_number))
    return {
        'tournament': tournament,
        'teams': rank_teams(teams),
        'matches': matches,
        'pool_standings': calculate_pool_standings(teams, matches),
    }
