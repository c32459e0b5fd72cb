"""
Builds the team and match records of a new tournament.

Round robin: one global schedule, optionally cut to the requested number of
rounds. Pool + playoff: teams are split into pools that each play their own
round robin, followed by placeholder playoff matches whose teams are filled
in later from seed labels.
"""
import uuid
from typing import Dict, List, Optional

from core.allocation import schedule
from core.elimination import generate_playoff_bracket, get_playoff_round_index, count_playoff_rounds
from core.errors import InvalidInput
from core.formats import partition_pools, resolve_format
from core.models import Team, Match, POOL

MIN_PLAYOFF_TEAMS = 4


def new_id() -> str:
    return uuid.uuid4().hex


def build_teams(tournament_id, team_pairs: List[Dict], pool_groups: Optional[Dict] = None) -> List[Team]:
    """Create Team records from formed pairs; pool_groups maps team index to pool name."""
    pool_groups = pool_groups or {}
    return [
        Team(
            id=new_id(),
            tournament_id=tournament_id,
            player1_name=pair['player1'],
            player2_name=pair['player2'],
            pool_group=pool_groups.get(index),
        )
        for index, pair in enumerate(team_pairs)
    ]


def schedule_to_matches(tournament_id, rounds: List[List[Dict]], first_round: int = 1) -> List[Match]:
    """Convert scheduler output into pool-stage Match records."""
    matches = []
    for round_index, round_matches in enumerate(rounds):
        for scheduled in round_matches:
            matches.append(Match(
                id=new_id(),
                tournament_id=tournament_id,
                round_number=first_round + round_index,
                table_number=scheduled['table_number'],
                team1_id=scheduled['team1_id'],
                team2_id=scheduled['team2_id'],
                stage=POOL,
            ))
    return matches


def generate_round_robin_matches(tournament_id, teams: List[Team], num_tables: int,
                                 num_rounds: Optional[int] = None, rng=None) -> List[Match]:
    """Schedule every team against every other; keep only the first num_rounds rounds."""
    rounds = schedule([team.id for team in teams], num_tables, rng)
    if num_rounds is not None:
        rounds = rounds[:num_rounds]
    return schedule_to_matches(tournament_id, rounds)


def generate_playoff_matches(tournament_id, stages: List[str], num_tables: int,
                             first_round: int) -> List[Match]:
    """
    Create unresolved playoff matches carrying seed labels.

    Each stage gets its own round after the pool stage (final and third
    place share the last one); tables are handed out in bracket order.
    """
    matches = []
    tables_used = {}
    for slot in generate_playoff_bracket(stages):
        round_number = first_round + get_playoff_round_index(slot['stage'], stages) - 1
        table_index = tables_used.get(round_number, 0)
        tables_used[round_number] = table_index + 1
        matches.append(Match(
            id=new_id(),
            tournament_id=tournament_id,
            round_number=round_number,
            table_number=table_index % num_tables + 1,
            team1_id=None,
            team2_id=None,
            stage=slot['stage'],
            bracket_position=slot['bracket_position'],
            team1_seed=slot['team1_seed'],
            team2_seed=slot['team2_seed'],
        ))
    return matches


def generate_pool_playoff(tournament_id, team_pairs: List[Dict], num_tables: int, rng=None) -> Dict:
    """
    Build teams, pool matches and placeholder playoff matches.

    Returns {'teams', 'matches', 'num_rounds', 'format'} where format is the
    resolve_format() result. Fields too small for pools play one pool-less
    round robin whose overall ranking seeds the semifinals.
    """
    if len(team_pairs) < MIN_PLAYOFF_TEAMS:
        raise InvalidInput(f'Pool + playoff needs at least {MIN_PLAYOFF_TEAMS} teams '
                           f'({MIN_PLAYOFF_TEAMS * 2} players)')

    playoff_format = resolve_format(len(team_pairs))
    pools = partition_pools(list(range(len(team_pairs))), playoff_format['num_pools'])
    pool_groups = {index: pool['name'] for pool in pools for index in pool['team_ids']}
    teams = build_teams(tournament_id, team_pairs, pool_groups)

    matches = []
    pool_rounds = 0
    groups = [[teams[i] for i in pool['team_ids']] for pool in pools] or [teams]
    for group in groups:
        if len(group) < 2:
            continue
        rounds = schedule([team.id for team in group], num_tables, rng)
        pool_rounds = max(pool_rounds, len(rounds))
        matches.extend(schedule_to_matches(tournament_id, rounds))

    stages = playoff_format['stages']
    matches.extend(generate_playoff_matches(tournament_id, stages, num_tables, pool_rounds + 1))

    return {
        'teams': teams,
        'matches': matches,
        'num_rounds': pool_rounds + count_playoff_rounds(stages),
        'format': playoff_format,
    }
