"""
Round-robin scheduling onto a fixed number of tables.

The circle method produces the logical rounds (every team busy at once);
each logical round is then split into table-sized chunks, so a venue with
fewer tables than simultaneous matches simply plays more rounds.
"""
import math
import random
from typing import Dict, List, Optional, Sequence, Tuple

from core.errors import InvalidInput
from core.randomizer import shuffle

BYE = None


def circle_rounds(team_ids: Sequence) -> List[List[Tuple]]:
    """
    Build the logical rounds of a complete round robin with the circle method.

    The first entry stays fixed while the rest rotate one step per round.
    An odd field gets a bye slot; pairings against the bye are dropped, so
    every round holds exactly len(team_ids) // 2 pairings.
    """
    entries = list(team_ids)
    if len(entries) % 2 == 1:
        entries.append(BYE)

    n = len(entries)
    if n < 2:
        return []

    fixed = entries[0]
    rest = entries[1:]
    rounds = []
    for _ in range(n - 1):
        line = [fixed] + rest
        pairings = []
        for i in range(n // 2):
            a, b = line[i], line[n - 1 - i]
            if a is not BYE and b is not BYE:
                pairings.append((a, b))
        rounds.append(pairings)
        # Last element moves to the front of the rotating ring
        rest = [rest[-1]] + rest[:-1]
    return rounds


def split_round(pairings: Sequence[Tuple], num_tables: int) -> List[List[Dict]]:
    """Split one logical round into chunks of at most num_tables, tables numbered 1..k."""
    chunks = []
    for start in range(0, len(pairings), num_tables):
        chunk = pairings[start:start + num_tables]
        chunks.append([
            {'team1_id': team1, 'team2_id': team2, 'table_number': table}
            for table, (team1, team2) in enumerate(chunk, start=1)
        ])
    return chunks


def schedule(team_ids: Sequence, num_tables: int,
             rng: Optional[random.Random] = None) -> List[List[Dict]]:
    """
    Generate a complete round-robin schedule constrained by table count.

    Returns a list of rounds; each round is a list of
    {'team1_id', 'team2_id', 'table_number'} dicts. Every pair of teams meets
    exactly once and no team plays twice in a round. The random source only
    changes pairing order and grouping.
    """
    if len(team_ids) < 2:
        raise InvalidInput('At least 2 teams are required')
    if num_tables < 1:
        raise InvalidInput('At least 1 table is required')
    if len(set(team_ids)) != len(team_ids):
        raise InvalidInput('Team ids must be unique')

    if rng is None:
        rng = random.Random()

    ordered = shuffle(team_ids, rng)
    rounds = []
    for pairings in circle_rounds(ordered):
        rounds.extend(split_round(shuffle(pairings, rng), num_tables))
    return rounds


def calculate_total_matches(num_teams: int) -> int:
    """Number of matches in a single round robin of num_teams."""
    return num_teams * (num_teams - 1) // 2


def calculate_total_rounds(num_teams: int) -> int:
    """Logical rounds for a full round robin when tables are unlimited."""
    return num_teams - 1 if num_teams % 2 == 0 else num_teams


def recommend_rounds(num_players: int, num_tables: int) -> Dict:
    """
    Suggest how many rounds to play for a player/table count.

    recommended == max is the number of rounds a full round robin needs
    when every round fills every table; min is a floor for meaningful
    partial results.
    """
    if num_tables < 1:
        raise InvalidInput('At least 1 table is required')

    num_teams = num_players // 2
    total_matches = calculate_total_matches(num_teams)
    rounds_needed = math.ceil(total_matches / num_tables)

    tables_label = 'table' if num_tables == 1 else 'tables'
    explanation = (
        f"With {num_teams} teams and {num_tables} {tables_label}: "
        f"{total_matches} total matches across {rounds_needed} rounds. "
        f"Each round uses all {num_tables} {tables_label}."
    )

    return {
        'recommended': rounds_needed,
        'min': max(2, math.ceil(rounds_needed / 2)),
        'max': rounds_needed,
        'explanation': explanation,
    }
