"""
Playoff bracket skeleton generation and seed resolution.

Brackets are generated before any pool match is played, so every slot
carries symbolic seed labels ("Pool A 1st", "QF2 Winner", "SF1 Loser").
resolve_seed() turns a label into a concrete team id once the pool stage
or the feeding playoff match has a result.
"""
import re
from typing import Dict, Iterable, List, Optional, Sequence

from core.errors import InvalidInput, NotFound
from core.formats import POOL_NAMES
from core.models import POOL, QUARTERFINAL, SEMIFINAL, FINAL, THIRD_PLACE, TIEBREAKER

STAGE_DISPLAY_NAMES = {
    POOL: 'Pool Stage',
    QUARTERFINAL: 'Quarter Finals',
    SEMIFINAL: 'Semi Finals',
    THIRD_PLACE: '3rd Place Playoff',
    FINAL: 'Final',
    TIEBREAKER: 'Tiebreaker',
}

MATCH_SEED_PREFIXES = {'QF': QUARTERFINAL, 'SF': SEMIFINAL}

# Pools referenced by the direct-semifinal labels when a field has no pools
NO_POOL_SEED_POOLS = 2

_POOL_SEED_RE = re.compile(r'^Pool ([A-H]) (\d+)(?:st|nd|rd|th)$')
_MATCH_SEED_RE = re.compile(r'^(QF|SF)(\d+) (Winner|Loser)$')


def get_stage_display_name(stage: str) -> str:
    """Get the display name of a match stage."""
    return STAGE_DISPLAY_NAMES.get(stage, stage)


def _slot(stage: str, position: int, seed1: str, seed2: str) -> Dict:
    return {
        'stage': stage,
        'bracket_position': position,
        'team1_seed': seed1,
        'team2_seed': seed2,
    }


def generate_playoff_bracket(stages: Sequence[str]) -> List[Dict]:
    """
    Build the placeholder knockout slots for the given stages.

    Quarterfinals cross pools so group winners cannot meet their own pool's
    runner-up before the final. Semifinals are fed by quarterfinal winners
    when quarterfinals exist, otherwise straight from pools A and B.
    """
    slots = []

    if QUARTERFINAL in stages:
        slots.extend([
            _slot(QUARTERFINAL, 1, 'Pool A 1st', 'Pool D 2nd'),
            _slot(QUARTERFINAL, 2, 'Pool C 1st', 'Pool B 2nd'),
            _slot(QUARTERFINAL, 3, 'Pool B 1st', 'Pool C 2nd'),
            _slot(QUARTERFINAL, 4, 'Pool D 1st', 'Pool A 2nd'),
        ])

    if SEMIFINAL in stages:
        if QUARTERFINAL in stages:
            slots.extend([
                _slot(SEMIFINAL, 1, 'QF1 Winner', 'QF2 Winner'),
                _slot(SEMIFINAL, 2, 'QF3 Winner', 'QF4 Winner'),
            ])
        else:
            slots.extend([
                _slot(SEMIFINAL, 1, 'Pool A 1st', 'Pool B 2nd'),
                _slot(SEMIFINAL, 2, 'Pool B 1st', 'Pool A 2nd'),
            ])

    if THIRD_PLACE in stages:
        slots.append(_slot(THIRD_PLACE, 1, 'SF1 Loser', 'SF2 Loser'))

    if FINAL in stages:
        slots.append(_slot(FINAL, 1, 'SF1 Winner', 'SF2 Winner'))

    return slots


def get_playoff_round_index(stage: str, stages: Sequence[str]) -> int:
    """1-based round of a playoff stage; final and third place share the last round."""
    knockout_rounds = [s for s in (QUARTERFINAL, SEMIFINAL) if s in stages]
    if stage in knockout_rounds:
        return knockout_rounds.index(stage) + 1
    return len(knockout_rounds) + 1


def count_playoff_rounds(stages: Sequence[str]) -> int:
    """Number of playoff rounds the stages span."""
    if not stages:
        return 0
    return max(get_playoff_round_index(stage, stages) for stage in stages)


def parse_seed_label(label: str) -> Dict:
    """
    Parse a seed label.

    Returns {'kind': 'pool', 'pool': 'A', 'place': 1} for pool placements or
    {'kind': 'match', 'stage': 'semifinal', 'position': 1, 'outcome': 'winner'}
    for seeds fed by an earlier playoff match.
    """
    label = (label or '').strip()

    match = _POOL_SEED_RE.match(label)
    if match:
        place = int(match.group(2))
        if place < 1:
            raise InvalidInput(f'Invalid seed label: {label!r}')
        return {'kind': 'pool', 'pool': match.group(1), 'place': place}

    match = _MATCH_SEED_RE.match(label)
    if match:
        return {
            'kind': 'match',
            'stage': MATCH_SEED_PREFIXES[match.group(1)],
            'position': int(match.group(2)),
            'outcome': match.group(3).lower(),
        }

    raise InvalidInput(f'Invalid seed label: {label!r}')


def _resolve_pool_seed(seed: Dict, label: str, pool_standings: Dict[Optional[str], List]) -> str:
    pool_name = seed['pool']
    place = seed['place']

    if pool_name in pool_standings:
        ranking = pool_standings[pool_name]
        if place > len(ranking):
            raise NotFound(f'Pool {pool_name} has no team in place {place}')
        return ranking[place - 1]

    if None in pool_standings:
        # No pools: all first places outrank all second places, pools in name order
        pool_index = POOL_NAMES.index(pool_name)
        if pool_index >= NO_POOL_SEED_POOLS:
            raise NotFound(f'Seed {label!r} does not exist without pools')
        rank = (place - 1) * NO_POOL_SEED_POOLS + pool_index + 1
        ranking = pool_standings[None]
        if rank > len(ranking):
            raise NotFound(f'No team holds overall rank {rank} for seed {label!r}')
        return ranking[rank - 1]

    raise NotFound(f'Pool {pool_name} does not exist')


def _resolve_match_seed(seed: Dict, label: str, playoff_matches: Iterable) -> str:
    for match in playoff_matches:
        if match.stage != seed['stage'] or match.bracket_position != seed['position']:
            continue
        if not match.is_completed:
            raise NotFound(f'Seed {label!r} is not decided yet')
        if seed['outcome'] == 'winner':
            return match.winner_id
        return match.loser_id
    raise NotFound(f'No {seed["stage"]} match at position {seed["position"]}')


def find_dependent_matches(match, matches: Iterable) -> List:
    """Matches seeded from the winner or loser of match."""
    dependents = []
    for other in matches:
        for label in (other.team1_seed, other.team2_seed):
            if not label:
                continue
            seed = parse_seed_label(label)
            if (seed['kind'] == 'match' and seed['stage'] == match.stage
                    and seed['position'] == match.bracket_position):
                dependents.append(other)
                break
    return dependents


def resolve_seed(label: str, pool_standings: Dict[Optional[str], List],
                 playoff_matches: Iterable = ()) -> str:
    """
    Resolve a seed label to a team id.

    pool_standings maps pool name to team ids in ranked order. A tournament
    without pools passes its overall ranking under the key None.
    playoff_matches are Match records used for "QFn/SFn Winner/Loser" seeds.
    """
    seed = parse_seed_label(label)
    if seed['kind'] == 'pool':
        return _resolve_pool_seed(seed, label, pool_standings)
    return _resolve_match_seed(seed, label, playoff_matches)
