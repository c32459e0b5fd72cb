"""
Pool partitioning and playoff format policy for pool + playoff tournaments.
"""
import math
from typing import Dict, List, Sequence

from core.models import QUARTERFINAL, SEMIFINAL, FINAL, THIRD_PLACE

POOL_NAMES = ['A', 'B', 'C', 'D', 'E', 'F', 'G', 'H']


def partition_pools(team_ids: Sequence, num_pools: int) -> List[Dict]:
    """
    Divide teams into named pools, filling each in input order.

    teams_per_pool = ceil(count / num_pools); trailing pools may be smaller
    and empty pools are omitted. At most len(POOL_NAMES) pools are created.
    """
    num_pools = min(num_pools, len(POOL_NAMES))
    if num_pools <= 0 or not team_ids:
        return []

    teams_per_pool = math.ceil(len(team_ids) / num_pools)
    pools = []
    for i in range(num_pools):
        pool_teams = list(team_ids[i * teams_per_pool:(i + 1) * teams_per_pool])
        if pool_teams:
            pools.append({'name': POOL_NAMES[i], 'team_ids': pool_teams})
    return pools


def resolve_format(num_teams: int) -> Dict:
    """
    Map a team count to the playoff structure.

    Bands:
        8        -> 2 pools of 4, top 2 qualify, semifinals
        12..16   -> 4 pools, top 2 qualify, quarterfinals
        6+       -> 2 pools, top 2 qualify, semifinals
        below 6  -> no pools, top 4 go straight to semifinals
    Counts 9-11 and above 16 fall into the generic 6+ band.
    """
    if num_teams == 8:
        return {
            'num_pools': 2,
            'teams_per_pool': 4,
            'teams_qualify': 2,
            'stages': [SEMIFINAL, FINAL, THIRD_PLACE],
        }

    if 12 <= num_teams <= 16:
        return {
            'num_pools': 4,
            'teams_per_pool': math.ceil(num_teams / 4),
            'teams_qualify': 2,
            'stages': [QUARTERFINAL, SEMIFINAL, FINAL, THIRD_PLACE],
        }

    if num_teams >= 6:
        return {
            'num_pools': 2,
            'teams_per_pool': math.ceil(num_teams / 2),
            'teams_qualify': 2,
            'stages': [SEMIFINAL, FINAL, THIRD_PLACE],
        }

    return {
        'num_pools': 0,
        'teams_per_pool': 0,
        'teams_qualify': 4,
        'stages': [SEMIFINAL, FINAL, THIRD_PLACE],
    }
