"""
Random two-player team formation.
"""
import random
from typing import Dict, List, Optional

from core.errors import InvalidInput
from core.randomizer import shuffle


def clean_player_names(player_names: List[str]) -> List[str]:
    """Strip whitespace around names; blank entries are an error."""
    cleaned = []
    for name in player_names:
        name = str(name).strip() if name is not None else ''
        if not name:
            raise InvalidInput('Player names cannot be blank')
        cleaned.append(name)
    return cleaned


def form_teams(player_names: List[str], rng: Optional[random.Random] = None) -> List[Dict[str, str]]:
    """
    Shuffle the players and pair them off in order: (0, 1), (2, 3), ...

    The resulting team order is random too, and callers rely on that when
    they split teams into pools.
    """
    players = clean_player_names(player_names)

    if len(players) < 2:
        raise InvalidInput('At least 2 players are required')
    if len(players) % 2 != 0:
        raise InvalidInput('Number of players must be even to create pairs')

    shuffled = shuffle(players, rng)
    return [
        {'player1': shuffled[i], 'player2': shuffled[i + 1]}
        for i in range(0, len(shuffled), 2)
    ]
