"""
Shuffling primitive shared by team formation and scheduling.
"""
import random
from typing import List, Optional, Sequence


def shuffle(sequence: Sequence, rng: Optional[random.Random] = None) -> List:
    """
    Return a uniformly random permutation of sequence (Fisher-Yates).

    The input is copied, never mutated. rng only needs a randint(a, b) method,
    so tests can pass a scripted source and assert exact orderings.
    """
    if rng is None:
        rng = random.Random()

    shuffled = list(sequence)
    for i in range(len(shuffled) - 1, 0, -1):
        j = rng.randint(0, i)
        shuffled[i], shuffled[j] = shuffled[j], shuffled[i]
    return shuffled
