"""
Unit tests for shuffling and random team formation.
"""
import pytest
import random
import sys
import os
from collections import Counter

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from core.errors import InvalidInput
from core.randomizer import shuffle
from core.teams import form_teams


class TestShuffle:
    """Tests for the Fisher-Yates shuffle."""

    def test_shuffle_exact_order_with_scripted_source(self, scripted_random):
        """Swaps follow the drawn indices from the last position down."""
        source = scripted_random([0, 0])
        assert shuffle(["a", "b", "c"], source) == ["b", "c", "a"]
        assert source.calls == [(0, 2), (0, 1)]

    def test_shuffle_identity_draws_keep_order(self, scripted_random):
        source = scripted_random([3, 2, 1])
        assert shuffle([1, 2, 3, 4], source) == [1, 2, 3, 4]

    def test_shuffle_does_not_mutate_input(self, rng):
        items = list(range(10))
        shuffle(items, rng)
        assert items == list(range(10))

    def test_shuffle_is_permutation(self, rng):
        items = ["x", "y", "y", "z", "w"]
        assert Counter(shuffle(items, rng)) == Counter(items)

    def test_shuffle_empty_and_single(self):
        assert shuffle([]) == []
        assert shuffle(["solo"]) == ["solo"]

    def test_shuffle_accepts_tuples(self, rng):
        assert sorted(shuffle((3, 1, 2), rng)) == [1, 2, 3]

    def test_shuffle_same_seed_same_result(self):
        assert shuffle(range(20), random.Random(7)) == shuffle(range(20), random.Random(7))


class TestFormTeams:
    """Tests for pairing players into two-player teams."""

    def test_pairs_consecutive_after_shuffle(self, scripted_random):
        source = scripted_random([3, 2, 1])
        teams = form_teams(["A", "B", "C", "D"], source)
        assert teams == [
            {'player1': 'A', 'player2': 'B'},
            {'player1': 'C', 'player2': 'D'},
        ]

    def test_team_count_and_players_preserved(self, eight_players, rng):
        teams = form_teams(eight_players, rng)
        assert len(teams) == 4
        players = [p for team in teams for p in (team['player1'], team['player2'])]
        assert Counter(players) == Counter(eight_players)

    def test_each_team_has_two_distinct_entries(self, rng):
        players = [f"P{i}" for i in range(12)]
        for team in form_teams(players, rng):
            assert team['player1'] != team['player2']

    def test_duplicate_names_preserved(self, rng):
        """Two players sharing a name are still both placed."""
        players = ["Sam", "Sam", "Alex", "Jo"]
        teams = form_teams(players, rng)
        placed = [p for team in teams for p in team.values()]
        assert Counter(placed) == Counter(players)

    def test_names_are_stripped(self, scripted_random):
        teams = form_teams(["  Ann ", "Ben"], scripted_random([1]))
        assert teams == [{'player1': 'Ann', 'player2': 'Ben'}]

    @pytest.mark.parametrize("players", [[], ["Solo"]])
    def test_too_few_players(self, players):
        with pytest.raises(InvalidInput, match="At least 2 players"):
            form_teams(players)

    def test_odd_player_count(self):
        with pytest.raises(InvalidInput, match="even"):
            form_teams(["A", "B", "C"])

    def test_blank_player_name(self):
        with pytest.raises(InvalidInput, match="blank"):
            form_teams(["A", "  "])

    def test_input_list_unchanged(self, eight_players, rng):
        original = list(eight_players)
        form_teams(eight_players, rng)
        assert eight_players == original
