"""
Unit tests for playoff bracket generation and seed resolution.
"""
import pytest
import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from core.elimination import (
    generate_playoff_bracket,
    find_dependent_matches,
    get_stage_display_name,
    get_playoff_round_index,
    count_playoff_rounds,
    parse_seed_label,
    resolve_seed,
)
from core.errors import InvalidInput, NotFound
from core.formats import resolve_format
from core.models import Match


def playoff_match(stage, position, team1, team2, winner=None):
    return Match(id=f"{stage}-{position}", tournament_id="x", round_number=5, table_number=1,
                 team1_id=team1, team2_id=team2, winner_id=winner, stage=stage,
                 bracket_position=position)


class TestGeneratePlayoffBracket:
    """Tests for the placeholder bracket skeleton."""

    def test_eight_team_format(self):
        """Semis straight from pools A/B, then third place and final; no quarters."""
        bracket = generate_playoff_bracket(resolve_format(8)['stages'])
        assert bracket == [
            {'stage': 'semifinal', 'bracket_position': 1, 'team1_seed': 'Pool A 1st', 'team2_seed': 'Pool B 2nd'},
            {'stage': 'semifinal', 'bracket_position': 2, 'team1_seed': 'Pool B 1st', 'team2_seed': 'Pool A 2nd'},
            {'stage': 'third_place', 'bracket_position': 1, 'team1_seed': 'SF1 Loser', 'team2_seed': 'SF2 Loser'},
            {'stage': 'final', 'bracket_position': 1, 'team1_seed': 'SF1 Winner', 'team2_seed': 'SF2 Winner'},
        ]

    def test_quarterfinal_format(self):
        bracket = generate_playoff_bracket(['quarterfinal', 'semifinal', 'final', 'third_place'])
        quarters = [s for s in bracket if s['stage'] == 'quarterfinal']
        assert [(q['team1_seed'], q['team2_seed']) for q in quarters] == [
            ('Pool A 1st', 'Pool D 2nd'),
            ('Pool C 1st', 'Pool B 2nd'),
            ('Pool B 1st', 'Pool C 2nd'),
            ('Pool D 1st', 'Pool A 2nd'),
        ]
        semis = [s for s in bracket if s['stage'] == 'semifinal']
        assert [(s['team1_seed'], s['team2_seed']) for s in semis] == [
            ('QF1 Winner', 'QF2 Winner'),
            ('QF3 Winner', 'QF4 Winner'),
        ]
        assert len(bracket) == 8

    def test_quarterfinals_never_pair_pool_mates(self):
        bracket = generate_playoff_bracket(['quarterfinal'])
        for slot in bracket:
            assert slot['team1_seed'].split()[1] != slot['team2_seed'].split()[1]

    def test_only_requested_stages(self):
        assert [s['stage'] for s in generate_playoff_bracket(['final'])] == ['final']
        assert generate_playoff_bracket([]) == []


class TestStageHelpers:
    """Tests for stage names and playoff round numbering."""

    @pytest.mark.parametrize("stage,name", [
        ('pool', 'Pool Stage'),
        ('quarterfinal', 'Quarter Finals'),
        ('semifinal', 'Semi Finals'),
        ('third_place', '3rd Place Playoff'),
        ('final', 'Final'),
        ('tiebreaker', 'Tiebreaker'),
        ('mystery', 'mystery'),
    ])
    def test_display_names(self, stage, name):
        assert get_stage_display_name(stage) == name

    def test_round_index_with_quarters(self):
        stages = ['quarterfinal', 'semifinal', 'final', 'third_place']
        assert get_playoff_round_index('quarterfinal', stages) == 1
        assert get_playoff_round_index('semifinal', stages) == 2
        assert get_playoff_round_index('final', stages) == 3
        assert get_playoff_round_index('third_place', stages) == 3
        assert count_playoff_rounds(stages) == 3

    def test_round_index_without_quarters(self):
        stages = ['semifinal', 'final', 'third_place']
        assert get_playoff_round_index('semifinal', stages) == 1
        assert get_playoff_round_index('final', stages) == 2
        assert count_playoff_rounds(stages) == 2
        assert count_playoff_rounds([]) == 0


class TestParseSeedLabel:
    """Tests for seed label parsing."""

    def test_pool_placement(self):
        assert parse_seed_label('Pool C 2nd') == {'kind': 'pool', 'pool': 'C', 'place': 2}

    def test_match_outcome(self):
        assert parse_seed_label('QF3 Winner') == {
            'kind': 'match', 'stage': 'quarterfinal', 'position': 3, 'outcome': 'winner',
        }
        assert parse_seed_label('SF2 Loser')['outcome'] == 'loser'

    @pytest.mark.parametrize("label", ['', 'Pool Z 1st', 'Pool A 0th', 'F1 Winner', 'Champion', None])
    def test_invalid_labels(self, label):
        with pytest.raises(InvalidInput):
            parse_seed_label(label)


class TestResolveSeed:
    """Tests for turning seed labels into team ids."""

    def test_pool_placements(self):
        standings = {'A': ['a1', 'a2', 'a3'], 'B': ['b1', 'b2', 'b3']}
        assert resolve_seed('Pool A 1st', standings) == 'a1'
        assert resolve_seed('Pool B 2nd', standings) == 'b2'

    def test_missing_pool(self):
        with pytest.raises(NotFound):
            resolve_seed('Pool D 1st', {'A': ['a1'], 'B': ['b1']})

    def test_missing_place(self):
        """A one-team pool has no runner-up."""
        with pytest.raises(NotFound):
            resolve_seed('Pool D 2nd', {'D': ['d1']})

    def test_overall_ranking_without_pools(self):
        """No pools: semifinals become 1 v 4 and 2 v 3 of the overall ranking."""
        standings = {None: ['r1', 'r2', 'r3', 'r4', 'r5']}
        assert resolve_seed('Pool A 1st', standings) == 'r1'
        assert resolve_seed('Pool B 1st', standings) == 'r2'
        assert resolve_seed('Pool A 2nd', standings) == 'r3'
        assert resolve_seed('Pool B 2nd', standings) == 'r4'

    def test_overall_ranking_too_short(self):
        with pytest.raises(NotFound):
            resolve_seed('Pool B 2nd', {None: ['r1', 'r2', 'r3']})

    def test_overall_ranking_rejects_other_pools(self):
        with pytest.raises(NotFound):
            resolve_seed('Pool C 1st', {None: ['r1', 'r2', 'r3', 'r4']})

    def test_match_winner_and_loser(self):
        matches = [
            playoff_match('semifinal', 1, 'x', 'y', winner='y'),
            playoff_match('semifinal', 2, 'z', 'w', winner='z'),
        ]
        assert resolve_seed('SF1 Winner', {}, matches) == 'y'
        assert resolve_seed('SF1 Loser', {}, matches) == 'x'
        assert resolve_seed('SF2 Loser', {}, matches) == 'w'

    def test_undecided_match(self):
        matches = [playoff_match('quarterfinal', 1, 'x', 'y')]
        with pytest.raises(NotFound, match="not decided"):
            resolve_seed('QF1 Winner', {}, matches)

    def test_missing_match(self):
        with pytest.raises(NotFound):
            resolve_seed('QF4 Winner', {}, [playoff_match('quarterfinal', 1, 'x', 'y', winner='x')])


class TestFindDependentMatches:
    def test_semifinal_feeds_final_and_third_place(self):
        bracket = [
            Match(id=f"{slot['stage']}-{slot['bracket_position']}", tournament_id="x", round_number=5,
                  table_number=1, team1_id=None, team2_id=None, stage=slot['stage'],
                  bracket_position=slot['bracket_position'],
                  team1_seed=slot['team1_seed'], team2_seed=slot['team2_seed'])
            for slot in generate_playoff_bracket(['quarterfinal', 'semifinal', 'final', 'third_place'])
        ]
        by_id = {m.id: m for m in bracket}

        assert [m.id for m in find_dependent_matches(by_id['semifinal-1'], bracket)] == \
            ['third_place-1', 'final-1']
        assert [m.id for m in find_dependent_matches(by_id['quarterfinal-3'], bracket)] == ['semifinal-2']
        assert find_dependent_matches(by_id['final-1'], bracket) == []
