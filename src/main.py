#!/usr/bin/env python3
"""
Command line admin tool for pool tournaments.

Usage:
    python src/main.py create --venue "The Cue Club" --date 2026-11-07 --tables 4 --players players.yaml
    python src/main.py recommend --players 16 --tables 4
    python src/main.py schedule --players players.yaml --tables 2
    python src/main.py result <tournament_id> <match_id> <winner_id>
    python src/main.py standings <tournament_id>
    python src/main.py tiebreaker <tournament_id> [--add TEAM1 TEAM2 --table 1]
    python src/main.py advance <tournament_id>
    python src/main.py status <tournament_id> completed

Exit codes:
    0: Success
    1: Invalid input or unreadable data
    2: Tournament, match or team not found
"""
import argparse
import logging
import os
import sys

import yaml
from filelock import Timeout

from core.allocation import schedule
from core.elimination import get_stage_display_name
from core.errors import InvalidInput, NotFound, TournamentError
from core.models import FORMATS, ROUND_ROBIN, STATUSES
from core.teams import form_teams
from storage import TournamentStore
import tournament as service

BASE_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
DEFAULT_DATA_DIR = os.environ.get('TOURNAMENT_DATA_DIR', os.path.join(BASE_DIR, 'data'))


def load_players(file_path):
    """Load player names from a YAML list (or a mapping with a 'players' list)."""
    with open(file_path, mode='r', encoding='utf-8') as file:
        try:
            data = yaml.safe_load(file)
        except yaml.YAMLError as e:
            raise InvalidInput(f'{file_path} is not valid YAML: {e}') from e
    if isinstance(data, dict):
        data = data.get('players', [])
    if not isinstance(data, list):
        raise InvalidInput(f'{file_path} must contain a list of player names')
    return data


def print_schedule(rounds, team_names):
    first_round = True
    for round_number, round_matches in enumerate(rounds, start=1):
        if not first_round:
            print()
        print(f"# Round {round_number}")
        for match in round_matches:
            print(f"Table {match['table_number']}: "
                  f"{team_names[match['team1_id']]} vs {team_names[match['team2_id']]}")
        first_round = False


def cmd_create(store, args):
    players = load_players(args.players)
    tournament = service.create_tournament(
        store,
        venue_name=args.venue,
        tournament_date=args.date,
        num_tables=args.tables,
        player_names=players,
        tournament_format=args.format,
        num_rounds=args.rounds,
        venue_location=args.location,
        start_time=args.start_time,
    )
    print(f"Created tournament {tournament.id} ({tournament.format}, {tournament.num_rounds} rounds)")


def cmd_recommend(store, args):
    recommendation = service.recommend(args.players, args.tables)
    print(f"Recommended rounds: {recommendation['recommended']} "
          f"(min {recommendation['min']}, max {recommendation['max']})")
    print(recommendation['explanation'])


def cmd_schedule(store, args):
    """Dry run: form teams and print a schedule without saving anything."""
    pairs = form_teams(load_players(args.players))
    team_names = {index: f"{pair['player1']} & {pair['player2']}" for index, pair in enumerate(pairs)}
    print_schedule(schedule(list(team_names), args.tables), team_names)


def cmd_result(store, args):
    update = service.submit_result(store, args.tournament_id, args.match_id, args.winner_id)
    for team in update.teams:
        delta = update.deltas[team.id]
        print(f"{team.name}: {team.points} pts, {team.wins}W-{team.losses}L "
              f"({delta['points']:+d} pts)")


def cmd_standings(store, args):
    snapshot = service.load_snapshot(store, args.tournament_id)
    print(f"# {snapshot['tournament'].venue_name} ({snapshot['tournament'].status})")
    for rank, team in enumerate(snapshot['teams'], start=1):
        print(f"{rank:>2}. {team.name:<30} {team.points:>3} pts  {team.wins}W-{team.losses}L")

    for pool, rows in snapshot['pool_standings'].items():
        if pool is None:
            continue
        print(f"\n# Pool {pool}")
        for rank, row in enumerate(rows, start=1):
            print(f"{rank:>2}. {row['team']:<30} {row['points']:>3} pts  played {row['played']}")

    playoff = [m for m in snapshot['matches'] if m.team1_seed]
    if playoff:
        print("\n# Playoffs")
        for match in playoff:
            print(f"{get_stage_display_name(match.stage)} {match.bracket_position}: "
                  f"{match.team1_id or match.team1_seed} vs {match.team2_id or match.team2_seed}")


def cmd_tiebreaker(store, args):
    if args.add:
        match = service.add_tiebreaker(store, args.tournament_id, args.add[0], args.add[1], args.table)
        print(f"Added tiebreaker {match.id} in round {match.round_number}")
        return
    tied = service.find_tiebreaker_candidates(store, args.tournament_id)
    if not tied:
        print("No tiebreaker needed.")
        return
    print(f"{len(tied)} teams are tied with {tied[0].points} points:")
    for team in tied:
        print(f"  {team.id}  {team.name}")


def cmd_advance(store, args):
    advanced = service.advance_playoffs(store, args.tournament_id)
    print(f"Resolved {len(advanced)} playoff matches")


def cmd_status(store, args):
    tournament = service.update_status(store, args.tournament_id, args.status)
    print(f"Tournament {tournament.id} is now {tournament.status}")


def build_parser():
    parser = argparse.ArgumentParser(description='Pool tournament admin tool')
    parser.add_argument('--data-dir', default=DEFAULT_DATA_DIR, help='Tournament data directory')
    subparsers = parser.add_subparsers(dest='command', required=True)

    create = subparsers.add_parser('create', help='Create a tournament')
    create.add_argument('--venue', required=True)
    create.add_argument('--date', required=True, help='Tournament date (YYYY-MM-DD)')
    create.add_argument('--tables', type=int, required=True)
    create.add_argument('--players', required=True, help='YAML file with player names')
    create.add_argument('--format', choices=FORMATS, default=ROUND_ROBIN)
    create.add_argument('--rounds', type=int, default=None)
    create.add_argument('--location', default=None)
    create.add_argument('--start-time', default=None)
    create.set_defaults(func=cmd_create)

    recommend = subparsers.add_parser('recommend', help='Recommend a round count')
    recommend.add_argument('--players', type=int, required=True)
    recommend.add_argument('--tables', type=int, required=True)
    recommend.set_defaults(func=cmd_recommend)

    dry_run = subparsers.add_parser('schedule', help='Print a schedule without saving')
    dry_run.add_argument('--players', required=True, help='YAML file with player names')
    dry_run.add_argument('--tables', type=int, required=True)
    dry_run.set_defaults(func=cmd_schedule)

    result = subparsers.add_parser('result', help='Set or revise a match winner')
    result.add_argument('tournament_id')
    result.add_argument('match_id')
    result.add_argument('winner_id')
    result.set_defaults(func=cmd_result)

    standings = subparsers.add_parser('standings', help='Show standings')
    standings.add_argument('tournament_id')
    standings.set_defaults(func=cmd_standings)

    tiebreaker = subparsers.add_parser('tiebreaker', help='Show tied teams or add a tiebreaker')
    tiebreaker.add_argument('tournament_id')
    tiebreaker.add_argument('--add', nargs=2, metavar=('TEAM1', 'TEAM2'))
    tiebreaker.add_argument('--table', type=int, default=1)
    tiebreaker.set_defaults(func=cmd_tiebreaker)

    advance = subparsers.add_parser('advance', help='Resolve decided playoff seeds')
    advance.add_argument('tournament_id')
    advance.set_defaults(func=cmd_advance)

    status = subparsers.add_parser('status', help='Change tournament status')
    status.add_argument('tournament_id')
    status.add_argument('status', choices=STATUSES)
    status.set_defaults(func=cmd_status)

    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=os.environ.get('LOG_LEVEL', 'INFO'))
    store = TournamentStore(args.data_dir)

    try:
        args.func(store, args)
    except InvalidInput as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except NotFound as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2
    except Timeout:
        print("Error: tournament is busy, please retry", file=sys.stderr)
        return 1
    except TournamentError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == '__main__':
    sys.exit(main())
