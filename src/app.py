"""
Flask web application for the Pool Tournament Manager.
"""
import os
import logging
from filelock import Timeout
from flask import Flask, request, jsonify
from core.allocation import calculate_total_matches
from core.elimination import get_stage_display_name
from core.errors import InvalidInput, NotFound, TournamentError
from core.models import PLAYOFF_STAGES, ROUND_ROBIN
from storage import TournamentStore
import tournament as service

app = Flask(__name__)

BASE_DIR = os.path.dirname(os.path.dirname(__file__))
DATA_DIR = os.environ.get('TOURNAMENT_DATA_DIR', os.path.join(BASE_DIR, 'data'))

logging.basicConfig(level=os.environ.get('LOG_LEVEL', 'INFO'))


def get_default_settings():
    """Return defaults applied to missing tournament creation fields."""
    return {
        'num_tables': 4,
        'tournament_format': ROUND_ROBIN,
    }


def get_store() -> TournamentStore:
    """Store for the configured data directory (DATA_DIR is read per call so tests can patch it)."""
    return TournamentStore(DATA_DIR)


def _int_arg(value, field):
    try:
        return int(value)
    except (TypeError, ValueError):
        raise InvalidInput(f'{field} must be an integer')


def _serialize_snapshot(snapshot):
    return {
        'tournament': snapshot['tournament'].to_dict(),
        'teams': [team.to_dict() for team in snapshot['teams']],
        'matches': [match.to_dict() for match in snapshot['matches']],
        'pool_standings': _serialize_pool_standings(snapshot['pool_standings']),
    }


def _serialize_pool_standings(standings):
    # JSON object keys must be strings; pool-less rankings are reported as "overall"
    return {pool if pool is not None else 'overall': rows for pool, rows in standings.items()}


@app.errorhandler(InvalidInput)
def handle_invalid_input(e):
    return jsonify({'error': str(e)}), 400


@app.errorhandler(NotFound)
def handle_not_found(e):
    return jsonify({'error': str(e)}), 404


@app.errorhandler(TournamentError)
def handle_tournament_error(e):
    app.logger.error(f'Tournament data error: {e}')
    return jsonify({'error': str(e)}), 500


@app.errorhandler(Timeout)
def handle_lock_timeout(e):
    app.logger.warning(f'Tournament lock timed out: {e}')
    return jsonify({'error': 'Tournament is busy, please retry'}), 503


@app.route('/api/tournaments', methods=['GET'])
def api_list_tournaments():
    """List all tournaments in the registry."""
    return jsonify({'tournaments': get_store().list_tournaments()})


@app.route('/api/tournaments', methods=['POST'])
def api_create_tournament():
    """Create a tournament: form teams, schedule matches, build the playoff skeleton."""
    data = request.get_json(silent=True) or {}
    defaults = get_default_settings()

    player_names = data.get('player_names')
    if not isinstance(player_names, list):
        return jsonify({'error': 'player_names must be a list'}), 400

    num_rounds = data.get('num_rounds')
    tournament = service.create_tournament(
        get_store(),
        venue_name=data.get('venue_name', ''),
        tournament_date=data.get('tournament_date'),
        num_tables=_int_arg(data.get('num_tables', defaults['num_tables']), 'num_tables'),
        player_names=player_names,
        tournament_format=data.get('tournament_format', defaults['tournament_format']),
        num_rounds=_int_arg(num_rounds, 'num_rounds') if num_rounds is not None else None,
        venue_location=data.get('venue_location'),
        start_time=data.get('start_time'),
    )
    return jsonify({'success': True, 'tournament_id': tournament.id,
                    'tournament': tournament.to_dict()}), 201


@app.route('/api/tournaments/<tournament_id>', methods=['GET'])
def api_get_tournament(tournament_id):
    """Full snapshot of a tournament for live views."""
    snapshot = service.load_snapshot(get_store(), tournament_id)
    return jsonify(_serialize_snapshot(snapshot))


@app.route('/api/tournaments/<tournament_id>/standings', methods=['GET'])
def api_standings(tournament_id):
    """Leaderboard plus per-pool standings."""
    snapshot = service.load_snapshot(get_store(), tournament_id)
    leaderboard = [
        {'rank': rank, **team.to_dict(), 'team': team.name}
        for rank, team in enumerate(snapshot['teams'], start=1)
    ]
    return jsonify({
        'leaderboard': leaderboard,
        'pool_standings': _serialize_pool_standings(snapshot['pool_standings']),
    })


@app.route('/api/tournaments/<tournament_id>/bracket', methods=['GET'])
def api_bracket(tournament_id):
    """Playoff matches grouped by stage."""
    snapshot = service.load_snapshot(get_store(), tournament_id)
    stages = {}
    for match in snapshot['matches']:
        if match.stage not in PLAYOFF_STAGES:
            continue
        stage = stages.setdefault(match.stage, {
            'name': get_stage_display_name(match.stage),
            'matches': [],
        })
        stage['matches'].append(match.to_dict())
    for stage in stages.values():
        stage['matches'].sort(key=lambda m: m['bracket_position'])
    return jsonify({'stages': stages})


@app.route('/api/tournaments/<tournament_id>/matches/<match_id>/result', methods=['POST'])
def api_submit_result(tournament_id, match_id):
    """Set or revise the winner of a match."""
    data = request.get_json(silent=True) or {}
    winner_id = data.get('winner_id')
    if not winner_id:
        return jsonify({'error': 'Missing winner_id'}), 400

    update = service.submit_result(get_store(), tournament_id, match_id, winner_id)
    return jsonify({'success': True, **update.to_dict()})


@app.route('/api/tournaments/<tournament_id>/tiebreaker', methods=['GET'])
def api_tiebreaker_candidates(tournament_id):
    """Teams tied on top points once all matches are played."""
    tied = service.find_tiebreaker_candidates(get_store(), tournament_id)
    return jsonify({'tied_teams': [team.to_dict() for team in tied]})


@app.route('/api/tournaments/<tournament_id>/tiebreaker', methods=['POST'])
def api_add_tiebreaker(tournament_id):
    """Append a tiebreaker match between two teams."""
    data = request.get_json(silent=True) or {}
    team1_id = data.get('team1_id')
    team2_id = data.get('team2_id')
    if not team1_id or not team2_id:
        return jsonify({'error': 'Missing team ids'}), 400

    match = service.add_tiebreaker(
        get_store(), tournament_id, team1_id, team2_id,
        table_number=_int_arg(data.get('table_number', 1), 'table_number'),
    )
    return jsonify({'success': True, 'match_id': match.id, 'match': match.to_dict()}), 201


@app.route('/api/tournaments/<tournament_id>/status', methods=['POST'])
def api_update_status(tournament_id):
    data = request.get_json(silent=True) or {}
    tournament = service.update_status(get_store(), tournament_id, data.get('status'))
    return jsonify({'success': True, 'tournament': tournament.to_dict()})


@app.route('/api/tournaments/<tournament_id>/advance', methods=['POST'])
def api_advance_playoffs(tournament_id):
    """Fill playoff slots whose seeds are decided."""
    advanced = service.advance_playoffs(get_store(), tournament_id)
    return jsonify({'success': True, 'matches': [match.to_dict() for match in advanced]})


@app.route('/api/recommend-rounds', methods=['GET'])
def api_recommend_rounds():
    """Advisory round count for a player/table combination."""
    num_players = _int_arg(request.args.get('players'), 'players')
    num_tables = _int_arg(request.args.get('tables'), 'tables')
    recommendation = service.recommend(num_players, num_tables)
    recommendation['total_matches'] = calculate_total_matches(num_players // 2)
    return jsonify(recommendation)


if __name__ == '__main__':
    app.run(debug=True, port=5000)
