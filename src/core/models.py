POOL = 'pool'
QUARTERFINAL = 'quarterfinal'
SEMIFINAL = 'semifinal'
FINAL = 'final'
THIRD_PLACE = 'third_place'
TIEBREAKER = 'tiebreaker'

STAGES = (POOL, QUARTERFINAL, SEMIFINAL, FINAL, THIRD_PLACE, TIEBREAKER)
PLAYOFF_STAGES = (QUARTERFINAL, SEMIFINAL, FINAL, THIRD_PLACE)

STATUSES = ('setup', 'in_progress', 'completed')

ROUND_ROBIN = 'round_robin'
POOL_PLAYOFF = 'pool_playoff'
FORMATS = (ROUND_ROBIN, POOL_PLAYOFF)

POINTS_PER_WIN = 2


class Team:
    def __init__(self, id, tournament_id, player1_name, player2_name,
                 points=0, wins=0, losses=0, pool_group=None):
        self.id = id
        self.tournament_id = tournament_id
        self.player1_name = player1_name
        self.player2_name = player2_name
        self.points = points
        self.wins = wins
        self.losses = losses
        self.pool_group = pool_group  # None for round-robin tournaments

    @property
    def name(self):
        return f"{self.player1_name} & {self.player2_name}"

    def to_dict(self):
        return {
            'id': self.id,
            'tournament_id': self.tournament_id,
            'player1_name': self.player1_name,
            'player2_name': self.player2_name,
            'points': self.points,
            'wins': self.wins,
            'losses': self.losses,
            'pool_group': self.pool_group,
        }

    @classmethod
    def from_dict(cls, data):
        return cls(
            id=data['id'],
            tournament_id=data['tournament_id'],
            player1_name=data['player1_name'],
            player2_name=data['player2_name'],
            points=data.get('points', 0),
            wins=data.get('wins', 0),
            losses=data.get('losses', 0),
            pool_group=data.get('pool_group'),
        )

    def __repr__(self):
        return (f"Team(id={self.id}, players={self.name}, points={self.points}, "
                f"wins={self.wins}, losses={self.losses}, pool_group={self.pool_group})")


class Match:
    def __init__(self, id, tournament_id, round_number, table_number, team1_id, team2_id,
                 winner_id=None, completed_at=None, stage=POOL, bracket_position=None,
                 team1_seed=None, team2_seed=None):
        self.id = id
        self.tournament_id = tournament_id
        self.round_number = round_number
        self.table_number = table_number
        self.team1_id = team1_id
        self.team2_id = team2_id
        self.winner_id = winner_id
        self.completed_at = completed_at
        self.stage = stage
        self.bracket_position = bracket_position
        # Symbolic seeds ("Pool A 1st", "SF1 Winner") for playoff slots
        self.team1_seed = team1_seed
        self.team2_seed = team2_seed

    @property
    def is_completed(self):
        return self.winner_id is not None

    @property
    def is_resolved(self):
        return self.team1_id is not None and self.team2_id is not None

    def involves(self, team_id):
        return team_id in (self.team1_id, self.team2_id)

    def opponent_of(self, team_id):
        if team_id == self.team1_id:
            return self.team2_id
        if team_id == self.team2_id:
            return self.team1_id
        return None

    @property
    def loser_id(self):
        if self.winner_id is None:
            return None
        return self.opponent_of(self.winner_id)

    def to_dict(self):
        return {
            'id': self.id,
            'tournament_id': self.tournament_id,
            'round_number': self.round_number,
            'table_number': self.table_number,
            'team1_id': self.team1_id,
            'team2_id': self.team2_id,
            'winner_id': self.winner_id,
            'completed_at': self.completed_at,
            'stage': self.stage,
            'bracket_position': self.bracket_position,
            'team1_seed': self.team1_seed,
            'team2_seed': self.team2_seed,
        }

    @classmethod
    def from_dict(cls, data):
        return cls(
            id=data['id'],
            tournament_id=data['tournament_id'],
            round_number=data['round_number'],
            table_number=data['table_number'],
            team1_id=data.get('team1_id'),
            team2_id=data.get('team2_id'),
            winner_id=data.get('winner_id'),
            completed_at=data.get('completed_at'),
            stage=data.get('stage', POOL),
            bracket_position=data.get('bracket_position'),
            team1_seed=data.get('team1_seed'),
            team2_seed=data.get('team2_seed'),
        )

    def __repr__(self):
        return (f"Match(id={self.id}, stage={self.stage}, round={self.round_number}, "
                f"table={self.table_number}, teams=({self.team1_id}, {self.team2_id}), "
                f"winner={self.winner_id})")


class Tournament:
    def __init__(self, id, venue_name, tournament_date, num_tables, num_rounds,
                 num_players=0, status='setup', format=ROUND_ROBIN,
                 venue_location=None, start_time=None, created_at=None):
        self.id = id
        self.venue_name = venue_name
        self.venue_location = venue_location
        self.tournament_date = tournament_date
        self.start_time = start_time
        self.num_tables = num_tables
        self.num_rounds = num_rounds
        self.num_players = num_players
        self.status = status
        self.format = format
        self.created_at = created_at

    def to_dict(self):
        return {
            'id': self.id,
            'venue_name': self.venue_name,
            'venue_location': self.venue_location,
            'tournament_date': self.tournament_date,
            'start_time': self.start_time,
            'num_tables': self.num_tables,
            'num_rounds': self.num_rounds,
            'num_players': self.num_players,
            'status': self.status,
            'format': self.format,
            'created_at': self.created_at,
        }

    @classmethod
    def from_dict(cls, data):
        return cls(
            id=data['id'],
            venue_name=data['venue_name'],
            tournament_date=data['tournament_date'],
            num_tables=data['num_tables'],
            num_rounds=data['num_rounds'],
            num_players=data.get('num_players', 0),
            status=data.get('status', 'setup'),
            format=data.get('format', ROUND_ROBIN),
            venue_location=data.get('venue_location'),
            start_time=data.get('start_time'),
            created_at=data.get('created_at'),
        )

    def __repr__(self):
        return (f"Tournament(id={self.id}, venue={self.venue_name}, format={self.format}, "
                f"status={self.status}, tables={self.num_tables}, rounds={self.num_rounds})")
