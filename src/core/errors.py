"""
Exceptions raised by the tournament engine.
"""


class TournamentError(Exception):
    """Base class for controlled tournament failures."""


class InvalidInput(TournamentError, ValueError):
    """Raised when counts, labels or ids supplied by the caller are unusable."""


class NotFound(TournamentError, LookupError):
    """Raised when a referenced tournament, team, match or seed does not exist."""

    def __str__(self):
        # LookupError would otherwise repr() the message
        return str(self.args[0]) if self.args else ''
