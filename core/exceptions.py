"""
Domain exceptions.

All business-rule failures live here so the API layer can map them to HTTP
status codes in one place per endpoint.
"""


class LMSException(Exception):
    """Base class for every LMS Manager error"""
    pass


# ============ Not found ============
# Ownership mismatches raise these too, so other managers' data is invisible.

class GameNotFound(LMSException):
    def __init__(self, game_id):
        self.game_id = game_id
        super().__init__(f"Game {game_id} not found")


class RoundNotFound(LMSException):
    def __init__(self, round_id):
        self.round_id = round_id
        super().__init__(f"Round {round_id} not found")


class PickNotFound(LMSException):
    def __init__(self, pick_id):
        self.pick_id = pick_id
        super().__init__(f"Pick {pick_id} not found")


class GroupNotFound(LMSException):
    def __init__(self, group_id):
        self.group_id = group_id
        super().__init__(f"Group {group_id} not found")


class TeamNotFound(LMSException):
    def __init__(self, team_id):
        self.team_id = team_id
        super().__init__(f"Team {team_id} not found")


class ParticipantNotFound(LMSException):
    def __init__(self, player_name):
        self.player_name = player_name
        super().__init__(f"Participant {player_name} not found")


# ============ Bad request ============

class InvalidGameSetup(LMSException):
    """Game creation input is unusable (no players, bad max winners...)"""
    pass


class InvalidStateTransition(LMSException):
    """Game or round is not in a status that allows the operation"""
    pass


class InvalidResult(LMSException):
    """Pick result is not one of win / loss / draw / postponed"""
    pass


class NoActiveParticipants(LMSException):
    """Nobody is left to win or to restore"""
    pass


class ParticipantNotActive(LMSException):
    """Eliminated participants cannot pick"""
    pass


# ============ Conflict ============

class DuplicatePick(LMSException):
    """Participant already has a pick in this round"""
    pass


class TeamAlreadyUsed(LMSException):
    """Participant has already picked this team earlier in the game"""
    pass


class DuplicateName(LMSException):
    """Name already exists where it must be unique"""
    pass
