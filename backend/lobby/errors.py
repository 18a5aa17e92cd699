"""Lobby exceptions.

Every error a request can end with lives here so the HTTP layer can map
them to status codes in one place.
"""


class LobbyError(Exception):
    """Base class for all lobby errors."""
    status_code = 500
    default_message = 'server error'

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)


# ============ 400 ============

class BadRequest(LobbyError):
    """Malformed or missing fields, duplicate username."""
    status_code = 400
    default_message = 'bad request'


class RoomFull(BadRequest):
    """Room already started or every seat is taken."""
    default_message = 'room full or started'


class InvalidPlayerCount(BadRequest):
    """A match needs 2-4 seated players."""
    default_message = 'need 2-4 players'


# ============ 401 / 403 ============

class Unauthorized(LobbyError):
    status_code = 401
    default_message = 'unauthorized'


class Forbidden(LobbyError):
    status_code = 403
    default_message = 'forbidden'


class NotHost(Forbidden):
    default_message = 'host only'


class NotInRoom(Forbidden):
    default_message = 'not in room'


# ============ 404 ============

class NotFound(LobbyError):
    status_code = 404
    default_message = 'not found'


class RoomNotFound(NotFound):
    def __init__(self, room_id):
        self.room_id = room_id
        super().__init__('room not found')


# ============ 500 ============

class ServerError(LobbyError):
    status_code = 500


class PersistenceError(ServerError):
    """The snapshot could not be read or written."""
    default_message = 'persistence failure'
