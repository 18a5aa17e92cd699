import logging
import random
import string
import threading

from lobby.errors import BadRequest, RoomNotFound
from lobby.models import Room, Seat, User, MIN_PLAYERS, MAX_PLAYERS

logger = logging.getLogger(__name__)


def clamp_max_players(value) -> int:
    """Coerce a requested seat count into [MIN_PLAYERS, MAX_PLAYERS]; falsy means the maximum."""
    if not value:
        return MAX_PLAYERS
    if isinstance(value, bool):
        raise BadRequest('maxPlayers must be a number')
    try:
        requested = int(float(value))
    except (TypeError, ValueError, OverflowError):
        raise BadRequest('maxPlayers must be a number')
    return max(MIN_PLAYERS, min(MAX_PLAYERS, requested))


class RoomRegistry:
    """Room id -> Room. Rooms are never removed."""

    def __init__(self, code_length: int = 6):
        self.code_length = code_length
        self._lock = threading.Lock()
        self._rooms: dict[str, Room] = {}

    def _generate_code(self) -> str:
        while True:
            code = ''.join(random.choices(string.ascii_uppercase + string.digits, k=self.code_length))
            if code not in self._rooms:
                return code
            logger.warning(f"[room-code] collision on {code}, regenerating")

    def create(self, host: User, max_players=None) -> Room:
        seats = clamp_max_players(max_players)
        with self._lock:
            room = Room(
                id=self._generate_code(),
                host_id=host.id,
                max_players=seats,
                players=[Seat(id=host.id, username=host.username, connected=True)],
            )
            self._rooms[room.id] = room
        logger.info(f"[room-create] room={room.id} host={host.id} max_players={seats}")
        return room

    def get(self, room_id) -> Room:
        with self._lock:
            room = self._rooms.get(room_id)
            if room is None and isinstance(room_id, str):
                room = self._rooms.get(room_id.upper())
        if room is None:
            raise RoomNotFound(room_id)
        return room

    def all(self):
        with self._lock:
            return list(self._rooms.values())

    def load(self, records):
        with self._lock:
            for record in (records or {}).values():
                room = Room.from_dict(record)
                self._rooms[room.id] = room
