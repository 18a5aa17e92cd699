import copy
import logging

from lobby.errors import InvalidPlayerCount, NotHost, NotInRoom, RoomFull
from lobby.models import RoomPhase, Seat, User, MIN_PLAYERS, MAX_PLAYERS
from lobby.services.rooms.stats import record_match

logger = logging.getLogger(__name__)


class RoomLifecycle:
    """Join / start / state / read rules for rooms.

    A room is OPEN until the host starts it, ACTIVE while a match runs, and
    goes back to OPEN once a winner is reported. Every operation runs under
    the room's lock from lookup until the snapshot is written, and every
    accepted join, start or state update bumps the revision by exactly one.
    Results are returned already projected for the caller.
    """

    def __init__(self, store):
        self.store = store

    def create_room(self, caller: User, max_players=None) -> dict:
        room = self.store.rooms.create(caller, max_players)
        with room.lock:
            self.store.persist(room)
            return room.to_view(caller.id)

    def join(self, room_id, caller: User) -> dict:
        room = self.store.rooms.get(room_id)
        with room.lock:
            seat = room.seat_for(caller.id)
            if seat is None:
                if room.started or room.is_full():
                    raise RoomFull()
                seat = Seat(id=caller.id, username=caller.username)
                room.players.append(seat)
                logger.info(f"[join] room={room.id} user={caller.id} seats={len(room.players)}/{room.max_players}")
            else:
                logger.info(f"[rejoin] room={room.id} user={caller.id}")
            seat.connected = True
            room.bump()
            self.store.persist(room)
            return room.to_view(caller.id)

    def start(self, room_id, caller: User, initial_state=None) -> dict:
        room = self.store.rooms.get(room_id)
        with room.lock:
            if room.host_id != caller.id:
                raise NotHost()
            if not MIN_PLAYERS <= len(room.players) <= MAX_PLAYERS:
                raise InvalidPlayerCount()
            if room.phase is RoomPhase.ACTIVE:
                logger.info(f"[restart] room={room.id} already active, overwriting state")
            room.started = True
            room.state = copy.deepcopy(initial_state)
            room.seat_for(caller.id).connected = True
            room.bump()
            logger.info(f"[start] room={room.id} players={len(room.players)} revision={room.revision}")
            self.store.persist(room)
            return room.to_view(caller.id)

    def update_state(self, room_id, caller: User, new_state, winner_id=None) -> int:
        room = self.store.rooms.get(room_id)
        with room.lock:
            seat = room.seat_for(caller.id)
            if seat is None:
                raise NotInRoom()
            seat.connected = True
            room.state = copy.deepcopy(new_state)
            room.bump()

            if winner_id and room.started:
                winner = room.seat_for(winner_id)
                if winner is not None:
                    record_match(room, winner, self.store.accounts, self.store.history)
                    room.started = False
                    logger.info(f"[recycle] room={room.id} phase={room.phase.value}")
                else:
                    logger.info(f"[winner-ignored] room={room.id} winner={winner_id} not seated")

            self.store.persist(room)
            return room.revision

    def read(self, room_id, caller: User) -> dict:
        room = self.store.rooms.get(room_id)
        with room.lock:
            seat = room.seat_for(caller.id)
            if seat is not None and not seat.connected:
                seat.connected = True
                self.store.persist(room)
            return room.to_view(caller.id)
