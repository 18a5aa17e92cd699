"""In-memory lobby state and its snapshot.

LobbyStore owns accounts, rooms and match history for one application.
Lifecycle: load() on startup, persist() after every mutation, flush() on
shutdown.

Lock order is room.lock -> sink lock -> accounts/history locks. Room records
are copied while the room lock is held and cached here, so composing a
snapshot never needs another room's lock.
"""
import logging
import threading

from lobby.models import Room
from lobby.persistence import empty_snapshot
from lobby.services.accounts import AccountStore
from lobby.services.rooms.registry import RoomRegistry
from lobby.services.rooms.stats import MatchHistory

logger = logging.getLogger(__name__)


class LobbyStore:

    def __init__(self, sink, code_length: int = 6):
        self.sink = sink
        self.accounts = AccountStore()
        self.rooms = RoomRegistry(code_length=code_length)
        self.history = MatchHistory()
        self._sink_lock = threading.Lock()
        self._room_records: dict[str, dict] = {}

    def load(self):
        snapshot = self.sink.load()
        if not snapshot:
            logger.info("[store-load] no snapshot, starting empty")
            return
        self.accounts.load(snapshot.get('users'), snapshot.get('sessions'))
        self.rooms.load(snapshot.get('rooms'))
        self.history.load(snapshot.get('history'))
        with self._sink_lock:
            for room in self.rooms.all():
                self._room_records[room.id] = room.to_dict()
        logger.info(
            f"[store-load] users={self.accounts.count()} rooms={len(self._room_records)} history={len(self.history)}"
        )

    def snapshot(self):
        with self._sink_lock:
            return self._compose()

    def _compose(self):
        snapshot = empty_snapshot()
        snapshot['users'] = self.accounts.export_users()
        snapshot['sessions'] = self.accounts.export_sessions()
        snapshot['rooms'] = dict(self._room_records)
        snapshot['history'] = self.history.export()
        return snapshot

    def persist(self, room: Room = None):
        """Write the full snapshot. Callers mutating a room pass it while holding room.lock."""
        with self._sink_lock:
            if room is not None:
                self._room_records[room.id] = room.to_dict()
            self.sink.write(self._compose())

    def flush(self):
        self.persist()
        logger.info("[store-flush] final snapshot written")

    def reset(self):
        """Drop every user, room and match. Used by the store-reset command only."""
        with self._sink_lock:
            self.accounts = AccountStore()
            self.rooms = RoomRegistry(code_length=self.rooms.code_length)
            self.history = MatchHistory()
            self._room_records = {}
            self.sink.write(self._compose())
