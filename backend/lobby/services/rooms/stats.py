import logging
import threading

from lobby.models import MatchHistoryEntry, Room, Seat

logger = logging.getLogger(__name__)


class MatchHistory:
    """Append-only list of concluded matches."""

    def __init__(self):
        self._lock = threading.Lock()
        self._entries: list[MatchHistoryEntry] = []

    def append(self, entry: MatchHistoryEntry) -> None:
        with self._lock:
            self._entries.append(entry)

    def entries(self):
        with self._lock:
            return list(self._entries)

    def __len__(self):
        with self._lock:
            return len(self._entries)

    def load(self, records):
        with self._lock:
            self._entries.extend(MatchHistoryEntry.from_dict(r) for r in records or [])

    def export(self):
        with self._lock:
            return [entry.to_dict() for entry in self._entries]


def record_match(room: Room, winner: Seat, accounts, history: MatchHistory) -> MatchHistoryEntry:
    """Apply a concluded match to every seated player's stats.

    Scoring is everyone-vs-everyone: the winner beats each other player, and
    each loser loses against every other seated player, not only the winner.
    Per-opponent records are keyed by display name. Caller holds room.lock.
    """
    with accounts.lock:
        for seat in room.players:
            user = accounts.get_user(seat.id)
            if user is None:
                logger.warning(f"[stats] room={room.id} seat={seat.id} has no user record, skipping")
                continue
            won = seat.id == winner.id
            if won:
                user.stats.wins += 1
            else:
                user.stats.losses += 1
            for opponent in room.players:
                if opponent.id == seat.id:
                    continue
                record = user.stats.against(opponent.username)
                if won:
                    record.wins += 1
                else:
                    record.losses += 1

    entry = MatchHistoryEntry(
        room_id=room.id,
        players=tuple(seat.username for seat in room.players),
        winner=winner.username,
    )
    history.append(entry)
    logger.info(f"[match] room={room.id} winner={winner.username} players={len(room.players)}")
    return entry
