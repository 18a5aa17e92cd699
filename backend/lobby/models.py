from lobby import db
from flask_login import UserMixin
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional
import copy
import threading
import time
import uuid

MIN_PLAYERS = 2
MAX_PLAYERS = 4


class Snapshot(db.Model):
    """Single-row table holding the whole lobby snapshot as JSON."""
    __tablename__ = 'snapshot'
    id = db.Column(db.Integer, primary_key=True)
    payload = db.Column(db.Text, nullable=False)
    updated_at = db.Column(db.Float, nullable=False)


@dataclass
class VsRecord:
    wins: int = 0
    losses: int = 0

    def to_dict(self):
        return {'wins': self.wins, 'losses': self.losses}


@dataclass
class Stats:
    wins: int = 0
    losses: int = 0
    # opponent username -> VsRecord
    vs: dict = field(default_factory=dict)

    def against(self, username: str) -> VsRecord:
        if username not in self.vs:
            self.vs[username] = VsRecord()
        return self.vs[username]

    def to_dict(self):
        return {
            'wins': self.wins,
            'losses': self.losses,
            'vs': {name: rec.to_dict() for name, rec in self.vs.items()},
        }

    @classmethod
    def from_dict(cls, data):
        data = data or {}
        vs = {
            name: VsRecord(wins=int(rec.get('wins', 0)), losses=int(rec.get('losses', 0)))
            for name, rec in (data.get('vs') or {}).items()
        }
        return cls(wins=int(data.get('wins', 0)), losses=int(data.get('losses', 0)), vs=vs)


@dataclass(eq=False)
class User(UserMixin):
    id: str
    username: str
    password_hash: str
    stats: Stats = field(default_factory=Stats)

    def to_dict(self):
        return {
            'id': self.id,
            'username': self.username,
            'stats': self.stats.to_dict(),
        }

    def to_record(self):
        record = self.to_dict()
        record['passwordHash'] = self.password_hash
        return record

    @classmethod
    def from_record(cls, record):
        # Older snapshots may lack a stats block
        return cls(
            id=record['id'],
            username=record['username'],
            password_hash=record['passwordHash'],
            stats=Stats.from_dict(record.get('stats')),
        )


@dataclass
class Seat:
    id: str
    username: str
    connected: bool = True

    def to_dict(self):
        return {'id': self.id, 'username': self.username, 'connected': bool(self.connected)}


class RoomPhase(Enum):
    OPEN = 'open'
    ACTIVE = 'active'


@dataclass(eq=False)
class Room:
    id: str
    host_id: str
    max_players: int
    players: list = field(default_factory=list)
    started: bool = False
    locked: bool = False
    state: Any = None
    revision: int = 0
    # Held from lookup through persistence for every mutation of this room
    lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    @property
    def phase(self) -> RoomPhase:
        return RoomPhase.ACTIVE if self.started else RoomPhase.OPEN

    def seat_for(self, user_id) -> Optional[Seat]:
        for seat in self.players:
            if seat.id == user_id:
                return seat
        return None

    def is_full(self) -> bool:
        return len(self.players) >= self.max_players

    def bump(self) -> int:
        self.revision += 1
        return self.revision

    def to_view(self, viewer_id):
        """Public projection of the room for one caller."""
        return {
            'id': self.id,
            'hostId': self.host_id,
            'players': [seat.to_dict() for seat in self.players],
            'started': self.started,
            'locked': self.locked,
            'revision': self.revision,
            'state': copy.deepcopy(self.state),
            'youAreHost': self.host_id == viewer_id,
        }

    def to_dict(self):
        return {
            'id': self.id,
            'hostId': self.host_id,
            'players': [seat.to_dict() for seat in self.players],
            'maxPlayers': self.max_players,
            'started': self.started,
            'locked': self.locked,
            'state': copy.deepcopy(self.state),
            'revision': self.revision,
        }

    @classmethod
    def from_dict(cls, record):
        return cls(
            id=record['id'],
            host_id=record['hostId'],
            max_players=int(record.get('maxPlayers', MAX_PLAYERS)),
            players=[
                Seat(id=p['id'], username=p['username'], connected=bool(p.get('connected')))
                for p in record.get('players', [])
            ],
            started=bool(record.get('started')),
            locked=bool(record.get('locked')),
            state=record.get('state'),
            revision=int(record.get('revision', 0)),
        )


@dataclass(frozen=True)
class MatchHistoryEntry:
    room_id: str
    players: tuple
    winner: str
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    at: int = field(default_factory=lambda: int(time.time() * 1000))

    def to_dict(self):
        return {
            'id': self.id,
            'roomId': self.room_id,
            'players': list(self.players),
            'winner': self.winner,
            'at': self.at,
        }

    @classmethod
    def from_dict(cls, record):
        return cls(
            id=record['id'],
            room_id=record['roomId'],
            players=tuple(record.get('players', [])),
            winner=record['winner'],
            at=int(record['at']),
        )
