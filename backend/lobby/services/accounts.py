"""Credential store and bearer-token store."""
import logging
import threading
import uuid
from typing import Optional, Tuple

from lobby import bcrypt
from lobby.errors import BadRequest, Unauthorized
from lobby.models import User

logger = logging.getLogger(__name__)


class AccountStore:
    """Users keyed by id, a case-insensitive name index, and issued tokens.

    Tokens never expire and are never revoked.
    """

    def __init__(self):
        self.lock = threading.RLock()
        self._users: dict[str, User] = {}
        self._by_name: dict[str, str] = {}
        self._sessions: dict[str, str] = {}

    def register(self, username, password) -> Tuple[str, User]:
        if not username or not password:
            raise BadRequest('username and password required')
        if not isinstance(username, str) or not isinstance(password, str):
            raise BadRequest('username and password must be strings')
        password_hash = bcrypt.generate_password_hash(password).decode('utf-8')
        with self.lock:
            if username.lower() in self._by_name:
                raise BadRequest('username already exists')
            user = User(id=str(uuid.uuid4()), username=username, password_hash=password_hash)
            self._users[user.id] = user
            self._by_name[username.lower()] = user.id
            token = self._issue_token(user)
        logger.info(f"[register] user={user.id} username={username}")
        return token, user

    def login(self, username, password) -> Tuple[str, User]:
        name = username.lower() if isinstance(username, str) else ''
        with self.lock:
            user = self._users.get(self._by_name.get(name, ''))
        if user is None or not isinstance(password, str):
            raise Unauthorized('invalid credentials')
        if not bcrypt.check_password_hash(user.password_hash, password):
            raise Unauthorized('invalid credentials')
        with self.lock:
            token = self._issue_token(user)
        logger.info(f"[login] user={user.id}")
        return token, user

    def _issue_token(self, user: User) -> str:
        token = str(uuid.uuid4())
        self._sessions[token] = user.id
        return token

    def resolve_token(self, token) -> Optional[User]:
        if not token:
            return None
        with self.lock:
            user_id = self._sessions.get(token)
            return self._users.get(user_id) if user_id else None

    def get_user(self, user_id) -> Optional[User]:
        with self.lock:
            return self._users.get(user_id)

    def user_view(self, user: User) -> dict:
        """Public user dict, read under the lock that guards stats updates."""
        with self.lock:
            return user.to_dict()

    def count(self) -> int:
        with self.lock:
            return len(self._users)

    def load(self, user_records, sessions):
        with self.lock:
            for record in user_records or []:
                user = User.from_record(record)
                self._users[user.id] = user
                self._by_name[user.username.lower()] = user.id
            self._sessions.update(sessions or {})

    def export_users(self):
        with self.lock:
            return [user.to_record() for user in self._users.values()]

    def export_sessions(self):
        with self.lock:
            return dict(self._sessions)
