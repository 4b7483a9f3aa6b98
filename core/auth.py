"""
Local accounts, the logged-in flag and the daily login streak.

Credentials and the session flag live in the device's settings:
    users              {username: bcrypt hash}
    isLoggedIn         bool
    currentUsername    str
Streak data is kept per account:
    streak_<username>          int
    lastLoginDate_<username>   'YYYY-MM-DD'
"""
import logging
from datetime import date, timedelta
from typing import Callable

import bcrypt

import database.database as db
from config import BCRYPT_ROUNDS
from core.decks import DeckStore
from core.errors import DuplicateUser, InvalidCredentials, NotLoggedIn

logger = logging.getLogger(__name__)

USERS_KEY = 'users'
LOGGED_IN_KEY = 'isLoggedIn'
CURRENT_USER_KEY = 'currentUsername'

# bcrypt only looks at the first 72 bytes
PASSWORD_MAX_BYTES = 72


def streak_key(username: str) -> str:
    return f"streak_{username}"


def last_login_key(username: str) -> str:
    return f"lastLoginDate_{username}"


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode('utf-8'), bcrypt.gensalt(rounds=BCRYPT_ROUNDS)).decode('utf-8')


def check_password(password: str, hashed: str) -> bool:
    if not isinstance(hashed, str):
        return False
    try:
        return bcrypt.checkpw(password.encode('utf-8'), hashed.encode('utf-8'))
    except ValueError:
        # not a bcrypt hash
        return False


class SessionManager:
    def __init__(self, device_id: int, today: Callable[[], date] = date.today):
        self.device_id = device_id
        self._today = today

    # ── Accounts ──────────────────────────────────────────────

    def register(self, username: str, password: str) -> bool:
        users = self._users()
        if username in users:
            raise DuplicateUser(username)
        if len(password.encode('utf-8')) > PASSWORD_MAX_BYTES:
            raise ValueError(f"Password longer than {PASSWORD_MAX_BYTES} bytes")

        users[username] = hash_password(password)
        db.set_setting(self.device_id, USERS_KEY, users)
        logger.info(f"Registered {username!r} on device {self.device_id}")
        return True

    def login(self, username: str, password: str) -> bool:
        hashed = self._users().get(username)
        if hashed is None or not check_password(password, hashed):
            logger.info(f"Failed login on device {self.device_id}")
            raise InvalidCredentials()

        db.set_setting(self.device_id, LOGGED_IN_KEY, True)
        db.set_setting(self.device_id, CURRENT_USER_KEY, username)
        self.update_streak(username)
        logger.info(f"{username!r} logged in on device {self.device_id}")
        return True

    def logout(self) -> None:
        db.set_setting(self.device_id, LOGGED_IN_KEY, False)
        db.delete_setting(self.device_id, CURRENT_USER_KEY)
        logger.info(f"Logged out device {self.device_id}")

    # ── Session ───────────────────────────────────────────────

    @property
    def is_logged_in(self) -> bool:
        return bool(self._read(LOGGED_IN_KEY, False)) and self.current_username is not None

    @property
    def current_username(self) -> str | None:
        return self._read(CURRENT_USER_KEY, None)

    @property
    def streak(self) -> int:
        username = self.current_username
        if username is None:
            return 0
        return self._stored_streak(username)

    def deck_store(self) -> DeckStore:
        if not self.is_logged_in:
            raise NotLoggedIn()
        return DeckStore(self.device_id, self.current_username)

    # ── Streak ────────────────────────────────────────────────

    def update_streak(self, username: str) -> int:
        today = self._today()
        streak = self._stored_streak(username)
        last_login = self._last_login(username)

        if last_login == today:
            return streak

        if last_login == today - timedelta(days=1):
            streak += 1
        else:
            streak = 1

        db.set_setting(self.device_id, streak_key(username), streak)
        db.set_setting(self.device_id, last_login_key(username), today.isoformat())
        return streak

    # ── private helpers ───────────────────────────────────────

    def _users(self) -> dict[str, str]:
        users = self._read(USERS_KEY, {})
        return users if isinstance(users, dict) else {}

    def _stored_streak(self, username: str) -> int:
        try:
            return int(self._read(streak_key(username), 0))
        except (TypeError, ValueError):
            return 0

    def _last_login(self, username: str) -> date | None:
        raw = self._read(last_login_key(username), None)
        if not raw:
            return None
        try:
            return date.fromisoformat(raw)
        except (TypeError, ValueError):
            logger.warning(f"Unreadable last login date for {username!r}: {raw!r}")
            return None

    def _read(self, key, default):
        try:
            return db.get_setting(self.device_id, key, default)
        except ValueError:
            logger.warning(f"Unreadable setting {key!r} on device {self.device_id}")
            return default
