"""
Tests for core/auth.py — accounts, session flag and login streak against a temp DB.
"""
from datetime import date, timedelta

import pytest

import database.database as db
from core.auth import SessionManager, check_password, hash_password
from core.decks import DeckStore
from core.errors import DuplicateUser, InvalidCredentials, NotLoggedIn


DEVICE = 7


class Clock:
    """Callable stand-in for date.today that tests can move forward."""

    def __init__(self, day: date):
        self.day = day

    def __call__(self) -> date:
        return self.day

    def advance(self, days: int) -> None:
        self.day += timedelta(days=days)


@pytest.fixture()
def clock():
    return Clock(date(2024, 3, 10))


@pytest.fixture()
def session(tdb, clock):
    return SessionManager(DEVICE, today=clock)


# ── Registration ──────────────────────────────────────────────

class TestRegister:
    def test_register_returns_true(self, session):
        assert session.register('alice', 'secret') is True

    def test_duplicate_username_fails(self, session):
        session.register('alice', 'secret')
        with pytest.raises(DuplicateUser):
            session.register('alice', 'other')

    def test_duplicate_keeps_first_password(self, session):
        session.register('alice', 'secret')
        with pytest.raises(DuplicateUser):
            session.register('alice', 'other')

        assert session.login('alice', 'secret') is True
        session.logout()
        with pytest.raises(InvalidCredentials):
            session.login('alice', 'other')

    def test_password_not_stored_in_plaintext(self, session):
        session.register('alice', 'secret')
        users = db.get_setting(DEVICE, 'users')
        assert users['alice'] != 'secret'
        assert 'secret' not in db.get_raw_setting(DEVICE, 'users')

    def test_register_does_not_log_in(self, session):
        session.register('alice', 'secret')
        assert session.is_logged_in is False

    def test_accounts_are_per_device(self, tdb, clock):
        SessionManager(1, today=clock).register('alice', 'secret')
        other = SessionManager(2, today=clock)
        with pytest.raises(InvalidCredentials):
            other.login('alice', 'secret')
        assert other.register('alice', 'mine') is True


# ── Login / logout ────────────────────────────────────────────

class TestLogin:
    def test_login_after_register(self, session):
        session.register('a', 'p')
        assert session.login('a', 'p') is True
        assert session.is_logged_in is True
        assert session.current_username == 'a'

    def test_wrong_password(self, session):
        session.register('a', 'p')
        with pytest.raises(InvalidCredentials):
            session.login('a', 'wrong')
        assert session.is_logged_in is False

    def test_unknown_user_same_error(self, session):
        with pytest.raises(InvalidCredentials):
            session.login('ghost', 'p')

    def test_login_persists_session_keys(self, session):
        session.register('a', 'p')
        session.login('a', 'p')
        assert db.get_setting(DEVICE, 'isLoggedIn') is True
        assert db.get_setting(DEVICE, 'currentUsername') == 'a'

    def test_logout_clears_session(self, session):
        session.register('a', 'p')
        session.login('a', 'p')
        session.logout()

        assert session.is_logged_in is False
        assert session.current_username is None
        assert db.get_setting(DEVICE, 'isLoggedIn') is False

    def test_state_visible_to_new_manager(self, session, clock):
        session.register('a', 'p')
        session.login('a', 'p')
        again = SessionManager(DEVICE, today=clock)
        assert again.is_logged_in is True
        assert again.current_username == 'a'

    def test_corrupt_users_record_behaves_as_empty(self, session):
        db.set_raw_setting(DEVICE, 'users', '{broken')
        with pytest.raises(InvalidCredentials):
            session.login('a', 'p')
        assert session.register('a', 'p') is True

    def test_non_string_hash_is_a_mismatch(self, session):
        db.set_setting(DEVICE, 'users', {'a': 5})
        with pytest.raises(InvalidCredentials):
            session.login('a', 'p')
        assert session.is_logged_in is False


class TestDeckAccess:
    def test_deck_store_needs_login(self, session):
        with pytest.raises(NotLoggedIn):
            session.deck_store()

    def test_deck_store_for_current_user(self, session):
        session.register('a', 'p')
        session.login('a', 'p')
        store = session.deck_store()
        assert isinstance(store, DeckStore)
        assert store.username == 'a'

    def test_deck_store_gone_after_logout(self, session):
        session.register('a', 'p')
        session.login('a', 'p')
        session.logout()
        with pytest.raises(NotLoggedIn):
            session.deck_store()


# ── Streak ────────────────────────────────────────────────────

class TestStreak:
    def _login(self, session):
        session.login('a', 'p')
        return session.streak

    def test_streak_sequence(self, session, clock):
        session.register('a', 'p')

        assert self._login(session) == 1          # day N
        assert self._login(session) == 1          # same day
        clock.advance(1)
        assert self._login(session) == 2          # day N+1
        clock.advance(2)
        assert self._login(session) == 1          # day N+3, gap

    def test_consecutive_days_keep_growing(self, session, clock):
        session.register('a', 'p')
        for expected in range(1, 6):
            assert self._login(session) == expected
            clock.advance(1)

    def test_last_login_date_stored(self, session, clock):
        session.register('a', 'p')
        session.login('a', 'p')
        assert db.get_setting(DEVICE, 'lastLoginDate_a') == '2024-03-10'

    def test_streak_is_per_account(self, session, clock):
        session.register('a', 'p')
        session.register('b', 'p')

        session.login('a', 'p')
        clock.advance(1)
        session.login('a', 'p')
        assert session.streak == 2

        session.logout()
        session.login('b', 'p')
        assert session.streak == 1

        session.logout()
        session.login('a', 'p')
        assert session.streak == 2

    def test_streak_zero_when_logged_out(self, session):
        assert session.streak == 0

    def test_month_boundary_counts_as_consecutive(self, tdb):
        clock = Clock(date(2024, 2, 29))
        session = SessionManager(DEVICE, today=clock)
        session.register('a', 'p')
        session.login('a', 'p')
        clock.advance(1)
        assert clock() == date(2024, 3, 1)
        session.login('a', 'p')
        assert session.streak == 2

    def test_unreadable_last_date_resets(self, session):
        session.register('a', 'p')
        db.set_setting(DEVICE, 'streak_a', 9)
        db.set_setting(DEVICE, 'lastLoginDate_a', 'yesterday-ish')
        session.login('a', 'p')
        assert session.streak == 1

    def test_update_streak_directly(self, session, clock):
        assert session.update_streak('a') == 1
        clock.advance(1)
        assert session.update_streak('a') == 2


class TestPasswordHashing:
    def test_hash_is_salted(self, tdb):
        assert hash_password('same') != hash_password('same')

    def test_check_password(self, tdb):
        hashed = hash_password('pw')
        assert check_password('pw', hashed) is True
        assert check_password('nope', hashed) is False

    def test_check_against_non_hash(self, tdb):
        assert check_password('pw', 'pw') is False

    def test_check_against_non_string(self, tdb):
        assert check_password('pw', 5) is False
        assert check_password('pw', None) is False

    def test_register_rejects_overlong_password(self, session):
        with pytest.raises(ValueError):
            session.register('a', 'x' * 73)
        assert db.get_setting(DEVICE, 'users') is None
