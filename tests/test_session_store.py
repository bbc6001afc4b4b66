"""Tests for SessionStore."""

from storefront.models import UserIdentity
from storefront.persistence import JsonFileRepository, MemoryRepository
from storefront.session_store import SessionStore


class TestSessionStore:
    def test_starts_logged_out(self):
        session = SessionStore(MemoryRepository("user-storage"))

        assert session.user is None
        assert session.is_authenticated is False
        assert session.owner_id == "guest"

    def test_login_sets_identity(self, jane):
        session = SessionStore(MemoryRepository("user-storage"))

        session.login(jane)

        assert session.user == jane
        assert session.is_authenticated is True
        assert session.owner_id == "user-1"

    def test_login_replaces_identity(self, jane):
        session = SessionStore(MemoryRepository("user-storage"))
        session.login(jane)

        other = UserIdentity(id="user-2", name="Sam", email="sam@example.com")
        session.login(other)

        assert session.user == other
        assert session.owner_id == "user-2"

    def test_logout_clears_identity(self, jane):
        session = SessionStore(MemoryRepository("user-storage"))
        session.login(jane)

        session.logout()

        assert session.user is None
        assert session.is_authenticated is False
        assert session.owner_id == "guest"

    def test_logout_when_logged_out(self):
        session = SessionStore(MemoryRepository("user-storage"))

        session.logout()

        assert session.is_authenticated is False

    def test_custom_guest_id(self):
        session = SessionStore(MemoryRepository("user-storage"), guest_id="anonymous")

        assert session.owner_id == "anonymous"

    def test_identity_survives_restart(self, temp_dir, jane):
        SessionStore(JsonFileRepository("user-storage", temp_dir)).login(jane)

        restored = SessionStore(JsonFileRepository("user-storage", temp_dir))

        assert restored.user == jane
        assert restored.is_authenticated is True

    def test_logout_survives_restart(self, temp_dir, jane):
        session = SessionStore(JsonFileRepository("user-storage", temp_dir))
        session.login(jane)
        session.logout()

        restored = SessionStore(JsonFileRepository("user-storage", temp_dir))

        assert restored.user is None
