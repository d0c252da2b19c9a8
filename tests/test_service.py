"""Tests for the user operations service and the record store beneath it."""
import pytest
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from server.core.exceptions import DuplicateUserError, StoreError, UserNotFoundError, ValidationError
from server.core.service import UserService
from server.core.store import UserStore
from server.models.user import User


@pytest.fixture()
def service(db):
    return UserService(db)


class TestCreate:

    def test_create_returns_public_view(self, service):
        user = service.create("  alice ", " Alice@Example.com ", "secret1")
        assert user.username == "alice"
        assert user.email == "alice@example.com"
        assert user.id
        assert user.created_at is not None
        assert "password" not in user.model_dump()
        assert "password_hash" not in user.model_dump()

    def test_password_is_hashed_before_storage(self, service, db):
        user = service.create("alice", "alice@example.com", "secret1")
        row = db.get(User, user.id)
        assert row.password_hash != "secret1"
        assert service.check_password(user.id, "secret1")
        assert not service.check_password(user.id, "wrong-one")

    def test_duplicate_username(self, service):
        service.create("bob", "bob@x.com", "secret1")
        with pytest.raises(DuplicateUserError):
            service.create("bob", "other@x.com", "secret2")

    def test_duplicate_email_after_lowercasing(self, service):
        service.create("bob", "BOB@x.com", "secret1")
        with pytest.raises(DuplicateUserError) as exc:
            service.create("alice", "bob@x.com", "secret2")
        assert exc.value.message == "User with this email or username already exists"

    def test_username_is_case_sensitive(self, service):
        service.create("bob", "bob@x.com", "secret1")
        assert service.create("Bob", "bob2@x.com", "secret1").username == "Bob"

    def test_validation_failure_lists_fields(self, service):
        with pytest.raises(ValidationError) as exc:
            service.create("ab", "not-an-email", "123")
        assert set(exc.value.fields) == {"username", "email", "password"}
        assert service.get_all() == []

    def test_password_with_nul_byte(self, service):
        user = service.create("alice", "alice@example.com", "secret\x00x")
        assert service.check_password(user.id, "secret\x00x")
        assert not service.check_password(user.id, "secret")

    def test_oversized_password(self, service):
        with pytest.raises(ValidationError) as exc:
            service.create("alice", "alice@example.com", "p" * 5000)
        assert set(exc.value.fields) == {"password"}


class TestRead:

    def test_get_all(self, service):
        service.create("alice", "alice@example.com", "secret1")
        service.create("bob", "bob@example.com", "secret1")
        names = [u.username for u in service.get_all()]
        assert names == ["alice", "bob"]

    def test_get_by_id(self, service):
        created = service.create("alice", "alice@example.com", "secret1")
        fetched = service.get_by_id(created.id)
        assert fetched == created

    def test_get_missing(self, service):
        with pytest.raises(UserNotFoundError):
            service.get_by_id("does-not-exist")


class TestUpdate:

    def test_only_given_fields_change(self, service, db):
        created = service.create("alice", "alice@example.com", "secret1")
        before_hash = db.get(User, created.id).password_hash

        updated = service.update(created.id, username="newname")

        assert updated.username == "newname"
        assert updated.email == "alice@example.com"
        db.expire_all()
        assert db.get(User, created.id).password_hash == before_hash
        assert updated.updated_at >= created.updated_at

    def test_password_change_is_rehashed(self, service, db):
        created = service.create("alice", "alice@example.com", "secret1")
        service.update(created.id, password="another1")
        db.expire_all()
        assert db.get(User, created.id).password_hash != "another1"
        assert service.check_password(created.id, "another1")
        assert not service.check_password(created.id, "secret1")

    def test_email_is_normalized(self, service):
        created = service.create("alice", "alice@example.com", "secret1")
        assert service.update(created.id, email=" NEW@Example.com").email == "new@example.com"

    def test_duplicate_against_other_user(self, service):
        service.create("alice", "alice@example.com", "secret1")
        bob = service.create("bob", "bob@example.com", "secret1")
        with pytest.raises(DuplicateUserError) as exc:
            service.update(bob.id, email="ALICE@example.com")
        assert exc.value.message == "Username or email already exists"

    def test_own_values_are_not_duplicates(self, service):
        alice = service.create("alice", "alice@example.com", "secret1")
        updated = service.update(alice.id, username="alice", email="alice@example.com")
        assert updated.username == "alice"

    def test_invalid_field(self, service):
        alice = service.create("alice", "alice@example.com", "secret1")
        with pytest.raises(ValidationError) as exc:
            service.update(alice.id, password="123")
        assert set(exc.value.fields) == {"password"}

    def test_oversized_password(self, service):
        alice = service.create("alice", "alice@example.com", "secret1")
        with pytest.raises(ValidationError):
            service.update(alice.id, password="p" * 5000)
        assert service.check_password(alice.id, "secret1")

    def test_missing_user(self, service):
        with pytest.raises(UserNotFoundError):
            service.update("does-not-exist", username="whoever")


class TestDelete:

    def test_delete_then_get(self, service):
        alice = service.create("alice", "alice@example.com", "secret1")
        service.delete(alice.id)
        with pytest.raises(UserNotFoundError):
            service.get_by_id(alice.id)

    def test_delete_missing(self, service):
        with pytest.raises(UserNotFoundError):
            service.delete("does-not-exist")


class TestStoreUniqueness:
    """Two writers that both passed the lookup: the unique index decides."""

    def test_racing_inserts_on_same_email(self, session_factory):
        first, second = UserStore(session_factory()), UserStore(session_factory())

        assert first.find_by_username_or_email("alice", "same@example.com") is None
        assert second.find_by_username_or_email("carol", "same@example.com") is None

        first.insert("alice", "same@example.com", "hash-a")
        with pytest.raises(DuplicateUserError):
            second.insert("carol", "same@example.com", "hash-c")

        assert [u.username for u in UserStore(session_factory()).find_all()] == ["alice"]

    def test_racing_update_on_same_username(self, session_factory):
        store = UserStore(session_factory())
        store.insert("alice", "alice@example.com", "hash-a")
        bob = store.insert("bob", "bob@example.com", "hash-b")

        with pytest.raises(DuplicateUserError):
            UserStore(session_factory()).update_by_id(bob.id, {"username": "alice"})


def _fail_next_commit(monkeypatch):
    real_commit = Session.commit
    state = {"failed": False}

    def flaky_commit(self):
        if not state["failed"]:
            state["failed"] = True
            raise OperationalError("COMMIT", {}, Exception("database is locked"))
        return real_commit(self)

    monkeypatch.setattr(Session, "commit", flaky_commit)


class TestStoreFailures:

    def test_failed_insert_is_store_error(self, service, monkeypatch):
        _fail_next_commit(monkeypatch)
        with pytest.raises(StoreError):
            service.create("alice", "alice@example.com", "secret1")

        # Session was rolled back and keeps working
        assert service.get_all() == []
        assert service.create("alice", "alice@example.com", "secret1").username == "alice"

    def test_failed_update_is_store_error(self, service, monkeypatch):
        alice = service.create("alice", "alice@example.com", "secret1")
        _fail_next_commit(monkeypatch)
        with pytest.raises(StoreError):
            service.update(alice.id, username="renamed")
        assert service.get_by_id(alice.id).username == "alice"

    def test_failed_refresh_is_store_error(self, service, monkeypatch):
        def broken_refresh(self, instance, *args, **kwargs):
            raise OperationalError("SELECT", {}, Exception("connection lost"))

        monkeypatch.setattr(Session, "refresh", broken_refresh)
        with pytest.raises(StoreError):
            service.create("alice", "alice@example.com", "secret1")
