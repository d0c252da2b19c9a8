# server/core/store.py

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session
from server.core.exceptions import DuplicateUserError, StoreError, UserNotFoundError
from server.models.user import User, utc_now


class UserStore:
    """
    Persistence for user records.

    Uniqueness of username and email is left to the database's unique
    indexes: a conflicting insert or update fails at commit time and is
    reported as DuplicateUserError, whatever the caller checked beforehand.
    """

    def __init__(self, db: Session):
        self.db = db

    # -------------------------------
    # Reads
    # -------------------------------

    def find_by_id(self, user_id: str) -> User:
        try:
            user = self.db.get(User, user_id)
        except SQLAlchemyError as e:
            raise StoreError() from e
        if user is None:
            raise UserNotFoundError()
        return user

    def find_by_username_or_email(
        self,
        username: str | None = None,
        email: str | None = None,
        exclude_id: str | None = None,
    ) -> User | None:
        conditions = []
        if username is not None:
            conditions.append(User.username == username)
        if email is not None:
            conditions.append(User.email == email)
        if not conditions:
            return None

        query = self.db.query(User).filter(or_(*conditions))
        if exclude_id is not None:
            query = query.filter(User.id != exclude_id)
        try:
            return query.first()
        except SQLAlchemyError as e:
            raise StoreError() from e

    def find_all(self) -> list[User]:
        try:
            return self.db.query(User).order_by(User.created_at).all()
        except SQLAlchemyError as e:
            raise StoreError() from e

    # -------------------------------
    # Writes
    # -------------------------------

    def insert(self, username: str, email: str, password_hash: str) -> User:
        user = User(username=username, email=email, password_hash=password_hash)
        self.db.add(user)
        self._commit(user)
        return user

    def update_by_id(self, user_id: str, fields: dict) -> User:
        user = self.find_by_id(user_id)
        for name, value in fields.items():
            setattr(user, name, value)
        user.updated_at = utc_now()
        self._commit(user)
        return user

    def delete_by_id(self, user_id: str) -> User:
        user = self.find_by_id(user_id)
        self.db.delete(user)
        self._commit()
        return user

    def _commit(self, refresh: User | None = None):
        """Commits, then reloads `refresh` so server-side values are current."""
        try:
            self.db.commit()
            if refresh is not None:
                self.db.refresh(refresh)
        except IntegrityError as e:
            self.db.rollback()
            raise DuplicateUserError() from e
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StoreError() from e
