# server/core/service.py

from loguru import logger
from sqlalchemy.orm import Session
from server.core.exceptions import DuplicateUserError
from server.core.security import hash_password, verify_password
from server.core.store import UserStore
from server.core.validation import normalize_email, normalize_username, validate_fields
from server.schemas.user import UserOut


UPDATE_DUPLICATE_MESSAGE = "Username or email already exists"


class UserService:
    """
    Create/read/update/delete for user accounts.

    Every method returns UserOut, never the ORM row, so the password hash
    stays inside this layer.
    """

    def __init__(self, db: Session):
        self.store = UserStore(db)

    def create(self, username: str, email: str, password: str) -> UserOut:
        username = normalize_username(username)
        email = normalize_email(email)

        if self.store.find_by_username_or_email(username=username, email=email):
            raise DuplicateUserError()

        validate_fields({"username": username, "email": email, "password": password})

        # The unique indexes still reject a writer that slipped past the lookup
        user = self.store.insert(username, email, hash_password(password))
        logger.info("Created user {}", user.id)
        return UserOut.model_validate(user)

    def get_all(self) -> list[UserOut]:
        return [UserOut.model_validate(u) for u in self.store.find_all()]

    def get_by_id(self, user_id: str) -> UserOut:
        return UserOut.model_validate(self.store.find_by_id(user_id))

    def update(
        self,
        user_id: str,
        username: str | None = None,
        email: str | None = None,
        password: str | None = None,
    ) -> UserOut:
        """
        Partial update. Fields left as None keep their stored value; the
        password is only re-hashed when a new one is given.
        """
        self.store.find_by_id(user_id)

        fields = {}
        if username is not None:
            fields["username"] = normalize_username(username)
        if email is not None:
            fields["email"] = normalize_email(email)

        if fields:
            duplicate = self.store.find_by_username_or_email(
                username=fields.get("username"),
                email=fields.get("email"),
                exclude_id=user_id,
            )
            if duplicate:
                raise DuplicateUserError(UPDATE_DUPLICATE_MESSAGE)

        if password is not None:
            fields["password"] = password
        validate_fields(fields)

        changes = {k: v for k, v in fields.items() if k != "password"}
        if password is not None:
            changes["password_hash"] = hash_password(password)

        try:
            user = self.store.update_by_id(user_id, changes)
        except DuplicateUserError as e:
            raise DuplicateUserError(UPDATE_DUPLICATE_MESSAGE) from e
        logger.info("Updated user {} ({})", user_id, ", ".join(sorted(fields)) or "no fields")
        return UserOut.model_validate(user)

    def delete(self, user_id: str) -> None:
        self.store.delete_by_id(user_id)
        logger.info("Deleted user {}", user_id)

    def check_password(self, user_id: str, password: str) -> bool:
        user = self.store.find_by_id(user_id)
        return verify_password(password, user.password_hash)
