# server/schemas/user.py

from datetime import datetime
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class UserCreate(BaseModel):
    username: str
    email: str
    password: str


class UserUpdate(BaseModel):
    username: str | None = None
    email: str | None = None
    password: str | None = None


class UserOut(BaseModel):
    """
    Public view of a stored user. Has no password field, so the hash can
    never leave the service.
    """
    model_config = ConfigDict(
        from_attributes=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    id: str
    username: str
    email: str
    created_at: datetime
    updated_at: datetime
