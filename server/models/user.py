# server/models/user.py

import uuid
from datetime import datetime, timezone
from sqlalchemy import Column, String, DateTime
from . import Base


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


# -------------------------------
# User Model
# -------------------------------

class User(Base):
    """
    Stored user account.
    Username and email are each backed by a unique index, so two writers
    racing on the same value cannot both commit.
    """
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    username = Column(String(30), unique=True, index=True, nullable=False)
    email = Column(String(254), unique=True, index=True, nullable=False)
    password_hash = Column(String(255), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utc_now)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utc_now)
