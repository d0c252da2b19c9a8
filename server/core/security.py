# server/core/security.py

from passlib.context import CryptContext
from server.config import BCRYPT_ROUNDS


# bcrypt_sha256 runs the password through HMAC-SHA256 first, so bytes past
# bcrypt's 72-byte limit still count and NUL bytes are accepted. Plain
# bcrypt hashes remain verifiable.
pwd_context = CryptContext(
    schemes=["bcrypt_sha256", "bcrypt"],
    deprecated="auto",
    bcrypt_sha256__rounds=BCRYPT_ROUNDS,
    bcrypt__rounds=BCRYPT_ROUNDS,
)


def hash_password(password: str) -> str:
    """
    Returns a salted hash. A fresh salt is drawn on every call,
    so hashing the same password twice gives two different strings.
    """
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except (ValueError, TypeError):
        # Unrecognized or corrupted hash, or an oversized candidate
        return False
