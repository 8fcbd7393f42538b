"""Password hashing helpers."""

from passlib.context import CryptContext

# pbkdf2_sha256 is implemented by passlib itself, no native backend needed.
pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def hash_password(raw_password: str) -> str:
    """Return a salted one-way digest of `raw_password`."""
    return pwd_context.hash(raw_password)


def verify_password(raw_password: str, password_hash: str) -> bool:
    """Check `raw_password` against a digest produced by `hash_password`."""
    return pwd_context.verify(raw_password, password_hash)
