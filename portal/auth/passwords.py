from passlib.context import CryptContext

from portal.core import config

pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=config.BCRYPT_ROUNDS,
)


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, stored_hash: str | None) -> bool:
    if not stored_hash:
        return False
    try:
        return pwd_context.verify(password, stored_hash)
    except (ValueError, TypeError):
        # Unrecognised or truncated hash.
        return False


def dummy_verify() -> None:
    """Spend the time of a real verify when there is no stored hash to check."""
    pwd_context.dummy_verify()
