import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from portal.auth.passwords import dummy_verify, hash_password, verify_password
from portal.models.user import Role, User

logger = logging.getLogger(__name__)


class EmailAlreadyRegistered(Exception):
    pass


class UnknownUser(LookupError):
    pass


def normalize_email(email: str) -> str:
    return email.strip().lower()


class IdentityStore:
    """Persistence for user records. Role is always read from storage."""

    def __init__(self, db: Session):
        self.db = db

    def get(self, user_id: int) -> User | None:
        return self.db.get(User, user_id)

    def get_by_email(self, email: str) -> User | None:
        return self.db.query(User).filter(User.email == normalize_email(email)).first()

    def get_role(self, user_id: int) -> Role | None:
        role = self.db.query(User.role).filter(User.id == user_id).scalar()
        if role is None:
            return None
        try:
            return Role(role)
        except ValueError:
            return None

    def has_admin(self) -> bool:
        return self.db.query(User.id).filter(User.role == Role.ADMIN.value).first() is not None

    def create_user(
        self,
        email: str,
        password: str,
        display_name: str,
        role: Role = Role.STUDENT,
    ) -> User:
        user = User(
            email=normalize_email(email),
            password_hash=hash_password(password),
            display_name=display_name.strip(),
            role=role.value,
        )
        self.db.add(user)
        try:
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            raise EmailAlreadyRegistered(user.email) from exc
        self.db.refresh(user)
        return user

    def authenticate(self, email: str, password: str) -> User | None:
        user = self.get_by_email(email)
        if user is None:
            # Keep unknown emails as slow as wrong passwords.
            dummy_verify()
            return None
        if not verify_password(password, user.password_hash):
            return None
        return user

    def set_role(self, email: str, role: Role) -> User:
        user = self._require(email)
        user.role = role.value
        self.db.commit()
        return user

    def set_password(self, email: str, password: str) -> User:
        user = self._require(email)
        user.password_hash = hash_password(password)
        self.db.commit()
        return user

    def _require(self, email: str) -> User:
        user = self.get_by_email(email)
        if user is None:
            raise UnknownUser(normalize_email(email))
        return user
