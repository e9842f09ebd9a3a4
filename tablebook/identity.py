import logging
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from werkzeug.security import check_password_hash, generate_password_hash

from .errors import EmailTaken, InvalidInput
from .extensions import db
from .models import ROLE_USER, ROLES, User

log = logging.getLogger(__name__)


class IdentityStore:
    """User records: lookup by id or email, and registration."""

    def __init__(self, session=None):
        self.session = session or db.session

    def get(self, user_id: int) -> User | None:
        return self.session.get(User, user_id)

    def by_email(self, email: str) -> User | None:
        return self.session.execute(
            select(User).where(User.email == email.strip().lower())
        ).scalar_one_or_none()

    def register(self, name: str, email: str, password: str, role: str = ROLE_USER) -> User:
        if role not in ROLES:
            raise InvalidInput(f"Role must be one of: {', '.join(ROLES)}.")
        email = email.strip().lower()
        if self.by_email(email) is not None:
            raise EmailTaken()

        user = User(name=name, email=email, password_hash=generate_password_hash(password), role=role)
        self.session.add(user)
        try:
            self.session.commit()
        except IntegrityError:
            self.session.rollback()
            raise EmailTaken()
        log.info("registered user %s (role=%s)", user.id, user.role)
        return user

    def verify(self, email: str, password: str) -> User | None:
        user = self.by_email(email)
        if user is None or not check_password_hash(user.password_hash, password):
            return None
        return user
