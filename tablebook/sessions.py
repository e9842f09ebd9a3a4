"""Bearer token issue and verification.

Tokens are HS256 JWTs carrying only the user id. Every request re-reads the
user from the identity store, so a role change takes effect immediately and
a client cannot assert its own role.
"""
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import jwt
from flask import current_app

from .errors import Unauthenticated
from .identity import IdentityStore
from .models import ROLE_ADMIN, User

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class Principal:
    id: int
    role: str
    name: str = ""
    email: str = ""

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN

    @classmethod
    def from_user(cls, user: User) -> "Principal":
        return cls(id=user.id, role=user.role, name=user.name, email=user.email)


class SessionManager:
    def __init__(self, identity: IdentityStore | None = None, secret: str | None = None,
                 algorithm: str | None = None, ttl_hours: int | None = None):
        cfg = current_app.config
        self.identity = identity or IdentityStore()
        self.secret = secret or cfg["JWT_SECRET"]
        self.algorithm = algorithm or cfg.get("JWT_ALGORITHM", "HS256")
        self.ttl = timedelta(hours=ttl_hours or cfg.get("TOKEN_TTL_HOURS", 24))

    def issue(self, user: User) -> str:
        now = datetime.now(timezone.utc)
        payload = {"sub": str(user.id), "iat": now, "exp": now + self.ttl}
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    def login(self, email: str, password: str) -> tuple[str, User]:
        user = self.identity.verify(email, password)
        if user is None:
            log.warning("failed login for %s", email.strip().lower())
            raise Unauthenticated("Invalid email or password.")
        return self.issue(user), user

    def resolve(self, token: str | None) -> Principal:
        if not token:
            raise Unauthenticated()
        try:
            payload = jwt.decode(token, self.secret, algorithms=[self.algorithm])
        except jwt.ExpiredSignatureError:
            raise Unauthenticated("Session expired. Please log in again.")
        except jwt.InvalidTokenError:
            raise Unauthenticated()

        try:
            user_id = int(payload.get("sub", ""))
        except ValueError:
            raise Unauthenticated()
        user = self.identity.get(user_id)
        if user is None:
            raise Unauthenticated()
        return Principal.from_user(user)
