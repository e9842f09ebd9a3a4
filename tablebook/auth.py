from functools import wraps
from flask import g, request

from .errors import Forbidden
from .models import Reservation
from .sessions import Principal, SessionManager


def bearer_token() -> str | None:
    auth_header = request.headers.get("Authorization", "").strip()
    if not auth_header.lower().startswith("bearer "):
        return None
    return auth_header[7:].strip() or None


def current_principal() -> Principal:
    return g.principal


def ensure_admin(principal: Principal) -> None:
    if not principal.is_admin:
        raise Forbidden("Admin access required.")


def ensure_owner_or_admin(principal: Principal, reservation: Reservation) -> None:
    if principal.is_admin or reservation.user_id == principal.id:
        return
    raise Forbidden("You can only modify your own reservations.")


def login_required(fn):
    """Resolves the bearer token into ``g.principal`` or fails Unauthenticated."""
    @wraps(fn)
    def wrapper(*args, **kwargs):
        g.principal = SessionManager().resolve(bearer_token())
        return fn(*args, **kwargs)
    return wrapper


def admin_required(fn):
    @wraps(fn)
    @login_required
    def wrapper(*args, **kwargs):
        ensure_admin(g.principal)
        return fn(*args, **kwargs)
    return wrapper
