from flask import Blueprint, request

from ..auth import current_principal, login_required
from ..http import jok
from ..identity import IdentityStore
from ..schemas import LoginRequest, RegisterRequest, parse
from ..sessions import SessionManager

bp = Blueprint("auth", __name__)


@bp.post("/register")
def register():
    data = parse(RegisterRequest, request.get_json(silent=True))
    user = IdentityStore().register(data.name, data.email, data.password, data.role)
    return jok(user.to_dict(), message="Registration successful.", status=201)


@bp.post("/login")
def login():
    data = parse(LoginRequest, request.get_json(silent=True))
    token, user = SessionManager().login(data.email, data.password)
    return jok({"token": token, "user": user.to_dict()}, message="Login successful.")


@bp.get("/me")
@login_required
def me():
    user = IdentityStore().get(current_principal().id)
    return jok(user.to_dict())
