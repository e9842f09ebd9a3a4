import pytest

from tablebook.app import create_app
from tablebook.config import TestConfig
from tablebook.extensions import db
from tablebook.identity import IdentityStore
from tablebook.models import DiningTable
from tablebook.sessions import Principal

USERS = {
    "alice": ("Alice", "alice@example.com", "alicepass", "user"),
    "bob": ("Bob", "bob@example.com", "bobpass1", "user"),
    "admin": ("Admin", "admin@example.com", "adminpass", "admin"),
}



@pytest.fixture()
def app():
    app = create_app(TestConfig)
    with app.app_context():
        db.create_all()
        db.session.add_all([
            DiningTable(table_number=1, capacity=2),
            DiningTable(table_number=2, capacity=4),
            DiningTable(table_number=3, capacity=4),
        ])
        db.session.commit()
        identity = IdentityStore()
        for name, email, password, role in USERS.values():
            identity.register(name, email, password, role)
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def principal(app):
    def _principal(key: str) -> Principal:
        return Principal.from_user(IdentityStore().by_email(USERS[key][1]))
    return _principal


@pytest.fixture()
def auth_headers(client):
    def _headers(key: str) -> dict:
        _, email, password, _ = USERS[key]
        r = client.post("/api/auth/login", json={"email": email, "password": password})
        assert r.status_code == 200
        return {"Authorization": f"Bearer {r.get_json()['data']['token']}"}
    return _headers
