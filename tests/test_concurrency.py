import logging
import threading
from collections import Counter
from datetime import timedelta

import pytest

from tablebook.allocation import AllocationEngine
from tablebook.app import create_app
from tablebook.config import TestConfig
from tablebook.errors import NoAvailability
from tablebook.extensions import db
from tablebook.identity import IdentityStore
from tablebook.ledger import KeyedLocks, ReservationLedger
from tablebook.models import DiningTable
from tablebook.registry import TableRegistry
from tablebook.sessions import Principal
from tablebook.utils.time import today

DAY = today() + timedelta(days=10)
WORKERS = 8


@pytest.fixture()
def file_app(tmp_path):
    class FileConfig(TestConfig):
        SQLALCHEMY_DATABASE_URI = f"sqlite:///{tmp_path / 'race.db'}"
        SQLALCHEMY_ENGINE_OPTIONS = {"connect_args": {"timeout": 30}}

    app = create_app(FileConfig)
    with app.app_context():
        db.create_all()
        db.session.add_all([
            DiningTable(table_number=1, capacity=2),
            DiningTable(table_number=2, capacity=4),
            DiningTable(table_number=3, capacity=4),
        ])
        db.session.commit()
        users = [
            IdentityStore().register(f"Guest {i}", f"guest{i}@example.com", "guestpass", "user")
            for i in range(WORKERS)
        ]
        principals = [Principal.from_user(u) for u in users]
    yield app, principals
    with app.app_context():
        db.drop_all()
        db.engine.dispose()


def test_concurrent_bookings_never_share_a_table(file_app):
    app, principals = file_app
    barrier = threading.Barrier(WORKERS)
    outcomes = []
    outcomes_lock = threading.Lock()

    def worker(principal):
        with app.app_context():
            engine = AllocationEngine.for_current_app()
            barrier.wait()
            try:
                r = engine.book(principal, DAY, "19:00", 2)
                result = ("ok", r.table_id)
            except NoAvailability:
                result = ("full", None)
            with outcomes_lock:
                outcomes.append(result)

    threads = [threading.Thread(target=worker, args=(p,)) for p in principals]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=60)

    assert len(outcomes) == WORKERS
    granted = [table_id for kind, table_id in outcomes if kind == "ok"]
    assert len(granted) == 3
    assert len(set(granted)) == 3
    assert Counter(kind for kind, _ in outcomes)["full"] == WORKERS - 3

    with app.app_context():
        confirmed = ReservationLedger().all(day=DAY, status="confirmed")
        per_table = Counter(r.table_id for r in confirmed)
        assert len(confirmed) == 3
        assert max(per_table.values()) == 1


def test_concurrent_cancels_succeed_once(file_app):
    app, principals = file_app
    owner = principals[0]
    with app.app_context():
        reservation_id = AllocationEngine.for_current_app().book(owner, DAY, "12:00", 2).id

    barrier = threading.Barrier(4)
    outcomes = []
    outcomes_lock = threading.Lock()

    def worker():
        with app.app_context():
            engine = AllocationEngine.for_current_app()
            barrier.wait()
            try:
                engine.cancel(owner, reservation_id)
                result = "cancelled"
            except Exception as e:
                result = type(e).__name__
            with outcomes_lock:
                outcomes.append(result)

    threads = [threading.Thread(target=worker) for _ in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=60)

    assert sorted(outcomes) == ["AlreadyTerminal"] * 3 + ["cancelled"]


def test_stale_conflict_check_falls_back_to_next_table(app, principal, monkeypatch, caplog):
    alice, bob = principal("alice"), principal("bob")
    first = ReservationLedger(locks=KeyedLocks())
    second = ReservationLedger(locks=KeyedLocks())
    # second ledger stands in for another process whose read predates the first insert
    monkeypatch.setattr(second, "find_conflict", lambda table_id, day, slot: None)

    won = first.reserve(TableRegistry().candidates(3), DAY, "19:00", alice.id, 3)
    assert won.table.table_number == 2

    with caplog.at_level(logging.WARNING, logger="tablebook.ledger"):
        fallback = second.reserve(TableRegistry().candidates(3), DAY, "19:00", bob.id, 3)
    assert fallback.table.table_number == 3
    assert "lost race" in caplog.text

    assert second.reserve(TableRegistry().candidates(3), DAY, "19:00", bob.id, 3) is None
    confirmed = ReservationLedger().all(day=DAY, status="confirmed")
    assert sorted(r.table.table_number for r in confirmed) == [2, 3]


def test_keyed_locks_are_bounded_and_stable():
    locks = KeyedLocks(stripes=4)
    keys = [(DAY + timedelta(days=i), f"{h:02d}:00") for i in range(30) for h in range(9, 23)]
    assigned = {key: locks.lock_for(key) for key in keys}
    assert all(locks.lock_for(key) is lock for key, lock in assigned.items())
    assert len({id(lock) for lock in assigned.values()}) <= 4
