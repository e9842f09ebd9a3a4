"""Durable record of reservations.

The ledger owns the booking critical section: the conflict check and the
insert for a (date, slot) run under one in-process lock, and the partial
unique index on confirmed (table, date, slot) rows rejects anything that
slips past it from another process.
"""
import logging
import threading
from datetime import date

from flask import current_app
from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import selectinload

from .errors import AlreadyTerminal, InvalidInput, NotFound
from .extensions import db
from .models import STATUS_COMPLETED, STATUS_CONFIRMED, STATUSES, DiningTable, Reservation

log = logging.getLogger(__name__)


class KeyedLocks:
    """Fixed set of lock stripes; equal keys always map to the same lock."""

    def __init__(self, stripes: int = 64):
        self._locks = tuple(threading.Lock() for _ in range(stripes))

    def lock_for(self, key: tuple) -> threading.Lock:
        return self._locks[hash(key) % len(self._locks)]


def app_locks() -> KeyedLocks:
    return current_app.extensions.setdefault("tablebook.locks", KeyedLocks())


class ReservationLedger:
    def __init__(self, session=None, locks: KeyedLocks | None = None):
        self.session = session or db.session
        self.locks = locks or app_locks()

    def _query(self):
        return select(Reservation).options(
            selectinload(Reservation.table), selectinload(Reservation.user)
        )

    def get(self, reservation_id: int) -> Reservation | None:
        return self.session.execute(
            self._query().where(Reservation.id == reservation_id)
        ).scalar_one_or_none()

    def find_conflict(self, table_id: int, day: date, slot: str) -> Reservation | None:
        return self.session.execute(
            select(Reservation).where(
                Reservation.table_id == table_id,
                Reservation.date == day,
                Reservation.time_slot == slot,
                Reservation.status == STATUS_CONFIRMED,
            )
        ).scalars().first()

    def insert(self, reservation: Reservation) -> Reservation:
        self.session.add(reservation)
        self.session.commit()
        return reservation

    def reserve(self, candidates: list[DiningTable], day: date, slot: str,
                user_id: int, guests: int) -> Reservation | None:
        """Books the first candidate free at (day, slot), or returns None.

        Candidates are tried in the order given. Check and insert happen under
        the (day, slot) lock, so two callers never both see the same table free.
        """
        table_ids = [t.id for t in candidates]
        with self.locks.lock_for((day, slot)):
            for table_id in table_ids:
                if self.find_conflict(table_id, day, slot) is not None:
                    continue
                reservation = Reservation(
                    user_id=user_id, table_id=table_id, date=day, time_slot=slot,
                    guests=guests, status=STATUS_CONFIRMED,
                )
                try:
                    self.insert(reservation)
                except IntegrityError:
                    # another process took the table between check and insert
                    self.session.rollback()
                    log.warning("lost race for table %s on %s %s", table_id, day, slot)
                    continue
                return reservation
        return None

    def update_status(self, reservation_id: int, new_status: str) -> None:
        """Moves a confirmed reservation to a terminal status.

        Runs under the same (day, slot) lock as bookings, and the UPDATE only
        matches confirmed rows, so two concurrent cancels cannot both succeed.
        """
        if new_status not in STATUSES or new_status == STATUS_CONFIRMED:
            raise InvalidInput(f"Cannot transition a reservation to '{new_status}'.")
        key = self.session.execute(
            select(Reservation.date, Reservation.time_slot).where(Reservation.id == reservation_id)
        ).one_or_none()
        if key is None:
            raise NotFound()

        with self.locks.lock_for(tuple(key)):
            result = self.session.execute(
                update(Reservation)
                .where(Reservation.id == reservation_id, Reservation.status == STATUS_CONFIRMED)
                .values(status=new_status)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 0:
                self.session.rollback()
                raise AlreadyTerminal()
            self.session.commit()

    def by_owner(self, user_id: int) -> list[Reservation]:
        return list(self.session.execute(
            self._query()
            .where(Reservation.user_id == user_id)
            .order_by(Reservation.created_at.desc(), Reservation.id.desc())
        ).scalars())

    def all(self, day: date | None = None, status: str | None = None) -> list[Reservation]:
        q = self._query()
        if day is not None:
            q = q.where(Reservation.date == day)
        if status is not None:
            q = q.where(Reservation.status == status)
        return list(self.session.execute(
            q.order_by(Reservation.created_at.desc(), Reservation.id.desc())
        ).scalars())

    def count(self, day: date | None = None, status: str | None = None) -> int:
        q = select(func.count()).select_from(Reservation)
        if day is not None:
            q = q.where(Reservation.date == day)
        if status is not None:
            q = q.where(Reservation.status == status)
        return self.session.execute(q).scalar_one()

    def taken_table_ids(self, day: date, slot: str) -> set[int]:
        return set(self.session.execute(
            select(Reservation.table_id).where(
                Reservation.date == day,
                Reservation.time_slot == slot,
                Reservation.status == STATUS_CONFIRMED,
            )
        ).scalars())

    def complete_before(self, day: date) -> int:
        result = self.session.execute(
            update(Reservation)
            .where(Reservation.date < day, Reservation.status == STATUS_CONFIRMED)
            .values(status=STATUS_COMPLETED)
            .execution_options(synchronize_session=False)
        )
        self.session.commit()
        log.info("marked %s reservations before %s as completed", result.rowcount, day)
        return result.rowcount
