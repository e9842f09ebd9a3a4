"""Table allocation for booking requests.

A request for (date, slot, party size) is granted the smallest table that
seats the party and is free at that slot; ties go to the lowest table
number. The same inputs against the same free tables always get the same
table.
"""
import logging
from datetime import date

from flask import current_app

from .auth import ensure_admin, ensure_owner_or_admin
from .errors import InvalidInput, NoAvailability, NotFound
from .ledger import ReservationLedger
from .models import STATUS_CANCELLED, STATUSES, Reservation
from .registry import TableRegistry
from .sessions import Principal
from .utils.time import time_slots, today

log = logging.getLogger(__name__)


class AllocationEngine:
    def __init__(self, registry: TableRegistry, ledger: ReservationLedger,
                 slots: tuple[str, ...], max_party_size: int, clock=today):
        self.registry = registry
        self.ledger = ledger
        self.slots = slots
        self.max_party_size = max_party_size
        self.clock = clock

    @classmethod
    def for_current_app(cls) -> "AllocationEngine":
        cfg = current_app.config
        return cls(
            registry=TableRegistry(),
            ledger=ReservationLedger(),
            slots=time_slots(cfg["FIRST_SLOT_HOUR"], cfg["LAST_SLOT_HOUR"]),
            max_party_size=cfg["MAX_PARTY_SIZE"],
        )

    def validate(self, day: date, slot: str, party_size: int) -> None:
        errors = []
        if not isinstance(day, date):
            errors.append({"field": "date", "message": "Date must be a calendar day (YYYY-MM-DD)."})
        elif day < self.clock():
            errors.append({"field": "date", "message": "Date cannot be in the past."})
        if slot not in self.slots:
            errors.append({
                "field": "timeSlot",
                "message": f"Time slot must be one of {self.slots[0]}..{self.slots[-1]} on the hour.",
            })
        if isinstance(party_size, bool) or not isinstance(party_size, int) \
                or not 1 <= party_size <= self.max_party_size:
            errors.append({
                "field": "guests",
                "message": f"Guests must be between 1 and {self.max_party_size}.",
            })
        if errors:
            raise InvalidInput("Invalid booking request.", details=errors)

    def book(self, requester: Principal, day: date, slot: str, party_size: int) -> Reservation:
        self.validate(day, slot, party_size)
        candidates = self.registry.candidates(party_size)
        reservation = self.ledger.reserve(candidates, day, slot, requester.id, party_size)
        if reservation is None:
            log.info("no table for %s guests on %s %s (%s candidates)",
                     party_size, day, slot, len(candidates))
            raise NoAvailability()
        log.info("reservation %s: table %s on %s %s for user %s",
                 reservation.id, reservation.table_id, day, slot, requester.id)
        return reservation

    def availability(self, day: date, slot: str, party_size: int = 1) -> dict:
        self.validate(day, slot, party_size)
        taken = self.ledger.taken_table_ids(day, slot)
        free = [t for t in self.registry.candidates(party_size) if t.id not in taken]
        return {
            "date": day.isoformat(),
            "timeSlot": slot,
            "guests": party_size,
            "available": len(free),
            "tables": [t.to_dict() for t in free],
        }

    def cancel(self, requester: Principal, reservation_id: int) -> Reservation:
        reservation = self.ledger.get(reservation_id)
        if reservation is None:
            raise NotFound()
        ensure_owner_or_admin(requester, reservation)
        self.ledger.update_status(reservation.id, STATUS_CANCELLED)
        log.info("reservation %s cancelled by user %s", reservation.id, requester.id)
        return self.ledger.get(reservation.id)

    def list_for_user(self, requester: Principal) -> list[Reservation]:
        return self.ledger.by_owner(requester.id)

    def list_all(self, requester: Principal, day: date | None = None,
                 status: str | None = None) -> list[Reservation]:
        ensure_admin(requester)
        if status is not None and status not in STATUSES:
            raise InvalidInput(f"Status must be one of: {', '.join(STATUSES)}.")
        return self.ledger.all(day=day, status=status)
