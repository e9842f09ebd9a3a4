from datetime import datetime, timezone
from flask import Blueprint, current_app, request

from ..allocation import AllocationEngine
from ..auth import current_principal, login_required
from ..errors import RateLimited
from ..http import jok
from ..schemas import AvailabilityQuery, CreateReservationRequest, parse

bp = Blueprint("reservations", __name__)


def _current_window(window_len: int) -> int:
    return int(datetime.now(tz=timezone.utc).timestamp()) // window_len


def _allow(key: str) -> bool:
    """Fixed-window booking limit per caller, kept per application instance.

    Counts only cover the current window; they are dropped when it rolls over.
    """
    limit = current_app.config["BOOKING_RATE_MAX"]
    if limit <= 0:
        return True
    window = _current_window(current_app.config["BOOKING_RATE_WINDOW"])
    state = current_app.extensions.setdefault("tablebook.rate", {"window": window, "counts": {}})
    if state["window"] != window:
        state["window"], state["counts"] = window, {}

    counts: dict[str, int] = state["counts"]
    counts[key] = counts.get(key, 0) + 1
    return counts[key] <= limit


@bp.get("/availability")
@login_required
def availability():
    query = parse(AvailabilityQuery, {k: v for k, v in request.args.items() if v})
    data = AllocationEngine.for_current_app().availability(query.date, query.time_slot, query.guests)
    return jok(data)


@bp.post("")
@login_required
def create_reservation():
    principal = current_principal()
    if not _allow(f"user:{principal.id}"):
        raise RateLimited()

    data = parse(CreateReservationRequest, request.get_json(silent=True))
    reservation = AllocationEngine.for_current_app().book(
        principal, data.date, data.time_slot, data.guests
    )
    return jok(reservation.to_dict(), message="Reservation created successfully.", status=201)


@bp.get("")
@login_required
def list_reservations():
    reservations = AllocationEngine.for_current_app().list_for_user(current_principal())
    return jok([r.to_dict() for r in reservations])


@bp.delete("/<int:reservation_id>")
@login_required
def cancel_reservation(reservation_id: int):
    reservation = AllocationEngine.for_current_app().cancel(current_principal(), reservation_id)
    return jok(reservation.to_dict(), message="Reservation cancelled successfully.")
