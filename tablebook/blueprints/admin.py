from flask import Blueprint, current_app, request

from ..allocation import AllocationEngine
from ..auth import admin_required, current_principal
from ..http import jok
from ..registry import TableRegistry
from ..schemas import AdminReservationQuery, CreateTableRequest, parse
from ..stats import compute_stats

bp = Blueprint("admin", __name__)


@bp.get("/reservations")
@admin_required
def list_reservations():
    """
    All reservations across users, most recent first.
    Query: ?date=YYYY-MM-DD&status=confirmed|cancelled|completed (both optional)
    """
    query = parse(AdminReservationQuery, {k: v for k, v in request.args.items() if v})
    reservations = AllocationEngine.for_current_app().list_all(
        current_principal(), day=query.date, status=query.status
    )
    return jok([r.to_dict() for r in reservations])


@bp.delete("/reservations/<int:reservation_id>")
@admin_required
def cancel_reservation(reservation_id: int):
    reservation = AllocationEngine.for_current_app().cancel(current_principal(), reservation_id)
    return jok(reservation.to_dict(), message="Reservation cancelled successfully.")


@bp.get("/stats")
@admin_required
def stats():
    return jok(compute_stats(current_principal()))


@bp.get("/tables")
@admin_required
def list_tables():
    return jok([t.to_dict() for t in TableRegistry().all()])


@bp.post("/tables")
@admin_required
def create_table():
    data = parse(CreateTableRequest, request.get_json(silent=True))
    table = TableRegistry().add(data.table_number, data.capacity, current_app.config["MAX_PARTY_SIZE"])
    return jok(table.to_dict(), message="Table created.", status=201)
