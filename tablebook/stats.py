from .auth import ensure_admin
from .ledger import ReservationLedger
from .models import STATUS_CONFIRMED
from .registry import TableRegistry
from .sessions import Principal
from .utils.time import today


def compute_stats(requester: Principal, ledger: ReservationLedger | None = None,
                  registry: TableRegistry | None = None, clock=today) -> dict:
    """Aggregate counts for the admin dashboard, read fresh on every call.

    ``todayReservations`` counts reservations dated today, in any status.
    """
    ensure_admin(requester)
    ledger = ledger or ReservationLedger()
    registry = registry or TableRegistry()
    return {
        "totalReservations": ledger.count(),
        "todayReservations": ledger.count(day=clock()),
        "confirmedReservations": ledger.count(status=STATUS_CONFIRMED),
        "totalTables": registry.count(),
    }
