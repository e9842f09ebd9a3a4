
from datetime import datetime, timezone
from sqlalchemy import CheckConstraint, Index, text
from .extensions import db
from .utils.time import api_iso_z

ROLE_USER = "user"
ROLE_ADMIN = "admin"
ROLES = (ROLE_USER, ROLE_ADMIN)

STATUS_CONFIRMED = "confirmed"
STATUS_CANCELLED = "cancelled"
STATUS_COMPLETED = "completed"
STATUSES = (STATUS_CONFIRMED, STATUS_CANCELLED, STATUS_COMPLETED)


def _utcnow():
    return datetime.now(timezone.utc)


class User(db.Model):
    __tablename__ = "users"
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(120), nullable=False)
    email = db.Column(db.String(255), nullable=False, unique=True, index=True)
    password_hash = db.Column(db.String(255), nullable=False)
    role = db.Column(db.String(16), nullable=False, default=ROLE_USER)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=_utcnow)

    reservations = db.relationship("Reservation", back_populates="user")

    __table_args__ = (
        CheckConstraint("role IN ('user', 'admin')", name="ck_users_role"),
    )

    def to_dict(self):
        return {"id": self.id, "name": self.name, "email": self.email, "role": self.role}


class DiningTable(db.Model):
    __tablename__ = "tables"
    id = db.Column(db.Integer, primary_key=True)
    table_number = db.Column(db.Integer, nullable=False, unique=True)
    capacity = db.Column(db.Integer, nullable=False)

    __table_args__ = (
        CheckConstraint("capacity > 0", name="ck_tables_capacity_positive"),
    )

    def to_dict(self):
        return {"id": self.id, "tableNumber": self.table_number, "capacity": self.capacity}


class Reservation(db.Model):
    __tablename__ = "reservations"
    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    table_id = db.Column(db.Integer, db.ForeignKey("tables.id"), nullable=False)
    date = db.Column(db.Date, nullable=False, index=True)
    time_slot = db.Column(db.String(5), nullable=False)
    guests = db.Column(db.Integer, nullable=False)
    status = db.Column(db.String(16), nullable=False, default=STATUS_CONFIRMED, index=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=_utcnow)

    user = db.relationship("User", back_populates="reservations")
    table = db.relationship("DiningTable")

    __table_args__ = (
        CheckConstraint("guests > 0", name="ck_reservations_guests_positive"),
        CheckConstraint(
            "status IN ('confirmed', 'cancelled', 'completed')", name="ck_reservations_status"
        ),
        # at most one confirmed booking per table and slot
        Index(
            "uq_reservation_confirmed_table_slot",
            "table_id", "date", "time_slot",
            unique=True,
            sqlite_where=text("status = 'confirmed'"),
            postgresql_where=text("status = 'confirmed'"),
        ),
    )

    def to_dict(self):
        return {
            "id": self.id,
            "date": self.date.isoformat(),
            "timeSlot": self.time_slot,
            "guests": self.guests,
            "status": self.status,
            "createdAt": api_iso_z(self.created_at),
            "table": self.table.to_dict(),
            "user": {"id": self.user.id, "name": self.user.name, "email": self.user.email},
        }
