from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError

from .errors import InvalidInput
from .extensions import db
from .models import DiningTable


class TableRegistry:
    """Catalogue of physical tables."""

    def __init__(self, session=None):
        self.session = session or db.session

    def candidates(self, party_size: int) -> list[DiningTable]:
        """Tables that seat ``party_size``, smallest first, then by table number."""
        return list(self.session.execute(
            select(DiningTable)
            .where(DiningTable.capacity >= party_size)
            .order_by(DiningTable.capacity.asc(), DiningTable.table_number.asc())
        ).scalars())

    def all(self) -> list[DiningTable]:
        return list(self.session.execute(
            select(DiningTable).order_by(DiningTable.table_number.asc())
        ).scalars())

    def count(self) -> int:
        return self.session.execute(select(func.count()).select_from(DiningTable)).scalar_one()

    def add(self, table_number: int, capacity: int, max_capacity: int) -> DiningTable:
        if not 1 <= capacity <= max_capacity:
            raise InvalidInput(f"Capacity must be between 1 and {max_capacity}.")
        table = DiningTable(table_number=table_number, capacity=capacity)
        self.session.add(table)
        try:
            self.session.commit()
        except IntegrityError:
            self.session.rollback()
            raise InvalidInput(f"Table {table_number} already exists.")
        return table
