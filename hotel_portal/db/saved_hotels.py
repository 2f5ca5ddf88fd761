import logging

from sqlalchemy import delete, insert, select

from hotel_portal.db.database import (
    Database,
    is_blank,
    returns_default,
    returns_status,
    saved_hotels,
)
from hotel_portal.status import Status

logger = logging.getLogger(__name__)


class SavedHotelStore:
    """Favourite hotels per user."""

    def __init__(self, db: Database):
        self._db = db

    def _match(self, user: str, hotel_id: str):
        return (saved_hotels.c.user == user) & (saved_hotels.c.id == hotel_id)

    @returns_status
    def save_hotel(self, user: str, hotel_id: str) -> Status:
        if is_blank(user) or is_blank(hotel_id):
            return Status.INVALID_SAVEHOTEL
        with self._db.transaction() as conn:
            found = conn.execute(select(saved_hotels.c.id).where(self._match(user, hotel_id))).first()
            if found is not None:
                return Status.DUPLICATE_SAVEHOTEL
            conn.execute(insert(saved_hotels).values(id=hotel_id, user=user))
        return Status.OK

    @returns_status
    def remove_saved_hotel(self, user: str, hotel_id: str) -> Status:
        if is_blank(user) or is_blank(hotel_id):
            return Status.INVALID_SAVEHOTEL
        with self._db.transaction() as conn:
            result = conn.execute(delete(saved_hotels).where(self._match(user, hotel_id)))
        return Status.OK if result.rowcount == 1 else Status.INVALID_SAVEHOTEL

    @returns_default(list)
    def get_saved_hotels(self, user: str) -> list[str]:
        with self._db.transaction() as conn:
            rows = conn.execute(
                select(saved_hotels.c.id)
                .where(saved_hotels.c.user == user)
                .order_by(saved_hotels.c.id)
            ).all()
        return [row.id for row in rows]

    @returns_status
    def remove_all_saved_hotels(self, user: str) -> Status:
        if is_blank(user):
            return Status.INVALID_SAVEHOTEL
        with self._db.transaction() as conn:
            result = conn.execute(delete(saved_hotels).where(saved_hotels.c.user == user))
        logger.info("Cleared %d saved hotels for %s", result.rowcount, user)
        return Status.OK
