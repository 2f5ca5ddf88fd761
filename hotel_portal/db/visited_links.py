import logging

from sqlalchemy import delete, insert, select

from hotel_portal.db.database import (
    Database,
    is_blank,
    returns_default,
    returns_status,
    visited_links,
)
from hotel_portal.status import Status

logger = logging.getLogger(__name__)


class VisitedLinkStore:
    """Expedia pages a user has opened, keyed by hotel id."""

    def __init__(self, db: Database):
        self._db = db

    @returns_status
    def save_link(self, user: str, hotel_id: str) -> Status:
        if is_blank(user) or is_blank(hotel_id):
            return Status.INVALID_LINK
        match = (visited_links.c.user == user) & (visited_links.c.id == hotel_id)
        with self._db.transaction() as conn:
            if conn.execute(select(visited_links.c.id).where(match)).first() is not None:
                return Status.DUPLICATE_LINK
            conn.execute(insert(visited_links).values(id=hotel_id, user=user))
        return Status.OK

    @returns_status
    def remove_link(self, user: str, hotel_id: str) -> Status:
        if is_blank(user) or is_blank(hotel_id):
            return Status.INVALID_LINK
        with self._db.transaction() as conn:
            result = conn.execute(
                delete(visited_links).where(
                    (visited_links.c.user == user) & (visited_links.c.id == hotel_id)
                )
            )
        return Status.OK if result.rowcount == 1 else Status.INVALID_LINK

    @returns_default(list)
    def get_links(self, user: str) -> list[str]:
        with self._db.transaction() as conn:
            rows = conn.execute(
                select(visited_links.c.id)
                .where(visited_links.c.user == user)
                .order_by(visited_links.c.id)
            ).all()
        return [row.id for row in rows]

    @returns_status
    def clear_links(self, user: str) -> Status:
        if is_blank(user):
            return Status.INVALID_LINK
        with self._db.transaction() as conn:
            result = conn.execute(delete(visited_links).where(visited_links.c.user == user))
        logger.info("Cleared %d visited links for %s", result.rowcount, user)
        return Status.OK
