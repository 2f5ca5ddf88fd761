import logging

from sqlalchemy import delete, func, insert, select, update

from hotel_portal.db.database import (
    Database,
    hotel_details,
    is_blank,
    returns_default,
    returns_status,
    review_details,
)
from hotel_portal.schemas.hotel import Hotel
from hotel_portal.status import Status

logger = logging.getLogger(__name__)


def _to_hotel(row, avg_rating: float | None = None) -> Hotel:
    return Hotel(
        id=row.id,
        name=row.name,
        street=row.street or "",
        city=row.city or "",
        state=row.state or "",
        latitude=row.latitude or 0.0,
        longitude=row.longitude or 0.0,
        area_description=row.areadesc,
        property_description=row.propertydesc,
        avg_rating=avg_rating,
    )


def format_rating(value: float | None) -> float:
    """One decimal place, 0.0 when there are no ratings."""
    return round(float(value), 1) if value is not None else 0.0


class HotelStore:
    def __init__(self, db: Database):
        self._db = db

    @returns_status
    def add_hotel(self, hotel: Hotel) -> Status:
        if is_blank(hotel.id) or is_blank(hotel.name):
            return Status.INVALID_HOTEL
        with self._db.transaction() as conn:
            found = conn.execute(
                select(hotel_details.c.id).where(hotel_details.c.id == hotel.id)
            ).first()
            if found is not None:
                return Status.DUPLICATE_HOTEL
            conn.execute(
                insert(hotel_details).values(
                    id=hotel.id,
                    name=hotel.name,
                    street=hotel.street,
                    city=hotel.city,
                    state=hotel.state,
                    latitude=hotel.latitude,
                    longitude=hotel.longitude,
                    areadesc=hotel.area_description,
                    propertydesc=hotel.property_description,
                )
            )
        return Status.OK

    @returns_default(lambda: False)
    def check_hotel_exists(self, hotel_id: str) -> bool:
        if is_blank(hotel_id):
            return False
        with self._db.transaction() as conn:
            found = conn.execute(
                select(hotel_details.c.id).where(hotel_details.c.id == hotel_id)
            ).first()
        return found is not None

    @returns_status
    def remove_hotel(self, hotel_id: str) -> Status:
        if is_blank(hotel_id):
            return Status.INVALID_HOTEL
        with self._db.transaction() as conn:
            result = conn.execute(delete(hotel_details).where(hotel_details.c.id == hotel_id))
        return Status.OK if result.rowcount == 1 else Status.INVALID_HOTEL

    @returns_status
    def set_descriptions(self, hotel_id: str, area: str | None, property_: str | None) -> Status:
        if is_blank(hotel_id):
            return Status.INVALID_HOTEL
        with self._db.transaction() as conn:
            result = conn.execute(
                update(hotel_details)
                .where(hotel_details.c.id == hotel_id)
                .values(areadesc=area, propertydesc=property_)
            )
        return Status.OK if result.rowcount == 1 else Status.INVALID_HOTEL

    @returns_default(list)
    def list_distinct_cities(self) -> list[str]:
        stmt = (
            select(hotel_details.c.city)
            .where(hotel_details.c.city.is_not(None))
            .distinct()
            .order_by(hotel_details.c.city)
        )
        with self._db.transaction() as conn:
            return [row.city for row in conn.execute(stmt)]

    @returns_default(list)
    def search_hotels(self, name: str | None, city: str | None) -> list[Hotel]:
        """Hotels whose name contains ``name`` and whose city equals ``city``.

        A blank argument drops its condition; both blank returns nothing.
        """
        conditions = []
        if not is_blank(name):
            conditions.append(hotel_details.c.name.like(f"%{name.strip()}%"))
        if not is_blank(city):
            conditions.append(hotel_details.c.city == city.strip())
        if not conditions:
            return []

        averages = (
            select(
                review_details.c.hotelid,
                func.avg(review_details.c.rating).label("avg_rating"),
            )
            .group_by(review_details.c.hotelid)
            .subquery()
        )
        stmt = (
            select(hotel_details, averages.c.avg_rating)
            .select_from(
                hotel_details.outerjoin(averages, averages.c.hotelid == hotel_details.c.id)
            )
            .where(*conditions)
            .order_by(hotel_details.c.name, hotel_details.c.id)
        )
        with self._db.transaction() as conn:
            rows = conn.execute(stmt).all()
        logger.debug("Hotel search name=%r city=%r: %d hits", name, city, len(rows))
        return [_to_hotel(row, format_rating(row.avg_rating)) for row in rows]

    @returns_default(lambda: None)
    def get_hotel(self, hotel_id: str) -> Hotel | None:
        with self._db.transaction() as conn:
            row = conn.execute(
                select(hotel_details).where(hotel_details.c.id == hotel_id)
            ).first()
        return _to_hotel(row) if row is not None else None

    @returns_default(list)
    def list_all_hotels(self) -> list[Hotel]:
        with self._db.transaction() as conn:
            rows = conn.execute(select(hotel_details).order_by(hotel_details.c.name)).all()
        return [_to_hotel(row) for row in rows]
