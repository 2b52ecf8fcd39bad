from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Sequence

from sqlalchemy import insert, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.application.interfaces.reservation_repo import ReservationRepo
from app.domain.entities.reservation import (
    HotelSnapshot,
    Reservation,
    ReservationStatus,
    RoomGuest,
)
from app.domain.errors import OptimisticLockError, ReservationNotFoundError
from app.infrastructure.db.tables import reservations


def _aware(value: datetime | None) -> datetime | None:
    # sqlite hands back naive datetimes
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _to_row(reservation: Reservation) -> dict[str, Any]:
    hotel = reservation.hotel or HotelSnapshot(hotel_id="", name="")
    return {
        "id": reservation.id,
        "user_id": reservation.user_id,
        "guest_name": reservation.guest_name,
        "guest_email": reservation.guest_email,
        "guest_phone": reservation.guest_phone,
        "nationality": reservation.nationality,
        "hotel_id": hotel.hotel_id,
        "hotel_name": hotel.name,
        "hotel_address": hotel.address,
        "hotel_city": hotel.city,
        "hotel_country": hotel.country,
        "hotel_rating": hotel.rating,
        "hotel_image": hotel.image,
        "match_hash": hotel.match_hash,
        "check_in": reservation.check_in,
        "check_out": reservation.check_out,
        "number_of_nights": reservation.number_of_nights,
        "number_of_rooms": reservation.number_of_rooms,
        "number_of_adults": reservation.number_of_adults,
        "room_type": reservation.room_type,
        "stay_type": reservation.stay_type,
        "meal": reservation.meal,
        "payment_method": reservation.payment_method,
        "special_requests": reservation.special_requests,
        "guests": [
            {"first_name": g.first_name, "last_name": g.last_name} for g in reservation.guests
        ],
        "status": reservation.status.value,
        "supplier_order_id": reservation.supplier_order_id,
        "supplier_status": reservation.supplier_status,
        "session_id": reservation.session_id,
        "total_price": reservation.total_price,
        "currency": reservation.currency,
        "invoice_id": reservation.invoice_id,
        "notes": list(reservation.notes),
        "lock_version": reservation.lock_version,
        "created_at": reservation.created_at,
        "updated_at": reservation.updated_at,
    }


def _from_row(row) -> Reservation:
    return Reservation(
        id=row["id"],
        user_id=row["user_id"],
        guest_name=row["guest_name"],
        guest_email=row["guest_email"],
        guest_phone=row["guest_phone"] or "",
        nationality=row["nationality"] or "US",
        hotel=HotelSnapshot(
            hotel_id=row["hotel_id"],
            name=row["hotel_name"],
            address=row["hotel_address"] or "",
            city=row["hotel_city"] or "",
            country=row["hotel_country"] or "Unknown",
            rating=row["hotel_rating"] or 0.0,
            image=row["hotel_image"] or "",
            match_hash=row["match_hash"],
        ),
        check_in=row["check_in"],
        check_out=row["check_out"],
        number_of_nights=row["number_of_nights"],
        number_of_rooms=row["number_of_rooms"],
        number_of_adults=row["number_of_adults"],
        room_type=row["room_type"],
        stay_type=row["stay_type"] or "",
        meal=row["meal"] or "",
        payment_method=row["payment_method"] or "",
        special_requests=row["special_requests"] or "",
        guests=[RoomGuest(**g) for g in row["guests"] or []],
        status=ReservationStatus(row["status"]),
        supplier_order_id=row["supplier_order_id"],
        supplier_status=row["supplier_status"],
        session_id=row["session_id"],
        total_price=Decimal(str(row["total_price"])),
        currency=row["currency"],
        invoice_id=row["invoice_id"],
        notes=list(row["notes"] or []),
        lock_version=row["lock_version"],
        created_at=_aware(row["created_at"]),
        updated_at=_aware(row["updated_at"]),
    )


class ReservationRepoSQL(ReservationRepo):
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(self, reservation: Reservation) -> None:
        await self._session.execute(insert(reservations).values(_to_row(reservation)))

    async def get_by_id(self, reservation_id: str) -> Reservation | None:
        stmt = select(reservations).where(reservations.c.id == reservation_id).limit(1)
        result = await self._session.execute(stmt)
        row = result.mappings().first()
        return _from_row(row) if row else None

    async def list_by_user(self, user_id: str) -> Sequence[Reservation]:
        stmt = (
            select(reservations)
            .where(reservations.c.user_id == str(user_id))
            .order_by(reservations.c.created_at.desc())
        )
        result = await self._session.execute(stmt)
        return [_from_row(row) for row in result.mappings().all()]

    async def list_by_session(self, session_id: str) -> Sequence[Reservation]:
        stmt = (
            select(reservations)
            .where(reservations.c.session_id == session_id)
            .order_by(reservations.c.created_at)
        )
        result = await self._session.execute(stmt)
        return [_from_row(row) for row in result.mappings().all()]

    async def update(
        self,
        reservation: Reservation,
        expected_lock_version: int | None = None,
    ) -> None:
        where_clause = [reservations.c.id == reservation.id]
        if expected_lock_version is not None:
            where_clause.append(reservations.c.lock_version == expected_lock_version)
        values = _to_row(reservation)
        values.pop("id")
        values.pop("created_at")
        stmt = update(reservations).where(*where_clause).values(values)
        result = await self._session.execute(stmt)
        if result.rowcount:
            return

        current = await self._session.execute(
            select(reservations.c.lock_version).where(reservations.c.id == reservation.id)
        )
        actual = current.scalar()
        if actual is None:
            raise ReservationNotFoundError(reservation.id)
        raise OptimisticLockError(reservation.id, expected_lock_version, actual)
