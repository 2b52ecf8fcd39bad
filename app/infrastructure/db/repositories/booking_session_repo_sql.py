from datetime import timezone

from sqlalchemy import delete, insert, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.application.interfaces.booking_session_repo import BookingSessionRepo
from app.domain.entities.booking_session import BookingSession, SubBooking, SubBookingOutcome
from app.infrastructure.db.retry import retry_on_deadlock
from app.infrastructure.db.tables import booking_session_items, booking_sessions


class BookingSessionRepoSQL(BookingSessionRepo):
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def save(self, session: BookingSession) -> None:
        async def _write() -> None:
            await self._session.execute(
                delete(booking_session_items).where(
                    booking_session_items.c.session_id == session.session_id
                )
            )
            await self._session.execute(
                delete(booking_sessions).where(
                    booking_sessions.c.session_id == session.session_id
                )
            )
            await self._session.execute(
                insert(booking_sessions).values(
                    session_id=session.session_id,
                    user_id=session.user_id,
                    hotel_id=session.hotel_id,
                    check_in=session.check_in,
                    check_out=session.check_out,
                    guest_email=session.guest_email,
                    created_at=session.created_at,
                )
            )
            if session.sub_bookings:
                await self._session.execute(
                    insert(booking_session_items),
                    [
                        {
                            "session_id": session.session_id,
                            "position": position,
                            "room_type": sub.room_type,
                            "order_id": sub.order_id,
                            "room_count": sub.room_count,
                            "outcome": sub.outcome.value,
                            "reservation_id": sub.reservation_id,
                            "error": sub.error,
                        }
                        for position, sub in enumerate(session.sub_bookings)
                    ],
                )

        await retry_on_deadlock(_write)

    async def get(self, session_id: str) -> BookingSession | None:
        result = await self._session.execute(
            select(booking_sessions).where(booking_sessions.c.session_id == session_id).limit(1)
        )
        row = result.mappings().first()
        if not row:
            return None

        items = await self._session.execute(
            select(booking_session_items)
            .where(booking_session_items.c.session_id == session_id)
            .order_by(booking_session_items.c.position)
        )
        created_at = row["created_at"]
        if created_at is not None and created_at.tzinfo is None:
            created_at = created_at.replace(tzinfo=timezone.utc)
        return BookingSession(
            session_id=row["session_id"],
            user_id=row["user_id"],
            hotel_id=row["hotel_id"],
            check_in=row["check_in"],
            check_out=row["check_out"],
            guest_email=row["guest_email"] or "",
            created_at=created_at,
            sub_bookings=[
                SubBooking(
                    room_type=item["room_type"],
                    order_id=item["order_id"],
                    room_count=item["room_count"],
                    outcome=SubBookingOutcome(item["outcome"]),
                    reservation_id=item["reservation_id"],
                    error=item["error"],
                )
                for item in items.mappings().all()
            ],
        )
