from app.domain.entities.booking_session import BookingSession


class BookingSessionRepo:
    async def save(self, session: BookingSession) -> None:
        """Crea o reemplaza la sesión junto con sus sub-reservas."""
        raise NotImplementedError

    async def get(self, session_id: str) -> BookingSession | None:
        raise NotImplementedError
