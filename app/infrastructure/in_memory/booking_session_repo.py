import copy

from app.application.interfaces.booking_session_repo import BookingSessionRepo
from app.domain.entities.booking_session import BookingSession


class InMemoryBookingSessionRepo(BookingSessionRepo):
    def __init__(self) -> None:
        self.sessions: dict[str, BookingSession] = {}

    async def save(self, session: BookingSession) -> None:
        self.sessions[session.session_id] = copy.deepcopy(session)

    async def get(self, session_id: str) -> BookingSession | None:
        stored = self.sessions.get(session_id)
        return copy.deepcopy(stored) if stored else None
