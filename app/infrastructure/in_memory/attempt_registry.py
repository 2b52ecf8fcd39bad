import copy

from app.application.interfaces.attempt_registry import BookingAttempt, BookingAttemptRegistry


class InMemoryBookingAttemptRegistry(BookingAttemptRegistry):
    """Registro de intentos en memoria del proceso."""

    def __init__(self) -> None:
        self._attempts: dict[str, BookingAttempt] = {}

    async def add(self, attempt: BookingAttempt) -> None:
        if attempt.attempt_id in self._attempts:
            raise ValueError("Attempt id already exists")
        self._attempts[attempt.attempt_id] = copy.deepcopy(attempt)

    async def get(self, attempt_id: str) -> BookingAttempt | None:
        stored = self._attempts.get(attempt_id)
        return copy.deepcopy(stored) if stored else None

    async def update(self, attempt: BookingAttempt) -> None:
        if attempt.attempt_id not in self._attempts:
            raise ValueError("Attempt not found")
        self._attempts[attempt.attempt_id] = copy.deepcopy(attempt)
