from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


class AttemptStatus(str, Enum):
    PROCESSING = "processing"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass
class BookingAttempt:
    attempt_id: str
    kind: str  # single, multi
    status: AttemptStatus
    created_at: datetime
    user_id: str | None = None  # None for guest bookings
    finished_at: datetime | None = None
    http_status: int | None = None
    result: dict[str, Any] | None = field(default=None, repr=False)
    error: str | None = None
    error_code: str | None = None


class BookingAttemptRegistry:
    """Registro de intentos de reserva ejecutados en segundo plano."""

    async def add(self, attempt: BookingAttempt) -> None:
        raise NotImplementedError

    async def get(self, attempt_id: str) -> BookingAttempt | None:
        raise NotImplementedError

    async def update(self, attempt: BookingAttempt) -> None:
        raise NotImplementedError
