"""Agregado BookingSession - agrupa las sub-reservas de una solicitud multi-habitación."""

import re
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum

MAX_LABEL_LENGTH = 40


class SubBookingOutcome(str, Enum):
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class SubBooking:
    """Referencia estructurada a la reserva de un grupo (un tipo de habitación)."""

    room_type: str
    order_id: str
    room_count: int
    outcome: SubBookingOutcome
    reservation_id: str | None = None
    error: str | None = None


@dataclass
class BookingSession:
    """
    Sesión de reserva multi-habitación.

    Todas las sub-reservas comparten fechas y huésped principal;
    difieren en el tipo de habitación.
    """

    session_id: str
    user_id: str | None
    hotel_id: str
    check_in: date
    check_out: date
    guest_email: str
    created_at: datetime
    sub_bookings: list[SubBooking] = field(default_factory=list)

    def order_id_for(self, room_type: str) -> str:
        """Deriva el order id del proveedor para un tipo de habitación."""
        return f"{self.session_id}-{sanitize_room_type(room_type)}"

    def record(self, sub_booking: SubBooking) -> None:
        self.sub_bookings.append(sub_booking)

    @property
    def completed(self) -> list[SubBooking]:
        return [s for s in self.sub_bookings if s.outcome == SubBookingOutcome.COMPLETED]

    @property
    def failed(self) -> list[SubBooking]:
        return [s for s in self.sub_bookings if s.outcome == SubBookingOutcome.FAILED]


def sanitize_room_type(room_type: str) -> str:
    """Normaliza la etiqueta del tipo de habitación para usarla en un identificador."""
    label = re.sub(r"[^a-z0-9]+", "-", room_type.lower()).strip("-")
    return label[:MAX_LABEL_LENGTH].rstrip("-") or "room"
