"""Interface BookingNotifier - Puerto hacia los colaboradores de notificación."""

from typing import Protocol

from app.domain.entities.invoice import Invoice
from app.domain.entities.reservation import Reservation


class BookingNotifier(Protocol):
    """
    Puerto para notificar reservas (email, WhatsApp, push).

    Se invoca sólo después de persistir; sus fallos nunca deben
    revertir ni hacer fallar la reserva.
    """

    async def booking_confirmed(self, reservation: Reservation, invoice: Invoice) -> None:
        ...

    async def booking_pending(self, reservation: Reservation, reason: str) -> None:
        ...

    async def booking_cancelled(self, reservation: Reservation) -> None:
        ...
