import logging

from app.application.interfaces.booking_notifier import BookingNotifier
from app.domain.entities.invoice import Invoice
from app.domain.entities.reservation import Reservation


class LoggingBookingNotifier(BookingNotifier):
    """
    Default notifier: records the events that email/WhatsApp/push
    collaborators would deliver.
    """

    def __init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    async def booking_confirmed(self, reservation: Reservation, invoice: Invoice) -> None:
        self._logger.info(
            "Booking confirmation notification",
            extra={
                "reservation_id": reservation.id,
                "guest_email": reservation.guest_email,
                "invoice_number": invoice.invoice_number,
                "total": str(invoice.total),
                "currency": invoice.currency,
            },
        )

    async def booking_pending(self, reservation: Reservation, reason: str) -> None:
        self._logger.info(
            "Booking pending notification",
            extra={
                "reservation_id": reservation.id,
                "guest_email": reservation.guest_email,
                "reason": reason,
            },
        )

    async def booking_cancelled(self, reservation: Reservation) -> None:
        self._logger.info(
            "Booking cancellation notification",
            extra={"reservation_id": reservation.id, "guest_email": reservation.guest_email},
        )
