"""Entidades del dominio de reservas de hotel."""

from app.domain.entities.booking_session import (
    BookingSession,
    SubBooking,
    SubBookingOutcome,
    sanitize_room_type,
)
from app.domain.entities.invoice import Invoice, InvoiceItem
from app.domain.entities.reservation import (
    HotelSnapshot,
    Reservation,
    ReservationStatus,
    RoomGuest,
    SupplierStatus,
)

__all__ = [
    # Reservation
    "Reservation",
    "ReservationStatus",
    "SupplierStatus",
    "HotelSnapshot",
    "RoomGuest",
    # Invoice
    "Invoice",
    "InvoiceItem",
    # BookingSession
    "BookingSession",
    "SubBooking",
    "SubBookingOutcome",
    "sanitize_room_type",
]
