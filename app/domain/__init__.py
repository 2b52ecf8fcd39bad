"""
Capa de Dominio - Reservas de Hotel.

Esta capa contiene la lógica de negocio pura, sin dependencias de frameworks.
Incluye entidades, value objects y excepciones de dominio.

Estructura:
- entities/: Entidades del dominio (Reservation, Invoice, BookingSession)
- value_objects/: Objetos de valor inmutables (Money, StayDates)
- errors.py: Excepciones específicas del dominio
- constants.py: Constantes del dominio
"""

from app.domain.constants import (
    RESERVATION_STATUS_CANCELLED,
    RESERVATION_STATUS_CONFIRMED,
    RESERVATION_STATUS_PENDING,
)
from app.domain.entities import (
    BookingSession,
    HotelSnapshot,
    Invoice,
    InvoiceItem,
    Reservation,
    ReservationStatus,
    RoomGuest,
    SubBooking,
    SubBookingOutcome,
    SupplierStatus,
)
from app.domain.errors import (
    AuthenticationRequiredError,
    BookingAttemptNotFoundError,
    BookingPersistenceError,
    BookingSessionNotFoundError,
    DomainError,
    InvalidDateRangeError,
    InvalidMoneyError,
    InvalidReservationStatusError,
    NoRefundableRateError,
    NotAuthorizedError,
    OptimisticLockError,
    ReservationNotFoundError,
    SupplierError,
    SupplierRejectedError,
    SupplierTimeoutError,
    SupplierUnavailableError,
    ValidationError,
)
from app.domain.value_objects import Money, StayDates

__all__ = [
    # Constants
    "RESERVATION_STATUS_CANCELLED",
    "RESERVATION_STATUS_CONFIRMED",
    "RESERVATION_STATUS_PENDING",
    # Entities
    "Reservation",
    "ReservationStatus",
    "SupplierStatus",
    "HotelSnapshot",
    "RoomGuest",
    "Invoice",
    "InvoiceItem",
    "BookingSession",
    "SubBooking",
    "SubBookingOutcome",
    # Value Objects
    "Money",
    "StayDates",
    # Errors
    "DomainError",
    "ReservationNotFoundError",
    "InvalidReservationStatusError",
    "OptimisticLockError",
    "BookingSessionNotFoundError",
    "BookingAttemptNotFoundError",
    "SupplierError",
    "SupplierRejectedError",
    "SupplierTimeoutError",
    "SupplierUnavailableError",
    "NoRefundableRateError",
    "BookingPersistenceError",
    "AuthenticationRequiredError",
    "NotAuthorizedError",
    "ValidationError",
    "InvalidDateRangeError",
    "InvalidMoneyError",
]
