"""Interfaces (Puertos) de la capa de aplicación."""

from app.application.interfaces.attempt_registry import (
    AttemptStatus,
    BookingAttempt,
    BookingAttemptRegistry,
)
from app.application.interfaces.booking_notifier import BookingNotifier
from app.application.interfaces.booking_session_repo import BookingSessionRepo
from app.application.interfaces.clock import Clock, FakeClock
from app.application.interfaces.invoice_repo import InvoiceRepo
from app.application.interfaces.reservation_repo import ReservationRepo
from app.application.interfaces.supplier_gateway import (
    BookingFormResult,
    BookingStatusResult,
    HotelSupplierGateway,
    PrebookResult,
    StartBookingRequest,
)
from app.application.interfaces.transaction_manager import TransactionManager
from app.application.interfaces.uuid_generator import (
    FakeUUIDGenerator,
    UUIDGenerator,
)

__all__ = [
    # Repositories
    "ReservationRepo",
    "InvoiceRepo",
    "BookingSessionRepo",
    "BookingAttemptRegistry",
    "BookingAttempt",
    "AttemptStatus",
    # Gateways
    "HotelSupplierGateway",
    "PrebookResult",
    "BookingFormResult",
    "StartBookingRequest",
    "BookingStatusResult",
    "BookingNotifier",
    # Infrastructure
    "TransactionManager",
    # Utilities
    "Clock",
    "FakeClock",
    "UUIDGenerator",
    "FakeUUIDGenerator",
]
