"""
Capa de Aplicación - Orquestación de reservas de hotel.

Esta capa contiene los casos de uso, DTOs e interfaces (puertos).
Orquesta la saga de reserva y define los contratos con la infraestructura.

Estructura:
- use_cases/: Casos de uso del sistema
- dtos/: Data Transfer Objects
- interfaces/: Puertos (contratos para adaptadores)
"""

from app.application.dtos import (
    BookingDetailDTO,
    BookingResultDTO,
    CreateBookingDTO,
    CreateMultiRoomBookingDTO,
    HotelDTO,
    MultiRoomResultDTO,
    RateSelection,
    RequesterDTO,
    RoomSelectionDTO,
)
from app.application.interfaces import (
    BookingAttemptRegistry,
    BookingNotifier,
    BookingSessionRepo,
    Clock,
    FakeClock,
    FakeUUIDGenerator,
    HotelSupplierGateway,
    InvoiceRepo,
    ReservationRepo,
    TransactionManager,
    UUIDGenerator,
)

__all__ = [
    # DTOs
    "CreateBookingDTO",
    "CreateMultiRoomBookingDTO",
    "HotelDTO",
    "RateSelection",
    "RoomSelectionDTO",
    "RequesterDTO",
    "BookingResultDTO",
    "MultiRoomResultDTO",
    "BookingDetailDTO",
    # Interfaces - Repositories
    "ReservationRepo",
    "InvoiceRepo",
    "BookingSessionRepo",
    "BookingAttemptRegistry",
    # Interfaces - Gateways
    "HotelSupplierGateway",
    "BookingNotifier",
    # Interfaces - Infrastructure
    "TransactionManager",
    # Interfaces - Utilities
    "Clock",
    "FakeClock",
    "UUIDGenerator",
    "FakeUUIDGenerator",
]
