"""DTOs (Data Transfer Objects) de la capa de aplicación."""

from app.application.dtos.booking_dto import (
    BookingDetailDTO,
    BookingResultDTO,
    CancellationItemDTO,
    CreateBookingDTO,
    CreateMultiRoomBookingDTO,
    FailedGroupDTO,
    HashResolution,
    HotelDTO,
    LeadGuestDTO,
    MultiRoomResultDTO,
    RateSelection,
    RequesterDTO,
    RoomSelectionDTO,
    SessionCancellationDTO,
    SessionSummaryDTO,
    SessionViewDTO,
)

__all__ = [
    # Entrada
    "CreateBookingDTO",
    "CreateMultiRoomBookingDTO",
    "HotelDTO",
    "LeadGuestDTO",
    "RateSelection",
    "RoomSelectionDTO",
    # Resultados
    "HashResolution",
    "BookingResultDTO",
    "FailedGroupDTO",
    "MultiRoomResultDTO",
    # Sesiones
    "SessionSummaryDTO",
    "SessionViewDTO",
    "CancellationItemDTO",
    "SessionCancellationDTO",
    # Consultas
    "RequesterDTO",
    "BookingDetailDTO",
]
