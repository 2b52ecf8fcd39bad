"""DTOs para el flujo de reserva de hotel."""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal

from app.domain.constants import (
    DEFAULT_PAYMENT_METHOD,
    DEFAULT_STAY_TYPE,
    ROLE_ADMIN,
    ROLE_USER,
)
from app.domain.entities.booking_session import BookingSession
from app.domain.entities.invoice import Invoice
from app.domain.entities.reservation import Reservation


@dataclass
class RateSelection:
    """
    Tarifa elegida por el cliente en la búsqueda.

    Es efímera: sólo vive durante el intento de reserva.
    """

    match_hash: str
    price: Decimal | None = None
    currency: str | None = None
    room_name: str | None = None
    meal: str | None = None
    book_hash: str | None = None


@dataclass
class HashResolution:
    """Resultado de canjear un match hash por un book hash."""

    book_hash: str | None = None
    expired: bool = False
    reason: str | None = None


@dataclass
class HotelDTO:
    """Datos del hotel enviados por el cliente."""

    hotel_id: str
    name: str
    address: str = ""
    city: str = ""
    country: str = ""
    rating: float = 0.0
    image: str = ""


@dataclass
class LeadGuestDTO:
    """Huésped principal ya normalizado."""

    first_name: str
    last_name: str
    full_name: str
    email: str
    phone: str
    nationality: str = "US"


@dataclass
class CreateBookingDTO:
    """DTO para crear una reserva de un tipo de habitación."""

    hotel: HotelDTO
    check_in: date
    check_out: date
    selected_rate: RateSelection
    total_price: Decimal
    currency: str = "USD"

    # Huésped / usuario
    user_id: str | None = None
    guest_name: str | None = None
    guest_email: str | None = None
    guest_phone: str | None = None
    nationality: str | None = None

    # Estancia
    number_of_adults: int = 2
    room_type: str | None = None
    room_count: int = 1
    stay_type: str = DEFAULT_STAY_TYPE
    payment_method: str = DEFAULT_PAYMENT_METHOD
    special_requests: str = ""

    # Contexto de la solicitud
    user_ip: str = "0.0.0.0"
    language: str = "en"

    # Multi-habitación: el orquestador fija sesión y order id
    session_id: str | None = None
    order_id: str | None = None


@dataclass
class BookingResultDTO:
    """Resultado de una reserva de un solo grupo."""

    reservation: Reservation
    invoice: Invoice | None = None
    warning: str | None = None
    sandbox_mode: bool = False
    message: str = "Booking created successfully"


@dataclass
class RoomSelectionDTO:
    """Una habitación dentro de una solicitud multi-habitación."""

    room_type: str
    selected_rate: RateSelection
    total_price: Decimal | None = None


@dataclass
class CreateMultiRoomBookingDTO:
    """DTO para reservar varios tipos de habitación en una misma sesión."""

    base: CreateBookingDTO
    rooms: list[RoomSelectionDTO] = field(default_factory=list)


@dataclass
class FailedGroupDTO:
    room_type: str
    order_id: str
    room_count: int
    error: str
    error_code: str | None = None


@dataclass
class MultiRoomResultDTO:
    """Resultado agregado de una solicitud multi-habitación."""

    session: BookingSession
    completed: list[BookingResultDTO] = field(default_factory=list)
    failed: list[FailedGroupDTO] = field(default_factory=list)

    @property
    def is_partial(self) -> bool:
        return bool(self.failed)


@dataclass
class SessionSummaryDTO:
    total_rooms: int
    total_price: Decimal | None
    currency: str
    all_confirmed: bool


@dataclass
class SessionViewDTO:
    """Vista de lectura de una sesión multi-habitación."""

    session_id: str
    reservations: list[Reservation]
    summary: SessionSummaryDTO
    session: BookingSession | None = None


@dataclass
class CancellationItemDTO:
    reservation_id: str
    success: bool
    status: str | None = None
    already_cancelled: bool = False
    error: str | None = None


@dataclass
class SessionCancellationDTO:
    session_id: str
    results: list[CancellationItemDTO] = field(default_factory=list)

    @property
    def cancelled_count(self) -> int:
        return sum(1 for r in self.results if r.success and not r.already_cancelled)


@dataclass
class RequesterDTO:
    """Identidad de quien invoca la operación (resuelta por la capa HTTP)."""

    user_id: str | None = None
    role: str = ROLE_USER
    name: str | None = None
    email: str | None = None
    phone: str | None = None
    nationality: str | None = None

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN

    @property
    def is_authenticated(self) -> bool:
        return self.user_id is not None


@dataclass
class BookingDetailDTO:
    reservation: Reservation
    invoice: Invoice | None = None
