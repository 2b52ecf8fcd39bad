"""Entidad Reservation - Agregado raíz del dominio."""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum

from app.domain.errors import InvalidReservationStatusError
from app.domain.value_objects.money import Money
from app.domain.value_objects.stay_dates import StayDates


class ReservationStatus(str, Enum):
    """Estados posibles de una reservación."""

    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"


class SupplierStatus(str, Enum):
    """Etiqueta del resultado obtenido del proveedor."""

    OK = "ok"
    HASH_EXPIRED = "hash_expired"
    SANDBOX = "sandbox"


@dataclass
class HotelSnapshot:
    """Copia de los datos del hotel al momento de reservar."""

    hotel_id: str
    name: str
    address: str = ""
    city: str = ""
    country: str = "Unknown"
    rating: float = 0.0
    image: str = ""
    match_hash: str | None = None


@dataclass
class RoomGuest:
    """Huésped asignado a una habitación."""

    first_name: str
    last_name: str


@dataclass
class Reservation:
    """
    Entidad principal del dominio - Agregado Raíz.

    Representa una reserva de hotel (una o varias habitaciones del mismo tipo)
    con el snapshot del hotel, el huésped principal y el estado del proveedor.
    """

    # Identificadores
    id: str
    user_id: str | None = None

    # Huésped principal
    guest_name: str = "Guest"
    guest_email: str = ""
    guest_phone: str = ""
    nationality: str = "US"

    # Hotel
    hotel: HotelSnapshot | None = None

    # Estancia
    check_in: date | None = None
    check_out: date | None = None
    number_of_nights: int = 0
    number_of_rooms: int = 1
    number_of_adults: int = 2
    room_type: str = "Standard Room"
    stay_type: str = "Leisure"
    meal: str = "nomeal"
    payment_method: str = "pending"
    special_requests: str = ""
    guests: list[RoomGuest] = field(default_factory=list)

    # Estados
    status: ReservationStatus = ReservationStatus.PENDING
    supplier_order_id: str | None = None
    supplier_status: str | None = None
    session_id: str | None = None

    # Financieros
    total_price: Decimal = Decimal("0")
    currency: str = "USD"

    # Relaciones
    invoice_id: str | None = None
    notes: list[str] = field(default_factory=list)

    # Control de concurrencia
    lock_version: int = 0

    # Timestamps
    created_at: datetime | None = None
    updated_at: datetime | None = None

    # === Propiedades calculadas ===

    @property
    def stay(self) -> StayDates | None:
        """Retorna las fechas de estancia como Value Object."""
        if self.check_in and self.check_out:
            return StayDates(check_in=self.check_in, check_out=self.check_out)
        return None

    @property
    def price(self) -> Money:
        """Retorna el precio total como Value Object Money."""
        return Money(amount=self.total_price, currency_code=self.currency)

    @property
    def is_confirmed(self) -> bool:
        return self.status == ReservationStatus.CONFIRMED

    @property
    def is_cancelled(self) -> bool:
        return self.status == ReservationStatus.CANCELLED

    def is_owned_by(self, user_id: str | None) -> bool:
        """Verifica si la reservación pertenece al usuario registrado."""
        return user_id is not None and self.user_id is not None and str(self.user_id) == str(user_id)

    # === Métodos de negocio ===

    def confirm_with_supplier(self, order_id: str, supplier_status: str, at: datetime) -> None:
        """Confirma la reservación con el resultado 'ok' del proveedor."""
        if self.status == ReservationStatus.CANCELLED:
            raise InvalidReservationStatusError(
                current_status=self.status.value,
                expected_status=ReservationStatus.PENDING.value,
                operation="confirm booking",
            )
        self.status = ReservationStatus.CONFIRMED
        self.supplier_order_id = order_id
        self.supplier_status = supplier_status
        self.updated_at = at
        self.lock_version += 1

    def cancel(self, note: str, at: datetime) -> bool:
        """
        Cancela la reservación y agrega una nota de auditoría.

        Returns:
            False si ya estaba cancelada (no se modifica nada), True en otro caso.
        """
        if self.status == ReservationStatus.CANCELLED:
            return False
        self.status = ReservationStatus.CANCELLED
        self.notes.append(note)
        self.updated_at = at
        self.lock_version += 1
        return True

    def attach_invoice(self, invoice_id: str) -> None:
        self.invoice_id = invoice_id
        self.lock_version += 1
