"""Entidad Invoice - factura derivada de una reservación confirmada."""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from decimal import Decimal

from app.domain.constants import INVOICE_STATUS_PENDING
from app.domain.entities.reservation import Reservation
from app.domain.value_objects.money import Money


@dataclass
class InvoiceItem:
    """Línea de factura."""

    description: str
    quantity: int
    unit_price: Decimal
    total: Decimal


@dataclass
class Invoice:
    """
    Factura asociada 1:1 a una reservación.

    Invariante: `total` es igual al `total_price` de la reservación al crearse.
    """

    id: str
    invoice_number: str
    reservation_id: str
    user_id: str | None = None

    # Snapshot del cliente
    client_name: str = ""
    client_email: str = ""
    client_phone: str = ""

    items: list[InvoiceItem] = field(default_factory=list)
    subtotal: Decimal = Decimal("0")
    tax: Decimal = Decimal("0")
    discount: Decimal = Decimal("0")
    total: Decimal = Decimal("0")
    currency: str = "USD"

    status: str = INVOICE_STATUS_PENDING
    due_date: datetime | None = None
    created_at: datetime | None = None

    @classmethod
    def for_reservation(
        cls,
        invoice_id: str,
        reservation: Reservation,
        room_name: str | None,
        unit_price: Decimal | None,
        now: datetime,
        due_in_days: int = 7,
    ) -> "Invoice":
        """
        Construye la factura de una reservación confirmada.

        Una sola línea: hotel + habitación, cantidad = noches,
        total = precio total solicitado.
        """
        nights = max(reservation.number_of_nights, 1)
        total = reservation.total_price
        if unit_price is None:
            unit_price = Money(amount=total, currency_code=reservation.currency).divided_by(nights).amount
        hotel_name = reservation.hotel.name if reservation.hotel else ""
        invoice_number = f"INV-{int(now.timestamp() * 1000)}-{reservation.id[-6:].upper()}"
        return cls(
            id=invoice_id,
            invoice_number=invoice_number,
            reservation_id=reservation.id,
            user_id=reservation.user_id,
            client_name=reservation.guest_name,
            client_email=reservation.guest_email,
            client_phone=reservation.guest_phone,
            items=[
                InvoiceItem(
                    description=f"{hotel_name} - {room_name or 'Room'}",
                    quantity=nights,
                    unit_price=unit_price,
                    total=total,
                )
            ],
            subtotal=total,
            tax=Decimal("0"),
            discount=Decimal("0"),
            total=total,
            currency=reservation.currency,
            status=INVOICE_STATUS_PENDING,
            due_date=now + timedelta(days=due_in_days),
            created_at=now,
        )
