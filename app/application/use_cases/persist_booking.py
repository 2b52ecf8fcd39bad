import logging
from datetime import datetime
from decimal import Decimal

from app.application.dtos.booking_dto import CreateBookingDTO, LeadGuestDTO
from app.application.interfaces.clock import Clock
from app.application.interfaces.invoice_repo import InvoiceRepo
from app.application.interfaces.reservation_repo import ReservationRepo
from app.application.interfaces.transaction_manager import TransactionManager
from app.application.interfaces.uuid_generator import UUIDGenerator
from app.domain.constants import DEFAULT_MEAL, DEFAULT_ROOM_TYPE
from app.domain.entities.invoice import Invoice
from app.domain.entities.reservation import (
    HotelSnapshot,
    Reservation,
    ReservationStatus,
    RoomGuest,
)
from app.domain.errors import BookingPersistenceError
from app.domain.value_objects.stay_dates import StayDates


def build_reservation(
    reservation_id: str,
    dto: CreateBookingDTO,
    lead: LeadGuestDTO,
    status: ReservationStatus,
    supplier_status: str,
    supplier_order_id: str | None,
    now: datetime,
) -> Reservation:
    """Arma la entidad Reservation a partir de la solicitud ya normalizada."""
    stay = StayDates(check_in=dto.check_in, check_out=dto.check_out)
    hotel = dto.hotel
    rate = dto.selected_rate
    return Reservation(
        id=reservation_id,
        user_id=dto.user_id,
        guest_name=lead.full_name,
        guest_email=lead.email,
        guest_phone=lead.phone,
        nationality=lead.nationality,
        hotel=HotelSnapshot(
            hotel_id=str(hotel.hotel_id),
            name=hotel.name,
            address=hotel.address or "",
            city=hotel.city or "",
            country=hotel.country or hotel.city or "Unknown",
            rating=hotel.rating or 0.0,
            image=hotel.image or "",
            match_hash=rate.match_hash,
        ),
        check_in=stay.check_in,
        check_out=stay.check_out,
        number_of_nights=stay.nights,
        number_of_rooms=dto.room_count,
        number_of_adults=dto.number_of_adults,
        room_type=rate.room_name or dto.room_type or DEFAULT_ROOM_TYPE,
        stay_type=dto.stay_type,
        meal=rate.meal or DEFAULT_MEAL,
        payment_method=dto.payment_method,
        special_requests=dto.special_requests,
        guests=[
            RoomGuest(first_name=lead.first_name, last_name=lead.last_name)
            for _ in range(max(dto.room_count, 1))
        ],
        status=status,
        supplier_order_id=supplier_order_id,
        supplier_status=supplier_status,
        session_id=dto.session_id,
        total_price=dto.total_price,
        currency=dto.currency,
        created_at=now,
        updated_at=now,
    )


class PersistBookingUseCase:
    """
    Materializa localmente el resultado de la reserva.

    Las reservas confirmadas se guardan junto con su factura en una sola
    transacción. Si la escritura falla después de que el proveedor confirmó,
    se registra en CRITICAL para conciliación manual.
    """

    def __init__(
        self,
        reservation_repo: ReservationRepo,
        invoice_repo: InvoiceRepo,
        transaction_manager: TransactionManager,
        uuid_generator: UUIDGenerator,
        clock: Clock,
        invoice_due_days: int = 7,
    ) -> None:
        self._reservation_repo = reservation_repo
        self._invoice_repo = invoice_repo
        self._transaction_manager = transaction_manager
        self._uuid_generator = uuid_generator
        self._clock = clock
        self._invoice_due_days = invoice_due_days
        self._logger = logging.getLogger(__name__)

    async def save_pending(self, reservation: Reservation) -> Reservation:
        """Guarda una reserva sin confirmación del proveedor (hash expirado o sandbox)."""
        async with self._transaction_manager.start():
            await self._reservation_repo.create(reservation)
        self._logger.info(
            "Pending reservation saved",
            extra={
                "reservation_id": reservation.id,
                "supplier_status": reservation.supplier_status,
                "order_id": reservation.supplier_order_id,
            },
        )
        return reservation

    async def save_confirmed(
        self,
        reservation: Reservation,
        room_name: str | None,
        unit_price: Decimal | None,
    ) -> Invoice:
        """
        Guarda la reserva confirmada y su factura.

        Raises:
            BookingPersistenceError: si cualquier escritura falla.
        """
        now = self._clock.now()
        try:
            async with self._transaction_manager.start():
                await self._reservation_repo.create(reservation)
                invoice = Invoice.for_reservation(
                    invoice_id=self._uuid_generator.generate_entity_id(),
                    reservation=reservation,
                    room_name=room_name,
                    unit_price=unit_price,
                    now=now,
                    due_in_days=self._invoice_due_days,
                )
                await self._invoice_repo.create(invoice)
                expected_lock_version = reservation.lock_version
                reservation.attach_invoice(invoice.id)
                await self._reservation_repo.update(
                    reservation, expected_lock_version=expected_lock_version
                )
        except Exception as exc:
            self._logger.critical(
                "Supplier confirmed booking but local persistence failed; manual reconciliation required",
                extra={
                    "order_id": reservation.supplier_order_id,
                    "reservation_id": reservation.id,
                    "hotel_id": reservation.hotel.hotel_id if reservation.hotel else None,
                    "hotel_name": reservation.hotel.name if reservation.hotel else None,
                    "amount": str(reservation.total_price),
                    "currency": reservation.currency,
                    "guest_email": reservation.guest_email,
                    "error": str(exc),
                },
                exc_info=True,
            )
            raise BookingPersistenceError(
                order_id=reservation.supplier_order_id or "", detail=str(exc)
            ) from exc

        self._logger.info(
            "Confirmed reservation saved",
            extra={
                "reservation_id": reservation.id,
                "invoice_id": invoice.id,
                "invoice_number": invoice.invoice_number,
                "order_id": reservation.supplier_order_id,
            },
        )
        return invoice
