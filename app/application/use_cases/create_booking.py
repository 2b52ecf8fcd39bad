import logging
from dataclasses import replace

from app.application.dtos.booking_dto import (
    BookingResultDTO,
    CreateBookingDTO,
    HashResolution,
    LeadGuestDTO,
)
from app.application.interfaces.booking_notifier import BookingNotifier
from app.application.interfaces.clock import Clock
from app.application.interfaces.supplier_gateway import (
    HotelSupplierGateway,
    StartBookingRequest,
)
from app.application.interfaces.uuid_generator import UUIDGenerator
from app.application.use_cases.certification_rate import CertificationRateAdapter
from app.application.use_cases.confirmation_poller import ConfirmationPoller
from app.application.use_cases.guest_assignment import (
    build_room_guests,
    normalize_phone,
    split_guest_name,
)
from app.application.use_cases.persist_booking import PersistBookingUseCase, build_reservation
from app.application.use_cases.resolve_rate_hash import RateHashResolver
from app.domain.constants import (
    DEFAULT_GUEST_FIRST_NAME,
    HASH_EXPIRED_WARNING,
    SUPPLIER_STATUS_HASH_EXPIRED,
    SUPPLIER_STATUS_SANDBOX,
)
from app.domain.entities.reservation import Reservation, ReservationStatus
from app.domain.errors import SupplierRejectedError, ValidationError
from app.domain.value_objects.stay_dates import StayDates


class CreateBookingUseCase:
    """
    Saga de reserva de un tipo de habitación.

    Flujo: resolver hash (o tarifa de certificación) -> formulario de reserva
    -> iniciar reserva y sondear confirmación -> guardar reserva y factura.

    Desvíos:
    - Hash expirado: se guarda 'pending' + 'hash_expired' sin llamar al proveedor.
    - Sandbox: se guarda 'pending' + 'sandbox' con el partner order id.
    """

    def __init__(
        self,
        supplier_gateway: HotelSupplierGateway,
        resolver: RateHashResolver,
        certification: CertificationRateAdapter,
        poller: ConfirmationPoller,
        writer: PersistBookingUseCase,
        uuid_generator: UUIDGenerator,
        clock: Clock,
        notifier: BookingNotifier | None = None,
    ) -> None:
        self._supplier_gateway = supplier_gateway
        self._resolver = resolver
        self._certification = certification
        self._poller = poller
        self._writer = writer
        self._uuid_generator = uuid_generator
        self._clock = clock
        self._notifier = notifier
        self._logger = logging.getLogger(__name__)

    async def execute(self, dto: CreateBookingDTO) -> BookingResultDTO:
        lead = self._lead_guest(dto)

        if self._certification.applies_to(dto.hotel.hotel_id):
            self._logger.info(
                "Certification hotel detected, re-dating stay and selecting refundable rate",
                extra={"hotel_id": dto.hotel.hotel_id},
            )
            dto, resolution = await self._certification.prepare(dto)
        else:
            StayDates(check_in=dto.check_in, check_out=dto.check_out)
            resolution = await self._resolver.resolve(
                dto.selected_rate.match_hash, language=dto.language
            )
            dto = replace(
                dto, selected_rate=replace(dto.selected_rate, book_hash=resolution.book_hash)
            )

        # Nunca se reutiliza: cada intento tiene su propio partner order id
        order_id = dto.order_id or self._uuid_generator.generate_order_id()

        if resolution.expired:
            return await self._save_hash_expired(dto, lead, resolution)

        form = await self._supplier_gateway.create_booking_form(
            book_hash=resolution.book_hash or "",
            partner_order_id=order_id,
            user_ip=dto.user_ip,
            language=dto.language,
        )
        if not form.success:
            if form.sandbox_mode:
                return await self._save_sandbox(dto, lead, order_id)
            self._logger.error(
                "Failed to create booking form",
                extra={"order_id": order_id, "error": form.error},
            )
            raise SupplierRejectedError(
                order_id=order_id,
                supplier_status=form.error or "booking_form_failed",
                detail="Failed to create booking form",
            )

        self._logger.info(
            "Booking form created",
            extra={"order_id": order_id, "supplier_order_id": form.order_id},
        )

        status = await self._poller.confirm(order_id, self._start_request(dto, lead))

        reservation = build_reservation(
            reservation_id=self._uuid_generator.generate_entity_id(),
            dto=dto,
            lead=lead,
            status=ReservationStatus.CONFIRMED,
            supplier_status=status.status,
            supplier_order_id=status.order_id or order_id,
            now=self._clock.now(),
        )
        invoice = await self._writer.save_confirmed(
            reservation,
            room_name=dto.selected_rate.room_name,
            unit_price=dto.selected_rate.price,
        )
        if self._notifier is not None:
            try:
                await self._notifier.booking_confirmed(reservation, invoice)
            except Exception:
                self._logger.warning(
                    "Booking notification failed",
                    extra={"reservation_id": reservation.id, "order_id": order_id},
                    exc_info=True,
                )
        return BookingResultDTO(reservation=reservation, invoice=invoice)

    def _lead_guest(self, dto: CreateBookingDTO) -> LeadGuestDTO:
        email = (dto.guest_email or "").strip()
        if not email:
            raise ValidationError("guest_email", "a contact email is required")
        first_name, last_name = split_guest_name(dto.guest_name)
        return LeadGuestDTO(
            first_name=first_name,
            last_name=last_name,
            full_name=(dto.guest_name or "").strip() or DEFAULT_GUEST_FIRST_NAME,
            email=email,
            phone=normalize_phone(dto.guest_phone),
            nationality=dto.nationality or "US",
        )

    @staticmethod
    def _start_request(dto: CreateBookingDTO, lead: LeadGuestDTO) -> StartBookingRequest:
        return StartBookingRequest(
            user={"email": lead.email, "phone": lead.phone, "comment": dto.special_requests},
            supplier_data={
                "first_name_original": lead.first_name,
                "last_name_original": lead.last_name,
                "phone": lead.phone,
                "email": lead.email,
            },
            rooms=build_room_guests(lead.first_name, lead.last_name, dto.room_count),
            payment_type={
                "type": "deposit",
                "amount": f"{dto.total_price:.2f}",
                "currency_code": dto.currency,
            },
            language=dto.language,
        )

    async def _save_hash_expired(
        self, dto: CreateBookingDTO, lead: LeadGuestDTO, resolution: HashResolution
    ) -> BookingResultDTO:
        self._logger.warning(
            "Rate hash expired, creating pending reservation without supplier booking",
            extra={
                "hotel_id": dto.hotel.hotel_id,
                "match_hash": dto.selected_rate.match_hash,
                "reason": resolution.reason,
            },
        )
        reservation = build_reservation(
            reservation_id=self._uuid_generator.generate_entity_id(),
            dto=dto,
            lead=lead,
            status=ReservationStatus.PENDING,
            supplier_status=SUPPLIER_STATUS_HASH_EXPIRED,
            supplier_order_id=None,
            now=self._clock.now(),
        )
        await self._writer.save_pending(reservation)
        await self._notify_pending(reservation, HASH_EXPIRED_WARNING)
        return BookingResultDTO(
            reservation=reservation,
            warning=HASH_EXPIRED_WARNING,
            message="Reservation created - pending confirmation",
        )

    async def _save_sandbox(
        self, dto: CreateBookingDTO, lead: LeadGuestDTO, order_id: str
    ) -> BookingResultDTO:
        self._logger.warning(
            "Sandbox mode: creating reservation without actual booking",
            extra={"order_id": order_id, "hotel_id": dto.hotel.hotel_id},
        )
        reservation = build_reservation(
            reservation_id=self._uuid_generator.generate_entity_id(),
            dto=dto,
            lead=lead,
            status=ReservationStatus.PENDING,
            supplier_status=SUPPLIER_STATUS_SANDBOX,
            supplier_order_id=order_id,
            now=self._clock.now(),
        )
        await self._writer.save_pending(reservation)
        await self._notify_pending(reservation, "sandbox")
        return BookingResultDTO(
            reservation=reservation,
            sandbox_mode=True,
            message="Booking created in sandbox mode",
        )

    async def _notify_pending(self, reservation: Reservation, reason: str) -> None:
        if self._notifier is None:
            return
        try:
            await self._notifier.booking_pending(reservation, reason)
        except Exception:
            self._logger.warning(
                "Booking notification failed",
                extra={"reservation_id": reservation.id},
                exc_info=True,
            )
