import asyncio
import logging
from collections import OrderedDict
from dataclasses import replace
from decimal import Decimal

from app.application.dtos.booking_dto import (
    BookingResultDTO,
    CreateBookingDTO,
    CreateMultiRoomBookingDTO,
    FailedGroupDTO,
    MultiRoomResultDTO,
    RoomSelectionDTO,
)
from app.application.interfaces.booking_session_repo import BookingSessionRepo
from app.application.interfaces.clock import Clock
from app.application.interfaces.uuid_generator import UUIDGenerator
from app.application.use_cases.create_booking import CreateBookingUseCase
from app.domain.entities.booking_session import (
    BookingSession,
    SubBooking,
    SubBookingOutcome,
)
from app.domain.errors import DomainError, ValidationError


def group_by_room_type(rooms: list[RoomSelectionDTO]) -> "OrderedDict[str, list[RoomSelectionDTO]]":
    """Agrupa las habitaciones por tipo, conservando el orden de llegada."""
    groups: OrderedDict[str, list[RoomSelectionDTO]] = OrderedDict()
    for room in rooms:
        groups.setdefault(room.room_type, []).append(room)
    return groups


def _selection_price(room: RoomSelectionDTO) -> Decimal:
    if room.total_price is not None:
        return room.total_price
    return room.selected_rate.price or Decimal("0")


class CreateMultiRoomBookingUseCase:
    """
    Reserva varios tipos de habitación en una misma sesión.

    El proveedor sólo acepta un tipo de habitación por reserva, así que se
    ejecuta una saga por grupo. El fallo de un grupo nunca aborta a los demás:
    cada resultado se recolecta en `completed` o `failed`, en orden de grupo.

    Los grupos corren con concurrencia acotada por `max_concurrency`
    (1 = secuencial).
    """

    def __init__(
        self,
        create_booking: CreateBookingUseCase,
        session_repo: BookingSessionRepo,
        uuid_generator: UUIDGenerator,
        clock: Clock,
        max_concurrency: int = 1,
    ) -> None:
        self._create_booking = create_booking
        self._session_repo = session_repo
        self._uuid_generator = uuid_generator
        self._clock = clock
        self._max_concurrency = max(1, max_concurrency)
        self._logger = logging.getLogger(__name__)

    async def execute(self, dto: CreateMultiRoomBookingDTO) -> MultiRoomResultDTO:
        if not dto.rooms:
            raise ValidationError("rooms", "at least one room selection is required")

        groups = group_by_room_type(dto.rooms)
        session = BookingSession(
            session_id=self._uuid_generator.generate_session_id(),
            user_id=dto.base.user_id,
            hotel_id=str(dto.base.hotel.hotel_id),
            check_in=dto.base.check_in,
            check_out=dto.base.check_out,
            guest_email=dto.base.guest_email or "",
            created_at=self._clock.now(),
        )

        planned: list[tuple[str, str, CreateBookingDTO]] = []
        used_order_ids: set[str] = set()
        for index, (room_type, selections) in enumerate(groups.items(), start=1):
            order_id = session.order_id_for(room_type)
            if order_id in used_order_ids:
                order_id = f"{order_id}-{index}"
            used_order_ids.add(order_id)
            group_dto = self._group_dto(dto.base, session, order_id, room_type, selections)
            planned.append((room_type, order_id, group_dto))

        self._logger.info(
            "Starting multi-room booking",
            extra={
                "session_id": session.session_id,
                "groups": len(planned),
                "rooms": len(dto.rooms),
                "max_concurrency": self._max_concurrency,
            },
        )

        semaphore = asyncio.Semaphore(self._max_concurrency)

        async def run_group(group_dto: CreateBookingDTO) -> BookingResultDTO | Exception:
            async with semaphore:
                try:
                    return await self._create_booking.execute(group_dto)
                except Exception as exc:
                    return exc

        outcomes = await asyncio.gather(
            *(run_group(group_dto) for _, _, group_dto in planned)
        )

        result = MultiRoomResultDTO(session=session)
        for (room_type, order_id, group_dto), outcome in zip(planned, outcomes):
            if isinstance(outcome, Exception):
                message = outcome.message if isinstance(outcome, DomainError) else str(outcome)
                code = outcome.code if isinstance(outcome, DomainError) else "INTERNAL_ERROR"
                self._logger.error(
                    "Room group booking failed",
                    extra={
                        "session_id": session.session_id,
                        "room_type": room_type,
                        "order_id": order_id,
                        "error": message,
                    },
                    exc_info=not isinstance(outcome, DomainError),
                )
                result.failed.append(
                    FailedGroupDTO(
                        room_type=room_type,
                        order_id=order_id,
                        room_count=group_dto.room_count,
                        error=message or outcome.__class__.__name__,
                        error_code=code,
                    )
                )
                session.record(
                    SubBooking(
                        room_type=room_type,
                        order_id=order_id,
                        room_count=group_dto.room_count,
                        outcome=SubBookingOutcome.FAILED,
                        error=message,
                    )
                )
            else:
                result.completed.append(outcome)
                session.record(
                    SubBooking(
                        room_type=room_type,
                        order_id=order_id,
                        room_count=group_dto.room_count,
                        outcome=SubBookingOutcome.COMPLETED,
                        reservation_id=outcome.reservation.id,
                    )
                )

        try:
            await self._session_repo.save(session)
        except Exception:
            # Las sub-reservas ya guardadas conservan session_id
            self._logger.error(
                "Failed to save booking session aggregate",
                extra={"session_id": session.session_id},
                exc_info=True,
            )

        self._logger.info(
            "Multi-room booking finished",
            extra={
                "session_id": session.session_id,
                "completed": len(result.completed),
                "failed": len(result.failed),
            },
        )
        return result

    @staticmethod
    def _group_dto(
        base: CreateBookingDTO,
        session: BookingSession,
        order_id: str,
        room_type: str,
        selections: list[RoomSelectionDTO],
    ) -> CreateBookingDTO:
        first = selections[0]
        total = sum((_selection_price(room) for room in selections), Decimal("0"))
        rate = replace(first.selected_rate, room_name=first.selected_rate.room_name or room_type)
        return replace(
            base,
            selected_rate=rate,
            room_type=room_type,
            room_count=len(selections),
            total_price=total,
            currency=first.selected_rate.currency or base.currency,
            session_id=session.session_id,
            order_id=order_id,
        )
