import logging
from typing import Sequence

from app.application.dtos.booking_dto import (
    CancellationItemDTO,
    RequesterDTO,
    SessionCancellationDTO,
    SessionSummaryDTO,
    SessionViewDTO,
)
from app.application.interfaces.booking_notifier import BookingNotifier
from app.application.interfaces.booking_session_repo import BookingSessionRepo
from app.application.interfaces.clock import Clock
from app.application.interfaces.reservation_repo import ReservationRepo
from app.domain.entities.booking_session import BookingSession
from app.domain.entities.reservation import Reservation
from app.domain.errors import (
    AuthenticationRequiredError,
    BookingSessionNotFoundError,
    DomainError,
    NotAuthorizedError,
)
from app.domain.value_objects.money import Money

MIXED_CURRENCY = "MIXED"


def summarize(reservations: Sequence[Reservation], default_currency: str = "USD") -> SessionSummaryDTO:
    """
    Resumen agregado de las reservas de una sesión.

    Si las reservas tienen monedas distintas no se suman: la moneda
    queda como 'MIXED' y el total como None.
    """
    currencies = {r.currency for r in reservations}
    total_rooms = sum(r.number_of_rooms for r in reservations)
    all_confirmed = bool(reservations) and all(r.is_confirmed for r in reservations)

    if len(currencies) > 1:
        return SessionSummaryDTO(
            total_rooms=total_rooms,
            total_price=None,
            currency=MIXED_CURRENCY,
            all_confirmed=all_confirmed,
        )

    currency = currencies.pop() if currencies else default_currency
    total = Money.total_of([r.price for r in reservations], currency_code=currency)
    return SessionSummaryDTO(
        total_rooms=total_rooms,
        total_price=total.amount,
        currency=currency,
        all_confirmed=all_confirmed,
    )


async def _load_session(
    session_id: str,
    requester: RequesterDTO,
    reservation_repo: ReservationRepo,
    session_repo: BookingSessionRepo,
) -> tuple[list[Reservation], BookingSession | None]:
    if not requester.is_authenticated:
        raise AuthenticationRequiredError()

    reservations = list(await reservation_repo.list_by_session(session_id))
    session = await session_repo.get(session_id)
    if not reservations and session is None:
        raise BookingSessionNotFoundError(session_id)

    if requester.is_admin:
        return reservations, session
    owners = {str(r.user_id) for r in reservations if r.user_id is not None}
    if session is not None and session.user_id is not None:
        owners.add(str(session.user_id))
    if str(requester.user_id) not in owners:
        raise NotAuthorizedError("Not authorized to access this booking session")
    return reservations, session


class GetBookingSessionUseCase:
    """Lectura de una sesión multi-habitación. No modifica nada."""

    def __init__(
        self,
        reservation_repo: ReservationRepo,
        session_repo: BookingSessionRepo,
        default_currency: str = "USD",
    ) -> None:
        self._reservation_repo = reservation_repo
        self._session_repo = session_repo
        self._default_currency = default_currency

    async def execute(self, session_id: str, requester: RequesterDTO) -> SessionViewDTO:
        reservations, session = await _load_session(
            session_id, requester, self._reservation_repo, self._session_repo
        )
        return SessionViewDTO(
            session_id=session_id,
            reservations=reservations,
            summary=summarize(reservations, self._default_currency),
            session=session,
        )


class CancelBookingSessionUseCase:
    """
    Cancela todas las reservas de una sesión.

    Cada reserva se cancela de forma independiente: el fallo de una no
    bloquea a las demás y cada resultado se reporta por separado.
    Cancelar una reserva ya cancelada no hace nada.
    """

    def __init__(
        self,
        reservation_repo: ReservationRepo,
        session_repo: BookingSessionRepo,
        clock: Clock,
        notifier: BookingNotifier | None = None,
    ) -> None:
        self._reservation_repo = reservation_repo
        self._session_repo = session_repo
        self._clock = clock
        self._notifier = notifier
        self._logger = logging.getLogger(__name__)

    async def execute(
        self,
        session_id: str,
        requester: RequesterDTO,
        reason: str | None = None,
    ) -> SessionCancellationDTO:
        reservations, _ = await _load_session(
            session_id, requester, self._reservation_repo, self._session_repo
        )
        now = self._clock.now()
        actor = "admin" if requester.is_admin else f"user {requester.user_id}"
        note = f"[{now.isoformat()}] Cancelled as part of session {session_id} by {actor}"
        if reason:
            note = f"{note}: {reason}"

        result = SessionCancellationDTO(session_id=session_id)
        for reservation in reservations:
            result.results.append(await self._cancel_one(reservation, note))

        self._logger.info(
            "Booking session cancelled",
            extra={
                "session_id": session_id,
                "reservations": len(reservations),
                "cancelled": result.cancelled_count,
                "failed": sum(1 for r in result.results if not r.success),
            },
        )
        return result

    async def _cancel_one(self, reservation: Reservation, note: str) -> CancellationItemDTO:
        expected_lock_version = reservation.lock_version
        try:
            changed = reservation.cancel(note, at=self._clock.now())
            if not changed:
                return CancellationItemDTO(
                    reservation_id=reservation.id,
                    success=True,
                    status=reservation.status.value,
                    already_cancelled=True,
                )
            await self._reservation_repo.update(
                reservation, expected_lock_version=expected_lock_version
            )
        except Exception as exc:
            message = exc.message if isinstance(exc, DomainError) else str(exc)
            self._logger.error(
                "Failed to cancel reservation",
                extra={"reservation_id": reservation.id, "error": message},
                exc_info=not isinstance(exc, DomainError),
            )
            return CancellationItemDTO(
                reservation_id=reservation.id, success=False, error=message
            )

        if self._notifier is not None:
            try:
                await self._notifier.booking_cancelled(reservation)
            except Exception:
                self._logger.warning(
                    "Cancellation notification failed",
                    extra={"reservation_id": reservation.id},
                    exc_info=True,
                )
        return CancellationItemDTO(
            reservation_id=reservation.id,
            success=True,
            status=reservation.status.value,
        )
