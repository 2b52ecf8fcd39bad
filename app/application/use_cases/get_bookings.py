from app.application.dtos.booking_dto import BookingDetailDTO, RequesterDTO
from app.application.interfaces.invoice_repo import InvoiceRepo
from app.application.interfaces.reservation_repo import ReservationRepo
from app.domain.errors import (
    AuthenticationRequiredError,
    NotAuthorizedError,
    ReservationNotFoundError,
)


class GetBookingUseCase:
    """Detalle de una reserva; sólo para su dueño o un administrador."""

    def __init__(self, reservation_repo: ReservationRepo, invoice_repo: InvoiceRepo) -> None:
        self._reservation_repo = reservation_repo
        self._invoice_repo = invoice_repo

    async def execute(self, reservation_id: str, requester: RequesterDTO) -> BookingDetailDTO:
        if not requester.is_authenticated:
            raise AuthenticationRequiredError()

        reservation = await self._reservation_repo.get_by_id(reservation_id)
        if reservation is None:
            raise ReservationNotFoundError(reservation_id)
        if not requester.is_admin and not reservation.is_owned_by(requester.user_id):
            raise NotAuthorizedError("Not authorized to view this booking")

        invoice = None
        if reservation.invoice_id:
            invoice = await self._invoice_repo.get_by_id(reservation.invoice_id)
        return BookingDetailDTO(reservation=reservation, invoice=invoice)


class ListUserBookingsUseCase:
    """Historial de reservas de un usuario, más recientes primero."""

    def __init__(self, reservation_repo: ReservationRepo, invoice_repo: InvoiceRepo) -> None:
        self._reservation_repo = reservation_repo
        self._invoice_repo = invoice_repo

    async def execute(self, user_id: str, requester: RequesterDTO) -> list[BookingDetailDTO]:
        if not requester.is_authenticated:
            raise AuthenticationRequiredError()
        if not requester.is_admin and str(requester.user_id) != str(user_id):
            raise NotAuthorizedError()

        details = []
        for reservation in await self._reservation_repo.list_by_user(user_id):
            invoice = None
            if reservation.invoice_id:
                invoice = await self._invoice_repo.get_by_id(reservation.invoice_id)
            details.append(BookingDetailDTO(reservation=reservation, invoice=invoice))
        return details
