from typing import Sequence

from app.domain.entities.reservation import Reservation


class ReservationRepo:
    async def create(self, reservation: Reservation) -> None:
        raise NotImplementedError

    async def get_by_id(self, reservation_id: str) -> Reservation | None:
        raise NotImplementedError

    async def list_by_user(self, user_id: str) -> Sequence[Reservation]:
        """Reservaciones del usuario, más recientes primero."""
        raise NotImplementedError

    async def list_by_session(self, session_id: str) -> Sequence[Reservation]:
        raise NotImplementedError

    async def update(
        self,
        reservation: Reservation,
        expected_lock_version: int | None = None,
    ) -> None:
        """
        Persiste estado, notas, factura y timestamps de la reservación.

        Si `expected_lock_version` se indica y no coincide con el almacenado,
        lanza OptimisticLockError.
        """
        raise NotImplementedError
